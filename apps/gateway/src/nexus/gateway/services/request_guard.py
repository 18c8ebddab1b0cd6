"""RequestGuard -- 按实体的在途请求令牌（过期响应防护）

同一实体同一动作每次发起 AI 请求都会换发新令牌；
响应返回时令牌已不是最新的，说明存在更晚发起的请求，该响应应丢弃而不写回。
不取消在途的网络请求，只放弃对其结果的关注。
"""

import structlog
from ulid import ULID

log = structlog.get_logger()


class RequestGuard:
    """实体级在途请求令牌表"""

    def __init__(self) -> None:
        # (entity_id, action) -> 最新令牌
        self._tokens: dict[tuple[str, str], str] = {}

    def begin(self, entity_id: str, action: str) -> str:
        """登记新请求，返回令牌（覆盖该实体该动作的旧令牌）"""
        token = str(ULID())
        self._tokens[(entity_id, action)] = token
        return token

    def is_current(self, entity_id: str, action: str, token: str) -> bool:
        return self._tokens.get((entity_id, action)) == token

    def finish(self, entity_id: str, action: str, token: str) -> bool:
        """结束请求

        Returns:
            True 表示令牌仍是最新，结果可以写回；False 表示已被更晚的请求取代
        """
        key = (entity_id, action)
        if self._tokens.get(key) != token:
            log.info(
                "stale_response_discarded",
                entity_id=entity_id,
                action=action,
            )
            return False
        del self._tokens[key]
        return True

    def in_flight(self) -> int:
        """在途请求数"""
        return len(self._tokens)
