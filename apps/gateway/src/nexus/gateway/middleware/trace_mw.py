"""TraceMiddleware -- 实体级追踪

对 /api/tasks/{id}/... 与 /api/knowledge/{id}/... 请求绑定 entity_id，
同一任务/资源的 AI 调用、重试、过期丢弃日志可按 entity_id 串联。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# 路径段 -> 实体类型
_ENTITY_SEGMENTS = {"tasks": "task", "knowledge": "knowledge"}

# 集合级子路由，不是实体 ID
_COLLECTION_ROUTES = {"drafts"}


def extract_entity(path: str) -> tuple[str, str] | None:
    """从路径提取 (entity_kind, entity_id)，不含实体时返回 None"""
    parts = [p for p in path.split("/") if p]
    for i, part in enumerate(parts[:-1]):
        kind = _ENTITY_SEGMENTS.get(part)
        if kind is None:
            continue
        entity_id = parts[i + 1]
        if entity_id in _COLLECTION_ROUTES:
            return None
        return kind, entity_id
    return None


class TraceMiddleware(BaseHTTPMiddleware):
    """实体级追踪中间件 -- 绑定 entity_kind / entity_id"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        entity = extract_entity(request.url.path)
        if entity:
            kind, entity_id = entity
            structlog.contextvars.bind_contextvars(entity_kind=kind, entity_id=entity_id)

        return await call_next(request)
