"""ModelRegistry -- 语义 alias 注册表

管理语义 alias（fast / smart / grounded）-> 具体模型 ID 的映射，
以及可供用户在对话页选择的模型列表。
"""

import structlog

from .config import ProviderConfig
from .models import ModelInfo

log = structlog.get_logger()

# 已知语义 alias
KNOWN_ALIASES = ("fast", "smart", "grounded")

# 未知 alias 时的安全默认值
DEFAULT_ALIAS = "smart"


class ModelRegistry:
    """模型注册表

    启动时从 ProviderConfig 加载，运行期间不变。
    """

    def __init__(self, config: ProviderConfig) -> None:
        self._models: dict[str, str] = {
            "fast": config.model_fast,
            "smart": config.model_smart,
            "grounded": config.model_grounded,
        }
        self._available: list[ModelInfo] = [
            ModelInfo(
                id="smart",
                name="Gemini Pro",
                description="복잡한 추론과 코딩, 창의적 작업에 최적화된 모델",
                is_pro=True,
            ),
            ModelInfo(
                id="fast",
                name="Gemini Flash",
                description="빠른 응답이 필요한 일상 업무용 경량 모델",
                is_pro=False,
            ),
        ]

    def resolve(self, alias: str) -> str:
        """将语义 alias 解析为具体模型 ID

        行为规则:
            1. alias 已注册 -> 返回对应模型 ID
            2. 含 "/" 的值视为 provider 限定的模型 ID -> 直接透传
            3. 都不匹配 -> 返回 smart 对应的模型 ID，并记录 warning 日志
        """
        # 规则 1: 注册表内的语义 alias
        if alias in self._models:
            return self._models[alias]

        # 规则 2: 完整模型 ID 透传
        if "/" in alias:
            return alias

        # 规则 3: 未知 alias 降级到 smart
        log.warning("unknown_model_alias_fallback", alias=alias, fallback=DEFAULT_ALIAS)
        return self._models[DEFAULT_ALIAS]

    def list_available(self) -> list[ModelInfo]:
        """列出用户可选的对话模型"""
        return list(self._available)
