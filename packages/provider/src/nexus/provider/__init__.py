"""Nexus Provider -- 生成式 AI 调用抽象层

packages/provider 的公开接口导出。
"""

# 核心组件
from .client import CompletionClient

# 配置
from .config import ProviderConfig, load_provider_config

# 异常
from .exceptions import ModelUnavailable, ProviderError

# 数据模型
from .models import (
    ChatTurn,
    ImagePayload,
    ModelCallResult,
    ModelInfo,
    StreamChunk,
    TokenUsage,
)
from .registry import ModelRegistry

__all__ = [
    "ChatTurn",
    "ImagePayload",
    "ModelCallResult",
    "ModelInfo",
    "StreamChunk",
    "TokenUsage",
    "CompletionClient",
    "ModelRegistry",
    "ProviderConfig",
    "load_provider_config",
    "ProviderError",
    "ModelUnavailable",
]
