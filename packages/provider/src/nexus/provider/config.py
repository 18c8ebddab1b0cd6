"""ProviderConfig -- Provider 配置加载

从环境变量加载配置，不硬编码密钥。
安全过滤阈值按部署固定，不随单次调用变化。
"""

import os
from typing import Literal, get_args

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()

SafetyThreshold = Literal[
    "BLOCK_NONE",
    "BLOCK_ONLY_HIGH",
    "BLOCK_MEDIUM_AND_ABOVE",
    "BLOCK_LOW_AND_ABOVE",
]

# Gemini 安全过滤类别（每次调用都携带同一阈值）
SAFETY_CATEGORIES: tuple[str, ...] = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


class ProviderConfig(BaseModel):
    """Provider 包配置 -- 从环境变量加载

    环境变量:
        GEMINI_API_KEY: Gemini API 密钥
        NEXUS_MODEL_FAST: 轻量模型 ID
        NEXUS_MODEL_SMART: 主力模型 ID
        NEXUS_MODEL_GROUNDED: 检索增强分析模型 ID
        NEXUS_LLM_TIMEOUT_S: 调用超时（秒，默认 60）
        NEXUS_SAFETY_THRESHOLD: 安全过滤阈值（默认 BLOCK_NONE）
    """

    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Gemini API 密钥",
    )
    model_fast: str = Field(
        default="gemini/gemini-2.5-flash",
        description="轻量模型（快速摘要）",
    )
    model_smart: str = Field(
        default="gemini/gemini-2.5-pro",
        description="主力模型（起草、分析、对话）",
    )
    model_grounded: str = Field(
        default="gemini/gemini-2.5-pro",
        description="检索增强分析模型（知识资源分析）",
    )
    timeout_s: int = Field(default=60, ge=1, description="模型调用超时（秒）")
    safety_threshold: SafetyThreshold = Field(
        default="BLOCK_NONE",
        description="安全过滤阈值",
    )
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="默认采样温度")
    max_output_tokens: int = Field(default=8192, ge=1, description="默认最大输出 token 数")

    def safety_settings(self) -> list[dict[str, str]]:
        """生成 Gemini safety_settings 参数"""
        return [
            {"category": category, "threshold": self.safety_threshold}
            for category in SAFETY_CATEGORIES
        ]


def load_provider_config() -> ProviderConfig:
    """从环境变量加载 Provider 配置

    环境变量映射:
        GEMINI_API_KEY -> api_key (默认 "")
        NEXUS_MODEL_FAST -> model_fast
        NEXUS_MODEL_SMART -> model_smart
        NEXUS_MODEL_GROUNDED -> model_grounded
        NEXUS_LLM_TIMEOUT_S -> timeout_s (默认 60)
        NEXUS_SAFETY_THRESHOLD -> safety_threshold (默认 "BLOCK_NONE")

    Returns:
        ProviderConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("GEMINI_API_KEY"):
        kwargs["api_key"] = SecretStr(val)

    if val := os.environ.get("NEXUS_MODEL_FAST"):
        kwargs["model_fast"] = val

    if val := os.environ.get("NEXUS_MODEL_SMART"):
        kwargs["model_smart"] = val

    if val := os.environ.get("NEXUS_MODEL_GROUNDED"):
        kwargs["model_grounded"] = val

    if val := os.environ.get("NEXUS_SAFETY_THRESHOLD"):
        if val.upper() in get_args(SafetyThreshold):
            kwargs["safety_threshold"] = val.upper()
        else:
            log.warning(
                "invalid_safety_threshold_config",
                env_var="NEXUS_SAFETY_THRESHOLD",
                value=val,
                fallback="BLOCK_NONE",
            )

    if val := os.environ.get("NEXUS_LLM_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="NEXUS_LLM_TIMEOUT_S",
                value=val,
                fallback=60,
            )
            # 使用默认值，不阻塞启动

    return ProviderConfig(**kwargs)
