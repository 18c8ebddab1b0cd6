"""Provider 包测试 fixtures"""

import pytest
from nexus.provider.config import ProviderConfig
from nexus.provider.models import ChatTurn
from pydantic import SecretStr


@pytest.fixture
def provider_config() -> ProviderConfig:
    """带测试密钥的 Provider 配置"""
    return ProviderConfig(
        api_key=SecretStr("test-key"),
        model_fast="gemini/test-flash",
        model_smart="gemini/test-pro",
        model_grounded="gemini/test-grounded",
        timeout_s=30,
    )


@pytest.fixture
def chat_history() -> list[ChatTurn]:
    """多轮对话测试数据"""
    return [
        ChatTurn(role="user", content="이번 주 일정 정리해줘"),
        ChatTurn(role="model", content="네, 일정을 정리해 드리겠습니다."),
    ]
