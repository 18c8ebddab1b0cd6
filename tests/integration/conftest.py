"""集成测试共享 fixture -- 真实 CompletionClient（Mock acompletion）+ SQLite 存储"""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from nexus.core.store import create_store_group
from nexus.gateway.services.request_guard import RequestGuard
from nexus.provider import CompletionClient, ProviderConfig
from pydantic import SecretStr
from sse_starlette.sse import AppStatus


@pytest.fixture(autouse=True)
def reset_sse_app_status(monkeypatch):
    monkeypatch.setattr(AppStatus, "should_exit_event", None, raising=False)


@pytest.fixture
def make_litellm_response():
    """构造模拟的 litellm acompletion 响应"""

    def factory(content: str, model: str = "gemini/it-pro"):
        resp = MagicMock()
        resp.choices = [MagicMock()]
        resp.choices[0].message.content = content
        resp.usage = MagicMock()
        resp.usage.prompt_tokens = 10
        resp.usage.completion_tokens = 5
        resp.usage.total_tokens = 15
        resp.model = model
        return resp

    return factory


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path):
    """集成测试用 FastAPI app"""
    from nexus.gateway.main import create_app

    app = create_app()

    store_group = await create_store_group("sqlite", str(tmp_path / "test.db"))
    provider_config = ProviderConfig(
        api_key=SecretStr("test-key"),
        model_fast="gemini/it-flash",
        model_smart="gemini/it-pro",
        model_grounded="gemini/it-grounded",
    )
    app.state.store_group = store_group
    app.state.provider_config = provider_config
    app.state.completion_client = CompletionClient(provider_config)
    app.state.request_guard = RequestGuard()

    yield app

    await store_group.close()


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
