"""apps/gateway 测试配置 -- FastAPI app（绕过 lifespan）+ httpx AsyncClient"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from nexus.gateway.services.request_guard import RequestGuard
from nexus.provider import ProviderConfig
from pydantic import SecretStr
from sse_starlette.sse import AppStatus


@pytest.fixture(autouse=True)
def reset_sse_app_status(monkeypatch):
    """sse-starlette 的退出事件绑定在首个事件循环上，每个测试重置"""
    monkeypatch.setattr(AppStatus, "should_exit_event", None, raising=False)


@pytest.fixture
def guard() -> RequestGuard:
    return RequestGuard()


@pytest_asyncio.fixture
async def app(memory_store_group, fake_client, guard):
    """创建测试用 FastAPI app 实例，手动注入共享实例"""
    from nexus.gateway.main import create_app

    application = create_app()
    application.state.store_group = memory_store_group
    application.state.completion_client = fake_client
    application.state.request_guard = guard
    application.state.provider_config = ProviderConfig(api_key=SecretStr("test-key"))
    yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
