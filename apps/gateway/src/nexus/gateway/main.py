"""FastAPI 应用主文件

app 创建 + lifespan 管理：存储初始化/关闭 + CompletionClient 初始化 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from nexus.core.config import get_db_path, get_store_backend
from nexus.core.store import create_store_group
from nexus.provider import CompletionClient, load_provider_config

from .errors import register_exception_handlers
from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, knowledge, models, stream, tasks, video
from .services.request_guard import RequestGuard

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化存储和模型客户端，关闭时释放连接"""
    backend = get_store_backend()
    db_path = get_db_path() if backend == "sqlite" else None
    store_group = await create_store_group(backend, db_path)
    app.state.store_group = store_group

    provider_config = load_provider_config()
    app.state.provider_config = provider_config
    app.state.completion_client = CompletionClient(provider_config)
    app.state.request_guard = RequestGuard()

    if not provider_config.api_key.get_secret_value():
        log.warning("gemini_api_key_missing", env_var="GEMINI_API_KEY")
    log.info(
        "completion_client_initialized",
        model_fast=provider_config.model_fast,
        model_smart=provider_config.model_smart,
        model_grounded=provider_config.model_grounded,
        timeout_s=provider_config.timeout_s,
        safety_threshold=provider_config.safety_threshold,
    )

    yield

    await store_group.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="Nexus Gateway",
        version="0.1.0",
        description="Nexus 任务看板 / 知识库 / 视频分析 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging，Logging 在最外层）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    register_exception_handlers(app)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(knowledge.router, tags=["knowledge"])
    app.include_router(video.router, tags=["video"])
    app.include_router(stream.router, tags=["stream"])
    app.include_router(models.router, tags=["models"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
