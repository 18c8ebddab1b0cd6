"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store / Client / Service 实例

共享实例通过 app.state 管理，在 lifespan 中初始化/清理；
Service 按请求构造，无自身状态。
"""

from fastapi import Depends, Request
from nexus.core.store import StoreGroup
from nexus.provider import CompletionClient

from .services.knowledge_service import KnowledgeService
from .services.request_guard import RequestGuard
from .services.task_service import TaskService
from .services.video_service import VideoAnalysisService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_completion_client(request: Request) -> CompletionClient:
    """从 app.state 获取 CompletionClient 实例"""
    return request.app.state.completion_client


def get_request_guard(request: Request) -> RequestGuard:
    """从 app.state 获取 RequestGuard 实例"""
    return request.app.state.request_guard


def get_task_service(
    store_group: StoreGroup = Depends(get_store_group),
    client: CompletionClient = Depends(get_completion_client),
    guard: RequestGuard = Depends(get_request_guard),
) -> TaskService:
    return TaskService(store_group, client, guard)


def get_knowledge_service(
    store_group: StoreGroup = Depends(get_store_group),
    client: CompletionClient = Depends(get_completion_client),
    guard: RequestGuard = Depends(get_request_guard),
) -> KnowledgeService:
    return KnowledgeService(store_group, client, guard)


def get_video_service(
    store_group: StoreGroup = Depends(get_store_group),
    client: CompletionClient = Depends(get_completion_client),
) -> VideoAnalysisService:
    return VideoAnalysisService(store_group, client)
