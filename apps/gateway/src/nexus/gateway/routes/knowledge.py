"""知识库路由

GET /api/knowledge: 资源列表（最新在前）
POST /api/knowledge: 分析 URL 并新建资源（分析失败时存储 fallback 记录）
GET/DELETE /api/knowledge/{resource_id}
POST /api/knowledge/{resource_id}/retry: 重新分析
"""

from fastapi import APIRouter, Depends
from nexus.core.models import DomainModel
from pydantic import Field
from starlette.responses import JSONResponse

from ..deps import get_knowledge_service
from ..services.knowledge_service import KnowledgeService

router = APIRouter()


class AddResourceRequest(DomainModel):
    url: str = Field(min_length=1, description="待分析的 URL")


@router.get("/api/knowledge")
async def list_resources(service: KnowledgeService = Depends(get_knowledge_service)):
    resources = await service.list_resources()
    return {"resources": [r.to_document() for r in resources]}


@router.post("/api/knowledge")
async def add_resource(
    body: AddResourceRequest,
    service: KnowledgeService = Depends(get_knowledge_service),
):
    """分析 URL 并新建资源

    - 分析成功：201，status=active
    - 模型声明失败/输出非法：201，status=draft + analysisState=failed
    - 上游调用失败：502 MODEL_UNAVAILABLE，不落库
    """
    resource = await service.add_from_url(body.url.strip())
    return JSONResponse(status_code=201, content=resource.to_document())


@router.get("/api/knowledge/{resource_id}")
async def get_resource(
    resource_id: str,
    service: KnowledgeService = Depends(get_knowledge_service),
):
    resource = await service.get_resource(resource_id)
    return resource.to_document()


@router.delete("/api/knowledge/{resource_id}", status_code=204)
async def delete_resource(
    resource_id: str,
    service: KnowledgeService = Depends(get_knowledge_service),
):
    await service.delete_resource(resource_id)


@router.post("/api/knowledge/{resource_id}/retry")
async def retry_resource(
    resource_id: str,
    service: KnowledgeService = Depends(get_knowledge_service),
):
    """重新分析（id 与 originalFileUrl 不变）"""
    resource = await service.retry(resource_id)
    return resource.to_document()
