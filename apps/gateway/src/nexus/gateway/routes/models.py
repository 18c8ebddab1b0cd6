"""模型列表路由

GET /api/models: 流式对话页可选的模型
"""

from fastapi import APIRouter, Depends
from nexus.provider import CompletionClient

from ..deps import get_completion_client

router = APIRouter()


@router.get("/api/models")
async def list_models(client: CompletionClient = Depends(get_completion_client)):
    return {
        "models": [
            {
                "id": m.id,
                "name": m.name,
                "description": m.description,
                "isPro": m.is_pro,
            }
            for m in client.registry.list_available()
        ]
    }
