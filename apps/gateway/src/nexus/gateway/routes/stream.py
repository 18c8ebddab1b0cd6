"""SSE 路由

GET /api/stream/history: 订阅视频分析历史，连接时及每次追加后推送完整列表。
POST /api/stream/chat: 通用助手流式对话，推送 chunk / error 事件，最后推送 done。
"""

import asyncio
import json

import structlog
from fastapi import APIRouter, Depends, Request
from nexus.analysis.prompts import ASSISTANT_GREETING, ASSISTANT_PREAMBLE
from nexus.core.config import SSE_HEARTBEAT_INTERVAL
from nexus.core.models import DomainModel
from nexus.core.store import StoreGroup
from nexus.provider import ChatTurn, CompletionClient, ImagePayload
from pydantic import Field
from sse_starlette.sse import EventSourceResponse

from ..deps import get_completion_client, get_store_group

log = structlog.get_logger()

router = APIRouter()


class ImageInput(DomainModel):
    data: str = Field(min_length=1)
    mime_type: str = Field(default="image/jpeg")


class StreamChatRequest(DomainModel):
    history: list[ChatTurn] = Field(default_factory=list)
    message: str = Field(default="")
    model_id: str = Field(default="smart", description="alias 或完整模型 ID")
    image: ImageInput | None = None


def _snapshot_event(items) -> dict:
    return {
        "event": "history",
        "data": json.dumps([i.to_document() for i in items], ensure_ascii=False),
    }


async def history_events(history_repo, request: Request, heartbeat_s: float):
    """历史订阅事件流 -- 客户端断开后退订"""
    queue = await history_repo.subscribe()
    try:
        while not await request.is_disconnected():
            try:
                snapshot = await asyncio.wait_for(queue.get(), timeout=heartbeat_s)
                yield _snapshot_event(snapshot)
            except TimeoutError:
                # 心跳保活
                yield {"comment": "heartbeat"}
    finally:
        await history_repo.unsubscribe(queue)


@router.get("/api/stream/history")
async def stream_history(
    request: Request,
    store_group: StoreGroup = Depends(get_store_group),
):
    return EventSourceResponse(
        history_events(store_group.history_repo, request, SSE_HEARTBEAT_INTERVAL)
    )


async def chat_events(client: CompletionClient, body: StreamChatRequest):
    """流式对话事件 -- 上游失败以一个 error 事件结束，不中断 SSE 连接"""
    image = (
        ImagePayload(data=body.image.data, mime_type=body.image.mime_type)
        if body.image
        else None
    )
    chunk_count = 0
    async for chunk in client.stream_chat(
        body.history,
        body.message,
        body.model_id,
        image=image,
        system_preamble=ASSISTANT_PREAMBLE,
        acknowledgment=ASSISTANT_GREETING,
    ):
        if chunk.error is not None:
            yield {"event": "error", "data": json.dumps({"error": chunk.error}, ensure_ascii=False)}
            break
        chunk_count += 1
        yield {"event": "chunk", "data": json.dumps({"text": chunk.text}, ensure_ascii=False)}

    yield {"event": "done", "data": json.dumps({"chunkCount": chunk_count})}


@router.post("/api/stream/chat")
async def stream_chat(
    body: StreamChatRequest,
    client: CompletionClient = Depends(get_completion_client),
):
    return EventSourceResponse(chat_events(client, body))
