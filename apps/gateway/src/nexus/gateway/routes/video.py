"""视频分析路由

POST /api/video/analyze: 分析视频 URL
POST /api/video/frames: 分析前端已抽取的帧序列
POST /api/video/summary: 快速三段摘要（不写入历史）
GET /api/video/history: 分析历史（analyzedAt 倒序）
"""

from fastapi import APIRouter, Depends
from nexus.core.models import DomainModel
from nexus.provider import ImagePayload
from pydantic import Field
from starlette.responses import JSONResponse

from ..deps import get_video_service
from ..services.video_service import VideoAnalysisService

router = APIRouter()


class VideoUrlRequest(DomainModel):
    url: str = Field(min_length=1)


class FrameInput(DomainModel):
    data: str = Field(min_length=1, description="base64 图片数据")
    mime_type: str = Field(default="image/jpeg")


class FramesRequest(DomainModel):
    frames: list[FrameInput]
    duration: float = Field(ge=0, description="视频总时长（秒）")
    source: str = Field(min_length=1, description="文件名")


@router.post("/api/video/analyze")
async def analyze_url(
    body: VideoUrlRequest,
    service: VideoAnalysisService = Depends(get_video_service),
):
    item = await service.analyze_url(body.url.strip())
    return JSONResponse(status_code=201, content=item.to_document())


@router.post("/api/video/frames")
async def analyze_frames(
    body: FramesRequest,
    service: VideoAnalysisService = Depends(get_video_service),
):
    frames = [ImagePayload(data=f.data, mime_type=f.mime_type) for f in body.frames]
    item = await service.analyze_frames(frames, body.duration, body.source)
    return JSONResponse(status_code=201, content=item.to_document())


@router.post("/api/video/summary")
async def quick_summary(
    body: VideoUrlRequest,
    service: VideoAnalysisService = Depends(get_video_service),
):
    summary = await service.quick_summary(body.url.strip())
    return {"summary": summary}


@router.get("/api/video/history")
async def history(service: VideoAnalysisService = Depends(get_video_service)):
    items = await service.history()
    return {"items": [i.to_document() for i in items]}
