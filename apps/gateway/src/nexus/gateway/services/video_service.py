"""VideoAnalysisService -- 视频分析（URL / 上传文件）+ 快速摘要 + 历史

URL 路径复用知识资源分析提示词，章节转换为场景；
文件路径先本地抽帧，再把帧序列作为内联图片交给模型。
分析结果追加到 append-only 历史，订阅者随即收到完整列表。
"""

import asyncio
from collections.abc import Sequence
from pathlib import Path

import structlog
from nexus.analysis.contracts import ResourceAnalysisPayload, VideoAnalysisPayload
from nexus.analysis.exceptions import FrameExtractionError
from nexus.analysis.frames import extract_frames
from nexus.analysis.mappers import to_history_item_from_frames, to_history_item_from_resource
from nexus.analysis.normalizer import normalize
from nexus.analysis.prompts import (
    build_quick_summary_prompt,
    build_resource_analysis_prompt,
    build_video_frames_prompt,
    extract_youtube_video_id,
)
from nexus.core.models import AnalysisHistoryItem
from nexus.core.store import StoreGroup
from nexus.provider import CompletionClient, ImagePayload

log = structlog.get_logger()


class VideoAnalysisService:
    """视频分析业务服务"""

    def __init__(self, store_group: StoreGroup, client: CompletionClient) -> None:
        self._history = store_group.history_repo
        self._client = client

    async def history(self) -> list[AnalysisHistoryItem]:
        """分析历史，analyzed_at 倒序"""
        return await self._history.list_all()

    async def analyze_url(self, url: str) -> AnalysisHistoryItem:
        """分析视频 URL

        Raises:
            ModelUnavailable / MalformedResponse / AnalysisFailed
        """
        prompt = build_resource_analysis_prompt(url, extract_youtube_video_id(url))
        result = await self._client.complete(prompt, "grounded", grounding=True)
        payload = normalize(result.content, ResourceAnalysisPayload)
        return await self._history.append(to_history_item_from_resource(payload, url))

    async def analyze_frames(
        self,
        frames: Sequence[ImagePayload],
        duration: float,
        source: str,
    ) -> AnalysisHistoryItem:
        """分析已抽取的帧序列

        Raises:
            FrameExtractionError: 帧序列为空
            ModelUnavailable / MalformedResponse / AnalysisFailed
        """
        if not frames:
            raise FrameExtractionError(source, "帧序列为空")

        result = await self._client.complete(
            build_video_frames_prompt(len(frames), duration),
            "smart",
            images=frames,
            json_mode=True,
        )
        payload = normalize(result.content, VideoAnalysisPayload)
        return await self._history.append(to_history_item_from_frames(payload, source))

    async def analyze_video_file(
        self,
        video_path: str | Path,
        source: str | None = None,
    ) -> AnalysisHistoryItem:
        """上传视频：本地抽帧后分析，source 缺省为文件名"""
        frames, duration = await asyncio.to_thread(extract_frames, video_path)
        return await self.analyze_frames(frames, duration, source or Path(video_path).name)

    async def quick_summary(self, url: str) -> str:
        """서론/본론/결론 三段 markdown 摘要（不写入历史）"""
        result = await self._client.complete(
            build_quick_summary_prompt(url),
            "fast",
            grounding=True,
        )
        return result.content.strip()
