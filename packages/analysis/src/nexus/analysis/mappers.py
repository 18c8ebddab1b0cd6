"""Domain Mappers -- 契约实例 -> 持久化实体

mapper 只组装实体，不分配仓库 ID（知识资源重试时沿用调用方给出的 ID）。
成功/失败标记（status、analysis_state）由这里权威设置。
"""

import time
from datetime import UTC, datetime

from nexus.core.models import (
    AIAnalysis,
    AnalysisHistoryItem,
    AnalysisState,
    BasicInfo,
    Chapter,
    KnowledgeResource,
    ManagementInfo,
    MetaData,
    ResourceStatus,
    Scene,
    SearchOptimization,
    Subtask,
    SuggestedResource,
    TaskPatch,
)

from .contracts import (
    ChapterItem,
    DraftList,
    ResourceAnalysisPayload,
    SubtaskList,
    TaskAnalysisPayload,
    VideoAnalysisPayload,
)
from .normalizer import parse_time_string

# 视频分析缺少标题时的占位
UNTITLED = "제목 없음"


def to_task_patches(drafts: DraftList) -> list[TaskPatch]:
    """草稿契约 -> 任务补丁列表（不带 ID）"""
    return [
        TaskPatch(
            title=item.title,
            description=item.description,
            priority=item.priority,
            product=item.product,
            type=item.type,
            style_tag=item.style_tag,
        )
        for item in drafts.root
    ]


def to_ai_analysis(payload: TaskAnalysisPayload) -> AIAnalysis:
    """任务分析契约 -> AIAnalysis（整体替换，不与旧结果合并）"""
    return AIAnalysis(
        strategy=payload.strategy,
        suggested_resources=[
            SuggestedResource(title=link.title or link.url, url=link.url)
            for link in payload.suggested_resources
        ],
        last_updated=datetime.now(UTC),
    )


def to_subtasks(payload: SubtaskList, seed: str | int | None = None) -> list[Subtask]:
    """子任务契约 -> Subtask 列表

    ID 形如 sub_<seed>_<index>，seed 缺省为当前毫秒时间戳；
    同一 payload 用不同 seed 映射两次，得到标题与顺序相同、ID 互不相同的两组子任务。
    """
    if seed is None:
        seed = time.time_ns() // 1_000_000
    return [
        Subtask(id=f"sub_{seed}_{index}", title=item.title, completed=False)
        for index, item in enumerate(payload.root)
    ]


def _chapter_timestamp(chapter: ChapterItem) -> str:
    if chapter.timestamp:
        return chapter.timestamp
    start, end = chapter.time_bounds()
    if start and end:
        return f"{start}-{end}"
    return start or ""


def _parse_uploaded_at(value: str | None, fallback: datetime) -> datetime:
    if not value:
        return fallback
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return fallback
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def to_knowledge_resource(
    payload: ResourceAnalysisPayload,
    url: str,
    resource_id: str = "",
) -> KnowledgeResource:
    """资源分析契约 -> KnowledgeResource

    originalFileUrl 始终使用输入 URL，忽略模型回显的值；
    status=active、analysis_state=succeeded。
    """
    now = datetime.now(UTC)
    basic = payload.basic_info
    meta = payload.metadata
    search = payload.search_optimization
    management = payload.management_info

    return KnowledgeResource(
        id=resource_id,
        basic_info=BasicInfo(
            title=basic.title or url,
            summary=basic.summary,
            level=basic.level,
            tags=basic.tags,
            author=basic.author,
            content_type=basic.content_type,
        ),
        metadata=MetaData(
            duration=meta.duration,
            language=meta.language,
            category=meta.category,
            sub_category=meta.sub_category,
            uploaded_at=_parse_uploaded_at(meta.uploaded_at, now),
            department=meta.department,
        ),
        search_optimization=SearchOptimization(
            keywords=search.keywords or [],
            searchable_text=search.searchable_text,
            # 章节是否应省略（短视频）由模型自行判断，这里不复核
            chapters=[
                Chapter(
                    title=chapter.title,
                    timestamp=_chapter_timestamp(chapter),
                    summary=chapter.summary,
                )
                for chapter in search.chapters
            ],
        ),
        management_info=ManagementInfo(
            status=ResourceStatus.ACTIVE,
            visibility=management.visibility,
            original_file_url=url,
            thumbnail_url=management.thumbnail_url,
            file_size=management.file_size,
            last_updated=now,
            analysis_state=AnalysisState.SUCCEEDED,
        ),
    )


def to_history_item_from_resource(
    payload: ResourceAnalysisPayload,
    source: str,
) -> AnalysisHistoryItem:
    """URL 视频分析：资源分析契约 -> AnalysisHistoryItem（章节 -> 场景）"""
    search = payload.search_optimization
    scenes = []
    for chapter in search.chapters:
        start, end = chapter.time_bounds()
        scenes.append(
            Scene(
                title=chapter.title,
                summary=chapter.summary,
                start_time=parse_time_string(start),
                end_time=parse_time_string(end),
            )
        )

    return AnalysisHistoryItem(
        source=source,
        title=payload.basic_info.title or UNTITLED,
        overall_summary=payload.basic_info.summary,
        scenes=scenes,
        # 仅在模型未给出 keywords 时回落到 tags，空列表照原样保留
        keywords=search.keywords if search.keywords is not None else payload.basic_info.tags,
        analyzed_at=datetime.now(UTC),
    )


def to_history_item_from_frames(
    payload: VideoAnalysisPayload,
    source: str,
) -> AnalysisHistoryItem:
    """上传视频分析：帧分析契约 -> AnalysisHistoryItem（标题为文件名）"""
    return AnalysisHistoryItem(
        source=source,
        title=source or UNTITLED,
        overall_summary=payload.overall_summary,
        scenes=[
            Scene(
                title=scene.title,
                summary=scene.summary,
                start_time=scene.start_time,
                end_time=scene.end_time,
            )
            for scene in payload.scenes
        ],
        keywords=payload.keywords,
        analyzed_at=datetime.now(UTC),
    )
