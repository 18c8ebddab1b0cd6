"""Nexus Analysis -- 提示词构建 + 响应规范化 + 领域映射

packages/analysis 的公开接口导出。
"""

from .contracts import (
    DraftList,
    ResourceAnalysisPayload,
    SubtaskList,
    TaskAnalysisPayload,
    VideoAnalysisPayload,
)
from .exceptions import (
    AnalysisFailed,
    FrameExtractionError,
    MalformedResponse,
    NormalizationError,
    SchemaMismatch,
)
from .frames import extract_frames
from .mappers import (
    to_ai_analysis,
    to_history_item_from_frames,
    to_history_item_from_resource,
    to_knowledge_resource,
    to_subtasks,
    to_task_patches,
)
from .normalizer import (
    ANALYSIS_FAILED_TITLE,
    PARSE_FAILED_SUMMARY,
    build_fallback_resource,
    normalize,
    parse_time_string,
)

__all__ = [
    # 契约
    "DraftList",
    "TaskAnalysisPayload",
    "SubtaskList",
    "ResourceAnalysisPayload",
    "VideoAnalysisPayload",
    # 异常
    "NormalizationError",
    "MalformedResponse",
    "SchemaMismatch",
    "AnalysisFailed",
    "FrameExtractionError",
    # 规范化
    "normalize",
    "parse_time_string",
    "build_fallback_resource",
    "ANALYSIS_FAILED_TITLE",
    "PARSE_FAILED_SUMMARY",
    # 映射
    "to_task_patches",
    "to_ai_analysis",
    "to_subtasks",
    "to_knowledge_resource",
    "to_history_item_from_resource",
    "to_history_item_from_frames",
    # 抽帧
    "extract_frames",
]
