"""Nexus Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .analysis import AnalysisHistoryItem, Scene
from .base import DomainModel
from .enums import (
    RETRYABLE_STATES,
    VALID_TRANSITIONS,
    AnalysisState,
    ContentType,
    Priority,
    ResourceLevel,
    ResourceStatus,
    TaskStatus,
    Visibility,
    validate_transition,
)
from .knowledge import (
    BasicInfo,
    Chapter,
    KnowledgeResource,
    ManagementInfo,
    MetaData,
    SearchOptimization,
)
from .task import AIAnalysis, Subtask, SuggestedResource, Task, TaskPatch

__all__ = [
    "DomainModel",
    # 枚举
    "Priority",
    "TaskStatus",
    "ResourceLevel",
    "ContentType",
    "ResourceStatus",
    "Visibility",
    "AnalysisState",
    # 状态机
    "VALID_TRANSITIONS",
    "RETRYABLE_STATES",
    "validate_transition",
    # Task
    "Task",
    "TaskPatch",
    "Subtask",
    "AIAnalysis",
    "SuggestedResource",
    # Knowledge
    "KnowledgeResource",
    "BasicInfo",
    "MetaData",
    "Chapter",
    "SearchOptimization",
    "ManagementInfo",
    # Video analysis
    "AnalysisHistoryItem",
    "Scene",
]
