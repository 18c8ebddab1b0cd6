"""枚举定义 -- 任务看板 + 知识库领域

包含 Priority、TaskStatus、ResourceLevel、ContentType、ResourceStatus、
Visibility、AnalysisState 枚举，以及知识资源分析生命周期的
VALID_TRANSITIONS 合法流转映射。
"""

from enum import StrEnum


class Priority(StrEnum):
    """任务优先级"""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class TaskStatus(StrEnum):
    """看板工作流阶段"""

    REQUESTED = "REQUESTED"
    CHECKED = "CHECKED"
    WIP = "WIP"
    SENT = "SENT"
    FEEDBACK = "FEEDBACK"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


class ResourceLevel(StrEnum):
    """知识资源难度"""

    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class ContentType(StrEnum):
    """知识资源内容类型"""

    VIDEO = "video"
    ARTICLE = "article"
    DOCUMENT = "document"
    OTHER = "other"


class ResourceStatus(StrEnum):
    """知识资源管理状态"""

    ACTIVE = "active"
    DRAFT = "draft"
    ARCHIVED = "archived"


class Visibility(StrEnum):
    """知识资源可见范围"""

    PUBLIC = "public"
    TEAM = "team"
    PRIVATE = "private"


class AnalysisState(StrEnum):
    """AI 分析结果标记 -- 由 mapper 权威设置，下游不再从文本推断"""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


# 知识资源分析生命周期
# draft --(分析成功)--> active
# draft --(分析失败)--> draft（保留 fallback 内容，可重试）
# active|draft --(用户重试)--> draft
# archived 仅是 UI 过滤概念，core 不提供任何流出路径
VALID_TRANSITIONS: dict[ResourceStatus, set[ResourceStatus]] = {
    ResourceStatus.DRAFT: {ResourceStatus.ACTIVE, ResourceStatus.DRAFT},
    ResourceStatus.ACTIVE: {ResourceStatus.DRAFT},
    ResourceStatus.ARCHIVED: set(),
}

# 允许用户触发重试的状态
RETRYABLE_STATES: set[ResourceStatus] = {
    ResourceStatus.ACTIVE,
    ResourceStatus.DRAFT,
}


def validate_transition(from_status: ResourceStatus, to_status: ResourceStatus) -> bool:
    """验证知识资源状态流转是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_status, set())
    return to_status in allowed
