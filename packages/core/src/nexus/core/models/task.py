"""Task Domain Model -- 看板任务 + 子任务 + AI 分析

Task 的 created_at/updated_at 只由 TaskRepository 在 create/update 时写入，
调用方传入的值会被覆盖。
"""

from datetime import datetime

from pydantic import Field

from .base import DomainModel
from .enums import Priority, TaskStatus


class Subtask(DomainModel):
    """子任务（检查项）-- 归属于父 Task，无独立生命周期"""

    id: str = Field(description="子任务 ID")
    title: str = Field(description="子任务标题")
    completed: bool = Field(default=False, description="是否完成")


class SuggestedResource(DomainModel):
    """AI 推荐的外部学习资料"""

    title: str = Field(description="资料标题")
    url: str = Field(description="资料链接")


class AIAnalysis(DomainModel):
    """AI 生成的执行策略 -- 重新生成时整体替换，不做合并"""

    strategy: str = Field(description="markdown 格式的执行策略")
    suggested_resources: list[SuggestedResource] = Field(
        default_factory=list,
        description="推荐资料列表",
    )
    last_updated: datetime = Field(description="生成时间")


class Task(DomainModel):
    """看板任务

    id 为空时由 TaskRepository.create() 分配 ULID，创建后不可变。
    """

    id: str = Field(default="", description="唯一标识")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    product: str = Field(default="", description="产品线标签")
    type: str = Field(default="", description="业务类型标签")
    priority: Priority = Field(default=Priority.MEDIUM, description="优先级")
    status: TaskStatus = Field(default=TaskStatus.REQUESTED, description="工作流阶段")
    due_date: str = Field(default="", description="截止日期（ISO 字符串）")
    assignee_id: str = Field(default="", description="负责人 ID")
    requester_id: str = Field(default="", description="请求人 ID")
    subtasks: list[Subtask] = Field(default_factory=list, description="有序子任务列表")
    ai_analysis: AIAnalysis | None = Field(default=None, description="AI 分析结果")
    created_at: datetime | None = Field(default=None, description="创建时间")
    updated_at: datetime | None = Field(default=None, description="更新时间")
    style_tag: str | None = Field(default=None, description="草稿风格标签")


class TaskPatch(DomainModel):
    """AI 起草的任务草稿（部分字段）-- 不携带 ID，应用时由仓库分配"""

    title: str = Field(description="草稿标题")
    description: str = Field(default="", description="草稿描述")
    priority: Priority = Field(default=Priority.MEDIUM, description="优先级")
    product: str = Field(default="", description="推断的产品线")
    type: str = Field(default="", description="推断的业务类型")
    style_tag: str | None = Field(default=None, description="风格标签（표준/상세/간결）")
