"""模型输出契约 -- 每个提示词模板一个校验模型

模型输出 camelCase 键名，Python 侧以 snake_case 访问。
宽松处理 null 与类型偏差（字段强制转换见 normalizer），
结构性缺失（必填字段、草稿数量）则校验失败。
"""

from typing import Any, ClassVar

from nexus.core.models import ContentType, Priority, ResourceLevel, Visibility
from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .normalizer import (
    coerce_content_type,
    coerce_level,
    coerce_priority,
    coerce_seconds,
    coerce_visibility,
)


def _to_text(value: Any) -> str:
    return "" if value is None else str(value)


def _to_optional_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _to_text_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list | tuple):
        raise ValueError(f"expected a list of strings, got {type(value).__name__}")
    return [str(item) for item in value if item is not None]


class ContractModel(BaseModel):
    """契约基类 -- camelCase 别名，忽略多余字段"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ============================================================
# 任务草稿
# ============================================================


class DraftItem(ContractModel):
    title: str = Field(min_length=1)
    description: str = ""
    priority: Priority = Priority.MEDIUM
    product: str = ""
    type: str = ""
    style_tag: str | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, v: Any) -> Priority:
        return coerce_priority(v)

    @field_validator("description", "product", "type", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _to_text(v)

    @field_validator("style_tag", mode="before")
    @classmethod
    def _style_tag(cls, v: Any) -> str | None:
        return _to_optional_text(v)


class DraftList(RootModel[list[DraftItem]]):
    """恰好 3 个草稿（표준 / 상세 / 간결）"""

    wrapper_key: ClassVar[str] = "drafts"

    root: list[DraftItem] = Field(min_length=3, max_length=3)


# ============================================================
# 任务分析
# ============================================================


class ResourceLink(ContractModel):
    title: str = ""
    url: str = Field(min_length=1)

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v: Any) -> str:
        return _to_text(v)


class TaskAnalysisPayload(ContractModel):
    strategy: str = Field(min_length=1)
    suggested_resources: list[ResourceLink] = Field(default_factory=list)

    @field_validator("suggested_resources", mode="before")
    @classmethod
    def _resources(cls, v: Any) -> Any:
        return [] if v is None else v


# ============================================================
# 子任务
# ============================================================


class SubtaskItem(ContractModel):
    title: str = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _bare_string(cls, data: Any) -> Any:
        # 模型偶尔直接返回字符串数组
        if isinstance(data, str):
            return {"title": data}
        return data


class SubtaskList(RootModel[list[SubtaskItem]]):
    wrapper_key: ClassVar[str] = "subtasks"

    root: list[SubtaskItem]


# ============================================================
# 知识资源分析
# ============================================================


class ResourceBasicInfo(ContractModel):
    title: str = ""
    summary: str = ""
    level: ResourceLevel = ResourceLevel.BEGINNER
    tags: list[str] = Field(default_factory=list)
    author: str | None = None
    content_type: ContentType = ContentType.ARTICLE

    @field_validator("title", "summary", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _to_text(v)

    @field_validator("level", mode="before")
    @classmethod
    def _level(cls, v: Any) -> ResourceLevel:
        return coerce_level(v)

    @field_validator("content_type", mode="before")
    @classmethod
    def _content_type(cls, v: Any) -> ContentType:
        return coerce_content_type(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> list[str]:
        return _to_text_list(v)

    @field_validator("author", mode="before")
    @classmethod
    def _author(cls, v: Any) -> str | None:
        return _to_optional_text(v)


class ResourceMetadata(ContractModel):
    duration: int | None = None
    language: str | None = None
    category: str | None = None
    sub_category: str | None = None
    uploaded_at: str | None = None
    department: str | None = None

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, v: Any) -> int | None:
        if v is None or v == "":
            return None
        return coerce_seconds(v)

    @field_validator(
        "language", "category", "sub_category", "uploaded_at", "department", mode="before"
    )
    @classmethod
    def _optional_text(cls, v: Any) -> str | None:
        return _to_optional_text(v)


class ChapterItem(ContractModel):
    """章节 -- 模型可能给出 startTime/endTime，也可能给出 "MM:SS-MM:SS" timestamp"""

    title: str = ""
    summary: str = ""
    timestamp: str = ""
    start_time: str | None = None
    end_time: str | None = None

    @field_validator("title", "summary", "timestamp", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _to_text(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _time(cls, v: Any) -> str | None:
        return _to_optional_text(v)

    def time_bounds(self) -> tuple[str | None, str | None]:
        """起止时间字符串，优先 startTime/endTime，其次拆分 timestamp"""
        if self.start_time is not None or self.end_time is not None:
            return self.start_time, self.end_time
        if "-" in self.timestamp:
            start, _, end = self.timestamp.partition("-")
            return start.strip(), end.strip()
        return (self.timestamp or None), None


class ResourceSearchOptimization(ContractModel):
    # None 表示模型未给出，与空列表区分
    keywords: list[str] | None = None
    searchable_text: str | None = None
    chapters: list[ChapterItem] = Field(default_factory=list)

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords(cls, v: Any) -> list[str] | None:
        return None if v is None else _to_text_list(v)

    @field_validator("chapters", mode="before")
    @classmethod
    def _chapters(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("searchable_text", mode="before")
    @classmethod
    def _searchable_text(cls, v: Any) -> str | None:
        return _to_optional_text(v)


class ResourceManagementInfo(ContractModel):
    """模型回显的管理信息 -- status / originalFileUrl 由 mapper 权威覆盖"""

    visibility: Visibility = Visibility.TEAM
    thumbnail_url: str | None = None
    file_size: int | None = Field(default=None, ge=0)

    @field_validator("visibility", mode="before")
    @classmethod
    def _visibility(cls, v: Any) -> Visibility:
        return coerce_visibility(v)

    @field_validator("thumbnail_url", mode="before")
    @classmethod
    def _thumbnail(cls, v: Any) -> str | None:
        return _to_optional_text(v)

    @field_validator("file_size", mode="before")
    @classmethod
    def _file_size(cls, v: Any) -> int | None:
        if v is None or v == "":
            return None
        return coerce_seconds(v)


class ResourceAnalysisPayload(ContractModel):
    basic_info: ResourceBasicInfo
    metadata: ResourceMetadata = Field(default_factory=ResourceMetadata)
    search_optimization: ResourceSearchOptimization = Field(
        default_factory=ResourceSearchOptimization
    )
    management_info: ResourceManagementInfo = Field(default_factory=ResourceManagementInfo)

    @field_validator("metadata", "search_optimization", "management_info", mode="before")
    @classmethod
    def _optional_section(cls, v: Any) -> Any:
        return {} if v is None else v


# ============================================================
# 视频帧分析
# ============================================================


class SceneItem(ContractModel):
    title: str = ""
    summary: str = ""
    start_time: int = 0
    end_time: int = 0

    @field_validator("title", "summary", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _to_text(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _seconds(cls, v: Any) -> int:
        return coerce_seconds(v)


class VideoAnalysisPayload(ContractModel):
    overall_summary: str = Field(min_length=1)
    scenes: list[SceneItem] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)

    @field_validator("scenes", mode="before")
    @classmethod
    def _scenes(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords(cls, v: Any) -> list[str]:
        return _to_text_list(v)
