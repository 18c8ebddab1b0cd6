"""KnowledgeResource Domain Model -- 知识库资源

四段嵌套结构：BasicInfo / MetaData / SearchOptimization / ManagementInfo。
originalFileUrl 在重新分析时始终保留（来源不可漂移）。
"""

from datetime import datetime

from pydantic import Field

from .base import DomainModel
from .enums import AnalysisState, ContentType, ResourceLevel, ResourceStatus, Visibility


class BasicInfo(DomainModel):
    """基础信息"""

    title: str = Field(description="标题")
    summary: str = Field(default="", description="1-2 句摘要")
    level: ResourceLevel = Field(default=ResourceLevel.BEGINNER, description="难度")
    tags: list[str] = Field(default_factory=list, description="标签")
    author: str | None = Field(default=None, description="作者/讲者")
    content_type: ContentType = Field(default=ContentType.ARTICLE, description="内容类型")


class MetaData(DomainModel):
    """元数据"""

    duration: int | None = Field(default=None, ge=0, description="时长（秒）")
    language: str | None = Field(default=None, description="语言代码")
    category: str | None = Field(default=None, description="分类")
    sub_category: str | None = Field(default=None, description="子分类")
    uploaded_at: datetime | None = Field(default=None, description="上传时间")
    department: str | None = Field(default=None, description="相关部门")


class Chapter(DomainModel):
    """视频/长文的时间分段"""

    title: str = Field(description="章节标题")
    timestamp: str = Field(default="", description="时间范围字符串，如 00:00-05:30")
    summary: str = Field(default="", description="章节摘要")


class SearchOptimization(DomainModel):
    """检索优化信息"""

    keywords: list[str] = Field(default_factory=list, description="检索关键词")
    searchable_text: str | None = Field(default=None, description="可检索全文")
    chapters: list[Chapter] = Field(default_factory=list, description="有序章节列表")


class ManagementInfo(DomainModel):
    """管理信息

    analysis_state 是分析成败的权威标记，替代按标题/摘要子串判断。
    """

    status: ResourceStatus = Field(default=ResourceStatus.DRAFT, description="管理状态")
    visibility: Visibility = Field(default=Visibility.TEAM, description="可见范围")
    original_file_url: str | None = Field(default=None, description="原始来源 URL")
    thumbnail_url: str | None = Field(default=None, description="缩略图 URL")
    file_size: int | None = Field(default=None, ge=0, description="文件大小（字节）")
    last_updated: datetime = Field(description="最后更新时间")
    analysis_state: AnalysisState = Field(
        default=AnalysisState.SUCCEEDED,
        description="AI 分析结果标记",
    )
    failure_reason: str | None = Field(default=None, description="分析失败原因")


class KnowledgeResource(DomainModel):
    """知识库资源"""

    id: str = Field(default="", description="唯一标识")
    basic_info: BasicInfo = Field(description="基础信息")
    metadata: MetaData = Field(default_factory=MetaData, description="元数据")
    search_optimization: SearchOptimization = Field(
        default_factory=SearchOptimization,
        description="检索优化信息",
    )
    management_info: ManagementInfo = Field(description="管理信息")

    @property
    def is_failed(self) -> bool:
        """是否为分析失败的 fallback 记录"""
        return self.management_info.analysis_state == AnalysisState.FAILED
