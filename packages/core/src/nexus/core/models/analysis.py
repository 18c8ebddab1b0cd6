"""AnalysisHistoryItem Domain Model -- 视频分析历史

历史记录 append-only：创建后不再修改，仅按 analyzed_at 倒序列出。
"""

from datetime import datetime

from pydantic import Field

from .base import DomainModel


class Scene(DomainModel):
    """视频场景（起止时间单位：秒）"""

    title: str = Field(description="场景标题")
    summary: str = Field(default="", description="场景摘要")
    start_time: int = Field(default=0, ge=0, description="开始时间（秒）")
    end_time: int = Field(default=0, ge=0, description="结束时间（秒）")


class AnalysisHistoryItem(DomainModel):
    """视频分析历史记录"""

    id: str = Field(default="", description="唯一标识")
    source: str = Field(description="来源（URL 或文件名）")
    title: str = Field(description="标题")
    overall_summary: str = Field(default="", description="整体摘要")
    scenes: list[Scene] = Field(default_factory=list, description="场景列表")
    keywords: list[str] = Field(default_factory=list, description="关键词")
    analyzed_at: datetime = Field(description="分析时间")
