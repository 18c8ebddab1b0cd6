"""领域模型基类 -- camelCase 线上格式 / snake_case Python 属性

持久化文档与 HTTP 载荷沿用 camelCase 键名（originalFileUrl 等），
Python 侧统一以 snake_case 访问。
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DomainModel(BaseModel):
    """所有领域实体的基类"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self) -> dict:
        """序列化为存储/传输用的 camelCase JSON 兼容 dict"""
        return self.model_dump(mode="json", by_alias=True)
