"""KnowledgeRepository -- 知识资源仓库门面

列表按创建先后倒序（最新在前）；replace 保留原排序位置。
"""

from datetime import UTC, datetime

import structlog
from ulid import ULID

from ..exceptions import DuplicateEntity, EntityNotFound
from ..models.knowledge import KnowledgeResource
from .protocols import DocumentCollection

log = structlog.get_logger()


class KnowledgeRepository:
    """KnowledgeResource CRUD -- 基于注入的 DocumentCollection"""

    KIND = "knowledge"

    def __init__(self, collection: DocumentCollection) -> None:
        self._collection = collection

    async def list_all(self) -> list[KnowledgeResource]:
        """列出全部资源，最新在前"""
        docs = await self._collection.list_all(descending=True)
        return [KnowledgeResource.model_validate(doc) for doc in docs]

    async def get(self, resource_id: str) -> KnowledgeResource:
        """根据 resource_id 查询资源

        Raises:
            EntityNotFound: resource_id 不存在
        """
        doc = await self._collection.get(resource_id)
        if doc is None:
            raise EntityNotFound(self.KIND, resource_id)
        return KnowledgeResource.model_validate(doc)

    async def create(self, resource: KnowledgeResource) -> KnowledgeResource:
        """创建资源，id 为空时分配 ULID

        Raises:
            DuplicateEntity: 指定的 id 已存在
        """
        resource_id = resource.id or str(ULID())
        if await self._collection.get(resource_id) is not None:
            raise DuplicateEntity(self.KIND, resource_id)

        stored = resource.model_copy(update={"id": resource_id}, deep=True)
        await self._collection.put(
            resource_id,
            stored.to_document(),
            sort_key=datetime.now(UTC).isoformat(),
        )
        log.info(
            "knowledge_resource_created",
            resource_id=resource_id,
            status=stored.management_info.status,
            analysis_state=stored.management_info.analysis_state,
        )
        return stored

    async def replace(self, resource: KnowledgeResource) -> KnowledgeResource:
        """以同一 id 整体替换资源

        Raises:
            EntityNotFound: resource.id 不存在
        """
        await self.get(resource.id)
        await self._collection.put(resource.id, resource.to_document())
        return resource

    async def delete(self, resource_id: str) -> None:
        """删除资源

        Raises:
            EntityNotFound: resource_id 不存在
        """
        if not await self._collection.delete(resource_id):
            raise EntityNotFound(self.KIND, resource_id)
        log.info("knowledge_resource_deleted", resource_id=resource_id)
