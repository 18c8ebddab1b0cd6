"""TaskRepository -- 任务仓库门面

created_at/updated_at 只在此处写入：create 时两者同时设置，
update 时保留原 created_at、刷新 updated_at。调用方传入的时间戳一律忽略。
"""

from datetime import UTC, datetime

import structlog
from ulid import ULID

from ..exceptions import DuplicateEntity, EntityNotFound
from ..models.enums import TaskStatus
from ..models.task import Task
from .protocols import DocumentCollection

log = structlog.get_logger()


class TaskRepository:
    """Task CRUD -- 基于注入的 DocumentCollection"""

    KIND = "task"

    def __init__(self, collection: DocumentCollection) -> None:
        self._collection = collection

    async def list_all(self) -> list[Task]:
        """列出全部任务，按 created_at 升序"""
        docs = await self._collection.list_all()
        return [Task.model_validate(doc) for doc in docs]

    async def get(self, task_id: str) -> Task:
        """根据 task_id 查询任务

        Raises:
            EntityNotFound: task_id 不存在
        """
        doc = await self._collection.get(task_id)
        if doc is None:
            raise EntityNotFound(self.KIND, task_id)
        return Task.model_validate(doc)

    async def create(self, task: Task) -> Task:
        """创建任务，id 为空时分配 ULID

        Raises:
            DuplicateEntity: 指定的 id 已存在
        """
        task_id = task.id or str(ULID())
        if await self._collection.get(task_id) is not None:
            raise DuplicateEntity(self.KIND, task_id)

        now = datetime.now(UTC)
        stored = task.model_copy(
            update={"id": task_id, "created_at": now, "updated_at": now},
            deep=True,
        )
        await self._collection.put(
            task_id,
            stored.to_document(),
            sort_key=now.isoformat(),
        )
        log.info("task_created", task_id=task_id, title=stored.title)
        return stored

    async def update(self, task: Task) -> Task:
        """整体更新任务（id 不可变）

        Raises:
            EntityNotFound: task.id 不存在
        """
        existing = await self.get(task.id)
        stored = task.model_copy(
            update={
                "created_at": existing.created_at,
                "updated_at": datetime.now(UTC),
            },
            deep=True,
        )
        await self._collection.put(task.id, stored.to_document())
        return stored

    async def update_status(self, task_id: str, status: TaskStatus) -> Task:
        """更新任务工作流阶段"""
        task = await self.get(task_id)
        return await self.update(task.model_copy(update={"status": status}))

    async def delete(self, task_id: str) -> None:
        """删除任务（子任务随之删除）

        Raises:
            EntityNotFound: task_id 不存在
        """
        if not await self._collection.delete(task_id):
            raise EntityNotFound(self.KIND, task_id)
        log.info("task_deleted", task_id=task_id)
