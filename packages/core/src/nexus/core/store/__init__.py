"""Nexus Core Store -- 仓库门面 + 可注入的存储后端

提供工厂函数创建共享存储后端的仓库实例组。
"""

from pathlib import Path

import aiosqlite
import structlog

from .document_store import SqliteCollection
from .history_store import AnalysisHistoryRepository
from .knowledge_store import KnowledgeRepository
from .memory import InMemoryCollection
from .protocols import DocumentCollection
from .sqlite_init import init_db
from .task_store import TaskRepository

log = structlog.get_logger()


class StoreGroup:
    """仓库实例组 -- 三个集合共享同一存储后端"""

    def __init__(
        self,
        tasks: DocumentCollection,
        knowledge: DocumentCollection,
        history: DocumentCollection,
        conn: aiosqlite.Connection | None = None,
    ) -> None:
        self.conn = conn
        self.task_repo = TaskRepository(tasks)
        self.knowledge_repo = KnowledgeRepository(knowledge)
        self.history_repo = AnalysisHistoryRepository(history)

    async def close(self) -> None:
        """释放底层连接（内存后端无操作）"""
        if self.conn is not None:
            await self.conn.close()
            self.conn = None


def create_memory_store_group() -> StoreGroup:
    """创建内存后端的仓库实例组"""
    return StoreGroup(
        tasks=InMemoryCollection("tasks"),
        knowledge=InMemoryCollection("knowledge_resources"),
        history=InMemoryCollection("analysis_history"),
    )


async def create_store_group(backend: str, db_path: str | None = None) -> StoreGroup:
    """创建仓库实例组

    Args:
        backend: "memory" 或 "sqlite"
        db_path: SQLite 数据库文件路径（sqlite 后端必填）

    Returns:
        StoreGroup 实例
    """
    if backend == "memory":
        log.info("store_group_created", backend="memory")
        return create_memory_store_group()

    if backend != "sqlite":
        raise ValueError(f"unknown store backend: {backend}")
    if not db_path:
        raise ValueError("sqlite backend requires db_path")

    # 确保数据库目录存在
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    await init_db(conn)

    log.info("store_group_created", backend="sqlite", db_path=db_path)
    return StoreGroup(
        tasks=SqliteCollection(conn, "tasks"),
        knowledge=SqliteCollection(conn, "knowledge_resources"),
        history=SqliteCollection(conn, "analysis_history"),
        conn=conn,
    )


__all__ = [
    "StoreGroup",
    "create_store_group",
    "create_memory_store_group",
    "DocumentCollection",
    "InMemoryCollection",
    "SqliteCollection",
    "TaskRepository",
    "KnowledgeRepository",
    "AnalysisHistoryRepository",
    "init_db",
]
