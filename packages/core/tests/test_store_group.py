"""StoreGroup 工厂测试 -- 后端选择 + SQLite 持久化"""

import pytest
from nexus.core.config import get_db_path, get_store_backend
from nexus.core.models import Task
from nexus.core.store import (
    InMemoryCollection,
    create_memory_store_group,
    create_store_group,
)
from nexus.core.store.sqlite_init import verify_wal_mode


class TestCreateStoreGroup:
    async def test_memory_backend(self):
        group = await create_store_group("memory")
        assert group.conn is None
        assert isinstance(group.task_repo._collection, InMemoryCollection)
        await group.close()

    async def test_memory_groups_are_isolated(self):
        a = create_memory_store_group()
        b = create_memory_store_group()
        await a.task_repo.create(Task(title="A"))
        assert await b.task_repo.list_all() == []

    async def test_sqlite_requires_path(self):
        with pytest.raises(ValueError):
            await create_store_group("sqlite")

    async def test_unknown_backend(self):
        with pytest.raises(ValueError):
            await create_store_group("redis")

    async def test_sqlite_persists_across_connections(self, tmp_path):
        db_path = str(tmp_path / "nested" / "nexus.db")

        group = await create_store_group("sqlite", db_path)
        assert await verify_wal_mode(group.conn)
        task = await group.task_repo.create(Task(title="지속성"))
        await group.close()
        assert group.conn is None

        reopened = await create_store_group("sqlite", db_path)
        try:
            assert (await reopened.task_repo.get(task.id)).title == "지속성"
        finally:
            await reopened.close()


class TestConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("NEXUS_STORE_BACKEND", raising=False)
        monkeypatch.delenv("NEXUS_DB_PATH", raising=False)
        monkeypatch.setenv("NEXUS_DATA_DIR", "/srv/nexus")

        assert get_store_backend() == "memory"
        assert get_db_path() == "/srv/nexus/sqlite/nexus.db"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("NEXUS_STORE_BACKEND", "SQLite")
        monkeypatch.setenv("NEXUS_DB_PATH", "/tmp/custom.db")

        assert get_store_backend() == "sqlite"
        assert get_db_path() == "/tmp/custom.db"
