"""packages/core 测试配置 -- 两种存储后端参数化 fixture"""

import pytest
from nexus.core.store import InMemoryCollection, SqliteCollection


@pytest.fixture(params=["memory", "sqlite"])
def make_collection(request, db_conn):
    """按后端创建集合：memory 每次独立实例，sqlite 共享同一临时库"""

    def factory(name: str):
        if request.param == "memory":
            return InMemoryCollection(name)
        return SqliteCollection(db_conn, name)

    return factory
