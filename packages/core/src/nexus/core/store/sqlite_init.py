"""SQLite 数据库初始化 -- 文档集合表

PRAGMA 配置 + 三张文档表 DDL + 排序索引。
每张表只存 (id, sort_key, document JSON)，字段结构由领域模型负责。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# 受支持的集合名（同时也是表名）
COLLECTIONS: tuple[str, ...] = ("tasks", "knowledge_resources", "analysis_history")

_COLLECTION_DDL = """
CREATE TABLE IF NOT EXISTS {name} (
    id        TEXT PRIMARY KEY,
    sort_key  TEXT NOT NULL DEFAULT '',
    document  TEXT NOT NULL DEFAULT '{{}}'
);
"""

_COLLECTION_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_{name}_sort_key ON {name}(sort_key);"
)


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    for name in COLLECTIONS:
        await conn.execute(_COLLECTION_DDL.format(name=name))
        await conn.execute(_COLLECTION_INDEX.format(name=name))

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
