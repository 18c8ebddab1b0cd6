"""DocumentCollection SQLite 实现 -- 生产模式

每个集合对应一张表，document 列保存 camelCase JSON。
每次写操作独立提交（单线程事件循环内无并发写）。
"""

import json
from typing import Any

import aiosqlite

from .sqlite_init import COLLECTIONS


class SqliteCollection:
    """DocumentCollection 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection, name: str) -> None:
        if name not in COLLECTIONS:
            raise ValueError(f"unknown collection: {name}")
        self._conn = conn
        self.name = name

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        cursor = await self._conn.execute(
            f"SELECT document FROM {self.name} WHERE id = ?",
            (doc_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    async def put(
        self,
        doc_id: str,
        document: dict[str, Any],
        sort_key: str | None = None,
    ) -> None:
        # sort_key 为 NULL 时保留旧值
        await self._conn.execute(
            f"""
            INSERT INTO {self.name} (id, sort_key, document)
            VALUES (?, COALESCE(?, ''), ?)
            ON CONFLICT(id) DO UPDATE SET
                document = excluded.document,
                sort_key = COALESCE(?, {self.name}.sort_key)
            """,
            (
                doc_id,
                sort_key,
                json.dumps(document, ensure_ascii=False),
                sort_key,
            ),
        )
        await self._conn.commit()

    async def delete(self, doc_id: str) -> bool:
        cursor = await self._conn.execute(
            f"DELETE FROM {self.name} WHERE id = ?",
            (doc_id,),
        )
        await self._conn.commit()
        return cursor.rowcount > 0

    async def list_all(self, descending: bool = False) -> list[dict[str, Any]]:
        order = "DESC" if descending else "ASC"
        # rowid 作为同 sort_key 时的稳定次序
        cursor = await self._conn.execute(
            f"SELECT document FROM {self.name} ORDER BY sort_key {order}, rowid {order}"
        )
        rows = await cursor.fetchall()
        return [json.loads(row[0]) for row in rows]
