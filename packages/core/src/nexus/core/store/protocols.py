"""Store Protocol 接口定义

仓库门面只依赖 DocumentCollection 这一文档集合抽象，
使用 Python Protocol 实现结构化子类型（duck typing）：
测试注入内存实现，生产注入 SQLite 文档表实现。
"""

from typing import Any, Protocol


class DocumentCollection(Protocol):
    """文档集合接口 -- 按 ID 存取 JSON 文档，按 sort_key 有序列出"""

    name: str

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        """根据 doc_id 查询文档，不存在返回 None"""
        ...

    async def put(
        self,
        doc_id: str,
        document: dict[str, Any],
        sort_key: str | None = None,
    ) -> None:
        """写入文档（upsert）

        sort_key 为 None 时保留已有排序键（新文档按空串排序）。
        """
        ...

    async def delete(self, doc_id: str) -> bool:
        """删除文档，返回删除前是否存在"""
        ...

    async def list_all(self, descending: bool = False) -> list[dict[str, Any]]:
        """按 sort_key 列出全部文档"""
        ...
