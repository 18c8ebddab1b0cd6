"""DocumentCollection 内存实现 -- 测试与演示模式

每个实例持有独立的 dict，不存在模块级共享状态；
读写均做深拷贝，调用方拿到的永远是副本。
"""

import copy
from typing import Any


class InMemoryCollection:
    """DocumentCollection 的内存实现"""

    def __init__(self, name: str) -> None:
        self.name = name
        # doc_id -> (sort_key, document)
        self._docs: dict[str, tuple[str, dict[str, Any]]] = {}

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        entry = self._docs.get(doc_id)
        if entry is None:
            return None
        return copy.deepcopy(entry[1])

    async def put(
        self,
        doc_id: str,
        document: dict[str, Any],
        sort_key: str | None = None,
    ) -> None:
        if sort_key is None:
            existing = self._docs.get(doc_id)
            sort_key = existing[0] if existing else ""
        self._docs[doc_id] = (sort_key, copy.deepcopy(document))

    async def delete(self, doc_id: str) -> bool:
        return self._docs.pop(doc_id, None) is not None

    async def list_all(self, descending: bool = False) -> list[dict[str, Any]]:
        # 同 sort_key 按插入顺序；倒序列出时最新在前
        entries = list(self._docs.values())
        if descending:
            entries.reverse()
        entries = sorted(entries, key=lambda e: e[0], reverse=descending)
        return [copy.deepcopy(doc) for _, doc in entries]
