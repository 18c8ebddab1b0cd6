"""AnalysisHistoryRepository -- 视频分析历史仓库门面

历史记录 append-only，仅支持追加与按 analyzed_at 倒序列出。
订阅者各持有一个 asyncio.Queue：订阅时先收到当前完整列表，
此后每次追加都会收到重新排序后的完整列表。
"""

import asyncio

import structlog
from ulid import ULID

from ..exceptions import DuplicateEntity, EntityNotFound
from ..models.analysis import AnalysisHistoryItem
from .protocols import DocumentCollection

log = structlog.get_logger()

HistorySnapshot = list[AnalysisHistoryItem]


class AnalysisHistoryRepository:
    """AnalysisHistoryItem 仓库 + 变更推送"""

    KIND = "analysis"

    def __init__(self, collection: DocumentCollection, queue_maxsize: int = 100) -> None:
        self._collection = collection
        self._subscribers: set[asyncio.Queue] = set()
        self._queue_maxsize = queue_maxsize

    async def list_all(self) -> HistorySnapshot:
        """列出全部历史，analyzed_at 倒序"""
        docs = await self._collection.list_all(descending=True)
        return [AnalysisHistoryItem.model_validate(doc) for doc in docs]

    async def get(self, item_id: str) -> AnalysisHistoryItem:
        """根据 item_id 查询历史记录

        Raises:
            EntityNotFound: item_id 不存在
        """
        doc = await self._collection.get(item_id)
        if doc is None:
            raise EntityNotFound(self.KIND, item_id)
        return AnalysisHistoryItem.model_validate(doc)

    async def append(self, item: AnalysisHistoryItem) -> AnalysisHistoryItem:
        """追加历史记录并通知订阅者

        Raises:
            DuplicateEntity: 指定的 id 已存在（历史记录不可覆盖）
        """
        item_id = item.id or str(ULID())
        if await self._collection.get(item_id) is not None:
            raise DuplicateEntity(self.KIND, item_id)

        stored = item.model_copy(update={"id": item_id}, deep=True)
        await self._collection.put(
            item_id,
            stored.to_document(),
            sort_key=stored.analyzed_at.isoformat(),
        )
        log.info("analysis_history_appended", item_id=item_id, source=stored.source)

        await self._broadcast()
        return stored

    async def subscribe(self) -> asyncio.Queue:
        """订阅历史变更

        Returns:
            asyncio.Queue 实例，已预置当前完整列表
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        queue.put_nowait(await self.list_all())
        self._subscribers.add(queue)
        return queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        """取消订阅

        Args:
            queue: 之前订阅时返回的队列
        """
        self._subscribers.discard(queue)

    async def _broadcast(self) -> None:
        """向所有订阅者推送最新完整列表"""
        if not self._subscribers:
            return

        snapshot = await self.list_all()
        dead_queues = []
        for queue in self._subscribers:
            try:
                queue.put_nowait(snapshot)
            except asyncio.QueueFull:
                dead_queues.append(queue)

        # 清理已满的队列
        for q in dead_queues:
            self._subscribers.discard(q)
            log.warning("history_subscriber_dropped", reason="queue_full")
