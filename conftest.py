"""全局 pytest 配置 -- 临时 SQLite 数据库 + 内存仓库组 + 脚本化模型客户端 fixture"""

import json
from collections import deque
from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio
from nexus.core.store import StoreGroup, create_memory_store_group
from nexus.provider import ModelCallResult, ModelRegistry, ProviderConfig, StreamChunk

# 脚本化回复：补全文本 / 待抛出的异常 / 返回补全文本的协程函数
ScriptedReply = str | BaseException | Callable[[], Awaitable[str]]


class FakeCompletionClient:
    """按脚本回放补全结果的 CompletionClient 替身

    complete() / chat() 依次消费 queue_reply() 排入的回复；
    stream_chat() 依次消费 queue_stream() 排入的分片序列。
    每次调用都记录到 calls，供断言模型 alias、grounding 等参数。
    """

    def __init__(self) -> None:
        self.registry = ModelRegistry(
            ProviderConfig(
                model_fast="gemini/test-flash",
                model_smart="gemini/test-pro",
                model_grounded="gemini/test-grounded",
            )
        )
        self.calls: list[dict] = []
        self._replies: deque[ScriptedReply] = deque()
        self._streams: deque[list[StreamChunk]] = deque()

    def queue_reply(self, *replies: ScriptedReply) -> None:
        self._replies.extend(replies)

    def queue_stream(self, texts: list[str], error: str | None = None) -> None:
        chunks = [StreamChunk(text=t) for t in texts]
        if error is not None:
            chunks.append(StreamChunk(error=error))
        self._streams.append(chunks)

    async def complete(self, prompt: str, model_alias: str = "smart", **kwargs) -> ModelCallResult:
        self.calls.append(
            {"method": "complete", "prompt": prompt, "model_alias": model_alias, **kwargs}
        )
        return await self._next(model_alias)

    async def chat(
        self,
        history,
        new_turn: str,
        system_preamble: str,
        acknowledgment: str,
        model_alias: str = "smart",
    ) -> ModelCallResult:
        self.calls.append(
            {
                "method": "chat",
                "history": list(history),
                "new_turn": new_turn,
                "system_preamble": system_preamble,
                "acknowledgment": acknowledgment,
                "model_alias": model_alias,
            }
        )
        return await self._next(model_alias)

    async def stream_chat(
        self,
        history,
        message: str,
        model_alias: str = "smart",
        image=None,
        system_preamble: str | None = None,
        acknowledgment: str = "",
    ) -> AsyncIterator[StreamChunk]:
        self.calls.append(
            {
                "method": "stream_chat",
                "history": list(history),
                "message": message,
                "model_alias": model_alias,
                "image": image,
                "system_preamble": system_preamble,
                "acknowledgment": acknowledgment,
            }
        )
        if not self._streams:
            raise AssertionError("no scripted stream left")
        for chunk in self._streams.popleft():
            yield chunk

    async def _next(self, model_alias: str) -> ModelCallResult:
        if not self._replies:
            raise AssertionError("no scripted reply left")
        reply = self._replies.popleft()
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            reply = await reply()
        return ModelCallResult(
            content=reply,
            model_alias=model_alias,
            model_name=self.registry.resolve(model_alias),
            duration_ms=1,
        )


@pytest.fixture
def fake_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def memory_store_group() -> StoreGroup:
    return create_memory_store_group()


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from nexus.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


# ---- 常用模型回复 ----


@pytest.fixture
def draft_reply() -> str:
    """起草回复：代码围栏包裹，第三项优先级非法"""
    drafts = [
        {
            "title": "Q4 마케팅 예산 검토",
            "description": "채널별 집행 내역을 정리합니다.",
            "priority": "HIGH",
            "product": "마케팅",
            "type": "검토",
            "styleTag": "표준",
        },
        {
            "title": "Q4 마케팅 예산 상세 검토 및 보고",
            "description": "1. 채널별 집행 내역 정리\n2. 차이 분석\n3. 보고서 작성",
            "priority": "MEDIUM",
            "product": "마케팅",
            "type": "보고",
            "styleTag": "상세",
        },
        {
            "title": "예산 검토",
            "description": "Q4 예산 확인",
            "priority": "URGENT",
            "product": "마케팅",
            "type": "검토",
            "styleTag": "간결",
        },
    ]
    return "```json\n" + json.dumps(drafts, ensure_ascii=False) + "\n```"


@pytest.fixture
def analysis_reply() -> str:
    return json.dumps(
        {
            "strategy": "### 핵심 목표\n예산 집행 현황 파악",
            "suggestedResources": [
                {"title": "예산 관리 가이드", "url": "https://example.com/budget"},
            ],
        },
        ensure_ascii=False,
    )


@pytest.fixture
def subtask_reply() -> str:
    return json.dumps(
        {"subtasks": [{"title": "자료 수집"}, {"title": "초안 작성"}, "검토 요청"]},
        ensure_ascii=False,
    )


@pytest.fixture
def resource_reply() -> str:
    return json.dumps(
        {
            "basicInfo": {
                "title": "Python 비동기 프로그래밍",
                "summary": "asyncio의 기본 개념을 설명합니다.",
                "level": "INTERMEDIATE",
                "tags": ["python", "asyncio"],
                "author": "김개발",
                "contentType": "video",
            },
            "metadata": {"duration": "12:30", "language": "ko", "category": "개발"},
            "searchOptimization": {
                "keywords": ["asyncio", "코루틴"],
                "searchableText": "asyncio 이벤트 루프와 코루틴",
                "chapters": [
                    {"title": "도입", "timestamp": "00:00-06:00", "summary": "개요"},
                    {"title": "실습", "timestamp": "06:00-12:30", "summary": "예제"},
                ],
            },
            "managementInfo": {"visibility": "team"},
        },
        ensure_ascii=False,
    )


@pytest.fixture
def failure_reply() -> str:
    """模型声明数据不足的失败哨兵"""
    return json.dumps(
        {"error": "insufficient_data", "reason": "영상 정보를 찾을 수 없습니다."},
        ensure_ascii=False,
    )


@pytest.fixture
def frames_reply() -> str:
    return json.dumps(
        {
            "title": "제품 데모 영상",
            "overallSummary": "신제품 기능을 시연하는 영상입니다.",
            "scenes": [
                {"title": "오프닝", "summary": "로고 노출", "startTime": 0, "endTime": 5},
                {"title": "기능 시연", "summary": "주요 기능", "startTime": "00:05", "endTime": "00:12"},
            ],
            "keywords": ["데모", "신제품"],
        },
        ensure_ascii=False,
    )
