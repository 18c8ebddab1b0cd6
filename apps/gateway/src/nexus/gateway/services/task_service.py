"""TaskService -- 看板任务 + AI 起草/分析/子任务/对话

AI 相关动作的流程：
1. Prompt Builder 生成指令
2. CompletionClient 调用模型（ModelUnavailable 直接上抛）
3. normalize() 校验为契约实例（MalformedResponse / AnalysisFailed 上抛）
4. mapper 转换为领域对象，必要时经 RequestGuard 判定后写回仓库
"""

from collections.abc import Sequence

import structlog
from nexus.analysis.contracts import DraftList, SubtaskList, TaskAnalysisPayload
from nexus.analysis.mappers import to_ai_analysis, to_subtasks, to_task_patches
from nexus.analysis.normalizer import normalize
from nexus.analysis.prompts import (
    CHAT_ACKNOWLEDGMENT,
    build_chat_system_prompt,
    build_draft_prompt,
    build_subtask_prompt,
    build_task_analysis_prompt,
)
from nexus.core.exceptions import EntityNotFound
from nexus.core.models import Subtask, Task, TaskPatch, TaskStatus
from nexus.core.store import StoreGroup
from nexus.provider import ChatTurn, CompletionClient

from .request_guard import RequestGuard

log = structlog.get_logger()

# 起草/分析/子任务使用的模型 alias
JSON_MODEL_ALIAS = "fast"

# 任务对话使用的模型 alias
CHAT_MODEL_ALIAS = "smart"


class TaskService:
    """任务业务服务"""

    def __init__(
        self,
        store_group: StoreGroup,
        client: CompletionClient,
        guard: RequestGuard,
    ) -> None:
        self._tasks = store_group.task_repo
        self._client = client
        self._guard = guard

    # ---- CRUD ----

    async def list_tasks(self) -> list[Task]:
        return await self._tasks.list_all()

    async def get_task(self, task_id: str) -> Task:
        return await self._tasks.get(task_id)

    async def create_task(self, task: Task) -> Task:
        return await self._tasks.create(task)

    async def update_task(self, task_id: str, task: Task) -> Task:
        """整体更新（路径中的 task_id 为准）"""
        return await self._tasks.update(task.model_copy(update={"id": task_id}))

    async def update_status(self, task_id: str, status: TaskStatus) -> Task:
        return await self._tasks.update_status(task_id, status)

    async def delete_task(self, task_id: str) -> None:
        await self._tasks.delete(task_id)

    # ---- AI 起草 ----

    async def draft_tasks(self, raw_input: str) -> list[TaskPatch]:
        """粗略想法 -> 3 个风格不同的任务草稿（不落库）"""
        result = await self._client.complete(
            build_draft_prompt(raw_input),
            JSON_MODEL_ALIAS,
            json_mode=True,
        )
        patches = to_task_patches(normalize(result.content, DraftList))
        log.info("task_drafts_generated", draft_count=len(patches))
        return patches

    async def apply_draft(self, patch: TaskPatch, **fields) -> Task:
        """采用草稿创建任务，ID 与时间戳由仓库分配

        Args:
            patch: 选中的草稿
            **fields: 草稿之外的任务字段（assignee_id、due_date 等）
        """
        task = Task(**patch.model_dump(), **fields)
        return await self._tasks.create(task)

    # ---- AI 分析 ----

    async def analyze_task(self, task_id: str) -> Task:
        """生成执行策略并整体替换任务的 ai_analysis

        同一任务的分析请求被更晚的请求取代时，丢弃本次结果并返回当前存储的任务。
        """
        task = await self._tasks.get(task_id)

        token = self._guard.begin(task_id, "analysis")
        try:
            result = await self._client.complete(
                build_task_analysis_prompt(task),
                JSON_MODEL_ALIAS,
                json_mode=True,
            )
            analysis = to_ai_analysis(normalize(result.content, TaskAnalysisPayload))
        finally:
            fresh = self._guard.finish(task_id, "analysis", token)

        # 以最新存储为基准写回，避免覆盖等待期间的其他修改
        latest = await self._tasks.get(task_id)
        if not fresh:
            return latest
        return await self._tasks.update(latest.model_copy(update={"ai_analysis": analysis}))

    # ---- 子任务 ----

    async def generate_subtasks(self, task_id: str) -> list[Subtask]:
        """生成子任务提案（不落库，由用户确认后 add_subtasks）"""
        task = await self._tasks.get(task_id)
        result = await self._client.complete(
            build_subtask_prompt(task),
            JSON_MODEL_ALIAS,
            json_mode=True,
        )
        return to_subtasks(normalize(result.content, SubtaskList))

    async def add_subtasks(self, task_id: str, subtasks: Sequence[Subtask]) -> Task:
        """追加子任务到列表末尾"""
        task = await self._tasks.get(task_id)
        return await self._tasks.update(
            task.model_copy(update={"subtasks": [*task.subtasks, *subtasks]})
        )

    async def toggle_subtask(self, task_id: str, subtask_id: str) -> Task:
        """切换子任务完成状态

        Raises:
            EntityNotFound: 任务或子任务不存在
        """
        task = await self._tasks.get(task_id)
        if not any(s.id == subtask_id for s in task.subtasks):
            raise EntityNotFound("subtask", subtask_id)

        subtasks = [
            s.model_copy(update={"completed": not s.completed}) if s.id == subtask_id else s
            for s in task.subtasks
        ]
        return await self._tasks.update(task.model_copy(update={"subtasks": subtasks}))

    # ---- 对话 ----

    async def chat(self, task_id: str, history: Sequence[ChatTurn], message: str) -> str:
        """围绕任务的多轮对话，返回模型回复

        不保存对话记录，由调用方自行追加新轮次与回复。
        """
        task = await self._tasks.get(task_id)
        result = await self._client.chat(
            history,
            message,
            build_chat_system_prompt(task),
            CHAT_ACKNOWLEDGMENT,
            CHAT_MODEL_ALIAS,
        )
        return result.content
