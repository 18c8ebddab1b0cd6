"""任务路由 -- 看板 CRUD + AI 起草/分析/子任务/对话

GET/POST /api/tasks, GET/PUT/DELETE /api/tasks/{task_id},
PATCH /api/tasks/{task_id}/status,
POST /api/tasks/drafts, POST /api/tasks/drafts/apply,
POST /api/tasks/{task_id}/analysis,
POST /api/tasks/{task_id}/subtasks/generate, POST /api/tasks/{task_id}/subtasks,
POST /api/tasks/{task_id}/subtasks/{subtask_id}/toggle,
POST /api/tasks/{task_id}/chat
"""

from fastapi import APIRouter, Depends
from nexus.core.models import DomainModel, Subtask, Task, TaskPatch, TaskStatus
from nexus.provider import ChatTurn
from pydantic import Field
from starlette.responses import JSONResponse

from ..deps import get_task_service
from ..services.task_service import TaskService

router = APIRouter()


class StatusRequest(DomainModel):
    status: TaskStatus


class DraftRequest(DomainModel):
    raw_input: str = Field(min_length=1, description="粗略的业务想法")


class ApplyDraftRequest(DomainModel):
    """采用草稿：草稿本身 + 草稿之外的任务字段"""

    draft: TaskPatch
    status: TaskStatus = TaskStatus.REQUESTED
    due_date: str = ""
    assignee_id: str = ""
    requester_id: str = ""


class SubtasksRequest(DomainModel):
    subtasks: list[Subtask]


class ChatRequest(DomainModel):
    history: list[ChatTurn] = Field(default_factory=list)
    message: str = Field(min_length=1)


@router.get("/api/tasks")
async def list_tasks(service: TaskService = Depends(get_task_service)):
    """任务列表，按 createdAt 升序"""
    tasks = await service.list_tasks()
    return {"tasks": [t.to_document() for t in tasks]}


@router.post("/api/tasks")
async def create_task(body: Task, service: TaskService = Depends(get_task_service)):
    """创建任务（时间戳由仓库设置）"""
    task = await service.create_task(body)
    return JSONResponse(status_code=201, content=task.to_document())


@router.post("/api/tasks/drafts")
async def draft_tasks(body: DraftRequest, service: TaskService = Depends(get_task_service)):
    """AI 起草 3 个风格不同的任务草稿（不落库）"""
    drafts = await service.draft_tasks(body.raw_input)
    return {"drafts": [d.to_document() for d in drafts]}


@router.post("/api/tasks/drafts/apply")
async def apply_draft(
    body: ApplyDraftRequest,
    service: TaskService = Depends(get_task_service),
):
    """采用草稿创建任务"""
    task = await service.apply_draft(
        body.draft,
        status=body.status,
        due_date=body.due_date,
        assignee_id=body.assignee_id,
        requester_id=body.requester_id,
    )
    return JSONResponse(status_code=201, content=task.to_document())


@router.get("/api/tasks/{task_id}")
async def get_task(task_id: str, service: TaskService = Depends(get_task_service)):
    task = await service.get_task(task_id)
    return task.to_document()


@router.put("/api/tasks/{task_id}")
async def update_task(
    task_id: str,
    body: Task,
    service: TaskService = Depends(get_task_service),
):
    """整体更新任务（id 以路径为准，createdAt 保持不变）"""
    task = await service.update_task(task_id, body)
    return task.to_document()


@router.delete("/api/tasks/{task_id}", status_code=204)
async def delete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    await service.delete_task(task_id)


@router.patch("/api/tasks/{task_id}/status")
async def update_status(
    task_id: str,
    body: StatusRequest,
    service: TaskService = Depends(get_task_service),
):
    task = await service.update_status(task_id, body.status)
    return task.to_document()


@router.post("/api/tasks/{task_id}/analysis")
async def analyze_task(task_id: str, service: TaskService = Depends(get_task_service)):
    """生成 AI 执行策略（整体替换 aiAnalysis）"""
    task = await service.analyze_task(task_id)
    return task.to_document()


@router.post("/api/tasks/{task_id}/subtasks/generate")
async def generate_subtasks(task_id: str, service: TaskService = Depends(get_task_service)):
    """生成子任务提案（不落库）"""
    subtasks = await service.generate_subtasks(task_id)
    return {"subtasks": [s.to_document() for s in subtasks]}


@router.post("/api/tasks/{task_id}/subtasks")
async def add_subtasks(
    task_id: str,
    body: SubtasksRequest,
    service: TaskService = Depends(get_task_service),
):
    task = await service.add_subtasks(task_id, body.subtasks)
    return task.to_document()


@router.post("/api/tasks/{task_id}/subtasks/{subtask_id}/toggle")
async def toggle_subtask(
    task_id: str,
    subtask_id: str,
    service: TaskService = Depends(get_task_service),
):
    task = await service.toggle_subtask(task_id, subtask_id)
    return task.to_document()


@router.post("/api/tasks/{task_id}/chat")
async def chat(
    task_id: str,
    body: ChatRequest,
    service: TaskService = Depends(get_task_service),
):
    """任务对话，返回模型回复（对话记录由前端保存）"""
    reply = await service.chat(task_id, body.history, body.message)
    return {"reply": reply}
