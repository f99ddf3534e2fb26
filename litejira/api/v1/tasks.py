import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from litejira.api.deps import get_current_user, get_db
from litejira.common.enums import TaskPriority, TaskStatus
from litejira.common.exceptions import BadRequestError
from litejira.common.logging import get_logger
from litejira.common.pagination import PaginatedResponse, PaginationParams, paginate
from litejira.core.access import (
    get_visible_project,
    get_visible_task,
    is_project_member,
    visible_project_ids,
)
from litejira.db.models.project import Project
from litejira.db.models.task import Task
from litejira.db.models.user import User

router = APIRouter(tags=["Tasks"])

logger = get_logger("api.tasks")

SORTABLE_COLUMNS = {
    "created_at": Task.created_at,
    "updated_at": Task.updated_at,
    "due_date": Task.due_date,
    "priority": Task.priority,
    "status": Task.status,
    "title": Task.title,
}


# ---------- Schemas ----------


class TaskCreateRequest(BaseModel):
    project_id: uuid.UUID
    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus = TaskStatus.BACKLOG
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    story_points: int | None = Field(default=None, ge=0)
    assignee_id: uuid.UUID | None = None


class TaskUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    story_points: int | None = Field(default=None, ge=0)
    assignee_id: uuid.UUID | None = None


class TaskMoveRequest(BaseModel):
    status: TaskStatus
    order_index: int | None = Field(default=None, ge=0)


class TaskResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: str | None
    status: str
    priority: str
    due_date: datetime | None
    story_points: int | None
    assignee_id: uuid.UUID | None
    reporter_id: uuid.UUID
    order_index: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BoardResponse(BaseModel):
    project_id: uuid.UUID
    columns: dict[str, list[TaskResponse]]


# ---------- Helpers ----------


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def _next_order_index(project_id: uuid.UUID, status: str, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.max(Task.order_index)).where(
            Task.project_id == project_id,
            Task.status == status,
            Task.is_deleted.is_(False),
        )
    )
    current = result.scalar()
    return 0 if current is None else current + 1


async def _check_assignee(project: Project, assignee_id: uuid.UUID | None, db: AsyncSession) -> None:
    if assignee_id is None or assignee_id == project.owner_id:
        return
    if not await is_project_member(project.id, assignee_id, db):
        raise BadRequestError("Assignee must be a member of the project")


# ---------- Endpoints ----------


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    body: TaskCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await get_visible_project(body.project_id, current_user.id, db)
    await _check_assignee(project, body.assignee_id, db)

    task = Task(
        project_id=project.id,
        title=body.title,
        description=body.description,
        status=body.status.value,
        priority=body.priority.value,
        due_date=_as_utc(body.due_date),
        story_points=body.story_points,
        assignee_id=body.assignee_id,
        reporter_id=current_user.id,
        order_index=await _next_order_index(project.id, body.status.value, db),
    )
    db.add(task)
    await db.flush()
    await db.refresh(task)

    logger.info("Task %s created in project %s by %s", task.id, project.key, current_user.email)
    return task


@router.get("/tasks", response_model=PaginatedResponse[TaskResponse])
async def list_tasks(
    project_id: uuid.UUID | None = Query(None),
    status: TaskStatus | None = Query(None),
    priority: TaskPriority | None = Query(None),
    assignee_id: uuid.UUID | None = Query(None),
    search: str | None = Query(None, max_length=200),
    pagination: PaginationParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if project_id is not None:
        await get_visible_project(project_id, current_user.id, db)
        project_ids = [project_id]
    else:
        project_ids = await visible_project_ids(current_user.id, db)

    query = select(Task).where(Task.project_id.in_(project_ids), Task.is_deleted.is_(False))
    if status is not None:
        query = query.where(Task.status == status.value)
    if priority is not None:
        query = query.where(Task.priority == priority.value)
    if assignee_id is not None:
        query = query.where(Task.assignee_id == assignee_id)
    if search:
        query = query.where(Task.title.ilike(f"%{search}%"))

    items, total = await paginate(
        db, query, pagination, SORTABLE_COLUMNS, default_sort=Task.created_at.desc()
    )
    return PaginatedResponse[TaskResponse](
        items=[TaskResponse.model_validate(t) for t in items],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
        total_pages=pagination.total_pages(total),
    )


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_visible_task(task_id, current_user.id, db)


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: uuid.UUID,
    body: TaskUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = await get_visible_task(task_id, current_user.id, db)
    changes = body.model_dump(exclude_unset=True)

    if "assignee_id" in changes:
        project = await get_visible_project(task.project_id, current_user.id, db)
        await _check_assignee(project, changes["assignee_id"], db)

    for field in ("title", "description", "story_points", "assignee_id"):
        if field in changes:
            setattr(task, field, changes[field])
    if "due_date" in changes:
        task.due_date = _as_utc(changes["due_date"])
    if changes.get("priority") is not None:
        task.priority = changes["priority"].value
    if changes.get("status") is not None and changes["status"].value != task.status:
        task.status = changes["status"].value
        task.order_index = await _next_order_index(task.project_id, task.status, db)

    await db.flush()
    await db.refresh(task)
    return task


@router.patch("/tasks/{task_id}/status", response_model=TaskResponse)
async def move_task(
    task_id: uuid.UUID,
    body: TaskMoveRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Move a card to another board column (or reorder within one)."""
    task = await get_visible_task(task_id, current_user.id, db)

    if body.order_index is None:
        task.order_index = await _next_order_index(task.project_id, body.status.value, db)
    else:
        task.order_index = body.order_index
    task.status = body.status.value

    await db.flush()
    await db.refresh(task)
    return task


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = await get_visible_task(task_id, current_user.id, db)
    task.is_deleted = True
    task.deleted_at = datetime.now(timezone.utc)
    await db.flush()
    return Response(status_code=204)


@router.get("/projects/{project_id}/board", response_model=BoardResponse)
async def get_board(
    project_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await get_visible_project(project_id, current_user.id, db)

    result = await db.execute(
        select(Task)
        .where(Task.project_id == project.id, Task.is_deleted.is_(False))
        .order_by(Task.order_index, Task.created_at)
    )
    columns: dict[str, list[TaskResponse]] = {status.value: [] for status in TaskStatus}
    for task in result.scalars().all():
        columns[task.status].append(TaskResponse.model_validate(task))

    return BoardResponse(project_id=project.id, columns=columns)
