import uuid
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel as PydanticModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from litejira.api.deps import get_db, get_report_scheduler, require_role
from litejira.common.enums import ReportType, UserRole
from litejira.common.exceptions import NotFoundError
from litejira.common.logging import get_logger
from litejira.core.reporting.scheduler import ReportScheduler
from litejira.db.models.project import Project
from litejira.db.models.report import Report
from litejira.db.models.task import Task
from litejira.db.models.user import User

router = APIRouter(prefix="/admin", tags=["Admin"])

logger = get_logger("api.admin")


# ---------- Schemas ----------


class PlatformStatsResponse(PydanticModel):
    total_users: int
    verified_users: int
    total_projects: int
    total_tasks: int
    total_reports: int
    users_by_role: dict[str, int]
    tasks_by_status: dict[str, int]


class UserAdminResponse(PydanticModel):
    id: uuid.UUID
    email: str
    name: str
    role: str
    is_active: bool
    is_verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BatchQueuedResponse(PydanticModel):
    task_id: str
    report_type: str


class BatchResultResponse(PydanticModel):
    report_type: str
    success: int
    failed: int


# ---------- Endpoints ----------


@router.get("/stats", response_model=PlatformStatsResponse)
async def platform_stats(
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    users_result = await db.execute(
        select(User.role, User.is_verified).where(User.is_deleted.is_(False))
    )
    users = users_result.all()
    users_by_role: dict[str, int] = {}
    for role, _ in users:
        users_by_role[role] = users_by_role.get(role, 0) + 1

    total_projects = (
        await db.execute(select(func.count(Project.id)).where(Project.is_deleted.is_(False)))
    ).scalar() or 0

    tasks_result = await db.execute(
        select(Task.status, func.count(Task.id))
        .where(Task.is_deleted.is_(False))
        .group_by(Task.status)
    )
    tasks_by_status = {status: count for status, count in tasks_result.all()}

    total_reports = (await db.execute(select(func.count(Report.id)))).scalar() or 0

    return PlatformStatsResponse(
        total_users=len(users),
        verified_users=sum(1 for _, verified in users if verified),
        total_projects=total_projects,
        total_tasks=sum(tasks_by_status.values()),
        total_reports=total_reports,
        users_by_role=users_by_role,
        tasks_by_status=tasks_by_status,
    )


@router.get("/users", response_model=list[UserAdminResponse])
async def list_all_users(
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(User).where(User.is_deleted.is_(False)).order_by(User.created_at.desc())
    )
    return result.scalars().all()


async def _get_user(user_id: uuid.UUID, db: AsyncSession) -> User:
    result = await db.execute(select(User).where(User.id == user_id, User.is_deleted.is_(False)))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", str(user_id))
    return user


@router.post("/users/{user_id}/verify", response_model=UserAdminResponse)
async def verify_user(
    user_id: uuid.UUID,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user(user_id, db)
    user.is_verified = True
    await db.flush()
    await db.refresh(user)
    logger.info("User %s verified by %s", user.email, current_user.email)
    return user


@router.patch("/users/{user_id}/deactivate", status_code=204)
async def deactivate_user(
    user_id: uuid.UUID,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user(user_id, db)
    user.is_active = False
    await db.flush()


@router.patch("/users/{user_id}/activate", status_code=204)
async def activate_user(
    user_id: uuid.UUID,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user(user_id, db)
    user.is_active = True
    await db.flush()


@router.post("/reports/{report_type}/run", response_model=BatchQueuedResponse, status_code=202)
async def queue_report_batch(
    report_type: ReportType,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
):
    from litejira.tasks.report_tasks import run_report_batch

    task = run_report_batch.delay(report_type.value)
    logger.info("Queued %s report batch (%s) for %s", report_type.value, task.id, current_user.email)
    return BatchQueuedResponse(task_id=str(task.id), report_type=report_type.value)


@router.post("/reports/{report_type}/run-now", response_model=BatchResultResponse)
async def run_report_batch_now(
    report_type: ReportType,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    scheduler: ReportScheduler = Depends(get_report_scheduler),
):
    if report_type == ReportType.DAILY:
        result = await scheduler.trigger_daily_now()
    else:
        result = await scheduler.trigger_weekly_now()
    return BatchResultResponse(
        report_type=report_type.value, success=result.success, failed=result.failed
    )
