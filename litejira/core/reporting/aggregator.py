"""Collects a user's tasks and derives report statistics for a time window."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from litejira.common.enums import TaskPriority, TaskStatus
from litejira.common.exceptions import BadRequestError, NotFoundError
from litejira.common.logging import get_logger
from litejira.common.timeutils import ensure_aware, utcnow
from litejira.core.access import visible_project_ids
from litejira.core.reporting.schemas import ReportData, TaskSnapshot
from litejira.db.models.project import Project
from litejira.db.models.task import Task
from litejira.db.models.user import User

logger = get_logger("reporting.aggregator")


def _in_window(moment: datetime, start: datetime, end: datetime) -> bool:
    return start <= ensure_aware(moment) <= end


def _is_overdue(task: Task, now: datetime) -> bool:
    return (
        task.due_date is not None
        and ensure_aware(task.due_date) < now
        and task.status != TaskStatus.DONE.value
    )


class TaskAggregator:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def aggregate(
        self,
        user_id: uuid.UUID,
        window_start: datetime,
        window_end: datetime,
        now: datetime | None = None,
    ) -> ReportData:
        """Statistics and snapshots for every task the user assigned or reported.

        ``created``/``completed`` are counted inside [window_start, window_end]
        (both inclusive). ``in_progress``/``overdue`` ignore the window and are
        evaluated against ``now``.
        """
        user = await self.db.get(User, user_id)
        if not user or user.is_deleted:
            raise NotFoundError("User", str(user_id))

        window_start, window_end = ensure_aware(window_start), ensure_aware(window_end)
        if window_start > window_end:
            raise BadRequestError("Report window start must not be after its end")
        now = ensure_aware(now or utcnow())

        rows = await self._fetch_tasks(user_id)

        created = completed = in_progress = overdue = 0
        snapshots: list[TaskSnapshot] = []
        for task, project_name in rows:
            if _in_window(task.created_at, window_start, window_end):
                created += 1
            if task.status == TaskStatus.DONE.value and _in_window(
                task.updated_at, window_start, window_end
            ):
                completed += 1
            if task.status == TaskStatus.IN_PROGRESS.value:
                in_progress += 1
            if _is_overdue(task, now):
                overdue += 1

            snapshots.append(
                TaskSnapshot(
                    id=task.id,
                    title=task.title,
                    status=TaskStatus(task.status).value,
                    priority=TaskPriority(task.priority).value,
                    project=project_name,
                    due_date=ensure_aware(task.due_date) if task.due_date else None,
                    created_at=ensure_aware(task.created_at),
                    updated_at=ensure_aware(task.updated_at),
                )
            )

        logger.debug(
            "Aggregated %d tasks for user %s (created=%d completed=%d in_progress=%d overdue=%d)",
            len(snapshots), user_id, created, completed, in_progress, overdue,
        )
        return ReportData(
            created=created,
            completed=completed,
            in_progress=in_progress,
            overdue=overdue,
            tasks=snapshots,
        )

    async def _fetch_tasks(self, user_id: uuid.UUID) -> list[tuple[Task, str]]:
        project_ids = await visible_project_ids(user_id, self.db)
        if not project_ids:
            return []

        result = await self.db.execute(
            select(Task, Project.name)
            .join(Project, Task.project_id == Project.id)
            .where(
                Task.project_id.in_(project_ids),
                Task.is_deleted.is_(False),
                or_(Task.assignee_id == user_id, Task.reporter_id == user_id),
            )
            .order_by(Task.updated_at.desc(), Task.created_at.desc())
        )
        return [(task, name) for task, name in result.all()]
