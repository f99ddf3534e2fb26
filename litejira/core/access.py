"""Project visibility rules shared by the API and the report pipeline.

A user sees every project they own plus every project they are a member of.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from litejira.common.exceptions import NotFoundError, PermissionDeniedError
from litejira.db.models.project import Project, ProjectMember
from litejira.db.models.task import Task


def visible_projects_query(user_id: uuid.UUID) -> Select:
    member_of = select(ProjectMember.project_id).where(
        ProjectMember.user_id == user_id,
        ProjectMember.is_deleted.is_(False),
    )
    return select(Project).where(
        Project.is_deleted.is_(False),
        or_(Project.owner_id == user_id, Project.id.in_(member_of)),
    )


async def visible_project_ids(user_id: uuid.UUID, db: AsyncSession) -> list[uuid.UUID]:
    query = visible_projects_query(user_id).with_only_columns(Project.id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_visible_project(
    project_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession
) -> Project:
    result = await db.execute(
        select(Project).where(Project.id == project_id, Project.is_deleted.is_(False))
    )
    project = result.scalar_one_or_none()
    if not project:
        raise NotFoundError("Project", str(project_id))

    if project.owner_id != user_id and not await is_project_member(project_id, user_id, db):
        raise PermissionDeniedError("You do not have access to this project")
    return project


async def is_project_member(project_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> bool:
    result = await db.execute(
        select(ProjectMember.id).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
            ProjectMember.is_deleted.is_(False),
        )
    )
    return result.first() is not None


async def get_owned_project(
    project_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession
) -> Project:
    project = await get_visible_project(project_id, user_id, db)
    if project.owner_id != user_id:
        raise PermissionDeniedError("Only the project owner can perform this action")
    return project


async def get_visible_task(task_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Task:
    result = await db.execute(select(Task).where(Task.id == task_id, Task.is_deleted.is_(False)))
    task = result.scalar_one_or_none()
    if not task:
        raise NotFoundError("Task", str(task_id))

    await get_visible_project(task.project_id, user_id, db)
    return task
