import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from litejira.api.deps import get_current_user, get_db
from litejira.common.enums import ProjectMemberRole
from litejira.common.exceptions import ConflictError, NotFoundError
from litejira.core.access import get_owned_project, get_visible_project, visible_projects_query
from litejira.db.models.project import Project, ProjectMember
from litejira.db.models.user import User

router = APIRouter(prefix="/projects", tags=["Projects"])


# ---------- Schemas ----------


class ProjectCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    key: str = Field(min_length=2, max_length=10, pattern=r"^[A-Za-z][A-Za-z0-9]*$")
    description: str | None = None


class ProjectUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None


class ProjectResponse(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    key: str
    description: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectListResponse(BaseModel):
    projects: list[ProjectResponse]
    total: int


class MemberAddRequest(BaseModel):
    email: EmailStr
    role: ProjectMemberRole = ProjectMemberRole.MEMBER


class MemberResponse(BaseModel):
    user_id: uuid.UUID
    email: str
    name: str
    role: str
    is_owner: bool = False


# ---------- Endpoints ----------


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    body: ProjectCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    key = body.key.upper()
    existing = await db.execute(select(Project.id).where(Project.key == key))
    if existing.first() is not None:
        raise ConflictError(f"Project key '{key}' is already in use")

    project = Project(
        owner_id=current_user.id,
        name=body.name,
        key=key,
        description=body.description,
    )
    db.add(project)
    await db.flush()
    await db.refresh(project)
    return project


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = visible_projects_query(current_user.id).order_by(Project.created_at.desc())
    result = await db.execute(query)
    projects = result.scalars().all()

    return ProjectListResponse(
        projects=[ProjectResponse.model_validate(p) for p in projects],
        total=len(projects),
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_visible_project(project_id, current_user.id, db)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: uuid.UUID,
    body: ProjectUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await get_owned_project(project_id, current_user.id, db)

    if body.name is not None:
        project.name = body.name
    if body.description is not None:
        project.description = body.description

    await db.flush()
    await db.refresh(project)
    return project


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await get_owned_project(project_id, current_user.id, db)
    project.is_deleted = True
    project.deleted_at = datetime.now(timezone.utc)
    await db.flush()
    return Response(status_code=204)


# ---------- Members ----------


@router.get("/{project_id}/members", response_model=list[MemberResponse])
async def list_members(
    project_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await get_visible_project(project_id, current_user.id, db)

    owner = await db.get(User, project.owner_id)
    members = [
        MemberResponse(
            user_id=owner.id,
            email=owner.email,
            name=owner.name,
            role=ProjectMemberRole.ADMIN.value,
            is_owner=True,
        )
    ]

    result = await db.execute(
        select(ProjectMember, User)
        .join(User, ProjectMember.user_id == User.id)
        .where(ProjectMember.project_id == project.id, ProjectMember.is_deleted.is_(False))
        .order_by(ProjectMember.created_at)
    )
    members.extend(
        MemberResponse(user_id=user.id, email=user.email, name=user.name, role=member.role)
        for member, user in result.all()
    )
    return members


@router.post("/{project_id}/members", response_model=MemberResponse, status_code=201)
async def add_member(
    project_id: uuid.UUID,
    body: MemberAddRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await get_owned_project(project_id, current_user.id, db)

    result = await db.execute(
        select(User).where(User.email == body.email.lower(), User.is_deleted.is_(False))
    )
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", body.email)

    if user.id == project.owner_id:
        raise ConflictError("The project owner is already a member")

    existing = await db.execute(
        select(ProjectMember.id).where(
            ProjectMember.project_id == project.id, ProjectMember.user_id == user.id
        )
    )
    if existing.first() is not None:
        raise ConflictError("User is already a member of this project")

    member = ProjectMember(project_id=project.id, user_id=user.id, role=body.role.value)
    db.add(member)
    await db.flush()

    return MemberResponse(user_id=user.id, email=user.email, name=user.name, role=member.role)


@router.delete("/{project_id}/members/{user_id}", status_code=204)
async def remove_member(
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await get_owned_project(project_id, current_user.id, db)

    result = await db.execute(
        select(ProjectMember).where(
            ProjectMember.project_id == project.id, ProjectMember.user_id == user_id
        )
    )
    member = result.scalar_one_or_none()
    if not member:
        raise NotFoundError("Project member", str(user_id))

    # Hard delete so the (project, user) pair can be re-added later
    await db.delete(member)
    await db.flush()
    return Response(status_code=204)
