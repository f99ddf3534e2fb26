import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from litejira.common.enums import TaskPriority, TaskStatus, UserRole
from litejira.common.security import create_access_token, get_password_hash
from litejira.db.base import Base
from litejira.db.models import *  # noqa: F401,F403 - ensure all models loaded
from litejira.db.models.project import Project, ProjectMember
from litejira.db.models.task import Task
from litejira.db.models.user import User


@pytest.fixture
async def test_engine(tmp_path):
    # One SQLite file per test so sessions opened by the scheduler see committed data
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(db_session, session_factory):
    from litejira.api.deps import get_db, get_report_scheduler
    from litejira.core.reporting.scheduler import ReportScheduler
    from litejira.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_report_scheduler] = lambda: ReportScheduler(
        session_factory=session_factory
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------- Factories ----------


@pytest.fixture
def make_user(db_session):
    async def _make_user(
        role: UserRole = UserRole.MEMBER,
        name: str = "Test User",
        timezone_name: str = "UTC",
        is_verified: bool = True,
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            email=f"{role.value}_{uuid.uuid4().hex[:8]}@test.com",
            hashed_password=get_password_hash("testpass123"),
            name=name,
            role=role.value,
            timezone=timezone_name,
            is_verified=is_verified,
        )
        db_session.add(user)
        await db_session.flush()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_project(db_session):
    async def _make_project(owner: User, members=(), key: str | None = None) -> Project:
        project = Project(
            id=uuid.uuid4(),
            owner_id=owner.id,
            name="Test Project",
            key=key or f"P{uuid.uuid4().hex[:6].upper()}",
        )
        db_session.add(project)
        await db_session.flush()
        for member in members:
            db_session.add(ProjectMember(project_id=project.id, user_id=member.id))
        await db_session.flush()
        await db_session.refresh(project)
        return project

    return _make_project


@pytest.fixture
def make_task(db_session):
    async def _make_task(
        project: Project,
        reporter: User,
        title: str = "Test task",
        status: TaskStatus = TaskStatus.TODO,
        priority: TaskPriority = TaskPriority.MEDIUM,
        assignee: User | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        due_date: datetime | None = None,
    ) -> Task:
        created_at = created_at or datetime.now(timezone.utc)
        task = Task(
            id=uuid.uuid4(),
            project_id=project.id,
            title=title,
            status=status.value,
            priority=priority.value,
            reporter_id=reporter.id,
            assignee_id=assignee.id if assignee else None,
            due_date=due_date,
            created_at=created_at,
            updated_at=updated_at or created_at,
        )
        db_session.add(task)
        await db_session.flush()
        return task

    return _make_task


# ---------- Users ----------


@pytest.fixture
async def member_user(make_user):
    return await make_user(UserRole.MEMBER, name="Test Member")


@pytest.fixture
async def manager_user(make_user):
    return await make_user(UserRole.MANAGER, name="Test Manager")


@pytest.fixture
async def admin_user(make_user):
    return await make_user(UserRole.ADMIN, name="Test Admin")


def _headers_for(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def auth_headers(member_user):
    return _headers_for(member_user)


@pytest.fixture
def manager_headers(manager_user):
    return _headers_for(manager_user)


@pytest.fixture
def admin_headers(admin_user):
    return _headers_for(admin_user)


@pytest.fixture
def headers_for():
    return _headers_for


# ---------- External services ----------


@pytest.fixture(autouse=True)
def mock_celery_tasks():
    """Mock Celery task.delay() calls to prevent actual task execution in tests."""
    with patch(
        "litejira.tasks.report_tasks.run_report_batch.delay",
        return_value=MagicMock(id="celery-task-123"),
    ) as delay:
        yield delay


@pytest.fixture(autouse=True)
def mock_send_email():
    """Mock outgoing email; every send succeeds unless a test says otherwise."""
    with patch(
        "litejira.integrations.sendgrid.EmailClient.send_email",
        return_value={"message_id": "mock-123", "status": "sent"},
    ) as send_email:
        yield send_email
