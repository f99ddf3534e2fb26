import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

from litejira.common.enums import ReportType, TaskPriority, TaskStatus, UserRole
from litejira.common.exceptions import NotFoundError, PermissionDeniedError
from litejira.common.timeutils import ensure_aware, utcnow
from litejira.core.reporting.service import ReportService
from litejira.core.reporting.store import ReportStore
from litejira.db.models.report import Report

NOW = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)


class FakeAIClient:
    is_configured = True

    async def complete(self, prompt: str) -> str:
        return "Generated narrative."


def _report(user, report_type=ReportType.DAILY, created_at=None, summary="Summary"):
    created_at = created_at or utcnow()
    return Report(
        id=uuid.uuid4(),
        user_id=user.id,
        type=report_type.value,
        summary=summary,
        data={"created": 0, "completed": 0, "in_progress": 0, "overdue": 0, "tasks": []},
        is_ai_generated=False,
        window_start=created_at - timedelta(days=1),
        window_end=created_at,
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
async def owner(make_user):
    return await make_user(name="Grace Hopper")


@pytest.fixture
async def project(make_project, owner):
    return await make_project(owner, key="SVC")


# ---------- Generation ----------


@pytest.mark.asyncio
async def test_generate_daily_report(db_session, owner, project, make_task):
    await make_task(project, owner, status=TaskStatus.DONE, created_at=NOW - timedelta(hours=3))
    service = ReportService(db_session, now=lambda: NOW)

    report = await service.generate_daily_report(owner.id)

    assert report.id is not None
    assert report.type == "daily"
    assert report.is_ai_generated is False
    assert report.summary.startswith("Here's your daily summary for Monday, October 19, 2026.")
    assert report.data["created"] == 1
    assert report.data["completed"] == 1
    assert ensure_aware(report.window_start) == datetime(2026, 10, 19, tzinfo=timezone.utc)
    assert ensure_aware(report.window_end) == datetime(
        2026, 10, 19, 23, 59, 59, 999999, tzinfo=timezone.utc
    )


@pytest.mark.asyncio
async def test_daily_window_uses_user_timezone(db_session, make_user):
    user = await make_user(timezone_name="America/New_York")
    # 02:00 UTC is still the previous evening in New York
    service = ReportService(db_session, now=lambda: datetime(2026, 10, 19, 2, 0, tzinfo=timezone.utc))

    report = await service.generate_daily_report(user.id)

    assert ensure_aware(report.window_start) == datetime(2026, 10, 18, 4, 0, tzinfo=timezone.utc)
    assert "Sunday, October 18, 2026" in report.summary


@pytest.mark.asyncio
async def test_generate_weekly_report(db_session, owner, project, make_task):
    await make_task(
        project, owner, status=TaskStatus.IN_PROGRESS, created_at=datetime(2026, 10, 12, tzinfo=timezone.utc)
    )
    service = ReportService(db_session, now=lambda: NOW)

    report = await service.generate_weekly_report(owner.id, date(2026, 10, 16))

    assert report.type == "weekly"
    assert ensure_aware(report.window_start) == datetime(2026, 10, 9, tzinfo=timezone.utc)
    assert report.summary.startswith("Weekly summary for Oct 9 - Oct 16, 2026.")
    assert report.data["in_progress"] == 1
    assert report.data["created"] == 1


@pytest.mark.asyncio
async def test_ai_flag_is_persisted(db_session, owner, project, make_task):
    await make_task(project, owner, created_at=NOW - timedelta(hours=1))
    service = ReportService(db_session, ai_client=FakeAIClient(), now=lambda: NOW)

    report = await service.generate_daily_report(owner.id)
    history = await service.get_history(owner.id)

    assert report.summary == "Generated narrative."
    assert [r.is_ai_generated for r in history] == [True]


@pytest.mark.asyncio
async def test_generate_for_unknown_user(db_session):
    with pytest.raises(NotFoundError):
        await ReportService(db_session).generate_daily_report(uuid.uuid4())


# ---------- Store ----------


@pytest.mark.asyncio
async def test_history_newest_first_with_limit_and_filter(db_session, owner):
    store = ReportStore(db_session)
    base = utcnow()
    for days_ago, report_type in [(3, ReportType.DAILY), (2, ReportType.WEEKLY), (1, ReportType.DAILY)]:
        await store.save(
            _report(owner, report_type, base - timedelta(days=days_ago), summary=f"{days_ago}d")
        )

    history = await store.list_history(owner.id)
    assert [r.summary for r in history] == ["1d", "2d", "3d"]

    assert [r.summary for r in await store.list_history(owner.id, limit=2)] == ["1d", "2d"]
    daily = await store.list_history(owner.id, ReportType.DAILY)
    assert [r.summary for r in daily] == ["1d", "3d"]


@pytest.mark.asyncio
async def test_save_requires_existing_owner(db_session, owner):
    report = _report(owner)
    report.user_id = uuid.uuid4()
    with pytest.raises(NotFoundError):
        await ReportStore(db_session).save(report)


@pytest.mark.asyncio
async def test_purge_expired_reports(db_session, owner):
    store = ReportStore(db_session)
    await store.save(_report(owner, created_at=utcnow() - timedelta(days=200), summary="old"))
    await store.save(_report(owner, created_at=utcnow() - timedelta(days=1), summary="recent"))
    service = ReportService(db_session)

    assert await service.purge_expired_reports(0) == 0
    assert await service.purge_expired_reports(180) == 1
    assert [r.summary for r in await store.list_history(owner.id)] == ["recent"]


# ---------- Delivery ----------


@pytest.mark.asyncio
async def test_send_daily_email(db_session, owner, project, make_task, mock_send_email):
    task = await make_task(
        project,
        owner,
        title="Ship <release>",
        status=TaskStatus.IN_PROGRESS,
        created_at=NOW - timedelta(hours=2),
    )
    service = ReportService(db_session, now=lambda: NOW)

    assert await service.send_daily_report_email(owner.id) is True

    kwargs = mock_send_email.call_args.kwargs
    assert kwargs["to"] == owner.email
    assert kwargs["subject"] == "Daily Task Summary - 10/19/2026"
    html = kwargs["html_body"]
    assert "Hi Grace Hopper," in html
    assert "daily summary for Monday, October 19, 2026" in html
    assert "Ship &lt;release&gt;" in html
    assert "in progress" in html
    assert f"http://localhost:5173/tasks/{task.id}" in html


@pytest.mark.asyncio
async def test_send_weekly_email_limits_rows(db_session, owner, project, make_task, mock_send_email):
    for i in range(25):
        await make_task(
            project,
            owner,
            title=f"Task {i}",
            priority=TaskPriority.LOW,
            created_at=NOW - timedelta(hours=i + 1),
        )
    service = ReportService(db_session, now=lambda: NOW)

    assert await service.send_weekly_report_email(owner.id) is True

    kwargs = mock_send_email.call_args.kwargs
    assert kwargs["subject"] == "Weekly Task Summary - Week of 10/19/2026"
    html = kwargs["html_body"]
    assert html.count("/tasks/") == 20
    assert "Overdue" in html


@pytest.mark.asyncio
async def test_send_email_reports_failed_delivery(db_session, owner, mock_send_email):
    mock_send_email.return_value = {"status": "failed", "error": "boom"}
    service = ReportService(db_session, now=lambda: NOW)

    assert await service.send_report_email(owner.id, ReportType.DAILY) is False


# ---------- Team ----------


@pytest.mark.asyncio
async def test_team_report(db_session, make_user, make_project):
    manager = await make_user(UserRole.MANAGER, name="Manager")
    alice = await make_user(name="Alice")
    bob = await make_user(name="Bob")
    outsider = await make_user(name="Outsider")
    await make_project(manager, members=[alice, bob])
    await make_project(manager, members=[alice])

    store = ReportStore(db_session)
    await store.save(_report(alice, summary="alice today"))
    await store.save(_report(bob, ReportType.WEEKLY, summary="bob weekly"))
    await store.save(_report(bob, created_at=utcnow() - timedelta(days=3), summary="bob old"))
    await store.save(_report(outsider, summary="outsider today"))

    team = await ReportService(db_session).get_team_report(manager.id, ReportType.DAILY)

    assert team.team_size == 2
    assert team.reports_count == 1
    report, user = team.reports[0]
    assert report.summary == "alice today"
    assert user.name == "Alice"


@pytest.mark.asyncio
async def test_team_report_requires_elevated_role(db_session, owner):
    with pytest.raises(PermissionDeniedError):
        await ReportService(db_session).get_team_report(owner.id, ReportType.DAILY)
