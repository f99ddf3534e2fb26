"""Report orchestration: aggregate, summarize, persist and deliver."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from litejira.common.enums import ReportType, UserRole
from litejira.common.exceptions import NotFoundError, PermissionDeniedError
from litejira.common.logging import get_logger
from litejira.common.timeutils import (
    end_of_day,
    local_date,
    resolve_timezone,
    start_of_day,
    utcnow,
)
from litejira.core.reporting.aggregator import TaskAggregator
from litejira.core.reporting.emails import render_daily_email, render_weekly_email
from litejira.core.reporting.schemas import ReportData, ReportWindow
from litejira.core.reporting.store import DEFAULT_HISTORY_LIMIT, ReportStore
from litejira.core.reporting.summary import SummaryGenerator
from litejira.db.models.project import Project, ProjectMember
from litejira.db.models.report import Report
from litejira.db.models.user import User
from litejira.integrations.ai_client import AIClient
from litejira.integrations.sendgrid import EmailClient

logger = get_logger("reporting.service")

ELEVATED_ROLES = {UserRole.MANAGER.value, UserRole.ADMIN.value}


@dataclass
class TeamReport:
    team_size: int
    reports: list[tuple[Report, User]] = field(default_factory=list)

    @property
    def reports_count(self) -> int:
        return len(self.reports)


def daily_window(day: date, tz) -> ReportWindow:
    return ReportWindow(start=start_of_day(day, tz), end=end_of_day(day, tz))


def weekly_window(end_day: date, tz) -> ReportWindow:
    return ReportWindow(
        start=start_of_day(end_day - timedelta(days=7), tz), end=end_of_day(end_day, tz)
    )


class ReportService:
    def __init__(
        self,
        db: AsyncSession,
        ai_client: AIClient | None = None,
        email_client: EmailClient | None = None,
        now: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.aggregator = TaskAggregator(db)
        self.generator = SummaryGenerator(ai_client if ai_client is not None else AIClient())
        self.store = ReportStore(db)
        self.email_client = email_client or EmailClient()
        self._now = now

    async def _get_user(self, user_id: uuid.UUID) -> User:
        user = await self.db.get(User, user_id)
        if not user or user.is_deleted:
            raise NotFoundError("User", str(user_id))
        return user

    # ---------- Generation ----------

    async def generate_daily_report(self, user_id: uuid.UUID, day: date | None = None) -> Report:
        user = await self._get_user(user_id)
        tz = resolve_timezone(user.timezone)
        now = self._now()
        day = day or local_date(now, tz)
        window = daily_window(day, tz)

        data = await self.aggregator.aggregate(user.id, window.start, window.end, now=now)
        outcome = await self.generator.summarize_daily(user.name, data.tasks, day)

        report = Report(
            user_id=user.id,
            type=ReportType.DAILY.value,
            summary=outcome.text,
            data=data.model_dump(mode="json"),
            is_ai_generated=outcome.is_ai_generated,
            window_start=window.start,
            window_end=window.end,
        )
        await self.store.save(report)

        logger.info("Generated daily report for %s (ai=%s)", user.email, outcome.is_ai_generated)
        return report

    async def generate_weekly_report(
        self, user_id: uuid.UUID, end_day: date | None = None
    ) -> Report:
        user = await self._get_user(user_id)
        tz = resolve_timezone(user.timezone)
        now = self._now()
        end_day = end_day or local_date(now, tz)
        start_day = end_day - timedelta(days=7)
        window = weekly_window(end_day, tz)

        data = await self.aggregator.aggregate(user.id, window.start, window.end, now=now)
        outcome = await self.generator.summarize_weekly(
            user.name, data.tasks, start_day, end_day, data.statistics
        )

        report = Report(
            user_id=user.id,
            type=ReportType.WEEKLY.value,
            summary=outcome.text,
            data=data.model_dump(mode="json"),
            is_ai_generated=outcome.is_ai_generated,
            window_start=window.start,
            window_end=window.end,
        )
        await self.store.save(report)

        logger.info("Generated weekly report for %s (ai=%s)", user.email, outcome.is_ai_generated)
        return report

    # ---------- Delivery ----------

    async def send_daily_report_email(self, user_id: uuid.UUID) -> bool:
        return await self.send_report_email(user_id, ReportType.DAILY)

    async def send_weekly_report_email(self, user_id: uuid.UUID) -> bool:
        return await self.send_report_email(user_id, ReportType.WEEKLY)

    async def send_report_email(self, user_id: uuid.UUID, report_type: ReportType) -> bool:
        """Generate a report and mail it to its owner. Returns the delivery result."""
        if report_type == ReportType.DAILY:
            report = await self.generate_daily_report(user_id)
        else:
            report = await self.generate_weekly_report(user_id)

        user = await self.db.get(User, user_id)
        if not user:
            return False

        data = ReportData.model_validate(report.data)
        tz = resolve_timezone(user.timezone)
        report_day = local_date(report.window_end, tz)
        if report_type == ReportType.DAILY:
            email = render_daily_email(user.name, report.summary, data, report_day)
        else:
            email = render_weekly_email(user.name, report.summary, data, report_day)

        result = await self.email_client.send_email(
            to=user.email, subject=email.subject, html_body=email.html
        )
        sent = result.get("status") == "sent"
        if not sent:
            logger.warning("%s report email to %s was not delivered", report_type.value, user.email)
        return sent

    # ---------- Reads ----------

    async def get_history(
        self,
        user_id: uuid.UUID,
        report_type: ReportType | None = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> list[Report]:
        return await self.store.list_history(user_id, report_type, limit)

    async def get_team_report(
        self, manager_id: uuid.UUID, report_type: ReportType, day: date | None = None
    ) -> TeamReport:
        """Reports created since ``day`` by members of every project the caller owns."""
        manager = await self._get_user(manager_id)
        if manager.role not in ELEVATED_ROLES:
            raise PermissionDeniedError("Only managers and admins can view team reports")

        owned = select(Project.id).where(
            Project.owner_id == manager.id, Project.is_deleted.is_(False)
        )
        result = await self.db.execute(
            select(ProjectMember.user_id)
            .where(ProjectMember.project_id.in_(owned), ProjectMember.is_deleted.is_(False))
            .distinct()
        )
        member_ids = list(result.scalars().all())

        tz = resolve_timezone(manager.timezone)
        since = start_of_day(day or local_date(self._now(), tz), tz)
        reports = await self.store.list_for_users(member_ids, report_type, since)
        return TeamReport(team_size=len(member_ids), reports=reports)

    # ---------- Housekeeping ----------

    async def purge_expired_reports(self, retention_days: int) -> int:
        if retention_days <= 0:
            return 0
        cutoff = self._now() - timedelta(days=retention_days)
        return await self.store.purge_older_than(cutoff)
