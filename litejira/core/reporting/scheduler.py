"""Calendar-driven report email batches.

Two cron jobs run inside the API process: a daily batch and a weekly batch.
Each batch walks every verified user sequentially; a failure for one user is
logged and counted but never stops the rest of the batch.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from litejira.common.enums import ReportType
from litejira.common.logging import get_logger
from litejira.config import settings
from litejira.core.reporting.schemas import BatchResult
from litejira.core.reporting.service import ReportService
from litejira.db.models.user import User
from litejira.db.session import async_session_factory

logger = get_logger("reporting.scheduler")

DAILY_JOB_ID = "reports.daily_email"
WEEKLY_JOB_ID = "reports.weekly_email"


@dataclass(frozen=True)
class SchedulerState:
    daily: Job | None = None
    weekly: Job | None = None

    @property
    def running(self) -> bool:
        return self.daily is not None or self.weekly is not None


def _default_scheduler() -> AsyncIOScheduler:
    if settings.REPORT_SCHEDULER_TIMEZONE:
        return AsyncIOScheduler(timezone=settings.REPORT_SCHEDULER_TIMEZONE)
    return AsyncIOScheduler()


class ReportScheduler:
    def __init__(
        self,
        scheduler: AsyncIOScheduler | None = None,
        session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
        service_factory: Callable[[AsyncSession], ReportService] = ReportService,
    ):
        self.scheduler = scheduler or _default_scheduler()
        self.session_factory = session_factory
        self.service_factory = service_factory

    def start(self, state: SchedulerState) -> SchedulerState:
        if state.running:
            logger.info("Report scheduler already running, ignoring start")
            return state

        if not self.scheduler.running:
            self.scheduler.start()

        job_options = {"replace_existing": True, "max_instances": 1, "coalesce": True}
        daily = self.scheduler.add_job(
            self.run_daily_batch,
            CronTrigger(hour=settings.DAILY_REPORT_HOUR, minute=settings.DAILY_REPORT_MINUTE),
            id=DAILY_JOB_ID,
            name="Daily report emails",
            **job_options,
        )
        weekly = self.scheduler.add_job(
            self.run_weekly_batch,
            CronTrigger(
                day_of_week=settings.WEEKLY_REPORT_DAY,
                hour=settings.WEEKLY_REPORT_HOUR,
                minute=0,
            ),
            id=WEEKLY_JOB_ID,
            name="Weekly report emails",
            **job_options,
        )

        logger.info(
            "Report scheduler started: daily at %02d:%02d, weekly on %s at %02d:00",
            settings.DAILY_REPORT_HOUR,
            settings.DAILY_REPORT_MINUTE,
            settings.WEEKLY_REPORT_DAY,
            settings.WEEKLY_REPORT_HOUR,
        )
        return SchedulerState(daily=daily, weekly=weekly)

    def stop(self, state: SchedulerState) -> SchedulerState:
        for job in (state.daily, state.weekly):
            if job is not None and self.scheduler.get_job(job.id) is not None:
                self.scheduler.remove_job(job.id)
        if state.running:
            logger.info("Report scheduler stopped")
        return SchedulerState()

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    # ---------- Batches ----------

    async def run_daily_batch(self) -> BatchResult:
        return await self.run_batch(ReportType.DAILY)

    async def run_weekly_batch(self) -> BatchResult:
        return await self.run_batch(ReportType.WEEKLY)

    # Manual entry points, same logic as the calendar jobs
    trigger_daily_now = run_daily_batch
    trigger_weekly_now = run_weekly_batch

    async def _verified_user_ids(self) -> list[uuid.UUID]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(User.id)
                .where(
                    User.is_verified.is_(True),
                    User.is_active.is_(True),
                    User.is_deleted.is_(False),
                )
                .order_by(User.created_at)
            )
            return list(result.scalars().all())

    async def _send_one(self, user_id: uuid.UUID, report_type: ReportType) -> bool:
        # Closing the session rolls back anything left uncommitted
        async with self.session_factory() as session:
            service = self.service_factory(session)
            sent = await service.send_report_email(user_id, report_type)
            await session.commit()
            return sent

    async def run_batch(self, report_type: ReportType) -> BatchResult:
        logger.info("Running %s report batch", report_type.value)
        outcome = BatchResult()

        for user_id in await self._verified_user_ids():
            try:
                sent = await self._send_one(user_id, report_type)
            except Exception:
                logger.exception("Failed to send %s report to user %s", report_type.value, user_id)
                outcome.failed += 1
                continue

            if sent:
                outcome.success += 1
            else:
                logger.error("%s report for user %s was not delivered", report_type.value, user_id)
                outcome.failed += 1

        logger.info(
            "%s report batch complete: %d success, %d failed",
            report_type.value.capitalize(),
            outcome.success,
            outcome.failed,
        )
        return outcome
