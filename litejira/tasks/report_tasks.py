import asyncio

from litejira.common.enums import ReportType
from litejira.common.logging import get_logger
from litejira.config import settings
from litejira.tasks.celery_app import app

logger = get_logger("tasks.report")


def _run_async(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


async def _dispose_engine():
    from litejira.db.session import engine

    # Pooled connections are bound to the loop that opened them
    await engine.dispose()


@app.task(name="litejira.tasks.report_tasks.run_report_batch")
def run_report_batch(report_type: str):
    """Send a daily or weekly report email to every verified user."""
    report_type = ReportType(report_type)
    logger.info("Running %s report batch from worker", report_type.value)

    async def _run():
        from litejira.core.reporting.scheduler import ReportScheduler

        try:
            result = await ReportScheduler().run_batch(report_type)
            return {"success": result.success, "failed": result.failed}
        finally:
            await _dispose_engine()

    return _run_async(_run())


@app.task(name="litejira.tasks.report_tasks.purge_expired_reports")
def purge_expired_reports():
    """Celery Beat task: hard-delete reports past the retention window."""
    if settings.REPORT_RETENTION_DAYS <= 0:
        logger.info("Report retention disabled, nothing to purge")
        return 0

    async def _purge():
        from litejira.core.reporting.service import ReportService
        from litejira.db.session import async_session_factory

        try:
            async with async_session_factory() as db:
                try:
                    purged = await ReportService(db).purge_expired_reports(
                        settings.REPORT_RETENTION_DAYS
                    )
                    await db.commit()
                    return purged
                except Exception as e:
                    await db.rollback()
                    logger.error("Report purge failed: %s", e)
                    raise
        finally:
            await _dispose_engine()

    return _run_async(_purge())
