"""Persistence for generated reports. No business rules live here."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from litejira.common.enums import ReportType
from litejira.common.exceptions import NotFoundError
from litejira.common.logging import get_logger
from litejira.db.models.report import Report
from litejira.db.models.user import User

logger = get_logger("reporting.store")

DEFAULT_HISTORY_LIMIT = 10


class ReportStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, report: Report) -> uuid.UUID:
        owner = await self.db.get(User, report.user_id)
        if not owner or owner.is_deleted:
            raise NotFoundError("User", str(report.user_id))

        self.db.add(report)
        await self.db.flush()
        await self.db.refresh(report)
        return report.id

    async def list_history(
        self,
        user_id: uuid.UUID,
        report_type: ReportType | None = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> list[Report]:
        query = select(Report).where(Report.user_id == user_id, Report.is_deleted.is_(False))
        if report_type is not None:
            query = query.where(Report.type == report_type.value)
        query = query.order_by(Report.created_at.desc()).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_for_users(
        self,
        user_ids: Sequence[uuid.UUID],
        report_type: ReportType,
        since: datetime,
    ) -> list[tuple[Report, User]]:
        """Reports of ``report_type`` created at or after ``since``, with their owners."""
        if not user_ids:
            return []

        result = await self.db.execute(
            select(Report, User)
            .join(User, Report.user_id == User.id)
            .where(
                Report.user_id.in_(list(user_ids)),
                Report.type == report_type.value,
                Report.created_at >= since,
                Report.is_deleted.is_(False),
            )
            .order_by(Report.created_at.desc())
        )
        return [(report, user) for report, user in result.all()]

    async def purge_older_than(self, cutoff: datetime) -> int:
        result = await self.db.execute(
            delete(Report)
            .where(Report.created_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        purged = result.rowcount or 0
        logger.info("Purged %d reports created before %s", purged, cutoff.isoformat())
        return purged
