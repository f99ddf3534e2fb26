import uuid
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel


class TaskSnapshot(BaseModel):
    """Point-in-time copy of a task embedded in a report."""

    id: uuid.UUID
    title: str
    status: str
    priority: str
    project: str
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ReportStatistics(BaseModel):
    created: int
    completed: int
    in_progress: int
    overdue: int


class ReportData(ReportStatistics):
    """The statistics blob persisted on a report."""

    tasks: list[TaskSnapshot]

    @property
    def statistics(self) -> ReportStatistics:
        return ReportStatistics(
            created=self.created,
            completed=self.completed,
            in_progress=self.in_progress,
            overdue=self.overdue,
        )


@dataclass(frozen=True)
class ReportWindow:
    start: datetime
    end: datetime  # inclusive


@dataclass
class BatchResult:
    success: int = 0
    failed: int = 0
