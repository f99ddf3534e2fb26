"""Natural-language report summaries.

Prefers the text-completion service and falls back to deterministic templates
when the service is not configured, there is nothing to summarize, or the
call fails. Callers always get a summary.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import ClassVar

from litejira.common.enums import TaskPriority, TaskStatus
from litejira.common.logging import get_logger
from litejira.config import settings
from litejira.core.reporting.schemas import ReportStatistics, TaskSnapshot
from litejira.integrations.ai_client import AIClient

logger = get_logger("reporting.summary")


@dataclass(frozen=True)
class SummaryOutcome:
    text: str
    is_ai_generated: ClassVar[bool] = False


@dataclass(frozen=True)
class AIGenerated(SummaryOutcome):
    is_ai_generated: ClassVar[bool] = True


@dataclass(frozen=True)
class Fallback(SummaryOutcome):
    is_ai_generated: ClassVar[bool] = False


# ---------- Formatting ----------

# English names regardless of the process LC_TIME
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def month_name(day: date) -> str:
    return MONTH_NAMES[day.month - 1]


def format_long_date(day: date) -> str:
    """``Monday, October 19, 2026``"""
    return f"{DAY_NAMES[day.weekday()]}, {month_name(day)} {day.day}, {day.year}"


def format_short_date(day: date, with_year: bool = False) -> str:
    """``Oct 19`` or ``Oct 19, 2026``"""
    text = f"{month_name(day)[:3]} {day.day}"
    return f"{text}, {day.year}" if with_year else text


def _plural(count: int, singular: str = "", plural: str = "s") -> str:
    return singular if count == 1 else plural


# ---------- Fallback templates ----------


def fallback_daily_summary(tasks: Sequence[TaskSnapshot], date_str: str) -> str:
    completed = sum(1 for t in tasks if t.status == TaskStatus.DONE.value)
    in_progress = sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS.value)
    high_priority = sum(
        1 for t in tasks if t.priority in (TaskPriority.HIGH.value, TaskPriority.CRITICAL.value)
    )

    summary = f"Here's your daily summary for {date_str}. "

    if not tasks:
        summary += (
            "You have no tasks assigned for today. "
            "Consider reviewing your backlog or checking in with your team."
        )
        return summary

    summary += f"You have {len(tasks)} total task{_plural(len(tasks))}. "
    if completed > 0:
        summary += f"Great work completing {completed} task{_plural(completed)}! "
    if in_progress > 0:
        summary += f"{in_progress} task{_plural(in_progress, ' is', 's are')} currently in progress. "
    if high_priority > 0:
        summary += (
            f"Note: {high_priority} high-priority task{_plural(high_priority)} "
            f"need{_plural(high_priority, 's', '')} attention."
        )
    return summary


def fallback_weekly_summary(
    tasks: Sequence[TaskSnapshot], start_str: str, end_str: str, stats: ReportStatistics
) -> str:
    summary = f"Weekly summary for {start_str} - {end_str}. "

    if stats.completed > 0:
        summary += f"You completed {stats.completed} task{_plural(stats.completed)} this week - nice work! "
    if stats.created > 0:
        summary += f"{stats.created} new task{_plural(stats.created, ' was', 's were')} created. "
    if stats.in_progress > 0:
        summary += f"{stats.in_progress} task{_plural(stats.in_progress, ' is', 's are')} currently in progress. "
    if stats.overdue > 0:
        summary += (
            f"Heads up: {stats.overdue} task{_plural(stats.overdue, ' is', 's are')} "
            "overdue and may need immediate attention. "
        )

    if stats.completed == 0 and tasks:
        summary += "Focus on completing in-progress tasks to maintain momentum."
    elif not tasks:
        summary += "No active tasks this week. Check your project backlogs for upcoming work."
    return summary


# ---------- Prompts ----------


def build_daily_prompt(user_name: str, tasks: Sequence[TaskSnapshot], date_str: str) -> str:
    task_list = "\n".join(
        f'- "{t.title}" ({t.status}, {t.priority} priority, Project: {t.project})' for t in tasks
    )
    return (
        f"Generate a brief, professional daily summary (max 150 words) for {user_name} "
        f"about their tasks on {date_str}.\n\n"
        f"Tasks:\n{task_list}\n\n"
        "Write a natural, encouraging summary that:\n"
        "1. Highlights key accomplishments or focus areas\n"
        "2. Mentions any high-priority or overdue tasks\n"
        "3. Provides a positive yet realistic overview\n"
        "4. Uses a professional but friendly tone\n\n"
        "Do not use bullet points or lists. Write in flowing paragraphs."
    )


def build_weekly_prompt(
    user_name: str,
    tasks: Sequence[TaskSnapshot],
    start_str: str,
    end_str: str,
    stats: ReportStatistics,
    task_limit: int,
) -> str:
    task_list = "\n".join(
        f'- "{t.title}" ({t.status}, {t.priority}, Project: {t.project})' for t in tasks[:task_limit]
    )
    return (
        f"Generate a concise weekly summary (max 200 words) for {user_name} "
        f"covering {start_str} - {end_str}.\n\n"
        "Weekly Stats:\n"
        f"- Tasks Created: {stats.created}\n"
        f"- Tasks Completed: {stats.completed}\n"
        f"- Tasks In Progress: {stats.in_progress}\n"
        f"- Overdue Tasks: {stats.overdue}\n\n"
        f"Notable Tasks:\n{task_list}\n\n"
        "Write a natural, insightful summary that:\n"
        "1. Celebrates completed work and productivity trends\n"
        "2. Identifies areas needing attention (overdue items)\n"
        "3. Provides encouragement and actionable insights\n"
        "4. Compares workload balance (created vs completed)\n\n"
        "Do not use bullet points or lists. Write in flowing paragraphs "
        "with a professional but motivating tone."
    )


# ---------- Generator ----------


class SummaryGenerator:
    def __init__(self, ai_client: AIClient | None = None, weekly_task_limit: int | None = None):
        self.ai_client = ai_client
        if weekly_task_limit is None:
            weekly_task_limit = settings.WEEKLY_PROMPT_TASK_LIMIT
        self.weekly_task_limit = weekly_task_limit

    @property
    def ai_enabled(self) -> bool:
        return self.ai_client is not None and self.ai_client.is_configured

    async def summarize_daily(
        self, user_name: str, tasks: Sequence[TaskSnapshot], day: date
    ) -> SummaryOutcome:
        date_str = format_long_date(day)

        if not self.ai_enabled or not tasks:
            return Fallback(fallback_daily_summary(tasks, date_str))

        prompt = build_daily_prompt(user_name, tasks, date_str)
        try:
            return AIGenerated(await self.ai_client.complete(prompt))
        except Exception as e:
            logger.warning("AI daily summary failed, using fallback: %s", e)
            return Fallback(fallback_daily_summary(tasks, date_str))

    async def summarize_weekly(
        self,
        user_name: str,
        tasks: Sequence[TaskSnapshot],
        start_day: date,
        end_day: date,
        stats: ReportStatistics,
    ) -> SummaryOutcome:
        start_str = format_short_date(start_day)
        end_str = format_short_date(end_day, with_year=True)

        if not self.ai_enabled or not tasks:
            return Fallback(fallback_weekly_summary(tasks, start_str, end_str, stats))

        prompt = build_weekly_prompt(
            user_name, tasks, start_str, end_str, stats, self.weekly_task_limit
        )
        try:
            return AIGenerated(await self.ai_client.complete(prompt))
        except Exception as e:
            logger.warning("AI weekly summary failed, using fallback: %s", e)
            return Fallback(fallback_weekly_summary(tasks, start_str, end_str, stats))
