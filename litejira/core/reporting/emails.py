"""HTML rendering for report emails."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from litejira.config import settings
from litejira.core.reporting.schemas import ReportData
from litejira.core.reporting.summary import format_long_date, month_name

TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "templates" / "email"

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)
_env.filters["status_label"] = lambda status: str(status).replace("_", " ")

# (gradient start, gradient end, label color)
_STAT_CARDS = [
    ("created", "Created", ("#3b82f6", "#2563eb", "#dbeafe")),
    ("completed", "Completed", ("#10b981", "#059669", "#d1fae5")),
    ("in_progress", "In Progress", ("#f59e0b", "#d97706", "#fef3c7")),
    ("overdue", "Overdue", ("#ef4444", "#dc2626", "#fee2e2")),
]


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


def _numeric_date(day: date) -> str:
    return f"{day.month}/{day.day}/{day.year}"


def render_daily_email(name: str, summary: str, data: ReportData, day: date) -> RenderedEmail:
    template = _env.get_template("daily_summary.html")
    html = template.render(
        title="Your Daily Summary",
        subtitle=format_long_date(day),
        name=name,
        summary=summary,
        tasks_heading="Your Tasks",
        tasks=data.tasks[: settings.DAILY_EMAIL_TASK_LIMIT],
        frontend_url=settings.FRONTEND_URL.rstrip("/"),
        year=day.year,
    )
    return RenderedEmail(subject=f"Daily Task Summary - {_numeric_date(day)}", html=html)


def render_weekly_email(name: str, summary: str, data: ReportData, end_day: date) -> RenderedEmail:
    template = _env.get_template("weekly_summary.html")
    stat_cards = [
        {"label": label, "value": getattr(data, field), "colors": colors}
        for field, label, colors in _STAT_CARDS
    ]
    html = template.render(
        title="Your Weekly Summary",
        subtitle=f"Week of {month_name(end_day)} {end_day.day}, {end_day.year}",
        name=name,
        summary=summary,
        stat_cards=stat_cards,
        tasks_heading="Tasks This Week",
        tasks=data.tasks[: settings.WEEKLY_EMAIL_TASK_LIMIT],
        frontend_url=settings.FRONTEND_URL.rstrip("/"),
        year=end_day.year,
    )
    return RenderedEmail(
        subject=f"Weekly Task Summary - Week of {_numeric_date(end_day)}", html=html
    )
