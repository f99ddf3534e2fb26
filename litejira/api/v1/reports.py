import datetime as dt
import uuid

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from litejira.api.deps import get_current_user, get_report_service
from litejira.common.enums import ReportType
from litejira.core.reporting.service import ReportService
from litejira.db.models.user import User

router = APIRouter(prefix="/reports", tags=["Reports"])


# ---------- Schemas ----------


class ReportRequest(BaseModel):
    # Daily: the day to report on. Weekly: the last day of the window.
    date: dt.date | None = None


class ReportResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    summary: str
    data: dict
    is_ai_generated: bool
    window_start: dt.datetime
    window_end: dt.datetime
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class SendReportResponse(BaseModel):
    sent: bool
    message: str


class ReportUser(BaseModel):
    id: uuid.UUID
    name: str
    email: str


class TeamReportEntry(ReportResponse):
    user: ReportUser


class TeamReportResponse(BaseModel):
    team_size: int
    reports_count: int
    reports: list[TeamReportEntry]


# ---------- Endpoints ----------


@router.post("/daily", response_model=ReportResponse, status_code=201)
async def generate_daily_report(
    body: ReportRequest | None = None,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return await service.generate_daily_report(current_user.id, body.date if body else None)


@router.post("/weekly", response_model=ReportResponse, status_code=201)
async def generate_weekly_report(
    body: ReportRequest | None = None,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return await service.generate_weekly_report(current_user.id, body.date if body else None)


@router.post("/send-daily", response_model=SendReportResponse)
async def send_daily_report(
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    sent = await service.send_daily_report_email(current_user.id)
    message = "Daily report sent" if sent else "Daily report could not be delivered"
    return SendReportResponse(sent=sent, message=message)


@router.post("/send-weekly", response_model=SendReportResponse)
async def send_weekly_report(
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    sent = await service.send_weekly_report_email(current_user.id)
    message = "Weekly report sent" if sent else "Weekly report could not be delivered"
    return SendReportResponse(sent=sent, message=message)


@router.get("/history", response_model=list[ReportResponse])
async def report_history(
    type: ReportType | None = Query(None),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return await service.get_history(current_user.id, type, limit)


@router.get("/team", response_model=TeamReportResponse)
async def team_report(
    type: ReportType = Query(ReportType.DAILY),
    date: dt.date | None = Query(None),
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    team = await service.get_team_report(current_user.id, type, date)
    return TeamReportResponse(
        team_size=team.team_size,
        reports_count=team.reports_count,
        reports=[
            TeamReportEntry(
                **ReportResponse.model_validate(report).model_dump(),
                user=ReportUser(id=user.id, name=user.name, email=user.email),
            )
            for report, user in team.reports
        ],
    )
