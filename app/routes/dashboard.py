"""Dashboard aggregation routes and the operational-day clock."""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_now, get_session, get_zone
from app.schemas import (
    ActivityEvent,
    FinancialSummary,
    OperationalDayRead,
    Overview,
    OverviewMetrics,
    ProductionSummary,
)
from services.dashboard import DEFAULT_ACTIVITY_LIMIT, DashboardService
from services.day_system import compute_operational_day, shift_label
from settings import Settings, get_settings

router = APIRouter(prefix="/dashboard", tags=["dashboard"], dependencies=[Depends(get_current_user)])


def get_dashboard_service(
    session: Session = Depends(get_session),
    zone: tzinfo = Depends(get_zone),
) -> DashboardService:
    return DashboardService(session, zone)


@router.get("/overview", response_model=Overview)
def overview(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    now: datetime = Depends(get_now),
    service: DashboardService = Depends(get_dashboard_service),
) -> Overview:
    metrics = service.overview(now=now, start_date=start_date, end_date=end_date)
    return Overview(metrics=OverviewMetrics.model_validate(metrics, from_attributes=True))


@router.get("/production-summary", response_model=ProductionSummary)
def production_summary(
    period: int = Query(30, description="Look-back window in days."),
    now: datetime = Depends(get_now),
    service: DashboardService = Depends(get_dashboard_service),
) -> ProductionSummary:
    summary = service.production_summary(period_days=period, now=now)
    return ProductionSummary.model_validate(summary, from_attributes=True)


@router.get("/financial-summary", response_model=FinancialSummary)
def financial_summary(
    month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    now: datetime = Depends(get_now),
    service: DashboardService = Depends(get_dashboard_service),
) -> FinancialSummary:
    summary = service.financial_summary(month=month, year=year, now=now)
    return FinancialSummary.model_validate(summary, from_attributes=True)


@router.get("/activity", response_model=List[ActivityEvent])
def activity(
    limit: int = Query(DEFAULT_ACTIVITY_LIMIT, description="Capped at 100."),
    service: DashboardService = Depends(get_dashboard_service),
) -> List[ActivityEvent]:
    return [
        ActivityEvent.model_validate(event, from_attributes=True)
        for event in service.recent_activity(limit=limit)
    ]


@router.get("/operational-day", response_model=OperationalDayRead)
def operational_day(
    language: str = Query("ar", pattern="^(ar|en)$"),
    now: datetime = Depends(get_now),
    zone: tzinfo = Depends(get_zone),
    settings: Settings = Depends(get_settings),
) -> OperationalDayRead:
    day = compute_operational_day(now, zone)
    return OperationalDayRead(
        timezone=settings.timezone,
        current_day=day.current_day,
        day_start=day.day_start,
        day_end=day.day_end,
        is_night_shift=day.is_night_shift,
        minutes_since_start=day.minutes_since_start,
        progress_percent=day.progress_percent,
        shift_label=shift_label(day, language),
    )
