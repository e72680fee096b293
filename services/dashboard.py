"""Read-only aggregations behind the dashboard screens."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from models.records import BatchStatus, InvoiceStatus, OilGrade
from models.tables import (
    Batch,
    Client,
    Invoice,
    OilBatch,
    PressingSession,
    ProcessingDecision,
    QualityTest,
    as_utc,
)
from services.day_system import OperationalDay, compute_operational_day
from services.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_LIMIT = 20
MAX_ACTIVITY_LIMIT = 100

_OPEN_BATCH_STATUSES = (BatchStatus.received, BatchStatus.in_process)
_PENDING_INVOICE_STATUSES = (InvoiceStatus.draft, InvoiceStatus.sent, InvoiceStatus.overdue)
_OUTSTANDING_INVOICE_STATUSES = (InvoiceStatus.sent, InvoiceStatus.overdue)


@dataclass
class OverviewMetrics:
    total_clients: int = 0
    active_batches: int = 0
    total_oil_produced: int = 0
    pending_invoices: int = 0
    recent_quality_tests: int = 0
    total_revenue: int = 0
    today_tickets: int = 0
    active_rooms: int = 0
    current_boxes: int = 0


@dataclass
class ProductionDay:
    date: date
    batches_processed: int = 0
    total_oil_produced: int = 0


@dataclass
class ProductionSummary:
    production_data: List[ProductionDay]
    quality_distribution: List[Dict[str, Any]]
    period: str


@dataclass
class FinancialSummary:
    monthly_revenue: int
    outstanding_amount: int
    processing_breakdown: List[Dict[str, Any]]
    period: str


@dataclass
class ActivityEvent:
    id: str
    type: str
    action: str
    description: str
    timestamp: datetime
    user: str = "system"
    details: Dict[str, Any] = field(default_factory=dict)


def _day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end, time.max, tzinfo=timezone.utc),
    )


def _received_during(day: OperationalDay):
    """Batches received in ``[day_start, day_end)`` of the operational day."""
    return and_(
        Batch.date_received >= day.day_start.astimezone(timezone.utc),
        Batch.date_received < day.day_end.astimezone(timezone.utc),
    )


class DashboardService:
    def __init__(self, session: Session, zone: Optional[tzinfo] = None) -> None:
        self._session = session
        self._zone = zone

    def overview(
        self,
        *,
        now: Optional[datetime] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> OverviewMetrics:
        """Headline counters; the optional date range narrows oil, tests and revenue."""
        now = now or datetime.now(timezone.utc)
        created_range = None
        if start_date is not None and end_date is not None:
            if start_date > end_date:
                raise ValidationError("startDate must not be after endDate")
            created_range = _day_bounds(start_date, end_date)

        def _scalar(statement) -> int:
            return int(self._session.scalar(statement) or 0)

        oil_statement = select(func.sum(OilBatch.weight))
        tests_statement = select(func.count(QualityTest.id))
        revenue_statement = select(func.sum(Invoice.amount)).where(Invoice.status == InvoiceStatus.paid)
        if created_range is not None:
            oil_statement = oil_statement.where(OilBatch.created_at.between(*created_range))
            tests_statement = tests_statement.where(QualityTest.created_at.between(*created_range))
            revenue_statement = revenue_statement.where(Invoice.created_at.between(*created_range))

        # "Today" is the operational day, not the calendar day.
        today = compute_operational_day(now, self._zone)

        return OverviewMetrics(
            total_clients=_scalar(select(func.count(Client.id))),
            active_batches=_scalar(
                select(func.count(Batch.id)).where(Batch.status.in_(_OPEN_BATCH_STATUSES))
            ),
            total_oil_produced=_scalar(oil_statement),
            pending_invoices=_scalar(
                select(func.count(Invoice.id)).where(Invoice.status.in_(_PENDING_INVOICE_STATUSES))
            ),
            recent_quality_tests=_scalar(tests_statement),
            total_revenue=_scalar(revenue_statement),
            today_tickets=_scalar(select(func.count(Batch.id)).where(_received_during(today))),
            active_rooms=_scalar(
                select(func.count(func.distinct(PressingSession.pressing_room_id))).where(
                    PressingSession.finish.is_(None)
                )
            ),
            current_boxes=_scalar(
                select(func.sum(PressingSession.number_of_boxes)).where(PressingSession.finish.is_(None))
            ),
        )

    def production_summary(self, *, period_days: int = 30, now: Optional[datetime] = None) -> ProductionSummary:
        if period_days < 1:
            raise ValidationError("Invalid period")
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(days=period_days)

        by_day: Dict[date, ProductionDay] = {}
        oil_batches = self._session.scalars(select(OilBatch).where(OilBatch.created_at >= since))
        for oil_batch in oil_batches:
            day = as_utc(oil_batch.created_at).date()
            entry = by_day.setdefault(day, ProductionDay(date=day))
            entry.batches_processed += 1
            entry.total_oil_produced += oil_batch.weight

        grade_rows = self._session.execute(
            select(QualityTest.grade, func.count(QualityTest.id))
            .where(QualityTest.test_date >= since.date())
            .group_by(QualityTest.grade)
        ).all()

        return ProductionSummary(
            production_data=sorted(by_day.values(), key=lambda item: item.date, reverse=True),
            quality_distribution=[
                {"grade": OilGrade(grade), "count": count} for grade, count in grade_rows
            ],
            period=f"{period_days} days",
        )

    def financial_summary(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> FinancialSummary:
        now = now or datetime.now(timezone.utc)
        target_month = month if month is not None else now.month
        target_year = year if year is not None else now.year
        if not 1 <= target_month <= 12:
            raise ValidationError("Invalid month")

        month_start = date(target_year, target_month, 1)
        if target_month == 12:
            month_end = date(target_year + 1, 1, 1) - timedelta(days=1)
        else:
            month_end = date(target_year, target_month + 1, 1) - timedelta(days=1)

        monthly_revenue = self._session.scalar(
            select(func.sum(Invoice.amount)).where(
                Invoice.status == InvoiceStatus.paid,
                Invoice.issue_date.between(month_start, month_end),
            )
        )
        outstanding = self._session.scalar(
            select(func.sum(Invoice.amount)).where(Invoice.status.in_(_OUTSTANDING_INVOICE_STATUSES))
        )
        breakdown_rows = self._session.execute(
            select(
                ProcessingDecision.type,
                func.count(ProcessingDecision.id),
                func.avg(ProcessingDecision.unit_price),
            ).group_by(ProcessingDecision.type)
        ).all()

        return FinancialSummary(
            monthly_revenue=int(monthly_revenue or 0),
            outstanding_amount=int(outstanding or 0),
            processing_breakdown=[
                {
                    "type": decision_type,
                    "count": count,
                    "avg_price": float(avg_price) if avg_price is not None else None,
                }
                for decision_type, count, avg_price in breakdown_rows
            ],
            period=f"{target_month}/{target_year}",
        )

    def recent_activity(self, *, limit: int = DEFAULT_ACTIVITY_LIMIT) -> List[ActivityEvent]:
        """Newest batches, sessions and client sign-ups merged into one feed."""
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        limit = min(limit, MAX_ACTIVITY_LIMIT)

        events: List[ActivityEvent] = []
        batches = self._session.scalars(select(Batch).order_by(Batch.created_at.desc()).limit(limit))
        for batch in batches:
            events.append(
                ActivityEvent(
                    id=f"batch-{batch.id}",
                    type="ticket",
                    action="create",
                    description=f"إنشاء دفعة (تذكرة) #{batch.id}",
                    timestamp=as_utc(batch.created_at),
                    details={"batch_id": batch.id, "number_of_boxes": batch.number_of_boxes},
                )
            )

        sessions = self._session.scalars(
            select(PressingSession).order_by(PressingSession.created_at.desc()).limit(limit)
        )
        for pressing_session in sessions:
            finished = pressing_session.finish is not None
            events.append(
                ActivityEvent(
                    id=f"session-{pressing_session.id}",
                    type="room",
                    action="stop_batch" if finished else "start_batch",
                    description=(
                        f"إنهاء جلسة #{pressing_session.id}"
                        if finished
                        else f"بدء جلسة #{pressing_session.id}"
                    ),
                    timestamp=as_utc(pressing_session.created_at),
                    details={
                        "pressing_room_id": pressing_session.pressing_room_id,
                        "number_of_boxes": pressing_session.number_of_boxes,
                    },
                )
            )

        clients = self._session.scalars(select(Client).order_by(Client.created_at.desc()).limit(limit))
        for client in clients:
            events.append(
                ActivityEvent(
                    id=f"client-{client.id}",
                    type="client",
                    action="create",
                    description=f"تسجيل عميل: {client.firstname} {client.lastname}",
                    timestamp=as_utc(client.created_at),
                    details={"client_id": client.id},
                )
            )

        events.sort(key=lambda event: event.timestamp, reverse=True)
        return events[:limit]

    def shift_board(self, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Tickets received and sessions still running in the current operational day."""
        now = now or datetime.now(timezone.utc)
        day = compute_operational_day(now, self._zone)

        tickets = list(
            self._session.scalars(
                select(Batch).where(_received_during(day)).order_by(Batch.date_received.desc())
            )
        )
        running = list(
            self._session.scalars(
                select(PressingSession)
                .where(PressingSession.finish.is_(None))
                .order_by(PressingSession.start.asc())
            )
        )
        logger.debug("Built shift board", extra={"reason": f"{len(tickets)} tickets"})
        return {"day": day, "tickets": tickets, "sessions": running}
