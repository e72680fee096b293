from __future__ import annotations

from datetime import datetime, tzinfo
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from app.dependencies import get_now, get_session, get_zone
from models.tables import as_utc
from services.batches import BatchService
from services.dashboard import DashboardService
from services.day_system import format_within_operational_day, shift_label
from services.errors import NotFoundError


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
def ui_index(
    request: Request,
    session: Session = Depends(get_session),
    zone: tzinfo = Depends(get_zone),
    now: datetime = Depends(get_now),
) -> HTMLResponse:
    board = DashboardService(session, zone).shift_board(now=now)
    day = board["day"]

    def received_at(value: datetime) -> str:
        return format_within_operational_day(as_utc(value), now, zone)

    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "day": day,
            "shift": shift_label(day),
            "tickets": board["tickets"],
            "sessions": board["sessions"],
            "received_at": received_at,
        },
    )


@router.get("/ui/tickets/{batch_id}", name="ui_ticket_detail", response_class=HTMLResponse)
def ui_ticket_detail(
    request: Request,
    batch_id: int,
    session: Session = Depends(get_session),
    zone: tzinfo = Depends(get_zone),
    now: datetime = Depends(get_now),
) -> HTMLResponse:
    try:
        batch = BatchService(session).get_batch(batch_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.message,
        ) from exc

    return templates.TemplateResponse(
        request,
        "ui/ticket.html",
        {
            "batch": batch,
            "ticket_code": f"TKT{batch.id:06d}",
            "received_at": format_within_operational_day(as_utc(batch.date_received), now, zone),
        },
    )
