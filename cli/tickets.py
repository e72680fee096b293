"""Ticket helpers: QR code parsing and edit payload derivation."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

from models.records import BatchStatus, TicketStatus

_DIGITS = re.compile(r"\d+")


def parse_ticket_code(text: str) -> int:
    """Extract the ticket id from QR content such as ``TKT000042``."""
    match = _DIGITS.search(text or "")
    if match is None or int(match.group()) <= 0:
        raise ValueError(f"No ticket number found in {text!r}.")
    return int(match.group())


def _parse_instant(value: Any) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def ticket_form(ticket: Mapping[str, Any]) -> Dict[str, Any]:
    """Current values of a fetched ticket, keyed like ``build_ticket_update``.

    Used as edit defaults so fields the operator leaves alone are sent back
    unchanged.
    """
    status = ticket.get("ticket_status")
    if status is None and ticket.get("status"):
        status = TicketStatus.from_batch_status(BatchStatus(ticket["status"]))
    return {
        "weight_in": ticket.get("weight_in"),
        "weight_out": ticket.get("weight_out"),
        "unit_price": ticket.get("unit_price") or 0.0,
        "number_of_boxes": ticket.get("number_of_boxes") or 0,
        "status": status or TicketStatus.draft,
        "amount_paid": ticket.get("amount_paid"),
        "now": _parse_instant(ticket.get("date_paid")),
    }


def build_ticket_update(
    *,
    weight_in: Optional[float],
    weight_out: Optional[float] = None,
    unit_price: float = 0.0,
    number_of_boxes: int = 0,
    status: Union[TicketStatus, str] = TicketStatus.draft,
    amount_paid: Optional[float] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Derive the batch update body for an edited ticket.

    Net weight is ``weight_in - weight_out`` (never negative), or ``weight_in``
    when the truck has not been weighed out yet. A ticket marked paid carries
    ``is_paid`` and the payment time.
    """
    if weight_in is None or not weight_in > 0:
        raise ValueError("weight_in must be greater than zero.")
    if weight_out is not None and weight_out >= weight_in:
        raise ValueError("weight_out must be less than weight_in.")

    net_weight = weight_in if weight_out is None else max(0.0, weight_in - weight_out)
    status = TicketStatus(status)
    is_paid = status == TicketStatus.paid

    payload: Dict[str, Any] = {
        "weight_in": round(weight_in),
        "net_weight": round(net_weight),
        "number_of_boxes": max(0, number_of_boxes),
        "unit_price": unit_price,
        "total_amount": round(net_weight * unit_price, 2),
        "status": status.to_batch_status().value,
        "is_paid": is_paid,
    }
    if weight_out is not None:
        payload["weight_out"] = round(weight_out)
    if amount_paid is not None:
        payload["amount_paid"] = amount_paid
    if is_paid:
        payload["date_paid"] = (now or datetime.now(timezone.utc)).isoformat()
    return payload
