from __future__ import annotations

from datetime import datetime, timezone

import pytest

from cli.tickets import build_ticket_update, parse_ticket_code, ticket_form
from models.records import TicketStatus


@pytest.mark.parametrize(
    ("text", "expected"),
    [("TKT000042", 42), ("42", 42), ("  tkt000001 ", 1), ("ticket TKT123456", 123456)],
)
def test_parse_ticket_code(text: str, expected: int) -> None:
    assert parse_ticket_code(text) == expected


@pytest.mark.parametrize("text", ["", "TKT", "TKT000000", "no digits here"])
def test_parse_ticket_code_rejects_missing_numbers(text: str) -> None:
    with pytest.raises(ValueError):
        parse_ticket_code(text)


def test_draft_update_without_weigh_out() -> None:
    payload = build_ticket_update(weight_in=1000, unit_price=1.5, number_of_boxes=30)

    assert payload == {
        "weight_in": 1000,
        "net_weight": 1000,
        "number_of_boxes": 30,
        "unit_price": 1.5,
        "total_amount": 1500.0,
        "status": "received",
        "is_paid": False,
    }


def test_paid_update_sets_payment_fields() -> None:
    now = datetime(2024, 11, 10, 9, 30, tzinfo=timezone.utc)

    payload = build_ticket_update(
        weight_in=1000,
        weight_out=250,
        unit_price=2.0,
        status=TicketStatus.paid,
        amount_paid=1500,
        now=now,
    )

    assert payload["net_weight"] == 750
    assert payload["weight_out"] == 250
    assert payload["total_amount"] == 1500.0
    assert payload["status"] == "completed"
    assert payload["is_paid"] is True
    assert payload["amount_paid"] == 1500
    assert payload["date_paid"] == "2024-11-10T09:30:00+00:00"


def test_confirmed_maps_to_in_process() -> None:
    assert build_ticket_update(weight_in=10, status="confirmed")["status"] == "in_process"


@pytest.mark.parametrize(
    ("weight_in", "weight_out"),
    [(0, None), (-5, None), (100, 100), (100, 120)],
)
def test_invalid_weights_are_rejected(weight_in: float, weight_out: float | None) -> None:
    with pytest.raises(ValueError):
        build_ticket_update(weight_in=weight_in, weight_out=weight_out)


def test_ticket_form_reads_current_values() -> None:
    form = ticket_form(
        {
            "weight_in": 1500,
            "weight_out": 300,
            "number_of_boxes": 40,
            "unit_price": None,
            "status": "completed",
            "amount_paid": 900.0,
            "date_paid": "2024-11-10T09:30:00Z",
        }
    )

    assert form == {
        "weight_in": 1500,
        "weight_out": 300,
        "unit_price": 0.0,
        "number_of_boxes": 40,
        "status": TicketStatus.paid,
        "amount_paid": 900.0,
        "now": datetime(2024, 11, 10, 9, 30, tzinfo=timezone.utc),
    }
    assert build_ticket_update(**form)["date_paid"] == "2024-11-10T09:30:00+00:00"


def test_ticket_form_prefers_ticket_status() -> None:
    form = ticket_form({"weight_in": 10, "status": "received", "ticket_status": "confirmed"})

    assert form["status"] == "confirmed"
    assert form["now"] is None
    assert build_ticket_update(**form)["status"] == "in_process"


def test_missing_gross_weight_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_ticket_update(**ticket_form({"net_weight": 1200, "status": "received"}))
