from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value if value is not None else '-'}")


def render_operational_day(payload: Dict[str, Any]) -> None:
    echo_heading("Operational Day")
    echo_key_values(
        [
            ("timezone", payload.get("timezone")),
            ("current_day", payload.get("current_day")),
            ("day_start", payload.get("day_start")),
            ("day_end", payload.get("day_end")),
            ("shift", payload.get("shift_label")),
            ("night_shift", payload.get("is_night_shift")),
            ("progress", f"{payload.get('progress_percent', 0)}%"),
        ]
    )


def render_ticket(payload: Dict[str, Any]) -> None:
    client = payload.get("client") or {}
    client_name = " ".join(part for part in (client.get("firstname"), client.get("lastname")) if part)
    echo_heading(f"Ticket {payload.get('ticket_code')}")
    echo_key_values(
        [
            ("client", client_name or payload.get("client_id")),
            ("status", payload.get("ticket_status")),
            ("batch_status", payload.get("status")),
            ("received", payload.get("date_received")),
            ("weight_in", payload.get("weight_in")),
            ("weight_out", payload.get("weight_out")),
            ("net_weight", payload.get("net_weight")),
            ("boxes", payload.get("number_of_boxes")),
            ("unit_price", payload.get("unit_price")),
            ("total_amount", payload.get("total_amount")),
            ("paid", payload.get("is_paid")),
        ]
    )


def render_clients(payload: Dict[str, Any]) -> None:
    clients = payload.get("clients") or []
    pagination = payload.get("pagination") or {}
    echo_heading(f"Clients (page {pagination.get('page', 1)} of {pagination.get('pages', 0)})")
    if not clients:
        typer.echo("No clients found.")
        return
    for client in clients:
        batches = client.get("batches") or []
        typer.echo(
            f"  - #{client.get('id')} {client.get('firstname')} {client.get('lastname')}"
            f" ({client.get('phone')}) batches={len(batches)}"
        )
    typer.echo(f"total: {pagination.get('total', len(clients))}")


def render_overview(payload: Dict[str, Any]) -> None:
    metrics = payload.get("metrics") or {}
    echo_heading("Dashboard")
    if not metrics:
        typer.echo("No metrics available.")
        return
    echo_key_values(sorted(metrics.items()))
