from __future__ import annotations

from dataclasses import dataclass
from typing import NoReturn, Optional

import typer

from cli.client import ApiClient, ApiError
from cli.config import CLIConfig, load_config
from cli.fallback import update_ticket_with_fallback
from cli.render import render_clients, render_operational_day, render_overview, render_ticket
from cli.tickets import build_ticket_update, parse_ticket_code, ticket_form
from logging_config import configure_logging
from models.records import TicketStatus


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for working with the olive mill management API.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
ticket_app = typer.Typer(help="Inspect and edit weighing tickets.")
app.add_typer(ticket_app, name="ticket")


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _fail(exc: ApiError) -> NoReturn:
    typer.secho(f"Error: {exc.message} (HTTP {exc.status_code})", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def _ticket_id(value: str) -> int:
    try:
        return parse_ticket_code(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Mill API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    token: Optional[str] = typer.Option(
        None,
        "--token",
        help="Bearer token (defaults to OLIVE_MILL_TOKEN env).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log requests and ticket update route misses to stderr.",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging("DEBUG" if verbose else "WARNING", stream="ext://sys.stderr", force=True)
    config = load_config(base_url=base_url, token=token, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("login")
def login_command(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", "-e", prompt=True),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
) -> None:
    """Log in and print a token for OLIVE_MILL_TOKEN."""
    state = _get_state(ctx)
    try:
        session = state.client.login(email, password)
    except ApiError as exc:
        _fail(exc)
    role = session.role.value if session.role else "-"
    typer.secho(f"Logged in as {session.user.get('email', email)} ({role}).", fg=typer.colors.GREEN)
    typer.echo(session.token)
    typer.echo("Export it to reuse: export OLIVE_MILL_TOKEN=<token>")


@app.command("day")
def day_command(
    ctx: typer.Context,
    language: str = typer.Option("ar", "--language", "-l", help="Shift label language: ar or en."),
) -> None:
    """Show the current operational day of the mill."""
    state = _get_state(ctx)
    try:
        payload = state.client.get("/dashboard/operational-day", params={"language": language})
    except ApiError as exc:
        _fail(exc)
    render_operational_day(payload)


@app.command("clients")
def clients_command(
    ctx: typer.Context,
    page: int = typer.Option(1, "--page", min=1),
    limit: int = typer.Option(10, "--limit", min=1, max=100),
    search: Optional[str] = typer.Option(None, "--search", "-s"),
) -> None:
    """List clients with their batches."""
    state = _get_state(ctx)
    try:
        payload = state.client.get("/clients", params={"page": page, "limit": limit, "search": search})
    except ApiError as exc:
        _fail(exc)
    render_clients(payload)


@app.command("dashboard")
def dashboard_command(ctx: typer.Context) -> None:
    """Show the dashboard overview metrics."""
    state = _get_state(ctx)
    try:
        payload = state.client.get("/dashboard/overview")
    except ApiError as exc:
        _fail(exc)
    render_overview(payload)


@ticket_app.command("show")
def ticket_show_command(
    ctx: typer.Context,
    ticket: str = typer.Argument(..., help="Ticket id or QR code such as TKT000042."),
) -> None:
    """Show a ticket by id or scanned code."""
    state = _get_state(ctx)
    ticket_id = _ticket_id(ticket)
    try:
        payload = state.client.get(f"/batches/{ticket_id}")
    except ApiError as exc:
        _fail(exc)
    render_ticket(payload)


@ticket_app.command("update")
def ticket_update_command(
    ctx: typer.Context,
    ticket: str = typer.Argument(..., help="Ticket id or QR code such as TKT000042."),
    weight_in: Optional[float] = typer.Option(None, "--weight-in", help="Gross weight in kg."),
    weight_out: Optional[float] = typer.Option(None, "--weight-out", help="Tare weight in kg."),
    unit_price: Optional[float] = typer.Option(None, "--unit-price"),
    boxes: Optional[int] = typer.Option(None, "--boxes", min=0),
    status: Optional[TicketStatus] = typer.Option(None, "--status", case_sensitive=False),
    amount_paid: Optional[float] = typer.Option(None, "--amount-paid"),
) -> None:
    """Edit a ticket, probing the known update routes in order.

    The ticket is fetched first; options left out keep their current values.
    """
    state = _get_state(ctx)
    ticket_id = _ticket_id(ticket)
    try:
        current = state.client.get(f"/batches/{ticket_id}")
    except ApiError as exc:
        _fail(exc)

    form = ticket_form(current)
    given = {
        "weight_in": weight_in,
        "weight_out": weight_out,
        "unit_price": unit_price,
        "number_of_boxes": boxes,
        "status": status,
        "amount_paid": amount_paid,
    }
    form.update({key: value for key, value in given.items() if value is not None})
    try:
        payload = build_ticket_update(**form)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        result = update_ticket_with_fallback(state.client, ticket_id, payload)
    except ApiError as exc:
        _fail(exc)
    typer.secho(f"Ticket {ticket_id} updated.", fg=typer.colors.GREEN)
    if isinstance(result, dict):
        render_ticket(result)
