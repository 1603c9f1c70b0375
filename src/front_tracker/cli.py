"""Command-line interface for the front tracker."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import typer

from .clock import SystemClock, ensure_utc
from .config import TrackerSettings
from .db import (
    SqliteSwitchLedger,
    database_connection,
    fetch_members,
    fetch_system,
    insert_member,
    insert_switch,
    insert_system,
)
from .errors import FrontTrackerError
from .models import System
from .paths import get_db_path
from .queries import FrontQueries
from .reporting import FrontReportPrinter

app = typer.Typer(help="Track which members of a system are fronting.")

DB_OPTION = typer.Option(
    None,
    "--db",
    path_type=Path,
    help="Location of the front tracker SQLite database.",
)


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@contextmanager
def _open_system(
    db_path: Optional[Path], ref: str
) -> Iterator[tuple[sqlite3.Connection, System]]:
    with database_connection(db_path or get_db_path()) as conn:
        try:
            yield conn, fetch_system(conn, ref)
        except FrontTrackerError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1) from exc


@app.command("add-system")
def add_system(
    hid: str = typer.Argument(..., help="Short identifier for the system."),
    name: Optional[str] = typer.Option(None, "--name", help="Display name."),
    zone: str = typer.Option("UTC", "--zone", help="IANA time zone used for display."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Register a new system."""
    with database_connection(db_path or get_db_path()) as conn:
        try:
            system = insert_system(conn, hid, name=name, zone=zone)
        except sqlite3.IntegrityError as exc:
            typer.echo(f"Error: a system with id {hid!r} already exists.", err=True)
            raise typer.Exit(code=1) from exc
    typer.echo(f"Created system {system.display_name} (id {system.id}).")


@app.command("add-member")
def add_member(
    system_ref: str = typer.Argument(..., metavar="SYSTEM"),
    name: str = typer.Argument(...),
    private: bool = typer.Option(False, "--private", help="Hide from public member counts."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Add a member to a system."""
    with _open_system(db_path, system_ref) as (conn, system):
        member = insert_member(conn, system, name, private=private)
    typer.echo(f"Added member {member.name} (id {member.id}).")


@app.command()
def switch(
    system_ref: str = typer.Argument(..., metavar="SYSTEM"),
    members: Optional[list[str]] = typer.Argument(
        None, help="Names of the members now fronting; omit to log no fronter."
    ),
    at: Optional[datetime] = typer.Option(
        None, "--at", help="Switch time (UTC). Defaults to now."
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Record a switch to the given members."""
    timestamp = ensure_utc(at) if at else SystemClock().now()
    with _open_system(db_path, system_ref) as (conn, system):
        by_name = {member.name.casefold(): member for member in fetch_members(conn, system)}
        missing = [name for name in members or [] if name.casefold() not in by_name]
        if missing:
            typer.echo(f"Error: unknown member(s): {', '.join(missing)}", err=True)
            raise typer.Exit(code=1)
        chosen = [by_name[name.casefold()] for name in members or []]
        if len({member.id for member in chosen}) != len(chosen):
            typer.echo("Error: duplicate members in switch list.", err=True)
            raise typer.Exit(code=1)
        latest = SqliteSwitchLedger(conn).latest_switch(system)
        if latest is not None and timestamp <= latest.timestamp:
            typer.echo("Error: switch time must be after the latest switch.", err=True)
            raise typer.Exit(code=1)
        new_switch = insert_switch(conn, system, timestamp, chosen)
    typer.echo(f"Switch {new_switch.id} registered at {new_switch.timestamp.isoformat()}.")


@app.command()
def fronter(
    system_ref: str = typer.Argument(..., metavar="SYSTEM"),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Show who is fronting right now."""
    with _open_system(db_path, system_ref) as (conn, system):
        queries = FrontQueries(SqliteSwitchLedger(conn))
        front = queries.current_front(system)
        FrontReportPrinter(system).print_fronter(front, queries.clock.now())


@app.command()
def history(
    system_ref: str = typer.Argument(..., metavar="SYSTEM"),
    page: int = typer.Option(1, "--page", min=1, help="History page to show."),
    page_size: Optional[int] = typer.Option(None, "--page-size", min=1),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Show the front history, newest first."""
    settings = TrackerSettings.from_values(page_size=page_size)
    with _open_system(db_path, system_ref) as (conn, system):
        queries = FrontQueries(SqliteSwitchLedger(conn), settings=settings)
        result = queries.history_page(system, page)
        FrontReportPrinter(system).print_history(result)


@app.command()
def breakdown(
    system_ref: str = typer.Argument(..., metavar="SYSTEM"),
    window: Optional[str] = typer.Argument(
        None, help="Range start, e.g. 30d, 2w 3d or 2024-01-05 14:00. Defaults to 30d."
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Show how much time each member fronted since the range start."""
    with _open_system(db_path, system_ref) as (conn, system):
        queries = FrontQueries(SqliteSwitchLedger(conn))
        result = queries.front_percent(system, window)
        FrontReportPrinter(system).print_breakdown(result)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the API."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the API."
    ),
    db_path: Optional[Path] = DB_OPTION,
    open_browser: bool = typer.Option(
        False,
        "--open-browser/--no-open-browser",
        help="Open the interactive API docs in your default browser.",
    ),
    page_size: Optional[int] = typer.Option(
        None, "--page-size", min=1, help="Entries per history page."
    ),
    char_limit: Optional[int] = typer.Option(
        None, "--char-limit", min=1, help="Character ceiling for one history page."
    ),
    window: Optional[str] = typer.Option(
        None, "--window", help="Breakdown range start used when a request gives none."
    ),
) -> None:
    """Serve the JSON API."""
    from . import server_runner

    settings = TrackerSettings.from_values(
        page_size=page_size, char_limit=char_limit, breakdown_window=window
    )
    server_runner.run_server(
        host=host,
        port=port,
        db_path=db_path or get_db_path(),
        settings=settings,
        open_browser=open_browser,
        log_level=logging.getLevelName(logging.getLogger().getEffectiveLevel()).lower(),
    )
