"""FastAPI application that exposes a local JSON API for front tracking."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from .clock import Clock, SystemClock, ensure_utc
from .config import TrackerSettings
from .db import (
    SqliteSwitchLedger,
    database_connection,
    fetch_members,
    fetch_system,
    insert_switch,
)
from .errors import (
    FrontTrackerError,
    InvalidDateTime,
    InvalidRange,
    NoRegisteredSwitches,
    SystemNotFound,
    TimestampCollision,
)
from .models import Member, System
from .paths import get_db_path
from .presentation import format_duration
from .queries import FrontQueries
from .reporting import percentage

logger = logging.getLogger(__name__)


class SwitchPayload(BaseModel):
    member_ids: list[int] = []
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    db_path: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_db_path = Path(db_path or get_db_path())
    resolved_settings = settings or TrackerSettings()
    resolved_clock = clock or SystemClock()

    app = FastAPI(title="Front Tracker", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.db_path = resolved_db_path

    @contextmanager
    def open_system(request: Request, hid: str) -> Iterator[tuple[System, FrontQueries]]:
        with database_connection(request.app.state.db_path) as conn:
            with translate_errors():
                system = fetch_system(conn, hid)
                queries = FrontQueries(
                    SqliteSwitchLedger(conn), settings=resolved_settings, clock=resolved_clock
                )
                yield system, queries

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        return {
            "database_path": str(request.app.state.db_path),
            "history_page_size": resolved_settings.history_page_size,
            "page_char_limit": resolved_settings.page_char_limit,
            "default_breakdown_window": resolved_settings.default_breakdown_window,
        }

    @app.get("/api/systems/{hid}")
    def system_card(hid: str, request: Request) -> Dict[str, Any]:
        with open_system(request, hid) as (system, queries):
            ledger = queries.ledger
            return {
                "id": system.id,
                "hid": system.hid,
                "name": system.name,
                "zone": system.zone,
                "member_count": ledger.member_count(system),
                "public_member_count": ledger.member_count(system, include_private=False),
                "switch_count": ledger.switch_count(system),
            }

    @app.get("/api/systems/{hid}/fronters")
    def fronters(hid: str, request: Request) -> Dict[str, Any]:
        with open_system(request, hid) as (system, queries):
            front = queries.current_front(system)
        return {
            "system": system.hid,
            "switch_id": front.switch.id,
            "timestamp": front.switch.timestamp.isoformat(),
            "members": [_member_payload(member) for member in front.members],
        }

    @app.get("/api/systems/{hid}/history")
    def history(
        hid: str,
        request: Request,
        page: int = Query(default=1, ge=1, description="1-based history page."),
    ) -> Dict[str, Any]:
        with open_system(request, hid) as (system, queries):
            result = queries.history_page(system, page)
        return {
            "system": system.hid,
            "page": result.page.number,
            "total_switches": result.total_switches,
            "overflowed": result.page.overflowed,
            "text": result.page.text,
            "entries": result.page.entries,
        }

    @app.get("/api/systems/{hid}/breakdown")
    def front_percent(
        hid: str,
        request: Request,
        start: Optional[str] = Query(
            default=None,
            description="Range start: a duration such as 30d or a local date/time.",
        ),
    ) -> Dict[str, Any]:
        with open_system(request, hid) as (system, queries):
            result = queries.front_percent(system, start)
        total = result.range_length
        members_payload = []
        for member_id, duration in result.ranked():
            member = result.members.get(member_id)
            members_payload.append(
                {
                    "id": member_id,
                    "name": member.name if member else None,
                    "seconds": duration.total_seconds(),
                    "percent": percentage(duration, total),
                    "display": format_duration(duration),
                }
            )
        return {
            "system": system.hid,
            "range_start": result.range_start.isoformat(),
            "range_end": result.range_end.isoformat(),
            "range_seconds": total.total_seconds(),
            "members": members_payload,
            "no_fronter_seconds": result.no_fronter.total_seconds(),
            "no_fronter_percent": percentage(result.no_fronter, total),
        }

    @app.post("/api/systems/{hid}/switches")
    def create_switch(hid: str, payload: SwitchPayload, request: Request) -> Dict[str, Any]:
        timestamp = ensure_utc(payload.timestamp) if payload.timestamp else resolved_clock.now()
        with database_connection(request.app.state.db_path) as conn:
            with translate_errors():
                system = fetch_system(conn, hid)
            known = {member.id: member for member in fetch_members(conn, system)}
            unknown = [member_id for member_id in payload.member_ids if member_id not in known]
            if unknown:
                raise HTTPException(
                    status_code=400, detail=f"Members not in this system: {unknown}"
                )
            if len(set(payload.member_ids)) != len(payload.member_ids):
                raise HTTPException(
                    status_code=400, detail="Duplicate members in switch list."
                )
            latest = SqliteSwitchLedger(conn).latest_switch(system)
            if latest is not None and timestamp <= latest.timestamp:
                raise HTTPException(
                    status_code=400,
                    detail="Switch timestamp must be after the latest switch.",
                )
            switch = insert_switch(
                conn, system, timestamp, [known[member_id] for member_id in payload.member_ids]
            )
        logger.info("Logged switch %s for system %s.", switch.id, system.hid)
        return {
            "id": switch.id,
            "timestamp": switch.timestamp.isoformat(),
            "member_ids": list(switch.member_ids),
        }

    return app


@contextmanager
def translate_errors() -> Iterator[None]:
    """Map domain errors onto HTTP responses."""
    try:
        yield
    except (SystemNotFound, NoRegisteredSwitches) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (InvalidRange, InvalidDateTime, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TimestampCollision as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except FrontTrackerError as exc:
        logger.exception("Unhandled front tracker error")
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except sqlite3.Error as exc:
        logger.exception("Database error")
        raise HTTPException(status_code=500, detail="Database error") from exc


def _member_payload(member: Member) -> Dict[str, Any]:
    return {"id": member.id, "name": member.name}
