"""Format front history entries and split them into size-bounded pages."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Iterator, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .clock import Clock, SystemClock
from .intervals import reconstruct
from .ledger import SwitchLedger
from .models import FrontingInterval, Member, Page, System

logger = logging.getLogger(__name__)

NO_FRONTER = "no fronter"
TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S %Z"
ELLIPSIS = "…"


def resolve_zone(name: Optional[str]) -> ZoneInfo:
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown time zone %r; falling back to UTC.", name)
        return ZoneInfo("UTC")


def format_timestamp(value: datetime, zone: Optional[str] = None) -> str:
    return value.astimezone(resolve_zone(zone)).strftime(TIMESTAMP_FMT)


def format_duration(value: timedelta) -> str:
    """Render a duration as e.g. ``2d 3h 15m``; sub-minute spans show seconds."""
    total_seconds = max(int(value.total_seconds()), 0)
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)
    if not (days or hours or minutes):
        return f"{seconds}s"
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    return " ".join(parts)


def format_members(members: Sequence[Member]) -> str:
    return ", ".join(member.name for member in members) if members else NO_FRONTER


def format_history_entry(
    interval: FrontingInterval,
    members: Sequence[Member],
    zone: Optional[str],
    now: datetime,
) -> str:
    when = format_timestamp(interval.start, zone)
    ago = format_duration(now - interval.start)
    if interval.is_open:
        return f"**{format_members(members)}** ({when}, {ago} ago)\n"
    lasted = format_duration(interval.duration(now))
    return f"**{format_members(members)}** ({when}, {ago} ago, for {lasted})\n"


def history_entries(
    ledger: SwitchLedger, system: System, *, clock: Optional[Clock] = None
) -> Iterator[str]:
    """Lazily format every fronting interval of the system, newest first."""
    now = (clock or SystemClock()).now()
    for interval in reconstruct(ledger, system):
        members = ledger.switch_members(interval.switch)
        yield format_history_entry(interval, members, system.zone, now)


def paginate(entries: Iterable[str], page_size: int, char_limit: int) -> Iterator[Page]:
    """Group entries into pages of at most ``page_size`` entries.

    A page never holds more than ``char_limit`` characters. An entry that
    would overflow the current page starts the next one instead; an entry that
    is too long even for an empty page is cut down to fit.
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    if char_limit < 1:
        raise ValueError("char_limit must be at least 1")

    iterator = iter(entries)
    carried: Optional[str] = None
    number = 1
    while True:
        page = Page(number=number)
        used = 0
        while len(page.entries) < page_size:
            if carried is not None:
                entry, carried = carried, None
            else:
                entry = next(iterator, None)
                if entry is None:
                    break
            if len(entry) > char_limit:
                logger.debug("Truncating %d character entry to %d.", len(entry), char_limit)
                entry = entry[: char_limit - 1] + ELLIPSIS if char_limit > 1 else entry[:char_limit]
            if used + len(entry) > char_limit:
                carried = entry
                page.overflowed = True
                break
            page.entries.append(entry)
            used += len(entry)
        if not page.entries:
            return
        yield page
        number += 1
