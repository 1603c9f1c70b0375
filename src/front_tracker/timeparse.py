"""Parse user supplied range starts such as ``30d`` or ``2024-01-05 14:00``."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from .errors import InvalidDateTime
from .presentation import resolve_zone

_UNIT_SECONDS = {
    "y": 365 * 86400,
    "w": 7 * 86400,
    "d": 86400,
    "h": 3600,
    "m": 60,
    "s": 1,
}

_DURATION_TOKEN = re.compile(r"(\d+)\s*([ywdhms])", re.IGNORECASE)
_DURATION_FULL = re.compile(r"^(\s*\d+\s*[ywdhms]\s*)+$", re.IGNORECASE)

_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d",
)
_TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def parse_duration(value: str) -> Optional[timedelta]:
    """Parse ``"2w 3d"``-style strings; returns ``None`` if the value is not one."""
    if not _DURATION_FULL.match(value):
        return None
    seconds = sum(
        int(amount) * _UNIT_SECONDS[unit.lower()]
        for amount, unit in _DURATION_TOKEN.findall(value)
    )
    return timedelta(seconds=seconds)


def parse_range_start(value: str, now: datetime, zone: Optional[str] = None) -> datetime:
    """Resolve a relative duration or a local date/time into a UTC instant.

    Durations count back from ``now``. Absolute values are read in ``zone``;
    a bare time of day refers to its latest occurrence not after ``now``.
    """
    text = value.strip()
    if not text:
        raise InvalidDateTime(value)

    try:
        duration = parse_duration(text)
        if duration is not None:
            return now - duration
    except OverflowError as exc:
        raise InvalidDateTime(value) from exc

    tz = resolve_zone(zone)
    for fmt in _DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        try:
            return parsed.replace(tzinfo=tz).astimezone(timezone.utc)
        except OverflowError as exc:
            raise InvalidDateTime(value) from exc

    local_now = now.astimezone(tz)
    for fmt in _TIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        candidate = local_now.replace(
            hour=parsed.hour, minute=parsed.minute, second=parsed.second, microsecond=0
        )
        try:
            if candidate > local_now:
                candidate -= timedelta(days=1)
            return candidate.astimezone(timezone.utc)
        except OverflowError as exc:
            raise InvalidDateTime(value) from exc

    raise InvalidDateTime(value)
