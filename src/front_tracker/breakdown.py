"""Aggregate how long each member fronted within a time range."""

from __future__ import annotations

import logging
from collections import defaultdict
from contextlib import closing
from datetime import datetime, timedelta
from typing import Optional

from .clock import Clock, SystemClock, ensure_utc
from .errors import InvalidRange
from .intervals import reconstruct
from .ledger import SwitchLedger
from .models import Member, OccupancyBreakdown, System

logger = logging.getLogger(__name__)


def breakdown(
    ledger: SwitchLedger,
    system: System,
    range_start: datetime,
    range_end: datetime,
    *,
    clock: Optional[Clock] = None,
) -> OccupancyBreakdown:
    """Total fronting time per member over ``[range_start, range_end)``.

    Every member of a switch is credited with the whole overlap of that
    switch's interval, and intervals with an empty member set count towards
    ``no_fronter``. Scanning stops at the first interval that ends at or
    before ``range_start``.
    """
    range_start = ensure_utc(range_start)
    range_end = ensure_utc(range_end)
    if range_start > range_end:
        raise InvalidRange(range_start, range_end, "Range start must not be after range end.")

    now = (clock or SystemClock()).now()
    per_member: defaultdict[int, timedelta] = defaultdict(timedelta)
    members: dict[int, Member] = {}
    no_fronter = timedelta(0)
    scanned = 0

    with closing(reconstruct(ledger, system)) as intervals:
        for interval in intervals:
            scanned += 1
            if interval.end is not None and interval.end <= range_start:
                break
            overlap_start = max(interval.start, range_start)
            overlap_end = min(interval.end_or(now), range_end)
            if overlap_end <= overlap_start:
                continue
            overlap = overlap_end - overlap_start

            if not interval.switch.member_ids:
                no_fronter += overlap
                continue
            for member_id in dict.fromkeys(interval.switch.member_ids):
                per_member[member_id] += overlap
            if any(member_id not in members for member_id in interval.switch.member_ids):
                for member in ledger.switch_members(interval.switch):
                    members.setdefault(member.id, member)

    logger.debug(
        "Breakdown for system %s scanned %d intervals over %s..%s",
        system.id,
        scanned,
        range_start.isoformat(),
        range_end.isoformat(),
    )
    return OccupancyBreakdown(
        range_start=range_start,
        range_end=range_end,
        per_member=dict(per_member),
        no_fronter=no_fronter,
        members=members,
    )
