"""Rebuild fronting intervals from a system's switch ledger."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Iterator, Optional

from .errors import TimestampCollision
from .ledger import SwitchLedger
from .models import FrontingInterval, Switch, System

logger = logging.getLogger(__name__)


def reconstruct(ledger: SwitchLedger, system: System) -> Iterator[FrontingInterval]:
    """Yield one interval per switch, newest first.

    Each interval ends where the next newer switch starts; the newest one is
    left open. The ledger is read lazily, so callers may stop iterating at
    any point without touching older history.
    """
    return pair_switches(ledger.switches(system), system_id=system.id)


def pair_switches(
    switches: Iterable[Switch], *, system_id: Optional[int] = None
) -> Iterator[FrontingInterval]:
    """Pair each switch in a newest-first stream with its newer neighbour."""
    newer: Optional[datetime] = None
    for switch in switches:
        if newer is not None and switch.timestamp >= newer:
            owner = system_id if system_id is not None else switch.system_id
            logger.error(
                "Switch %s of system %s at %s is not older than the switch after it (%s).",
                switch.id,
                owner,
                switch.timestamp.isoformat(),
                newer.isoformat(),
            )
            raise TimestampCollision(owner, switch.timestamp)
        yield FrontingInterval(switch=switch, start=switch.timestamp, end=newer)
        newer = switch.timestamp
