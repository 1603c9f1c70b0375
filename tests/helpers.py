from datetime import datetime, timedelta, timezone
from typing import Iterator

from front_tracker.ledger import InMemorySwitchLedger
from front_tracker.models import Switch, System

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def at(minutes: float) -> datetime:
    return BASE + timedelta(minutes=minutes)


def mins(value: float) -> timedelta:
    return timedelta(minutes=value)


class CountingLedger(InMemorySwitchLedger):
    """Records how many switches were pulled from the ledger."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.pulled = 0

    def switches(self, system: System) -> Iterator[Switch]:
        for switch in super().switches(system):
            self.pulled += 1
            yield switch


def build_ledger(system, members, entries, cls=InMemorySwitchLedger):
    """``entries`` is a list of ``(minute, [member, ...])`` in any order."""
    switches = [
        Switch(
            id=index + 1,
            system_id=system.id,
            timestamp=at(minute),
            member_ids=tuple(member.id for member in fronters),
        )
        for index, (minute, fronters) in enumerate(entries)
    ]
    return cls(members=members, switches=switches)
