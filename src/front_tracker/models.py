"""Domain models for systems, members and the switch ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional


@dataclass(slots=True, frozen=True)
class System:
    """A group of members whose front is tracked."""

    id: int
    hid: str
    name: Optional[str] = None
    zone: str = "UTC"
    front_privacy: str = "public"
    front_history_privacy: str = "public"

    @property
    def display_name(self) -> str:
        return f"{self.name} (`{self.hid}`)" if self.name else f"`{self.hid}`"


@dataclass(slots=True, frozen=True)
class Member:
    id: int
    system_id: int
    name: str
    private: bool = False


@dataclass(slots=True, frozen=True)
class Switch:
    """A timestamped event carrying the complete new fronting set."""

    id: int
    system_id: int
    timestamp: datetime
    member_ids: tuple[int, ...] = ()


@dataclass(slots=True, frozen=True)
class FrontingInterval:
    """The span during which a switch's member set was the active front.

    ``end`` is ``None`` for the newest switch, which is still fronting.
    """

    switch: Switch
    start: datetime
    end: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.end is None

    def end_or(self, now: datetime) -> datetime:
        return self.end if self.end is not None else now

    def duration(self, now: datetime) -> timedelta:
        return self.end_or(now) - self.start


@dataclass(slots=True)
class OccupancyBreakdown:
    """Per-member fronting totals over ``[range_start, range_end)``.

    Members fronting together are each credited with the full overlap, so the
    sum of ``per_member`` can exceed the range length.
    """

    range_start: datetime
    range_end: datetime
    per_member: dict[int, timedelta] = field(default_factory=dict)
    no_fronter: timedelta = timedelta(0)
    members: dict[int, Member] = field(default_factory=dict)

    @property
    def range_length(self) -> timedelta:
        return self.range_end - self.range_start

    @property
    def total_fronted(self) -> timedelta:
        return sum(self.per_member.values(), timedelta(0))

    def ranked(self) -> list[tuple[int, timedelta]]:
        return sorted(self.per_member.items(), key=lambda item: item[1], reverse=True)


@dataclass(slots=True)
class Page:
    """One display page of formatted history entries."""

    number: int
    entries: list[str] = field(default_factory=list)
    overflowed: bool = False

    @property
    def text(self) -> str:
        return "".join(self.entries)
