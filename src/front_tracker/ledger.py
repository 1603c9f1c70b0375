"""The switch ledger interface and an in-memory implementation."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional, Protocol

from .models import Member, Switch, System


class SwitchLedger(Protocol):
    """Read access to a system's switch history, newest first."""

    def latest_switch(self, system: System) -> Optional[Switch]:
        ...

    def switches(self, system: System) -> Iterator[Switch]:
        ...

    def switch_members(self, switch: Switch) -> list[Member]:
        ...

    def switch_count(self, system: System) -> int:
        ...

    def member_count(self, system: System, *, include_private: bool = True) -> int:
        ...


class InMemorySwitchLedger:
    """Keeps switches and members in memory, mainly for tests and embedding."""

    def __init__(
        self,
        members: Iterable[Member] = (),
        switches: Iterable[Switch] = (),
    ) -> None:
        self._members: dict[int, Member] = {}
        self._switches: dict[int, list[Switch]] = {}
        for member in members:
            self.add_member(member)
        for switch in switches:
            self.add_switch(switch)

    def add_member(self, member: Member) -> None:
        self._members[member.id] = member

    def add_switch(self, switch: Switch) -> None:
        entries = self._switches.setdefault(switch.system_id, [])
        entries.insert(0, switch)
        # Equal timestamps: latest insertion first, same as the SQLite id tiebreak.
        entries.sort(key=lambda sw: sw.timestamp, reverse=True)

    def latest_switch(self, system: System) -> Optional[Switch]:
        entries = self._switches.get(system.id)
        return entries[0] if entries else None

    def switches(self, system: System) -> Iterator[Switch]:
        yield from list(self._switches.get(system.id, ()))

    def switch_members(self, switch: Switch) -> list[Member]:
        return [self._members[member_id] for member_id in switch.member_ids]

    def switch_count(self, system: System) -> int:
        return len(self._switches.get(system.id, ()))

    def member_count(self, system: System, *, include_private: bool = True) -> int:
        return sum(
            1
            for member in self._members.values()
            if member.system_id == system.id and (include_private or not member.private)
        )
