"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from .models import OccupancyBreakdown, System
from .presentation import NO_FRONTER, format_duration, format_members, format_timestamp
from .queries import CurrentFront, HistoryPage


class FrontReportPrinter:
    """Render human-readable front reports in the console."""

    def __init__(self, system: System) -> None:
        self.system = system

    def print_fronter(self, front: CurrentFront, now: datetime) -> None:
        since = front.switch.timestamp
        print(f"Current fronter(s) of {self.system.display_name}")
        print("-" * 40)
        print(f"Fronting: {format_members(front.members)}")
        print(
            f"Since:    {format_timestamp(since, self.system.zone)} "
            f"({format_duration(now - since)} ago)"
        )

    def print_history(self, history: HistoryPage) -> None:
        print(f"Front history of {self.system.display_name}")
        print("-" * 40)
        if not history.page.entries:
            print(f"No entries on page {history.page.number}.")
            return
        print(history.page.text, end="")
        print(f"Page {history.page.number} ({history.total_switches} switches total)")

    def print_breakdown(self, result: OccupancyBreakdown) -> None:
        zone = self.system.zone
        print(f"Frontpercent of {self.system.display_name}")
        print(
            f"Since {format_timestamp(result.range_start, zone)} "
            f"({format_duration(result.range_length)} ago)"
        )
        print("-" * 40)
        if not result.per_member and not result.no_fronter:
            print("No frontpercent data available.")
            return
        for member_id, duration in result.ranked():
            member = result.members.get(member_id)
            name = member.name if member else f"member {member_id}"
            print(f"  {name[:30]:<30} {format_share(duration, result.range_length)}")
        if result.no_fronter:
            print(f"  {NO_FRONTER:<30} {format_share(result.no_fronter, result.range_length)}")


def format_share(duration: timedelta, total: timedelta) -> str:
    percent = percentage(duration, total)
    label = f"{percent:.1f}%" if percent is not None else "-"
    return f"{label:>7} ({format_duration(duration)})"


def percentage(duration: timedelta, total: timedelta) -> Optional[float]:
    if total <= timedelta(0):
        return None
    return duration / total * 100
