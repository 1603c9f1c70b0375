"""Request-level front queries shared by the CLI and the web API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import islice
from typing import Optional

from .breakdown import breakdown
from .clock import Clock, SystemClock
from .config import TrackerSettings
from .errors import InvalidRange, NoRegisteredSwitches
from .ledger import SwitchLedger
from .models import Member, OccupancyBreakdown, Page, Switch, System
from .presentation import history_entries, paginate
from .timeparse import parse_range_start

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CurrentFront:
    switch: Switch
    members: list[Member]


@dataclass(slots=True)
class HistoryPage:
    page: Page
    total_switches: int


class FrontQueries:
    """Answer fronter, front history and front percent requests for a ledger."""

    def __init__(
        self,
        ledger: SwitchLedger,
        settings: Optional[TrackerSettings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.ledger = ledger
        self.settings = settings or TrackerSettings()
        self.clock = clock or SystemClock()

    def current_front(self, system: System) -> CurrentFront:
        switch = self.ledger.latest_switch(system)
        if switch is None:
            raise NoRegisteredSwitches()
        return CurrentFront(switch=switch, members=self.ledger.switch_members(switch))

    def history_page(self, system: System, page_number: int = 1) -> HistoryPage:
        if page_number < 1:
            raise ValueError("page_number must be at least 1")
        total = self.ledger.switch_count(system)
        if total == 0:
            raise NoRegisteredSwitches()

        pages = paginate(
            history_entries(self.ledger, system, clock=self.clock),
            self.settings.history_page_size,
            self.settings.page_char_limit,
        )
        page = next(islice(pages, page_number - 1, None), None)
        pages.close()
        if page is None:
            logger.debug("History page %d of system %s is empty.", page_number, system.id)
            page = Page(number=page_number)
        return HistoryPage(page=page, total_switches=total)

    def front_percent(self, system: System, window: Optional[str] = None) -> OccupancyBreakdown:
        """Breakdown from the start given by ``window`` up to now."""
        now = self.clock.now()
        range_start = parse_range_start(
            window or self.settings.default_breakdown_window, now, system.zone
        )
        if range_start > now:
            raise InvalidRange(
                range_start, now, "Cannot get the front percent between now and a time in the future."
            )
        return breakdown(self.ledger, system, range_start, now, clock=self.clock)
