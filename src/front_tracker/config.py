"""Configuration models and helpers for the front tracker."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TrackerSettings:
    """Presentation and query defaults."""

    history_page_size: int = 10
    page_char_limit: int = 2048
    default_breakdown_window: str = "30d"

    @classmethod
    def from_values(
        cls,
        page_size: int | None = None,
        char_limit: int | None = None,
        breakdown_window: str | None = None,
    ) -> "TrackerSettings":
        defaults = cls()
        return cls(
            history_page_size=page_size if page_size is not None else defaults.history_page_size,
            page_char_limit=char_limit if char_limit is not None else defaults.page_char_limit,
            default_breakdown_window=breakdown_window or defaults.default_breakdown_window,
        )
