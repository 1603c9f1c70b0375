"""Exceptions raised by the front tracker."""

from __future__ import annotations

from datetime import datetime


class FrontTrackerError(Exception):
    """Base class for all front tracker errors."""


class SystemNotFound(FrontTrackerError):
    def __init__(self, ref: object) -> None:
        super().__init__(f"No system found for {ref!r}")
        self.ref = ref


class NoRegisteredSwitches(FrontTrackerError):
    def __init__(self) -> None:
        super().__init__("System has no registered switches.")


class InvalidRange(FrontTrackerError):
    def __init__(self, range_start: datetime, range_end: datetime, reason: str) -> None:
        super().__init__(reason)
        self.range_start = range_start
        self.range_end = range_end


class InvalidDateTime(FrontTrackerError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Could not parse {value!r} as a valid duration or date/time.")
        self.value = value


class TimestampCollision(FrontTrackerError):
    """Two switches of one system are not strictly ordered by timestamp."""

    def __init__(self, system_id: int, timestamp: datetime) -> None:
        super().__init__(
            f"Switches for system {system_id} are not strictly ordered at {timestamp.isoformat()}"
        )
        self.system_id = system_id
        self.timestamp = timestamp
