"""Clock used for all timestamps and expiry checks."""

import datetime
from typing import Protocol


class Clock(Protocol):
    """Time source."""

    def now(self) -> datetime.datetime:
        """Return the current time as an aware UTC datetime."""
        ...

    def epoch(self) -> int:
        """Return the current time in epoch seconds."""
        ...


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> datetime.datetime:
        """Return the current UTC time."""
        return datetime.datetime.now(datetime.timezone.utc)

    def epoch(self) -> int:
        """Return the current time in epoch seconds."""
        return int(self.now().timestamp())


def format_datetime(value: datetime.datetime) -> str:
    """Format a datetime the way credentials carry it."""
    return value.astimezone(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
