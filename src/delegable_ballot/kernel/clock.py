"""
Clocks for event timestamps

Timestamps are audit metadata only; no voting rule reads them. The ballot
takes its clock as a parameter so a replayed or tested ballot produces the
same event envelopes every time.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """UTC wall clock"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """A clock that stands still until advanced"""

    def __init__(self, at: datetime) -> None:
        if at.tzinfo is None:
            raise ValueError("FixedClock needs a timezone-aware datetime")
        self.at = at

    def now(self) -> datetime:
        return self.at

    def advance(self, **delta: float) -> None:
        """Move forward by timedelta keywords, e.g. advance(minutes=5)"""
        self.at += timedelta(**delta)
