from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Default wall-clock implementation, always timezone-aware UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def start_of_day(ts: datetime) -> datetime:
    """Midnight of the day containing ``ts``, in ``ts``'s own timezone."""
    return ts.replace(hour=0, minute=0, second=0, microsecond=0)
