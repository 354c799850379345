"""Wall-clock access for the planner's same-day rules."""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Local time, or time in ``timezone`` when one is configured."""

    def __init__(self, timezone: Optional[str] = None):
        self._tz = ZoneInfo(timezone) if timezone else None

    def now(self) -> datetime:
        if self._tz is None:
            return datetime.now()
        return datetime.now(self._tz).replace(tzinfo=None)


class FixedClock:
    def __init__(self, moment: datetime):
        self.moment = moment

    def now(self) -> datetime:
        return self.moment
