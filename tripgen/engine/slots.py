"""Buffered conflict checks and first-fit slot assignment for a single day."""
from __future__ import annotations

from datetime import time
from typing import Iterable, Optional, Sequence

from tripgen.schemas import TimeWindow


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def windows_conflict(first: TimeWindow, second: TimeWindow, buffer_minutes: int = 30) -> bool:
    """True when the windows overlap once each end is padded by ``buffer_minutes``."""
    start1, end1 = _minutes(first.start_time), _minutes(first.end_time)
    start2, end2 = _minutes(second.start_time), _minutes(second.end_time)
    return not (end1 + buffer_minutes <= start2 or end2 + buffer_minutes <= start1)


def assign_slot(
    candidate_windows: Iterable[TimeWindow],
    committed: Sequence[TimeWindow],
    buffer_minutes: int = 30,
) -> Optional[TimeWindow]:
    """Return the earliest candidate window that clears every committed window."""
    for window in sorted(candidate_windows, key=lambda w: (w.start_time, w.end_time)):
        if not any(windows_conflict(window, taken, buffer_minutes) for taken in committed):
            return window
    return None
