"""Weekday availability lookups for experiences."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable, List, Tuple

from tripgen.config import EngineSettings
from tripgen.schemas import WEEKDAYS, Experience, TimeWindow


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def trip_dates(start: date, end: date) -> List[date]:
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def trip_weekdays(start: date, end: date) -> List[str]:
    """Distinct weekday names spanned by an inclusive date range, in trip order."""
    names: List[str] = []
    for day in trip_dates(start, end)[:7]:
        name = weekday_name(day)
        if name not in names:
            names.append(name)
    return names


def resolve_windows(experience: Experience, weekday: str) -> List[TimeWindow]:
    """Bookable windows for ``experience`` on ``weekday`` ordered by start time."""
    return sorted(experience.availability.get(weekday, []), key=lambda w: (w.start_time, w.end_time))


def window_matches_time_of_day(window: TimeWindow, explore_time: str, settings: EngineSettings) -> bool:
    hour = window.start_time.hour
    is_daytime = settings.daytime_start_hour <= hour < settings.daytime_end_hour
    if explore_time == "daytime":
        return is_daytime
    if explore_time == "nighttime":
        return not is_daytime
    return True


class AvailabilityIndex:
    """Prefetched ``(experience_id, weekday) -> windows`` table used by the planner."""

    def __init__(self, entries: Iterable[Tuple[int, str, List[TimeWindow]]] = ()):
        self._windows: Dict[Tuple[int, str], List[TimeWindow]] = {}
        for experience_id, weekday, windows in entries:
            self._windows[(experience_id, weekday)] = sorted(windows, key=lambda w: (w.start_time, w.end_time))

    @classmethod
    def from_experiences(cls, experiences: Iterable[Experience], weekdays: Iterable[str]) -> "AvailabilityIndex":
        weekday_list = list(weekdays)
        return cls(
            (exp.experience_id, day, resolve_windows(exp, day))
            for exp in experiences
            for day in weekday_list
        )

    def windows(self, experience_id: int, weekday: str) -> List[TimeWindow]:
        return list(self._windows.get((experience_id, weekday), []))
