"""Per-day scheduling: ordering policies, quotas and first-fit slot commits.

Days are planned strictly in order because each day only sees the
experiences that earlier days left unused. The set of used experience ids is
passed into ``plan_day`` and handed back on the resulting ``DayPlan`` so a
single day can be planned (and tested) in isolation.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import FrozenSet, List, NamedTuple, Optional, Sequence

from tripgen.config import EngineSettings
from tripgen.engine.availability import AvailabilityIndex, trip_dates, weekday_name, window_matches_time_of_day
from tripgen.engine.clock import Clock
from tripgen.engine.slots import assign_slot
from tripgen.log import get_logger
from tripgen.schemas import CandidateExperience, TimeWindow

logger = get_logger(__name__)


@dataclass
class PlanningContext:
    settings: EngineSettings
    clock: Clock
    rng: random.Random
    availability: AvailabilityIndex
    activity_intensity: str
    explore_time: str = "both"
    # None means no usable distance information: the pool is shuffled.
    travel_distance: Optional[str] = None


class PoolEntry(NamedTuple):
    candidate: CandidateExperience
    windows: List[TimeWindow]

    @property
    def distance(self) -> Optional[float]:
        return self.candidate.distance_km


@dataclass
class PlannedItem:
    candidate: CandidateExperience
    day_number: int
    weekday: str
    window: TimeWindow
    note: str


@dataclass
class DayPlan:
    day_number: int
    day_date: date
    weekday: str
    quota: int
    items: List[PlannedItem] = field(default_factory=list)
    used_ids: FrozenSet[int] = frozenset()

    @property
    def shortfall(self) -> int:
        return max(0, self.quota - len(self.items))


def daily_quota(intensity: str, is_today: bool, now: datetime, settings: EngineSettings) -> int:
    quota = settings.quota_for(intensity)
    if is_today and now.hour >= settings.late_day_hour:
        quota = max(1, quota // 2)
    return quota


def _nearest_first(entries: Sequence[PoolEntry]) -> List[PoolEntry]:
    return sorted(entries, key=lambda e: (e.distance is None, e.distance or 0.0))


def _jittered(entries: Sequence[PoolEntry], rng: random.Random, jitter_km: float) -> List[PoolEntry]:
    keyed = []
    for entry in entries:
        noise = rng.uniform(-jitter_km, jitter_km)
        key = entry.distance + noise if entry.distance is not None else math.inf
        keyed.append((key, entry))
    keyed.sort(key=lambda pair: pair[0])
    return [entry for _key, entry in keyed]


def _far_bands(entries: Sequence[PoolEntry], rng: random.Random, settings: EngineSettings) -> List[PoolEntry]:
    near: List[PoolEntry] = []
    moderate: List[PoolEntry] = []
    far: List[PoolEntry] = []
    unknown: List[PoolEntry] = []
    for entry in entries:
        if entry.distance is None:
            unknown.append(entry)
        elif entry.distance <= settings.far_band_near_km:
            near.append(entry)
        elif entry.distance <= settings.far_band_moderate_km:
            moderate.append(entry)
        else:
            far.append(entry)
    for band in (far, moderate, near, unknown):
        rng.shuffle(band)
    logger.debug(
        "Distance bands: %d far, %d moderate, %d near, %d unknown",
        len(far),
        len(moderate),
        len(near),
        len(unknown),
    )
    return far + moderate + near + unknown


def order_pool(
    entries: Sequence[PoolEntry],
    travel_distance: Optional[str],
    rng: random.Random,
    settings: EngineSettings,
) -> List[PoolEntry]:
    """Order a day's pool according to the travel-distance policy."""
    if travel_distance == "nearby":
        return _nearest_first(entries)
    if travel_distance == "moderate":
        return _jittered(entries, rng, settings.moderate_jitter_km)
    if travel_distance == "far":
        return _far_bands(entries, rng, settings)
    shuffled = list(entries)
    rng.shuffle(shuffled)
    return shuffled


def _note_for(candidate: CandidateExperience, weekday: str, window: TimeWindow) -> str:
    if candidate.distance_km is not None:
        distance_info = f"{candidate.distance_km:.2f} km from center"
    else:
        distance_info = "distance unknown"
    return f"{candidate.experience.title} - {weekday} at {window.start_time:%H:%M} ({distance_info})"


def build_pool(
    context: PlanningContext,
    weekday: str,
    candidates: Sequence[CandidateExperience],
    used_ids: FrozenSet[int],
    cutoff: Optional[time] = None,
) -> List[PoolEntry]:
    pool: List[PoolEntry] = []
    for candidate in candidates:
        experience_id = candidate.experience.experience_id
        if experience_id in used_ids:
            continue
        windows = [
            window
            for window in context.availability.windows(experience_id, weekday)
            if window_matches_time_of_day(window, context.explore_time, context.settings)
            and (cutoff is None or window.start_time > cutoff)
        ]
        if windows:
            pool.append(PoolEntry(candidate, windows))
    return pool


def plan_day(
    context: PlanningContext,
    day_number: int,
    day_date: date,
    candidates: Sequence[CandidateExperience],
    used_ids: FrozenSet[int] = frozenset(),
) -> DayPlan:
    """Schedule up to the day's quota of non-conflicting, not-yet-used experiences."""
    settings = context.settings
    weekday = weekday_name(day_date)
    now = context.clock.now()
    is_today = day_date == now.date()
    cutoff = now.time().replace(second=0, microsecond=0) if is_today else None

    pool = build_pool(context, weekday, candidates, used_ids, cutoff)
    ordered = order_pool(pool, context.travel_distance, context.rng, settings)
    quota = daily_quota(context.activity_intensity, is_today, now, settings)
    logger.info(
        "Planning day %d (%s %s): %d eligible, quota %d%s",
        day_number,
        weekday,
        day_date.isoformat(),
        len(ordered),
        quota,
        f", windows after {cutoff:%H:%M} only" if cutoff is not None else "",
    )

    used = set(used_ids)
    committed: List[TimeWindow] = []
    items: List[PlannedItem] = []
    for entry in ordered:
        if len(items) >= quota:
            break
        window = assign_slot(entry.windows, committed, settings.buffer_minutes)
        if window is None:
            logger.debug(
                "No free window for %s on day %d",
                entry.candidate.experience.title,
                day_number,
            )
            continue
        experience = entry.candidate.experience
        items.append(
            PlannedItem(
                candidate=entry.candidate,
                day_number=day_number,
                weekday=weekday,
                window=window,
                note=_note_for(entry.candidate, weekday, window),
            )
        )
        used.add(experience.experience_id)
        committed.append(window)
        logger.debug("Added %s at %s on day %d", experience.title, window.label(), day_number)

    plan = DayPlan(
        day_number=day_number,
        day_date=day_date,
        weekday=weekday,
        quota=quota,
        items=items,
        used_ids=frozenset(used),
    )
    if plan.shortfall:
        logger.warning(
            "Only found %d/%d experiences for day %d (%s)",
            len(items),
            quota,
            day_number,
            weekday,
        )
    return plan


def plan_trip(
    context: PlanningContext,
    candidates: Sequence[CandidateExperience],
    start: date,
    end: date,
) -> List[DayPlan]:
    plans: List[DayPlan] = []
    used_ids: FrozenSet[int] = frozenset()
    for day_number, day_date in enumerate(trip_dates(start, end), start=1):
        plan = plan_day(context, day_number, day_date, candidates, used_ids)
        used_ids = plan.used_ids
        plans.append(plan)
    return plans
