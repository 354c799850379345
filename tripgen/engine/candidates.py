"""Translate traveler preferences into the annotated set of eligible experiences."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from tripgen.config import EngineSettings
from tripgen.engine.availability import trip_weekdays, window_matches_time_of_day
from tripgen.engine.gazetteer import ReferencePoint
from tripgen.engine.geo import haversine_km
from tripgen.log import get_logger
from tripgen.schemas import CandidateExperience, Experience, StageCount, TravelerPreferences

logger = get_logger(__name__)

_Annotated = Tuple[Experience, Optional[float]]


@dataclass
class CandidateSelection:
    candidates: List[CandidateExperience]
    reference: Optional[ReferencePoint]
    distance_applied: bool
    fallback_used: bool
    stage_counts: List[StageCount] = field(default_factory=list)


def distance_from(reference: Optional[ReferencePoint], experience: Experience) -> Optional[float]:
    """Unrounded distance in km; rounding happens only on the annotated candidate."""
    if reference is None or not experience.has_coordinates():
        return None
    return haversine_km(reference.latitude, reference.longitude, experience.latitude, experience.longitude)


def _display_km(distance_km: Optional[float]) -> Optional[float]:
    return round(distance_km, 2) if distance_km is not None else None


def _within_radius(distance_km: Optional[float], experience: Experience, radius: Optional[float], settings: EngineSettings) -> bool:
    if radius is None or distance_km is None:
        return True
    if experience.distance_from_city_center is None and settings.keep_unknown_distance:
        return True
    return distance_km <= radius


def _companions_match(experience: Experience, prefs: TravelerPreferences) -> bool:
    if prefs.accepts_any_companion():
        return True
    offered = {c.strip().casefold() for c in experience.travel_companions}
    if "any" in offered:
        return True
    return bool(offered & {c.casefold() for c in prefs.travel_companions})


def _budget_match(price: float, budget: str, settings: EngineSettings) -> bool:
    tiers = settings.budget
    if budget == "free":
        return price <= tiers.free_max
    if budget == "budget":
        return price <= tiers.budget_max
    if budget == "midrange":
        return price <= tiers.midrange_max
    if budget == "premium":
        return price > tiers.midrange_max
    return True


def _tags_match(experience: Experience, wanted: set) -> bool:
    return bool({tag.strip().casefold() for tag in experience.tags} & wanted)


def select_candidates(
    prefs: TravelerPreferences,
    experiences: Iterable[Experience],
    reference: Optional[ReferencePoint],
    settings: EngineSettings,
) -> CandidateSelection:
    """Apply the status, geography, companion, availability, time, budget and tag filters.

    An empty result is a legitimate outcome; ``stage_counts`` records how many
    experiences survived each stage so callers can explain it.
    """
    stage_counts: List[StageCount] = []
    pool: List[_Annotated] = [(exp, distance_from(reference, exp)) for exp in experiences]

    def apply(stage: str, keep: Callable[[Experience, Optional[float]], bool]) -> None:
        nonlocal pool
        pool = [(exp, dist) for exp, dist in pool if keep(exp, dist)]
        stage_counts.append(StageCount(stage=stage, remaining=len(pool)))
        logger.debug("Stage %s left %d experience(s)", stage, len(pool))

    apply("status", lambda exp, _d: exp.status.strip().lower() == "active")

    area = prefs.area.strip()
    fallback_used = False
    distance_applied = False
    if reference is not None:
        radius = settings.radius_for(prefs.travel_distance)
        distance_applied = True
        apply("geography", lambda exp, dist: _within_radius(dist, exp, radius, settings))
        logger.info(
            "Applied %s distance filter (%s) around %s",
            prefs.travel_distance,
            f"<= {radius:g} km" if radius is not None else "no limit",
            reference.name,
        )
    elif area:
        fallback_used = True
        needle = area.replace("_", " ").casefold()
        apply("geography", lambda exp, _d: needle in exp.area.casefold())
        logger.warning(
            "Area %r has no reference point; matched on area text and ignored %s distance preference",
            area,
            prefs.travel_distance,
        )
    else:
        stage_counts.append(StageCount(stage="geography", remaining=len(pool)))

    apply("companions", lambda exp, _d: _companions_match(exp, prefs))

    weekdays = trip_weekdays(prefs.start_date, prefs.end_date)
    apply("availability", lambda exp, _d: any(exp.availability.get(day) for day in weekdays))

    if prefs.explore_time != "both":
        apply(
            "time_of_day",
            lambda exp, _d: any(
                window_matches_time_of_day(window, prefs.explore_time, settings)
                for windows in exp.availability.values()
                for window in windows
            ),
        )
    else:
        stage_counts.append(StageCount(stage="time_of_day", remaining=len(pool)))

    apply("budget", lambda exp, _d: _budget_match(exp.price, prefs.budget, settings))

    wanted = {tag.strip().casefold() for tag in prefs.experience_types if tag.strip()}
    if wanted:
        apply("categories", lambda exp, _d: _tags_match(exp, wanted))
    else:
        stage_counts.append(StageCount(stage="categories", remaining=len(pool)))

    candidates = [CandidateExperience(experience=exp, distance_km=_display_km(dist)) for exp, dist in pool]
    logger.info(
        "Candidate selection kept %d experience(s) for area=%r (%s)",
        len(candidates),
        area,
        "fallback text match" if fallback_used else reference.name if reference else "no area filter",
    )
    return CandidateSelection(
        candidates=candidates,
        reference=reference,
        distance_applied=distance_applied,
        fallback_used=fallback_used,
        stage_counts=stage_counts,
    )
