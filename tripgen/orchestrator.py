# tripgen/orchestrator.py
from __future__ import annotations

import asyncio
import random
from typing import Dict, List, Optional, Sequence, Tuple

from tripgen.collaborators.catalog import ExperienceCatalog
from tripgen.collaborators.store import ItineraryStore
from tripgen.config import EngineSettings
from tripgen.engine.assembler import DEFAULT_NOTES, assemble_draft
from tripgen.engine.availability import AvailabilityIndex, trip_weekdays
from tripgen.engine.candidates import CandidateSelection, select_candidates
from tripgen.engine.clock import Clock, SystemClock
from tripgen.engine.day_planner import PlanningContext, plan_trip
from tripgen.engine.diagnostics import explain_empty_selection
from tripgen.engine.gazetteer import resolve_reference_point
from tripgen.log import get_logger
from tripgen.schemas import (
    CandidateExperience,
    CandidatePreview,
    DayShortfall,
    Experience,
    GenerationResult,
    Notification,
    SavedItinerary,
    SaveItineraryRequest,
    SelectionDiagnostics,
    TravelerPreferences,
)

logger = get_logger(__name__)


class ItineraryValidationError(ValueError):
    """Raised when a save request is inconsistent with its own trip dates or the catalog."""


# ---------- candidate selection ----------
async def select_for_preferences(
    prefs: TravelerPreferences,
    catalog: ExperienceCatalog,
    settings: EngineSettings,
) -> CandidateSelection:
    experiences = await catalog.list_experiences()
    reference = resolve_reference_point(prefs.area)
    logger.info(
        "Selecting candidates from %d experience(s): area=%r, dates=%s..%s, distance=%s, budget=%s",
        len(experiences),
        prefs.area,
        prefs.start_date.isoformat(),
        prefs.end_date.isoformat(),
        prefs.travel_distance,
        prefs.budget,
    )
    return select_candidates(prefs, experiences, reference, settings)


async def preview_candidates(
    prefs: TravelerPreferences,
    catalog: ExperienceCatalog,
    settings: Optional[EngineSettings] = None,
) -> CandidatePreview:
    selection = await select_for_preferences(prefs, catalog, settings or EngineSettings())
    diagnostics = (
        explain_empty_selection(selection, prefs)
        if not selection.candidates
        else SelectionDiagnostics(stage_counts=selection.stage_counts)
    )
    return CandidatePreview(
        candidates=selection.candidates,
        reference_point_resolved=selection.reference is not None,
        distance_preference_applied=selection.distance_applied,
        diagnostics=diagnostics,
    )


async def prefetch_availability(
    catalog: ExperienceCatalog,
    candidates: Sequence[CandidateExperience],
    weekdays: Sequence[str],
) -> AvailabilityIndex:
    """Fetch every (candidate, weekday) window list concurrently, then freeze them."""
    keys: List[Tuple[int, str]] = [
        (candidate.experience.experience_id, day) for candidate in candidates for day in weekdays
    ]
    results = await asyncio.gather(*[catalog.availability_for(eid, day) for eid, day in keys])
    logger.debug("Prefetched %d availability lookups", len(keys))
    return AvailabilityIndex((eid, day, windows) for (eid, day), windows in zip(keys, results))


# ---------- generation ----------
async def generate_itinerary(
    prefs: TravelerPreferences,
    catalog: ExperienceCatalog,
    *,
    settings: Optional[EngineSettings] = None,
    clock: Optional[Clock] = None,
    rng: Optional[random.Random] = None,
) -> GenerationResult:
    """Select candidates, plan each trip day and return an unsaved draft."""
    settings = settings or EngineSettings()
    clock = clock or SystemClock()
    rng = rng or random.Random(prefs.seed)

    selection = await select_for_preferences(prefs, catalog, settings)
    notes: List[str] = []
    if selection.fallback_used:
        notes.append(
            f"No map reference for '{prefs.area}'; matched experiences by area name and "
            f"ignored the '{prefs.travel_distance}' travel distance preference."
        )

    if not selection.candidates:
        diagnostics = explain_empty_selection(selection, prefs)
        logger.info(
            "No suitable experiences found (blocking stage: %s)",
            diagnostics.blocking_stage or "n/a",
        )
        return GenerationResult(
            status="no_experiences",
            message="No suitable experiences found for your preferences",
            activity_intensity=prefs.activity_intensity,
            travel_distance=prefs.travel_distance,
            reference_point_resolved=selection.reference is not None,
            distance_preference_applied=selection.distance_applied,
            diagnostics=diagnostics,
            notes=notes,
        )

    weekdays = trip_weekdays(prefs.start_date, prefs.end_date)
    availability = await prefetch_availability(catalog, selection.candidates, weekdays)

    context = PlanningContext(
        settings=settings,
        clock=clock,
        rng=rng,
        availability=availability,
        activity_intensity=prefs.activity_intensity,
        explore_time=prefs.explore_time,
        travel_distance=prefs.travel_distance if selection.distance_applied else None,
    )
    day_plans = plan_trip(context, selection.candidates, prefs.start_date, prefs.end_date)
    draft = assemble_draft(prefs, day_plans, clock.now())

    shortfalls = [
        DayShortfall(
            day_number=plan.day_number,
            day_date=plan.day_date,
            quota=plan.quota,
            scheduled=len(plan.items),
        )
        for plan in day_plans
        if plan.shortfall
    ]
    if shortfalls:
        notes.append(
            f"{len(shortfalls)} day(s) have fewer activities than requested; "
            "not enough non-conflicting experiences were available."
        )

    logger.info(
        "Generated draft with %d item(s) over %d day(s) from %d candidate(s)",
        len(draft.items),
        prefs.total_days,
        len(selection.candidates),
    )
    return GenerationResult(
        status="generated",
        message="Itinerary generated successfully",
        draft=draft,
        total_experiences=len(selection.candidates),
        selected_experiences=len(draft.items),
        activity_intensity=prefs.activity_intensity,
        travel_distance=prefs.travel_distance,
        reference_point_resolved=selection.reference is not None,
        distance_preference_applied=selection.distance_applied,
        shortfalls=shortfalls,
        notes=notes,
    )


# ---------- save path ----------
async def save_itinerary(
    request: SaveItineraryRequest,
    catalog: ExperienceCatalog,
    store: ItineraryStore,
) -> Tuple[SavedItinerary, List[Notification]]:
    """Persist an accepted draft and return the notifications it should trigger."""
    total_days = request.total_days
    for item in request.items:
        if item.day_number < 1 or item.day_number > total_days:
            raise ItineraryValidationError(
                f"Invalid day_number {item.day_number}: must be between 1 and {total_days}"
            )

    experience_ids = sorted({item.experience_id for item in request.items})
    found = await asyncio.gather(*[catalog.get_experience(eid) for eid in experience_ids])
    experiences: Dict[int, Experience] = {
        eid: exp for eid, exp in zip(experience_ids, found) if exp is not None
    }
    missing = [eid for eid in experience_ids if eid not in experiences]
    if missing:
        raise ItineraryValidationError(
            f"Unknown experience id(s): {', '.join(str(eid) for eid in missing)}"
        )

    saved = await store.save(request, experiences, request.notes or DEFAULT_NOTES)
    return saved, build_notifications(saved, experiences)


def build_notifications(saved: SavedItinerary, experiences: Dict[int, Experience]) -> List[Notification]:
    notifications = [
        Notification(
            user_id=saved.traveler_id,
            type="itinerary_created",
            title="Itinerary saved",
            description=(
                f"'{saved.title}' is set for {saved.start_date.isoformat()} to "
                f"{saved.end_date.isoformat()} with {len(saved.items)} experience(s)."
            ),
            itinerary_id=saved.itinerary_id,
        )
    ]
    for booking in saved.bookings:
        if booking.creator_id is None:
            continue
        experience = experiences.get(booking.experience_id)
        title = experience.title if experience else f"experience {booking.experience_id}"
        notifications.append(
            Notification(
                user_id=booking.creator_id,
                type="new_booking",
                title="New booking",
                description=(
                    f"{title} was booked for {booking.booking_date.isoformat()} "
                    f"at {booking.start_time:%H:%M}."
                ),
                itinerary_id=saved.itinerary_id,
                experience_id=booking.experience_id,
                booking_id=booking.booking_id,
            )
        )
    return notifications
