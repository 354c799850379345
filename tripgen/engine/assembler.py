"""Turn per-day plans into the reviewable itinerary draft."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List

from tripgen.engine.day_planner import DayPlan, PlannedItem
from tripgen.engine.gazetteer import normalize_area_name
from tripgen.schemas import ItineraryDraft, ItineraryItem, TravelerPreferences

DEFAULT_NOTES = "Auto-generated itinerary"


def default_title(prefs: TravelerPreferences) -> str:
    area = normalize_area_name(prefs.area) or "Adventure"
    return f"{area} - {prefs.start_date.isoformat()} to {prefs.end_date.isoformat()}"


def _to_item(planned: PlannedItem) -> ItineraryItem:
    experience = planned.candidate.experience
    return ItineraryItem(
        experience_id=experience.experience_id,
        day_number=planned.day_number,
        start_time=planned.window.start_time,
        end_time=planned.window.end_time,
        custom_note=planned.note,
        experience_name=experience.title,
        experience_description=experience.description,
        destination_name=experience.destination_name,
        destination_city=experience.area,
        price=experience.price,
        unit=experience.unit,
        distance_km=planned.candidate.distance_km,
    )


def assemble_draft(
    prefs: TravelerPreferences,
    day_plans: Iterable[DayPlan],
    created_at: datetime,
) -> ItineraryDraft:
    items: List[ItineraryItem] = [_to_item(planned) for plan in day_plans for planned in plan.items]
    items.sort(key=lambda item: (item.day_number, item.start_time))
    return ItineraryDraft(
        traveler_id=prefs.traveler_id,
        title=prefs.title or default_title(prefs),
        notes=prefs.notes or DEFAULT_NOTES,
        start_date=prefs.start_date,
        end_date=prefs.end_date,
        created_at=created_at.replace(microsecond=0),
        items=items,
    )
