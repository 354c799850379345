from __future__ import annotations

import random
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

import pytest

from tripgen.config import EngineSettings
from tripgen.engine.availability import AvailabilityIndex
from tripgen.engine.clock import FixedClock
from tripgen.engine.day_planner import PlanningContext
from tripgen.schemas import WEEKDAYS, Experience, TravelerPreferences

# A moment well before any trip date used in the tests.
BEFORE_TRIPS = datetime(2025, 5, 1, 8, 0)

_DOWNTOWN_BACOLOD = (10.669752, 122.94702)


def _experience(
    experience_id: int,
    *,
    title: Optional[str] = None,
    price: float = 100.0,
    companions: Iterable[str] = ("Any",),
    tags: Iterable[str] = ("Cultural",),
    coords: Optional[tuple] = _DOWNTOWN_BACOLOD,
    area: str = "Bacolod City",
    distance: Optional[float] = 1.0,
    status: str = "active",
    availability: Optional[Dict[str, Any]] = None,
    creator_id: int = 12,
) -> Experience:
    if availability is None:
        availability = {day: [{"start": "09:00", "end": "10:00"}] for day in WEEKDAYS}
    return Experience.model_validate(
        {
            "experience_id": experience_id,
            "creator_id": creator_id,
            "title": title or f"Experience {experience_id}",
            "price": price,
            "status": status,
            "travel_companions": list(companions),
            "tags": list(tags),
            "area": area,
            "latitude": coords[0] if coords else None,
            "longitude": coords[1] if coords else None,
            "distance_from_city_center": distance,
            "availability": availability,
        }
    )


def _preferences(**overrides: Any) -> TravelerPreferences:
    payload: Dict[str, Any] = {
        "traveler_id": 7,
        "area": "Bacolod",
        "start_date": "2025-06-01",
        "end_date": "2025-06-02",
        "travel_companions": ["Family"],
        "explore_time": "Both",
        "budget": "Any",
        "activity_intensity": "Moderate",
        "travel_distance": "Nearby",
    }
    payload.update(overrides)
    return TravelerPreferences.model_validate(payload)


@pytest.fixture
def make_experience():
    return _experience


@pytest.fixture
def make_preferences():
    return _preferences


@pytest.fixture
def make_context():
    def build(
        experiences: Iterable[Experience],
        *,
        intensity: str = "moderate",
        travel_distance: Optional[str] = "nearby",
        explore_time: str = "both",
        now: datetime = BEFORE_TRIPS,
        seed: int = 7,
        settings: Optional[EngineSettings] = None,
    ) -> PlanningContext:
        return PlanningContext(
            settings=settings or EngineSettings(),
            clock=FixedClock(now),
            rng=random.Random(seed),
            availability=AvailabilityIndex.from_experiences(experiences, WEEKDAYS),
            activity_intensity=intensity,
            explore_time=explore_time,
            travel_distance=travel_distance,
        )

    return build
