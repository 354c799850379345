"""Persistence for accepted itineraries and the bookings they spawn."""
from __future__ import annotations

import itertools
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Protocol

from tripgen.log import get_logger
from tripgen.schemas import BookingRecord, Experience, SavedItem, SavedItinerary, SaveItineraryRequest

logger = get_logger(__name__)


def _details(experience: Optional[Experience]) -> Dict[str, Any]:
    if experience is None:
        return {}
    return {
        "experience_name": experience.title,
        "experience_description": experience.description,
        "destination_name": experience.destination_name,
        "destination_city": experience.area,
        "price": experience.price,
        "unit": experience.unit,
    }


class ItineraryStore(Protocol):
    async def save(
        self,
        request: SaveItineraryRequest,
        experiences: Mapping[int, Experience],
        notes: str,
    ) -> SavedItinerary:
        ...

    async def get(self, itinerary_id: int) -> Optional[SavedItinerary]:
        ...


class InMemoryItineraryStore:
    """Single-process store; each ``save`` is all-or-nothing."""

    def __init__(self) -> None:
        self._itineraries: Dict[int, SavedItinerary] = {}
        self._itinerary_ids = itertools.count(1)
        self._item_ids = itertools.count(1)
        self._booking_ids = itertools.count(1)

    async def save(
        self,
        request: SaveItineraryRequest,
        experiences: Mapping[int, Experience],
        notes: str,
    ) -> SavedItinerary:
        itinerary_id = next(self._itinerary_ids)
        ordered = sorted(request.items, key=lambda item: (item.day_number, item.start_time))
        items: List[SavedItem] = []
        bookings: List[BookingRecord] = []
        for entry in ordered:
            experience = experiences.get(entry.experience_id)
            item = SavedItem(
                item_id=next(self._item_ids),
                experience_id=entry.experience_id,
                day_number=entry.day_number,
                start_time=entry.start_time,
                end_time=entry.end_time,
                custom_note=entry.custom_note,
                **_details(experience),
            )
            items.append(item)
            bookings.append(
                BookingRecord(
                    booking_id=next(self._booking_ids),
                    itinerary_id=itinerary_id,
                    item_id=item.item_id,
                    experience_id=entry.experience_id,
                    traveler_id=request.traveler_id,
                    creator_id=experience.creator_id if experience else None,
                    booking_date=request.start_date + timedelta(days=entry.day_number - 1),
                    start_time=entry.start_time,
                    end_time=entry.end_time,
                )
            )

        saved = SavedItinerary(
            itinerary_id=itinerary_id,
            traveler_id=request.traveler_id,
            title=request.title,
            notes=notes,
            start_date=request.start_date,
            end_date=request.end_date,
            created_at=datetime.now().replace(microsecond=0),
            items=items,
            bookings=bookings,
        )
        self._itineraries[itinerary_id] = saved
        logger.info(
            "Saved itinerary %d for traveler %d with %d item(s) and %d booking(s)",
            itinerary_id,
            request.traveler_id,
            len(items),
            len(bookings),
        )
        return saved

    async def get(self, itinerary_id: int) -> Optional[SavedItinerary]:
        return self._itineraries.get(itinerary_id)
