# debug_generator.py
import asyncio
import json

from tripgen.collaborators.catalog import InMemoryCatalog
from tripgen.config import DEFAULT_CATALOG_PATH, load_engine_settings
from tripgen.orchestrator import generate_itinerary
from tripgen.schemas import TravelerPreferences


async def main():
    prefs = TravelerPreferences.model_validate(
        {
            "traveler_id": 7,
            "area": "Bacolod",
            "start_date": "2025-06-01",
            "end_date": "2025-06-03",
            "experience_types": ["Cultural", "Nature", "Foodie"],
            "travel_companions": ["Family"],
            "explore_time": "Both",
            "budget": "Any",
            "activity_intensity": "Moderate",
            "travel_distance": "Far",
            "seed": 42,
        }
    )

    catalog = InMemoryCatalog.from_json(DEFAULT_CATALOG_PATH)
    result = await generate_itinerary(prefs, catalog, settings=load_engine_settings())
    print("➡️ Generator returned:\n")
    print(json.dumps(result.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
