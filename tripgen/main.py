from __future__ import annotations

from typing import Any, Dict

from fastapi import BackgroundTasks, Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from tripgen.collaborators.catalog import InMemoryCatalog
from tripgen.collaborators.notifier import build_notifier
from tripgen.collaborators.store import InMemoryItineraryStore
from tripgen.config import load_engine_settings, load_service_settings
from tripgen.engine.clock import SystemClock
from tripgen.log import get_logger
from tripgen.orchestrator import (
    ItineraryValidationError,
    generate_itinerary,
    preview_candidates,
    save_itinerary,
)
from tripgen.schemas import SaveItineraryRequest, TravelerPreferences

logger = get_logger(__name__)

service_settings = load_service_settings()
engine_settings = load_engine_settings()

# Collaborators live at module level so deployments (and tests) can swap them.
catalog = InMemoryCatalog.from_json(service_settings.catalog_path)
store = InMemoryItineraryStore()
notifier = build_notifier(service_settings.notify_webhook_url, service_settings.notify_timeout)
clock = SystemClock(service_settings.timezone)

app = FastAPI(title="Itinerary Generation API")

# Local frontends need to reach the API; TRIPGEN_ALLOWED_ORIGINS narrows this.
app.add_middleware(
    CORSMiddleware,
    allow_origins=service_settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _parse_preferences(payload: Dict[str, Any]) -> TravelerPreferences:
    try:
        return TravelerPreferences.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from exc


@app.get("/api/health")
async def health() -> Dict[str, Any]:
    experiences = await catalog.list_experiences()
    return {"status": "ok", "experiences": len(experiences)}


@app.post("/api/itineraries/generate")
async def api_generate(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Build a preview itinerary; nothing is persisted until it is saved."""
    prefs = _parse_preferences(payload)
    result = await generate_itinerary(prefs, catalog, settings=engine_settings, clock=clock)
    body = result.model_dump(mode="json")
    if result.status == "no_experiences":
        raise HTTPException(status_code=404, detail=body)
    return body


@app.post("/api/itineraries/candidates")
async def api_candidates(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    prefs = _parse_preferences(payload)
    preview = await preview_candidates(prefs, catalog, engine_settings)
    return preview.model_dump(mode="json")


@app.post("/api/itineraries/save", status_code=201)
async def api_save(background_tasks: BackgroundTasks, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Persist an accepted draft, create its bookings and notify the people involved."""
    try:
        request = SaveItineraryRequest.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from exc

    try:
        saved, notifications = await save_itinerary(request, catalog, store)
    except ItineraryValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if notifications:
        background_tasks.add_task(notifier.send, notifications)
    return {
        "message": "Itinerary saved successfully",
        "itinerary_id": saved.itinerary_id,
        "itinerary": saved.model_dump(mode="json"),
    }
