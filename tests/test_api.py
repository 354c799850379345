from datetime import datetime

from fastapi.testclient import TestClient

from tripgen.engine.clock import FixedClock
from tripgen.main import app


def _sample_payload(**overrides) -> dict:
    payload = {
        "traveler_id": 7,
        "city": "Bacolod",
        "start_date": "2025-06-01",
        "end_date": "2025-06-02",
        "experience_types": [],
        "travel_companion": "Family",
        "explore_time": "Both",
        "budget": "Any",
        "activity_intensity": "Moderate",
        "travel_distance": "Nearby",
        "seed": 7,
    }
    payload.update(overrides)
    return payload


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    async def send(self, notifications):
        batch = list(notifications)
        self.sent.extend(batch)
        return len(batch)


def _client(monkeypatch) -> TestClient:
    monkeypatch.setattr("tripgen.main.clock", FixedClock(datetime(2025, 5, 1, 8, 0)))
    return TestClient(app)


def test_health(monkeypatch):
    response = _client(monkeypatch).get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "experiences": 5}


def test_generate_endpoint(monkeypatch):
    response = _client(monkeypatch).post("/api/itineraries/generate", json=_sample_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "generated"
    assert body["draft"]["itinerary_id"] == -1
    assert [item["experience_id"] for item in body["draft"]["items"]] == [2, 5]
    assert body["draft"]["items"][0]["start_time"] == "09:00"


def test_generate_rejects_unknown_intensity(monkeypatch):
    response = _client(monkeypatch).post(
        "/api/itineraries/generate", json=_sample_payload(activity_intensity="Extreme")
    )

    assert response.status_code == 422


def test_generate_rejects_inverted_dates(monkeypatch):
    response = _client(monkeypatch).post(
        "/api/itineraries/generate",
        json=_sample_payload(start_date="2025-06-05", end_date="2025-06-01"),
    )

    assert response.status_code == 422
    assert "Start date cannot be after end date" in response.text


def test_generate_reports_no_experiences(monkeypatch):
    response = _client(monkeypatch).post("/api/itineraries/generate", json=_sample_payload(budget="Free"))

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["status"] == "no_experiences"
    assert detail["diagnostics"]["blocking_stage"] == "budget"


def test_candidates_endpoint(monkeypatch):
    response = _client(monkeypatch).post("/api/itineraries/candidates", json=_sample_payload())

    assert response.status_code == 200
    body = response.json()
    assert sorted(c["experience"]["experience_id"] for c in body["candidates"]) == [2, 5]
    assert body["distance_preference_applied"] is True


def test_save_endpoint_notifies_in_background(monkeypatch):
    notifier = RecordingNotifier()
    monkeypatch.setattr("tripgen.main.notifier", notifier)
    client = _client(monkeypatch)

    response = client.post(
        "/api/itineraries/save",
        json={
            "traveler_id": 7,
            "start_date": "2025-06-01",
            "end_date": "2025-06-02",
            "title": "Bacolod City - 2025-06-01 to 2025-06-02",
            "items": [
                {"experience_id": 2, "day_number": 1, "start_time": "09:00", "end_time": "10:00"},
                {"experience_id": 5, "day_number": 1, "start_time": "17:00", "end_time": "20:00"},
            ],
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["itinerary_id"] == body["itinerary"]["itinerary_id"]
    assert len(body["itinerary"]["bookings"]) == 2
    assert [n.type for n in notifier.sent] == ["itinerary_created", "new_booking", "new_booking"]


def test_save_endpoint_rejects_invalid_day(monkeypatch):
    notifier = RecordingNotifier()
    monkeypatch.setattr("tripgen.main.notifier", notifier)

    response = _client(monkeypatch).post(
        "/api/itineraries/save",
        json={
            "traveler_id": 7,
            "start_date": "2025-06-01",
            "end_date": "2025-06-01",
            "title": "Day trip",
            "items": [{"experience_id": 2, "day_number": 2, "start_time": "09:00", "end_time": "10:00"}],
        },
    )

    assert response.status_code == 422
    assert notifier.sent == []
