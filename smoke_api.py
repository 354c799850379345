import requests
import json

BASE_URL = "http://127.0.0.1:8000"

# --- sample preferences ---
payload = {
    "traveler_id": 7,
    "area": "bacolod_city",
    "start_date": "2025-06-01",
    "end_date": "2025-06-02",
    "experience_types": [],
    "travel_companions": ["Family"],
    "explore_time": "Both",
    "budget": "Any",
    "activity_intensity": "Moderate",
    "travel_distance": "Nearby",
}


def run_smoke():
    headers = {"Content-Type": "application/json"}

    url = f"{BASE_URL}/api/itineraries/generate"
    print(f"➡️ Sending POST {url}")
    print(json.dumps(payload, indent=2))
    resp = requests.post(url, headers=headers, json=payload)
    print(f"\n⬅️ Status: {resp.status_code}")
    try:
        data = resp.json()
        print(json.dumps(data, indent=2))
    except Exception:
        print(resp.text)
        return

    draft = data.get("draft")
    if not draft or not draft.get("items"):
        return

    save_payload = {
        "traveler_id": payload["traveler_id"],
        "start_date": draft["start_date"],
        "end_date": draft["end_date"],
        "title": draft["title"],
        "notes": draft["notes"],
        "items": draft["items"],
    }
    url = f"{BASE_URL}/api/itineraries/save"
    print(f"\n➡️ Sending POST {url}")
    resp = requests.post(url, headers=headers, json=save_payload)
    print(f"\n⬅️ Status: {resp.status_code}")
    print(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    run_smoke()
