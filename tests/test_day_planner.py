"""Per-day scheduling: quotas, ordering policies and the same-day rules."""

import random
from datetime import date, datetime

from tripgen.config import EngineSettings
from tripgen.engine.day_planner import PoolEntry, daily_quota, order_pool, plan_day, plan_trip
from tripgen.engine.slots import windows_conflict
from tripgen.schemas import WEEKDAYS, CandidateExperience

SUNDAY = date(2025, 6, 1)
MONDAY = date(2025, 6, 2)


def _every_day(start: str, end: str) -> dict:
    return {day: [{"start": start, "end": end}] for day in WEEKDAYS}


def _spread(make_experience, count: int):
    """``count`` experiences whose single daily windows never conflict."""
    experiences = []
    for index in range(count):
        hour = 8 + 2 * index
        experiences.append(
            make_experience(index + 1, availability=_every_day(f"{hour:02d}:00", f"{hour + 1:02d}:00"))
        )
    return experiences


def _candidates(experiences, distances=None):
    distances = distances or [float(exp.experience_id) for exp in experiences]
    return [CandidateExperience(experience=exp, distance_km=d) for exp, d in zip(experiences, distances)]


def _entries(distances):
    return [
        PoolEntry(
            CandidateExperience(
                experience={"experience_id": index, "title": f"Stop {index}"},
                distance_km=distance,
            ),
            [],
        )
        for index, distance in enumerate(distances, start=1)
    ]


def test_quota_follows_activity_intensity(make_experience, make_context):
    experiences = _spread(make_experience, 5)
    candidates = _candidates(experiences)

    for intensity, expected in (("low", 2), ("moderate", 3), ("high", 4)):
        plan = plan_day(make_context(experiences, intensity=intensity), 1, MONDAY, candidates)
        assert plan.quota == expected
        assert len(plan.items) == expected
        assert plan.shortfall == 0


def test_scheduled_windows_never_conflict(make_experience, make_context):
    experiences = [
        make_experience(1, availability=_every_day("09:00", "11:00")),
        make_experience(2, availability=_every_day("10:00", "12:00")),
        make_experience(3, availability={day: [{"start": "11:00", "end": "12:00"}, {"start": "13:00", "end": "14:00"}] for day in WEEKDAYS}),
        make_experience(4, availability=_every_day("15:00", "16:00")),
    ]
    plan = plan_day(make_context(experiences, intensity="high"), 1, MONDAY, _candidates(experiences))

    windows = [item.window for item in plan.items]
    for i, first in enumerate(windows):
        for second in windows[i + 1:]:
            assert not windows_conflict(first, second)
    assert [item.candidate.experience.experience_id for item in plan.items] == [1, 3, 4]
    assert plan.items[1].window.start_time.strftime("%H:%M") == "13:00"


def test_experiences_are_not_repeated_across_days(make_experience, make_context):
    experiences = _spread(make_experience, 4)
    plans = plan_trip(make_context(experiences), _candidates(experiences), SUNDAY, MONDAY)

    day_one = {item.candidate.experience.experience_id for item in plans[0].items}
    day_two = {item.candidate.experience.experience_id for item in plans[1].items}
    assert len(day_one) == 3
    assert day_two == {1, 2, 3, 4} - day_one
    assert plans[1].used_ids == frozenset({1, 2, 3, 4})


def test_plan_day_respects_used_ids(make_experience, make_context):
    experiences = _spread(make_experience, 3)
    plan = plan_day(make_context(experiences), 2, MONDAY, _candidates(experiences), frozenset({1, 2}))

    assert [item.candidate.experience.experience_id for item in plan.items] == [3]
    assert plan.used_ids == frozenset({1, 2, 3})


def test_today_only_schedules_windows_starting_after_now(make_experience, make_context):
    experiences = [
        make_experience(
            1,
            availability={
                "Sunday": [
                    {"start": "10:00", "end": "11:00"},
                    {"start": "11:00", "end": "12:00"},
                    {"start": "13:00", "end": "14:00"},
                ]
            },
        ),
        make_experience(2, availability={"Sunday": [{"start": "09:00", "end": "10:00"}]}),
    ]
    context = make_context(experiences, now=datetime(2025, 6, 1, 11, 0))
    plan = plan_day(context, 1, SUNDAY, _candidates(experiences))

    assert plan.quota == 3
    assert [item.candidate.experience.experience_id for item in plan.items] == [1]
    assert plan.items[0].window.start_time.strftime("%H:%M") == "13:00"


def test_late_day_halves_quota_only_for_today():
    settings = EngineSettings()
    late = datetime(2025, 6, 1, 15, 30)

    assert daily_quota("high", True, late, settings) == 2
    assert daily_quota("moderate", True, late, settings) == 1
    assert daily_quota("low", True, late, settings) == 1
    assert daily_quota("high", False, late, settings) == 4
    assert daily_quota("high", True, datetime(2025, 6, 1, 14, 59), settings) == 4


def test_nearby_orders_by_ascending_distance():
    ordered = order_pool(_entries([5.0, None, 1.0, 3.0]), "nearby", random.Random(1), EngineSettings())

    assert [entry.distance for entry in ordered] == [1.0, 3.0, 5.0, None]


def test_far_orders_far_band_first():
    entries = _entries([3.0, 25.0, None, 15.0, 30.0])
    ordered = order_pool(entries, "far", random.Random(3), EngineSettings())
    distances = [entry.distance for entry in ordered]

    assert set(distances[:2]) == {25.0, 30.0}
    assert distances[2:] == [15.0, 3.0, None]


def test_moderate_jitter_keeps_coarse_order():
    ordered = order_pool(_entries([20.0, None, 1.0]), "moderate", random.Random(11), EngineSettings())

    assert [entry.distance for entry in ordered] == [1.0, 20.0, None]


def test_no_distance_policy_shuffles_whole_pool():
    entries = _entries([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    ordered = order_pool(entries, None, random.Random(5), EngineSettings())

    assert sorted(entry.distance for entry in ordered) == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
    assert len(ordered) == len(entries)


def test_same_seed_same_plan(make_experience, make_context):
    experiences = _spread(make_experience, 5)
    candidates = _candidates(experiences, [2.0, 12.0, 25.0, None, 40.0])

    def run():
        context = make_context(experiences, travel_distance="far", seed=42)
        return [
            [(item.candidate.experience.experience_id, item.window.label()) for item in plan.items]
            for plan in plan_trip(context, candidates, SUNDAY, MONDAY)
        ]

    assert run() == run()


def test_shortfall_when_pool_runs_dry(make_experience, make_context):
    experiences = [make_experience(1)]
    plan = plan_day(make_context(experiences), 1, MONDAY, _candidates(experiences, [1.0]))

    assert len(plan.items) == 1
    assert plan.shortfall == 2


def test_item_note_mentions_weekday_and_distance(make_experience, make_context):
    experiences = [
        make_experience(1, title="Heritage Walk"),
        make_experience(2, coords=None, availability=_every_day("14:00", "15:00")),
    ]
    plan = plan_day(make_context(experiences), 1, MONDAY, _candidates(experiences, [1.234, None]))

    assert [item.note for item in plan.items] == [
        "Heritage Walk - Monday at 09:00 (1.23 km from center)",
        "Experience 2 - Monday at 14:00 (distance unknown)",
    ]
