import pytest
from pydantic import ValidationError

from tripgen.engine.slots import assign_slot, windows_conflict
from tripgen.schemas import TimeWindow


def _window(start: str, end: str) -> TimeWindow:
    return TimeWindow(start_time=start, end_time=end)


def test_back_to_back_windows_conflict_under_buffer():
    assert windows_conflict(_window("10:00", "12:00"), _window("12:00", "14:00"))
    assert windows_conflict(_window("12:00", "14:00"), _window("10:00", "12:00"))


def test_windows_clear_when_gap_equals_buffer():
    assert not windows_conflict(_window("10:00", "12:00"), _window("12:30", "14:00"))


def test_zero_buffer_allows_touching_windows():
    assert not windows_conflict(_window("10:00", "12:00"), _window("12:00", "14:00"), buffer_minutes=0)


def test_overlapping_windows_conflict():
    assert windows_conflict(_window("09:00", "11:00"), _window("10:00", "10:30"))


def test_assign_slot_returns_earliest_free_window():
    committed = [_window("10:00", "11:00")]
    picked = assign_slot([_window("14:00", "16:00"), _window("10:00", "12:00")], committed)
    assert picked == _window("14:00", "16:00")


def test_assign_slot_without_commitments_takes_first_by_start():
    picked = assign_slot([_window("15:00", "16:00"), _window("08:00", "09:00")], [])
    assert picked.start_time.strftime("%H:%M") == "08:00"


def test_assign_slot_returns_none_when_everything_conflicts():
    committed = [_window("09:00", "17:00")]
    assert assign_slot([_window("10:00", "11:00"), _window("17:00", "18:00")], committed) is None


def test_time_window_rejects_inverted_range():
    with pytest.raises(ValidationError):
        _window("14:00", "13:00")


def test_time_window_serialises_hh_mm():
    window = TimeWindow.model_validate({"start": "10:00:00", "end": "12:00:00"})
    assert window.model_dump(mode="json") == {"start_time": "10:00", "end_time": "12:00"}
