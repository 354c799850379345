"""Best-effort explanations for an empty candidate selection."""
from __future__ import annotations

from typing import Dict, List, Optional

from tripgen.engine.candidates import CandidateSelection
from tripgen.schemas import SelectionDiagnostics, TravelerPreferences

_SUGGESTIONS: Dict[str, str] = {
    "status": "No active experiences are listed right now; try again later.",
    "companions": "Add 'Any' to your travel companions to include experiences for every group type.",
    "availability": "Shift or extend your dates; nothing is offered on the weekdays you picked.",
    "time_of_day": "Switch your preferred time of day to 'Both'.",
    "budget": "Raise your budget tier or choose 'Any'.",
    "categories": "Choose fewer or broader experience types.",
}


def _geography_hint(selection: CandidateSelection, prefs: TravelerPreferences) -> str:
    if selection.fallback_used:
        return f"No experiences list '{prefs.area}' as their area; check the spelling or pick a nearby city."
    if prefs.travel_distance != "far":
        return "Widen your travel distance to 'Moderate' or 'Far'."
    return "Pick a different area; nothing is listed around this one."


def explain_empty_selection(selection: CandidateSelection, prefs: TravelerPreferences) -> SelectionDiagnostics:
    """Name the filter stage that eliminated the last experiences and how to relax it."""
    blocking: Optional[str] = None
    previous: Optional[int] = None
    for count in selection.stage_counts:
        if count.remaining == 0 and (previous is None or previous > 0):
            blocking = count.stage
            break
        previous = count.remaining

    suggestions: List[str] = []
    if blocking == "geography":
        suggestions.append(_geography_hint(selection, prefs))
    elif blocking in _SUGGESTIONS:
        suggestions.append(_SUGGESTIONS[blocking])
    return SelectionDiagnostics(
        stage_counts=list(selection.stage_counts),
        blocking_stage=blocking,
        suggestions=suggestions,
    )
