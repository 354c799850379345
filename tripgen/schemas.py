from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Dict, List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
COMPANION_TYPES = ("Solo", "Partner", "Family", "Friends", "Group", "Any")

ExploreTime = Literal["daytime", "nighttime", "both"]
BudgetTier = Literal["free", "budget", "midrange", "premium", "any"]
ActivityIntensity = Literal["low", "moderate", "high"]
TravelDistance = Literal["nearby", "moderate", "far"]

_BUDGET_ALIASES = {
    "budgetfriendly": "budget",
    "budget": "budget",
    "midrange": "midrange",
    "mid": "midrange",
    "free": "free",
    "premium": "premium",
    "luxury": "premium",
    "any": "any",
}


def _slug(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower().replace("-", "").replace("_", "").replace(" ", "")
    return value


def normalize_weekday(value: str) -> str:
    cleaned = value.strip().capitalize()
    for day in WEEKDAYS:
        if day == cleaned or day[:3] == cleaned[:3] and len(cleaned) >= 3:
            return day
    raise ValueError(f"Unknown weekday {value!r}")


# ------- Catalog models -------
class TimeWindow(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start_time: time = Field(..., validation_alias=AliasChoices("start_time", "start"))
    end_time: time = Field(..., validation_alias=AliasChoices("end_time", "end"))

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        if self.start_time >= self.end_time:
            raise ValueError(
                f"start_time {self.start_time:%H:%M} must be before end_time {self.end_time:%H:%M}"
            )
        return self

    @field_serializer("start_time", "end_time")
    def _hhmm(self, value: time) -> str:
        return value.strftime("%H:%M")

    def label(self) -> str:
        return f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"


class Experience(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    experience_id: int
    creator_id: Optional[int] = None
    title: str
    description: str = ""
    price: float = Field(0.0, ge=0)
    unit: str = "Entry"
    status: str = "active"
    travel_companions: List[str] = Field(
        default_factory=lambda: ["Any"],
        validation_alias=AliasChoices("travel_companions", "travel_companion"),
    )
    tags: List[str] = Field(default_factory=list, validation_alias=AliasChoices("tags", "tag_names"))
    destination_name: str = ""
    area: str = Field("", validation_alias=AliasChoices("area", "city"))
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_from_city_center: Optional[float] = None
    availability: Dict[str, List[TimeWindow]] = Field(default_factory=dict)

    @field_validator("travel_companions", mode="before")
    @classmethod
    def _split_companions(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("availability", mode="before")
    @classmethod
    def _normalize_days(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {normalize_weekday(str(day)): windows for day, windows in value.items()}
        return value

    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


# ------- Request models -------
class TravelerPreferences(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    traveler_id: Optional[int] = None
    area: str = Field("", validation_alias=AliasChoices("area", "city"))
    start_date: date
    end_date: date
    experience_types: List[str] = Field(default_factory=list)
    travel_companions: List[str] = Field(
        default_factory=lambda: ["Any"],
        validation_alias=AliasChoices("travel_companions", "travel_companion"),
    )
    explore_time: ExploreTime = "both"
    budget: BudgetTier = "any"
    activity_intensity: ActivityIntensity
    travel_distance: TravelDistance
    title: Optional[str] = None
    notes: Optional[str] = None
    seed: Optional[int] = None

    @field_validator("explore_time", "activity_intensity", "travel_distance", mode="before")
    @classmethod
    def _lower_enum(cls, value: Any) -> Any:
        return _slug(value)

    @field_validator("budget", mode="before")
    @classmethod
    def _budget_alias(cls, value: Any) -> Any:
        slug = _slug(value)
        return _BUDGET_ALIASES.get(slug, slug) if isinstance(slug, str) else slug

    @field_validator("travel_companions", mode="before")
    @classmethod
    def _companions(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        if isinstance(value, list):
            normalized: List[str] = []
            for raw in value:
                cleaned = str(raw).strip().capitalize()
                if cleaned not in COMPANION_TYPES:
                    raise ValueError(
                        f"Unknown travel companion {raw!r}; expected one of {', '.join(COMPANION_TYPES)}"
                    )
                if cleaned not in normalized:
                    normalized.append(cleaned)
            if not normalized:
                raise ValueError("At least one travel companion type is required")
            return normalized
        return value

    @field_validator("experience_types", mode="before")
    @classmethod
    def _types(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @model_validator(mode="after")
    def _check_dates(self) -> "TravelerPreferences":
        if self.start_date > self.end_date:
            raise ValueError("Start date cannot be after end date")
        return self

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def accepts_any_companion(self) -> bool:
        return "Any" in self.travel_companions


# ------- Response models -------
class CandidateExperience(BaseModel):
    experience: Experience
    distance_km: Optional[float] = None


class StageCount(BaseModel):
    stage: str
    remaining: int


class SelectionDiagnostics(BaseModel):
    stage_counts: List[StageCount] = Field(default_factory=list)
    blocking_stage: Optional[str] = None
    suggestions: List[str] = Field(default_factory=list)


class ItineraryItem(BaseModel):
    experience_id: int
    day_number: int = Field(..., ge=1)
    start_time: time
    end_time: time
    custom_note: str = ""
    experience_name: str = ""
    experience_description: str = ""
    destination_name: str = ""
    destination_city: str = ""
    price: Optional[float] = None
    unit: Optional[str] = None
    distance_km: Optional[float] = None

    @field_serializer("start_time", "end_time")
    def _hhmm(self, value: time) -> str:
        return value.strftime("%H:%M")


class ItineraryDraft(BaseModel):
    itinerary_id: int = -1
    traveler_id: Optional[int] = None
    title: str
    notes: str
    start_date: date
    end_date: date
    created_at: datetime
    status: Literal["preview"] = "preview"
    items: List[ItineraryItem] = Field(default_factory=list)


class DayShortfall(BaseModel):
    day_number: int
    day_date: date
    quota: int
    scheduled: int


class GenerationResult(BaseModel):
    status: Literal["generated", "no_experiences"]
    message: str
    draft: Optional[ItineraryDraft] = None
    total_experiences: int = 0
    selected_experiences: int = 0
    activity_intensity: ActivityIntensity
    travel_distance: TravelDistance
    reference_point_resolved: bool = False
    distance_preference_applied: bool = False
    shortfalls: List[DayShortfall] = Field(default_factory=list)
    diagnostics: Optional[SelectionDiagnostics] = None
    notes: List[str] = Field(default_factory=list)


class CandidatePreview(BaseModel):
    candidates: List[CandidateExperience] = Field(default_factory=list)
    reference_point_resolved: bool = False
    distance_preference_applied: bool = False
    diagnostics: SelectionDiagnostics


# ------- Save path -------
class SaveItemRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    experience_id: int
    day_number: int
    start_time: time
    end_time: time
    custom_note: str = ""


class SaveItineraryRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    traveler_id: int
    start_date: date
    end_date: date
    title: str = Field(..., min_length=1)
    notes: Optional[str] = None
    items: List[SaveItemRequest]

    @model_validator(mode="after")
    def _check_dates(self) -> "SaveItineraryRequest":
        if self.start_date > self.end_date:
            raise ValueError("Start date cannot be after end date")
        return self

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1


class SavedItem(BaseModel):
    item_id: int
    experience_id: int
    day_number: int
    start_time: time
    end_time: time
    custom_note: str = ""
    experience_name: str = ""
    experience_description: str = ""
    destination_name: str = ""
    destination_city: str = ""
    price: Optional[float] = None
    unit: Optional[str] = None

    @field_serializer("start_time", "end_time")
    def _hhmm(self, value: time) -> str:
        return value.strftime("%H:%M")


class BookingRecord(BaseModel):
    booking_id: int
    itinerary_id: int
    item_id: int
    experience_id: int
    traveler_id: int
    creator_id: Optional[int] = None
    booking_date: date
    start_time: time
    end_time: time
    status: str = "Confirmed"
    payment_status: str = "Unpaid"

    @field_serializer("start_time", "end_time")
    def _hhmm(self, value: time) -> str:
        return value.strftime("%H:%M")


class SavedItinerary(BaseModel):
    itinerary_id: int
    traveler_id: int
    title: str
    notes: str
    start_date: date
    end_date: date
    created_at: datetime
    status: str = "upcoming"
    items: List[SavedItem] = Field(default_factory=list)
    bookings: List[BookingRecord] = Field(default_factory=list)


class Notification(BaseModel):
    user_id: int
    type: str
    title: str
    description: str
    itinerary_id: Optional[int] = None
    experience_id: Optional[int] = None
    booking_id: Optional[int] = None
