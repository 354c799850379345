"""Runtime settings for the itinerary engine and its collaborators.

Everything tunable lives here so the scheduling rules (buffers, radii, budget
tiers, quotas) can be adjusted per deployment through ``TRIPGEN_*``
environment variables or a local ``.env`` file.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "sample_catalog.json"


@dataclass(frozen=True)
class BudgetThresholds:
    free_max: float = 0.0
    budget_max: float = 500.0
    midrange_max: float = 2000.0


@dataclass(frozen=True)
class EngineSettings:
    buffer_minutes: int = 30
    nearby_radius_km: float = 10.0
    moderate_radius_km: float = 40.0
    far_band_near_km: float = 10.0
    far_band_moderate_km: float = 20.0
    moderate_jitter_km: float = 1.5
    daytime_start_hour: int = 6
    daytime_end_hour: int = 18
    late_day_hour: int = 15
    quotas: Dict[str, int] = field(
        default_factory=lambda: {"low": 2, "moderate": 3, "high": 4}
    )
    budget: BudgetThresholds = field(default_factory=BudgetThresholds)
    # Legacy behaviour: destinations without a precomputed distance survive the radius filter.
    keep_unknown_distance: bool = True

    def radius_for(self, travel_distance: Optional[str]) -> Optional[float]:
        if travel_distance == "nearby":
            return self.nearby_radius_km
        if travel_distance == "moderate":
            return self.moderate_radius_km
        return None

    def quota_for(self, intensity: str) -> int:
        return self.quotas.get(intensity, self.quotas["low"])


@dataclass(frozen=True)
class ServiceSettings:
    catalog_path: Path = DEFAULT_CATALOG_PATH
    notify_webhook_url: Optional[str] = None
    notify_timeout: float = 5.0
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    timezone: Optional[str] = None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_engine_settings() -> EngineSettings:
    """Build engine settings from the environment, falling back to defaults."""
    base = EngineSettings()
    return EngineSettings(
        buffer_minutes=_env_int("TRIPGEN_BUFFER_MINUTES", base.buffer_minutes),
        nearby_radius_km=_env_float("TRIPGEN_NEARBY_RADIUS_KM", base.nearby_radius_km),
        moderate_radius_km=_env_float("TRIPGEN_MODERATE_RADIUS_KM", base.moderate_radius_km),
        far_band_near_km=_env_float("TRIPGEN_FAR_BAND_NEAR_KM", base.far_band_near_km),
        far_band_moderate_km=_env_float("TRIPGEN_FAR_BAND_MODERATE_KM", base.far_band_moderate_km),
        moderate_jitter_km=_env_float("TRIPGEN_MODERATE_JITTER_KM", base.moderate_jitter_km),
        daytime_start_hour=_env_int("TRIPGEN_DAYTIME_START_HOUR", base.daytime_start_hour),
        daytime_end_hour=_env_int("TRIPGEN_DAYTIME_END_HOUR", base.daytime_end_hour),
        late_day_hour=_env_int("TRIPGEN_LATE_DAY_HOUR", base.late_day_hour),
        quotas={
            "low": _env_int("TRIPGEN_QUOTA_LOW", base.quotas["low"]),
            "moderate": _env_int("TRIPGEN_QUOTA_MODERATE", base.quotas["moderate"]),
            "high": _env_int("TRIPGEN_QUOTA_HIGH", base.quotas["high"]),
        },
        budget=BudgetThresholds(
            free_max=_env_float("TRIPGEN_BUDGET_FREE_MAX", base.budget.free_max),
            budget_max=_env_float("TRIPGEN_BUDGET_BUDGET_MAX", base.budget.budget_max),
            midrange_max=_env_float("TRIPGEN_BUDGET_MIDRANGE_MAX", base.budget.midrange_max),
        ),
        keep_unknown_distance=_env_bool("TRIPGEN_KEEP_UNKNOWN_DISTANCE", base.keep_unknown_distance),
    )


def load_service_settings() -> ServiceSettings:
    raw_origins = os.getenv("TRIPGEN_ALLOWED_ORIGINS") or "*"
    allowed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
    catalog_path = os.getenv("TRIPGEN_CATALOG_PATH")
    return ServiceSettings(
        catalog_path=Path(catalog_path) if catalog_path else DEFAULT_CATALOG_PATH,
        notify_webhook_url=os.getenv("TRIPGEN_NOTIFY_WEBHOOK_URL") or None,
        notify_timeout=_env_float("TRIPGEN_NOTIFY_TIMEOUT", 5.0),
        allowed_origins=allowed_origins or ["*"],
        timezone=os.getenv("TRIPGEN_TIMEZONE") or None,
    )
