"""Static reference coordinates for Negros Occidental cities and municipalities.

Free-text area names coming from travelers are normalised first
(``"bacolod_city"`` -> ``"Bacolod City"``, ``"silay"`` -> ``"Silay City"``)
and then looked up against the table below. A miss is not an error: callers
fall back to matching the area text recorded on each experience.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from tripgen.log import get_logger

logger = get_logger(__name__)

# Component cities: these carry the "City" suffix in the catalog.
CITY_CENTERS: Dict[str, Tuple[float, float]] = {
    "Bacolod City": (10.6770, 122.9540),
    "Bago City": (10.5382, 122.8314),
    "Cadiz City": (10.9525, 123.2887),
    "Escalante City": (10.8342, 123.5018),
    "Himamaylan City": (10.1006, 122.8700),
    "Kabankalan City": (9.9942, 122.8197),
    "La Carlota City": (10.4215, 122.9215),
    "Sagay City": (10.8965, 123.4173),
    "San Carlos City": (10.4814, 123.4189),
    "Silay City": (10.7959, 122.9715),
    "Sipalay City": (9.7528, 122.4036),
    "Talisay City": (10.7438, 122.9845),
    "Victorias City": (10.9043, 123.0735),
}

MUNICIPALITY_CENTERS: Dict[str, Tuple[float, float]] = {
    "Binalbagan": (10.1970, 122.8584),
    "Calatrava": (10.5987, 123.4631),
    "Candoni": (9.7833, 122.5833),
    "Cauayan": (9.9333, 122.7167),
    "Enrique B. Magalona": (10.8167, 123.0167),
    "E.B. Magalona": (10.8167, 123.0167),
    "EB Magalona": (10.8167, 123.0167),
    "Hinigaran": (10.2667, 122.8500),
    "Hinoba-an": (9.6833, 122.3833),
    "Ilog": (10.0167, 122.7833),
    "Isabela": (10.2167, 122.9833),
    "La Castellana": (10.3167, 123.0167),
    "Manapla": (10.9500, 123.1500),
    "Moises Padilla": (10.2500, 123.0833),
    "Murcia": (10.6000, 123.1833),
    "Pontevedra": (10.3833, 122.8333),
    "Pulupandan": (10.5167, 122.8000),
    "Salvador Benedicto": (10.1667, 123.3500),
    "San Enrique": (10.4333, 122.7167),
    "Toboso": (10.7333, 123.5333),
    "Valladolid": (10.5667, 122.8167),
}

_CITY_SUFFIX = " City"


@dataclass(frozen=True)
class ReferencePoint:
    name: str
    latitude: float
    longitude: float


def _build_lookup() -> Dict[str, Tuple[str, Tuple[float, float]]]:
    lookup: Dict[str, Tuple[str, Tuple[float, float]]] = {}
    for name, coords in {**CITY_CENTERS, **MUNICIPALITY_CENTERS}.items():
        lookup[name.casefold()] = (name, coords)
        lookup[name.replace(" ", "").casefold()] = (name, coords)
        if name.endswith(_CITY_SUFFIX):
            bare = name[: -len(_CITY_SUFFIX)]
            lookup.setdefault(bare.casefold(), (name, coords))
    return lookup


_LOOKUP = _build_lookup()
_CITY_NAMES = {name[: -len(_CITY_SUFFIX)].casefold() for name in CITY_CENTERS}


def normalize_area_name(raw: str) -> str:
    """Return a display-normalised area name with the ``City`` suffix when due."""
    cleaned = re.sub(r"\s+", " ", (raw or "").replace("_", " ")).strip()
    if not cleaned:
        return ""
    words = [word[:1].upper() + word[1:].lower() for word in cleaned.split(" ")]
    normalized = " ".join(words)
    if normalized.casefold() in _CITY_NAMES:
        normalized += _CITY_SUFFIX
    return normalized


def _variants(raw: str, normalized: str) -> Iterable[str]:
    seen: List[str] = []
    stripped = raw.strip()
    for candidate in (
        normalized,
        stripped,
        stripped.lower(),
        normalized[: -len(_CITY_SUFFIX)] if normalized.endswith(_CITY_SUFFIX) else normalized,
        stripped.replace(" ", ""),
        normalized.replace(" ", ""),
    ):
        if candidate and candidate not in seen:
            seen.append(candidate)
            yield candidate


def resolve_reference_point(area: str) -> Optional[ReferencePoint]:
    """Look up the reference coordinate for a free-text area name.

    Returns ``None`` when the area is empty or unknown to the gazetteer.
    """
    if not area or not area.strip():
        return None
    normalized = normalize_area_name(area)
    for variant in _variants(area, normalized):
        hit = _LOOKUP.get(variant.casefold())
        if hit:
            name, (lat, lng) = hit
            logger.debug("Resolved area %r to %s via variant %r", area, name, variant)
            return ReferencePoint(name=name, latitude=lat, longitude=lng)
    logger.warning(
        "No reference coordinates for area %r (normalised %r); distance filtering disabled",
        area,
        normalized,
    )
    return None
