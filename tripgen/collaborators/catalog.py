"""Read-only access to the experience catalog."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from tripgen.engine.availability import resolve_windows
from tripgen.log import get_logger
from tripgen.schemas import Experience, TimeWindow

logger = get_logger(__name__)


class ExperienceCatalog(Protocol):
    async def list_experiences(self) -> List[Experience]:
        ...

    async def get_experience(self, experience_id: int) -> Optional[Experience]:
        ...

    async def availability_for(self, experience_id: int, weekday: str) -> List[TimeWindow]:
        ...


class InMemoryCatalog:
    """Catalog held in memory, typically loaded from a JSON export."""

    def __init__(self, experiences: Iterable[Experience]):
        self._experiences: Dict[int, Experience] = {}
        for experience in experiences:
            self._experiences[experience.experience_id] = experience

    @classmethod
    def from_json(cls, path: Path | str) -> "InMemoryCatalog":
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        records = raw.get("experiences", []) if isinstance(raw, dict) else raw
        experiences = [Experience.model_validate(record) for record in records]
        logger.info("Loaded %d experience(s) from %s", len(experiences), path)
        return cls(experiences)

    async def list_experiences(self) -> List[Experience]:
        return list(self._experiences.values())

    async def get_experience(self, experience_id: int) -> Optional[Experience]:
        return self._experiences.get(experience_id)

    async def availability_for(self, experience_id: int, weekday: str) -> List[TimeWindow]:
        experience = self._experiences.get(experience_id)
        if experience is None:
            return []
        return resolve_windows(experience, weekday)
