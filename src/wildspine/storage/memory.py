"""In-memory repository for testing.

Provides a complete in-memory implementation of the Repository protocol,
useful for testing, development, and small datasets.

Example:
    >>> from wildspine.storage.memory import MemoryRepository
    >>> repo = MemoryRepository()
    >>> hasattr(repo, 'most_recent_sighting')
    True

Note:
    All methods are async. Use within async context or with asyncio.run().
"""

from __future__ import annotations

from collections import defaultdict
from datetime import UTC, datetime
from itertools import count

from wildspine.models.animal import TrackedAnimal
from wildspine.models.sighting import Sighting


def _sort_key(value: datetime) -> datetime:
    # naive timestamps are treated as UTC so mixed inputs still order
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class MemoryRepository:
    """In-memory repository using dictionaries.

    Safe for single-process async usage.
    Data is lost when the process exits.

    Best for: Testing, development, small datasets.

    Example:
        >>> from wildspine.storage.memory import MemoryRepository
        >>> r = MemoryRepository()
        >>> r._initialized
        False
    """

    def __init__(self) -> None:
        self._animals: dict[int, TrackedAnimal] = {}
        self._sightings: dict[int, list[Sighting]] = defaultdict(list)  # animal_id -> sightings
        self._animal_ids = count(1)
        self._sighting_ids = count(1)
        self._initialized = False

    async def initialize(self) -> None:
        """No-op for memory storage."""
        self._initialized = True

    async def close(self) -> None:
        """Clear all data."""
        self._animals.clear()
        self._sightings.clear()
        self._initialized = False

    # --- Animal Operations ---

    async def create_animal(self, animal: TrackedAnimal) -> int:
        animal_id = next(self._animal_ids)
        self._animals[animal_id] = animal.model_copy(update={"id": animal_id})
        return animal_id

    async def get_animal(self, animal_id: int) -> TrackedAnimal | None:
        return self._animals.get(animal_id)

    async def animals_page(self, offset: int, limit: int) -> tuple[list[TrackedAnimal], int]:
        animals = sorted(
            self._animals.values(),
            key=lambda a: _sort_key(a.last_seen),
            reverse=True,
        )
        return animals[offset : offset + limit], len(animals)

    # --- Sighting Operations ---

    async def create_sighting(self, sighting: Sighting) -> int:
        sighting_id = next(self._sighting_ids)
        self._sightings[sighting.animal_id].append(sighting.model_copy(update={"id": sighting_id}))
        return sighting_id

    async def most_recent_sighting(self, animal_id: int) -> Sighting | None:
        sightings = self._sightings.get(animal_id)
        if not sightings:
            return None
        return max(sightings, key=lambda s: _sort_key(s.timestamp))

    async def all_sightings(self, animal_id: int) -> list[Sighting]:
        return sorted(
            self._sightings.get(animal_id, []),
            key=lambda s: _sort_key(s.timestamp),
            reverse=True,
        )

    async def sightings_page(
        self,
        animal_id: int,
        offset: int,
        limit: int,
    ) -> tuple[list[Sighting], int]:
        sightings = await self.all_sightings(animal_id)
        return sightings[offset : offset + limit], len(sightings)

    # --- Utility Methods ---

    def sighting_count(self) -> int:
        """Return number of stored sightings across all animals.

        Example:
            >>> from wildspine.storage.memory import MemoryRepository
            >>> MemoryRepository().sighting_count()
            0
        """
        return sum(len(s) for s in self._sightings.values())
