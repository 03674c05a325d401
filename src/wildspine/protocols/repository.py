"""Repository protocols.

Defines the persistence contract the ingestion service depends on.

Example:
    >>> from wildspine.protocols.repository import SightingRepository
    >>> hasattr(SightingRepository, "most_recent_sighting")
    True
    >>> hasattr(SightingRepository, "create_sighting")
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from wildspine.models import Sighting, TrackedAnimal


@runtime_checkable
class SightingRepository(Protocol):
    """Sighting persistence protocol.

    Implementations raise ``StorageError`` on backend failure.

    See Also:
        wildspine.storage.memory.MemoryRepository: In-memory implementation
    """

    async def initialize(self) -> None:
        """Prepare the backend (create schema, open pools)."""
        ...

    async def close(self) -> None:
        """Release resources."""
        ...

    async def create_sighting(self, sighting: Sighting) -> int:
        """Persist a sighting and return its assigned ID."""
        ...

    async def most_recent_sighting(self, animal_id: int) -> Sighting | None:
        """Sighting with the greatest timestamp for the animal, if any."""
        ...

    async def all_sightings(self, animal_id: int) -> list[Sighting]:
        """Every sighting for the animal, newest first."""
        ...

    async def sightings_page(
        self,
        animal_id: int,
        offset: int,
        limit: int,
    ) -> tuple[list[Sighting], int]:
        """One page of sightings (newest first) and the unpaginated total."""
        ...


@runtime_checkable
class AnimalRepository(Protocol):
    """Tracked animal persistence protocol."""

    async def create_animal(self, animal: TrackedAnimal) -> int:
        """Persist an animal and return its assigned ID."""
        ...

    async def get_animal(self, animal_id: int) -> TrackedAnimal | None:
        """Look up an animal by ID."""
        ...

    async def animals_page(self, offset: int, limit: int) -> tuple[list[TrackedAnimal], int]:
        """One page of animals (most recently seen first) and the total."""
        ...


@runtime_checkable
class Repository(SightingRepository, AnimalRepository, Protocol):
    """Combined repository used by the service layer."""
