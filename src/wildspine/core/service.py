"""Sighting ingestion service.

Orchestrates a sighting submission:

1. Validate required fields
2. Compare against the animal's most recent prior sighting (dedup)
3. Persist the sighting
4. Load the animal's full history
5. Publish one notification batch (best-effort)

Persistence and notification are independent steps: a publish failure is
logged and the submission still succeeds. Nothing serializes concurrent
submissions for the same animal, so two near-simultaneous reports that are
close to each other but far from the old prior sighting can both be accepted.

Example:
    >>> from wildspine.core.service import SightingIngestionService
    >>> from wildspine.queue.memory import MemoryQueue
    >>> from wildspine.storage.memory import MemoryRepository
    >>> service = SightingIngestionService(MemoryRepository(), MemoryQueue())
    >>> service.threshold_km
    5.0
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

from wildspine.core.exceptions import (
    DuplicateSightingError,
    NotFoundError,
    NotificationError,
    PersistenceError,
    StorageError,
    ValidationError,
)
from wildspine.models import Coordinates, Sighting, TrackedAnimal
from wildspine.notifier.composer import NotificationComposer
from wildspine.utils.geo import distance_km
from wildspine.utils.pagination import DEFAULT_PAGE_SIZE, Page, normalize_page, offset_for

if TYPE_CHECKING:
    from wildspine.protocols.queue import MessageQueue
    from wildspine.protocols.repository import Repository

logger = logging.getLogger(__name__)

DEDUP_THRESHOLD_KM = 5.0

_ZERO_TIME = datetime.min.replace(tzinfo=UTC)


def _is_zero_time(value: datetime) -> bool:
    # 0001-01-01T00:00:00Z is the "unset" timestamp many clients send for an empty field
    if value.tzinfo is None:
        return value == datetime.min
    return value == _ZERO_TIME


def _sort_key(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SightingIngestionService:
    """Validate, dedup, persist and announce sightings.

    Args:
        repository: Animal and sighting repository.
        queue: Queue for notification batches. ``None`` disables notification.
        composer: Notification batch builder.
        threshold_km: Dedup radius; new sightings at or inside it are rejected.
        reject_zero_coordinates: Treat a 0.0 latitude or longitude as missing.
        default_page_size: Page size used when the caller's is unusable.
    """

    def __init__(
        self,
        repository: Repository,
        queue: MessageQueue | None = None,
        *,
        composer: NotificationComposer | None = None,
        threshold_km: float = DEDUP_THRESHOLD_KM,
        reject_zero_coordinates: bool = True,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._repository = repository
        self._queue = queue
        self._composer = composer or NotificationComposer()
        self.threshold_km = threshold_km
        self.reject_zero_coordinates = reject_zero_coordinates
        self.default_page_size = default_page_size

    @property
    def repository(self) -> Repository:
        return self._repository

    @property
    def queue(self) -> MessageQueue | None:
        return self._queue

    # =========================================================================
    # Sightings
    # =========================================================================

    def _validate(
        self,
        coordinates: Coordinates | None,
        timestamp: datetime | None,
        reporter_email: str | None,
    ) -> list[str]:
        missing: list[str] = []
        if coordinates is None:
            missing.extend(["lat", "long"])
        elif self.reject_zero_coordinates:
            if coordinates.lat == 0:
                missing.append("lat")
            if coordinates.long == 0:
                missing.append("long")
        if timestamp is None or _is_zero_time(timestamp):
            missing.append("timestamp")
        if not reporter_email or not reporter_email.strip():
            missing.append("reporter_email")
        return missing

    async def submit_sighting(
        self,
        animal_id: int,
        coordinates: Coordinates | None,
        timestamp: datetime | None,
        reporter_email: str | None,
        image: bytes | None = None,
    ) -> int:
        """Record a new sighting and notify prior reporters.

        Returns:
            ID of the persisted sighting.

        Raises:
            ValidationError: A required field is missing or zero/empty.
            DuplicateSightingError: Within ``threshold_km`` of the animal's
                most recent prior sighting. Nothing is persisted.
            PersistenceError: The repository failed; no notification is sent.
        """
        missing = self._validate(coordinates, timestamp, reporter_email)
        if missing:
            logger.info(f"Rejected sighting for animal {animal_id}: missing {', '.join(missing)}")
            raise ValidationError(f"{', '.join(missing)} required")

        try:
            previous = await self._repository.most_recent_sighting(animal_id)
        except StorageError as e:
            raise PersistenceError("Failed to retrieve previous sighting") from e

        if previous is not None:
            distance = distance_km(previous.coordinates, coordinates)
            if distance <= self.threshold_km:
                logger.info(
                    f"Rejected duplicate sighting for animal {animal_id}: "
                    f"{distance:.3f} km from sighting {previous.id}"
                )
                raise DuplicateSightingError(
                    f"A sighting within {self.threshold_km:g} kilometers already exists",
                    distance_km=distance,
                    prior_sighting_id=previous.id,
                )

        sighting = Sighting(
            animal_id=animal_id,
            timestamp=timestamp,
            lat=coordinates.lat,
            long=coordinates.long,
            image=image,
            reporter_email=reporter_email,
        )
        try:
            sighting_id = await self._repository.create_sighting(sighting)
        except StorageError as e:
            raise PersistenceError("Failed to create sighting") from e

        logger.info(f"Accepted sighting {sighting_id} for animal {animal_id}")

        try:
            await self._notify(animal_id)
        except NotificationError as e:
            logger.warning(f"Notification for sighting {sighting_id} not sent: {e}")

        return sighting_id

    async def _notify(self, animal_id: int) -> None:
        """Publish the animal's history as one batch. Raises NotificationError."""
        if self._queue is None:
            return

        try:
            history = await self._repository.all_sightings(animal_id)
        except StorageError as e:
            raise NotificationError(f"failed to load sighting history: {e}") from e

        body = self._composer.compose(history)
        try:
            message_id = await self._queue.publish(body)
        except Exception as e:
            raise NotificationError(f"failed to publish message: {e}") from e

        logger.debug(f"Published batch {message_id} with {len(history)} notification(s)")

    async def list_sightings(self, animal_id: int, page: Any = None, page_size: Any = None) -> Page[Sighting]:
        """One page of an animal's sightings, newest first."""
        page_no, size = normalize_page(page, page_size, default_page_size=self.default_page_size)
        try:
            items, total = await self._repository.sightings_page(animal_id, offset_for(page_no, size), size)
        except StorageError as e:
            raise PersistenceError("Failed to fetch sightings") from e

        items = sorted(items, key=lambda s: _sort_key(s.timestamp), reverse=True)
        return Page.build(items, page_no, size, total)

    # =========================================================================
    # Animals
    # =========================================================================

    async def create_animal(
        self,
        name: str,
        date_of_birth: date,
        last_seen: datetime,
        coordinates: Coordinates,
    ) -> TrackedAnimal:
        """Register a tracked animal.

        Raises:
            ValidationError: If the name is empty.
            PersistenceError: The repository failed.
        """
        if not name or not name.strip():
            raise ValidationError("name required")

        animal = TrackedAnimal(
            name=name,
            date_of_birth=date_of_birth,
            last_seen=last_seen,
            lat=coordinates.lat,
            long=coordinates.long,
        )
        try:
            animal_id = await self._repository.create_animal(animal)
        except StorageError as e:
            raise PersistenceError("Failed to create animal") from e

        logger.info(f"Created animal {animal_id} ({animal.name})")
        return animal.model_copy(update={"id": animal_id})

    async def get_animal(self, animal_id: int) -> TrackedAnimal:
        """Look up an animal.

        Raises:
            NotFoundError: No animal with this ID.
        """
        try:
            animal = await self._repository.get_animal(animal_id)
        except StorageError as e:
            raise PersistenceError("Failed to fetch animal") from e
        if animal is None:
            raise NotFoundError(f"Animal {animal_id} not found")
        return animal

    async def list_animals(self, page: Any = None, page_size: Any = None) -> Page[TrackedAnimal]:
        """One page of animals, most recently seen first."""
        page_no, size = normalize_page(page, page_size, default_page_size=self.default_page_size)
        try:
            items, total = await self._repository.animals_page(offset_for(page_no, size), size)
        except StorageError as e:
            raise PersistenceError("Failed to fetch animals") from e

        items = sorted(items, key=lambda a: _sort_key(a.last_seen), reverse=True)
        return Page.build(items, page_no, size, total)
