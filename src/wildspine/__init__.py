"""
WildSpine - Wildlife Sighting Ingestion and Notification.

WildSpine records sightings of tracked animals, rejects near-duplicate reports,
persists accepted ones and notifies earlier reporters through a durable work
queue.

Key Features:
- Proximity dedup against the most recent prior sighting (haversine, 5 km)
- Protocol-based repositories and queues (swap backends without code changes)
- Best-effort notification: publishing never fails a submission
- At-least-once consumer with ack / requeue and a configurable redelivery policy

Quick Start:
    from wildspine import Coordinates, Runtime

    async with Runtime() as runtime:
        sighting_id = await runtime.service.submit_sighting(
            animal_id=1,
            coordinates=Coordinates(lat=12.34, long=56.78),
            timestamp=datetime.now(UTC),
            reporter_email="ranger@example.org",
        )

Architecture:
    Repositories: MemoryRepository, SQLAlchemyRepository
    Queues: MemoryQueue, SQLQueue
    Consumer: QueueConsumer + RedeliveryPolicy
"""

from wildspine.core.exceptions import (
    ConfigurationError,
    ConsumerHandlerError,
    DuplicateSightingError,
    NotFoundError,
    NotificationError,
    PersistenceError,
    QueueError,
    StorageError,
    ValidationError,
    WildSpineError,
)
from wildspine.core.config import Settings, get_settings
from wildspine.core.runtime import Runtime
from wildspine.core.service import SightingIngestionService
from wildspine.models import Coordinates, NotificationMessage, Sighting, TrackedAnimal
from wildspine.notifier.composer import NotificationComposer
from wildspine.notifier.console import ConsoleMailer
from wildspine.protocols.queue import Message, MessageQueue
from wildspine.protocols.repository import Repository, SightingRepository
from wildspine.queue.consumer import ConsumerStats, QueueConsumer
from wildspine.queue.memory import MemoryQueue
from wildspine.storage.memory import MemoryRepository
from wildspine.utils.geo import distance_km
from wildspine.utils.pagination import Page, normalize_page
from wildspine.utils.retry import RedeliveryPolicy

__version__ = "0.1.0"

__all__ = [
    # Core
    "Runtime",
    "Settings",
    "SightingIngestionService",
    "get_settings",
    # Models
    "Coordinates",
    "NotificationMessage",
    "Sighting",
    "TrackedAnimal",
    # Protocols
    "Message",
    "MessageQueue",
    "Repository",
    "SightingRepository",
    # Backends
    "MemoryQueue",
    "MemoryRepository",
    # Notification
    "ConsoleMailer",
    "NotificationComposer",
    # Consumer
    "ConsumerStats",
    "QueueConsumer",
    "RedeliveryPolicy",
    # Utilities
    "Page",
    "distance_km",
    "normalize_page",
    # Errors
    "ConfigurationError",
    "ConsumerHandlerError",
    "DuplicateSightingError",
    "NotFoundError",
    "NotificationError",
    "PersistenceError",
    "QueueError",
    "StorageError",
    "ValidationError",
    "WildSpineError",
    "__version__",
]
