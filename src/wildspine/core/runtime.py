"""Runtime wiring.

Owns the long-lived collaborators (repository, queue, consumer) and hands the
same queue instance to both the publishing service and the consumer loop.

Shutdown order is fixed: stop the consumer, close the queue, close the
repository.

Example:
    >>> import asyncio
    >>> from wildspine.core.config import get_settings
    >>> from wildspine.core.runtime import Runtime
    >>> async def example():
    ...     async with Runtime(get_settings()) as runtime:
    ...         return runtime.consumer.running
    >>> asyncio.run(example())
    True
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from wildspine.core.config import Settings, get_settings
from wildspine.core.exceptions import ConfigurationError
from wildspine.core.service import SightingIngestionService
from wildspine.notifier.console import ConsoleMailer
from wildspine.queue.consumer import MessageHandler, QueueConsumer
from wildspine.storage.factory import repository_from_settings
from wildspine.utils.retry import RedeliveryPolicy

if TYPE_CHECKING:
    from wildspine.protocols.queue import MessageQueue
    from wildspine.protocols.repository import Repository

logger = logging.getLogger(__name__)


def queue_from_settings(settings: Settings) -> MessageQueue:
    """Create the queue selected by ``queue_backend``."""
    if settings.queue_backend == "memory":
        from wildspine.queue.memory import MemoryQueue

        return MemoryQueue(settings.queue_name)

    url = settings.queue_url or settings.database_url
    if not url:
        raise ConfigurationError("WILDSPINE_QUEUE_URL or WILDSPINE_DATABASE_URL is required for the sql queue")

    from wildspine.queue.sql import SQLQueue

    return SQLQueue(url, settings.queue_name, poll_interval=settings.queue_poll_interval)


class Runtime:
    """Build, start and stop the ingestion pipeline.

    Args:
        settings: Application settings (default: from environment).
        repository: Override the configured repository.
        queue: Override the configured queue.
        handler: Consumer message handler (default: ConsoleMailer).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        repository: Repository | None = None,
        queue: MessageQueue | None = None,
        handler: MessageHandler | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.repository = repository or repository_from_settings(self.settings)
        self.queue = queue or queue_from_settings(self.settings)
        self.handler: MessageHandler = handler or ConsoleMailer()
        self.service = SightingIngestionService(
            self.repository,
            self.queue,
            threshold_km=self.settings.dedup_threshold_km,
            reject_zero_coordinates=self.settings.reject_zero_coordinates,
            default_page_size=self.settings.default_page_size,
        )
        self.consumer = QueueConsumer(
            self.queue,
            RedeliveryPolicy.from_settings(self.settings),
            shutdown_timeout=self.settings.consumer_shutdown_timeout,
        )
        self._initialized = False

    async def initialize(self, *, start_consumer: bool = True) -> None:
        """Open backends and optionally start the consumer task."""
        await self.repository.initialize()
        await self.queue.initialize()
        if start_consumer:
            self.consumer.start(self.handler)
        self._initialized = True
        logger.info(
            f"Runtime started (storage={self.settings.storage_backend}, "
            f"queue={self.settings.queue_backend}:{self.queue.name})"
        )

    async def close(self) -> None:
        """Stop consuming before closing the queue connection."""
        await self.consumer.stop()
        await self.queue.close()
        await self.repository.close()
        self._initialized = False
        logger.info("Runtime stopped")

    async def __aenter__(self) -> Runtime:
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
