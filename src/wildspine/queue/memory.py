"""In-memory message queue implementation.

Provides an in-process implementation of the MessageQueue protocol, useful for
testing and single-process deployments. Messages survive until acknowledged
but not a process restart.

Example:
    >>> from wildspine.queue.memory import MemoryQueue
    >>> queue = MemoryQueue("sightings")
    >>> hasattr(queue, 'publish')
    True
    >>> hasattr(queue, 'subscribe')
    True
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import replace
from typing import Any
from uuid import uuid4

from wildspine.core.exceptions import QueueError
from wildspine.protocols.queue import Message

logger = logging.getLogger("wildspine.queue.memory")


class MemoryQueue:
    """In-memory work queue with manual acknowledgment.

    Uses one asyncio queue per named queue. Each message is delivered to a
    single subscriber; a nack with requeue puts it back at the tail.

    Best for: Testing, development, single-process apps.

    Example:
        >>> import asyncio
        >>> from wildspine.queue.memory import MemoryQueue
        >>> queue = MemoryQueue()
        >>> asyncio.run(queue.initialize())
        >>> msg_id = asyncio.run(queue.publish(b"[]"))
        >>> len(msg_id) > 0
        True
        >>> queue.depth()
        1
    """

    def __init__(self, name: str = "sightings", max_queue_size: int = 0) -> None:
        """Initialize the queue.

        Args:
            name: Queue name.
            max_queue_size: Maximum ready messages (0 = unbounded).
        """
        self._name = name
        self._ready: asyncio.Queue[Message | None] = asyncio.Queue(maxsize=max_queue_size)
        self._pending: dict[str, Message] = {}  # message_id -> Message (unacked)
        self._subscribers = 0
        self._initialized = False
        self._closed = False

    @property
    def name(self) -> str:
        return self._name

    async def initialize(self) -> None:
        """Declare the queue.

        Example:
            >>> import asyncio
            >>> from wildspine.queue.memory import MemoryQueue
            >>> q = MemoryQueue()
            >>> asyncio.run(q.initialize())
            >>> q._initialized
            True
        """
        self._initialized = True
        self._closed = False

    async def close(self) -> None:
        """Wake and stop subscribers, then drop unacked bookkeeping."""
        self._closed = True
        for _ in range(self._subscribers):
            # Signal subscribers to stop
            self._ready.put_nowait(None)
        self._pending.clear()
        self._initialized = False

    async def publish(self, body: bytes, metadata: dict[str, Any] | None = None) -> str:
        """Publish a message to the queue.

        Args:
            body: Message body.
            metadata: Optional metadata.

        Returns:
            Message ID.

        Raises:
            QueueError: If the queue is closed or full.
        """
        if self._closed:
            raise QueueError(f"Queue '{self._name}' is closed")

        message = Message(
            message_id=str(uuid4()),
            body=body,
            queue=self._name,
            metadata=metadata,
        )
        try:
            self._ready.put_nowait(message)
        except asyncio.QueueFull as e:
            raise QueueError(f"Queue '{self._name}' is full") from e

        return message.message_id

    async def subscribe(self) -> AsyncIterator[Message]:
        """Yield messages in delivery order until the queue is closed.

        Yields:
            Messages as they arrive.
        """
        self._subscribers += 1
        try:
            while True:
                message = await self._ready.get()
                if message is None:  # Shutdown signal
                    break
                self._pending[message.message_id] = message
                yield message
        finally:
            self._subscribers -= 1

    async def ack(self, message: Message) -> None:
        """Acknowledge message processing.

        Args:
            message: Message to acknowledge.

        Example:
            >>> import asyncio
            >>> from wildspine.queue.memory import MemoryQueue
            >>> from wildspine.protocols.queue import Message
            >>> q = MemoryQueue()
            >>> msg = Message(message_id="m1", body=b"", queue="sightings")
            >>> q._pending["m1"] = msg
            >>> asyncio.run(q.ack(msg))
            >>> "m1" in q._pending
            False
        """
        self._pending.pop(message.message_id, None)

    async def nack(self, message: Message, requeue: bool = True) -> None:
        """Negative acknowledge - message was not processed.

        Args:
            message: Message that failed.
            requeue: Whether to put it back at the tail for redelivery.
        """
        self._pending.pop(message.message_id, None)

        if not requeue:
            logger.debug(f"Discarded message {message.message_id}")
            return
        if self._closed:
            logger.warning(f"Queue closed, cannot requeue message {message.message_id}")
            return

        try:
            self._ready.put_nowait(replace(message, attempt=message.attempt + 1))
        except asyncio.QueueFull as e:
            raise QueueError(f"Queue '{self._name}' is full, requeue failed") from e

    # --- Utility Methods ---

    def depth(self) -> int:
        """Return number of messages waiting for delivery.

        Example:
            >>> from wildspine.queue.memory import MemoryQueue
            >>> MemoryQueue().depth()
            0
        """
        return self._ready.qsize()

    def pending_count(self) -> int:
        """Return number of delivered but unacknowledged messages.

        Example:
            >>> from wildspine.queue.memory import MemoryQueue
            >>> MemoryQueue().pending_count()
            0
        """
        return len(self._pending)
