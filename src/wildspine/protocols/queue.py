"""Message queue protocol.

Defines the interface for a durable, manually acknowledged work queue. Each
queue instance is bound to one named queue; every message is delivered to
exactly one consumer.

Example:
    >>> from wildspine.protocols.queue import Message
    >>> msg = Message(message_id="msg-1", body=b"[]", queue="sightings")
    >>> msg.body
    b'[]'
    >>> msg.attempt
    1
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable


@dataclass
class Message:
    """A delivered message.

    ``attempt`` counts deliveries and lives only on this envelope; the body is
    passed through untouched on every redelivery.

    Example:
        >>> from wildspine.protocols.queue import Message
        >>> m = Message(
        ...     message_id="m123",
        ...     body=b"payload",
        ...     queue="sightings",
        ...     attempt=2,
        ... )
        >>> m.redelivered
        True
    """

    message_id: str
    body: bytes
    queue: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    attempt: int = 1
    delivery_tag: int | None = None
    metadata: dict[str, Any] | None = None

    @property
    def redelivered(self) -> bool:
        return self.attempt > 1


@runtime_checkable
class MessageQueue(Protocol):
    """Durable work queue protocol."""

    @property
    def name(self) -> str:
        """Name of the declared queue."""
        ...

    async def publish(self, body: bytes, metadata: dict[str, Any] | None = None) -> str:
        """Publish one message. Returns message ID. Raises QueueError."""
        ...

    def subscribe(self) -> AsyncIterator[Message]:
        """Yield messages one at a time in delivery order until closed."""
        ...

    async def ack(self, message: Message) -> None:
        """Acknowledge message; it is permanently removed."""
        ...

    async def nack(self, message: Message, requeue: bool = True) -> None:
        """Negative acknowledge. Requeued messages go to the tail."""
        ...

    async def initialize(self) -> None:
        """Declare the queue."""
        ...

    async def close(self) -> None:
        """Stop deliveries and release the connection."""
        ...
