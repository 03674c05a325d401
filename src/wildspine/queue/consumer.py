"""Queue consumer loop.

Drains a MessageQueue one message at a time and hands each body to a handler:

- handler returns: the message is acknowledged
- handler raises: the message is requeued at the tail, or dropped once the
  redelivery policy runs out of attempts

The default policy has no attempt cap and no backoff, so a handler that always
fails keeps receiving the same message.

Example:
    >>> from wildspine.queue.consumer import QueueConsumer
    >>> from wildspine.queue.memory import MemoryQueue
    >>> consumer = QueueConsumer(MemoryQueue())
    >>> consumer.running
    False
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from wildspine.core.exceptions import ConsumerHandlerError, QueueError
from wildspine.utils.retry import RedeliveryPolicy

if TYPE_CHECKING:
    from wildspine.protocols.queue import Message, MessageQueue

logger = logging.getLogger("wildspine.queue.consumer")

MessageHandler = Callable[[bytes], Any] | Callable[[bytes], Awaitable[Any]]


@dataclass
class ConsumerStats:
    """Counters for one consumer.

    Example:
        >>> from wildspine.queue.consumer import ConsumerStats
        >>> stats = ConsumerStats(received=5, acked=3, requeued=2)
        >>> stats.failed
        2
    """

    received: int = 0
    acked: int = 0
    requeued: int = 0
    dropped: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def failed(self) -> int:
        return self.requeued + self.dropped


class QueueConsumer:
    """Single in-flight consumer for a MessageQueue.

    Args:
        queue: Queue to drain.
        policy: Redelivery policy (default: unbounded, no backoff).
        shutdown_timeout: Seconds ``stop()`` waits for an in-flight handler.
    """

    def __init__(
        self,
        queue: MessageQueue,
        policy: RedeliveryPolicy | None = None,
        *,
        shutdown_timeout: float = 5.0,
    ) -> None:
        self._queue = queue
        self._policy = policy or RedeliveryPolicy()
        self._shutdown_timeout = shutdown_timeout
        self._task: asyncio.Task[None] | None = None
        self._stopping = False
        self._in_flight: Message | None = None
        self.stats = ConsumerStats()

    @property
    def policy(self) -> RedeliveryPolicy:
        return self._policy

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def consume(self, handler: MessageHandler) -> None:
        """Block draining the queue until it closes or ``stop()`` is called.

        Queue errors on ack/nack are logged and the loop keeps going; the
        message stays unacknowledged for the backend to redeliver.
        """
        logger.info(f"Consuming from queue '{self._queue.name}'")
        subscription = self._queue.subscribe()
        try:
            async for message in subscription:
                self._in_flight = message
                try:
                    await self._process(message, handler)
                except asyncio.CancelledError:
                    await self._release(message)
                    raise
                finally:
                    self._in_flight = None
                if self._stopping:
                    break
        finally:
            await subscription.aclose()
            logger.info(f"Stopped consuming from queue '{self._queue.name}'")

    async def _process(self, message: Message, handler: MessageHandler) -> None:
        """Received -> Handling -> Acked | Requeued | Dropped."""
        self.stats.received += 1
        try:
            result = handler(message.body)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            error = ConsumerHandlerError(
                f"Handler failed for message {message.message_id}: {e}",
                message_id=message.message_id,
                attempt=message.attempt,
            )
            await self._handle_failure(message, error)
            return

        try:
            await self._queue.ack(message)
        except QueueError as e:
            logger.error(f"Ack failed for message {message.message_id}, left unacked: {e}")
            return
        self.stats.acked += 1
        logger.debug(f"Acked message {message.message_id} (attempt {message.attempt})")

    async def _handle_failure(self, message: Message, error: ConsumerHandlerError) -> None:
        if not self._policy.should_requeue(message.attempt):
            logger.error(f"{error}; giving up after {message.attempt} attempt(s)")
            try:
                await self._queue.nack(message, requeue=False)
            except QueueError as e:
                logger.error(f"Nack failed for message {message.message_id}, left unacked: {e}")
                return
            self.stats.dropped += 1
            return

        logger.warning(f"{error}; requeuing (attempt {message.attempt})")
        # a zero delay still yields, so a poison message cannot starve the loop
        await asyncio.sleep(self._policy.calculate_delay(message.attempt))
        try:
            await self._queue.nack(message, requeue=True)
        except QueueError as e:
            logger.error(f"Requeue failed for message {message.message_id}, left unacked: {e}")
            return
        self.stats.requeued += 1

    async def _release(self, message: Message) -> None:
        """Hand a cancelled in-flight message back to the queue tail."""
        try:
            await self._queue.nack(message, requeue=True)
        except QueueError as e:
            logger.error(f"Could not release message {message.message_id}: {e}")
            return
        logger.warning(f"Released in-flight message {message.message_id} on shutdown")

    # =========================================================================
    # Background task
    # =========================================================================

    def start(self, handler: MessageHandler) -> asyncio.Task[None]:
        """Run ``consume(handler)`` as a background task.

        Raises:
            RuntimeError: If the consumer is already running.
        """
        if self.running:
            raise RuntimeError("Consumer is already running")

        self._stopping = False
        self._task = asyncio.create_task(self.consume(handler), name=f"consumer:{self._queue.name}")
        self._task.add_done_callback(self._on_done)
        return self._task

    def _on_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Consumer for '{self._queue.name}' crashed: {exc!r}")

    async def stop(self, timeout: float | None = None) -> None:
        """Stop consuming.

        An idle consumer is cancelled at once. A consumer in the middle of a
        handler gets up to ``timeout`` seconds to finish and ack/nack before it
        is cancelled; a cancelled in-flight message is requeued at the tail.
        """
        task = self._task
        if task is None or task.done():
            return

        self._stopping = True
        wait = self._shutdown_timeout if timeout is None else timeout

        if self._in_flight is None:
            task.cancel()
        else:
            try:
                await asyncio.wait_for(asyncio.shield(task), timeout=wait)
            except TimeoutError:
                logger.warning(f"Consumer did not finish within {wait}s, cancelling")
                task.cancel()

        try:
            await task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None
