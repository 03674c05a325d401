"""Tests for QueueConsumer.

Tests cover:
- Ack on success, requeue on failure
- Redelivery order and body stability
- Bounded redelivery policy
- Start/stop lifecycle, including in-flight shutdown
"""

import asyncio
import logging

import pytest

from wildspine.core.exceptions import QueueError
from wildspine.queue.consumer import ConsumerStats, QueueConsumer
from wildspine.queue.memory import MemoryQueue
from wildspine.utils.retry import RedeliveryPolicy


async def eventually(predicate, timeout=2.0):
    """Yield to the loop until ``predicate()`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
async def queue():
    q = MemoryQueue()
    await q.initialize()
    yield q
    await q.close()


class FlakyQueue(MemoryQueue):
    """MemoryQueue whose first ack and first nack raise."""

    def __init__(self) -> None:
        super().__init__()
        self.ack_failures = 1
        self.nack_failures = 1

    async def ack(self, message):
        if self.ack_failures:
            self.ack_failures -= 1
            raise QueueError("connection reset")
        await super().ack(message)

    async def nack(self, message, requeue=True):
        if self.nack_failures:
            self.nack_failures -= 1
            raise QueueError("connection reset")
        await super().nack(message, requeue)


# =============================================================================
# Handling Tests
# =============================================================================


class TestConsumerHandling:
    """Tests for ack/requeue decisions."""

    async def test_success_acks(self, queue):
        """A handler that returns acks the message."""
        seen = []
        consumer = QueueConsumer(queue)
        await queue.publish(b"hello")

        consumer.start(seen.append)
        await eventually(lambda: consumer.stats.acked == 1)
        await consumer.stop()

        assert seen == [b"hello"]
        assert queue.pending_count() == 0
        assert queue.depth() == 0

    async def test_async_handler(self, queue):
        """Coroutine handlers are awaited."""
        seen = []

        async def handler(body):
            await asyncio.sleep(0)
            seen.append(body)

        consumer = QueueConsumer(queue)
        await queue.publish(b"a")
        consumer.start(handler)
        await eventually(lambda: consumer.stats.acked == 1)
        await consumer.stop()

        assert seen == [b"a"]

    async def test_failures_requeue_same_body_until_success(self, queue):
        """A handler failing N times then succeeding sees N+1 identical bodies."""
        failures = 3
        bodies = []

        def handler(body):
            bodies.append(body)
            if len(bodies) <= failures:
                raise RuntimeError("mail server down")

        consumer = QueueConsumer(queue)
        await queue.publish(b'[{"subject": "Wildlife Sighting"}]')
        consumer.start(handler)
        await eventually(lambda: consumer.stats.acked == 1)
        await consumer.stop()

        assert len(bodies) == failures + 1
        assert len(set(bodies)) == 1
        assert consumer.stats.requeued == failures
        assert consumer.stats.dropped == 0
        assert consumer.stats.received == failures + 1

    async def test_requeued_message_goes_behind_waiting_ones(self, queue):
        """A failed message is redelivered after messages already queued."""
        order = []
        failed_once = set()

        def handler(body):
            order.append(body)
            if body == b"bad" and body not in failed_once:
                failed_once.add(body)
                raise ValueError("transient")

        for body in (b"bad", b"ok-1", b"ok-2"):
            await queue.publish(body)

        consumer = QueueConsumer(queue)
        consumer.start(handler)
        await eventually(lambda: consumer.stats.acked == 3)
        await consumer.stop()

        assert order == [b"bad", b"ok-1", b"ok-2", b"bad"]

    async def test_unbounded_policy_keeps_redelivering(self, queue):
        """The default policy never drops a failing message."""
        consumer = QueueConsumer(queue)

        def always_fail(body):
            raise RuntimeError("poison")

        await queue.publish(b"poison")
        consumer.start(always_fail)
        await eventually(lambda: consumer.stats.requeued >= 20)
        await consumer.stop()

        assert consumer.stats.dropped == 0
        assert consumer.stats.acked == 0

    async def test_bounded_policy_drops_after_max_attempts(self, queue):
        """With a cap, the message is dropped on its last attempt."""
        calls = []
        consumer = QueueConsumer(queue, RedeliveryPolicy(max_attempts=3))

        def always_fail(body):
            calls.append(body)
            raise RuntimeError("poison")

        await queue.publish(b"poison")
        consumer.start(always_fail)
        await eventually(lambda: consumer.stats.dropped == 1)
        await consumer.stop()

        assert len(calls) == 3
        assert consumer.stats.requeued == 2
        assert consumer.stats.failed == 3
        assert queue.depth() == 0
        assert queue.pending_count() == 0

    async def test_backoff_delay_is_applied(self, queue, monkeypatch):
        """Requeue waits for the policy delay."""
        delays = []
        real_sleep = asyncio.sleep

        async def fake_sleep(seconds, *args, **kwargs):
            if seconds > 0.01:
                delays.append(seconds)
                seconds = 0
            await real_sleep(seconds, *args, **kwargs)

        monkeypatch.setattr("wildspine.queue.consumer.asyncio.sleep", fake_sleep)
        consumer = QueueConsumer(queue, RedeliveryPolicy(max_attempts=3, base_delay=1.0))

        def always_fail(body):
            raise RuntimeError("down")

        await queue.publish(b"x")
        consumer.start(always_fail)
        await eventually(lambda: consumer.stats.dropped == 1)
        await consumer.stop()

        assert delays == [1.0, 2.0]


class TestConsumerQueueErrors:
    """Tests for ack/nack failures reported by the queue."""

    @pytest.fixture
    async def flaky(self):
        q = FlakyQueue()
        await q.initialize()
        yield q
        await q.close()

    async def test_ack_failure_keeps_consuming(self, flaky, caplog):
        """A failed ack is logged and the next message is still handled."""
        seen = []
        consumer = QueueConsumer(flaky)
        await flaky.publish(b"first")

        with caplog.at_level(logging.ERROR, logger="wildspine.queue.consumer"):
            consumer.start(seen.append)
            await eventually(lambda: seen == [b"first"])
            await flaky.publish(b"second")
            await eventually(lambda: consumer.stats.acked == 1)

            assert consumer.running
            await consumer.stop()

        assert seen == [b"first", b"second"]
        assert consumer.stats.received == 2
        assert flaky.pending_count() == 1
        assert "Ack failed" in caplog.text

    async def test_nack_failure_keeps_consuming(self, flaky, caplog):
        """A failed requeue is logged and the next message is still handled."""
        flaky.ack_failures = 0
        seen = []

        def handler(body):
            seen.append(body)
            if body == b"bad":
                raise RuntimeError("mail server down")

        consumer = QueueConsumer(flaky)
        await flaky.publish(b"bad")
        await flaky.publish(b"good")

        with caplog.at_level(logging.ERROR, logger="wildspine.queue.consumer"):
            consumer.start(handler)
            await eventually(lambda: consumer.stats.acked == 1)

            assert consumer.running
            await consumer.stop()

        assert seen == [b"bad", b"good"]
        assert consumer.stats.requeued == 0
        assert flaky.pending_count() == 1
        assert "Requeue failed" in caplog.text


# =============================================================================
# Lifecycle Tests
# =============================================================================


class TestConsumerLifecycle:
    """Tests for start/stop."""

    async def test_double_start_raises(self, queue):
        consumer = QueueConsumer(queue)
        consumer.start(lambda body: None)
        try:
            with pytest.raises(RuntimeError, match="already running"):
                consumer.start(lambda body: None)
        finally:
            await consumer.stop()

    async def test_stop_idle_consumer(self, queue):
        """An idle consumer stops immediately."""
        consumer = QueueConsumer(queue)
        consumer.start(lambda body: None)
        await asyncio.sleep(0)
        assert consumer.running

        await asyncio.wait_for(consumer.stop(), timeout=1.0)

        assert not consumer.running

    async def test_stop_when_never_started(self, queue):
        await QueueConsumer(queue).stop()

    async def test_stop_waits_for_in_flight_handler(self, queue):
        """An in-flight message is finished and acked before stopping."""
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow(body):
            started.set()
            await release.wait()

        consumer = QueueConsumer(queue, shutdown_timeout=2.0)
        await queue.publish(b"slow")
        await queue.publish(b"next")
        consumer.start(slow)
        await started.wait()

        stopper = asyncio.create_task(consumer.stop())
        await asyncio.sleep(0.01)
        release.set()
        await stopper

        assert consumer.stats.acked == 1
        assert queue.depth() == 1
        assert not consumer.running

    async def test_stop_timeout_requeues_in_flight(self, queue):
        """A handler that outlives the timeout is cancelled and its message requeued."""
        started = asyncio.Event()

        async def stuck(body):
            started.set()
            await asyncio.Event().wait()

        consumer = QueueConsumer(queue)
        await queue.publish(b"stuck")
        consumer.start(stuck)
        await started.wait()

        await consumer.stop(timeout=0.05)

        assert not consumer.running
        assert consumer.stats.acked == 0
        assert queue.pending_count() == 0
        assert queue.depth() == 1

        seen = []
        consumer.start(seen.append)
        await eventually(lambda: consumer.stats.acked == 1)
        await consumer.stop()

        assert seen == [b"stuck"]
        assert queue.depth() == 0

    async def test_release_failure_on_stop_is_logged(self, queue, caplog):
        """A cancelled message that cannot be requeued stays pending."""
        started = asyncio.Event()

        async def stuck(body):
            started.set()
            await asyncio.Event().wait()

        async def broken_nack(message, requeue=True):
            raise QueueError("connection reset")

        consumer = QueueConsumer(queue)
        await queue.publish(b"stuck")
        consumer.start(stuck)
        await started.wait()
        queue.nack = broken_nack

        with caplog.at_level(logging.ERROR, logger="wildspine.queue.consumer"):
            await consumer.stop(timeout=0.05)

        assert not consumer.running
        assert queue.pending_count() == 1
        assert "Could not release message" in caplog.text

    async def test_consume_returns_when_queue_closes(self):
        """consume() ends once the queue is closed."""
        queue = MemoryQueue()
        await queue.initialize()
        consumer = QueueConsumer(queue)

        task = asyncio.create_task(consumer.consume(lambda body: None))
        await asyncio.sleep(0.01)
        await queue.close()

        await asyncio.wait_for(task, timeout=1.0)

    async def test_restart_after_stop(self, queue):
        """A stopped consumer can be started again."""
        consumer = QueueConsumer(queue)
        consumer.start(lambda body: None)
        await consumer.stop()

        consumer.start(lambda body: None)
        assert consumer.running
        await consumer.stop()


class TestConsumerStats:
    def test_failed_counts_requeued_and_dropped(self):
        assert ConsumerStats(requeued=2, dropped=1).failed == 3
