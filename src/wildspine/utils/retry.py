"""Redelivery policy for queue consumers.

Decides whether a message whose handler failed goes back on the queue, and how
long to wait first. The default policy never gives up and never waits, so a
permanently failing handler sees the same message over and over.

Example:
    >>> from wildspine.utils.retry import RedeliveryPolicy
    >>> RedeliveryPolicy().should_requeue(attempt=10_000)
    True
    >>> bounded = RedeliveryPolicy(max_attempts=3)
    >>> bounded.should_requeue(attempt=3)
    False
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wildspine.core.config import Settings


@dataclass
class RedeliveryPolicy:
    """Configuration for redelivery behavior.

    Attributes:
        max_attempts: Maximum deliveries of one message (None = unbounded)
        base_delay: Delay in seconds before the first requeue (0 = none)
        max_delay: Maximum delay between redeliveries
        exponential_base: Multiplier for exponential backoff (default: 2)
        jitter: Random jitter factor (0-1)
    """

    max_attempts: int | None = None
    base_delay: float = 0.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: float = 0.0

    @classmethod
    def from_settings(cls, settings: Settings) -> RedeliveryPolicy:
        return cls(
            max_attempts=settings.redelivery_max_attempts,
            base_delay=settings.redelivery_base_delay,
            max_delay=settings.redelivery_max_delay,
        )

    @property
    def bounded(self) -> bool:
        return self.max_attempts is not None

    def calculate_delay(self, attempt: int) -> float:
        """Calculate the wait before requeuing after delivery ``attempt`` failed.

        Uses exponential backoff with jitter.

        Example:
            >>> from wildspine.utils.retry import RedeliveryPolicy
            >>> p = RedeliveryPolicy(base_delay=1.0, max_delay=5.0)
            >>> [p.calculate_delay(n) for n in (1, 2, 3, 4)]
            [1.0, 2.0, 4.0, 5.0]
        """
        if self.base_delay <= 0:
            return 0.0

        delay = self.base_delay * (self.exponential_base ** (attempt - 1))
        delay = min(delay, self.max_delay)

        if self.jitter > 0:
            jitter_amount = delay * self.jitter
            delay += random.uniform(-jitter_amount, jitter_amount)

        return max(0.0, delay)

    def should_requeue(self, attempt: int) -> bool:
        """Return True if a message that failed on delivery ``attempt`` goes back."""
        if self.max_attempts is None:
            return True
        return attempt < self.max_attempts


__all__ = ["RedeliveryPolicy"]
