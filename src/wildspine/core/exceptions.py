"""Custom exceptions.

WildSpine uses a hierarchy of exceptions so callers can tell failure kinds apart:

Example:
    >>> from wildspine.core.exceptions import DuplicateSightingError, ValidationError
    >>> isinstance(ValidationError("missing lat"), WildSpineError)
    True
    >>> try:
    ...     raise DuplicateSightingError("too close")
    ... except WildSpineError as e:
    ...     print(f"Caught: {type(e).__name__}")
    Caught: DuplicateSightingError
"""

from __future__ import annotations


class WildSpineError(Exception):
    """Base exception for WildSpine.

    Example:
        >>> from wildspine.core.exceptions import WildSpineError
        >>> e = WildSpineError("something went wrong")
        >>> str(e)
        'something went wrong'
    """


class ValidationError(WildSpineError):
    """A required field is missing or holds its zero/empty sentinel.

    Example:
        >>> from wildspine.core.exceptions import ValidationError
        >>> raise ValidationError("lat is required")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ValidationError: lat is required
    """


class DuplicateSightingError(WildSpineError):
    """New sighting lies within the dedup threshold of the most recent prior one.

    Example:
        >>> from wildspine.core.exceptions import DuplicateSightingError
        >>> e = DuplicateSightingError("too close", distance_km=1.5, prior_sighting_id=7)
        >>> e.distance_km
        1.5
        >>> e.prior_sighting_id
        7
    """

    def __init__(
        self,
        message: str,
        *,
        distance_km: float | None = None,
        prior_sighting_id: int | None = None,
    ) -> None:
        super().__init__(message)
        self.distance_km = distance_km
        self.prior_sighting_id = prior_sighting_id


class PersistenceError(WildSpineError):
    """The repository failed while serving a service operation."""


class NotificationError(WildSpineError):
    """Publishing a notification batch failed. Logged, never surfaced."""


class ConsumerHandlerError(WildSpineError):
    """A queue message handler failed. Drives the ack/nack decision only.

    Example:
        >>> from wildspine.core.exceptions import ConsumerHandlerError
        >>> e = ConsumerHandlerError("handler failed", message_id="m1", attempt=3)
        >>> (e.message_id, e.attempt)
        ('m1', 3)
    """

    def __init__(self, message: str, *, message_id: str | None = None, attempt: int = 1) -> None:
        super().__init__(message)
        self.message_id = message_id
        self.attempt = attempt


class StorageError(WildSpineError):
    """Storage operation failed.

    Example:
        >>> from wildspine.core.exceptions import StorageError
        >>> raise StorageError("connection lost")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        StorageError: connection lost
    """


class QueueError(WildSpineError):
    """Queue transport failed (connection, channel or declaration)."""


class NotFoundError(WildSpineError):
    """Requested resource not found.

    Example:
        >>> from wildspine.core.exceptions import NotFoundError
        >>> raise NotFoundError("animal 42")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        NotFoundError: animal 42
    """


class ConfigurationError(WildSpineError):
    """Configuration is invalid."""
