"""Notification batch composition.

Turns an animal's sighting history into one queue message body: a JSON array
with a notification for every sighting's reporter.

Example:
    >>> from datetime import UTC, datetime
    >>> from wildspine.models.sighting import Sighting
    >>> from wildspine.notifier.composer import NotificationComposer
    >>> s = Sighting(id=1, animal_id=7, timestamp=datetime(2024, 1, 1, tzinfo=UTC),
    ...              lat=12.34, long=56.78, reporter_email="a@b.org")
    >>> NotificationComposer().compose([s])
    b'[{"subject": "Wildlife Sighting", "body": "Animal_7 is found at {Lat: 12.34,Long: 56.78}", "recipient": "a@b.org"}]'
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from wildspine.core.exceptions import ValidationError
from wildspine.models.notification import NotificationMessage
from wildspine.models.sighting import Sighting

DEFAULT_SUBJECT = "Wildlife Sighting"
DEFAULT_BODY_TEMPLATE = "Animal_{animal_id} is found at {{Lat: {lat},Long: {long}}}"

_batch_adapter = TypeAdapter(list[NotificationMessage])


class NotificationComposer:
    """Build and parse notification batches.

    Args:
        subject: Subject line for every notification.
        body_template: ``str.format`` template with ``animal_id``, ``lat`` and
            ``long`` fields.
    """

    def __init__(
        self,
        subject: str = DEFAULT_SUBJECT,
        body_template: str = DEFAULT_BODY_TEMPLATE,
    ) -> None:
        self.subject = subject
        self.body_template = body_template

    def notifications(self, sightings: Iterable[Sighting]) -> list[NotificationMessage]:
        """One notification per sighting, in the given order."""
        return [
            NotificationMessage(
                subject=self.subject,
                body=self.body_template.format(animal_id=s.animal_id, lat=s.lat, long=s.long),
                recipient=s.reporter_email,
            )
            for s in sightings
        ]

    def compose(self, sightings: Iterable[Sighting]) -> bytes:
        """Serialize the batch as a UTF-8 JSON array."""
        records = [n.model_dump() for n in self.notifications(sightings)]
        return json.dumps(records).encode("utf-8")

    @staticmethod
    def decode(body: bytes) -> list[NotificationMessage]:
        """Parse a message body produced by ``compose``.

        Raises:
            ValidationError: If the body is not a JSON array of notifications.

        Example:
            >>> from wildspine.notifier.composer import NotificationComposer
            >>> NotificationComposer.decode(b'[]')
            []
        """
        try:
            return _batch_adapter.validate_json(body)
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed notification batch: {e}") from e
