"""Notification record carried on the queue.

The queue body is a JSON array of these objects with no envelope or version
field; producer and consumer agree on the shape out-of-band.

Example:
    >>> from wildspine.models.notification import NotificationMessage
    >>> n = NotificationMessage(subject="s", body="b", recipient="r@x.org")
    >>> n.model_dump()
    {'subject': 's', 'body': 'b', 'recipient': 'r@x.org'}
"""

from __future__ import annotations

from wildspine.models.base import WildSpineModel


class NotificationMessage(WildSpineModel):
    """One email-style notification for a prior reporter."""

    subject: str
    body: str
    recipient: str
