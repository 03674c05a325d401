"""Console notification handler.

Consumer-side handler that "sends" each notification in a batch by printing it,
useful for development and as the default handler of the consumer loop.

Example:
    >>> from wildspine.notifier.console import ConsoleMailer
    >>> mailer = ConsoleMailer()
    >>> callable(mailer)
    True
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

from wildspine.models.notification import NotificationMessage
from wildspine.notifier.composer import NotificationComposer

logger = logging.getLogger("wildspine.notifier.console")


class ConsoleMailer:
    """Print each notification of a batch to a stream.

    Raises on malformed batches so the consumer requeues them.

    Example:
        >>> import io
        >>> from wildspine.notifier.console import ConsoleMailer
        >>> out = io.StringIO()
        >>> mailer = ConsoleMailer(stdout=out, show_timestamp=False)
        >>> mailer(b'[{"subject": "Hi", "body": "there", "recipient": "a@b.org"}]')
        1
        >>> out.getvalue()
        'To: a@b.org | Hi: there\\n'
    """

    def __init__(
        self,
        stdout: TextIO | None = None,
        show_timestamp: bool = True,
    ) -> None:
        """Initialize console mailer.

        Args:
            stdout: Output stream (default sys.stdout).
            show_timestamp: Include timestamp in output.
        """
        self._stdout = stdout or sys.stdout
        self._show_timestamp = show_timestamp
        self.sent = 0

    def __call__(self, body: bytes) -> int:
        """Deliver every notification in ``body``. Returns how many were sent."""
        notifications = NotificationComposer.decode(body)
        for notification in notifications:
            self._stdout.write(self._format(notification) + "\n")
        self._stdout.flush()

        self.sent += len(notifications)
        logger.info(f"Sent {len(notifications)} notification(s)")
        return len(notifications)

    def _format(self, notification: NotificationMessage) -> str:
        """Format notification for display.

        Example:
            >>> from wildspine.models.notification import NotificationMessage
            >>> from wildspine.notifier.console import ConsoleMailer
            >>> m = ConsoleMailer(show_timestamp=False)
            >>> m._format(NotificationMessage(subject="S", body="B", recipient="r@x.org"))
            'To: r@x.org | S: B'
        """
        parts: list[str] = []

        if self._show_timestamp:
            ts = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
            parts.append(f"[{ts}]")

        parts.append(f"To: {notification.recipient} |")
        parts.append(f"{notification.subject}:")
        parts.append(notification.body)

        return " ".join(parts)
