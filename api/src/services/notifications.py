"""
User Notifications

Collects toast-style messages raised while handling a request or an
autosave cycle. Routers drain them into the response so the dashboard
can show them; nothing here is persisted.
"""

import logging

from src.models.contracts.reports import Notification

logger = logging.getLogger(__name__)


class Notifier:
    """Ordered buffer of pending user notifications."""

    def __init__(self) -> None:
        self._pending: list[Notification] = []

    def info(self, title: str, description: str) -> None:
        self._pending.append(Notification(title=title, description=description))

    def error(self, title: str, description: str) -> None:
        logger.debug(f"Destructive notification: {title} - {description}")
        self._pending.append(
            Notification(title=title, description=description, variant="destructive")
        )

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        """Return pending notifications and clear the buffer."""
        drained, self._pending = self._pending, []
        return drained
