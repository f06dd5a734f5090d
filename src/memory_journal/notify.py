"""Transient user notifications for explicit actions.

Background fetches (scroll-triggered feed pages) fail silently; actions
the user asked for directly (searching, posting or loading comments)
report their outcome through a notifier.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    status: str  # "success" or "error"
    title: str
    description: str = ""


Notifier = Callable[[Notification], None]


def log_notifier(notification: Notification) -> None:
    """Default notifier: route notifications to the log."""
    level = logging.ERROR if notification.status == "error" else logging.INFO
    logger.log(level, "%s: %s", notification.title, notification.description)


class NotificationLog:
    """Notifier that keeps every notification, newest last."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def errors(self) -> list[Notification]:
        return [n for n in self.notifications if n.status == "error"]
