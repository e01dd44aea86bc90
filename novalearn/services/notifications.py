"""Best-effort user notifications.

Senders are called after the state change they report has been committed. A
sender that raises is logged and otherwise ignored; it can never undo or fail
the decision it describes.
"""

import logging
from typing import Protocol

from fastapi import BackgroundTasks

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    def notify(self, user_id: int, message: str) -> None: ...


class LogNotificationSender:
    """Default sender: writes the notification to the application log."""

    def notify(self, user_id: int, message: str) -> None:
        logger.info('Notification for user %s: %s', user_id, message)


def deliver(sender: NotificationSender, user_id: int, message: str) -> None:
    try:
        sender.notify(user_id, message)
    except Exception:
        logger.exception('Failed to deliver notification to user %s', user_id)


class NotificationDispatcher:
    """Queues notifications on the request's background tasks when available."""

    def __init__(self, sender: NotificationSender, background_tasks: BackgroundTasks | None = None) -> None:
        self.sender = sender
        self.background_tasks = background_tasks

    def dispatch(self, user_id: int, message: str) -> None:
        if self.background_tasks is not None:
            self.background_tasks.add_task(deliver, self.sender, user_id, message)
            return
        deliver(self.sender, user_id, message)


_default_sender: NotificationSender = LogNotificationSender()


def get_notification_sender() -> NotificationSender:
    return _default_sender


def get_dispatcher(background_tasks: BackgroundTasks) -> NotificationDispatcher:
    return NotificationDispatcher(get_notification_sender(), background_tasks)
