# src/taskoff/notifications/sinks.py

from __future__ import annotations

import logging

from .reminders import Notification

logger = logging.getLogger(__name__)


class LogNotificationSink:
    """Writes delivered notifications to the log (headless / development use)."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def deliver(self, notification: Notification) -> None:
        logger.log(
            self._level,
            "[%s] %s (id=%s%s)",
            notification.title,
            notification.body,
            notification.identifier,
            f", attachment={notification.attachment}" if notification.attachment else "",
        )
