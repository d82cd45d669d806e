"""Notification sinks."""
import logging
from typing import List, Optional

from ..models import NotificationRequest


class LoggingNotifier:
    """Implements INotifier by writing each notification to a logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("batch_uploader.notifications")

    def notify(self, request: NotificationRequest) -> None:
        suffix = " (retry available)" if request.retryable else ""
        self._logger.error(
            "%s: %s%s",
            request.message,
            ", ".join(request.affected),
            suffix,
        )


class CollectingNotifier:
    """Keeps every notification in memory; handy for embedding and tests."""

    def __init__(self):
        self.requests: List[NotificationRequest] = []

    def notify(self, request: NotificationRequest) -> None:
        self.requests.append(request)

    def clear(self) -> None:
        self.requests.clear()
