"""Services for batch_uploader module."""
from .http_upload import HTTPUploadService
from .notifier import CollectingNotifier, LoggingNotifier

__all__ = [
    "HTTPUploadService",
    "CollectingNotifier",
    "LoggingNotifier",
]
