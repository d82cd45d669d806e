"""
Batch uploader - upload a set of files, report failures per kind, retry what can succeed.

Usage:
    from batch_uploader import BatchUploadOrchestrator, HTTPUploadService, LoggingNotifier

    async with BatchUploadOrchestrator(
        HTTPUploadService("https://example.com/media"),
        LoggingNotifier(),
    ) as orchestrator:
        cycle = await orchestrator.upload_batch([Path("a.png"), Path("b.pdf")])

        # Only transient failures come with a retry action
        for action in cycle.retry_actions:
            await action()

Any object with ``upload_file(item)`` can stand in for the HTTP service; raise
``SizeError`` or ``ValidError`` (or anything with a matching ``discriminator``)
for failures that retrying cannot fix.
"""
from .errors import SizeError, UploadError, ValidError
from .messages import MessageProvider
from .models import (
    BatchResult,
    ErrorKind,
    NotificationRequest,
    Severity,
    UploadConfig,
    UploadItem,
    UploadOutcome,
    UploadStatus,
)
from .orchestrator import BatchCycleResult, BatchUploadOrchestrator, RetryCoordinator
from .services import CollectingNotifier, HTTPUploadService, LoggingNotifier

__version__ = "0.1.0"
__all__ = [
    # Main
    "BatchUploadOrchestrator",
    "BatchCycleResult",
    "RetryCoordinator",
    # Models
    "BatchResult",
    "ErrorKind",
    "NotificationRequest",
    "Severity",
    "UploadConfig",
    "UploadItem",
    "UploadOutcome",
    "UploadStatus",
    # Errors
    "UploadError",
    "SizeError",
    "ValidError",
    # Services
    "MessageProvider",
    "HTTPUploadService",
    "LoggingNotifier",
    "CollectingNotifier",
]
