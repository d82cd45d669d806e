"""Application use cases for batch upload workflows."""

from .classification import ClassifyErrorUseCase, classify_error
from .invoke_upload import InvokeUploadUseCase
from .accumulate import AccumulateBatchUseCase
from .aggregate import AggregateNotificationsUseCase, NOTIFICATION_ORDER

__all__ = [
    "ClassifyErrorUseCase",
    "classify_error",
    "InvokeUploadUseCase",
    "AccumulateBatchUseCase",
    "AggregateNotificationsUseCase",
    "NOTIFICATION_ORDER",
]
