"""
Protocols (Interfaces) for Dependency Inversion.

Following Interface Segregation Principle - small, focused interfaces.
"""
from typing import Any, Awaitable, Protocol, Union, runtime_checkable

from .models import NotificationRequest, UploadItem


@runtime_checkable
class IUploadCapability(Protocol):
    """Interface for uploading one file."""

    def upload_file(self, item: UploadItem) -> Union[Any, Awaitable[Any]]:
        """
        Upload a single item.

        Returns (or resolves) on success; raises on failure. Failures may expose
        a ``discriminator`` attribute ("SizeError", "ValidError") and a ``message``.
        """
        ...


@runtime_checkable
class INotifier(Protocol):
    """Interface for emitting status notifications."""

    def notify(self, request: NotificationRequest) -> Union[None, Awaitable[None]]:
        """Forward one notification to whatever renders it."""
        ...


@runtime_checkable
class IMessageProvider(Protocol):
    """Interface for localized user-facing strings."""

    def get(self, message_id: str) -> str:
        """Return the string for a fixed message id."""
        ...
