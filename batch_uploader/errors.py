"""
Failures raised by upload capabilities.

The ``discriminator`` attribute is what classification looks at, so any
capability can signal a deterministic failure by raising one of these (or any
exception carrying a ``discriminator`` attribute of its own).
"""
from typing import Optional


class UploadError(Exception):
    """Upload of a single file failed."""

    discriminator: Optional[str] = None

    def __init__(self, message: str = "", discriminator: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if discriminator is not None:
            self.discriminator = discriminator


class SizeError(UploadError):
    """File exceeds the size limit of the upload target."""

    discriminator = "SizeError"


class ValidError(UploadError):
    """File was rejected by the upload target's content/type validation."""

    discriminator = "ValidError"
