"""User-facing strings keyed by fixed message ids."""
from typing import Dict, Mapping, Optional

from .models import ErrorKind

UPLOAD_FAILED = "upload.failed"
UPLOAD_FAILED_MULTIPLE = "upload.failed.multiple"
SIZE_ERROR = "upload.size_error"
SIZE_ERROR_MULTIPLE = "upload.size_error.multiple"
VALID_ERROR = "upload.valid_error"
VALID_ERROR_MULTIPLE = "upload.valid_error.multiple"

DEFAULT_MESSAGES: Dict[str, str] = {
    UPLOAD_FAILED: "Sorry, file has failed to upload",
    UPLOAD_FAILED_MULTIPLE: "Sorry, files have failed to upload",
    SIZE_ERROR: "Sorry, this file is too large to upload",
    SIZE_ERROR_MULTIPLE: "Sorry, these files are too large to upload",
    VALID_ERROR: "Sorry, this file type is not supported",
    VALID_ERROR_MULTIPLE: "Sorry, these file types are not supported",
}

_SINGLE_IDS = {
    ErrorKind.OTHER_ERROR: UPLOAD_FAILED,
    ErrorKind.SIZE_ERROR: SIZE_ERROR,
    ErrorKind.VALID_ERROR: VALID_ERROR,
}

_AGGREGATE_IDS = {
    ErrorKind.OTHER_ERROR: UPLOAD_FAILED_MULTIPLE,
    ErrorKind.SIZE_ERROR: SIZE_ERROR_MULTIPLE,
    ErrorKind.VALID_ERROR: VALID_ERROR_MULTIPLE,
}


def message_id_for(kind: ErrorKind, aggregate: bool = False) -> str:
    """Message id describing a failure kind, for one item or a group."""
    return (_AGGREGATE_IDS if aggregate else _SINGLE_IDS)[kind]


class MessageProvider:
    """
    Default English message provider.

    Implements IMessageProvider protocol. Any id can be overridden, e.g. with
    translated strings.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        self._messages = dict(DEFAULT_MESSAGES)
        if overrides:
            self._messages.update(overrides)

    def get(self, message_id: str) -> str:
        try:
            return self._messages[message_id]
        except KeyError:
            raise KeyError(f"Unknown message id: {message_id}") from None
