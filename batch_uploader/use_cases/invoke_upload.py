"""Use case for uploading one item and turning the attempt into an outcome."""
from __future__ import annotations

import inspect
import logging
from typing import Any, Optional

from batch_uploader.messages import MessageProvider, message_id_for
from batch_uploader.models import ErrorKind, UploadItem, UploadOutcome
from batch_uploader.use_cases.classification import ClassifyErrorUseCase

logger = logging.getLogger(__name__)


def _describe_exception(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message.strip():
        return message.strip()
    message = str(exc).strip()
    if message:
        return message
    return f"{type(exc).__name__}: {repr(exc)}"


class InvokeUploadUseCase:
    """
    Call the upload capability for exactly one item.

    Any ``Exception`` raised by the capability becomes a failed outcome, so
    callers never see upload errors propagate.
    """

    def __init__(
        self,
        messages: Optional[Any] = None,
        classify_error: Optional[ClassifyErrorUseCase] = None,
    ):
        self._messages = messages or MessageProvider()
        self._classify_error = classify_error or ClassifyErrorUseCase()

    async def execute(self, upload_capability: Any, item: UploadItem) -> UploadOutcome:
        logger.debug("Upload started: file=%s", item.name)

        try:
            result = upload_capability.upload_file(item)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            return self._to_failure(item, exc)

        logger.debug("Upload succeeded: file=%s", item.name)
        return UploadOutcome.ok(item)

    def _to_failure(self, item: UploadItem, exc: Exception) -> UploadOutcome:
        kind = self._classify_error.execute(exc)
        original = _describe_exception(exc)

        if kind is ErrorKind.OTHER_ERROR:
            # Transport-level detail is not meant for the user.
            logger.error(
                "Upload failed for %s: %s",
                item.name,
                original,
                exc_info=True,
            )
            message = self._messages.get(message_id_for(kind))
        else:
            logger.warning("Upload rejected for %s (%s): %s", item.name, kind.value, original)
            explicit = getattr(exc, "message", None)
            if not isinstance(explicit, str):
                explicit = str(exc)
            message = explicit.strip() or self._messages.get(message_id_for(kind))

        return UploadOutcome.fail(item, kind, message)
