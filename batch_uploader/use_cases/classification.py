"""Map a raised upload failure to an ErrorKind."""
from typing import Any

from batch_uploader.models import ErrorKind

_DIRECT_KINDS = {
    ErrorKind.SIZE_ERROR.value: ErrorKind.SIZE_ERROR,
    ErrorKind.VALID_ERROR.value: ErrorKind.VALID_ERROR,
}


def classify_error(failure: Any) -> ErrorKind:
    """
    Classify by the failure's ``discriminator`` attribute, never by message text.

    Unknown or missing discriminators fall back to OTHER_ERROR so the failure
    is still reported and offered for retry.
    """
    discriminator = getattr(failure, "discriminator", None)
    if isinstance(discriminator, ErrorKind):
        return discriminator
    if isinstance(discriminator, str):
        return _DIRECT_KINDS.get(discriminator, ErrorKind.OTHER_ERROR)
    return ErrorKind.OTHER_ERROR


class ClassifyErrorUseCase:
    """Classify upload failures into the closed ErrorKind taxonomy."""

    @staticmethod
    def execute(failure: Any) -> ErrorKind:
        return classify_error(failure)
