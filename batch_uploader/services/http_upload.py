"""HTTP adapter that uploads one file per request."""
from __future__ import annotations

import asyncio
import logging
import mimetypes
from typing import Any, Optional

import httpx

from ..errors import SizeError, UploadError, ValidError
from ..models import UploadConfig, UploadItem

logger = logging.getLogger(__name__)

SIZE_STATUS_CODES = {413}
VALIDATION_STATUS_CODES = {415, 422}


def _error_detail(response: httpx.Response) -> str:
    """Server-supplied reason from a JSON body; empty for HTML pages and the like."""
    try:
        payload = response.json()
    except ValueError:
        return ""
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return ""


class HTTPUploadService:
    """
    Upload capability posting each file as multipart form data.

    Implements IUploadCapability protocol. 413 responses raise SizeError,
    415/422 raise ValidError, anything else that fails raises UploadError or
    the underlying httpx error.
    """

    def __init__(
        self,
        endpoint: str,
        field_name: str = "file",
        timeout: float = 60,
        max_retries: int = 3,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._endpoint = endpoint
        self._field_name = field_name
        self._timeout = timeout
        self._max_retries = max_retries
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(cls, config: UploadConfig) -> "HTTPUploadService":
        if not config.endpoint:
            raise ValueError("UploadConfig.endpoint is required for HTTP uploads")
        return cls(
            config.endpoint,
            field_name=config.field_name,
            timeout=config.timeout,
            max_retries=config.max_transport_retries,
        )

    async def __aenter__(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def upload_file(self, item: UploadItem) -> Any:
        if self._client is None:
            raise RuntimeError("HTTPUploadService not initialized. Use 'async with' context.")

        content_type = mimetypes.guess_type(item.name)[0] or "application/octet-stream"
        last_exception: Optional[Exception] = None

        for attempt in range(self._max_retries):
            try:
                with item.path.open("rb") as handle:
                    response = await self._client.post(
                        self._endpoint,
                        files={self._field_name: (item.name, handle, content_type)},
                    )
            except (httpx.RequestError, httpx.TimeoutException) as exc:
                last_exception = exc
                if attempt < self._max_retries - 1:
                    logger.debug("Transport error for %s (attempt %d): %s", item.name, attempt + 1, exc)
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue
                raise

            if response.status_code >= 500 and attempt < self._max_retries - 1:
                await asyncio.sleep(0.5 * (attempt + 1))
                continue

            self._raise_for_status(item, response)
            return self._parse_body(response)

        if last_exception:
            raise last_exception
        raise UploadError(f"Failed to upload {item.name} after {self._max_retries} attempts")

    @staticmethod
    def _raise_for_status(item: UploadItem, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return
        detail = _error_detail(response)
        if status in SIZE_STATUS_CODES:
            raise SizeError(detail)
        if status in VALIDATION_STATUS_CODES:
            raise ValidError(detail)
        suffix = f": {detail}" if detail else ""
        raise UploadError(f"API error {status} uploading {item.name}{suffix}")

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
