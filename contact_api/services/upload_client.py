"""Client for the external Upload Service (remote file storage).

Files are addressed by the opaque id the Upload Service returns on upload.
Upload is sent exactly once; delete and download are idempotent and go
through request_with_retries.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import unquote

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from contact_api.core.config import settings
from contact_api.services.http_service import request_with_retries

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/v1/upload"
FILE_PATH = "/api/v1/files/{file_id}"
DOWNLOAD_PATH = "/api/v1/files/{file_id}/download"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_DOWNLOAD_NAME = "download"

_FILENAME_STAR_RE = re.compile(r"filename\*\s*=\s*(?:[\w-]+)?'[^']*'([^;]+)", re.IGNORECASE)
_FILENAME_RE = re.compile(r'filename\s*=\s*"?([^";]+)"?', re.IGNORECASE)


class UploadServiceError(Exception):
    """The Upload Service rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class UploadResult:
    file_id: str
    file_size: int | None


@dataclass(frozen=True)
class FileDownload:
    content: bytes
    content_type: str
    file_name: str
    file_size: int


class UploadClient(Protocol):
    """What the contact orchestrator needs from remote file storage."""

    async def upload_file(
        self, object_name: str, content: bytes, content_type: str, file_name: str
    ) -> UploadResult: ...

    async def delete_file(self, file_id: str) -> bool: ...

    async def download_file(self, file_id: str) -> FileDownload: ...


class _UploadResponse(BaseModel):
    """Upload Service response body (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    file_id: str
    file_size: int | None = None


def filename_from_content_disposition(header: str | None) -> str | None:
    """Extract the filename from a Content-Disposition header (RFC 6266)."""
    if not header:
        return None
    match = _FILENAME_STAR_RE.search(header)
    if match:
        return unquote(match.group(1).strip())
    match = _FILENAME_RE.search(header)
    if match:
        return match.group(1).strip()
    return None


class UploadServiceClient:
    """httpx-backed UploadClient bound to UPLOAD_SERVICE_BASE_URL."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_attempts: int = 3,
        retry_base_delay: float = 0.5,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.UPLOAD_SERVICE_BASE_URL,
            timeout=timeout_seconds or settings.UPLOAD_SERVICE_TIMEOUT_SECONDS,
            transport=transport,
        )
        self._max_attempts = max_attempts
        self._retry_base_delay = retry_base_delay

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "UploadServiceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _with_retries(self, method: str, url: str) -> httpx.Response:
        async def request_fn() -> httpx.Response:
            return await self._client.request(method, url)

        return await request_with_retries(
            request_fn,
            max_attempts=self._max_attempts,
            base_delay=self._retry_base_delay,
            max_delay=self._retry_base_delay * 8,
        )

    async def upload_file(
        self, object_name: str, content: bytes, content_type: str, file_name: str
    ) -> UploadResult:
        """
        Store bytes under object_name.

        Raises:
            UploadServiceError: non-2xx status, transport failure or a body
                without a file id
        """
        try:
            response = await self._client.post(
                UPLOAD_PATH,
                files={"file": (file_name, content, content_type)},
                data={"objectName": object_name, "contentType": content_type},
            )
        except httpx.RequestError as exc:
            logger.error("Failed to upload file %s", object_name, exc_info=exc)
            raise UploadServiceError(f"Upload service unreachable: {exc}") from exc

        if not response.is_success:
            logger.error("Failed to upload file %s: HTTP %s", object_name, response.status_code)
            raise UploadServiceError(
                f"Upload failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = _UploadResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UploadServiceError("Invalid response from upload service") from exc

        logger.info("File uploaded successfully: %s -> %s", object_name, body.file_id)
        return UploadResult(file_id=body.file_id, file_size=body.file_size)

    async def delete_file(self, file_id: str) -> bool:
        """
        Delete a stored file.

        Returns True when the file is gone (including a remote 404), False on
        any other failure. Never raises for remote errors.
        """
        try:
            response = await self._with_retries("DELETE", FILE_PATH.format(file_id=file_id))
        except httpx.RequestError as exc:
            logger.error("Error deleting file %s", file_id, exc_info=exc)
            return False

        if response.is_success:
            logger.info("File deleted successfully: %s", file_id)
            return True
        if response.status_code == 404:
            logger.warning("File not found for deletion: %s", file_id)
            return True

        logger.warning("Failed to delete file %s: HTTP %s", file_id, response.status_code)
        return False

    async def download_file(self, file_id: str) -> FileDownload:
        """
        Fetch a stored file.

        Raises:
            UploadServiceError: non-2xx status or transport failure
        """
        try:
            response = await self._with_retries("GET", DOWNLOAD_PATH.format(file_id=file_id))
        except httpx.RequestError as exc:
            logger.error("Failed to download file %s", file_id, exc_info=exc)
            raise UploadServiceError(f"Upload service unreachable: {exc}") from exc

        if not response.is_success:
            logger.error("Failed to download file %s: HTTP %s", file_id, response.status_code)
            raise UploadServiceError(
                f"Download failed with status {response.status_code}",
                status_code=response.status_code,
            )

        content = response.content
        logger.info("File downloaded successfully: %s", file_id)
        return FileDownload(
            content=content,
            content_type=response.headers.get("content-type") or DEFAULT_CONTENT_TYPE,
            file_name=filename_from_content_disposition(response.headers.get("content-disposition"))
            or DEFAULT_DOWNLOAD_NAME,
            file_size=len(content),
        )
