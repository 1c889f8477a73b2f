"""Object storage client: PUT/DELETE blobs on an HTTP object store (S3-compatible gateway, MinIO, etc.)."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING
from urllib.parse import quote
from uuid import uuid4

import httpx

if TYPE_CHECKING:
    from guardroster.core.config import Settings

logger = logging.getLogger(__name__)

# Characters kept from the original filename when building a storage key.
_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
MAX_KEY_FILENAME_LEN = 200


class StorageNotConfiguredError(Exception):
    """Raised when an upload is attempted but STORAGE_BASE_URL is not set."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StorageError(Exception):
    """Raised when the object store rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def build_storage_key(filename: str) -> str:
    """Unique key: random prefix plus a sanitized copy of the original filename."""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    safe = _UNSAFE_KEY_CHARS.sub("_", base).strip("._") or "file"
    return f"{uuid4()}-{safe[:MAX_KEY_FILENAME_LEN]}"


class ObjectStorage:
    """Thin async client. One AsyncClient per call; no retries."""

    def __init__(
        self,
        base_url: str | None,
        *,
        public_url: str | None = None,
        access_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.public_url = (public_url or base_url or "").rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> ObjectStorage:
        token = settings.STORAGE_ACCESS_TOKEN
        return cls(
            settings.STORAGE_BASE_URL,
            public_url=settings.STORAGE_PUBLIC_URL,
            access_token=token.get_secret_value() if token else None,
            timeout=settings.STORAGE_REQUEST_TIMEOUT_SEC,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    def url_for(self, key: str) -> str:
        """Public URL recorded for a stored key."""
        if not self.is_configured:
            raise StorageNotConfiguredError(
                "Object storage is not configured. Set STORAGE_BASE_URL."
            )
        return f"{self.public_url}/{quote(key)}"

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        """Store data under key; return its public URL."""
        public = self.url_for(key)
        url = f"{self.base_url}/{quote(key)}"
        try:
            async with self._client() as client:
                response = await client.put(
                    url,
                    content=data,
                    headers=self._headers(content_type or "application/octet-stream"),
                )
        except httpx.TimeoutException as e:
            raise StorageError("Object storage request timed out.") from e
        except httpx.HTTPError as e:
            raise StorageError(f"Object storage unreachable: {e!s}") from e
        if response.status_code >= 400:
            raise StorageError(
                f"Object storage returned status {response.status_code}.",
                status_code=response.status_code,
            )
        logger.info("Blob stored", extra={"storage_key": key, "size_bytes": len(data)})
        return public

    async def delete(self, key: str) -> None:
        """Remove the blob under key. A missing blob counts as deleted."""
        if not self.is_configured:
            raise StorageNotConfiguredError(
                "Object storage is not configured. Set STORAGE_BASE_URL."
            )
        try:
            async with self._client() as client:
                response = await client.delete(
                    f"{self.base_url}/{quote(key)}", headers=self._headers()
                )
        except httpx.TimeoutException as e:
            raise StorageError("Object storage request timed out.") from e
        except httpx.HTTPError as e:
            raise StorageError(f"Object storage unreachable: {e!s}") from e
        if response.status_code >= 400 and response.status_code != 404:
            raise StorageError(
                f"Object storage returned status {response.status_code}.",
                status_code=response.status_code,
            )
        logger.info("Blob deleted", extra={"storage_key": key})
