"""Storage Client — async httpx wrapper over the Supabase Storage REST API.

Invariants:
    - Transient failures (5xx, connection errors) retried with exponential backoff
    - Client errors (4xx) fail immediately, no retry
    - Every failure surfaces as StorageError (core/errors.py); raw httpx
      exceptions never leave this module

Design Decisions:
    - Plain REST over an SDK: three endpoints (upload, remove, public URL) with
      service-key auth
    - ±25% jitter on backoff, same policy as any other outbound dependency
    - One AsyncClient per call: uploads are rare admin actions
"""

import asyncio
import logging
import random
import time
from urllib.parse import quote

import httpx

from pecup.config import get_settings
from pecup.core.errors import StorageError

logger = logging.getLogger(__name__)


def object_name(original_filename: str, now_ms: int | None = None) -> str:
    """<epoch-ms>-<original filename>, unique enough for admin uploads."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{stamp}-{original_filename}"


class StorageClient:
    """Upload/remove objects in public buckets."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        base_delay_ms: int = 500,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }
        if extra:
            headers.update(extra)
        return headers

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/object/public/{bucket}/{quote(path)}"

    async def upload(
        self, bucket: str, path: str, data: bytes, content_type: str | None,
    ) -> str:
        """Store bytes at bucket/path and return the public URL."""
        await self._send(
            "POST",
            f"{self.base_url}/object/{bucket}/{quote(path)}",
            operation="upload",
            content=data,
            headers=self._headers({
                "Content-Type": content_type or "application/octet-stream",
                "x-upsert": "false",
            }),
        )
        logger.info(f"Uploaded {bucket}/{path} ({len(data)} bytes)")
        return self.public_url(bucket, path)

    async def remove(self, bucket: str, path: str) -> None:
        await self._send(
            "DELETE",
            f"{self.base_url}/object/{bucket}",
            operation="remove",
            json={"prefixes": [path]},
            headers=self._headers(),
        )
        logger.info(f"Removed {bucket}/{path}")

    async def _send(self, method: str, url: str, *, operation: str, **kwargs) -> httpx.Response:
        for attempt in range(self.max_retries + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.request(method, url, **kwargs)
            except httpx.TimeoutException:
                raise StorageError("timeout", operation)
            except httpx.TransportError as e:
                await self._backoff_or_raise(e, attempt, operation)
                continue
            if response.status_code >= 500:
                await self._backoff_or_raise(
                    f"HTTP {response.status_code}", attempt, operation,
                )
                continue
            if response.status_code >= 400:
                raise StorageError(
                    f"HTTP {response.status_code}: {response.text[:200]}",
                    operation,
                )
            return response
        raise StorageError("retries exhausted", operation)

    async def _backoff_or_raise(self, error, attempt: int, operation: str) -> None:
        if attempt >= self.max_retries:
            raise StorageError(str(error), operation)
        delay_ms = self.base_delay_ms * (2 ** attempt)
        delay_ms *= random.uniform(0.75, 1.25)
        logger.warning(
            f"Storage {operation} failed ({error}), "
            f"retrying in {delay_ms:.0f}ms (attempt {attempt + 1}/{self.max_retries})",
        )
        await asyncio.sleep(delay_ms / 1000)


_storage_client: StorageClient | None = None


def get_storage_client() -> StorageClient:
    """Process-wide client built from settings; FastAPI dependency."""
    global _storage_client
    if _storage_client is None:
        settings = get_settings()
        _storage_client = StorageClient(
            base_url=settings.storage_url,
            service_key=settings.storage_service_key,
            timeout_seconds=settings.storage_timeout_seconds,
            max_retries=settings.storage_max_retries,
        )
    return _storage_client
