"""Resource Uploads — validate, store and remove the bytes behind a resource.

Invariants:
    - Size is checked before sniffing (413 before 415)
    - The detected MIME type wins over the client's claim
    - Google Drive is never written to; Drive objects cannot be removed from
      here, so remove_underlying reports them as not deleted

Design Decisions:
    - Bucket comes from the settings row when set, else the configured default
    - remove_underlying returns bool instead of raising: DELETE falls back to
      a soft delete when the blob survives
"""

import logging
from dataclasses import dataclass

from pecup.core.errors import (
    PayloadTooLargeError, StorageError, UnsupportedFileTypeError,
)
from pecup.core.file_urls import parse_drive_file_id, parse_storage_path
from pecup.core.file_validation import validate_file
from pecup.infrastructure.storage_client import StorageClient, object_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    url: str
    is_pdf: bool
    file_type: str | None


def check_upload(
    data: bytes,
    filename: str,
    client_mime: str | None,
    *,
    max_bytes: int,
    allowed_mimes: list[str],
    allowed_extensions: list[str],
) -> str:
    """Raise 413/415 for unacceptable uploads; return the effective MIME type."""
    if len(data) > max_bytes:
        raise PayloadTooLargeError(len(data), max_bytes)
    result = validate_file(
        data, filename, client_mime, allowed_mimes, allowed_extensions,
    )
    if not result.ok:
        logger.warning(f"Rejected upload {filename!r}: {result.reason}")
        raise UnsupportedFileTypeError(result.reason or "File type not allowed")
    return (result.detected_mime or client_mime or "").lower()


async def store_upload(
    storage: StorageClient,
    *,
    bucket: str,
    data: bytes,
    filename: str,
    mime: str,
) -> StoredFile:
    is_pdf = mime == "application/pdf" or filename.lower().endswith(".pdf")
    url = await storage.upload(bucket, object_name(filename), data, mime or None)
    return StoredFile(url=url, is_pdf=is_pdf, file_type=mime or None)


async def remove_underlying(storage: StorageClient, url: str | None) -> bool:
    """True when nothing remains to delete; False when the blob survived."""
    if not url:
        return True
    if parse_drive_file_id(url):
        logger.warning(f"Drive objects are not managed here, keeping {url}")
        return False
    location = parse_storage_path(url)
    if location is None:
        return True
    bucket, path = location
    try:
        await storage.remove(bucket, path)
    except StorageError as e:
        logger.error(f"Failed to remove {bucket}/{path}: {e.message}")
        return False
    return True
