"""File URL Parsing — recognize where a resource's bytes live from its URL.

Invariants:
    - Returns None for URLs that match neither pattern (external links)
"""

import re
from urllib.parse import unquote

_DRIVE_ID = re.compile(r"/file/d/([a-zA-Z0-9_-]+)")
_STORAGE_PATH = re.compile(r"/object/public/([^/]+)/(.+)$")


def parse_drive_file_id(url: str) -> str | None:
    match = _DRIVE_ID.search(url or "")
    return match.group(1) if match else None


def parse_storage_path(url: str) -> tuple[str, str] | None:
    """(bucket, decoded object path) for a public storage URL."""
    match = _STORAGE_PATH.search(url or "")
    if not match:
        return None
    return match.group(1), unquote(match.group(2))


def is_drive_link(url: str) -> bool:
    return "drive.google.com" in (url or "").lower()


def looks_like_pdf(url: str) -> bool:
    """Link-only resources count as PDFs when hosted on Drive or ending in .pdf."""
    lowered = (url or "").lower()
    return "drive.google.com" in lowered or lowered.endswith(".pdf")
