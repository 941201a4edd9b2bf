"""Upload Validation — magic-byte sniffing with an extension + MIME fallback.

Invariants:
    - A detected signature always wins over the client-provided MIME type
    - Without a signature, BOTH extension and client MIME must be allow-listed
    - Allow-lists are passed in (from Settings) so this module stays pure

Design Decisions:
    - Tiny fixed signature table (pdf/png/jpeg/webp) instead of libmagic:
      the allow-list is the same four types, nothing else needs detection
    - Extension mismatch on a detected signature is tolerated; callers may log it
"""

from collections.abc import Iterable
from dataclasses import dataclass


DEFAULT_ALLOWED_MIME_TYPES = (
    "application/pdf",
    "image/png",
    "image/jpeg",
    "image/webp",
)

DEFAULT_ALLOWED_EXTENSIONS = ("pdf", "png", "jpg", "jpeg", "webp")

_PDF = b"%PDF-"
_PNG = b"\x89PNG\r\n\x1a\n"
_JPEG = b"\xff\xd8\xff"


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    detected_mime: str | None = None
    reason: str | None = None


def get_file_extension(filename: str) -> str:
    """Lowercased text after the last dot, or "" when there is none."""
    dot = filename.rfind(".")
    if dot == -1:
        return ""
    return filename[dot + 1:].lower()


def sniff_mime_from_magic_bytes(data: bytes) -> str | None:
    """Detect pdf/png/jpeg/webp from leading bytes. None when unknown."""
    if not data or len(data) < 4:
        return None
    if data.startswith(_PDF):
        return "application/pdf"
    if data.startswith(_PNG):
        return "image/png"
    if data.startswith(_JPEG):
        return "image/jpeg"
    if len(data) >= 12 and data[0:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def validate_file(
    data: bytes,
    filename: str,
    client_mime: str | None,
    allowed_mimes: Iterable[str] = DEFAULT_ALLOWED_MIME_TYPES,
    allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
) -> ValidationResult:
    """Decide whether an upload is an accepted file type."""
    mimes = {m.lower() for m in allowed_mimes}
    exts = {e.lower().lstrip(".") for e in allowed_extensions}

    ext = get_file_extension(filename)
    mime = (client_mime or "").lower()

    detected = sniff_mime_from_magic_bytes(data)
    if detected:
        if detected not in mimes:
            return ValidationResult(
                ok=False, detected_mime=detected,
                reason=f"Disallowed file signature: {detected}",
            )
        return ValidationResult(ok=True, detected_mime=detected)

    ext_allowed = bool(ext) and ext in exts
    mime_allowed = bool(mime) and mime in mimes
    if ext_allowed and mime_allowed:
        return ValidationResult(ok=True, detected_mime=mime or None)

    if not ext_allowed and not mime_allowed:
        reason = "File extension and MIME type are not allowed"
    elif not ext_allowed:
        reason = "File extension is not allowed"
    else:
        reason = "MIME type is not allowed"
    return ValidationResult(ok=False, detected_mime=mime or None, reason=reason)
