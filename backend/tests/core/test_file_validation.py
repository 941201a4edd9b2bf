"""Upload Validation — magic-byte sniffing and allow-list fallback.

Tests:
    - Known signatures are detected regardless of filename or claimed MIME
    - Detected-but-disallowed signatures are rejected
    - Without a signature both extension and MIME must be allowed
"""

import pytest

from pecup.core.file_validation import (
    get_file_extension, sniff_mime_from_magic_bytes, validate_file,
)

WEBP = b"RIFF\x00\x00\x00\x00WEBPVP8 "


@pytest.mark.parametrize("data,expected", [
    (b"%PDF-1.7", "application/pdf"),
    (b"\x89PNG\r\n\x1a\n....", "image/png"),
    (b"\xff\xd8\xff\xe0", "image/jpeg"),
    (WEBP, "image/webp"),
    (b"GIF89a", None),
    (b"%P", None),
    (b"", None),
])
def test_sniff(data, expected):
    assert sniff_mime_from_magic_bytes(data) == expected


def test_extension_is_lowercased_text_after_last_dot():
    assert get_file_extension("Notes.Final.PDF") == "pdf"
    assert get_file_extension("README") == ""


def test_signature_wins_over_client_mime():
    result = validate_file(b"%PDF-1.4", "renamed.bin", "application/octet-stream")
    assert result.ok
    assert result.detected_mime == "application/pdf"


def test_detected_signature_outside_allow_list_rejected():
    result = validate_file(
        b"\x89PNG\r\n\x1a\n", "a.png", "image/png",
        allowed_mimes=["application/pdf"], allowed_extensions=["pdf"],
    )
    assert not result.ok
    assert result.reason == "Disallowed file signature: image/png"


def test_fallback_requires_extension_and_mime():
    assert validate_file(b"plain", "a.pdf", "application/pdf").ok
    assert validate_file(b"plain", "a.txt", "application/pdf").reason == (
        "File extension is not allowed"
    )
    assert validate_file(b"plain", "a.pdf", "text/plain").reason == (
        "MIME type is not allowed"
    )
    assert validate_file(b"plain", "a.txt", None).reason == (
        "File extension and MIME type are not allowed"
    )
