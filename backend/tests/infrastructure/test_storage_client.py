"""Storage Client — retry policy and URL building against a scripted transport.

Tests:
    - object_name prefixes the epoch milliseconds
    - public_url quotes the object path
    - 5xx retried until success; 4xx fails at once
    - Timeouts are not retried; exhausted retries raise StorageError
"""

import httpx
import pytest

from pecup.core.errors import StorageError
from pecup.infrastructure.storage_client import StorageClient, object_name


def _client(max_retries: int = 2) -> StorageClient:
    return StorageClient(
        "https://store.example/storage/v1/", "service-key",
        max_retries=max_retries, base_delay_ms=0,
    )


def _script(monkeypatch, outcomes):
    """Replace AsyncClient.request with a queue of statuses/exceptions."""
    calls = []

    async def fake_request(self, method, url, **kwargs):
        calls.append((method, url, kwargs))
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, text="nope", request=httpx.Request(method, url))

    monkeypatch.setattr(httpx.AsyncClient, "request", fake_request)
    return calls


def test_object_name():
    assert object_name("notes.pdf", now_ms=1700000000000) == "1700000000000-notes.pdf"


def test_public_url_quotes_path():
    url = _client().public_url("resources", "1-My Notes.pdf")
    assert url == "https://store.example/storage/v1/object/public/resources/1-My%20Notes.pdf"


async def test_upload_retries_server_errors(monkeypatch):
    calls = _script(monkeypatch, [503, 200])
    url = await _client().upload("resources", "1-a.pdf", b"%PDF-1.4", "application/pdf")

    assert len(calls) == 2
    method, target, kwargs = calls[0]
    assert method == "POST"
    assert target.endswith("/object/resources/1-a.pdf")
    assert kwargs["headers"]["Authorization"] == "Bearer service-key"
    assert kwargs["headers"]["Content-Type"] == "application/pdf"
    assert url.endswith("/object/public/resources/1-a.pdf")


async def test_client_error_not_retried(monkeypatch):
    calls = _script(monkeypatch, [404, 200])
    with pytest.raises(StorageError) as exc:
        await _client().remove("resources", "missing.pdf")
    assert len(calls) == 1
    assert exc.value.operation == "remove"
    assert exc.value.http_status == 502


async def test_timeout_not_retried(monkeypatch):
    calls = _script(monkeypatch, [httpx.ReadTimeout("slow"), 200])
    with pytest.raises(StorageError, match="timeout"):
        await _client().remove("resources", "a.pdf")
    assert len(calls) == 1


async def test_retries_exhausted(monkeypatch):
    calls = _script(monkeypatch, [
        httpx.ConnectError("down"), 500, 502,
    ])
    with pytest.raises(StorageError):
        await _client(max_retries=2).upload("resources", "a.pdf", b"x", None)
    assert len(calls) == 3


async def test_remove_sends_prefixes(monkeypatch):
    calls = _script(monkeypatch, [200])
    await _client().remove("resources", "1-a.pdf")
    method, target, kwargs = calls[0]
    assert method == "DELETE"
    assert target == "https://store.example/storage/v1/object/resources"
    assert kwargs["json"] == {"prefixes": ["1-a.pdf"]}
