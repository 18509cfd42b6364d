from __future__ import annotations

import asyncio

import httpx
import pytest

from docdigest.batch import RemoteSummarizer
from docdigest.summary.cancellation import CancellationToken
from docdigest.summary.errors import OperationCancelled, UpstreamError
from docdigest.summary.models import SummaryResult

SERVER = "http://digest.test"


def _summarizer(handler, **kwargs) -> RemoteSummarizer:
    client = httpx.AsyncClient(base_url=SERVER, transport=httpx.MockTransport(handler))
    return RemoteSummarizer(SERVER, client=client, **kwargs)


def _summarize(summarizer: RemoteSummarizer, token: CancellationToken | None = None) -> SummaryResult:
    async def scenario():
        return await summarizer.summarize(
            "notes.md",
            b"# Notes",
            instruction="Summarise",
            credential="sk-test",
            token=token or CancellationToken(),
        )

    return asyncio.run(scenario())


def test_posts_multipart_form_and_parses_result() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"summary": "S", "keywords": "a, b"})

    result = _summarize(_summarizer(handler, headers={"X-Digest-Token": "secret"}))

    assert result == SummaryResult(summary="S", keywords="a, b")
    request = seen[0]
    assert request.url.path == "/api/summarize"
    assert request.headers["X-Digest-Token"] == "secret"
    assert b'name="prompt"' in request.content
    assert b'name="apiKey"' in request.content
    assert b'filename="notes.md"' in request.content


def test_server_error_body_becomes_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "The requested model could not be found. Model: x", "hint": "h"})

    with pytest.raises(UpstreamError) as excinfo:
        _summarize(_summarizer(handler))

    assert excinfo.value.status_code == 404
    assert excinfo.value.message.startswith("The requested model could not be found")
    assert excinfo.value.hint == "h"


def test_unexpected_success_body_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"summary": "S"})

    with pytest.raises(UpstreamError):
        _summarize(_summarizer(handler))


def test_transport_errors_are_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as excinfo:
        _summarize(_summarizer(handler))
    assert "connection refused" in excinfo.value.message


def test_cancelled_token_sends_nothing() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"summary": "S", "keywords": "k"})

    token = CancellationToken()
    token.cancel()
    with pytest.raises(OperationCancelled):
        _summarize(_summarizer(handler), token)
    assert calls == []
