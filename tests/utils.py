"""Fakes shared by the pipeline, web and CLI tests."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx

from docdigest.config import ProviderConfig
from docdigest.summary.cancellation import CancellationToken
from docdigest.summary.errors import OperationCancelled
from docdigest.summary.gateway import LLMGateway
from docdigest.summary.models import SummaryResult

BASE_URL = "https://provider.test/v1"


def responses_payload(text: str) -> dict[str, Any]:
    """Payload shaped like a ``/responses`` answer with a single message."""

    return {
        "id": "resp_1",
        "output": [
            {"type": "reasoning", "summary": []},
            {"type": "message", "content": [{"type": "output_text", "text": text}]},
        ],
    }


def summary_answer(summary: str = "A short summary.", keywords: list[str] | None = None) -> str:
    return json.dumps({"summary": summary, "keywords": keywords or ["alpha", "beta"]})


@dataclass
class ProviderStub:
    """In-memory stand-in for the provider's files and responses endpoints."""

    generation_status: int = 200
    generation_body: Any = field(default_factory=lambda: responses_payload(summary_answer()))
    upload_status: int = 200
    delete_status: int = 200
    file_id: str = "file-abc123"
    calls: list[tuple[str, str]] = field(default_factory=list)
    bodies: list[Any] = field(default_factory=list)
    on_generate: Callable[[], None] | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))
        if request.method == "POST" and path.endswith("/files"):
            self.bodies.append(request.content)
            if self.upload_status != 200:
                return httpx.Response(self.upload_status, json={"error": {"message": "upload rejected"}})
            return httpx.Response(200, json={"id": self.file_id, "object": "file"})
        if request.method == "POST" and path.endswith("/responses"):
            self.bodies.append(json.loads(request.content))
            if self.on_generate is not None:
                self.on_generate()
            if isinstance(self.generation_body, (dict, list)):
                return httpx.Response(self.generation_status, json=self.generation_body)
            return httpx.Response(self.generation_status, text=str(self.generation_body))
        if request.method == "DELETE" and "/files/" in path:
            return httpx.Response(self.delete_status, json={"id": path.rsplit("/", 1)[1], "deleted": True})
        return httpx.Response(404, json={"error": {"message": f"unexpected {request.method} {path}"}})

    def gateway(self, config: ProviderConfig | None = None) -> LLMGateway:
        config = config or ProviderConfig(base_url=BASE_URL)
        client = httpx.AsyncClient(base_url=config.base_url, transport=httpx.MockTransport(self.handler))
        return LLMGateway(config, client=client)

    def methods(self) -> list[str]:
        return [f"{method} {path.rsplit('/v1', 1)[-1]}" for method, path in self.calls]


class ScriptedProcessor:
    """Document processor whose outcome per filename is scripted by the test.

    Each call waits on an ``asyncio.Event`` released by the test (or immediately
    when ``auto_release`` is set), honouring the run's cancellation token.
    """

    def __init__(self, *, auto_release: bool = True, failures: dict[str, Exception] | None = None) -> None:
        self.auto_release = auto_release
        self.failures = failures or {}
        self.started: list[str] = []
        self.finished: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.gates: dict[str, asyncio.Event] = {}
        self.closed = False

    def gate(self, filename: str) -> asyncio.Event:
        return self.gates.setdefault(filename, asyncio.Event())

    async def summarize(
        self,
        filename: str,
        data: bytes,
        *,
        instruction: str,
        credential: str,
        token: CancellationToken,
    ) -> SummaryResult:
        self.started.append(filename)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.auto_release:
                await token.run(asyncio.sleep(0))
            else:
                await token.run(self.gate(filename).wait())
            if filename in self.failures:
                raise self.failures[filename]
            return SummaryResult(summary=f"summary of {filename}", keywords="a, b")
        finally:
            self.in_flight -= 1
            self.finished.append(filename)

    async def aclose(self) -> None:
        self.closed = True


__all__ = [
    "BASE_URL",
    "OperationCancelled",
    "ProviderStub",
    "ScriptedProcessor",
    "responses_payload",
    "summary_answer",
]
