"""Document processor that delegates to a running docdigest server."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from docdigest.summary.cancellation import CancellationToken
from docdigest.summary.errors import UpstreamError
from docdigest.summary.models import SummaryResult

_GENERIC_FAILURE = "Summary generation failed."


class RemoteSummarizer:
    """Post each document to ``{server_url}/api/summarize``.

    Every request observes the run's cancellation token, so cancelling a batch
    aborts the outstanding HTTP waits.
    """

    def __init__(
        self,
        server_url: str,
        *,
        timeout: float = 300.0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=server_url.rstrip("/"), timeout=timeout)
        self._headers = dict(headers or {})

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def summarize(
        self,
        filename: str,
        data: bytes,
        *,
        instruction: str,
        credential: str,
        token: CancellationToken,
    ) -> SummaryResult:
        try:
            response = await token.run(
                self._client.post(
                    "/api/summarize",
                    headers=self._headers,
                    data={"prompt": instruction, "apiKey": credential},
                    files={"file": (filename, data)},
                )
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Could not reach the summary server: {exc}") from exc

        body = _json_body(response)
        if not response.is_success:
            message = body.get("error") or body.get("detail") or _GENERIC_FAILURE
            logger.debug("Server rejected {} with HTTP {}: {}", filename, response.status_code, message)
            raise UpstreamError(str(message), status_code=response.status_code, hint=body.get("hint"))

        summary = body.get("summary")
        keywords = body.get("keywords")
        if not isinstance(summary, str) or not isinstance(keywords, str):
            raise UpstreamError("The summary server returned an unexpected response.")
        return SummaryResult(summary=summary, keywords=keywords)


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


__all__ = ["RemoteSummarizer"]
