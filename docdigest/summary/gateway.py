"""HTTP gateway to the OpenAI-compatible provider.

The gateway owns the full lifecycle of a generation call: it uploads PDFs for
the extractor, executes the ``/responses`` call, maps non-success answers onto
the error taxonomy and, whenever a request references an uploaded file, deletes
that file exactly once after the call resolves, whatever the outcome.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from docdigest.config.llm import ProviderConfig

from .cancellation import CancellationToken
from .errors import InvalidCredential, ModelNotFound, UploadFailure, UpstreamError
from .models import RemoteReference, UpstreamRequest

_DEFAULT_ERROR_MESSAGE = "The provider request failed."
CLEANUP_HISTORY = 100


@dataclass(frozen=True, slots=True)
class CleanupFailure:
    """A remote file whose deletion did not succeed."""

    file_id: str
    reason: str


def _auth_headers(credential: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {credential}"}


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    if not isinstance(body, dict):
        return {}
    error = body.get("error")
    return error if isinstance(error, dict) else {}


def _parameter_hint(error: dict[str, Any]) -> str | None:
    param = error.get("param")
    if not param:
        return None
    return (
        f"Request parameter error: {param}. Requests use the Responses input schema "
        "(structured input: input_text + input_file)."
    )


class LLMGateway:
    """Async client for file upload, generation and file deletion."""

    def __init__(
        self,
        config: ProviderConfig,
        *,
        client: httpx.AsyncClient | None = None,
        cleanup_history: int = CLEANUP_HISTORY,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=config.base_url, timeout=config.timeout)
        # newest failures only
        self.cleanup_failures: deque[CleanupFailure] = deque(maxlen=cleanup_history)

    async def __aenter__(self) -> "LLMGateway":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    async def upload_file(
        self,
        data: bytes,
        filename: str,
        *,
        credential: str,
        token: CancellationToken,
    ) -> RemoteReference:
        try:
            response = await token.run(
                self._client.post(
                    "/files",
                    headers=_auth_headers(credential),
                    data={"purpose": self._config.upload_purpose},
                    files={"file": (filename, data, "application/pdf")},
                )
            )
        except httpx.HTTPError as exc:
            raise UploadFailure(f"File upload failed: {exc}") from exc

        if not response.is_success:
            error = _error_body(response)
            logger.warning(
                "Upload of {} rejected with HTTP {}: {}",
                filename,
                response.status_code,
                error.get("message", "<no message>"),
            )
            raise UploadFailure(f"File upload failed (HTTP {response.status_code}).")

        try:
            file_id = response.json().get("id")
        except (ValueError, AttributeError):
            file_id = None
        if not isinstance(file_id, str) or not file_id:
            raise UploadFailure("File upload failed: the provider returned no file id.")
        return RemoteReference(file_id)

    async def execute(
        self,
        request: UpstreamRequest,
        *,
        credential: str,
        token: CancellationToken,
    ) -> dict[str, Any]:
        """Run ``request`` and return the raw provider payload."""

        file_id = request.file_id
        try:
            return await self._generate(request, credential=credential, token=token)
        finally:
            if file_id is not None:
                await self.delete_file(file_id, credential=credential)

    async def _generate(
        self,
        request: UpstreamRequest,
        *,
        credential: str,
        token: CancellationToken,
    ) -> dict[str, Any]:
        headers = _auth_headers(credential)
        try:
            response = await token.run(
                self._client.post("/responses", headers=headers, json=request.to_payload())
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Provider request failed: {exc}") from exc

        if response.status_code == 401:
            raise InvalidCredential()
        if response.status_code == 404:
            raise ModelNotFound(request.model)
        if not response.is_success:
            error = _error_body(response)
            raise UpstreamError(
                error.get("message") or _DEFAULT_ERROR_MESSAGE,
                status_code=response.status_code,
                hint=_parameter_hint(error),
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError("Provider returned a non-JSON payload.") from exc
        if not isinstance(payload, dict):
            raise UpstreamError("Provider returned an unexpected payload.")
        logger.debug("Generation call for model {} completed", request.model)
        return payload

    async def delete_file(self, file_id: str, *, credential: str) -> bool:
        """Best-effort deletion. Failures are logged and recorded, never raised."""

        try:
            response = await self._client.delete(f"/files/{file_id}", headers=_auth_headers(credential))
        except httpx.HTTPError as exc:
            reason = str(exc) or exc.__class__.__name__
        else:
            if response.is_success:
                logger.debug("Deleted uploaded file {}", file_id)
                return True
            reason = f"HTTP {response.status_code}"

        logger.warning("Failed to delete uploaded file {}: {}", file_id, reason)
        self.cleanup_failures.append(CleanupFailure(file_id=file_id, reason=reason))
        return False


__all__ = ["CLEANUP_HISTORY", "CleanupFailure", "LLMGateway"]
