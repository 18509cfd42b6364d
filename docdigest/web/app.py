"""FastAPI application factory and routing definitions."""

from __future__ import annotations

import secrets
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Callable

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse
from loguru import logger

from docdigest import __version__
from docdigest.config.app import AppConfig
from docdigest.config.web import WebAuthConfig, WebConfig
from docdigest.summary.errors import DocDigestError, MissingCredential, MissingInput, UpstreamError
from docdigest.summary.pipeline import SummaryPipeline


def create_app(config: AppConfig | None = None, *, pipeline: SummaryPipeline | None = None) -> FastAPI:
    """Create the summarisation API.

    ``pipeline`` is injected by tests; otherwise one is built from the provider
    configuration and closed on shutdown.
    """
    config = config or AppConfig()
    web_config = config.web or WebConfig()
    auth_dependency = _build_auth_dependency(web_config.auth)
    owns_pipeline = pipeline is None
    summary_pipeline = pipeline or SummaryPipeline(config.provider)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("Summary API ready (model {})", summary_pipeline.model)
        yield
        if owns_pipeline:
            await summary_pipeline.aclose()

    app = FastAPI(
        title=web_config.title,
        description="Summarise uploaded documents and extract keywords with an LLM provider.",
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(DocDigestError)
    async def _handle_pipeline_error(_: Request, exc: DocDigestError) -> JSONResponse:
        body: dict[str, Any] = {"error": exc.message}
        if isinstance(exc, UpstreamError) and exc.hint:
            body["hint"] = exc.hint
        logger.warning("Summarise request failed with HTTP {}: {}", exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.get("/health", summary="Health Check", tags=["Monitoring"])
    async def health_check() -> dict[str, str]:
        """Check if the API is running."""
        return {"status": "ok", "model": summary_pipeline.model}

    @app.post("/api/summarize", summary="Summarise one document", tags=["Summary"])
    async def summarize(
        file: UploadFile | None = File(default=None),
        prompt: str | None = Form(default=None),
        api_key: str | None = Form(default=None, alias="apiKey"),
        _: None = Depends(auth_dependency),
    ) -> dict[str, str]:
        if file is None or not prompt or not prompt.strip():
            raise MissingInput()
        if not api_key:
            raise MissingCredential()

        data = await file.read()
        if len(data) > web_config.max_upload_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File exceeds the {web_config.max_upload_bytes} byte upload limit.",
            )

        filename = file.filename or "upload"
        result = await summary_pipeline.summarize(filename, data, instruction=prompt, credential=api_key)
        return result.to_dict()

    return app


def _build_auth_dependency(auth_config: WebAuthConfig | None) -> Callable[..., Any]:
    """Return the dependency guarding ``POST /api/summarize`` with the shared header token.

    ``/health`` stays open so probes work without the secret.
    """

    if not auth_config or not auth_config.enabled:
        async def _no_auth() -> None:
            return None

        return _no_auth

    expected_token = auth_config.token or ""
    header_alias = auth_config.header_name

    async def _verify_token(
        provided_token: str | None = Header(default=None, alias=header_alias),
    ) -> None:
        if provided_token is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing authentication token.",
            )
        if not secrets.compare_digest(provided_token, expected_token):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication token.",
            )

    return _verify_token


__all__ = ["create_app"]
