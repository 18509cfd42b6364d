"""Web service configuration models."""

from __future__ import annotations

from pydantic import Field, field_validator, model_validator

from docdigest.config.base import BaseConfig


class WebAuthConfig(BaseConfig):
    """Shared secret callers of ``POST /api/summarize`` send in ``header_name``.

    The CLI reuses the same token when ``summarize --server`` targets a protected instance.
    """

    enabled: bool = Field(False, description="Whether header token authentication is enforced.")
    header_name: str = Field(
        "X-Digest-Token",
        description="Header to read the authentication token from.",
        min_length=1,
    )
    token: str | None = Field(
        default=None,
        description="Shared secret token required when enabled.",
        min_length=1,
    )

    @field_validator("token")
    @classmethod
    def _strip_token(cls, token: str | None) -> str | None:
        if token is None:
            return None
        return token.strip() or None

    @model_validator(mode="after")
    def _ensure_token_when_enabled(self) -> "WebAuthConfig":
        if self.enabled and not self.token:
            raise ValueError("Authentication token must be provided when web auth is enabled.")
        return self


class WebConfig(BaseConfig):
    """Settings for the FastAPI service."""

    title: str = Field("DocDigest API", min_length=1, description="Title reported in the OpenAPI schema.")
    max_upload_bytes: int = Field(
        50 * 1024 * 1024,
        ge=1,
        description="Largest accepted upload in bytes.",
    )
    auth: WebAuthConfig | None = Field(default=None, description="Authentication settings for the API.")


__all__ = ["WebAuthConfig", "WebConfig"]
