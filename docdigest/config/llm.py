"""LLM provider configuration models."""

from __future__ import annotations

from pydantic import Field, field_validator

from docdigest.config.base import BaseConfig
from docdigest.config.utils import env_override, resolve_env_reference


class ProviderConfig(BaseConfig):
    """Connection and model settings for the OpenAI-compatible provider."""

    base_url: str = Field("https://api.openai.com/v1", description="Provider API base URL")
    api_key: str | None = Field(
        None,
        description="Default credential, can use 'env:VAR_NAME' format. Callers may supply their own per run.",
    )
    model: str = Field("gpt-5", description="Default model identifier for generation calls")
    model_env_var: str | None = Field(
        "OPENAI_MODEL",
        description="Environment variable that overrides 'model' when set",
    )
    reasoning_prefixes: list[str] = Field(
        default_factory=lambda: ["gpt-5"],
        description="Model name prefixes that receive the reasoning-effort hint",
    )
    reasoning_effort: str = Field("low", description="Reasoning effort sent to reasoning-capable models")
    timeout: float = Field(120.0, gt=0, description="Per-request timeout in seconds")
    upload_purpose: str = Field("user_data", description="Purpose tag attached to uploaded files")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        stripped = value.strip().rstrip("/")
        if not stripped:
            raise ValueError("base_url must not be empty")
        return stripped

    @property
    def resolved_model(self) -> str:
        """Return the model id after applying the environment override."""

        return env_override(self.model_env_var, self.model)

    def resolve_api_key(self) -> str | None:
        """Return the configured credential, expanding ``env:VAR`` references."""

        return resolve_env_reference(self.api_key, required=False)


__all__ = ["ProviderConfig"]
