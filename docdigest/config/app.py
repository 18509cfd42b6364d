"""Application-level configuration models."""

from __future__ import annotations

from pydantic import Field, field_validator

from docdigest.config.base import BaseConfig
from docdigest.config.llm import ProviderConfig
from docdigest.config.prompts import PromptConfig
from docdigest.config.web import WebConfig

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class AppConfig(BaseConfig):
    """Top-level runtime configuration."""

    logging_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    provider: ProviderConfig = Field(default_factory=ProviderConfig, description="LLM provider settings")
    prompts: PromptConfig = Field(default_factory=PromptConfig, description="Instruction presets")
    web: WebConfig | None = Field(None, description="HTTP service configuration")

    @field_validator("logging_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown logging level '{value}'")
        return level


__all__ = ["AppConfig"]
