"""Configuration namespace for docdigest."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config
from .llm import ProviderConfig
from .prompts import DEFAULT_INSTRUCTION, PromptConfig, PromptPreset
from .utils import env_override, resolve_env_reference
from .web import WebAuthConfig, WebConfig

__all__ = [
    "AppConfig",
    "BaseConfig",
    "DEFAULT_INSTRUCTION",
    "PromptConfig",
    "PromptPreset",
    "ProviderConfig",
    "WebAuthConfig",
    "WebConfig",
    "env_override",
    "load_config",
    "resolve_env_reference",
]
