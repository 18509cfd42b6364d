"""Environment lookups shared by the configuration models."""

from __future__ import annotations

import os

_ENV_PREFIX = "env:"


def resolve_env_reference(value: str | None, *, required: bool = True) -> str | None:
    """Expand ``"env:VAR_NAME"`` references to the variable's value.

    Plain strings and ``None`` pass through untouched. A reference to an unset or
    empty variable raises :class:`EnvironmentError` when ``required`` is true and
    yields ``None`` otherwise.
    """

    if value is None or not value.startswith(_ENV_PREFIX):
        return value

    var_name = value[len(_ENV_PREFIX):].strip()
    resolved = os.getenv(var_name, "").strip()
    if resolved:
        return resolved
    if required:
        raise EnvironmentError(f"Environment variable '{var_name}' is not set or empty")
    return None


def env_override(var_name: str | None, default: str) -> str:
    """Return the non-blank value of ``var_name`` or ``default``."""

    if not var_name:
        return default
    value = os.getenv(var_name, "").strip()
    return value or default


__all__ = ["env_override", "resolve_env_reference"]
