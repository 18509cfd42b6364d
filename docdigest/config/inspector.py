"""Utilities for inspecting and validating configuration files."""

from __future__ import annotations

import os
from pathlib import Path
from types import UnionType
from typing import Any, Iterable, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from .app import AppConfig
from .base import load_config


class ConfigInspectionError(RuntimeError):
    """Raised when configuration inspection fails unexpectedly."""


def _error_result(path: Path, error_type: str, message: str, **extra: Any) -> dict[str, Any]:
    error: dict[str, Any] = {"type": error_type, "message": message}
    error.update(extra)
    return {"status": "error", "config_path": str(path), "error": error}


def check_config(path: Path, *, config_cls: type[AppConfig] = AppConfig) -> tuple[dict[str, Any], int, AppConfig | None]:
    """Validate the configuration file and collect warnings.

    Returns a tuple of ``(result_dict, exit_code, config_instance_or_None)``.
    Exit codes: 0 ok, 1 malformed TOML, 2 unreadable file, 3 schema violation.
    """

    try:
        config = load_config(config_cls, path)
    except FileNotFoundError as exc:
        return _error_result(path, "missing_file", str(exc)), 2, None
    except PermissionError as exc:
        return _error_result(path, "permission_error", str(exc)), 2, None
    except ValidationError as exc:
        details = [
            {
                "loc": _format_error_location(err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        return _error_result(path, "validation_error", "Configuration validation failed", details=details), 3, None
    except ValueError as exc:
        return _error_result(path, "invalid_format", str(exc)), 1, None
    except Exception as exc:  # pragma: no cover - unexpected failures
        raise ConfigInspectionError("Unexpected configuration inspection error") from exc

    result = {
        "status": "ok",
        "config_path": str(path),
        "model": config.provider.resolved_model,
        "warnings": _collect_warnings(config),
    }
    return result, 0, config


def explain_config(*, config_cls: type[BaseModel] = AppConfig) -> list[dict[str, Any]]:
    """Flatten the configuration schema into one entry per field.

    Nested sections are reported with dotted names (``provider.model``) and
    list-of-section fields with ``[]`` (``prompts.presets[].name``).
    """

    entries: list[dict[str, Any]] = []
    seen: set[type[BaseModel]] = set()

    def _describe(model_cls: type[BaseModel], prefix: str) -> None:
        if model_cls in seen:
            return
        seen.add(model_cls)
        for name, field in model_cls.model_fields.items():
            dotted = f"{prefix}{name}"
            entries.append(
                {
                    "name": dotted,
                    "type": _type_label(field.annotation),
                    "required": field.is_required(),
                    "default": _default_value(field),
                    "description": field.description or "",
                }
            )
            nested = _section_of(field.annotation)
            if nested is not None:
                section_cls, is_list = nested
                _describe(section_cls, f"{dotted}[]." if is_list else f"{dotted}.")

    _describe(config_cls, "")
    return entries


def _format_error_location(location: Iterable[int | str]) -> str:
    return ".".join(str(part) for part in location)


def _collect_warnings(config: AppConfig) -> list[str]:
    warnings: list[str] = []
    provider = config.provider

    if provider.api_key is None:
        warnings.append("No provider api_key configured; callers must pass a credential per run")
    elif provider.resolve_api_key() is None:
        warnings.append(f"provider.api_key references an unset variable ({provider.api_key})")
    if provider.model_env_var and os.getenv(provider.model_env_var):
        warnings.append(
            f"Model '{provider.model}' is overridden by {provider.model_env_var}={provider.resolved_model}"
        )
    if config.web is not None and (config.web.auth is None or not config.web.auth.enabled):
        warnings.append("Web service is configured without authentication")

    return warnings


def _is_section(candidate: Any) -> bool:
    return isinstance(candidate, type) and issubclass(candidate, BaseModel)


def _type_label(annotation: Any) -> str:
    """Render ``annotation`` the way it reads in source, e.g. ``list[PromptPreset]``."""

    args = get_args(annotation)
    if get_origin(annotation) in (Union, UnionType):
        return " | ".join("None" if arg is type(None) else _type_label(arg) for arg in args)
    if args:
        origin = get_origin(annotation)
        return f"{getattr(origin, '__name__', str(origin))}[{', '.join(_type_label(arg) for arg in args)}]"
    return getattr(annotation, "__name__", str(annotation))


def _section_of(annotation: Any) -> tuple[type[BaseModel], bool] | None:
    """Return the nested section model of a field and whether it is a list of sections."""

    if _is_section(annotation):
        return annotation, False
    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin in (Union, UnionType):
        sections = [arg for arg in args if _is_section(arg)]
        return (sections[0], False) if sections else None
    if origin in (list, tuple) and args and _is_section(args[0]):
        return args[0], True
    return None


def _default_value(field: FieldInfo) -> Any:
    if field.is_required():
        return None
    value = field.default_factory() if field.default_factory is not None else field.default  # type: ignore[call-arg]
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [item.model_dump() if isinstance(item, BaseModel) else item for item in value]
    return value


__all__ = ["check_config", "explain_config", "ConfigInspectionError"]
