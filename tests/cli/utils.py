"""Shared helpers for CLI tests."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

BASE_CONFIG = """
logging_level = "INFO"

[provider]
base_url = "https://provider.test/v1"
api_key = "sk-from-config"

[[prompts.presets]]
name = "brief"
text = "Three sentences, please."
"""


@contextmanager
def logger_to_stderr(level: str = "INFO"):
    """Temporarily route Loguru output to stderr for assertion."""

    handler_id = logger.add(sys.stderr, level=level)
    try:
        yield
    finally:
        logger.remove(handler_id)


def write_config(directory: Path, text: str = BASE_CONFIG) -> Path:
    path = directory / "config.toml"
    path.write_text(text)
    return path


def write_documents(directory: Path, names: list[str]) -> list[str]:
    paths = []
    for name in names:
        path = directory / name
        path.write_text(f"contents of {name}")
        paths.append(str(path))
    return paths
