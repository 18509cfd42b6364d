"""Pytest helpers for path configuration and environment isolation."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

# Keep LiteLLM from downloading its model map while tests import the request builder.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch):
    """Drop model overrides and CLI log sinks that would leak between tests."""

    monkeypatch.delenv("OPENAI_MODEL", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    yield

    from loguru import logger

    from docdigest import cli

    if cli._LOG_SINK_ID is not None:
        logger.remove(cli._LOG_SINK_ID)
        cli._LOG_SINK_ID = None
