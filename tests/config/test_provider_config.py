from __future__ import annotations

import pytest
from pydantic import ValidationError

from docdigest.config import ProviderConfig, resolve_env_reference


def test_defaults() -> None:
    config = ProviderConfig()
    assert config.base_url == "https://api.openai.com/v1"
    assert config.resolved_model == "gpt-5"
    assert config.reasoning_prefixes == ["gpt-5"]
    assert config.upload_purpose == "user_data"


def test_base_url_trailing_slash_is_stripped() -> None:
    assert ProviderConfig(base_url="https://proxy.local/v1/").base_url == "https://proxy.local/v1"
    with pytest.raises(ValidationError):
        ProviderConfig(base_url=" / ")


def test_model_override_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_MODEL", "  gpt-4.1-mini ")
    assert ProviderConfig(model="gpt-5").resolved_model == "gpt-4.1-mini"
    assert ProviderConfig(model="gpt-5", model_env_var=None).resolved_model == "gpt-5"


def test_blank_override_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_MODEL", "   ")
    assert ProviderConfig().resolved_model == "gpt-5"


def test_api_key_env_reference(monkeypatch: pytest.MonkeyPatch) -> None:
    config = ProviderConfig(api_key="env:OPENAI_API_KEY")
    assert config.resolve_api_key() is None

    monkeypatch.setenv("OPENAI_API_KEY", "sk-live")
    assert config.resolve_api_key() == "sk-live"
    assert ProviderConfig(api_key="sk-inline").resolve_api_key() == "sk-inline"


def test_required_env_reference_raises_when_unset() -> None:
    with pytest.raises(EnvironmentError, match="DOCDIGEST_MISSING"):
        resolve_env_reference("env:DOCDIGEST_MISSING")


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        ProviderConfig(timeout=0)
