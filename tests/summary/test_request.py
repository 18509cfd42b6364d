from __future__ import annotations

import pytest

from docdigest.config import ProviderConfig
from docdigest.summary import request as request_module
from docdigest.summary.models import FilePart, InlineText, RemoteReference, TextPart
from docdigest.summary.request import RequestBuilder, is_reasoning_model


@pytest.fixture(autouse=True)
def _no_litellm_probe(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(request_module, "_SUPPORTS_REASONING", lambda *, model: False)


def test_inline_text_is_appended_after_instruction() -> None:
    builder = RequestBuilder(ProviderConfig())
    request = builder.build(
        InlineText("document body"),
        instruction="List the risks.",
        filename="notes.txt",
        request_id="req_1",
    )

    assert len(request.parts) == 1
    part = request.parts[0]
    assert isinstance(part, TextPart)
    assert part.text.index("User instruction: List the risks.") < part.text.index("document body")
    assert '"summary"' in part.text and '"keywords"' in part.text
    assert "notes.txt" in part.text
    assert request.file_id is None


def test_remote_reference_becomes_file_part() -> None:
    builder = RequestBuilder(ProviderConfig())
    request = builder.build(
        RemoteReference("file-9"),
        instruction="Summarise.",
        filename="paper.pdf",
        request_id="req_2",
    )

    assert isinstance(request.parts[0], TextPart)
    assert request.parts[1] == FilePart("file-9")
    assert request.file_id == "file-9"
    payload = request.to_payload()
    assert payload["input"][0]["content"][1] == {"type": "input_file", "file_id": "file-9"}


def test_reasoning_hint_only_for_reasoning_models() -> None:
    reasoning = RequestBuilder(ProviderConfig(model="gpt-5-mini")).build(
        InlineText("x"), instruction="i", filename="a.txt", request_id="r"
    )
    plain = RequestBuilder(ProviderConfig(model="gpt-4o-mini")).build(
        InlineText("x"), instruction="i", filename="a.txt", request_id="r"
    )

    assert reasoning.to_payload()["reasoning"] == {"effort": "low"}
    assert "reasoning" not in plain.to_payload()


def test_model_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1")
    builder = RequestBuilder(ProviderConfig())
    assert builder.model == "gpt-4.1"


def test_litellm_probe_extends_reasoning_family(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(request_module, "_SUPPORTS_REASONING", lambda *, model: model == "o3-mini")
    assert is_reasoning_model("o3-mini", ["gpt-5"])
    assert not is_reasoning_model("gpt-4o", ["gpt-5"])


def test_litellm_probe_errors_are_treated_as_unsupported(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(*, model: str) -> bool:
        raise RuntimeError("model map unavailable")

    monkeypatch.setattr(request_module, "_SUPPORTS_REASONING", broken)
    assert not is_reasoning_model("mystery-model", [])
