from __future__ import annotations

import pytest

from docdigest.summary.errors import NoTextOutput
from docdigest.summary.normalizer import (
    FALLBACK_SUMMARY_CHARS,
    KEYWORDS_FAILED,
    SUMMARY_FAILED,
    ResponseNormalizer,
    first_output_text,
)
from tests.utils import responses_payload


@pytest.fixture()
def normalizer() -> ResponseNormalizer:
    return ResponseNormalizer()


def test_json_answer_is_split_into_summary_and_keywords(normalizer: ResponseNormalizer) -> None:
    result = normalizer.normalize(responses_payload('{"summary":"S","keywords":["a","b"]}'))
    assert result.summary == "S"
    assert result.keywords == "a, b"


def test_json_embedded_in_prose_is_found(normalizer: ResponseNormalizer) -> None:
    text = 'Here you go:\n```json\n{"summary": ["Line one", "Line two"], "keywords": "x, y"}\n```'
    result = normalizer.parse(text)
    assert result.summary == "Line one\nLine two"
    assert result.keywords == "x, y"


def test_missing_keys_use_failure_markers(normalizer: ResponseNormalizer) -> None:
    result = normalizer.parse('{"summary": "", "other": 1}')
    assert result.summary == SUMMARY_FAILED
    assert result.keywords == KEYWORDS_FAILED


def test_answer_without_json_falls_back_to_truncated_text(normalizer: ResponseNormalizer) -> None:
    text = "plain prose " * 60
    result = normalizer.parse(text)

    assert len(text) > FALLBACK_SUMMARY_CHARS
    assert result.summary == (text[:FALLBACK_SUMMARY_CHARS] + "...").strip()
    assert result.keywords == KEYWORDS_FAILED


def test_malformed_json_keeps_full_text(normalizer: ResponseNormalizer) -> None:
    text = "Result: {summary: unquoted} and more words"
    result = normalizer.parse(text)
    assert result.summary == text
    assert result.keywords == KEYWORDS_FAILED


def test_output_text_field_wins_over_output_items(normalizer: ResponseNormalizer) -> None:
    payload = responses_payload('{"summary": "from message", "keywords": []}')
    payload["output_text"] = '{"summary": "from output_text", "keywords": ["k"]}'
    assert normalizer.normalize(payload).summary == "from output_text"


def test_text_value_objects_are_accepted(normalizer: ResponseNormalizer) -> None:
    payload = {"output": [{"type": "message", "content": [{"text": {"value": "no json here"}}]}]}
    assert normalizer.extract_text(payload) == "no json here"


def test_first_output_item_is_the_last_resort() -> None:
    payload = {"output": [{"type": "custom", "content": [{"text": "custom text"}]}]}
    assert ResponseNormalizer().extract_text(payload) == "custom text"
    assert first_output_text({"output": []}) is None


def test_payload_without_text_raises(normalizer: ResponseNormalizer) -> None:
    with pytest.raises(NoTextOutput):
        normalizer.normalize({"output": [{"type": "reasoning", "summary": []}]})


def test_custom_strategy_order_is_respected() -> None:
    normalizer = ResponseNormalizer(strategies=[first_output_text])
    payload = {
        "output_text": "ignored",
        "output": [{"type": "message", "content": [{"text": "used"}]}],
    }
    assert normalizer.extract_text(payload) == "used"
