"""Turn a raw provider payload into a :class:`SummaryResult`.

Stage one locates the answer text by trying an ordered list of strategies.
Stage two looks for the first flat ``{...}`` object in that text and reads
``summary`` and ``keywords`` from it, degrading to the raw text when the answer
is not usable JSON. Only a payload without any text raises.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Sequence
from typing import Any

from loguru import logger

from .errors import NoTextOutput
from .models import SummaryResult

SUMMARY_FAILED = "Summary failed"
KEYWORDS_FAILED = "Keyword extraction failed"
FALLBACK_SUMMARY_CHARS = 300

# Flat objects only: nested objects and braces inside strings are not matched.
_JSON_OBJECT = re.compile(r"\{[^{}]*\}")

TextStrategy = Callable[[dict[str, Any]], str | None]


def _content_text(item: Any) -> str | None:
    if not isinstance(item, dict):
        return None
    contents = item.get("content")
    if not isinstance(contents, list) or not contents or not isinstance(contents[0], dict):
        return None
    text = contents[0].get("text")
    if isinstance(text, dict):
        text = text.get("value")
    return text if isinstance(text, str) and text else None


def _outputs(payload: dict[str, Any]) -> list[Any]:
    output = payload.get("output")
    return output if isinstance(output, list) else []


def output_text(payload: dict[str, Any]) -> str | None:
    text = payload.get("output_text")
    return text if isinstance(text, str) and text else None


def first_message_text(payload: dict[str, Any]) -> str | None:
    for item in _outputs(payload):
        if isinstance(item, dict) and item.get("type") == "message":
            return _content_text(item)
    return None


def first_output_text(payload: dict[str, Any]) -> str | None:
    outputs = _outputs(payload)
    return _content_text(outputs[0]) if outputs else None


DEFAULT_STRATEGIES: tuple[TextStrategy, ...] = (output_text, first_message_text, first_output_text)


def _join(value: Any, separator: str, fallback: str) -> str:
    if isinstance(value, list):
        return separator.join(str(item) for item in value)
    if not value:
        return fallback
    return str(value)


class ResponseNormalizer:
    def __init__(self, strategies: Sequence[TextStrategy] = DEFAULT_STRATEGIES) -> None:
        self._strategies = tuple(strategies)

    def extract_text(self, payload: dict[str, Any]) -> str:
        for strategy in self._strategies:
            text = strategy(payload)
            if text:
                return text
        raise NoTextOutput()

    def parse(self, text: str) -> SummaryResult:
        match = _JSON_OBJECT.search(text)
        if match is None:
            logger.warning("No JSON object in model output; using raw text as summary")
            summary = text
            if len(summary) > FALLBACK_SUMMARY_CHARS:
                summary = summary[:FALLBACK_SUMMARY_CHARS] + "..."
            return SummaryResult(summary=summary.strip(), keywords=KEYWORDS_FAILED)

        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            logger.warning("Model output contained malformed JSON ({}); using raw text", exc.msg)
            return SummaryResult(summary=text.strip(), keywords=KEYWORDS_FAILED)

        summary = _join(data.get("summary"), "\n", SUMMARY_FAILED)
        keywords = _join(data.get("keywords"), ", ", KEYWORDS_FAILED)
        return SummaryResult(summary=summary.strip(), keywords=keywords.strip())

    def normalize(self, payload: dict[str, Any]) -> SummaryResult:
        return self.parse(self.extract_text(payload))


__all__ = [
    "DEFAULT_STRATEGIES",
    "FALLBACK_SUMMARY_CHARS",
    "KEYWORDS_FAILED",
    "ResponseNormalizer",
    "SUMMARY_FAILED",
    "first_message_text",
    "first_output_text",
    "output_text",
]
