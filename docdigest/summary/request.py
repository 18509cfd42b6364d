"""Shape the upstream generation call from extracted content."""

from __future__ import annotations

from collections.abc import Iterable

import litellm
from loguru import logger

from docdigest.config.llm import ProviderConfig

from .models import ContentPart, ExtractedContent, FilePart, InlineText, TextPart, UpstreamRequest

_SUPPORTS_REASONING = getattr(litellm, "supports_reasoning", None)

_INSTRUCTION_TEMPLATE = """Request ID: {request_id}
File name: {filename}

Analyse the uploaded file "{filename}", summarise it and extract its keywords.
Answer with a single JSON object containing exactly two keys: "summary" (a string) and "keywords" (an array of strings).
Example:
{{
  "summary": "The summary goes here",
  "keywords": ["keyword1", "keyword2", "keyword3", "keyword4", "keyword5"]
}}

User instruction: {instruction}"""

_CONTENT_SEPARATOR = "\n\nDocument content begins:\n"


def _probe_reasoning_support(model: str) -> bool:
    if _SUPPORTS_REASONING is None:
        return False
    try:
        return bool(_SUPPORTS_REASONING(model=model))
    except Exception as exc:  # noqa: BLE001
        logger.debug("LiteLLM reasoning probe failed for model {}: {}", model, exc)
        return False


def is_reasoning_model(model: str, prefixes: Iterable[str]) -> bool:
    """Return whether ``model`` should receive the reasoning-effort hint."""

    if any(model.startswith(prefix) for prefix in prefixes):
        return True
    return _probe_reasoning_support(model)


def render_instruction(*, instruction: str, filename: str, request_id: str) -> str:
    return _INSTRUCTION_TEMPLATE.format(request_id=request_id, filename=filename, instruction=instruction)


class RequestBuilder:
    """Build immutable :class:`UpstreamRequest` objects.

    The model id and its reasoning capability are resolved once at construction,
    so :meth:`build` performs no I/O.
    """

    def __init__(self, config: ProviderConfig, *, model: str | None = None) -> None:
        self.model = model or config.resolved_model
        self._reasoning_effort: str | None = None
        if is_reasoning_model(self.model, config.reasoning_prefixes):
            self._reasoning_effort = config.reasoning_effort
        logger.debug("Request builder ready for model {} (reasoning_effort={})", self.model, self._reasoning_effort)

    def build(
        self,
        content: ExtractedContent,
        *,
        instruction: str,
        filename: str,
        request_id: str,
    ) -> UpstreamRequest:
        block = render_instruction(instruction=instruction, filename=filename, request_id=request_id)
        parts: tuple[ContentPart, ...]
        if isinstance(content, InlineText):
            parts = (TextPart(block + _CONTENT_SEPARATOR + content.text),)
        else:
            parts = (TextPart(block), FilePart(content.file_id))
        return UpstreamRequest(model=self.model, parts=parts, reasoning_effort=self._reasoning_effort)


__all__ = ["RequestBuilder", "is_reasoning_model", "render_instruction"]
