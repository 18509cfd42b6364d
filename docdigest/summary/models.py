"""Data models used by the summary pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Literal
from uuid import uuid4


class DocumentFormat(str, Enum):
    PDF = "pdf"
    PLAIN_TEXT = "plain-text"
    STRUCTURED_DOC = "structured-doc"
    UNSUPPORTED = "unsupported"


class DocumentState(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (DocumentState.COMPLETED, DocumentState.FAILED)


# processing -> pending only happens through cancellation
_ALLOWED_TRANSITIONS: dict[DocumentState, frozenset[DocumentState]] = {
    DocumentState.PENDING: frozenset({DocumentState.PROCESSING}),
    DocumentState.PROCESSING: frozenset(
        {DocumentState.COMPLETED, DocumentState.FAILED, DocumentState.PENDING}
    ),
    DocumentState.COMPLETED: frozenset(),
    DocumentState.FAILED: frozenset(),
}


class InvalidTransition(ValueError):
    """Raised when a document is moved along an edge the lifecycle does not allow."""


@dataclass(frozen=True, slots=True)
class SummaryResult:
    """Summary text plus keywords joined with ``", "``."""

    summary: str
    keywords: str

    def to_dict(self) -> dict[str, str]:
        return {"summary": self.summary, "keywords": self.keywords}


@dataclass(frozen=True, slots=True)
class Document:
    """A user-supplied file moving through one batch run."""

    name: str
    content: bytes = field(repr=False)
    id: str = field(default_factory=lambda: uuid4().hex)
    format: DocumentFormat | None = None
    state: DocumentState = DocumentState.PENDING
    result: SummaryResult | None = None
    error: str | None = None

    def transition(
        self,
        state: DocumentState,
        *,
        result: SummaryResult | None = None,
        error: str | None = None,
        format: DocumentFormat | None = None,
    ) -> "Document":
        """Return a copy moved to ``state``; illegal edges raise :class:`InvalidTransition`."""

        if state not in _ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransition(f"Document {self.id}: {self.state.value} -> {state.value} is not allowed")
        return replace(
            self,
            state=state,
            result=result if state is DocumentState.COMPLETED else None,
            error=error if state is DocumentState.FAILED else None,
            format=format or self.format,
        )

    def to_dict(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "format": self.format.value if self.format else None,
            "state": self.state.value,
        }
        if self.result is not None:
            record.update(self.result.to_dict())
        if self.error is not None:
            record["error"] = self.error
        return record


@dataclass(frozen=True, slots=True)
class InlineText:
    text: str
    kind: Literal["inline"] = "inline"


@dataclass(frozen=True, slots=True)
class RemoteReference:
    """Opaque id of a file uploaded to the provider's storage."""

    file_id: str
    kind: Literal["remote"] = "remote"


ExtractedContent = InlineText | RemoteReference


@dataclass(frozen=True, slots=True)
class TextPart:
    text: str

    def to_payload(self) -> dict[str, str]:
        return {"type": "input_text", "text": self.text}


@dataclass(frozen=True, slots=True)
class FilePart:
    file_id: str

    def to_payload(self) -> dict[str, str]:
        return {"type": "input_file", "file_id": self.file_id}


ContentPart = TextPart | FilePart


@dataclass(frozen=True, slots=True)
class UpstreamRequest:
    """Fully shaped generation call. Carries no network state."""

    model: str
    parts: tuple[ContentPart, ...]
    reasoning_effort: str | None = None

    @property
    def file_id(self) -> str | None:
        for part in self.parts:
            if isinstance(part, FilePart):
                return part.file_id
        return None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "input": [
                {
                    "role": "user",
                    "content": [part.to_payload() for part in self.parts],
                }
            ],
        }
        if self.reasoning_effort:
            payload["reasoning"] = {"effort": self.reasoning_effort}
        return payload


__all__ = [
    "ContentPart",
    "Document",
    "DocumentFormat",
    "DocumentState",
    "ExtractedContent",
    "FilePart",
    "InlineText",
    "InvalidTransition",
    "RemoteReference",
    "SummaryResult",
    "TextPart",
    "UpstreamRequest",
]
