"""Bounded-concurrency batch driver over the summary pipeline."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from docdigest.summary.cancellation import CancellationToken
from docdigest.summary.classifier import classify
from docdigest.summary.errors import DocDigestError, OperationCancelled, TooManyFiles
from docdigest.summary.models import Document, DocumentFormat, DocumentState, SummaryResult
from docdigest.summary.pipeline import DocumentProcessor

MAX_FILES_PER_BATCH = 20
GROUP_SIZE = 3

_UNKNOWN_ERROR = "An unknown error occurred."


@dataclass(frozen=True, slots=True)
class DocumentUpdate:
    """A single ``(id, new state)`` merge submitted by a finishing operation."""

    document_id: str
    state: DocumentState
    result: SummaryResult | None = None
    error: str | None = None
    format: DocumentFormat | None = None


class BatchRun:
    """Documents of one summarise action, indexed by id.

    All writes go through :meth:`apply`, which merges one document's update and
    leaves every other record untouched.
    """

    def __init__(
        self,
        documents: Sequence[Document],
        *,
        concurrency: int = GROUP_SIZE,
        token: CancellationToken | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._order: list[str] = [document.id for document in documents]
        if len(set(self._order)) != len(self._order):
            raise ValueError("Document ids must be unique within a batch run")
        self._records: dict[str, Document] = {document.id: document for document in documents}
        self._members: tuple[str, ...] = tuple(
            document.id for document in documents if document.state is DocumentState.PENDING
        )
        self.concurrency = concurrency
        self.token = token or CancellationToken()

    @property
    def documents(self) -> list[Document]:
        return [self._records[document_id] for document_id in self._order]

    @property
    def member_ids(self) -> tuple[str, ...]:
        """Ids of the documents this run dispatches, in submission order."""

        return self._members

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def get(self, document_id: str) -> Document:
        return self._records[document_id]

    def apply(self, update: DocumentUpdate) -> Document:
        current = self._records[update.document_id]
        updated = current.transition(
            update.state,
            result=update.result,
            error=update.error,
            format=update.format,
        )
        self._records[update.document_id] = updated
        return updated

    def groups(self) -> list[tuple[str, ...]]:
        size = self.concurrency
        return [self._members[start:start + size] for start in range(0, len(self._members), size)]

    def in_state(self, state: DocumentState) -> list[Document]:
        return [document for document in self.documents if document.state is state]

    def cancel(self) -> None:
        self.token.cancel()


@dataclass(slots=True)
class BatchReport:
    documents: list[Document]
    cancelled: bool = False
    groups_started: int = 0
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def failed(self) -> list[Document]:
        return [document for document in self.documents if document.state is DocumentState.FAILED]

    def to_dict(self) -> dict[str, Any]:
        return {
            "cancelled": self.cancelled,
            "groups_started": self.groups_started,
            "counts": dict(self.counts),
            "documents": [document.to_dict() for document in self.documents],
        }


class BatchScheduler:
    """Run documents through a :class:`DocumentProcessor` in sequential groups.

    Members of a group run concurrently; the next group starts only once every
    member reached a terminal state or was returned to pending by cancellation.
    A failing document never affects its siblings.
    """

    def __init__(
        self,
        processor: DocumentProcessor,
        *,
        max_files: int = MAX_FILES_PER_BATCH,
        concurrency: int = GROUP_SIZE,
    ) -> None:
        self._processor = processor
        self._max_files = max_files
        self._concurrency = concurrency

    def enqueue(self, documents: Iterable[Document], *, token: CancellationToken | None = None) -> BatchRun:
        """Create a run over the pending ``documents`` or reject all of them."""

        documents = list(documents)
        pending = [document for document in documents if document.state is DocumentState.PENDING]
        if len(pending) > self._max_files:
            logger.warning("Rejected batch of {} documents (limit {})", len(pending), self._max_files)
            raise TooManyFiles(len(pending), self._max_files)
        logger.debug("Enqueued {} pending documents out of {}", len(pending), len(documents))
        return BatchRun(documents, concurrency=self._concurrency, token=token)

    async def run(self, batch: BatchRun, *, instruction: str, credential: str) -> BatchReport:
        groups = batch.groups()
        started = 0
        for index, group in enumerate(groups, start=1):
            if batch.cancelled:
                logger.info("Batch cancelled; {} group(s) not started", len(groups) - index + 1)
                break
            started += 1
            logger.info("Dispatching group {}/{} ({} documents)", index, len(groups), len(group))
            await asyncio.gather(
                *(self._process(batch, document_id, instruction=instruction, credential=credential) for document_id in group)
            )

        counts = {state.value: len(batch.in_state(state)) for state in DocumentState}
        logger.info(
            "Batch finished: {} completed, {} failed, {} pending{}",
            counts[DocumentState.COMPLETED.value],
            counts[DocumentState.FAILED.value],
            counts[DocumentState.PENDING.value],
            " (cancelled)" if batch.cancelled else "",
        )
        return BatchReport(documents=batch.documents, cancelled=batch.cancelled, groups_started=started, counts=counts)

    async def _process(self, batch: BatchRun, document_id: str, *, instruction: str, credential: str) -> None:
        document = batch.get(document_id)
        document = batch.apply(
            DocumentUpdate(document_id, DocumentState.PROCESSING, format=classify(document.name))
        )
        try:
            result = await self._processor.summarize(
                document.name,
                document.content,
                instruction=instruction,
                credential=credential,
                token=batch.token,
            )
        except OperationCancelled:
            logger.info("Processing of {} cancelled; returned to pending", document.name)
            batch.apply(DocumentUpdate(document_id, DocumentState.PENDING))
            return
        except asyncio.CancelledError:
            logger.info("Run task cancelled while processing {}; returned to pending", document.name)
            batch.apply(DocumentUpdate(document_id, DocumentState.PENDING))
            raise
        except DocDigestError as exc:
            logger.error("Failed to summarise {}: {}", document.name, exc.message)
            batch.apply(DocumentUpdate(document_id, DocumentState.FAILED, error=exc.message))
            return
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while summarising {}", document.name)
            batch.apply(DocumentUpdate(document_id, DocumentState.FAILED, error=str(exc) or _UNKNOWN_ERROR))
            return

        batch.apply(DocumentUpdate(document_id, DocumentState.COMPLETED, result=result))


__all__ = [
    "BatchReport",
    "BatchRun",
    "BatchScheduler",
    "DocumentUpdate",
    "GROUP_SIZE",
    "MAX_FILES_PER_BATCH",
]
