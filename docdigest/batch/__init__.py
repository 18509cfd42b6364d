"""Client-side batch scheduling."""

from __future__ import annotations

from .remote import RemoteSummarizer
from .scheduler import (
    GROUP_SIZE,
    MAX_FILES_PER_BATCH,
    BatchReport,
    BatchRun,
    BatchScheduler,
    DocumentUpdate,
)

__all__ = [
    "BatchReport",
    "BatchRun",
    "BatchScheduler",
    "DocumentUpdate",
    "GROUP_SIZE",
    "MAX_FILES_PER_BATCH",
    "RemoteSummarizer",
]
