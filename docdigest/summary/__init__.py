"""Document intake-and-dispatch pipeline."""

from __future__ import annotations

from .cancellation import CancellationToken
from .classifier import classify
from .errors import (
    DocDigestError,
    ExtractionFailure,
    InvalidCredential,
    MissingCredential,
    MissingInput,
    ModelNotFound,
    NoTextOutput,
    OperationCancelled,
    TooManyFiles,
    UnsupportedFormat,
    UploadFailure,
    UpstreamError,
)
from .gateway import LLMGateway
from .models import Document, DocumentFormat, DocumentState, SummaryResult, UpstreamRequest
from .normalizer import ResponseNormalizer
from .pipeline import DocumentProcessor, SummaryPipeline
from .request import RequestBuilder

__all__ = [
    "CancellationToken",
    "DocDigestError",
    "Document",
    "DocumentFormat",
    "DocumentProcessor",
    "DocumentState",
    "ExtractionFailure",
    "InvalidCredential",
    "LLMGateway",
    "MissingCredential",
    "MissingInput",
    "ModelNotFound",
    "NoTextOutput",
    "OperationCancelled",
    "RequestBuilder",
    "ResponseNormalizer",
    "SummaryPipeline",
    "SummaryResult",
    "TooManyFiles",
    "UnsupportedFormat",
    "UploadFailure",
    "UpstreamError",
    "UpstreamRequest",
    "classify",
]
