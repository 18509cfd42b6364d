"""Error taxonomy for the intake-and-dispatch pipeline.

Every error carries the HTTP status the web layer reports for it. Errors raised
while a single document is processed are converted into that document's
``failed`` state by the batch scheduler and never abort its siblings.
"""

from __future__ import annotations

SUPPORTED_EXTENSIONS: tuple[str, ...] = ("pdf", "docx", "txt", "md", "csv", "json")


class DocDigestError(RuntimeError):
    """Base class for all pipeline errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingInput(DocDigestError):
    """Raised when the file or the instruction is missing."""

    status_code = 400

    def __init__(self, message: str = "A file and an instruction are required.") -> None:
        super().__init__(message)


class MissingCredential(DocDigestError):
    """Raised when no provider credential was supplied."""

    status_code = 400

    def __init__(self, message: str = "A provider API key is required.") -> None:
        super().__init__(message)


class UnsupportedFormat(DocDigestError):
    status_code = 400

    def __init__(self, extension: str) -> None:
        self.extension = extension
        supported = ", ".join(SUPPORTED_EXTENSIONS)
        super().__init__(f"Unsupported file type: .{extension or 'unknown'}. Supported types: {supported}.")


class UploadFailure(DocDigestError):
    """Raised when the provider rejects a file upload."""


class ExtractionFailure(DocDigestError):
    """Raised when a structured document cannot be read."""


class InvalidCredential(DocDigestError):
    status_code = 401

    def __init__(self, message: str = "Invalid API key.") -> None:
        super().__init__(message)


class ModelNotFound(DocDigestError):
    status_code = 404

    def __init__(self, model: str) -> None:
        self.model = model
        super().__init__(f"The requested model could not be found. Model: {model}")


class UpstreamError(DocDigestError):
    """Non-success answer or transport failure from the provider.

    Only client and server error statuses are passed through; anything else
    (an unfollowed redirect, for instance) is reported as 502.
    """

    status_code = 502

    def __init__(self, message: str, *, status_code: int | None = None, hint: str | None = None) -> None:
        super().__init__(message)
        if status_code is not None and 400 <= status_code < 600:
            self.status_code = status_code
        self.hint = hint


class NoTextOutput(DocDigestError):
    """Raised when the provider payload contains no answer text."""

    def __init__(self, message: str = "Unable to generate a summary: the model returned no text.") -> None:
        super().__init__(message)


class TooManyFiles(DocDigestError):
    """Raised when a batch exceeds the admission cap. Nothing is enqueued."""

    status_code = 400

    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(
            f"At most {limit} files can be processed at once; remove {count - limit} file(s) and try again."
        )


class OperationCancelled(Exception):
    """Signals that the run's cancellation token fired. Not an error outcome."""


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "DocDigestError",
    "ExtractionFailure",
    "InvalidCredential",
    "MissingCredential",
    "MissingInput",
    "ModelNotFound",
    "NoTextOutput",
    "OperationCancelled",
    "TooManyFiles",
    "UnsupportedFormat",
    "UploadFailure",
    "UpstreamError",
]
