"""Map filenames to the extraction strategy they need."""

from __future__ import annotations

from .models import DocumentFormat

_FORMATS_BY_EXTENSION: dict[str, DocumentFormat] = {
    "pdf": DocumentFormat.PDF,
    "txt": DocumentFormat.PLAIN_TEXT,
    "md": DocumentFormat.PLAIN_TEXT,
    "csv": DocumentFormat.PLAIN_TEXT,
    "json": DocumentFormat.PLAIN_TEXT,
    "docx": DocumentFormat.STRUCTURED_DOC,
}


def file_extension(filename: str) -> str:
    """Return the lower-cased text after the last dot, or ``""`` when there is none."""

    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def classify(filename: str) -> DocumentFormat:
    return _FORMATS_BY_EXTENSION.get(file_extension(filename), DocumentFormat.UNSUPPORTED)


__all__ = ["classify", "file_extension"]
