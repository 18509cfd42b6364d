"""Format-specific content extraction."""

from __future__ import annotations

import asyncio
import io
import re
from typing import Protocol

import docx
from loguru import logger

from .cancellation import CancellationToken
from .classifier import file_extension
from .errors import ExtractionFailure, UnsupportedFormat
from .models import DocumentFormat, ExtractedContent, InlineText, RemoteReference

MAX_INLINE_CHARS = 150_000

_TRUNCATION_MARKER = re.compile(r"\n\.\.\.\[truncated (\d+) chars\]\Z")


def truncate_text(text: str, limit: int = MAX_INLINE_CHARS) -> str:
    """Cut ``text`` to ``limit`` characters and append how many were dropped.

    A text that already ends with the marker and whose body fits the limit is
    returned unchanged.
    """

    if len(text) <= limit:
        return text
    marker = _TRUNCATION_MARKER.search(text)
    if marker is not None and marker.start() <= limit:
        return text
    omitted = len(text) - limit
    return f"{text[:limit]}\n...[truncated {omitted} chars]"


class FileUploader(Protocol):
    async def upload_file(
        self,
        data: bytes,
        filename: str,
        *,
        credential: str,
        token: CancellationToken,
    ) -> RemoteReference:
        """Store ``data`` with the provider and return its reference."""
        ...


def docx_to_text(data: bytes) -> str:
    """Return paragraph text followed by tab-joined table rows."""

    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as exc:  # noqa: BLE001
        raise ExtractionFailure(f"Unable to read the Word document: {exc}") from exc

    parts: list[str] = [paragraph.text for paragraph in document.paragraphs if paragraph.text]
    for table in document.tables:
        for row in table.rows:
            row_text = "\t".join(cell.text or "" for cell in row.cells)
            if row_text.strip():
                parts.append(row_text)
    return "\n".join(parts)


class ContentExtractor:
    """Turn raw document bytes into inline text or an uploaded file reference."""

    def __init__(self, uploader: FileUploader, *, max_chars: int = MAX_INLINE_CHARS) -> None:
        self._uploader = uploader
        self._max_chars = max_chars

    async def extract(
        self,
        fmt: DocumentFormat,
        *,
        filename: str,
        data: bytes,
        credential: str,
        token: CancellationToken,
    ) -> ExtractedContent:
        if fmt is DocumentFormat.UNSUPPORTED:
            raise UnsupportedFormat(file_extension(filename))

        token.raise_if_cancelled()
        if fmt is DocumentFormat.PDF:
            reference = await self._uploader.upload_file(data, filename, credential=credential, token=token)
            logger.debug("Uploaded {} as {}", filename, reference.file_id)
            return reference

        if fmt is DocumentFormat.PLAIN_TEXT:
            text = data.decode("utf-8", errors="replace")
        else:
            logger.debug("Processing docx file: {}, buffer size: {}", filename, len(data))
            text = (await token.run(asyncio.to_thread(docx_to_text, data))).strip()
            logger.debug("Extracted {} characters from {}", len(text), filename)

        truncated = truncate_text(text, self._max_chars)
        if truncated is not text:
            logger.info("Truncated {} from {} to {} characters", filename, len(text), self._max_chars)
        return InlineText(truncated)


__all__ = ["ContentExtractor", "FileUploader", "MAX_INLINE_CHARS", "docx_to_text", "truncate_text"]
