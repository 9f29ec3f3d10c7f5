"""Turns uploaded file bytes into sanitized, indexable text."""
from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Literal, Mapping

from domain.entities import FileMetadata, NormalizedFile
from domain.errors import ExtractionFailure, UnsupportedFormat
from domain.interfaces import TextExtractor
from infrastructure.text_extraction.docx_extractor import DocxExtractor, DocxPlaceholderExtractor
from infrastructure.text_extraction.pdf_extractor import PdfExtractor, pdf_error_placeholder
from infrastructure.text_extraction.plain_text_extractor import PlainTextExtractor
from infrastructure.text_extraction.sanitizer import sanitize_content

logger = logging.getLogger(__name__)

ExtractionErrorPolicy = Literal["inline", "raise"]
DocxMode = Literal["placeholder", "python-docx"]

_MIME_TYPES: dict[str, str] = {
    "text/plain": "txt",
    "text/markdown": "md",
    "text/x-markdown": "md",
    "text/csv": "csv",
    "application/json": "json",
    "application/pdf": "pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
}


def build_extractors(docx_mode: DocxMode = "placeholder") -> dict[str, TextExtractor]:
    plain = PlainTextExtractor()
    docx: TextExtractor = DocxExtractor() if docx_mode == "python-docx" else DocxPlaceholderExtractor()
    return {
        "txt": plain,
        "md": plain,
        "csv": plain,
        "json": plain,
        "pdf": PdfExtractor(),
        "docx": docx,
    }


def resolve_file_type(filename: str, declared_type: str | None = None) -> str:
    """Resolve the type tag from the filename extension, falling back to the declared type."""

    suffix = PurePath(filename).suffix.lower().lstrip(".")
    if suffix:
        return suffix
    if not declared_type:
        return ""
    declared = declared_type.split(";", 1)[0].strip().lower()
    return _MIME_TYPES.get(declared, declared.lstrip("."))


class FileNormalizer:
    """Dispatches uploads to the extractor registered for their type."""

    def __init__(
        self,
        extractors: Mapping[str, TextExtractor] | None = None,
        *,
        on_extraction_error: ExtractionErrorPolicy = "inline",
    ) -> None:
        self._extractors = dict(extractors) if extractors is not None else build_extractors()
        self.on_extraction_error = on_extraction_error

    @property
    def supported_types(self) -> frozenset[str]:
        return frozenset(self._extractors)

    def normalize(
        self,
        data: bytes,
        filename: str,
        declared_type: str | None = None,
        *,
        on_extraction_error: ExtractionErrorPolicy | None = None,
    ) -> NormalizedFile:
        """Extract and sanitize text from ``data``.

        Raises ``UnsupportedFormat`` for unknown types. Extractor crashes are
        replaced by diagnostic text under the ``inline`` policy and raised as
        ``ExtractionFailure`` under ``raise``.
        """

        file_type = resolve_file_type(filename, declared_type)
        extractor = self._extractors.get(file_type)
        if extractor is None:
            raise UnsupportedFormat(file_type)

        policy = on_extraction_error or self.on_extraction_error
        try:
            raw_text = extractor.extract(data, filename)
        except ExtractionFailure as exc:
            if policy == "raise":
                raise
            logger.warning("Using placeholder text for %s: %s", filename, exc.reason)
            raw_text = _placeholder_for(file_type, filename, exc)

        text = sanitize_content(raw_text)
        metadata = FileMetadata(
            title=filename,
            file_type=file_type,
            file_size=len(data),
            word_count=len(text.split()),
        )
        logger.debug("Normalized %s (%s): %d words", filename, file_type, metadata.word_count)
        return NormalizedFile(text=text, metadata=metadata)


def normalize_file(data: bytes, filename: str, declared_type: str | None = None) -> NormalizedFile:
    """Normalize with the default extractors and the ``inline`` failure policy."""
    return FileNormalizer().normalize(data, filename, declared_type)


def _placeholder_for(file_type: str, filename: str, error: ExtractionFailure) -> str:
    if file_type == "pdf":
        return pdf_error_placeholder(filename, error)
    return f"{file_type.upper()} Document: {filename}\n\nError processing document: {error.reason}"


__all__ = [
    "DocxMode",
    "ExtractionErrorPolicy",
    "FileNormalizer",
    "build_extractors",
    "normalize_file",
    "resolve_file_type",
]
