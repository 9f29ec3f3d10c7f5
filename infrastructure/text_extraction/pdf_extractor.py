"""PDF extractor built on pdfplumber."""
from __future__ import annotations

import logging
from io import BytesIO

import pdfplumber

from domain.errors import ExtractionFailure
from domain.interfaces import TextExtractor

logger = logging.getLogger(__name__)


class PdfExtractor(TextExtractor):
    """Extracts the text layer of every page, one page per line block."""

    def extract(self, source: bytes, filename: str = "") -> str:
        try:
            with pdfplumber.open(BytesIO(source)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            logger.warning("PDF extraction failed for %s: %s", filename or "<bytes>", exc)
            raise ExtractionFailure("pdf", str(exc) or exc.__class__.__name__) from exc
        return "\n".join(page for page in pages if page)


def pdf_error_placeholder(filename: str, error: ExtractionFailure) -> str:
    """Diagnostic text stored in place of an unreadable PDF."""
    return f"PDF Document: {filename}\n\nError processing PDF: {error.reason}"


__all__ = ["PdfExtractor", "pdf_error_placeholder"]
