"""DOCX extractors: the default placeholder and a python-docx based one."""
from __future__ import annotations

import logging
from io import BytesIO

from docx import Document as DocxDocument

from domain.errors import ExtractionFailure
from domain.interfaces import TextExtractor
from infrastructure.text_extraction.sanitizer import collapse_whitespace, strip_control_characters

logger = logging.getLogger(__name__)


class DocxPlaceholderExtractor(TextExtractor):
    """Records that rich DOCX extraction is not enabled for this deployment."""

    def extract(self, source: bytes, filename: str = "") -> str:
        return (
            f"DOCX Document: {filename}\n\n"
            "Note: DOCX text extraction requires additional setup. For now, this is a placeholder."
        )


class DocxExtractor(TextExtractor):
    """Extracts paragraphs and table cells with python-docx."""

    def extract(self, source: bytes, filename: str = "") -> str:
        try:
            doc = DocxDocument(BytesIO(source))
        except Exception as exc:
            logger.warning("DOCX extraction failed for %s: %s", filename or "<bytes>", exc)
            raise ExtractionFailure("docx", str(exc) or exc.__class__.__name__) from exc
        return _collect_docx_text(doc)


def _collect_docx_text(doc: DocxDocument) -> str:
    lines = [collapse_whitespace(strip_control_characters(paragraph.text)) for paragraph in doc.paragraphs]
    for table in doc.tables:
        lines.extend(_table_row_text(row) for row in table.rows)
    return "\n".join(line for line in lines if line)


def _table_row_text(row) -> str:
    """One line per row, cells joined by `` | ``; merged cells repeat in python-docx and are kept once."""
    cells: list[str] = []
    for cell in row.cells:
        text = collapse_whitespace(strip_control_characters(cell.text))
        if text and (not cells or cells[-1] != text):
            cells.append(text)
    return " | ".join(cells)


__all__ = ["DocxExtractor", "DocxPlaceholderExtractor"]
