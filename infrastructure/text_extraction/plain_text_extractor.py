"""Text extractor that treats the payload as plain UTF-8 text."""
from __future__ import annotations

from domain.interfaces import TextExtractor


class PlainTextExtractor(TextExtractor):
    """Reads txt, md, csv and json uploads verbatim."""

    def extract(self, source: bytes, filename: str = "") -> str:
        if isinstance(source, bytes):
            return source.decode("utf-8", errors="replace")
        return source


__all__ = ["PlainTextExtractor"]
