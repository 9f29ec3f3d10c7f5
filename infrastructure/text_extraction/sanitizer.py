"""Helpers that make extracted text safe to store and index."""
from __future__ import annotations

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE = re.compile(r"\s+")


def strip_control_characters(text: str) -> str:
    """Remove NUL and C0 control characters, keeping tab, newline and carriage return."""
    return _CONTROL_CHARS.sub("", text)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def sanitize_content(text: str) -> str:
    """Strip control characters, collapse whitespace runs and trim."""
    return collapse_whitespace(strip_control_characters(text))


__all__ = ["collapse_whitespace", "sanitize_content", "strip_control_characters"]
