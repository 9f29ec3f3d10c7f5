"""Term-overlap scoring used to rank a bot's documents for a query."""
from __future__ import annotations

import re

MIN_TOKEN_LENGTH = 3
FALLBACK_EXCERPT_LENGTH = 200

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


def tokenize_query(query: str) -> list[str]:
    """Lowercase, split on whitespace and drop tokens shorter than three characters.

    Repeated tokens are kept, so a word typed twice counts twice in ``score_document``.
    """

    return [token for token in query.lower().split() if len(token) >= MIN_TOKEN_LENGTH]


def score_document(content: str, tokens: list[str]) -> int:
    """Sum of non-overlapping occurrence counts of every token in the lowercased content."""
    lowered = content.lower()
    return sum(lowered.count(token) for token in tokens)


def split_sentences(content: str) -> list[str]:
    return [sentence for sentence in _SENTENCE_BOUNDARY.split(content) if sentence.strip()]


def best_excerpt(content: str, tokens: list[str]) -> str:
    """Return the sentence containing the most distinct tokens.

    Sentences are scored by distinct token presence rather than by occurrence
    counts, unlike ``score_document``. When no sentence contains a token the
    first characters of the content are used instead.
    """

    distinct = list(dict.fromkeys(tokens))
    best_sentence = ""
    best_score = 0
    for sentence in split_sentences(content):
        lowered = sentence.lower()
        sentence_score = sum(1 for token in distinct if token in lowered)
        if sentence_score > best_score:
            best_score = sentence_score
            best_sentence = sentence.strip()
    return best_sentence or content[:FALLBACK_EXCERPT_LENGTH] + "..."


__all__ = ["best_excerpt", "score_document", "split_sentences", "tokenize_query"]
