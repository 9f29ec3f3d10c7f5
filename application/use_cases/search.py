"""Use cases that rank a bot's documents for a query and assemble prompt context."""
from __future__ import annotations

import logging

from application.services.lexical_scorer import best_excerpt, score_document, tokenize_query
from domain.entities import RetrievalResult
from domain.interfaces import KnowledgeDocumentRepository

logger = logging.getLogger(__name__)

CONTEXT_HEADER = "Relevant information from knowledge base:"
CONTEXT_RESULT_LIMIT = 3


def search(
    bot_id: int,
    query_text: str,
    *,
    document_repository: KnowledgeDocumentRepository,
    limit: int = 5,
) -> list[RetrievalResult]:
    """Return up to ``limit`` of the bot's documents that share terms with the query.

    Documents are ranked by summed term occurrences; equal scores keep the
    repository's newest-first order. Documents scoring zero are never
    returned. Repository failures propagate to the caller.
    """

    documents = document_repository.get_by_bot(bot_id)
    # Status is not checked: any document with content is searchable.
    available = [doc for doc in documents if doc.content and doc.content.strip()]
    logger.debug("Bot %s: %d of %d documents have content", bot_id, len(available), len(documents))

    tokens = tokenize_query(query_text)
    if not available or not tokens:
        return []

    results: list[RetrievalResult] = []
    for document in available:
        score = score_document(document.content, tokens)
        if score == 0:
            continue
        results.append(
            RetrievalResult(document=document, score=score, excerpt=best_excerpt(document.content, tokens))
        )

    # sorted() is stable, so ties keep the newest-first order.
    ranked = sorted(results, key=lambda result: result.score, reverse=True)[:limit]
    logger.info("Bot %s: %d results for %r", bot_id, len(ranked), query_text)
    return ranked


def format_context(results: list[RetrievalResult]) -> str:
    if not results:
        return ""
    blocks = [f"{CONTEXT_HEADER}\n\n"]
    for position, result in enumerate(results, start=1):
        blocks.append(f'{position}. From "{result.document.title}":\n{result.excerpt}\n\n')
    return "".join(blocks).strip()


def get_context_for_query(
    bot_id: int,
    query_text: str,
    *,
    document_repository: KnowledgeDocumentRepository,
) -> str:
    """Build the knowledge-base block for a system prompt, or ``""`` when nothing matches."""

    results = search(
        bot_id,
        query_text,
        document_repository=document_repository,
        limit=CONTEXT_RESULT_LIMIT,
    )
    return format_context(results)


__all__ = ["CONTEXT_HEADER", "format_context", "get_context_for_query", "search"]
