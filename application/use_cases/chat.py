"""Chat turn orchestration: ground the system prompt, then ask the provider."""
from __future__ import annotations

import logging
from typing import Sequence

from application.use_cases.search import get_context_for_query
from domain.entities import BotProfile, ChatCompletion, ChatMessage
from domain.interfaces import ChatCompletionClient, KnowledgeDocumentRepository

logger = logging.getLogger(__name__)


def build_grounded_messages(
    messages: Sequence[ChatMessage],
    system_prompt: str,
    context: str,
) -> list[ChatMessage]:
    """Splice the knowledge-base context into the system message.

    An empty context leaves the conversation untouched. Otherwise the first
    system message is replaced, or a new one is prepended.
    """

    grounded = [ChatMessage(role=message.role, content=message.content) for message in messages]
    if not context or not grounded:
        return grounded
    prompt = f"{system_prompt}\n\n{context}"
    for message in grounded:
        if message.role == "system":
            message.content = prompt
            break
    else:
        grounded.insert(0, ChatMessage(role="system", content=prompt))
    return grounded


def last_user_text(messages: Sequence[ChatMessage]) -> str:
    for message in reversed(messages):
        if message.role == "user":
            return message.content
    return ""


def retrieve_context_safely(
    bot_id: int,
    query_text: str,
    *,
    document_repository: KnowledgeDocumentRepository,
) -> str:
    """Like ``get_context_for_query`` but never fails the chat turn."""

    if not query_text:
        return ""
    try:
        return get_context_for_query(bot_id, query_text, document_repository=document_repository)
    except Exception:
        logger.exception("Document search failed for bot %s, continuing without context", bot_id)
        return ""


def generate_reply(
    bot: BotProfile,
    messages: Sequence[ChatMessage],
    *,
    document_repository: KnowledgeDocumentRepository,
    completion_client: ChatCompletionClient,
    timeout: float | None = None,
) -> ChatCompletion:
    context = retrieve_context_safely(
        bot.id,
        last_user_text(messages),
        document_repository=document_repository,
    )
    grounded = build_grounded_messages(messages, bot.system_prompt, context)
    logger.debug("Bot %s: context length %d", bot.id, len(context))
    return completion_client.complete(
        grounded,
        model=bot.model,
        temperature=bot.temperature,
        max_tokens=bot.max_tokens,
        timeout=timeout,
    )


__all__ = ["build_grounded_messages", "generate_reply", "last_user_text", "retrieve_context_safely"]
