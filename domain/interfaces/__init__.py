"""Abstract interfaces for the BotKnowledge system."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from domain.entities import ChatCompletion, ChatMessage, KnowledgeDocument


class TextExtractor(ABC):
    """Extracts text from raw uploaded file bytes."""

    @abstractmethod
    def extract(self, source: bytes, filename: str = "") -> str:
        """Return the textual representation of a source."""


class KnowledgeDocumentRepository(ABC):
    """Persists knowledge documents scoped to bots."""

    @abstractmethod
    def create(
        self,
        bot_id: int,
        title: str,
        content: str | None = None,
        file_type: str | None = None,
        status: str | None = None,
        *,
        file_size: int | None = None,
        file_url: str | None = None,
        processing_error: str | None = None,
    ) -> KnowledgeDocument:
        """Store a new document and return it."""

    @abstractmethod
    def get(self, document_id: int) -> KnowledgeDocument | None:
        """Retrieve a document by id."""

    @abstractmethod
    def get_by_bot(self, bot_id: int) -> list[KnowledgeDocument]:
        """Return the bot's documents, newest first."""

    @abstractmethod
    def update_content(self, document_id: int, content: str, status: str) -> KnowledgeDocument:
        """Replace content and status, raising ``DocumentNotFound`` for unknown ids."""

    @abstractmethod
    def update_status(self, document_id: int, status: str, error: str | None = None) -> KnowledgeDocument:
        """Move a document to another lifecycle status."""

    @abstractmethod
    def delete(self, document_id: int) -> bool:
        """Delete a document, returning whether it existed."""


class PageFetcher(ABC):
    """Downloads HTML for website ingestion."""

    @abstractmethod
    def fetch(self, url: str, *, timeout: float | None = None) -> str:
        """Return the page body, raising ``FetchError`` subclasses on failure."""


class ChatCompletionClient(ABC):
    """Calls a chat-completion provider."""

    @abstractmethod
    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ) -> ChatCompletion:
        """Return the assistant reply for the conversation."""


class RateLimiter(ABC):
    """Admits or rejects requests per client key."""

    @abstractmethod
    def hit(self, key: str) -> None:
        """Record a request, raising ``RateLimitExceeded`` when over budget."""

    @abstractmethod
    def reset(self, key: str | None = None) -> None:
        """Forget counters for one key, or for every key."""


__all__ = [
    "ChatCompletionClient",
    "KnowledgeDocumentRepository",
    "PageFetcher",
    "RateLimiter",
    "TextExtractor",
]
