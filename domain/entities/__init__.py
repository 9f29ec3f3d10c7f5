"""Domain entities for the BotKnowledge grounding pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

DocumentStatus = Literal["processing", "indexed", "error"]
ContentType = Literal["business", "blog", "ecommerce", "portfolio", "unknown"]
MessageRole = Literal["system", "user", "assistant"]

STATUS_PROCESSING: DocumentStatus = "processing"
STATUS_INDEXED: DocumentStatus = "indexed"
STATUS_ERROR: DocumentStatus = "error"
DOCUMENT_STATUSES: frozenset[str] = frozenset({STATUS_PROCESSING, STATUS_INDEXED, STATUS_ERROR})

_RICH_FILE_TYPES = frozenset({"pdf", "docx"})
WEBSITE_FILE_TYPE = "website"


@dataclass(slots=True)
class KnowledgeDocument:
    """One ingested unit of knowledge scoped to exactly one bot."""

    id: int
    bot_id: int
    title: str
    content: str = ""
    file_type: str = "text"
    file_size: int = 0
    status: DocumentStatus = STATUS_PROCESSING
    processing_error: str | None = None
    file_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def source_kind(self) -> str:
        if self.file_type == WEBSITE_FILE_TYPE:
            return "web"
        if self.file_type in _RICH_FILE_TYPES:
            return "rich"
        return "text"


@dataclass(frozen=True, slots=True)
class FaqEntry:
    question: str
    answer: str = ""


@dataclass(frozen=True, slots=True)
class StructuredContent:
    """Structural breakdown of a single HTML page."""

    title: str = ""
    description: str = ""
    headings: tuple[str, ...] = ()
    paragraphs: tuple[str, ...] = ()
    links: tuple[str, ...] = ()
    contact_info: tuple[str, ...] = ()
    services: tuple[str, ...] = ()
    products: tuple[str, ...] = ()
    faq: tuple[FaqEntry, ...] = ()
    pricing: tuple[str, ...] = ()
    testimonials: tuple[str, ...] = ()


@dataclass(slots=True)
class RetrievalResult:
    """A document matched by a query together with its best excerpt."""

    document: KnowledgeDocument
    score: int
    excerpt: str


@dataclass(frozen=True, slots=True)
class FileMetadata:
    title: str
    file_type: str
    file_size: int
    word_count: int


@dataclass(frozen=True, slots=True)
class NormalizedFile:
    """Clean text extracted from an uploaded file."""

    text: str
    metadata: FileMetadata


@dataclass(slots=True)
class ScrapedPage:
    """Summary of a fetched web page, ready to be stored as a document."""

    title: str
    description: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class BotProfile:
    """Bot parameters used when composing a completion request."""

    id: int
    system_prompt: str = "You are a helpful assistant."
    model: str = "deepseek-chat"
    temperature: float = 0.7
    max_tokens: int = 1000


@dataclass(slots=True)
class ChatMessage:
    role: MessageRole
    content: str


@dataclass(slots=True)
class ChatCompletion:
    """Assistant reply returned by the language-model provider."""

    content: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(slots=True)
class ProcessingReport:
    """Outcome of re-processing every document of a bot."""

    processed: int
    total: int
    results: list[dict[str, Any]] = field(default_factory=list)


__all__ = [
    "BotProfile",
    "ChatCompletion",
    "ChatMessage",
    "ContentType",
    "DOCUMENT_STATUSES",
    "DocumentStatus",
    "FaqEntry",
    "FileMetadata",
    "KnowledgeDocument",
    "MessageRole",
    "NormalizedFile",
    "ProcessingReport",
    "RetrievalResult",
    "STATUS_ERROR",
    "STATUS_INDEXED",
    "STATUS_PROCESSING",
    "ScrapedPage",
    "StructuredContent",
    "WEBSITE_FILE_TYPE",
]
