"""Use cases for ingesting knowledge documents into a bot's index."""
from __future__ import annotations

import logging
from typing import Literal

from domain.entities import (
    STATUS_ERROR,
    STATUS_INDEXED,
    KnowledgeDocument,
    ProcessingReport,
)
from domain.errors import ExtractionFailure, UnsupportedFormat
from domain.interfaces import KnowledgeDocumentRepository
from infrastructure.text_extraction.file_normalizer import FileNormalizer, resolve_file_type
from infrastructure.text_extraction.sanitizer import strip_control_characters

logger = logging.getLogger(__name__)

ExtractionPolicy = Literal["inline", "mark_error"]

EMPTY_CONTENT_ERROR = "No content to index"


def ingest_text(
    bot_id: int,
    title: str,
    content: str,
    *,
    document_repository: KnowledgeDocumentRepository,
    file_type: str = "text",
    file_url: str | None = None,
) -> KnowledgeDocument:
    """Store already-textual content and index it straight away."""

    document = document_repository.create(bot_id, title, content, file_type, file_url=file_url)
    if not document.content:
        return document_repository.update_status(document.id, STATUS_ERROR, EMPTY_CONTENT_ERROR)
    return document_repository.update_status(document.id, STATUS_INDEXED)


def ingest_file(
    bot_id: int,
    filename: str,
    data: bytes,
    declared_type: str | None = None,
    *,
    document_repository: KnowledgeDocumentRepository,
    file_normalizer: FileNormalizer,
    policy: ExtractionPolicy = "inline",
    file_url: str | None = None,
) -> KnowledgeDocument:
    """Create a document for an uploaded file and normalize it.

    Unsupported types are rejected before anything is stored. With the
    ``inline`` policy an extractor crash leaves diagnostic text in an
    indexed document; with ``mark_error`` the document ends in ``error``.
    """

    file_type = resolve_file_type(filename, declared_type)
    if file_type not in file_normalizer.supported_types:
        raise UnsupportedFormat(file_type)

    document = document_repository.create(
        bot_id,
        filename,
        file_type=file_type,
        file_size=len(data),
        file_url=file_url,
    )
    return process_document(
        document.id,
        data,
        filename,
        declared_type,
        document_repository=document_repository,
        file_normalizer=file_normalizer,
        policy=policy,
    )


def process_document(
    document_id: int,
    data: bytes,
    filename: str,
    declared_type: str | None = None,
    *,
    document_repository: KnowledgeDocumentRepository,
    file_normalizer: FileNormalizer,
    policy: ExtractionPolicy = "inline",
) -> KnowledgeDocument:
    """(Re)normalize the file behind an existing document and move it out of ``processing``."""

    try:
        normalized = file_normalizer.normalize(
            data,
            filename,
            declared_type,
            on_extraction_error="inline" if policy == "inline" else "raise",
        )
    except UnsupportedFormat as exc:
        document_repository.update_status(document_id, STATUS_ERROR, exc.message)
        raise
    except ExtractionFailure as exc:
        logger.warning("Document %s failed extraction: %s", document_id, exc.message)
        return document_repository.update_status(document_id, STATUS_ERROR, exc.message)

    if not normalized.text:
        return document_repository.update_status(document_id, STATUS_ERROR, EMPTY_CONTENT_ERROR)
    logger.info(
        "Document %s normalized: %s, %d words",
        document_id,
        normalized.metadata.file_type,
        normalized.metadata.word_count,
    )
    return document_repository.update_content(document_id, normalized.text, STATUS_INDEXED)


def process_bot_documents(
    bot_id: int,
    *,
    document_repository: KnowledgeDocumentRepository,
) -> ProcessingReport:
    """Mark every not-yet-indexed document that has content as ``indexed``."""

    documents = document_repository.get_by_bot(bot_id)
    report = ProcessingReport(processed=0, total=len(documents))
    for document in documents:
        has_content = bool(strip_control_characters(document.content).strip())
        entry = {"id": document.id, "title": document.title, "content_length": len(document.content)}
        if document.status == STATUS_INDEXED:
            entry["status"] = "already_indexed"
        elif has_content:
            document_repository.update_status(document.id, STATUS_INDEXED)
            report.processed += 1
            entry["status"] = STATUS_INDEXED
        else:
            entry["status"] = document.status
            entry["error"] = EMPTY_CONTENT_ERROR
        report.results.append(entry)
    logger.info("Bot %s: processed %d of %d documents", bot_id, report.processed, report.total)
    return report


__all__ = [
    "EMPTY_CONTENT_ERROR",
    "ExtractionPolicy",
    "ingest_file",
    "ingest_text",
    "process_bot_documents",
    "process_document",
]
