"""SQLite repository for bot-scoped knowledge documents."""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from domain.entities import (
    DOCUMENT_STATUSES,
    STATUS_ERROR,
    STATUS_INDEXED,
    STATUS_PROCESSING,
    KnowledgeDocument,
)
from domain.errors import DocumentNotFound, EmptyContent, InvalidStatus
from domain.interfaces import KnowledgeDocumentRepository
from infrastructure.text_extraction.sanitizer import strip_control_characters

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Document processing failed"

_COLUMNS = (
    "id, bot_id, title, content, file_type, file_size, status, "
    "processing_error, file_url, created_at, updated_at"
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clean_content(content: str | None) -> str:
    return strip_control_characters(content or "").strip()


def _validate_status(status: str) -> str:
    if status not in DOCUMENT_STATUSES:
        raise InvalidStatus(status)
    return status


class SqliteKnowledgeDocumentRepository(KnowledgeDocumentRepository):
    """Stores knowledge documents in a lightweight SQLite database."""

    def __init__(self, db_path: str | Path = "botknowledge.db") -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent != Path("."):
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_version (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    version INTEGER NOT NULL
                )
                """
            )
            conn.execute("INSERT OR IGNORE INTO schema_version (id, version) VALUES (1, 1)")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS knowledge_documents (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    bot_id INTEGER NOT NULL,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL DEFAULT '',
                    file_type TEXT NOT NULL DEFAULT 'text',
                    file_size INTEGER NOT NULL DEFAULT 0,
                    status TEXT NOT NULL DEFAULT 'processing',
                    processing_error TEXT,
                    file_url TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_knowledge_documents_bot_id ON knowledge_documents (bot_id)"
            )

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
        sanitized = _clean_content(content)
        resolved_status = _validate_status(status or STATUS_PROCESSING)
        if resolved_status == STATUS_INDEXED and not sanitized:
            raise EmptyContent()
        if resolved_status == STATUS_ERROR and not processing_error:
            processing_error = DEFAULT_ERROR_MESSAGE
        timestamp = _now()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO knowledge_documents (
                    bot_id, title, content, file_type, file_size, status,
                    processing_error, file_url, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    bot_id,
                    title.strip(),
                    sanitized,
                    file_type or "text",
                    file_size if file_size else len(sanitized),
                    resolved_status,
                    processing_error,
                    file_url,
                    timestamp,
                    timestamp,
                ),
            )
            document_id = cursor.lastrowid
        logger.info("Created knowledge document %s for bot %s (%s)", document_id, bot_id, resolved_status)
        return self._require(document_id)

    def get(self, document_id: int) -> KnowledgeDocument | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM knowledge_documents WHERE id = ?",
                (document_id,),
            ).fetchone()
        return self._row_to_document(row) if row is not None else None

    def get_by_bot(self, bot_id: int) -> list[KnowledgeDocument]:
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {_COLUMNS} FROM knowledge_documents
                WHERE bot_id = ?
                ORDER BY created_at DESC, id DESC
                """,
                (bot_id,),
            ).fetchall()
        return [self._row_to_document(row) for row in rows]

    def update_content(self, document_id: int, content: str, status: str) -> KnowledgeDocument:
        resolved_status = _validate_status(status)
        sanitized = _clean_content(content)
        if resolved_status == STATUS_INDEXED and not sanitized:
            raise EmptyContent(document_id)
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE knowledge_documents
                SET content = ?, file_size = ?, status = ?,
                    processing_error = CASE WHEN ? = 'error'
                        THEN COALESCE(processing_error, ?) ELSE NULL END,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    sanitized,
                    len(sanitized),
                    resolved_status,
                    resolved_status,
                    DEFAULT_ERROR_MESSAGE,
                    _now(),
                    document_id,
                ),
            )
            if cursor.rowcount == 0:
                raise DocumentNotFound(document_id)
        return self._require(document_id)

    def update_status(self, document_id: int, status: str, error: str | None = None) -> KnowledgeDocument:
        resolved_status = _validate_status(status)
        with self._connect() as conn:
            row = conn.execute(
                "SELECT content FROM knowledge_documents WHERE id = ?", (document_id,)
            ).fetchone()
            if row is None:
                raise DocumentNotFound(document_id)
            if resolved_status == STATUS_INDEXED and not (row[0] or "").strip():
                raise EmptyContent(document_id)
            if resolved_status == STATUS_ERROR:
                cursor = conn.execute(
                    """
                    UPDATE knowledge_documents
                    SET status = ?, processing_error = COALESCE(?, processing_error, ?), updated_at = ?
                    WHERE id = ?
                    """,
                    (resolved_status, error or None, DEFAULT_ERROR_MESSAGE, _now(), document_id),
                )
            else:
                cursor = conn.execute(
                    """
                    UPDATE knowledge_documents
                    SET status = ?, processing_error = NULL, updated_at = ?
                    WHERE id = ?
                    """,
                    (resolved_status, _now(), document_id),
                )
            if cursor.rowcount == 0:
                raise DocumentNotFound(document_id)
        logger.info("Knowledge document %s is now %s", document_id, resolved_status)
        return self._require(document_id)

    def delete(self, document_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM knowledge_documents WHERE id = ?", (document_id,))
        return cursor.rowcount > 0

    def _require(self, document_id: int | None) -> KnowledgeDocument:
        document = self.get(document_id) if document_id is not None else None
        if document is None:
            raise DocumentNotFound(document_id or 0)
        return document

    @staticmethod
    def _row_to_document(row: tuple) -> KnowledgeDocument:
        return KnowledgeDocument(
            id=row[0],
            bot_id=row[1],
            title=row[2],
            content=row[3] or "",
            file_type=row[4],
            file_size=row[5],
            status=row[6],
            processing_error=row[7],
            file_url=row[8],
            created_at=datetime.fromisoformat(row[9]) if row[9] else None,
            updated_at=datetime.fromisoformat(row[10]) if row[10] else None,
        )


__all__ = ["DEFAULT_ERROR_MESSAGE", "SqliteKnowledgeDocumentRepository"]
