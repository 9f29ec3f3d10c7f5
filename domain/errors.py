"""Error hierarchy shared by ingestion, retrieval and the outer layers."""
from __future__ import annotations


class KnowledgeBaseError(Exception):
    """Base error carrying a stable code and an HTTP status."""

    error_code = "KNOWLEDGE_BASE_ERROR"
    status_code = 400

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, str]:
        payload = {
            "status": "error",
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class UnsupportedFormat(KnowledgeBaseError):
    error_code = "UNSUPPORTED_FILE_TYPE"
    status_code = 415

    def __init__(self, file_type: str) -> None:
        super().__init__(f"Unsupported file type: {file_type or 'unknown'}")
        self.file_type = file_type


class ExtractionFailure(KnowledgeBaseError):
    """A PDF/DOCX extraction library failed on the payload."""

    error_code = "EXTRACTION_FAILED"
    status_code = 422

    def __init__(self, file_type: str, reason: str) -> None:
        super().__init__(f"Failed to extract {file_type.upper()} text: {reason}", details=reason)
        self.file_type = file_type
        self.reason = reason


class DocumentNotFound(KnowledgeBaseError):
    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, document_id: int) -> None:
        super().__init__(f"Knowledge document {document_id} not found")
        self.document_id = document_id


class InvalidStatus(KnowledgeBaseError, ValueError):
    error_code = "INVALID_STATUS"
    status_code = 400

    def __init__(self, status: str) -> None:
        super().__init__(f"Invalid document status: {status!r}")
        self.status = status


class EmptyContent(KnowledgeBaseError, ValueError):
    """Only documents with non-blank content may be ``indexed``."""

    error_code = "EMPTY_CONTENT"
    status_code = 400

    def __init__(self, document_id: int | None = None) -> None:
        target = f"Knowledge document {document_id}" if document_id is not None else "Knowledge document"
        super().__init__(f"{target} has no content to index")
        self.document_id = document_id


class InvalidUrl(KnowledgeBaseError):
    error_code = "INVALID_URL"
    status_code = 400

    def __init__(self, url: str) -> None:
        super().__init__("Invalid URL format", details=url)
        self.url = url


class FetchError(KnowledgeBaseError):
    """Base class for website fetch problems."""

    error_code = "FETCH_ERROR"
    status_code = 502


class FetchTimeout(FetchError):
    error_code = "FETCH_TIMEOUT"
    status_code = 504

    def __init__(self, url: str, timeout: float) -> None:
        super().__init__("Website took too long to respond", details=f"{url} (timeout {timeout}s)")
        self.url = url
        self.timeout = timeout


class FetchFailure(FetchError):
    error_code = "FETCH_FAILED"

    def __init__(self, url: str, message: str, *, status: int | None = None) -> None:
        super().__init__(message, details=url)
        self.url = url
        self.status = status


class CompletionError(KnowledgeBaseError):
    """The language-model provider rejected or failed the request."""

    error_code = "COMPLETION_FAILED"
    status_code = 502


class CompletionTimeout(CompletionError):
    error_code = "COMPLETION_TIMEOUT"
    status_code = 504


class RateLimitExceeded(KnowledgeBaseError):
    error_code = "RATE_LIMITED"
    status_code = 429

    def __init__(self, key: str, retry_after: float) -> None:
        super().__init__("Too many requests, please slow down", details=f"retry after {retry_after:.1f}s")
        self.key = key
        self.retry_after = retry_after


__all__ = [
    "CompletionError",
    "CompletionTimeout",
    "DocumentNotFound",
    "EmptyContent",
    "ExtractionFailure",
    "FetchError",
    "FetchFailure",
    "FetchTimeout",
    "InvalidStatus",
    "InvalidUrl",
    "KnowledgeBaseError",
    "RateLimitExceeded",
    "UnsupportedFormat",
]
