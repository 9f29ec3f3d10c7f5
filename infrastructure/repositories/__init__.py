from infrastructure.repositories.sqlite_knowledge_document_repository import SqliteKnowledgeDocumentRepository

__all__ = ["SqliteKnowledgeDocumentRepository"]
