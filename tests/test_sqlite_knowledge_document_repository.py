import tempfile
import unittest
from pathlib import Path

from domain.errors import DocumentNotFound, EmptyContent, InvalidStatus
from infrastructure.repositories.sqlite_knowledge_document_repository import (
    DEFAULT_ERROR_MESSAGE,
    SqliteKnowledgeDocumentRepository,
)


class TestSqliteKnowledgeDocumentRepository(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.repo = SqliteKnowledgeDocumentRepository(db_path=Path(tmp.name) / "knowledge.db")

    def test_create_defaults_and_sanitizes(self) -> None:
        document = self.repo.create(1, "  FAQ  ", "Hello\x00 world\x07  ")
        self.assertEqual(document.title, "FAQ")
        self.assertEqual(document.content, "Hello world")
        self.assertEqual(document.status, "processing")
        self.assertEqual(document.file_type, "text")
        self.assertEqual(document.file_size, len("Hello world"))
        self.assertIsNone(document.processing_error)
        self.assertIsNotNone(document.created_at)
        self.assertEqual(document.source_kind, "text")

    def test_create_without_content(self) -> None:
        document = self.repo.create(1, "Upload", file_type="pdf", file_size=2048)
        self.assertEqual(document.content, "")
        self.assertEqual(document.file_size, 2048)
        self.assertEqual(document.source_kind, "rich")

    def test_create_rejects_unknown_status(self) -> None:
        with self.assertRaises(InvalidStatus):
            self.repo.create(1, "Doc", "text", status="published")

    def test_get_by_bot_is_scoped_and_newest_first(self) -> None:
        first = self.repo.create(1, "first", "a")
        second = self.repo.create(1, "second", "b")
        other = self.repo.create(2, "other bot", "c")
        third = self.repo.create(1, "third", "d")

        documents = self.repo.get_by_bot(1)
        self.assertEqual([doc.id for doc in documents], [third.id, second.id, first.id])
        self.assertNotIn(other.id, [doc.id for doc in documents])
        self.assertEqual(self.repo.get_by_bot(3), [])

    def test_get(self) -> None:
        created = self.repo.create(1, "Doc", "content")
        self.assertEqual(self.repo.get(created.id).title, "Doc")
        self.assertIsNone(self.repo.get(created.id + 100))

    def test_update_status(self) -> None:
        document = self.repo.create(1, "Doc", "content")
        indexed = self.repo.update_status(document.id, "indexed")
        self.assertEqual(indexed.status, "indexed")

        failed = self.repo.update_status(document.id, "error")
        self.assertEqual(failed.status, "error")
        self.assertEqual(failed.processing_error, DEFAULT_ERROR_MESSAGE)

        failed = self.repo.update_status(document.id, "error", "Parser crashed")
        self.assertEqual(failed.processing_error, "Parser crashed")

        recovered = self.repo.update_status(document.id, "processing")
        self.assertIsNone(recovered.processing_error)

    def test_update_status_rejects_unknown_values(self) -> None:
        document = self.repo.create(1, "Doc", "content")
        with self.assertRaises(InvalidStatus) as ctx:
            self.repo.update_status(document.id, "archived")
        self.assertIsInstance(ctx.exception, ValueError)
        self.assertEqual(self.repo.get(document.id).status, "processing")

    def test_update_missing_document(self) -> None:
        with self.assertRaises(DocumentNotFound):
            self.repo.update_status(999, "indexed")
        with self.assertRaises(DocumentNotFound):
            self.repo.update_content(999, "text", "indexed")

    def test_update_content_sanitizes_and_resizes(self) -> None:
        document = self.repo.create(1, "Doc", file_size=10_000)
        updated = self.repo.update_content(document.id, "  New\x00 text\x1f ", "indexed")
        self.assertEqual(updated.content, "New text")
        self.assertEqual(updated.file_size, len("New text"))
        self.assertEqual(updated.status, "indexed")
        self.assertGreaterEqual(updated.updated_at, document.updated_at)

    def test_error_status_always_has_message(self) -> None:
        document = self.repo.create(1, "Doc", status="error")
        self.assertEqual(document.processing_error, DEFAULT_ERROR_MESSAGE)
        updated = self.repo.update_content(document.id, "", "error")
        self.assertTrue(updated.processing_error)

    def test_empty_document_cannot_be_indexed(self) -> None:
        document = self.repo.create(1, "Empty", "")
        with self.assertRaises(EmptyContent):
            self.repo.update_status(document.id, "indexed")
        with self.assertRaises(EmptyContent):
            self.repo.update_content(document.id, " \x00 ", "indexed")
        with self.assertRaises(EmptyContent):
            self.repo.create(1, "Blank", "  \t ", status="indexed")

        unchanged = self.repo.get(document.id)
        self.assertEqual(unchanged.status, "processing")
        self.assertEqual([doc.id for doc in self.repo.get_by_bot(1)], [document.id])

        filled = self.repo.update_content(document.id, "Now there is text", "indexed")
        self.assertEqual(filled.status, "indexed")

    def test_delete(self) -> None:
        document = self.repo.create(1, "Doc", "content")
        self.assertTrue(self.repo.delete(document.id))
        self.assertFalse(self.repo.delete(document.id))
        self.assertIsNone(self.repo.get(document.id))

    def test_data_survives_new_repository_instance(self) -> None:
        document = self.repo.create(5, "Persistent", "stays on disk")
        reopened = SqliteKnowledgeDocumentRepository(db_path=self.repo._db_path)
        self.assertEqual(reopened.get_by_bot(5)[0].id, document.id)


if __name__ == "__main__":
    unittest.main()
