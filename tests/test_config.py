import tempfile
import unittest
from pathlib import Path

from infrastructure.config import ContainerConfig, build_default_container
from infrastructure.text_extraction.docx_extractor import DocxExtractor


class TestContainerConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        config = ContainerConfig.from_env({})
        self.assertEqual(config.db_path, "botknowledge.db")
        self.assertEqual(config.fetch_timeout, 10.0)
        self.assertEqual(config.completion_timeout, 15.0)
        self.assertEqual(config.docx_mode, "placeholder")
        self.assertEqual(config.extraction_error_policy, "inline")
        self.assertIsNone(config.completion_api_key)

    def test_reads_prefixed_variables(self) -> None:
        config = ContainerConfig.from_env(
            {
                "BOTKNOWLEDGE_DB_PATH": "/tmp/kb.db",
                "BOTKNOWLEDGE_FETCH_TIMEOUT": "3.5",
                "BOTKNOWLEDGE_DOCX_MODE": "python-docx",
                "BOTKNOWLEDGE_EXTRACTION_ERROR_POLICY": "mark_error",
                "BOTKNOWLEDGE_RATE_LIMIT_REQUESTS": "5",
                "DEEPSEEK_API_KEY": "from-provider-variable",
            }
        )
        self.assertEqual(config.db_path, "/tmp/kb.db")
        self.assertEqual(config.fetch_timeout, 3.5)
        self.assertEqual(config.docx_mode, "python-docx")
        self.assertEqual(config.extraction_error_policy, "mark_error")
        self.assertEqual(config.normalizer_policy, "raise")
        self.assertEqual(config.rate_limit_requests, 5)
        self.assertEqual(config.completion_api_key, "from-provider-variable")

    def test_rejects_unknown_modes(self) -> None:
        with self.assertRaises(ValueError):
            ContainerConfig.from_env({"BOTKNOWLEDGE_DOCX_MODE": "libreoffice"})
        with self.assertRaises(ValueError):
            ContainerConfig.from_env({"BOTKNOWLEDGE_EXTRACTION_ERROR_POLICY": "ignore"})

    def test_build_default_container(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = ContainerConfig(db_path=str(Path(tmp) / "kb.db"), docx_mode="python-docx")
            container = build_default_container(config)
            self.assertIs(container.config, config)
            self.assertIn("docx", container.file_normalizer.supported_types)
            self.assertIsInstance(container.file_normalizer._extractors["docx"], DocxExtractor)
            self.assertEqual(container.document_repository.get_by_bot(1), [])


if __name__ == "__main__":
    unittest.main()
