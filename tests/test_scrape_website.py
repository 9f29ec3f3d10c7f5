import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from application.use_cases.scrape_website import ingest_website, scrape_website
from domain.errors import FetchFailure, FetchTimeout, InvalidUrl
from domain.interfaces import PageFetcher
from infrastructure.repositories.sqlite_knowledge_document_repository import SqliteKnowledgeDocumentRepository
from infrastructure.web.requests_page_fetcher import RequestsPageFetcher, normalize_url

HTML = """
<html><head><title>Bean Shop</title><meta name="description" content="Fresh coffee beans"></head>
<body>
  <h1>Buy coffee online</h1>
  <p>Every product in our shop is roasted to order and shipped the same week.</p>
  <p>Questions? Email hello@beans.test for wholesale pricing.</p>
</body></html>
"""


class _StaticFetcher(PageFetcher):
    def __init__(self, html: str = HTML) -> None:
        self.html = html
        self.calls: list[tuple[str, float | None]] = []

    def fetch(self, url: str, *, timeout: float | None = None) -> str:
        self.calls.append((url, timeout))
        return self.html


class _TimeoutFetcher(PageFetcher):
    def fetch(self, url: str, *, timeout: float | None = None) -> str:
        raise FetchTimeout(url, timeout or 10.0)


def _response(status: int, reason: str = "", body: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    response.url = "https://beans.test"
    return response


class TestNormalizeUrl(unittest.TestCase):
    def test_adds_https_scheme(self) -> None:
        self.assertEqual(normalize_url("beans.test/shop"), "https://beans.test/shop")
        self.assertEqual(normalize_url("  http://beans.test "), "http://beans.test")

    def test_rejects_invalid_urls(self) -> None:
        for url in ("", "   ", "ftp://beans.test", "https://", "not a url"):
            with self.subTest(url=url):
                with self.assertRaises(InvalidUrl):
                    normalize_url(url)


class TestRequestsPageFetcher(unittest.TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock(spec=requests.Session)
        self.fetcher = RequestsPageFetcher(timeout=3.0, session=self.session)

    def test_returns_body_and_uses_timeout(self) -> None:
        self.session.get.return_value = _response(200, "OK", HTML)
        self.assertEqual(self.fetcher.fetch("https://beans.test"), HTML)
        _, kwargs = self.session.get.call_args
        self.assertEqual(kwargs["timeout"], 3.0)
        self.assertIn("User-Agent", kwargs["headers"])

        self.fetcher.fetch("https://beans.test", timeout=1.5)
        self.assertEqual(self.session.get.call_args[1]["timeout"], 1.5)

    def test_timeout(self) -> None:
        self.session.get.side_effect = requests.Timeout("slow")
        with self.assertRaises(FetchTimeout) as ctx:
            self.fetcher.fetch("https://beans.test")
        self.assertEqual(ctx.exception.message, "Website took too long to respond")
        self.assertEqual(ctx.exception.status_code, 504)

    def test_http_error(self) -> None:
        self.session.get.return_value = _response(404, "Not Found")
        with self.assertRaises(FetchFailure) as ctx:
            self.fetcher.fetch("https://beans.test/missing")
        self.assertEqual(ctx.exception.message, "Website returned an error: HTTP 404: Not Found")
        self.assertEqual(ctx.exception.status, 404)

    def test_connection_error(self) -> None:
        self.session.get.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(FetchFailure) as ctx:
            self.fetcher.fetch("https://beans.test")
        self.assertEqual(ctx.exception.message, "Unable to connect to the website")


class TestScrapeWebsite(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.repo = SqliteKnowledgeDocumentRepository(db_path=Path(tmp.name) / "knowledge.db")

    def test_scrape_builds_summary(self) -> None:
        fetcher = _StaticFetcher()
        page = scrape_website("beans.test", page_fetcher=fetcher, timeout=2.0)
        self.assertEqual(fetcher.calls, [("https://beans.test", 2.0)])
        self.assertEqual(page.title, "Bean Shop")
        self.assertEqual(page.description, "Fresh coffee beans")
        self.assertTrue(page.content.startswith("Website: https://beans.test\n\nTitle: Bean Shop"))
        self.assertIn("Email: hello@beans.test", page.content)
        self.assertEqual(page.metadata["content_type"], "ecommerce")
        self.assertEqual(page.metadata["url"], "https://beans.test")
        self.assertTrue(page.metadata["has_contact_info"])

    def test_invalid_url_never_fetches(self) -> None:
        fetcher = _StaticFetcher()
        with self.assertRaises(InvalidUrl):
            scrape_website("ftp://beans.test", page_fetcher=fetcher)
        self.assertEqual(fetcher.calls, [])

    def test_ingest_website_stores_indexed_document(self) -> None:
        document, page = ingest_website(3, "https://beans.test", page_fetcher=_StaticFetcher(), document_repository=self.repo)
        self.assertEqual(document.status, "indexed")
        self.assertEqual(document.file_type, "website")
        self.assertEqual(document.file_url, "https://beans.test")
        self.assertEqual(document.title, "Bean Shop")
        self.assertEqual(document.source_kind, "web")
        self.assertEqual(document.content, page.content)
        self.assertEqual([doc.id for doc in self.repo.get_by_bot(3)], [document.id])

    def test_fetch_timeout_creates_no_document(self) -> None:
        with self.assertRaises(FetchTimeout):
            ingest_website(3, "beans.test", page_fetcher=_TimeoutFetcher(), document_repository=self.repo)
        self.assertEqual(self.repo.get_by_bot(3), [])


if __name__ == "__main__":
    unittest.main()
