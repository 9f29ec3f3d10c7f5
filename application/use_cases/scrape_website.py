"""Use cases that turn a fetched web page into a knowledge document."""
from __future__ import annotations

import logging

from application.services.web_content import build_scraped_page
from domain.entities import WEBSITE_FILE_TYPE, KnowledgeDocument, ScrapedPage
from domain.interfaces import KnowledgeDocumentRepository, PageFetcher
from infrastructure.text_extraction.html_extractor import extract_structured_content
from infrastructure.web.requests_page_fetcher import normalize_url

logger = logging.getLogger(__name__)


def scrape_website(url: str, *, page_fetcher: PageFetcher, timeout: float | None = None) -> ScrapedPage:
    """Fetch ``url`` and summarise its structure; ``FetchError`` subclasses propagate."""

    target_url = normalize_url(url)
    html = page_fetcher.fetch(target_url, timeout=timeout)
    page = build_scraped_page(extract_structured_content(html, target_url), target_url)
    logger.info(
        "Scraped %s: %s page, %d words",
        target_url,
        page.metadata["content_type"],
        page.metadata["word_count"],
    )
    return page


def ingest_website(
    bot_id: int,
    url: str,
    *,
    page_fetcher: PageFetcher,
    document_repository: KnowledgeDocumentRepository,
    timeout: float | None = None,
) -> tuple[KnowledgeDocument, ScrapedPage]:
    """Scrape a page and store its summary as an indexed document of the bot."""

    page = scrape_website(url, page_fetcher=page_fetcher, timeout=timeout)
    document = document_repository.create(
        bot_id,
        page.title,
        page.content,
        WEBSITE_FILE_TYPE,
        file_url=page.metadata["url"],
    )
    document = document_repository.update_status(document.id, "indexed")
    return document, page


__all__ = ["ingest_website", "scrape_website"]
