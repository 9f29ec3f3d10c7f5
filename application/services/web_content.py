"""Classification and summarisation of structurally parsed web pages."""
from __future__ import annotations

from datetime import datetime, timezone

from domain.entities import ContentType, ScrapedPage, StructuredContent

# Checked in order; the first category with a hit wins.
_CONTENT_TYPE_KEYWORDS: tuple[tuple[ContentType, tuple[str, ...]], ...] = (
    ("ecommerce", ("shop", "buy", "cart", "product")),
    ("blog", ("blog", "article", "post", "news")),
    ("portfolio", ("portfolio", "gallery", "work", "project")),
    ("business", ("service", "company", "business", "about")),
)

ABOUT_PARAGRAPHS = 5
SUMMARY_LINKS = 10
DEFAULT_PAGE_TITLE = "Website Content"
DEFAULT_PAGE_DESCRIPTION = "Website content extracted successfully"


def determine_content_type(content: StructuredContent) -> ContentType:
    text = " ".join(
        [content.title, content.description, " ".join(content.headings), " ".join(content.paragraphs)]
    ).lower()
    for content_type, keywords in _CONTENT_TYPE_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return content_type
    return "unknown"


def _bullets(items: tuple[str, ...] | list[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def generate_content_summary(content: StructuredContent, url: str) -> str:
    """Render the page as the text stored in a website knowledge document.

    Sections appear in a fixed order and are left out entirely when empty.
    """

    sections = [f"Website: {url}"]
    if content.title:
        sections.append(f"Title: {content.title}")
    if content.description:
        sections.append(f"Description: {content.description}")
    if content.headings:
        sections.append(f"Main Sections:\n{_bullets(content.headings)}")
    if content.paragraphs:
        sections.append("About Us:\n" + "\n\n".join(content.paragraphs[:ABOUT_PARAGRAPHS]))
    if content.services:
        sections.append(f"Services:\n{_bullets(content.services)}")
    if content.products:
        sections.append(f"Products:\n{_bullets(content.products)}")
    if content.contact_info:
        sections.append("Contact Information:\n" + "\n".join(content.contact_info))
    if content.faq:
        questions = "\n".join(f"Q: {entry.question}" for entry in content.faq)
        sections.append(f"Frequently Asked Questions:\n{questions}")
    if content.pricing:
        sections.append(f"Pricing Information:\n{_bullets(content.pricing)}")
    if content.testimonials:
        sections.append(f"Customer Testimonials:\n{_bullets(content.testimonials)}")
    if content.links:
        sections.append("Important Links:\n" + "\n".join(content.links[:SUMMARY_LINKS]))
    return "\n\n".join(sections).strip()


def build_scraped_page(content: StructuredContent, url: str, *, scraped_at: datetime | None = None) -> ScrapedPage:
    summary = generate_content_summary(content, url)
    return ScrapedPage(
        title=content.title or DEFAULT_PAGE_TITLE,
        description=content.description or DEFAULT_PAGE_DESCRIPTION,
        content=summary,
        metadata={
            "scraped_at": (scraped_at or datetime.now(timezone.utc)).isoformat(),
            "url": url,
            "word_count": len(summary.split(" ")),
            "headings": len(content.headings),
            "paragraphs": len(content.paragraphs),
            "links": len(content.links),
            "has_contact_info": bool(content.contact_info),
            "content_type": determine_content_type(content),
        },
    )


__all__ = ["build_scraped_page", "determine_content_type", "generate_content_summary"]
