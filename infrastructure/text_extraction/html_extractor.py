"""Structural HTML extractor built on Python's tolerant ``html.parser``."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser

from domain.entities import FaqEntry, StructuredContent
from infrastructure.text_extraction.sanitizer import collapse_whitespace

logger = logging.getLogger(__name__)

MIN_PARAGRAPH_LENGTH = 30
NAVIGATION_MAX_LENGTH = 50
NAVIGATION_KEYWORDS = ("home", "about", "contact", "menu", "login", "register", "search")

SERVICE_KEYWORDS = (
    "service",
    "solution",
    "development",
    "design",
    "consulting",
    "support",
    "implementation",
    "integration",
    "maintenance",
    "training",
)
PRODUCT_KEYWORDS = ("product", "software", "app", "tool", "platform", "system")
PRICING_KEYWORDS = ("price", "cost", "fee", "plan", "subscription", "$", "€", "£")
TESTIMONIAL_KEYWORDS = ("testimonial", "review", "feedback", "customer says", "client says")

MAX_SERVICES = 15
MAX_PRODUCTS = 10
MAX_PRICING = 10
MAX_TESTIMONIALS = 5

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b")
PHONE_PATTERNS = (
    re.compile(r"(\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})"),
    re.compile(r"(\+\d{1,3}[-.\s]?)?\(?\d{1,4}\)?[-.\s]?\d{1,4}[-.\s]?\d{1,9}"),
)

_ENTITY = re.compile(r"&[^;\s]+;")
_TAG = re.compile(r"<[^>]*>")
_RAW_CONTENT_ATTR = re.compile(r"""(?<![\w-])content\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""", re.IGNORECASE)

_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_CAPTURED_TAGS = _HEADING_TAGS | {"title", "p", "a", "strong", "b"}
_SKIPPED_TAGS = frozenset({"script", "style", "noscript", "template"})


@dataclass(slots=True)
class _Capture:
    tag: str
    order: int
    href: str | None = None
    parts: list[str] = field(default_factory=list)

    def text(self) -> str:
        return _clean("".join(self.parts))


class _StructureParser(HTMLParser):
    """Collects the cleaned text of the elements the extractor cares about.

    Character and entity references are replaced by a space, and every nested
    tag boundary contributes a space, so ``<b>a</b>b`` reads as ``a b``.
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=False)
        self._open: list[_Capture] = []
        self._order = 0
        self._skip_depth = 0
        self.title: str | None = None
        self.description: str | None = None
        self.captured: dict[str, list[_Capture]] = {}

    # -- parser callbacks -------------------------------------------------
    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in _SKIPPED_TAGS:
            self._skip_depth += 1
            return
        if self._skip_depth:
            return
        if tag == "meta":
            self._handle_meta(attrs, self.get_starttag_text() or "")
        if tag == "p" and any(capture.tag == "p" for capture in self._open):
            self._close("p")
        self._boundary()
        if tag in _CAPTURED_TAGS:
            href = dict(attrs).get("href") if tag == "a" else None
            self._open.append(_Capture(tag=tag, order=self._order, href=href))
            self._order += 1

    def handle_endtag(self, tag: str) -> None:
        if tag in _SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if self._skip_depth:
            return
        if tag in _CAPTURED_TAGS and any(capture.tag == tag for capture in self._open):
            self._close(tag)
        self._boundary()

    def handle_data(self, data: str) -> None:
        if self._skip_depth:
            return
        for capture in self._open:
            capture.parts.append(data)

    def handle_entityref(self, name: str) -> None:
        self._boundary()

    def handle_charref(self, name: str) -> None:
        self._boundary()

    def close(self) -> None:
        super().close()
        while self._open:
            self._finish(self._open.pop())

    # -- helpers ----------------------------------------------------------
    def _boundary(self) -> None:
        for capture in self._open:
            capture.parts.append(" ")

    def _close(self, tag: str) -> None:
        # Unclosed inner elements end together with their parent.
        while self._open:
            capture = self._open.pop()
            self._finish(capture)
            if capture.tag == tag:
                return

    def _finish(self, capture: _Capture) -> None:
        if capture.tag == "title":
            if self.title is None:
                self.title = capture.text()
            return
        for open_capture in self._open:
            open_capture.parts.append(" ")
        self.captured.setdefault(capture.tag, []).append(capture)

    def _handle_meta(self, attrs: list[tuple[str, str | None]], raw_tag: str) -> None:
        values = {name.lower(): value or "" for name, value in attrs}
        if self.description is None and values.get("name", "").lower() == "description":
            # Attribute values arrive unescaped; read the raw one so entities become spaces.
            match = _RAW_CONTENT_ATTR.search(raw_tag)
            raw_value = next((group for group in match.groups() if group is not None), "") if match else ""
            self.description = _clean(raw_value or values.get("content", ""))

    def texts(self, *tags: str) -> list[str]:
        captures = [capture for tag in tags for capture in self.captured.get(tag, [])]
        captures.sort(key=lambda capture: capture.order)
        return [capture.text() for capture in captures]

    def links(self) -> list[tuple[str, str]]:
        captures = sorted(self.captured.get("a", []), key=lambda capture: capture.order)
        return [(capture.text(), (capture.href or "").strip()) for capture in captures]


def _clean(text: str) -> str:
    return collapse_whitespace(_ENTITY.sub(" ", _TAG.sub(" ", text)))


def is_navigation_text(text: str) -> bool:
    """Short strings mentioning a navigation keyword are menu items, not content."""
    lowered = text.lower()
    return len(text) < NAVIGATION_MAX_LENGTH and any(keyword in lowered for keyword in NAVIGATION_KEYWORDS)


def _keyword_subset(paragraphs: list[str], keywords: tuple[str, ...], cap: int) -> tuple[str, ...]:
    matches = [p for p in paragraphs if any(keyword in p.lower() for keyword in keywords)]
    return tuple(matches[:cap])


def _contact_info(html: str) -> list[str]:
    contacts = [f"Email: {match.group(0)}" for match in EMAIL_PATTERN.finditer(html)]
    for pattern in PHONE_PATTERNS:
        contacts.extend(f"Phone: {match.group(0)}" for match in pattern.finditer(html))
    return contacts


def extract_structured_content(html: str, source_url: str = "") -> StructuredContent:
    """Break an HTML page into the sections used for website knowledge documents.

    Pure function: no network or file access, and malformed markup only ever
    yields empty fields.
    """

    parser = _StructureParser()
    try:
        parser.feed(html)
        parser.close()
    except (AssertionError, ValueError) as exc:
        # html.parser still rejects a few malformed declarations; keep what was read.
        logger.warning("Stopped parsing %s early: %s", source_url or "<html>", exc)

    headings = [text for text in parser.texts(*sorted(_HEADING_TAGS)) if text]
    paragraphs = [
        text
        for text in parser.texts("p")
        if len(text) >= MIN_PARAGRAPH_LENGTH and not is_navigation_text(text)
    ]
    links = [
        f"{text} ({href})"
        for text, href in parser.links()
        if text and href and not href.startswith("#") and not href.startswith("javascript:")
    ]
    faq = [
        FaqEntry(question=text)
        for group in (sorted(_HEADING_TAGS), ["strong"], ["b"])
        for text in parser.texts(*group)
        if "?" in text
    ]

    content = StructuredContent(
        title=parser.title or "",
        description=parser.description or "",
        headings=tuple(headings),
        paragraphs=tuple(paragraphs),
        links=tuple(links),
        contact_info=tuple(_contact_info(html)),
        services=_keyword_subset(paragraphs, SERVICE_KEYWORDS, MAX_SERVICES),
        products=_keyword_subset(paragraphs, PRODUCT_KEYWORDS, MAX_PRODUCTS),
        faq=tuple(faq),
        pricing=_keyword_subset(paragraphs, PRICING_KEYWORDS, MAX_PRICING),
        testimonials=_keyword_subset(paragraphs, TESTIMONIAL_KEYWORDS, MAX_TESTIMONIALS),
    )
    logger.debug(
        "Extracted %d headings, %d paragraphs, %d links from %s",
        len(content.headings),
        len(content.paragraphs),
        len(content.links),
        source_url or "<html>",
    )
    return content


__all__ = ["extract_structured_content", "is_navigation_text"]
