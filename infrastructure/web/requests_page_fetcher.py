"""Website fetcher used for scraping pages into knowledge documents."""
from __future__ import annotations

import logging
from urllib.parse import urlsplit

import requests

from domain.errors import FetchFailure, FetchTimeout, InvalidUrl
from domain.interfaces import PageFetcher

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def normalize_url(url: str) -> str:
    """Validate ``url`` and default to https when no scheme is given."""

    candidate = (url or "").strip()
    if not candidate:
        raise InvalidUrl(url)
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    parts = urlsplit(candidate)
    if parts.scheme not in {"http", "https"} or not parts.netloc or " " in parts.netloc:
        raise InvalidUrl(url)
    return candidate


class RequestsPageFetcher(PageFetcher):
    """Fetch HTML with ``requests`` and an explicit timeout."""

    def __init__(self, timeout: float = 10.0, session: requests.Session | None = None) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch(self, url: str, *, timeout: float | None = None) -> str:
        effective_timeout = timeout if timeout is not None else self._timeout
        logger.info("Fetching %s", url)
        try:
            response = self._session.get(url, headers=DEFAULT_HEADERS, timeout=effective_timeout)
            response.raise_for_status()
        except requests.Timeout as exc:
            raise FetchTimeout(url, effective_timeout) from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            reason = exc.response.reason if exc.response is not None else ""
            raise FetchFailure(
                url,
                f"Website returned an error: HTTP {status}: {reason}".rstrip(": "),
                status=status,
            ) from exc
        except requests.RequestException as exc:
            logger.warning("Connection to %s failed: %s", url, exc)
            raise FetchFailure(url, "Unable to connect to the website") from exc
        return response.text


__all__ = ["DEFAULT_HEADERS", "RequestsPageFetcher", "normalize_url"]
