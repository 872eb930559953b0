"""Base interface for web page scrapers used by article nodes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from urllib.parse import urlparse

from vidcraft.errors import ValidationError

INVALID_URL_MESSAGE = (
    "Invalid URL format. Please provide a valid URL starting with http:// or https://"
)


@dataclass
class ScrapedPage:
    url: str
    title: str
    content: str  # Markdown


def check_url(url: str) -> str:
    """Return the stripped URL, or raise ValidationError if it is not http(s)."""
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(INVALID_URL_MESSAGE)
    return url


class ScrapeProvider(ABC):
    """Turns a public page into markdown.

    Implementations:
    - FirecrawlProvider: hosted Firecrawl scrape endpoint
    - StubScrapeProvider: canned page for testing
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def scrape(self, url: str) -> ScrapedPage:
        """Fetch the main content of ``url``.

        Raises:
            ValidationError: If the URL is malformed
            ScrapeError: If the page cannot be fetched or has no content
        """
        ...

    async def health_check(self) -> bool:
        return True
