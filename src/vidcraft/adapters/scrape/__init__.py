"""Web page scrapers for article nodes."""

from vidcraft.adapters.scrape.base import ScrapedPage, ScrapeProvider, check_url
from vidcraft.adapters.scrape.firecrawl import FirecrawlProvider
from vidcraft.adapters.scrape.stub import StubScrapeProvider
from vidcraft.config import settings


def get_scrape_provider() -> ScrapeProvider:
    """Get the configured scraper (``firecrawl`` or ``stub``)."""
    if settings.scrape_provider.lower() == "stub":
        return StubScrapeProvider()
    return FirecrawlProvider()


__all__ = [
    "FirecrawlProvider",
    "ScrapeProvider",
    "ScrapedPage",
    "StubScrapeProvider",
    "check_url",
    "get_scrape_provider",
]
