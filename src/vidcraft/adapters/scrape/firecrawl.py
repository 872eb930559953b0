"""Firecrawl page scraper."""

import asyncio
from typing import Any

import httpx

from vidcraft.adapters.scrape.base import ScrapedPage, ScrapeProvider, check_url
from vidcraft.config import settings
from vidcraft.errors import ConfigurationError, ErrorCategory, ScrapeError, ServiceError
from vidcraft.logging import get_logger

logger = get_logger(__name__)

# Keep headings, paragraphs, lists and quotes; drop navigation and footers
MAIN_CONTENT_TAGS = ["h1", "h2", "h3", "p", "li", "blockquote"]


class FirecrawlProvider(ScrapeProvider):
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = "https://api.firecrawl.dev/v0",
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.firecrawl_api_key
        self.base_url = base_url
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._transport = transport

        if not self.api_key:
            logger.warning("firecrawl_key_missing")

    @property
    def name(self) -> str:
        return "firecrawl"

    async def _post(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=60.0, transport=self._transport) as client:
            return await client.post(
                f"{self.base_url}/scrape",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "url": url,
                    "formats": ["markdown"],
                    "onlyMainContent": True,
                    "includeTags": MAIN_CONTENT_TAGS,
                },
            )

    async def scrape(self, url: str) -> ScrapedPage:
        url = check_url(url)
        if not self.api_key:
            raise ConfigurationError(
                "Firecrawl API key not configured. Set FIRECRAWL_API_KEY to import web pages."
            )

        log = logger.bind(url=url)
        attempt = 0
        while True:
            try:
                response = await self._post(url)
            except httpx.HTTPError as e:
                raise ScrapeError(f"Failed to reach the scraping service: {e}") from e

            # Rate limits clear quickly; other failures are final
            if response.status_code == 429 and attempt < self.max_retries:
                attempt += 1
                log.info("firecrawl_rate_limited", attempt=attempt, max_retries=self.max_retries)
                await asyncio.sleep(self.retry_delay)
                continue
            break

        data = _parse(response)
        page = data.get("data") or {}
        content = page.get("content") or page.get("markdown")
        if not content:
            raise ScrapeError("No content found on this page. Please try a different URL.")

        title = (page.get("metadata") or {}).get("title") or "Untitled Page"
        log.info("page_scraped", characters=len(content), attempts=attempt + 1)
        return ScrapedPage(url=url, title=title, content=content)

    async def health_check(self) -> bool:
        return bool(self.api_key)


def _parse(response: httpx.Response) -> dict[str, Any]:
    status = response.status_code
    if status == 429:
        raise ServiceError(
            "Rate limit exceeded. Please try again in a moment.",
            ErrorCategory.RATE_LIMIT,
        )
    if status == 404:
        raise ScrapeError("Page not found. Please check the URL and try again.", status_code=404)
    if status == 400:
        raise ScrapeError(
            "Invalid URL. Please check the URL format and try again.", status_code=400
        )
    if status != 200:
        raise ScrapeError(f"Failed to scrape content ({status}). Please try again later.")

    data = response.json()
    if not data.get("success"):
        raise ScrapeError(data.get("error") or "Failed to scrape content")
    return data
