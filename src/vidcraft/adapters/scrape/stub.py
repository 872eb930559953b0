"""Stub scraper for tests and offline development."""

from vidcraft.adapters.scrape.base import ScrapedPage, ScrapeProvider, check_url

STUB_PAGE = (
    "# Five habits of productive creators\n\n"
    "Batch your filming days. Script the hook first. "
    "Reuse every long video as a blog post and a thread."
)


class StubScrapeProvider(ScrapeProvider):
    def __init__(self, title: str = "Five habits of productive creators", content: str = STUB_PAGE) -> None:
        self.title = title
        self.content = content
        self.urls: list[str] = []

    @property
    def name(self) -> str:
        return "stub"

    async def scrape(self, url: str) -> ScrapedPage:
        url = check_url(url)
        self.urls.append(url)
        return ScrapedPage(url=url, title=self.title, content=self.content)
