"""Tests for article nodes and URL import."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from vidcraft.adapters.scrape import FirecrawlProvider, StubScrapeProvider
from vidcraft.api.deps import get_scraper
from vidcraft.errors import (
    ConfigurationError,
    ErrorCategory,
    ScrapeError,
    ServiceError,
    ValidationError,
)

PAGE_URL = "https://blog.example.com/posts/shipping-fast"


def create_article(test_client: TestClient, auth_headers: dict[str, str], project: dict) -> dict:
    response = test_client.post(
        f"/api/v1/projects/{project['id']}/articles",
        json={"title": "Launch notes", "content": "We shipped the beta today", "format": "md"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()


def test_create_and_edit_article(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    article = create_article(test_client, auth_headers, project)

    assert article["word_count"] == 5
    assert article["source_url"] is None

    response = test_client.patch(
        f"/api/v1/articles/{article['id']}",
        json={"content": "Two words"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["word_count"] == 2
    assert response.json()["title"] == "Launch notes"


def test_list_move_and_delete(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    article = create_article(test_client, auth_headers, project)

    moved = test_client.put(
        f"/api/v1/articles/{article['id']}/position",
        json={"x": 320, "y": -40},
        headers=auth_headers,
    )
    listed = test_client.get(f"/api/v1/projects/{project['id']}/articles", headers=auth_headers)

    assert (moved.json()["canvas_x"], moved.json()["canvas_y"]) == (320, -40)
    assert [a["id"] for a in listed.json()] == [article["id"]]

    deleted = test_client.delete(f"/api/v1/articles/{article['id']}", headers=auth_headers)

    assert deleted.status_code == 204
    missing = test_client.get(f"/api/v1/articles/{article['id']}", headers=auth_headers)
    assert missing.status_code == 404


def test_blank_content_rejected(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    article = create_article(test_client, auth_headers, project)

    response = test_client.patch(
        f"/api/v1/articles/{article['id']}", json={"content": "   "}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Article content is required"


def test_other_users_cannot_read_articles(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    article = create_article(test_client, auth_headers, project)
    intruder = {"X-User-Id": "intruder"}

    single = test_client.get(f"/api/v1/articles/{article['id']}", headers=intruder)
    listed = test_client.get(f"/api/v1/projects/{project['id']}/articles", headers=intruder)

    assert single.status_code == 403
    assert listed.status_code == 403


class TestScrapeEndpoint:
    @pytest.fixture
    def scraper(self, test_client: TestClient):
        stub = StubScrapeProvider(
            title="Shipping fast", content="# Shipping fast\n\nSmall batches win."
        )
        test_client.app.dependency_overrides[get_scraper] = lambda: stub
        yield stub
        test_client.app.dependency_overrides.pop(get_scraper, None)

    def test_scraped_page_becomes_article(
        self, test_client: TestClient, auth_headers: dict[str, str], project: dict, scraper
    ) -> None:
        response = test_client.post(
            f"/api/v1/projects/{project['id']}/articles/scrape",
            json={"url": f"  {PAGE_URL} ", "canvas_x": 50},
            headers=auth_headers,
        )

        assert response.status_code == 201
        article = response.json()
        assert article["title"] == "Shipping fast"
        assert article["format"] == "md"
        assert article["source_url"] == PAGE_URL
        assert article["word_count"] == 6
        assert article["canvas_x"] == 50
        assert scraper.urls == [PAGE_URL]

    def test_invalid_url(
        self, test_client: TestClient, auth_headers: dict[str, str], project: dict, scraper
    ) -> None:
        response = test_client.post(
            f"/api/v1/projects/{project['id']}/articles/scrape",
            json={"url": "ftp://example.com/file"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"].startswith("Invalid URL format")
        assert scraper.urls == []

    def test_ownership_checked_before_scraping(
        self, test_client: TestClient, project: dict, scraper
    ) -> None:
        response = test_client.post(
            f"/api/v1/projects/{project['id']}/articles/scrape",
            json={"url": PAGE_URL},
            headers={"X-User-Id": "intruder"},
        )

        assert response.status_code == 403
        assert scraper.urls == []


class TestFirecrawlProvider:
    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if len(seen) < 3:
                return httpx.Response(429)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "data": {"markdown": "# Hello\n\nBody", "metadata": {"title": "Hello"}},
                },
            )

        provider = FirecrawlProvider(
            api_key="fc-test", retry_delay=0, transport=httpx.MockTransport(handler)
        )
        page = await provider.scrape(PAGE_URL)

        assert (page.title, page.content) == ("Hello", "# Hello\n\nBody")
        assert len(seen) == 3
        assert seen[0].headers["Authorization"] == "Bearer fc-test"
        body = json.loads(seen[0].content)
        assert body["url"] == PAGE_URL
        assert body["onlyMainContent"] is True

    @pytest.mark.asyncio
    async def test_rate_limit_gives_up(self) -> None:
        provider = FirecrawlProvider(
            api_key="fc-test",
            max_retries=1,
            retry_delay=0,
            transport=httpx.MockTransport(lambda request: httpx.Response(429)),
        )

        with pytest.raises(ServiceError) as exc_info:
            await provider.scrape(PAGE_URL)

        assert exc_info.value.category is ErrorCategory.RATE_LIMIT

    @pytest.mark.asyncio
    async def test_page_not_found(self) -> None:
        provider = FirecrawlProvider(
            api_key="fc-test", transport=httpx.MockTransport(lambda request: httpx.Response(404))
        )

        with pytest.raises(ScrapeError) as exc_info:
            await provider.scrape(PAGE_URL)

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Page not found. Please check the URL and try again."

    @pytest.mark.asyncio
    async def test_empty_page(self) -> None:
        provider = FirecrawlProvider(
            api_key="fc-test",
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"success": True, "data": {}})
            ),
        )

        with pytest.raises(ScrapeError, match="No content found on this page"):
            await provider.scrape(PAGE_URL)

    @pytest.mark.asyncio
    async def test_missing_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from vidcraft.config import settings

        monkeypatch.setattr(settings, "firecrawl_api_key", None)
        provider = FirecrawlProvider()

        with pytest.raises(ConfigurationError):
            await provider.scrape(PAGE_URL)
        assert await provider.health_check() is False

    @pytest.mark.asyncio
    async def test_url_checked_before_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        provider = FirecrawlProvider(api_key="fc-test", transport=httpx.MockTransport(handler))

        with pytest.raises(ValidationError):
            await provider.scrape("not a url")
