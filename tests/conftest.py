"""
Shared fakes for the research loop tests.

The reasoning model and the Firecrawl client are replaced with in-memory
doubles that record every call.
"""

from typing import Any
from unittest.mock import Mock, patch

import pytest

from open_researcher.types import ScrapeResult, SearchResultItem


def make_search_result(
    url: str,
    title: str = "",
    description: str = "",
    markdown: str = "",
    links: list[str] | None = None,
    screenshot: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> SearchResultItem:
    return SearchResultItem(
        url=url,
        title=title,
        description=description,
        markdown=markdown,
        links=links or [],
        screenshot=screenshot,
        metadata=metadata or {"title": title, "description": description},
    )


def make_scrape_result(
    url: str,
    markdown: str = "",
    title: str = "",
    description: str = "",
    links: list[str] | None = None,
    screenshot: str | None = None,
) -> ScrapeResult:
    return ScrapeResult(
        url=url,
        title=title,
        description=description,
        markdown=markdown,
        links=links or [],
        screenshot=screenshot,
    )


class FakeFirecrawl:
    """Records search/scrape calls and replays canned results."""

    def __init__(
        self,
        metadata_results: list[SearchResultItem] | None = None,
        scraped_results: list[SearchResultItem] | None = None,
        pages: dict[str, ScrapeResult | Exception] | None = None,
    ):
        self.metadata_results = metadata_results or []
        self.scraped_results = scraped_results or []
        self.pages = pages or {}
        self.search_calls: list[dict[str, Any]] = []
        self.scrape_calls: list[tuple[str, list[str]]] = []

    async def search(self, query, *, limit=5, formats=None, tbs=None):
        self.search_calls.append(
            {"query": query, "limit": limit, "formats": formats, "tbs": tbs}
        )
        return self.scraped_results if formats else self.metadata_results

    async def scrape(self, url, formats):
        self.scrape_calls.append((url, list(formats)))
        page = self.pages.get(url)
        if page is None:
            raise RuntimeError(f"no page for {url}")
        if isinstance(page, Exception):
            raise page
        return page


class FakeModel:
    """Replays scripted responses; each entry is a segment list or an exception."""

    client = "fake-client"

    def __init__(self, responses: list[Any]):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def respond(self, *, system, messages, tools):
        self.calls.append({"system": system, "messages": messages, "tools": tools})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep tests from creating log files in the working directory."""
    with (
        patch("open_researcher.orchestrator.setup_logging") as mock_setup_logging,
        patch("open_researcher.executor.get_tool_logger") as mock_tool_logger,
    ):
        mock_setup_logging.return_value = Mock()
        mock_tool_logger.return_value = Mock()
        yield


@pytest.fixture
def fake_firecrawl():
    return FakeFirecrawl()
