"""
Firecrawl API Client

Thin async client for the Firecrawl v1 search and scrape endpoints, with
exponential backoff on rate limiting. Responses are normalized into the
package's TypedDicts.
"""

import asyncio
import itertools
import logging
from typing import Any

import httpx
from httpcore._async.connection import exponential_backoff

from ..errors import ConfigurationError
from ..settings import get_settings
from ..types import ScrapeResult, SearchResultItem

logger = logging.getLogger(__name__)


class FirecrawlError(Exception):
    """A search or scrape request to Firecrawl failed."""


class FirecrawlClient:
    """Async client for Firecrawl search and scrape."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.firecrawl.dev",
        timeout: float = 120.0,
        max_retries: int = 3,
        backoff_factor: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self._transport = transport

    async def search(
        self,
        query: str,
        *,
        limit: int = 5,
        formats: list[str] | None = None,
        tbs: str | None = None,
    ) -> list[SearchResultItem]:
        """
        Search the web, optionally scraping every result.

        Args:
            query: Search query, provider operators (site:, intitle:) allowed
            limit: Number of results to request
            formats: Scrape formats; empty or None returns metadata only
            tbs: Time-based filter token such as "qdr:w"

        Returns:
            Results in provider rank order

        Raises:
            FirecrawlError: If the request fails
        """
        payload: dict[str, Any] = {"query": query, "limit": limit}
        if tbs:
            payload["tbs"] = tbs
        if formats:
            payload["scrapeOptions"] = {"formats": list(formats)}

        data = await self._post("/v1/search", payload)

        results: list[SearchResultItem] = []
        for item in data.get("data") or []:
            metadata = item.get("metadata") or {}
            results.append(
                SearchResultItem(
                    url=item.get("url") or metadata.get("sourceURL") or "",
                    title=item.get("title") or metadata.get("title") or "",
                    description=item.get("description")
                    or metadata.get("description")
                    or "",
                    markdown=item.get("markdown") or "",
                    links=list(item.get("links") or []),
                    screenshot=item.get("screenshot"),
                    metadata=metadata,
                )
            )
        return results

    async def scrape(self, url: str, formats: list[str]) -> ScrapeResult:
        """
        Scrape a single page.

        Args:
            url: Page to scrape
            formats: Requested formats, e.g. ["markdown", "links", "screenshot@fullPage"]

        Returns:
            Normalized page content

        Raises:
            FirecrawlError: If the request fails
        """
        payload = await self._post("/v1/scrape", {"url": url, "formats": list(formats)})

        # v1 nests the page under "data"; tolerate a flat payload too
        data = payload.get("data") or payload
        metadata = data.get("metadata") or {}
        return ScrapeResult(
            url=url,
            title=metadata.get("title") or "",
            description=metadata.get("description") or "",
            markdown=data.get("markdown") or "",
            links=list(data.get("links") or []),
            screenshot=data.get("screenshot"),
        )

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            for attempt, delay in enumerate(
                itertools.islice(
                    exponential_backoff(factor=self.backoff_factor),
                    self.max_retries + 1,
                )
            ):
                await asyncio.sleep(delay)  # 0, f, 2f, 4f ... seconds

                try:
                    response = await client.post(path, json=payload, headers=headers)
                    response.raise_for_status()
                except httpx.TimeoutException as e:
                    raise FirecrawlError(f"Firecrawl request to {path} timed out") from e
                except httpx.HTTPStatusError as e:
                    if e.response.status_code == 429 and attempt < self.max_retries:
                        logger.warning(
                            "Rate limited on %s, retrying (attempt %d/%d)",
                            path,
                            attempt + 1,
                            self.max_retries + 1,
                        )
                        continue
                    raise FirecrawlError(
                        f"Firecrawl API returned status {e.response.status_code}: {_error_detail(e.response)}"
                    ) from e
                except httpx.RequestError as e:
                    raise FirecrawlError(f"Firecrawl request failed: {e}") from e

                try:
                    data = response.json()
                except ValueError as e:
                    raise FirecrawlError("Firecrawl returned a non-JSON response") from e

                if data.get("success") is False:
                    raise FirecrawlError(
                        data.get("error") or "Firecrawl request was not successful"
                    )
                return data

        raise FirecrawlError("Maximum retries exceeded for rate limited requests")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)


_firecrawl_client: FirecrawlClient | None = None


def get_firecrawl_client() -> FirecrawlClient:
    """Get or create the process-wide Firecrawl client (lazy initialization)."""
    global _firecrawl_client
    if _firecrawl_client is None:
        settings = get_settings()
        if not settings.firecrawl_api_key:
            raise ConfigurationError(
                "FIRECRAWL_API_KEY environment variable is not set"
            )
        _firecrawl_client = FirecrawlClient(
            settings.firecrawl_api_key,
            base_url=settings.firecrawl_base_url,
            timeout=settings.firecrawl_timeout,
            max_retries=settings.firecrawl_max_retries,
        )
    return _firecrawl_client


def reset_firecrawl_client() -> None:
    global _firecrawl_client
    _firecrawl_client = None
