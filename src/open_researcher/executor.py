"""
Tool Executor

Runs the research tools against the search/scrape provider and renders their
results as text for the reasoning model. Execution never raises: provider
failures, empty results and malformed arguments all come back as a text
outcome so the model can decide how to react.
"""

import asyncio
import re
from typing import Any

from pydantic import ValidationError

from .logger import get_tool_logger
from .selection import (
    QuerySignals,
    ScrapedCandidate,
    extract_publication_date,
    order_candidates,
    select_urls,
)
from .tools import TOOL_ARGUMENTS, build_tool_catalogue, create_research_tools
from .types import ToolOutcome, VisualArtifact
from .utils import collapse_newlines, truncate
from .web.firecrawl import FirecrawlClient, get_firecrawl_client

SEARCH_PREVIEW_CHARS = 500
SOURCE_PREVIEW_CHARS = 3000
LINK_PREVIEW_CHARS = 500
SCRAPE_FALLBACK_TIP = (
    "Tip: Try using web_search with scrape_content=true for better results."
)
FULL_PAGE_SCREENSHOT = "screenshot@fullPage"


class ToolExecutor:
    """Dispatches tool requests and normalizes their results."""

    def __init__(self, firecrawl: FirecrawlClient | None = None):
        self._firecrawl = firecrawl
        self.logger = get_tool_logger()
        self.tools = {
            research_tool.tool_name: research_tool
            for research_tool in create_research_tools(self)
        }

    @property
    def firecrawl(self) -> FirecrawlClient:
        """The provider client, created on first use."""
        if self._firecrawl is None:
            self._firecrawl = get_firecrawl_client()
        return self._firecrawl

    def tool_catalogue(self) -> list[dict[str, Any]]:
        return build_tool_catalogue(self.tools.values())

    async def execute(self, tool_name: str, arguments: dict[str, Any]) -> ToolOutcome:
        """
        Validate arguments and run a tool.

        Args:
            tool_name: Name from the tool catalogue
            arguments: Raw arguments supplied by the model

        Returns:
            ToolOutcome; failures are described in its text
        """
        research_tool = self.tools.get(tool_name)
        if research_tool is None:
            return ToolOutcome(text=f"Unknown tool: {tool_name}")

        try:
            validated = TOOL_ARGUMENTS[tool_name].model_validate(arguments or {})
        except ValidationError as e:
            self.logger.warning(f"❌ Invalid arguments for {tool_name}: {e}")
            return ToolOutcome(
                text=f"Invalid arguments for {tool_name}: {_describe_validation_error(e)}"
            )

        try:
            return await research_tool(**validated.model_dump())
        except Exception as e:
            self.logger.exception(f"❌ Tool {tool_name} failed unexpectedly")
            return ToolOutcome(text=f"Error executing {tool_name}: {e}")

    async def web_search(
        self,
        query: str,
        limit: int = 5,
        scrape_content: bool = False,
        tbs: str | None = None,
    ) -> ToolOutcome:
        """Search, then optionally scrape a heuristically chosen subset of results."""
        self.logger.info(f"🔍 web_search query={query!r} limit={limit} scrape={scrape_content} tbs={tbs}")
        artifacts: list[VisualArtifact] = []

        try:
            # Metadata pass; the provider only scrapes all-or-nothing per call
            results = await self.firecrawl.search(query, limit=limit, tbs=tbs)
            if not results:
                return ToolOutcome(text="No search results found.")

            output = f"Found {len(results)} results:\n\n"
            for index, result in enumerate(results, 1):
                output += f"[{index}] {result['title']}\n"
                output += f"URL: {result['url']}\n"
                output += f"Description: {result['description']}\n"
                output += "\n"

            if not scrape_content:
                return ToolOutcome(text=output)

            signals = QuerySignals.from_query(query, tbs)
            urls_to_scrape = select_urls(results, signals, limit)
            self.logger.info(f"🎯 Signals {signals}; scraping {len(urls_to_scrape)} URLs")
            if not urls_to_scrape:
                return ToolOutcome(text=output)

            scraped = await self.firecrawl.search(
                query, limit=limit, formats=["markdown", "links"], tbs=tbs
            )
            output += "\n--- SCRAPED CONTENT ---\n\n"

            candidates: list[ScrapedCandidate] = []
            for index, result in enumerate(scraped, 1):
                if result["url"] not in urls_to_scrape or not result["markdown"]:
                    continue
                if result["screenshot"]:
                    artifacts.append(VisualArtifact(url=result["url"], image=result["screenshot"]))

                candidate = ScrapedCandidate(index=index, result=result)
                if signals.wants_dates:
                    found = extract_publication_date(
                        result["markdown"],
                        result["metadata"].get("title") or "",
                        result["metadata"].get("description") or "",
                    )
                    if found is not None:
                        candidate.date_text, candidate.date = found
                candidates.append(candidate)

            for candidate in order_candidates(candidates, signals):
                result = candidate.result
                output += f"[{candidate.index}] {result['title']} (SCRAPED)\n"
                output += f"URL: {result['url']}\n"
                if candidate.date_text:
                    output += f"Date: {candidate.date_text}\n"
                preview = collapse_newlines(result["markdown"][:SEARCH_PREVIEW_CHARS])
                output += f"Content preview: {preview}...\n"
                if result["links"]:
                    output += f"Links found: {len(result['links'])} (first 3: {', '.join(result['links'][:3])})\n"
                output += "\n"

            return ToolOutcome(text=output, artifacts=tuple(artifacts))

        except Exception as e:
            self.logger.warning(f"❌ Search failed for {query!r}: {e}")
            return ToolOutcome(text=f"Error performing search: {e}")

    async def deep_scrape(
        self,
        source_url: str,
        link_filter: str | None = None,
        max_depth: int = 1,
        max_links: int = 5,
        formats: list[str] | None = None,
    ) -> ToolOutcome:
        """Scrape one page and, when a link filter is given, its matching links concurrently."""
        formats = formats or ["markdown"]
        self.logger.info(
            f"🕸️ deep_scrape url={source_url} filter={link_filter!r} depth={max_depth} links={max_links}"
        )
        artifacts: list[VisualArtifact] = []

        try:
            source = await self.firecrawl.scrape(
                source_url, ["markdown", "links", FULL_PAGE_SCREENSHOT]
            )
        except Exception as e:
            self.logger.warning(f"❌ Failed to scrape {source_url}: {e}")
            return ToolOutcome(text=f"Failed to scrape URL: {e}\n\n{SCRAPE_FALLBACK_TIP}")

        if not source["markdown"]:
            return ToolOutcome(
                text=f"Failed to scrape source URL: No content found\n\n{SCRAPE_FALLBACK_TIP}"
            )

        if source["screenshot"]:
            artifacts.append(VisualArtifact(url=source_url, image=source["screenshot"]))

        output = "Source page scraped successfully\n"
        output += f"Title: {source['title'] or 'Unknown'}\n\n"
        output += f"Page content:\n{truncate(source['markdown'], SOURCE_PREVIEW_CHARS)}\n\n"

        # Following links is opt-in
        if not link_filter:
            output += f"\nFound {len(source['links'])} links on this page.\n"
            output += 'To follow specific links, use the link_filter parameter (e.g., link_filter: "/blog/[^/]+$" for blog posts).\n'
            return ToolOutcome(text=output, artifacts=tuple(artifacts))

        try:
            pattern = re.compile(link_filter, re.IGNORECASE)
        except re.error as e:
            output += f"Invalid link_filter pattern {link_filter!r}: {e}\n"
            return ToolOutcome(text=output, artifacts=tuple(artifacts))

        filtered_links = [link for link in source["links"] if pattern.search(link)]
        output += f'Filtered to {len(filtered_links)} links matching pattern "{link_filter}"\n\n'

        # max_links caps attempted scrapes, not successful ones
        links_to_scrape = filtered_links[:max_links]
        if not links_to_scrape:
            output += "No links to scrape after filtering.\n"
            return ToolOutcome(text=output, artifacts=tuple(artifacts))

        output += f"Following {len(links_to_scrape)} links:\n"

        link_formats = list(dict.fromkeys([*formats, FULL_PAGE_SCREENSHOT]))
        results = await asyncio.gather(
            *(self.firecrawl.scrape(link, link_formats) for link in links_to_scrape),
            return_exceptions=True,
        )

        successful = []
        for link, result in zip(links_to_scrape, results):
            if isinstance(result, BaseException):
                self.logger.warning(f"❌ Failed to scrape link {link}: {result}")
                continue
            if not result["markdown"]:
                self.logger.warning(f"❌ No content for link {link}")
                continue
            if result["screenshot"]:
                artifacts.append(VisualArtifact(url=link, image=result["screenshot"]))
            successful.append((link, result))

        self.logger.info(
            f"📊 Link scrape completed: {len(successful)} success, {len(links_to_scrape) - len(successful)} errors"
        )

        output += f"\nSuccessfully scraped {len(successful)} pages:\n\n"
        for index, (link, result) in enumerate(successful, 1):
            output += f"[{index}] {result['title'] or 'Unknown'}\n"
            output += f"URL: {link}\n"
            output += f"Description: {result['description']}\n"
            output += f"Content preview: {result['markdown'][:LINK_PREVIEW_CHARS]}...\n"
            if result["screenshot"]:
                output += "Screenshot: ✓ Captured\n"
            if max_depth > 1 and result["links"]:
                # Further depth is advertised only; the caller follows up with another deep_scrape
                output += f"Sub-links available at further depth: {len(result['links'])} (depth {max_depth - 1} remaining)\n"
            output += "\n"

        return ToolOutcome(text=output, artifacts=tuple(artifacts))


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)
