"""
Research Tools for the Agent

Tool definitions exposed to the reasoning model, their argument contracts and
the schema catalogue sent with every model request.
"""

import re
from typing import TYPE_CHECKING, Any, Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from strands import tool

from .analysis import AnalysisType, analyze
from .types import ToolOutcome

if TYPE_CHECKING:
    from .executor import ToolExecutor

TimeRange = Literal["qdr:h", "qdr:d", "qdr:w", "qdr:m", "qdr:y"]

# Names shown to users in tool_call events
TOOL_DISPLAY_NAMES = {
    "web_search": "firecrawl_search",
    "deep_scrape": "firecrawl_scrape",
}


def display_name(tool_name: str) -> str:
    return TOOL_DISPLAY_NAMES.get(tool_name, tool_name)


class WebSearchArguments(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: str
    limit: int = Field(default=5, ge=1)
    scrape_content: bool = False
    tbs: TimeRange | None = None

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be empty")
        return value


class DeepScrapeArguments(BaseModel):
    model_config = ConfigDict(extra="ignore")

    source_url: str
    link_filter: str | None = None
    max_depth: int = Field(default=1, ge=1)
    max_links: int = Field(default=5, ge=1)
    formats: list[str] = Field(default_factory=lambda: ["markdown"])

    @field_validator("formats", mode="before")
    @classmethod
    def formats_default_when_null(cls, value: Any) -> Any:
        return ["markdown"] if value is None else value

    @field_validator("source_url")
    @classmethod
    def source_url_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("source_url must not be empty")
        return value

    @field_validator("link_filter")
    @classmethod
    def link_filter_compiles(cls, value: str | None) -> str | None:
        if value:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"link_filter is not a valid regex: {e}") from e
        return value or None


class AnalyzeContentArguments(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str
    analysis_type: AnalysisType
    context: str | None = None


TOOL_ARGUMENTS: dict[str, type[BaseModel]] = {
    "web_search": WebSearchArguments,
    "deep_scrape": DeepScrapeArguments,
    "analyze_content": AnalyzeContentArguments,
}


def create_research_tools(executor: "ToolExecutor") -> list[Any]:
    """Create the research tools bound to an executor."""

    @tool
    async def web_search(
        query: str,
        limit: int = 5,
        scrape_content: bool = False,
        tbs: TimeRange | None = None,
    ) -> ToolOutcome:
        """
        Search the web and optionally scrape content from results. Supports Google
        search operators (site:, intitle:, etc.). Set scrape_content=true to extract
        full content. For listing/counting items, the search results preview is
        often sufficient.

        Args:
            query: Search query
            limit: Number of results to return
            scrape_content: Whether to scrape the content of search results
            tbs: Time-based search filter (e.g., 'qdr:w' for past week)
        """
        return await executor.web_search(query, limit, scrape_content, tbs)

    @tool
    async def deep_scrape(
        source_url: str,
        link_filter: str | None = None,
        max_depth: int = 1,
        max_links: int = 5,
        formats: list[str] | None = None,
    ) -> ToolOutcome:
        """
        Scrape a single URL and optionally follow its links for deeper analysis.
        Best for detailed research or when you need content from multiple linked
        pages. For simple queries, a single page scrape is usually sufficient.

        Args:
            source_url: The source URL to extract links from
            link_filter: Regex pattern to filter which links to scrape (e.g., '/blog/', '/docs/')
            max_depth: Maximum depth of links to follow (1 = direct links only)
            max_links: Maximum number of links to scrape per level
            formats: Output formats for scraped content (default: ["markdown"])
        """
        return await executor.deep_scrape(
            source_url, link_filter, max_depth, max_links, formats or ["markdown"]
        )

    @tool
    async def analyze_content(
        content: str,
        analysis_type: AnalysisType,
        context: str | None = None,
    ) -> ToolOutcome:
        """
        Analyze scraped content to extract specific information, patterns, or
        insights. Use this to process content you've already fetched rather than
        fetching more.

        Args:
            content: Content to analyze
            analysis_type: Type of analysis to perform
            context: Additional context for the analysis
        """
        return ToolOutcome(text=analyze(content, analysis_type, context))

    return [web_search, deep_scrape, analyze_content]


def build_tool_catalogue(tools: Iterable[Any]) -> list[dict[str, Any]]:
    """Convert tool specs into the model provider's tool schema format."""
    catalogue = []
    for research_tool in tools:
        spec = research_tool.tool_spec
        catalogue.append(
            {
                "name": spec["name"],
                "description": spec["description"],
                "input_schema": spec["inputSchema"]["json"],
            }
        )
    return catalogue
