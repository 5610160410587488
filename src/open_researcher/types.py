"""
Common type definitions for the research agent.

TypedDict definitions for provider payloads plus the normalized tool outcome.
"""

from dataclasses import dataclass, field
from typing import Any, TypedDict


class SearchResultItem(TypedDict):
    """Individual search result from the search provider."""

    url: str
    title: str
    description: str
    markdown: str
    links: list[str]
    screenshot: str | None
    metadata: dict[str, Any]


class ScrapeResult(TypedDict):
    """Single-page scrape from the scrape provider."""

    url: str
    title: str
    description: str
    markdown: str
    links: list[str]
    screenshot: str | None


@dataclass(frozen=True)
class VisualArtifact:
    """Captured page image associated with a scraped URL."""

    url: str
    image: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "screenshot": self.image}


@dataclass(frozen=True)
class ToolOutcome:
    """Normalized result of one tool execution."""

    text: str
    artifacts: tuple[VisualArtifact, ...] = field(default_factory=tuple)
