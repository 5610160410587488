"""
Search result selection heuristics.

Classifies a query's intent from pattern signals, decides which search results
are worth scraping, extracts publication dates from scraped content and orders
the scraped results for display.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from .types import SearchResultItem
from .utils import url_path

RECENT_PATTERN = re.compile(
    r"\b(latest|recent|newest|new|today|yesterday|this week|this month)\b", re.I
)
BLOG_PATTERN = re.compile(
    r"\b(blogs?|posts?|articles?|news|updates?|announce\w*)\b", re.I
)
DOCS_PATTERN = re.compile(
    r"\b(documentation|docs|api|reference|guides?|tutorials?|how to)\b", re.I
)
SITE_PATTERN = re.compile(r"\bsite:", re.I)

BLOG_PATH_KEYWORDS = ("blog", "post", "article", "news")
DOCS_PATH_KEYWORDS = ("doc", "api", "guide", "reference")
BLOG_TEXT_PATTERN = re.compile(r"blog|post|article|news|published|wrote", re.I)
DOCS_TEXT_PATTERN = re.compile(r"doc|api|guide|tutorial|reference", re.I)

# Tried in order; each pattern pairs with the strptime formats that can parse it
DATE_PATTERNS: list[tuple[re.Pattern[str], tuple[str, ...]]] = [
    (re.compile(r"\b([a-z]+\.? \d{1,2}, \d{4})\b", re.IGNORECASE), ("%B %d, %Y", "%b %d, %Y", "%b. %d, %Y")),
    (re.compile(r"\b(\d{4}-\d{2}-\d{2})\b"), ("%Y-%m-%d",)),
    (re.compile(r"\b(\d{1,2}/\d{1,2}/\d{4})\b"), ("%m/%d/%Y",)),
    (re.compile(r"\b(\d{1,2} [a-z]+ \d{4})\b", re.IGNORECASE), ("%d %B %Y", "%d %b %Y")),
]
DATE_SCAN_CHARS = 1000
MIN_DATE_YEAR = 2020


@dataclass(frozen=True)
class QuerySignals:
    """Boolean intent classification of a search query."""

    wants_recent: bool = False
    wants_blog: bool = False
    wants_docs: bool = False
    has_time_filter: bool = False
    has_site_filter: bool = False

    @classmethod
    def from_query(cls, query: str, tbs: str | None = None) -> "QuerySignals":
        return cls(
            wants_recent=bool(RECENT_PATTERN.search(query)),
            wants_blog=bool(BLOG_PATTERN.search(query)),
            wants_docs=bool(DOCS_PATTERN.search(query)),
            has_time_filter=bool(tbs),
            has_site_filter=bool(SITE_PATTERN.search(query)),
        )

    @property
    def wants_dates(self) -> bool:
        return self.wants_recent or self.wants_blog


def _matches_blog(result: SearchResultItem) -> bool:
    path = url_path(result["url"])
    if any(keyword in path for keyword in BLOG_PATH_KEYWORDS):
        return True
    return bool(BLOG_TEXT_PATTERN.search(f"{result['title']} {result['description']}"))


def _matches_docs(result: SearchResultItem) -> bool:
    path = url_path(result["url"])
    if any(keyword in path for keyword in DOCS_PATH_KEYWORDS):
        return True
    return bool(DOCS_TEXT_PATTERN.search(f"{result['title']} {result['description']}"))


def select_urls(
    results: list[SearchResultItem], signals: QuerySignals, limit: int
) -> list[str]:
    """
    Pick which search results to scrape, in original rank order.

    Time-sensitive queries take every result, including neutral queries that
    only carry a time filter (the search is already filtered),
    content-type queries take matching results and fall back to the top three,
    and everything else takes the top min(limit, 5).
    """
    if signals.wants_recent or signals.has_time_filter:
        selected = results
    elif signals.wants_blog or signals.wants_docs:
        selected = [
            result
            for result in results
            if (signals.wants_blog and _matches_blog(result))
            or (signals.wants_docs and _matches_docs(result))
        ]
        if not selected:
            selected = results[:3]
    else:
        selected = results[: min(limit, 5)]
    return [result["url"] for result in selected if result["url"]]


def _parse_date(raw: str, formats: tuple[str, ...]) -> datetime | None:
    for date_format in formats:
        try:
            return datetime.strptime(raw, date_format)
        except ValueError:
            continue
    return None


def extract_publication_date(
    markdown: str, title: str = "", description: str = ""
) -> tuple[str, datetime] | None:
    """
    Find the first plausible publication date for a scraped page.

    Scans the start of the content plus the title and description with each
    date pattern in turn and accepts the first match that parses to a year of
    2020 or later.

    Returns:
        The matched text and its parsed value, or None
    """
    search_text = " ".join([markdown[:DATE_SCAN_CHARS], description, title])
    for pattern, formats in DATE_PATTERNS:
        for match in pattern.finditer(search_text):
            parsed = _parse_date(match.group(1), formats)
            if parsed is not None and parsed.year >= MIN_DATE_YEAR:
                return match.group(1), parsed
    return None


@dataclass
class ScrapedCandidate:
    """A scraped search result awaiting display."""

    index: int
    result: SearchResultItem
    date_text: str | None = None
    date: datetime | None = None


def order_candidates(
    candidates: list[ScrapedCandidate], signals: QuerySignals
) -> list[ScrapedCandidate]:
    """
    Order scraped results for display.

    Recency queries with at least one dated result sort newest first, dated
    before undated, ties broken by search rank. Otherwise search rank is kept.
    """
    if signals.wants_recent and any(c.date is not None for c in candidates):
        dated = sorted(
            (c for c in candidates if c.date is not None),
            key=lambda c: (-c.date.timestamp(), c.index),
        )
        undated = sorted(
            (c for c in candidates if c.date is None), key=lambda c: c.index
        )
        return dated + undated
    return sorted(candidates, key=lambda c: c.index)
