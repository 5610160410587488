"""
Utility functions for the research agent.

Small text helpers shared by the tool executor.
"""

import re
from urllib.parse import urlparse


def truncate(text: str, limit: int, marker: str = "...\n[Content truncated]") -> str:
    """
    Cap text at a character budget, appending a marker when it was cut.

    Args:
        text: Text to cap
        limit: Maximum number of characters kept
        marker: Suffix appended when truncation happened

    Returns:
        The original text, or its first ``limit`` characters plus the marker
    """
    if len(text) <= limit:
        return text
    return text[:limit] + marker


def collapse_newlines(text: str) -> str:
    """Replace runs of newlines with a single space."""
    return re.sub(r"\n+", " ", text)


def url_path(url: str) -> str:
    """Lowercased path component of a URL, or "" when it cannot be parsed."""
    try:
        return urlparse(url).path.lower()
    except ValueError:
        return ""
