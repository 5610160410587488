"""
Web Provider Package

Search and scrape access to the Firecrawl API.
"""

from .firecrawl import FirecrawlClient, FirecrawlError, get_firecrawl_client

__all__ = ["FirecrawlClient", "FirecrawlError", "get_firecrawl_client"]
