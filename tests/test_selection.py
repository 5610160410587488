"""
Unit tests for query-intent signals, result selection and date handling.
"""

from datetime import datetime

from conftest import make_search_result
from open_researcher.selection import (
    QuerySignals,
    ScrapedCandidate,
    extract_publication_date,
    order_candidates,
    select_urls,
)


def results(*urls, **fields):
    return [make_search_result(url, **fields) for url in urls]


class TestQuerySignals:
    """Test cases for intent classification."""

    def test_neutral_query(self):
        """Test a query with no signal words."""
        assert QuerySignals.from_query("python asyncio tutorial basics") == QuerySignals(
            wants_docs=True
        )
        assert QuerySignals.from_query("python asyncio") == QuerySignals()

    def test_recent_and_blog(self):
        """Test that temporal and post words are both detected."""
        signals = QuerySignals.from_query("latest AI news")

        assert signals.wants_recent
        assert signals.wants_blog
        assert signals.wants_dates

    def test_news_alone_is_not_recent(self):
        """Test that intent words match on word boundaries."""
        signals = QuerySignals.from_query("newsletter archive")

        assert not signals.wants_recent
        assert not signals.wants_blog

    def test_filters(self):
        """Test time and site filter detection."""
        signals = QuerySignals.from_query("site:firecrawl.dev changelog", "qdr:w")

        assert signals.has_time_filter
        assert signals.has_site_filter


class TestSelectUrls:
    """Test cases for the selection policy."""

    def test_no_signal_takes_top_min_limit_five(self):
        """Test that neutral queries take the top min(limit, 5)."""
        ranked = results(*(f"https://r{i}.test" for i in range(1, 9)))

        assert select_urls(ranked, QuerySignals(), 8) == [f"https://r{i}.test" for i in range(1, 6)]
        assert select_urls(ranked, QuerySignals(), 2) == ["https://r1.test", "https://r2.test"]

    def test_recent_takes_everything(self):
        """Test that recency or a time filter selects every result."""
        ranked = results(*(f"https://r{i}.test" for i in range(1, 9)))

        assert len(select_urls(ranked, QuerySignals(wants_recent=True), 8)) == 8
        assert len(select_urls(ranked, QuerySignals(has_time_filter=True), 8)) == 8

    def test_time_filter_alone_takes_everything(self):
        """Test that a time filter on a neutral query selects past the top five."""
        ranked = results(*(f"https://r{i}.test" for i in range(1, 9)))
        signals = QuerySignals.from_query("python asyncio", "qdr:w")

        assert signals == QuerySignals(has_time_filter=True)
        assert select_urls(ranked, signals, 8) == [f"https://r{i}.test" for i in range(1, 9)]

    def test_recent_outranks_blog(self):
        """Test that recency takes priority over content type."""
        ranked = results("https://a.test/pricing", "https://a.test/blog/x")
        signals = QuerySignals(wants_recent=True, wants_blog=True)

        assert select_urls(ranked, signals, 5) == ["https://a.test/pricing", "https://a.test/blog/x"]

    def test_docs_match_on_path_or_text(self):
        """Test that docs intent keeps results matching by path or description."""
        ranked = [
            make_search_result("https://a.test/docs/start"),
            make_search_result("https://a.test/home", description="Full API guide"),
            make_search_result("https://a.test/pricing", title="Pricing"),
        ]

        assert select_urls(ranked, QuerySignals(wants_docs=True), 5) == [
            "https://a.test/docs/start",
            "https://a.test/home",
        ]

    def test_content_type_falls_back_to_top_three(self):
        """Test that no keyword matches falls back to the top three by rank."""
        ranked = results(*(f"https://r{i}.test/page" for i in range(1, 6)), title="Plain")

        assert select_urls(ranked, QuerySignals(wants_blog=True), 5) == [
            "https://r1.test/page",
            "https://r2.test/page",
            "https://r3.test/page",
        ]

    def test_site_filter_alone_changes_nothing(self):
        """Test that a site filter is classified but does not alter selection."""
        ranked = results(*(f"https://r{i}.test" for i in range(1, 9)))

        assert select_urls(ranked, QuerySignals(has_site_filter=True), 8) == select_urls(
            ranked, QuerySignals(), 8
        )


class TestExtractPublicationDate:
    """Test cases for date extraction."""

    def test_month_day_year(self):
        """Test the long-form English date."""
        text, parsed = extract_publication_date("Posted on March 3, 2024 by the team")

        assert text == "March 3, 2024"
        assert parsed == datetime(2024, 3, 3)

    def test_pattern_order_wins_over_position(self):
        """Test that earlier patterns are preferred even if they appear later in the text."""
        found = extract_publication_date("Updated 2023-01-02. Originally May 4, 2022.")

        assert found[0] == "May 4, 2022"

    def test_old_years_are_skipped(self):
        """Test that years before 2020 are ignored in favour of later matches."""
        found = extract_publication_date("Since 2015-06-01 and again on 2021-09-30")

        assert found[0] == "2021-09-30"

    def test_slash_and_day_first_forms(self):
        """Test the numeric and day-first formats."""
        assert extract_publication_date("on 7/4/2023")[1] == datetime(2023, 7, 4)
        assert extract_publication_date("on 12 January 2025")[1] == datetime(2025, 1, 12)

    def test_month_names_ignore_case(self):
        """Test that lowercase and uppercase month names are recognised."""
        assert extract_publication_date("posted june 12, 2025")[1] == datetime(2025, 6, 12)
        assert extract_publication_date("POSTED JUNE 12, 2025")[1] == datetime(2025, 6, 12)
        assert extract_publication_date("updated 12 june 2025")[1] == datetime(2025, 6, 12)

    def test_title_and_description_are_scanned(self):
        """Test that metadata is searched as well as the body."""
        found = extract_publication_date("no dates", title="Release notes 2024-02-29")

        assert found[1] == datetime(2024, 2, 29)

    def test_only_first_thousand_characters_of_body(self):
        """Test that dates deep in the body are not considered."""
        assert extract_publication_date("x" * 1000 + " 2024-01-01") is None

    def test_invalid_calendar_dates_are_skipped(self):
        """Test that unparseable matches fall through."""
        assert extract_publication_date("2024-13-45") is None


class TestOrderCandidates:
    """Test cases for display ordering."""

    def candidate(self, index, date=None):
        return ScrapedCandidate(
            index=index,
            result=make_search_result(f"https://r{index}.test"),
            date_text=date.isoformat() if date else None,
            date=date,
        )

    def test_recent_sorts_dated_first_newest_first(self):
        """Test descending date order with undated results last in rank order."""
        candidates = [
            self.candidate(1),
            self.candidate(2, datetime(2023, 1, 1)),
            self.candidate(3),
            self.candidate(4, datetime(2024, 1, 1)),
            self.candidate(5, datetime(2023, 1, 1)),
        ]

        ordered = order_candidates(candidates, QuerySignals(wants_recent=True))

        assert [c.index for c in ordered] == [4, 2, 5, 1, 3]

    def test_recent_without_dates_keeps_rank(self):
        """Test that recency with no dates keeps search order."""
        candidates = [self.candidate(2), self.candidate(1)]

        ordered = order_candidates(candidates, QuerySignals(wants_recent=True))

        assert [c.index for c in ordered] == [1, 2]

    def test_blog_intent_keeps_rank_even_with_dates(self):
        """Test that only recency triggers date sorting."""
        candidates = [self.candidate(1, datetime(2021, 1, 1)), self.candidate(2, datetime(2024, 1, 1))]

        ordered = order_candidates(candidates, QuerySignals(wants_blog=True))

        assert [c.index for c in ordered] == [1, 2]
