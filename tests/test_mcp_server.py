"""
Unit tests for the MCP research job server.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from mcp_server import server
from open_researcher.errors import ConfigurationError, FailureKind, ModelBoundaryError
from open_researcher.events import (
    FinalAnswerEvent,
    ReasoningEvent,
    ToolCallEvent,
    ToolResultEvent,
)


def make_client():
    client = Mock()
    client.close = AsyncMock()
    return client


@pytest.fixture(autouse=True)
def clear_jobs():
    server._research_jobs.clear()
    with patch("mcp_server.server.schedule_cleanup"), patch(
        "mcp_server.server.ModelFactory.create_client", side_effect=make_client
    ):
        yield
    server._research_jobs.clear()


class TestJobLifecycle:
    """Test cases for running research jobs."""

    def test_progress_tracks_events(self):
        """Test that events update the job's progress counters."""
        job_id = server.create_job("q")

        server.record_event(job_id, ReasoningEvent(number=1, content="think"))
        server.record_event(job_id, ToolCallEvent(number=1, tool="firecrawl_search", parameters={}))
        server.record_event(job_id, ToolResultEvent(tool="web_search", duration=250, result="r"))

        progress = server.get_job(job_id)["progress"]
        assert progress["reasoning_count"] == 1
        assert progress["tool_call_count"] == 1
        assert progress["last_tool"] == "firecrawl_search"
        assert progress["last_tool_duration"] == 250

        server.record_event(job_id, FinalAnswerEvent(content="a"))
        assert server.get_job(job_id)["progress"]["last_tool"] is None

    def test_successful_job(self):
        """Test that a finished run stores the answer."""
        orchestrator = Mock()
        orchestrator.run = AsyncMock(return_value="The answer")
        job_id = server.create_job("q")

        with patch("mcp_server.server.create_orchestrator", return_value=orchestrator):
            server.execute_research_job_sync(job_id, "q")

        job = server.get_job(job_id)
        assert job["status"] == server.JobStatus.COMPLETED
        assert job["result"] == "The answer"
        assert job["started_at"] is not None
        assert job["completed_at"] is not None

    def test_failed_job_keeps_friendly_error(self):
        """Test that a fatal error is stored with its explanation."""
        orchestrator = Mock()
        orchestrator.run = AsyncMock(
            side_effect=ModelBoundaryError("Beta feature error: nope", FailureKind.FEATURE_NOT_ENABLED)
        )
        job_id = server.create_job("q")

        with patch("mcp_server.server.create_orchestrator", return_value=orchestrator):
            server.execute_research_job_sync(job_id, "q")

        job = server.get_job(job_id)
        assert job["status"] == server.JobStatus.FAILED
        assert "interleaved thinking" in job["error"]
        assert job["original_error"] == "Beta feature error: nope"


class TestJobClients:
    """Test cases for the per-job model client."""

    def test_orchestrator_uses_given_client(self):
        """Test that the job's client reaches the reasoning model."""
        client = make_client()

        orchestrator = server.create_orchestrator(client)

        assert orchestrator.model.client is client

    def test_back_to_back_jobs_get_their_own_client(self):
        """Test that consecutive jobs never share a client across event loops."""
        clients = [make_client(), make_client()]
        used = []

        def build(**kwargs):
            orchestrator = Mock()
            used.append(kwargs["model"].client)
            orchestrator.run = AsyncMock(return_value=f"answer {len(used)}")
            return orchestrator

        first = server.create_job("first")
        second = server.create_job("second")
        with patch(
            "mcp_server.server.ModelFactory.create_client", side_effect=clients
        ), patch("mcp_server.server.ResearchOrchestrator", side_effect=build):
            server.execute_research_job_sync(first, "first")
            server.execute_research_job_sync(second, "second")

        assert used == clients
        for client in clients:
            client.close.assert_awaited_once()
        assert server.get_job(first)["status"] == server.JobStatus.COMPLETED
        assert server.get_job(second)["status"] == server.JobStatus.COMPLETED
        assert server.get_job(second)["result"] == "answer 2"

    def test_client_closed_when_run_fails(self):
        """Test that a failing run still closes its client."""
        client = make_client()
        orchestrator = Mock()
        orchestrator.run = AsyncMock(side_effect=RuntimeError("boom"))
        job_id = server.create_job("q")

        with patch(
            "mcp_server.server.ModelFactory.create_client", return_value=client
        ), patch("mcp_server.server.create_orchestrator", return_value=orchestrator):
            server.execute_research_job_sync(job_id, "q")

        client.close.assert_awaited_once()
        assert server.get_job(job_id)["status"] == server.JobStatus.FAILED

    def test_missing_credentials_fail_the_job(self):
        """Test that a client that cannot be built fails the job cleanly."""
        job_id = server.create_job("q")

        with patch(
            "mcp_server.server.ModelFactory.create_client",
            side_effect=ConfigurationError("ANTHROPIC_API_KEY is not set"),
        ):
            server.execute_research_job_sync(job_id, "q")

        job = server.get_job(job_id)
        assert job["status"] == server.JobStatus.FAILED
        assert job["original_error"] == "ANTHROPIC_API_KEY is not set"


class TestTools:
    """Test cases for the MCP tool functions."""

    @pytest.mark.asyncio
    async def test_report_for_unknown_job(self):
        assert "not found" in await server.get_research_report("missing")

    @pytest.mark.asyncio
    async def test_report_in_progress_shows_counts(self):
        job_id = server.create_job("q")
        server.update_job_status(job_id, server.JobStatus.IN_PROGRESS)
        server.record_event(job_id, ToolCallEvent(number=2, tool="firecrawl_scrape", parameters={}))

        report = await server.get_research_report(job_id)

        assert "IN PROGRESS" in report
        assert "Tool calls: 2" in report
        assert "Last tool: firecrawl_scrape" in report

    @pytest.mark.asyncio
    async def test_report_completed_includes_answer(self):
        job_id = server.create_job("q")
        server.update_job_status(job_id, server.JobStatus.COMPLETED, result="Final text")

        report = await server.get_research_report(job_id)

        assert "COMPLETED" in report
        assert report.endswith("Final text")

    @pytest.mark.asyncio
    async def test_list_jobs(self):
        assert await server.list_research_jobs() == "No active research jobs found."

        server.create_job("a question")

        assert "a question" in await server.list_research_jobs()

    @pytest.mark.asyncio
    async def test_follow_up_questions(self):
        with patch(
            "mcp_server.server.generate_follow_up_questions",
            AsyncMock(return_value=["One?", "Two?"]),
        ):
            assert await server.suggest_follow_up_questions("q") == "1. One?\n2. Two?"

    @pytest.mark.asyncio
    async def test_check_environment(self):
        settings = Mock()
        settings.environment_status.return_value = {
            "FIRECRAWL_API_KEY": True,
            "ANTHROPIC_API_KEY": False,
        }
        with patch("mcp_server.server.get_settings", return_value=settings):
            result = await server.check_environment()

        assert "✅ FIRECRAWL_API_KEY: configured" in result
        assert "❌ ANTHROPIC_API_KEY: missing" in result
