"""
Research MCP Server Implementation

Exposes the research loop as background jobs over the Model Context Protocol.
Jobs live in process memory only and are dropped after a timeout.
"""

import asyncio
import sys
import threading
import uuid
from datetime import datetime, timedelta
from typing import Any

from mcp.server.fastmcp import FastMCP

# Redirect print statements to stderr to avoid breaking MCP JSON protocol
import builtins

original_print = builtins.print


def mcp_safe_print(*args, **kwargs):
    kwargs["file"] = kwargs.get("file", sys.stderr)
    original_print(*args, **kwargs)


builtins.print = mcp_safe_print

from open_researcher import ResearchOrchestrator  # noqa: E402
from open_researcher.events import (  # noqa: E402
    Event,
    FinalAnswerEvent,
    ReasoningEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from open_researcher.follow_up import generate_follow_up_questions  # noqa: E402
from open_researcher.models import ModelFactory, ReasoningModel  # noqa: E402
from open_researcher.settings import get_settings  # noqa: E402
from open_researcher.streaming import user_friendly_error  # noqa: E402

# Create the FastMCP server instance
mcp = FastMCP("Open Researcher")

# Job storage system
_research_jobs: dict[str, dict[str, Any]] = {}

COMPLETED_JOB_TTL_SECONDS = 3600
FAILED_JOB_TTL_SECONDS = 600


class JobStatus:
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


def create_orchestrator(client: Any = None) -> ResearchOrchestrator:
    """Create a fresh research orchestrator instance for each job."""
    return ResearchOrchestrator(model=ReasoningModel.from_settings(client=client))


def create_job(query: str) -> str:
    """Create a new research job and return job ID."""
    job_id = str(uuid.uuid4())
    _research_jobs[job_id] = {
        "id": job_id,
        "query": query,
        "status": JobStatus.PENDING,
        "created_at": datetime.now().isoformat(),
        "started_at": None,
        "completed_at": None,
        "result": None,
        "error": None,
        "progress": {
            "reasoning_count": 0,
            "tool_call_count": 0,
            "last_tool": None,
            "last_tool_duration": None,
        },
    }
    return job_id


def get_job(job_id: str) -> dict[str, Any] | None:
    """Get job by ID."""
    return _research_jobs.get(job_id)


def update_job_status(job_id: str, status: str, **kwargs) -> None:
    """Update job status and other fields."""
    if job_id in _research_jobs:
        _research_jobs[job_id]["status"] = status
        if status == JobStatus.IN_PROGRESS:
            _research_jobs[job_id]["started_at"] = datetime.now().isoformat()
        elif status in [JobStatus.COMPLETED, JobStatus.FAILED]:
            _research_jobs[job_id]["completed_at"] = datetime.now().isoformat()

        for key, value in kwargs.items():
            _research_jobs[job_id][key] = value


def record_event(job_id: str, event: Event) -> None:
    """Fold a research event into the job's progress."""
    job = _research_jobs.get(job_id)
    if job is None:
        return
    progress = job["progress"]
    if isinstance(event, ReasoningEvent):
        progress["reasoning_count"] = event.number
    elif isinstance(event, ToolCallEvent):
        progress["tool_call_count"] = event.number
        progress["last_tool"] = event.tool
    elif isinstance(event, ToolResultEvent):
        progress["last_tool_duration"] = event.duration
    elif isinstance(event, FinalAnswerEvent):
        progress["last_tool"] = None


def schedule_cleanup(job_id: str, delay_seconds: int) -> None:
    cleanup_timer = threading.Timer(delay_seconds, lambda: cleanup_job_sync(job_id))
    cleanup_timer.daemon = True
    cleanup_timer.start()


def execute_research_job_sync(job_id: str, query: str) -> None:
    """Execute research job in background thread (synchronous wrapper)."""
    update_job_status(job_id, JobStatus.IN_PROGRESS)

    # Run the async orchestrator in a new event loop (thread-safe)
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    # Pooled connections are bound to the loop that opened them
    client = None

    try:
        client = ModelFactory.create_client()
        orchestrator = create_orchestrator(client)
        answer = loop.run_until_complete(
            orchestrator.run(query, lambda event: record_event(job_id, event))
        )
        update_job_status(job_id, JobStatus.COMPLETED, result=answer)
        schedule_cleanup(job_id, COMPLETED_JOB_TTL_SECONDS)

    except Exception as e:
        update_job_status(
            job_id,
            JobStatus.FAILED,
            error=user_friendly_error(e),
            original_error=str(e),
        )
        schedule_cleanup(job_id, FAILED_JOB_TTL_SECONDS)

    finally:
        if client is not None:
            loop.run_until_complete(client.close())
        loop.close()


def cleanup_job_sync(job_id: str) -> None:
    """Clean up job synchronously."""
    if job_id in _research_jobs:
        del _research_jobs[job_id]


def cleanup_old_jobs() -> int:
    """Clean up jobs older than 24 hours. Returns number of jobs cleaned."""
    cutoff_time = datetime.now() - timedelta(hours=24)
    jobs_to_remove = [
        job_id
        for job_id, job in _research_jobs.items()
        if datetime.fromisoformat(job["created_at"]) < cutoff_time
    ]

    for job_id in jobs_to_remove:
        del _research_jobs[job_id]

    return len(jobs_to_remove)


def format_progress(progress: dict[str, Any]) -> str:
    lines = [
        f"Reasoning steps: {progress['reasoning_count']}",
        f"Tool calls: {progress['tool_call_count']}",
    ]
    if progress["last_tool"]:
        line = f"Last tool: {progress['last_tool']}"
        if progress["last_tool_duration"] is not None:
            line += f" ({progress['last_tool_duration']} ms)"
        lines.append(line)
    return "\n".join(lines)


@mcp.tool()
async def create_research_report(query: str) -> str:
    """
    <tool_description>
    Start an asynchronous web research run for a question.

    The research agent reasons step by step, searching the web and scraping
    pages with Firecrawl until it can answer. This tool returns immediately
    with a job ID.
    </tool_description>

    <tool_usage_guidelines>
    Use this tool for questions that need current information from the web,
    such as finding a specific blog post, reading documentation, or checking
    recent news.

    Use get_research_report(job_id) to check status and retrieve the answer.
    Research runs typically take 1-3 minutes.

    This tool calls paid APIs, so you MUST ASK the user for confirmation before running it.
    </tool_usage_guidelines>

    Args:
        query: The question to research, phrased as a single focused question

    Returns:
        Job ID and instructions for polling the research status
    """
    try:
        job_id = create_job(query)

        # Start background research in separate thread (truly detached!)
        research_thread = threading.Thread(
            target=execute_research_job_sync, args=(job_id, query), daemon=True
        )
        research_thread.start()

        return f"""Research job started successfully! 🚀

Job ID: {job_id}
Query: {query}

Your research is now running in the background. This typically takes 1-3 minutes.

Recommended workflow:
1. Wait for research to progress: wait_for_research_report(30)
2. Check status: get_research_report("{job_id}")
3. If still in progress, repeat: wait_for_research_report(30) then get_research_report("{job_id}")

Next step: Call wait_for_research_report(30), then check status."""

    except Exception as e:
        return f"Error starting research job: {str(e)}"


@mcp.tool()
async def get_research_report(job_id: str) -> str:
    """
    <tool_description>
    Check status of a research job and retrieve the answer when complete.
    </tool_description>

    <tool_usage_guidelines>
    Keep calling this tool with the same job_id until you receive a 'completed'
    or 'failed' status. When complete, present the answer and keep the source
    URLs it cites.
    </tool_usage_guidelines>

    Args:
        job_id: The job ID returned by create_research_report

    Returns:
        Job status with progress, the answer, or the failure explanation
    """
    job = get_job(job_id)

    if not job:
        return f"Job ID '{job_id}' not found. Please check the job ID and try again."

    status = job["status"]
    query = job["query"]

    if status == JobStatus.PENDING:
        return f"""Research Job Status: PENDING ⏳

Job ID: {job_id}
Query: {query}
Created: {job['created_at']}

Your research job is queued and will start shortly.

Next step: Call wait_for_research_report(30), then get_research_report("{job_id}")."""

    elif status == JobStatus.IN_PROGRESS:
        return f"""Research Job Status: IN PROGRESS 🔬

Job ID: {job_id}
Query: {query}
Started: {job['started_at']}

{format_progress(job['progress'])}

Next step: Call wait_for_research_report(30), then get_research_report("{job_id}") to check progress again."""

    elif status == JobStatus.COMPLETED:
        return f"""Research Job Status: COMPLETED ✅

Job ID: {job_id}
Query: {query}
Completed: {job['completed_at']}

{format_progress(job['progress'])}

Answer:

{job['result']}"""

    elif status == JobStatus.FAILED:
        return f"""Research Job Status: FAILED ❌

Job ID: {job_id}
Query: {query}
Failed: {job['completed_at']}
Error: {job['error']}

You can try creating a new research job with create_research_report if needed."""

    return f"Unknown job status: {status}"


# Waiting tool for clients without backgrounding, used between status checks
@mcp.tool()
async def wait_for_research_report(seconds: int = 30) -> str:
    """
    <tool_description>
    Wait for a specified number of seconds, then prompt to check research status again.
    </tool_description>

    <tool_usage_guidelines>
    Use this tool when a research job is IN PROGRESS and you need to wait
    before calling get_research_report again.
    </tool_usage_guidelines>

    Args:
        seconds: Number of seconds to wait (default: 30, clamped to 5-120)

    Returns:
        Message indicating wait is complete and next action to take
    """
    wait_seconds = max(5, min(seconds, 120))
    await asyncio.sleep(wait_seconds)

    return f"""⏳ Wait Complete!

Waited {wait_seconds} seconds as requested.

Next step: Call get_research_report("your_job_id") to check the current status of your research job."""


@mcp.tool()
async def list_research_jobs() -> str:
    """
    <tool_description>
    List all active research jobs with their current status.
    </tool_description>

    Returns:
        List of all research jobs with their status and basic information
    """
    cleaned = cleanup_old_jobs()

    if not _research_jobs:
        return "No active research jobs found."

    job_list = []
    for job_id, job in _research_jobs.items():
        status = job["status"]
        query = job["query"][:50] + "..." if len(job["query"]) > 50 else job["query"]
        created = job["created_at"][:19]  # Remove microseconds

        status_emoji = {
            JobStatus.PENDING: "⏳",
            JobStatus.IN_PROGRESS: "🔬",
            JobStatus.COMPLETED: "✅",
            JobStatus.FAILED: "❌",
        }.get(status, "❓")

        job_list.append(
            f"{status_emoji} {job_id[:8]}... | {status.upper()} | {query} | Created: {created}"
        )

    result = "Research Jobs:\n\n" + "\n".join(job_list)

    if cleaned > 0:
        result += f"\n\n(Cleaned up {cleaned} old jobs)"

    return result


@mcp.tool()
async def suggest_follow_up_questions(query: str) -> str:
    """
    <tool_description>
    Suggest follow-up questions that would explore a research query further.
    </tool_description>

    Args:
        query: The original research question

    Returns:
        A numbered list of questions, or an explanation if none were produced
    """
    try:
        questions = await generate_follow_up_questions(query)
    except Exception as e:
        return f"Failed to generate follow-up questions: {user_friendly_error(e)}"

    if not questions:
        return "No follow-up questions could be generated for this query."
    return "\n".join(f"{i}. {question}" for i, question in enumerate(questions, 1))


@mcp.tool()
async def check_environment() -> str:
    """
    <tool_description>
    Report whether the API keys research needs are configured. Values are never shown.
    </tool_description>

    Returns:
        One line per required credential
    """
    status = get_settings().environment_status()
    return "\n".join(
        f"{'✅' if present else '❌'} {name}: {'configured' if present else 'missing'}"
        for name, present in status.items()
    )


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
