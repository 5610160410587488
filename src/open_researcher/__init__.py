"""
Open Researcher Package

An agentic research loop: a reasoning model thinks, calls web search and
scrape tools, observes their results, and repeats until it can answer.
"""

from open_researcher.errors import (
    ConfigurationError,
    FailureKind,
    ModelBoundaryError,
    ResearchError,
    TurnLimitError,
)
from open_researcher.events import Event, EventType
from open_researcher.executor import ToolExecutor
from open_researcher.follow_up import generate_follow_up_questions
from open_researcher.logger import setup_logging
from open_researcher.orchestrator import ResearchOrchestrator
from open_researcher.streaming import stream_research

__version__ = "1.0.0"
__all__ = [
    "ConfigurationError",
    "Event",
    "EventType",
    "FailureKind",
    "ModelBoundaryError",
    "ResearchError",
    "ResearchOrchestrator",
    "ToolExecutor",
    "TurnLimitError",
    "generate_follow_up_questions",
    "setup_logging",
    "stream_research",
]
