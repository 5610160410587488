"""
Logger Configuration Module

Handles logging setup for research runs and tool execution.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from strands.telemetry import StrandsTelemetry

from .settings import get_settings

# Load environment variables from .env file
load_dotenv()

# Initialize Strands telemetry so traces can be exported over OTLP
strands_telemetry = StrandsTelemetry()
if "OTEL_EXPORTER_OTLP_ENDPOINT" in os.environ:
    strands_telemetry.setup_otlp_exporter()

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def create_logger(log_dir: str) -> logging.Logger:
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    # Package logger collects module-level logging from open_researcher.*
    package_logger = logging.getLogger("open_researcher")
    package_logger.setLevel(logging.DEBUG)
    file_handler = logging.FileHandler(
        Path(log_dir) / "open_researcher.log", encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(file_handler)

    # Research logger records one line per run milestone
    research_handler = logging.FileHandler(
        Path(log_dir) / "research_results.log", encoding="utf-8"
    )
    research_handler.setFormatter(logging.Formatter("%(message)s"))

    research_logger = logging.getLogger("research")
    research_logger.setLevel(logging.INFO)
    research_logger.addHandler(research_handler)

    return research_logger


research_logger: logging.Logger | None = None


def setup_logging() -> logging.Logger:
    global research_logger
    if research_logger is None:
        research_logger = create_logger(get_settings().log_dir)
    return research_logger


def get_tool_logger() -> logging.Logger:
    """Dedicated logger for search/scrape operations."""
    tool_logger = logging.getLogger("web_tools")
    if not tool_logger.handlers:
        log_dir = Path(get_settings().log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / "web_tools.log", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
        tool_logger.addHandler(handler)
        tool_logger.setLevel(logging.DEBUG)
    return tool_logger
