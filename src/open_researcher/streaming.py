"""
Reference line-oriented transport for research runs.

Each event is written as a `data: <json>` line followed by a blank line, the
answer as a `response` line, and the stream closes with `done`. A fatal
failure ends the stream with a single `error` line instead.
"""

import asyncio
import json
import logging
import time
from collections.abc import AsyncIterator
from typing import Any

from .errors import FailureKind, ResearchError
from .events import Event

logger = logging.getLogger(__name__)

FRIENDLY_ERRORS = {
    FailureKind.CONFIGURATION: "Research is not configured: {message}",
    FailureKind.AUTHENTICATION: "Invalid Anthropic API key. Please check your environment variables.",
    FailureKind.MODEL_UNAVAILABLE: "The Anthropic model is not available. This might be due to regional restrictions or API tier limitations.",
    FailureKind.FEATURE_NOT_ENABLED: "The interleaved thinking feature is not enabled for your Anthropic API key. This is a beta feature that may require special access.",
    FailureKind.TURN_LIMIT: "The research run stopped before reaching an answer because it hit the turn limit. Try a narrower question.",
}


def encode_line(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def format_event(event: Event, timestamp: int | None = None) -> str:
    """Encode an event as a transport line, stamped with epoch milliseconds."""
    body = event.to_dict()
    body["timestamp"] = int(time.time() * 1000) if timestamp is None else timestamp
    return encode_line({"type": "event", "event": body})


def error_kind(exc: BaseException) -> FailureKind:
    if isinstance(exc, ResearchError):
        return exc.kind
    return FailureKind.UNKNOWN


def user_friendly_error(exc: BaseException) -> str:
    """Human-readable explanation for a fatal research failure."""
    template = FRIENDLY_ERRORS.get(error_kind(exc))
    if template is None:
        return str(exc) or "Unknown error"
    return template.format(message=exc)


def format_error(exc: BaseException) -> str:
    return encode_line(
        {
            "type": "error",
            "error": user_friendly_error(exc),
            "originalError": str(exc) or "Unknown error",
            "kind": error_kind(exc).value,
        }
    )


_DONE = object()


async def stream_research(orchestrator: Any, query: str) -> AsyncIterator[str]:
    """
    Run a query and yield transport lines as events occur.

    Args:
        orchestrator: Anything with an async run(query, on_event) method
        query: Research question

    Yields:
        Encoded lines; the last one is either `done` or `error`
    """
    queue: asyncio.Queue[Any] = asyncio.Queue()

    async def produce() -> None:
        try:
            answer = await orchestrator.run(query, lambda event: queue.put_nowait(event))
        except Exception as e:
            logger.error(f"Research stream for {query!r} failed: {e}")
            queue.put_nowait(e)
        else:
            queue.put_nowait(answer)
        finally:
            queue.put_nowait(_DONE)

    producer = asyncio.create_task(produce())
    try:
        failed = False
        while True:
            item = await queue.get()
            if item is _DONE:
                break
            if isinstance(item, Exception):
                failed = True
                yield format_error(item)
            elif isinstance(item, str):
                if item:
                    yield encode_line({"type": "response", "content": item})
            else:
                yield format_event(item)
        if not failed:
            yield encode_line({"type": "done"})
    finally:
        if not producer.done():
            producer.cancel()
        await asyncio.gather(producer, return_exceptions=True)
