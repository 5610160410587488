"""
Events emitted by the research loop.

One immutable record per controller transition, delivered to the caller's
callback in emission order. Each variant has a fixed payload shape.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Union

from .types import VisualArtifact


class EventType(str, Enum):
    START = "start"
    REASONING = "reasoning"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    FINAL_ANSWER = "final_answer"
    SUMMARY = "summary"


@dataclass(frozen=True)
class StartEvent:
    query: str
    type: EventType = field(default=EventType.START, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "query": self.query}


@dataclass(frozen=True)
class ReasoningEvent:
    number: int
    content: str
    type: EventType = field(default=EventType.REASONING, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "number": self.number, "content": self.content}


@dataclass(frozen=True)
class ToolCallEvent:
    number: int
    tool: str
    parameters: dict[str, Any]
    type: EventType = field(default=EventType.TOOL_CALL, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "number": self.number,
            "tool": self.tool,
            "parameters": self.parameters,
        }


@dataclass(frozen=True)
class ToolResultEvent:
    tool: str
    duration: int
    result: str
    artifacts: tuple[VisualArtifact, ...] = ()
    type: EventType = field(default=EventType.TOOL_RESULT, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "tool": self.tool,
            "duration": self.duration,
            "result": self.result,
            "artifacts": [artifact.to_dict() for artifact in self.artifacts],
        }


@dataclass(frozen=True)
class FinalAnswerEvent:
    content: str
    type: EventType = field(default=EventType.FINAL_ANSWER, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "content": self.content}


@dataclass(frozen=True)
class SummaryEvent:
    reasoning_count: int
    tool_call_count: int
    type: EventType = field(default=EventType.SUMMARY, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "reasoningCount": self.reasoning_count,
            "toolCallCount": self.tool_call_count,
        }


Event = Union[
    StartEvent,
    ReasoningEvent,
    ToolCallEvent,
    ToolResultEvent,
    FinalAnswerEvent,
    SummaryEvent,
]

EventCallback = Callable[[Event], None]
