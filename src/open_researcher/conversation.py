"""
Conversation state for one research run.

A conversation is an ordered list of turns. User turns hold the query or tool
results; assistant turns hold reasoning, preliminary text and at most one tool
request. Segments convert to and from the provider's message blocks.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Union


@dataclass(frozen=True)
class Reasoning:
    """Intermediate model thinking, replayed with its signature on continuation."""

    text: str
    signature: str | None = None
    redacted_data: str | None = None

    @property
    def redacted(self) -> bool:
        return self.redacted_data is not None

    def to_block(self) -> dict[str, Any]:
        if self.redacted_data is not None:
            return {"type": "redacted_thinking", "data": self.redacted_data}
        block: dict[str, Any] = {"type": "thinking", "thinking": self.text}
        if self.signature is not None:
            block["signature"] = self.signature
        return block


@dataclass(frozen=True)
class ToolRequest:
    id: str
    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def to_block(self) -> dict[str, Any]:
        return {
            "type": "tool_use",
            "id": self.id,
            "name": self.tool_name,
            "input": self.arguments,
        }


@dataclass(frozen=True)
class ToolResult:
    id: str
    text: str

    def to_block(self) -> dict[str, Any]:
        return {"type": "tool_result", "tool_use_id": self.id, "content": self.text}


@dataclass(frozen=True)
class FinalAnswer:
    """Model text. Preliminary when it precedes a tool request in the same turn."""

    text: str

    def to_block(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


Segment = Union[Reasoning, ToolRequest, ToolResult, FinalAnswer]


@dataclass
class Turn:
    role: Literal["user", "assistant"]
    content: str | list[Segment]

    def to_message(self) -> dict[str, Any]:
        if isinstance(self.content, str):
            return {"role": self.role, "content": self.content}
        return {
            "role": self.role,
            "content": [segment.to_block() for segment in self.content],
        }


class Conversation:
    """Accumulates turns for a single run; discarded when the run ends."""

    def __init__(self, query: str):
        self.turns: list[Turn] = [Turn(role="user", content=query)]

    def add_assistant_turn(self, segments: list[Segment]) -> None:
        self.turns.append(Turn(role="assistant", content=list(segments)))

    def add_tool_result(self, result: ToolResult) -> None:
        self.turns.append(Turn(role="user", content=[result]))

    def to_messages(self) -> list[dict[str, Any]]:
        """Render the history in the provider's message format."""
        return [turn.to_message() for turn in self.turns]

    def unresolved_requests(self) -> list[str]:
        """
        Ids of tool requests not answered by the immediately following user turn.

        An empty list means every request has exactly one matching result.
        """
        unresolved = []
        for position, turn in enumerate(self.turns):
            if turn.role != "assistant" or isinstance(turn.content, str):
                continue
            request_ids = [s.id for s in turn.content if isinstance(s, ToolRequest)]
            if not request_ids:
                continue
            following = (
                self.turns[position + 1] if position + 1 < len(self.turns) else None
            )
            answered = []
            if following is not None and not isinstance(following.content, str):
                answered = [
                    s.id for s in following.content if isinstance(s, ToolResult)
                ]
            unresolved.extend(rid for rid in request_ids if answered.count(rid) != 1)
        return unresolved

    def __len__(self) -> int:
        return len(self.turns)
