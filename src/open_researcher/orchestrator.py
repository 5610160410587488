"""
Research Orchestration Logic

Agent loop controller: alternates reasoning-model turns with tool execution
until the model volunteers a final answer, emitting an event for every
transition.
"""

import time
import uuid
from enum import Enum

from .conversation import Conversation, FinalAnswer, Reasoning, Segment, ToolRequest, ToolResult
from .errors import ResearchError, TurnLimitError
from .events import (
    EventCallback,
    FinalAnswerEvent,
    ReasoningEvent,
    StartEvent,
    SummaryEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from .executor import ToolExecutor
from .logger import setup_logging
from .models import ReasoningModel
from .settings import get_settings
from .tools import display_name

RESEARCH_SYSTEM_PROMPT = """You are a research assistant with access to web search and scraping tools.

## TOOLS
- web_search: find pages. Supports operators such as site: and intitle:. Set scrape_content=true only when result snippets are not enough.
- deep_scrape: read one page in full. Pass link_filter only when you need the pages it links to.
- analyze_content: run a quick heuristic analysis over text you already fetched.

## FINDING ITEMS BY POSITION (e.g. "the 3rd blog post")
1. Navigate to the listing page first (search with site:example.com/blog, or scrape the blog index)
2. Listings are usually ordered newest to oldest; count from the top: 1st = newest
3. "The 5th blog post" means the 5th entry counting from the top, NOT a post with "5" in its title
4. Then scrape that specific post to read its content

## WORKING STYLE
- Be thorough and methodical; verify you have the right page before answering
- If a tool reports an error, adjust your approach instead of repeating the same call
- When you have enough information, answer directly and cite the URLs you used"""


class LoopState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    DISPATCHING_TOOL = "dispatching_tool"
    DONE = "done"
    FAILED = "failed"


class ResearchOrchestrator:
    """
    Drives one research conversation per run() call.

    Model and executor are injectable; by default they are built from settings
    and connect lazily to the process-wide clients.
    """

    def __init__(
        self,
        model: ReasoningModel | None = None,
        executor: ToolExecutor | None = None,
        *,
        max_turns: int | None = None,
        system_prompt: str = RESEARCH_SYSTEM_PROMPT,
    ):
        settings = get_settings()
        self.model = model or ReasoningModel.from_settings(settings)
        self.executor = executor or ToolExecutor()
        self.max_turns = settings.max_turns if max_turns is None else max_turns
        self.system_prompt = system_prompt

        # Set up logging
        self.research_logger = setup_logging()

    def _ensure_configured(self) -> None:
        # Constructing both clients validates credentials before the loop starts
        _ = self.model.client
        _ = self.executor.firecrawl

    async def run(self, query: str, on_event: EventCallback) -> str:
        """
        Research a query to completion.

        Args:
            query: Natural-language research question
            on_event: Called synchronously with each event, in order

        Returns:
            The model's final answer text

        Raises:
            ConfigurationError: If a required credential is missing
            ModelBoundaryError: If the reasoning model rejects or fails a request
            TurnLimitError: If the model is still requesting tools at the turn cap
        """
        self._ensure_configured()

        run_id = str(uuid.uuid4())
        run_start = time.time()
        self.research_logger.info(f"🚀 [{run_id}] Starting research for: {query}")

        conversation = Conversation(query)
        tools = self.executor.tool_catalogue()
        on_event(StartEvent(query=query))

        state = LoopState.AWAITING_MODEL
        reasoning_count = 0
        tool_call_count = 0
        model_calls = 0
        pending: ToolRequest | None = None
        final_answer = ""

        while state not in (LoopState.DONE, LoopState.FAILED):
            if state is LoopState.AWAITING_MODEL:
                if self.max_turns and model_calls >= self.max_turns:
                    state = LoopState.FAILED
                    self.research_logger.error(
                        f"❌ [{run_id}] Turn limit of {self.max_turns} reached"
                    )
                    raise TurnLimitError(
                        f"Research stopped after {self.max_turns} model turns without a final answer"
                    )

                model_calls += 1
                call_start = time.time()
                try:
                    segments = await self.model.respond(
                        system=self.system_prompt,
                        messages=conversation.to_messages(),
                        tools=tools,
                    )
                except ResearchError as e:
                    state = LoopState.FAILED
                    self.research_logger.error(
                        f"❌ [{run_id}] Model call {model_calls} failed ({e.kind.value}) after {time.time() - run_start:.2f} seconds: {e}"
                    )
                    raise
                self.research_logger.info(
                    f"🧠 [{run_id}] Model call {model_calls} returned {len(segments)} segments in {time.time() - call_start:.2f} seconds"
                )

                assistant_turn: list[Segment] = []
                answer_parts: list[str] = []
                has_request = any(isinstance(s, ToolRequest) for s in segments)

                for segment in segments:
                    if isinstance(segment, Reasoning):
                        assistant_turn.append(segment)
                        if not segment.redacted:
                            reasoning_count += 1
                            on_event(ReasoningEvent(number=reasoning_count, content=segment.text))
                    elif isinstance(segment, ToolRequest):
                        tool_call_count += 1
                        on_event(
                            ToolCallEvent(
                                number=tool_call_count,
                                tool=display_name(segment.tool_name),
                                parameters=segment.arguments,
                            )
                        )
                        assistant_turn.append(segment)
                        # The turn ends at the first request; the model re-issues anything else it still needs
                        pending = segment
                        break
                    elif isinstance(segment, FinalAnswer):
                        assistant_turn.append(segment)
                        # Text ahead of a tool request in the same response is preliminary
                        if not has_request:
                            answer_parts.append(segment.text)

                conversation.add_assistant_turn(assistant_turn)

                if pending is not None:
                    state = LoopState.DISPATCHING_TOOL
                else:
                    final_answer = "\n\n".join(part for part in answer_parts if part)
                    on_event(FinalAnswerEvent(content=final_answer))
                    state = LoopState.DONE

            elif state is LoopState.DISPATCHING_TOOL:
                if pending is None:
                    raise RuntimeError("Tool dispatch reached without a pending tool request")
                tool_start = time.time()
                outcome = await self.executor.execute(pending.tool_name, pending.arguments)
                duration = int((time.time() - tool_start) * 1000)
                self.research_logger.info(
                    f"🔧 [{run_id}] Tool {pending.tool_name} completed in {duration} ms"
                )

                on_event(
                    ToolResultEvent(
                        tool=pending.tool_name,
                        duration=duration,
                        result=outcome.text,
                        artifacts=outcome.artifacts,
                    )
                )
                conversation.add_tool_result(ToolResult(id=pending.id, text=outcome.text))
                pending = None
                state = LoopState.AWAITING_MODEL

        on_event(
            SummaryEvent(reasoning_count=reasoning_count, tool_call_count=tool_call_count)
        )
        self.research_logger.info(
            f"🎯 [{run_id}] Research finished in {time.time() - run_start:.2f} seconds "
            f"({model_calls} model calls, {tool_call_count} tool calls)"
        )
        return final_answer
