"""
Open Researcher - Command Line Entry Point

Runs one research query and prints the agent's reasoning, tool calls and
final answer as they happen.
"""

import argparse
import asyncio
import sys

from open_researcher import ResearchOrchestrator, ResearchError
from open_researcher.events import (
    Event,
    FinalAnswerEvent,
    ReasoningEvent,
    StartEvent,
    SummaryEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from open_researcher.follow_up import generate_follow_up_questions
from open_researcher.settings import get_settings
from open_researcher.streaming import stream_research, user_friendly_error

PREVIEW_CHARS = 300


def print_event(event: Event) -> None:
    """Print one research event in a human-readable form."""
    if isinstance(event, StartEvent):
        print(f"📋 Query: {event.query}")
        print("=" * 50)
    elif isinstance(event, ReasoningEvent):
        print(f"\n🧠 Thinking #{event.number}:")
        print(event.content)
    elif isinstance(event, ToolCallEvent):
        print(f"\n🔧 Tool call #{event.number}: {event.tool} {event.parameters}")
    elif isinstance(event, ToolResultEvent):
        preview = event.result[:PREVIEW_CHARS]
        print(f"📥 {event.tool} finished in {event.duration} ms")
        print(f"{preview}{'...' if len(event.result) > PREVIEW_CHARS else ''}")
        if event.artifacts:
            print(f"🖼️  {len(event.artifacts)} screenshot(s) captured")
    elif isinstance(event, FinalAnswerEvent):
        print("\n🎯 FINAL ANSWER:")
        print("=" * 60)
        print(event.content)
        print("=" * 60)
    elif isinstance(event, SummaryEvent):
        print(
            f"\n📊 {event.reasoning_count} reasoning steps, {event.tool_call_count} tool calls"
        )


def check_environment() -> int:
    status = get_settings().environment_status()
    for name, present in status.items():
        print(f"{'✅' if present else '❌'} {name}: {'configured' if present else 'missing'}")
    return 0 if all(status.values()) else 1


async def print_follow_ups(query: str) -> None:
    try:
        questions = await generate_follow_up_questions(query)
    except ResearchError as e:
        print(f"❌ Could not generate follow-up questions: {user_friendly_error(e)}")
        return
    if questions:
        print("\n💡 Follow-up questions:")
        for i, question in enumerate(questions, 1):
            print(f"   {i}. {question}")


async def run(args: argparse.Namespace) -> int:
    orchestrator = ResearchOrchestrator(max_turns=args.max_turns)

    if args.stream:
        async for line in stream_research(orchestrator, args.query):
            sys.stdout.write(line)
            sys.stdout.flush()
    else:
        print("🚀 Open Researcher")
        try:
            await orchestrator.run(args.query, print_event)
        except ResearchError as e:
            print(f"❌ Error during research: {user_friendly_error(e)}")
            print(f"   Details: {e}")
            return 1

    if args.follow_ups:
        await print_follow_ups(args.query)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Agentic web research with interleaved reasoning and tool use",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  open-researcher "What is the 3rd blog post on firecrawl.dev?"
  open-researcher "latest AI news" --follow-ups
  open-researcher --check-env
        """,
    )
    parser.add_argument("query", nargs="?", help="Research question")
    parser.add_argument(
        "--stream",
        action="store_true",
        help="Print raw event-stream lines instead of formatted output",
    )
    parser.add_argument(
        "--follow-ups",
        action="store_true",
        help="Suggest follow-up questions after the answer",
    )
    parser.add_argument(
        "--max-turns",
        type=int,
        default=None,
        help="Maximum model turns per run (0 disables the cap)",
    )
    parser.add_argument(
        "--check-env",
        action="store_true",
        help="Report which required API keys are configured and exit",
    )

    args = parser.parse_args()

    if args.check_env:
        sys.exit(check_environment())
    if not args.query:
        parser.error("a research query is required")

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
