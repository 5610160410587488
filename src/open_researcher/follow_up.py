"""
Follow-up question generation.

Asks a small, fast model for questions that would extend a research query.
"""

import json
import logging
from typing import Any

from .errors import classify_model_error
from .models import get_model_client
from .settings import get_settings

logger = logging.getLogger(__name__)

FOLLOW_UP_PROMPT = """Based on this search query: "{query}"

Generate 5 relevant follow-up questions that would help explore this topic further. The questions should:
1. Be directly related to the original query
2. Explore different aspects or deeper details
3. Be concise and clear

Format the response as a JSON array of strings, like:
["question 1", "question 2", "question 3", "question 4", "question 5"]

Only return the JSON array, nothing else."""


def parse_questions(text: str) -> list[str]:
    """Parse a JSON array of questions; anything else yields an empty list."""
    try:
        questions = json.loads(text)
    except json.JSONDecodeError:
        logger.warning(f"Follow-up response was not JSON: {text[:200]!r}")
        return []
    if not isinstance(questions, list):
        logger.warning("Follow-up response was not a JSON array")
        return []
    return [str(question) for question in questions]


async def generate_follow_up_questions(
    query: str, client: Any = None, model: str | None = None
) -> list[str]:
    """
    Suggest follow-up questions for a research query.

    Args:
        query: The original research question
        client: Async Anthropic client; defaults to the process-wide client
        model: Model id; defaults to the configured follow-up model

    Returns:
        Up to five questions, or an empty list when the reply cannot be parsed

    Raises:
        ConfigurationError: If the model credential is missing
        ModelBoundaryError: If the model request fails
    """
    client = client or get_model_client()
    model = model or get_settings().follow_up_model_id

    try:
        response = await client.messages.create(
            model=model,
            max_tokens=300,
            temperature=0.7,
            messages=[{"role": "user", "content": FOLLOW_UP_PROMPT.format(query=query)}],
        )
    except Exception as e:
        raise classify_model_error(e, model) from e

    if not response.content or getattr(response.content[0], "type", None) != "text":
        logger.warning("Follow-up response did not start with a text block")
        return []
    return parse_questions(response.content[0].text)
