"""
Unit tests for follow-up question generation.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock, patch

import pytest

from open_researcher.errors import FailureKind, ModelBoundaryError
from open_researcher.follow_up import generate_follow_up_questions, parse_questions
from open_researcher.settings import Settings


def client_returning(text: str):
    client = Mock()
    client.messages.create = AsyncMock(
        return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])
    )
    return client


class TestGenerateFollowUpQuestions:
    """Test cases for generate_follow_up_questions."""

    @pytest.mark.asyncio
    async def test_parses_json_array(self):
        client = client_returning('["What changed?", "Who uses it?"]')

        questions = await generate_follow_up_questions("firecrawl", client=client, model="haiku")

        assert questions == ["What changed?", "Who uses it?"]
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "haiku"
        assert kwargs["max_tokens"] == 300
        assert kwargs["temperature"] == 0.7
        assert 'Based on this search query: "firecrawl"' in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_unparseable_reply_is_empty(self):
        client = client_returning("Here are some questions: 1. Why?")

        assert await generate_follow_up_questions("q", client=client, model="m") == []

    @pytest.mark.asyncio
    async def test_non_text_block_is_empty(self):
        client = Mock()
        client.messages.create = AsyncMock(
            return_value=SimpleNamespace(content=[SimpleNamespace(type="tool_use")])
        )

        assert await generate_follow_up_questions("q", client=client, model="m") == []

    @pytest.mark.asyncio
    async def test_model_failure_is_classified(self):
        client = Mock()
        client.messages.create = AsyncMock(side_effect=Exception("authentication_error"))

        with pytest.raises(ModelBoundaryError) as exc_info:
            await generate_follow_up_questions("q", client=client, model="m")

        assert exc_info.value.kind is FailureKind.AUTHENTICATION

    @pytest.mark.asyncio
    async def test_bedrock_provider_uses_bedrock_model_id(self):
        client = client_returning('["Next?"]')
        settings = Settings(_env_file=None, model_provider="bedrock")

        with patch("open_researcher.follow_up.get_settings", return_value=settings):
            await generate_follow_up_questions("q", client=client)

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == settings.bedrock_follow_up_model


class TestParseQuestions:
    def test_object_is_not_a_list(self):
        assert parse_questions('{"questions": ["a"]}') == []

    def test_items_become_strings(self):
        assert parse_questions('["a", 2]') == ["a", "2"]
