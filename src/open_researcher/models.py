"""
Reasoning Model Boundary

Client factory for the Anthropic API (direct or via Bedrock) and the adapter
that submits a conversation and returns the response as ordered segments.
"""

import logging
from typing import Any

import anthropic

from .conversation import FinalAnswer, Reasoning, Segment, ToolRequest
from .errors import ConfigurationError, classify_model_error
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


class ModelFactory:
    """Factory for creating model clients based on configuration."""

    @staticmethod
    def create_client(settings: Settings | None = None) -> Any:
        """
        Create an async Anthropic client for the configured provider.

        Args:
            settings: Settings to read; defaults to the cached process settings

        Returns:
            AsyncAnthropic or AsyncAnthropicBedrock client

        Raises:
            ConfigurationError: If the provider's credential is missing
        """
        settings = settings or get_settings()
        if settings.model_provider == "bedrock":
            return ModelFactory._create_bedrock_client(settings)
        return ModelFactory._create_anthropic_client(settings)

    @staticmethod
    def _create_anthropic_client(settings: Settings) -> anthropic.AsyncAnthropic:
        if not settings.anthropic_api_key:
            raise ConfigurationError(
                "ANTHROPIC_API_KEY environment variable is not set"
            )
        return anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)

    @staticmethod
    def _create_bedrock_client(settings: Settings) -> anthropic.AsyncAnthropicBedrock:
        # AWS credentials come from the standard boto credential chain
        return anthropic.AsyncAnthropicBedrock(aws_region=settings.bedrock_region)

    @staticmethod
    def get_supported_providers() -> dict[str, str]:
        """Get list of supported model providers."""
        return {"anthropic": "Anthropic API", "bedrock": "AWS Bedrock service"}


_model_client: Any = None


def get_model_client() -> Any:
    """Get or create the process-wide model client (lazy initialization)."""
    global _model_client
    if _model_client is None:
        _model_client = ModelFactory.create_client()
    return _model_client


def reset_model_client() -> None:
    global _model_client
    _model_client = None


def segments_from_content(blocks: list[Any]) -> list[Segment]:
    """
    Convert provider content blocks into ordered segments.

    Unknown block types are skipped.
    """
    segments: list[Segment] = []
    for block in blocks:
        block_type = getattr(block, "type", None)
        if block_type == "thinking":
            segments.append(
                Reasoning(
                    text=getattr(block, "thinking", "") or "",
                    signature=getattr(block, "signature", None),
                )
            )
        elif block_type == "redacted_thinking":
            segments.append(Reasoning(text="", redacted_data=block.data))
        elif block_type == "tool_use":
            segments.append(
                ToolRequest(
                    id=block.id,
                    tool_name=block.name,
                    arguments=dict(getattr(block, "input", None) or {}),
                )
            )
        elif block_type == "text":
            segments.append(FinalAnswer(text=getattr(block, "text", "") or ""))
        else:
            logger.debug("Skipping unsupported content block type %s", block_type)
    return segments


class ReasoningModel:
    """Submits conversations with interleaved thinking and tool use enabled."""

    def __init__(
        self,
        client: Any = None,
        *,
        model_id: str,
        max_tokens: int = 8000,
        thinking_budget_tokens: int = 20000,
        beta: str | None = "interleaved-thinking-2025-05-14",
    ):
        self._client = client
        self.model_id = model_id
        self.max_tokens = max_tokens
        self.thinking_budget_tokens = thinking_budget_tokens
        self.beta = beta

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, client: Any = None
    ) -> "ReasoningModel":
        settings = settings or get_settings()
        return cls(
            client,
            model_id=settings.model_id,
            max_tokens=settings.max_tokens,
            thinking_budget_tokens=settings.thinking_budget_tokens,
            beta=settings.interleaved_thinking_beta or None,
        )

    @property
    def client(self) -> Any:
        """The underlying client, created on first use."""
        if self._client is None:
            self._client = get_model_client()
        return self._client

    async def respond(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> list[Segment]:
        """
        Submit the full history and return the response segments in order.

        Raises:
            ModelBoundaryError: If the request fails, with the failure classified
        """
        request: dict[str, Any] = {
            "model": self.model_id,
            "max_tokens": self.max_tokens,
            "system": system,
            "thinking": {
                "type": "enabled",
                "budget_tokens": self.thinking_budget_tokens,
            },
            "tools": tools,
            "messages": messages,
        }
        if self.beta:
            request["betas"] = [self.beta]

        client = self.client
        try:
            response = await client.beta.messages.create(**request)
        except Exception as e:
            raise classify_model_error(e, self.model_id, self.beta) from e

        logger.debug(
            "Model %s returned %d blocks (stop_reason=%s)",
            self.model_id,
            len(response.content),
            getattr(response, "stop_reason", None),
        )
        return segments_from_content(response.content)
