"""
Application Settings

Centralized configuration using Pydantic Settings for type safety and validation.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation and type safety."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Credentials (validated when the clients are first constructed)
    anthropic_api_key: str = ""
    firecrawl_api_key: str = ""

    # Model settings
    model_provider: Literal["anthropic", "bedrock"] = "anthropic"
    anthropic_model: str = "claude-opus-4-20250514"
    follow_up_model: str = "claude-3-haiku-20240307"
    max_tokens: int = 8000
    thinking_budget_tokens: int = 20000
    interleaved_thinking_beta: str = "interleaved-thinking-2025-05-14"

    # Bedrock settings
    bedrock_model: str = "us.anthropic.claude-opus-4-20250514-v1:0"
    bedrock_follow_up_model: str = "anthropic.claude-3-haiku-20240307-v1:0"
    bedrock_region: str = "us-east-1"

    # Agent loop; 0 means no cap
    max_turns: int = 50

    # Firecrawl settings
    firecrawl_base_url: str = "https://api.firecrawl.dev"
    firecrawl_timeout: float = 120.0
    firecrawl_max_retries: int = 3

    log_dir: str = "logs"

    @property
    def model_id(self) -> str:
        """Model identifier for the configured provider."""
        if self.model_provider == "bedrock":
            return self.bedrock_model
        return self.anthropic_model

    @property
    def follow_up_model_id(self) -> str:
        """Follow-up question model identifier for the configured provider."""
        if self.model_provider == "bedrock":
            return self.bedrock_follow_up_model
        return self.follow_up_model

    def environment_status(self) -> dict[str, bool]:
        """Report which required credentials are configured, without their values."""
        return {
            "FIRECRAWL_API_KEY": bool(self.firecrawl_api_key),
            "ANTHROPIC_API_KEY": bool(self.anthropic_api_key),
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
