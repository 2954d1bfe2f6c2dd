"""
Configuration for action extraction.

Settings for the LLM integration used to turn a thought into proposed
actions.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractionSettings(BaseSettings):
    """Settings for the extraction engine and LLM integration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EXTRACTION_",
        case_sensitive=False,
        extra="ignore",
    )

    # Anthropic API Configuration
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key for Claude models",
    )
    anthropic_model: str = Field(
        default="claude-3-5-sonnet-20241022",
        description="Claude model to use for extraction",
    )
    anthropic_max_tokens: int = Field(
        default=2048,
        ge=1,
        le=8192,
        description="Maximum tokens for LLM response",
    )
    anthropic_temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Temperature for LLM sampling",
    )
    anthropic_timeout: int = Field(
        default=60,
        ge=1,
        le=300,
        description="Timeout for API requests in seconds",
    )
    anthropic_max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Maximum retry attempts for failed requests",
    )

    # Prompt Configuration
    include_handler_examples: bool = Field(
        default=True,
        description="Render handler examples into the prompt",
    )


@lru_cache
def get_extraction_settings() -> ExtractionSettings:
    """
    Get cached extraction settings instance.

    Returns:
        Cached ExtractionSettings instance
    """
    return ExtractionSettings()
