"""
Configuration settings for processing rate limits.

Defines the minimum spacing between processing requests, the per-day
dispatch ceiling and the reprocess ceiling.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimiterSettings(BaseSettings):
    """Settings for per-user processing limits."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RATE_LIMITER_",
        case_sensitive=False,
        extra="ignore",
    )

    min_interval_seconds: float = Field(
        default=10.0,
        ge=0,
        le=3600,
        description="Minimum seconds between two processing requests",
    )

    max_processing_per_day: int = Field(
        default=50,
        ge=1,
        description="Completed runs allowed per user per UTC day",
    )

    max_reprocess_count: int = Field(
        default=3,
        ge=0,
        description="Reprocess runs allowed per thought",
    )


@lru_cache
def get_rate_limiter_settings() -> RateLimiterSettings:
    """
    Get cached rate limiter settings instance.

    Returns:
        RateLimiterSettings: Cached settings instance
    """
    return RateLimiterSettings()
