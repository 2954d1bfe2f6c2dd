"""
Configuration settings for snapshot caching.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Settings for the subscription snapshot cache."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CACHE_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: str = Field(
        default="memory",
        description="Cache backend: memory, redis or none",
    )

    snapshot_ttl_seconds: int = Field(
        default=60,
        ge=0,
        le=3600,
        description="Lifetime of cached subscription snapshots",
    )

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )

    socket_timeout: float = Field(
        default=5.0,
        ge=0.1,
        description="Socket timeout in seconds",
    )


@lru_cache
def get_cache_settings() -> CacheSettings:
    """
    Get cached cache settings instance.

    Returns:
        CacheSettings: Cached settings instance
    """
    return CacheSettings()
