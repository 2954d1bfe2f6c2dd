"""
Configuration for the thought processing worker.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkerSettings(BaseSettings):
    """Settings for the thought processing worker."""

    model_config = SettingsConfigDict(
        env_prefix="WORKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    worker_name: str = Field(
        default="thought-processing-worker",
        description="Worker instance name for logging",
    )
    prefetch_count: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Number of messages to prefetch from queue",
    )
    consume_thought_events: bool = Field(
        default=True,
        description="Run the auto trigger for thought.created events",
    )
    metrics_port: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        description="Expose Prometheus metrics on this port when set",
    )


@lru_cache
def get_worker_settings() -> WorkerSettings:
    """
    Get cached worker settings instance.

    Returns:
        Cached WorkerSettings instance
    """
    return WorkerSettings()
