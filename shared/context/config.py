"""
Configuration settings for processing context gathering.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ContextSettings(BaseSettings):
    """Bounds on how much user context is sent with a thought."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CONTEXT_",
        case_sensitive=False,
        extra="ignore",
    )

    max_goals: int = Field(default=10, ge=0, le=100, description="Active goals to include")
    max_projects: int = Field(default=10, ge=0, le=100, description="Active projects to include")
    max_people: int = Field(default=20, ge=0, le=200, description="Relationships to include")
    max_tasks: int = Field(default=15, ge=0, le=100, description="Active tasks to include")
    max_moods: int = Field(default=5, ge=0, le=50, description="Recent moods to include")
    max_tasks_in_prompt: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Tasks listed in the rendered prompt",
    )


@lru_cache
def get_context_settings() -> ContextSettings:
    """
    Get cached context settings instance.

    Returns:
        ContextSettings: Cached settings instance
    """
    return ContextSettings()
