"""
Configuration for action processing.
"""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ActionSettings(BaseSettings):
    """Confidence thresholds that route proposed actions."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ACTIONS_",
        case_sensitive=False,
        extra="ignore",
    )

    auto_apply_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Minimum confidence for applying an action automatically",
    )
    suggest_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Minimum confidence for offering an action as a suggestion",
    )

    @model_validator(mode="after")
    def validate_threshold_order(self) -> "ActionSettings":
        """Ensure the suggestion threshold does not exceed the auto-apply threshold."""
        if self.suggest_threshold > self.auto_apply_threshold:
            raise ValueError("suggest_threshold must be <= auto_apply_threshold")
        return self


@lru_cache
def get_action_settings() -> ActionSettings:
    """
    Get cached action settings instance.

    Returns:
        ActionSettings: Cached settings instance
    """
    return ActionSettings()
