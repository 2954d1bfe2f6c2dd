"""
Configuration settings for the entitlement gate.
"""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EntitlementSettings(BaseSettings):
    """Settings for AI processing entitlement checks."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ENTITLEMENT_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    pro_tier: str = Field(
        default="pro",
        description="Tier name that grants AI processing",
    )

    active_statuses: list[str] = Field(
        default=["active", "trialing", "past_due"],
        description="Subscription statuses that count as active",
    )

    anonymous_ai_override_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "ENTITLEMENT_ANONYMOUS_AI_OVERRIDE_KEY",
            "ANONYMOUS_AI_OVERRIDE_KEY",
        ),
        description="Operator key that lets an anonymous session use AI",
    )


@lru_cache
def get_entitlement_settings() -> EntitlementSettings:
    """
    Get cached entitlement settings instance.

    Returns:
        EntitlementSettings: Cached settings instance
    """
    return EntitlementSettings()
