"""
Read-only billing and anonymous-session snapshots.
"""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from shared.models.base import DocumentModel


class Entitlements(DocumentModel):
    """Explicit entitlement fields granted by billing."""

    ai_processing: bool | None = Field(None, description="Explicit AI processing flag")
    ai_credits_remaining: float | None = Field(None, description="Remaining AI credits")


class SubscriptionSnapshot(DocumentModel):
    """Subscription record maintained by the billing collaborator."""

    tier: str | None = Field(None, description="Plan tier, e.g. free or pro")
    status: str | None = Field(None, description="Lifecycle status")
    entitlements: Entitlements = Field(default_factory=Entitlements)
    cancel_at_period_end: bool = Field(False, description="Cancels when the period ends")
    current_period_end: datetime | None = Field(None, description="End of current period")

    @field_validator("entitlements", mode="before")
    @classmethod
    def default_entitlements(cls, value: Any) -> Any:
        """Treat a null entitlements map as empty."""
        return value if value is not None else {}

    @field_validator("cancel_at_period_end", mode="before")
    @classmethod
    def default_cancel_flag(cls, value: Any) -> Any:
        """Treat a null cancellation flag as false."""
        return bool(value)


class AnonymousSession(DocumentModel):
    """Anonymous session record."""

    allow_ai: Any = Field(None, description="Whether AI may run for this session")
    ci_override_key: str | None = Field(None, description="Operator override key")
    cleanup_pending: bool = Field(False, description="Session is scheduled for cleanup")
    expires_at: datetime | None = Field(None, description="Session expiry")
    status: str | None = Field(None, description="Session status")

    @field_validator("cleanup_pending", mode="before")
    @classmethod
    def default_cleanup_flag(cls, value: Any) -> Any:
        """Treat a null cleanup flag as false."""
        return bool(value)
