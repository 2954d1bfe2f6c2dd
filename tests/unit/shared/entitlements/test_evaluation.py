"""
Unit tests for subscription entitlement evaluation.
"""

from datetime import UTC, datetime, timedelta

import pytest

from shared.entitlements.evaluation import (
    DEFAULT_BLOCK_MESSAGE,
    EntitlementCode,
    evaluate_ai_entitlement,
    get_subscription_block_message,
)
from shared.models.subscription import SubscriptionSnapshot

NOW = datetime(2026, 3, 14, 12, 0, tzinfo=UTC)


def snapshot(**data) -> SubscriptionSnapshot:
    return SubscriptionSnapshot.from_document(data)


class TestEvaluateAIEntitlement:
    """Tests for evaluate_ai_entitlement."""

    def test_no_record(self, entitlement_settings):
        """Test that a missing subscription denies."""
        decision = evaluate_ai_entitlement(None, now=NOW, settings=entitlement_settings)

        assert decision.allowed is False
        assert decision.code == EntitlementCode.NO_RECORD

    @pytest.mark.parametrize("status", ["active", "trialing", "past_due"])
    def test_active_pro_allowed(self, entitlement_settings, status):
        """Test that every active status allows a pro user."""
        decision = evaluate_ai_entitlement(
            snapshot(tier="pro", status=status), now=NOW, settings=entitlement_settings
        )

        assert decision.allowed is True
        assert decision.code == EntitlementCode.ALLOWED

    def test_explicit_disable_beats_tier(self, entitlement_settings):
        """Test that aiProcessing=false denies even an active pro user."""
        decision = evaluate_ai_entitlement(
            snapshot(tier="pro", status="active", entitlements={"aiProcessing": False}),
            now=NOW,
            settings=entitlement_settings,
        )
        assert decision.code == EntitlementCode.DISABLED

    @pytest.mark.parametrize("credits", [0, -5])
    def test_exhausted_credits(self, entitlement_settings, credits):
        """Test that a non-positive credit balance denies."""
        decision = evaluate_ai_entitlement(
            snapshot(tier="pro", status="active", entitlements={"aiCreditsRemaining": credits}),
            now=NOW,
            settings=entitlement_settings,
        )
        assert decision.code == EntitlementCode.EXHAUSTED

    def test_explicit_grant_ignores_tier(self, entitlement_settings):
        """Test that aiProcessing=true allows a free user."""
        decision = evaluate_ai_entitlement(
            snapshot(tier="free", status="canceled", entitlements={"aiProcessing": True}),
            now=NOW,
            settings=entitlement_settings,
        )
        assert decision.allowed is True

    def test_positive_credits_ignore_tier(self, entitlement_settings):
        """Test that a positive credit balance allows a free user."""
        decision = evaluate_ai_entitlement(
            snapshot(tier="free", entitlements={"aiCreditsRemaining": 3}),
            now=NOW,
            settings=entitlement_settings,
        )
        assert decision.allowed is True

    def test_free_tier_denied(self, entitlement_settings):
        """Test that a free user without grants is denied."""
        decision = evaluate_ai_entitlement(
            snapshot(tier="free", status="active"), now=NOW, settings=entitlement_settings
        )
        assert decision.code == EntitlementCode.TIER_MISMATCH

    def test_inactive_status_denied(self, entitlement_settings):
        """Test that a canceled pro subscription is inactive."""
        decision = evaluate_ai_entitlement(
            snapshot(tier="pro", status="canceled"), now=NOW, settings=entitlement_settings
        )
        assert decision.code == EntitlementCode.INACTIVE

    def test_cancellation_after_period_end(self, entitlement_settings):
        """Test that a scheduled cancellation denies once the period ended."""
        data = {
            "tier": "pro",
            "status": "active",
            "cancelAtPeriodEnd": True,
            "currentPeriodEnd": NOW - timedelta(minutes=1),
        }

        decision = evaluate_ai_entitlement(snapshot(**data), now=NOW, settings=entitlement_settings)

        assert decision.code == EntitlementCode.INACTIVE

    def test_cancellation_before_period_end(self, entitlement_settings):
        """Test that a scheduled cancellation still allows during the period."""
        data = {
            "tier": "pro",
            "status": "active",
            "cancelAtPeriodEnd": True,
            "currentPeriodEnd": NOW + timedelta(days=3),
        }

        decision = evaluate_ai_entitlement(snapshot(**data), now=NOW, settings=entitlement_settings)

        assert decision.allowed is True

    def test_null_fields_tolerated(self, entitlement_settings):
        """Test that null entitlements and flags are treated as absent."""
        decision = evaluate_ai_entitlement(
            snapshot(tier="pro", status="active", entitlements=None, cancelAtPeriodEnd=None),
            now=NOW,
            settings=entitlement_settings,
        )
        assert decision.allowed is True


class TestBlockMessages:
    """Tests for denial messages."""

    def test_specific_messages(self):
        """Test that inactive, disabled and exhausted have their own messages."""
        messages = {
            get_subscription_block_message(code)
            for code in (
                EntitlementCode.INACTIVE,
                EntitlementCode.DISABLED,
                EntitlementCode.EXHAUSTED,
            )
        }
        assert len(messages) == 3
        assert DEFAULT_BLOCK_MESSAGE not in messages

    @pytest.mark.parametrize("code", ["tier-mismatch", "no-record", "something-else"])
    def test_default_message(self, code):
        """Test the generic upgrade message."""
        assert get_subscription_block_message(code) == DEFAULT_BLOCK_MESSAGE
