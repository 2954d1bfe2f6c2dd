"""
Subscription entitlement evaluation.

Pure functions: given a subscription snapshot and the current time, decide
whether AI processing is permitted and why not.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from shared.entitlements.config import EntitlementSettings, get_entitlement_settings
from shared.models.subscription import SubscriptionSnapshot
from shared.utils.datetime_utils import ensure_utc, get_utc_now


class EntitlementCode(str, Enum):
    """Reason code attached to an entitlement decision."""

    ALLOWED = "allowed"
    DISABLED = "disabled"
    EXHAUSTED = "exhausted"
    TIER_MISMATCH = "tier-mismatch"
    INACTIVE = "inactive"
    NO_RECORD = "no-record"


@dataclass(frozen=True)
class EntitlementDecision:
    """Outcome of evaluating a subscription snapshot."""

    allowed: bool
    code: EntitlementCode


_BLOCK_MESSAGES = {
    EntitlementCode.INACTIVE: (
        "Your Focus Notebook Pro subscription is inactive. "
        "Update billing to resume AI processing."
    ),
    EntitlementCode.DISABLED: (
        "AI processing is disabled for your account. Contact support if this is unexpected."
    ),
    EntitlementCode.EXHAUSTED: (
        "You have used all available AI processing credits. "
        "Add more credits or wait for the next cycle."
    ),
}

DEFAULT_BLOCK_MESSAGE = "Focus Notebook Pro is required to process thoughts with AI."


def get_subscription_block_message(code: EntitlementCode | str) -> str:
    """
    Map a denial code to the message shown to the user.

    Args:
        code: Entitlement reason code

    Returns:
        User-facing message
    """
    try:
        code = EntitlementCode(code)
    except ValueError:
        return DEFAULT_BLOCK_MESSAGE
    return _BLOCK_MESSAGES.get(code, DEFAULT_BLOCK_MESSAGE)


def evaluate_ai_entitlement(
    snapshot: SubscriptionSnapshot | None,
    now: datetime | None = None,
    settings: EntitlementSettings | None = None,
) -> EntitlementDecision:
    """
    Decide whether a subscription permits AI processing.

    Explicit entitlements win over tier: ``aiProcessing = false`` always
    denies and a non-positive credit balance always denies, while
    ``aiProcessing = true`` or a positive balance allows regardless of tier.
    Otherwise the user needs an active pro subscription that is not past a
    scheduled cancellation.

    Args:
        snapshot: Subscription snapshot (None if the user has no record)
        now: Evaluation time (defaults to now)
        settings: Entitlement settings

    Returns:
        EntitlementDecision
    """
    settings = settings or get_entitlement_settings()
    now = ensure_utc(now) if now is not None else get_utc_now()

    if snapshot is None:
        return EntitlementDecision(False, EntitlementCode.NO_RECORD)

    entitlements = snapshot.entitlements
    if entitlements.ai_processing is False:
        return EntitlementDecision(False, EntitlementCode.DISABLED)

    credits = entitlements.ai_credits_remaining
    if credits is not None and credits <= 0:
        return EntitlementDecision(False, EntitlementCode.EXHAUSTED)

    if entitlements.ai_processing is True or (credits is not None and credits > 0):
        return EntitlementDecision(True, EntitlementCode.ALLOWED)

    if snapshot.tier != settings.pro_tier:
        return EntitlementDecision(False, EntitlementCode.TIER_MISMATCH)

    if snapshot.status not in settings.active_statuses:
        return EntitlementDecision(False, EntitlementCode.INACTIVE)

    if snapshot.cancel_at_period_end and snapshot.current_period_end is not None:
        if ensure_utc(snapshot.current_period_end) <= now:
            return EntitlementDecision(False, EntitlementCode.INACTIVE)

    return EntitlementDecision(True, EntitlementCode.ALLOWED)
