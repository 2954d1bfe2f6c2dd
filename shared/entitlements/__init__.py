"""
AI processing entitlement checks.
"""

from shared.entitlements.config import EntitlementSettings, get_entitlement_settings
from shared.entitlements.evaluation import (
    EntitlementCode,
    EntitlementDecision,
    evaluate_ai_entitlement,
    get_subscription_block_message,
)
from shared.entitlements.gate import (
    ANONYMOUS_DENIED_MESSAGE,
    AccessDecision,
    EntitlementGate,
)
from shared.entitlements.identity import IdentityProvider, StoreIdentityProvider

__all__ = [
    "EntitlementGate",
    "AccessDecision",
    "ANONYMOUS_DENIED_MESSAGE",
    "EntitlementCode",
    "EntitlementDecision",
    "evaluate_ai_entitlement",
    "get_subscription_block_message",
    "IdentityProvider",
    "StoreIdentityProvider",
    "EntitlementSettings",
    "get_entitlement_settings",
]
