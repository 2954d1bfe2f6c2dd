"""
Pytest configuration for FocusQueue.

This file is automatically loaded by pytest, sets up the Python path and
provides the fixtures shared by the unit, functional and service tests.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest  # noqa: E402

from shared.documents.memory_store import InMemoryDocumentStore  # noqa: E402
from shared.entitlements.config import EntitlementSettings  # noqa: E402
from shared.rate_limiter.config import RateLimiterSettings  # noqa: E402
from tests.factories import FakeClock, seed_enrollments, seed_pro_user  # noqa: E402


@pytest.fixture
def clock():
    """Fixed, manually advanced clock."""
    return FakeClock()


@pytest.fixture
def store():
    """Empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def entitlement_settings():
    """Entitlement settings independent of the environment."""
    return EntitlementSettings(
        pro_tier="pro",
        active_statuses=["active", "trialing", "past_due"],
        anonymous_ai_override_key="ci-override",
    )


@pytest.fixture
def rate_limiter_settings():
    """Rate limiter settings independent of the environment."""
    return RateLimiterSettings(
        min_interval_seconds=10,
        max_processing_per_day=50,
        max_reprocess_count=3,
    )


@pytest.fixture
def pro_store(store):
    """Store with a pro user enrolled in the baseline handler."""
    seed_pro_user(store)
    seed_enrollments(store, ["thoughts"])
    return store
