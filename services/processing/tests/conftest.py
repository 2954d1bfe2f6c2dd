"""
Fixtures for processing service API tests.

The application runs over an in-memory document store with components
injected through ``create_app``; callers authenticate with locally signed
JWTs.
"""

import pytest
from fastapi.testclient import TestClient

from services.processing.app.main import create_app
from shared.auth.dependencies import get_jwt_handler
from shared.auth.jwt import JWTHandler
from shared.messaging.events import InMemoryJobEventPublisher
from shared.processing.factory import build_processing_components
from tests.factories import USER_ID

JWT_SECRET = "processing-test-secret"


@pytest.fixture
def jwt_handler():
    """JWT handler used to sign and verify test tokens."""
    return JWTHandler(secret_key=JWT_SECRET)


@pytest.fixture
def auth_headers(jwt_handler):
    """Authorization header for the default test user."""
    return {"Authorization": f"Bearer {jwt_handler.create_access_token(USER_ID)}"}


@pytest.fixture
def publisher():
    """Publisher that records events without running them."""
    return InMemoryJobEventPublisher()


@pytest.fixture
def components(store, publisher, entitlement_settings, rate_limiter_settings, clock):
    """Processing components over the in-memory store."""
    return build_processing_components(
        store,
        publisher,
        entitlement_settings=entitlement_settings,
        rate_limiter_settings=rate_limiter_settings,
        clock=clock,
    )


@pytest.fixture
def app(components, jwt_handler):
    """Application with injected components and test JWT handler."""
    app = create_app(components=components)
    app.dependency_overrides[get_jwt_handler] = lambda: jwt_handler
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    with TestClient(app) as test_client:
        yield test_client
