"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest
from datetime import datetime, timezone, timedelta
from typing import Optional
import jwt  # PyJWT

from api.dependencies import reset_container
from shared.config import get_settings
from shared.database import reset_client_cache
from shared.memory import InMemoryTableGateway
from shared.models import Principal, Role


# Test secrets (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"
TEST_WEBHOOK_SECRET = "whsec_test_secret"


def create_test_token(
    user_id: Optional[str] = "test-user-123",
    email: Optional[str] = "test@example.com",
    expired: bool = False,
    role: str = "authenticated",
    app_role: Optional[str] = None,
    audience: Optional[str] = "authenticated",
    secret: str = TEST_JWT_SECRET,
) -> str:
    """
    Create a test JWT token shaped like a Supabase access token.

    Args:
        user_id: Subject claim (None omits it, as on service-role keys)
        email: Email claim
        expired: If True, creates an expired token
        role: Postgres role claim ("authenticated" or "service_role")
        app_role: Value for app_metadata.role (e.g. "admin")
        audience: Audience claim (None omits it)
        secret: Signing secret

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "role": role,
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
        "app_metadata": {"provider": "email"},
    }
    if user_id is not None:
        payload["sub"] = user_id
    if email is not None:
        payload["email"] = email
    if audience is not None:
        payload["aud"] = audience
    if app_role is not None:
        payload["app_metadata"]["role"] = app_role
    return jwt.encode(payload, secret, algorithm="HS256")


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Fresh settings, container and in-memory database for every test."""
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("SUPABASE_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", TEST_WEBHOOK_SECRET)
    monkeypatch.setenv("SUBSCRIPTION_EVENT_ORDERING", "arrival")
    get_settings.cache_clear()
    reset_container()
    reset_client_cache()
    yield
    get_settings.cache_clear()
    reset_container()
    reset_client_cache()


@pytest.fixture
def gateway() -> InMemoryTableGateway:
    """An empty in-memory database."""
    return InMemoryTableGateway()


@pytest.fixture
def alice() -> Principal:
    return Principal(id="auth-alice", role=Role.REGULAR, email="alice@example.com")


@pytest.fixture
def bob() -> Principal:
    return Principal(id="auth-bob", role=Role.REGULAR, email="bob@example.com")


@pytest.fixture
def admin() -> Principal:
    return Principal(id="auth-admin", role=Role.ADMIN, email="admin@example.com")


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def auth_headers(test_user_id: str) -> dict[str, str]:
    """Authorization headers for a regular principal."""
    return bearer(create_test_token(user_id=test_user_id))
