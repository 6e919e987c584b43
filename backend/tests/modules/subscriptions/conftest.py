"""
Pytest fixtures for subscriptions module tests.

Builds Stripe-shaped webhook bodies and a fixed clock.
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from modules.subscriptions.store import InMemorySubscriptionStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def ts(moment: datetime) -> int:
    return int(moment.timestamp())


def subscription_event(
    event_type: str,
    event_id: str = "evt_1",
    subscription_id: str = "sub_1",
    customer: Optional[str] = "cus_1",
    user_id: Optional[str] = "auth-alice",
    created: datetime = NOW,
    **fields: Any,
) -> dict[str, Any]:
    """A ``customer.subscription.*`` webhook body."""
    obj: dict[str, Any] = {"id": subscription_id, "object": "subscription", **fields}
    if customer is not None:
        obj["customer"] = customer
    if user_id is not None:
        obj["metadata"] = {"user_id": user_id}
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": ts(created),
        "data": {"object": obj},
    }


def invoice_failed_event(
    event_id: str = "evt_inv",
    subscription_id: Optional[str] = "sub_1",
    customer: Optional[str] = "cus_1",
    user_id: Optional[str] = None,
    created: datetime = NOW,
) -> dict[str, Any]:
    """An ``invoice.payment_failed`` webhook body."""
    obj: dict[str, Any] = {"id": "in_1", "object": "invoice"}
    if subscription_id is not None:
        obj["subscription"] = subscription_id
    if customer is not None:
        obj["customer"] = customer
    if user_id is not None:
        obj["subscription_details"] = {"metadata": {"user_id": user_id}}
    return {
        "id": event_id,
        "object": "event",
        "type": "invoice.payment_failed",
        "created": ts(created),
        "data": {"object": obj},
    }


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def trial_fields() -> dict[str, Any]:
    """Subscription object fields for a 7-day trial starting now."""
    return {
        "status": "trialing",
        "current_period_start": ts(NOW),
        "current_period_end": ts(NOW + timedelta(days=7)),
        "trial_end": ts(NOW + timedelta(days=7)),
        "cancel_at_period_end": False,
    }


@pytest.fixture
def store(gateway) -> InMemorySubscriptionStore:
    return InMemorySubscriptionStore(gateway)
