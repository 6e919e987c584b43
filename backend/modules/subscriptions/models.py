"""
Subscriptions module data models.

These models define the persisted subscription state, the processed-event
record used for deduplication, and the results reported to callers.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, Field


def as_utc(value: datetime) -> datetime:
    """Read timestamps without an offset as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Every stored or compared timestamp is timezone-aware.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class SubscriptionStatus(str, Enum):
    """Provider subscription statuses tracked by the backend."""

    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"


ACTIVE_STATUSES = frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING})

# Reported by get_subscription_status when a principal has no record.
NO_SUBSCRIPTION = "none"


class SubscriptionState(BaseModel):
    """
    The current subscription record for one principal.

    Written only by the reconciler. Whether it grants access is derived
    at read time by ``is_active``, never stored.
    """

    principal_id: str = Field(..., description="Owning principal (auth user ID)")
    customer_ref: Optional[str] = Field(None, description="Stripe customer ID")
    subscription_ref: str = Field(..., description="Stripe subscription ID")
    status: SubscriptionStatus = Field(..., description="Provider status")
    current_period_start: Optional[UtcDatetime] = None
    current_period_end: Optional[UtcDatetime] = None
    cancel_at_period_end: bool = False
    trial_end: Optional[UtcDatetime] = None
    last_event_at: Optional[UtcDatetime] = Field(
        None,
        description="Provider timestamp of the last event applied",
    )
    updated_at: Optional[UtcDatetime] = None

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """Active or trialing, and the current period has not ended."""
        if self.status not in ACTIVE_STATUSES:
            return False
        if self.current_period_end is None:
            return True
        now = as_utc(now) if now else datetime.now(timezone.utc)
        return self.current_period_end > now

    def to_row(self) -> dict[str, Any]:
        """Serialize for storage."""
        return self.model_dump(mode="json")


class ProcessedEvent(BaseModel):
    """
    A provider event that has been received and deduplicated.

    ``processed`` is False when the state write failed after the event
    was recorded; such events need manual backfill.
    """

    event_id: str = Field(..., description="Provider event ID (dedup key)")
    event_type: str = Field(..., description="Provider event type")
    payload: dict[str, Any] = Field(default_factory=dict, description="Raw event body")
    processed: bool = False
    received_at: Optional[UtcDatetime] = None


class ReconcileOutcome(str, Enum):
    """What happened to an inbound event."""

    APPLIED = "applied"        # State written
    UNCHANGED = "unchanged"    # Recorded; the event required no write
    DUPLICATE = "duplicate"    # Event ID seen before; nothing reapplied
    STALE = "stale"            # Recorded; older than the last applied event
    IGNORED = "ignored"        # Event type not handled; not recorded


class ReconcileResult(BaseModel):
    """Result of reconciling one event."""

    event_id: str
    event_type: str
    outcome: ReconcileOutcome
    status: Optional[SubscriptionStatus] = Field(
        None,
        description="Subscription status after the event, when a write happened",
    )


class SubscriptionStatusResponse(BaseModel):
    """API response for the current principal's subscription."""

    status: str = Field(..., description="Status value or 'none'")
    active: bool = Field(..., description="Whether premium content is unlocked")
    current_period_end: Optional[UtcDatetime] = None
    cancel_at_period_end: bool = False


class WebhookResponse(BaseModel):
    """Acknowledgement returned to the payment provider."""

    received: bool = True
    outcome: str
