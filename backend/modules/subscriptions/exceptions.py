"""
Subscriptions module exceptions.

InvalidEventError and its subclass are rejections: the event is not recorded
and a corrected redelivery can still succeed. StateWriteFailureError means
the event was recorded but its state change was not applied.
"""

from typing import Optional

from shared.exceptions import CoursesError, ValidationError


class SubscriptionError(CoursesError):
    """Base exception for subscription-related errors."""

    pass


class InvalidEventError(ValidationError):
    """Raised when an inbound event is malformed."""

    def __init__(
        self,
        reason: str,
        event_id: Optional[str] = None,
        message: Optional[str] = None,
        code: str = "INVALID_EVENT",
    ):
        super().__init__(
            message or f"Invalid event: {reason}",
            code=code,
            details={"reason": reason},
        )
        if event_id:
            self.details["event_id"] = event_id


class WebhookVerificationError(InvalidEventError):
    """Raised when Stripe webhook signature verification fails."""

    def __init__(self, reason: str = "signature mismatch"):
        super().__init__(
            reason,
            message="Webhook signature verification failed",
            code="WEBHOOK_VERIFICATION_FAILED",
        )


class UnresolvedPrincipalError(SubscriptionError):
    """Raised when a new subscription record has no owning principal."""

    def __init__(self, subscription_ref: str):
        super().__init__(
            f"Cannot resolve principal for subscription: {subscription_ref}",
            code="UNRESOLVED_PRINCIPAL",
            details={"subscription_ref": subscription_ref},
        )


class MissingStatusError(SubscriptionError):
    """Raised when a record must be created from an event without a status."""

    def __init__(self, subscription_ref: str):
        super().__init__(
            f"Cannot create subscription without status: {subscription_ref}",
            code="MISSING_STATUS",
            details={"subscription_ref": subscription_ref},
        )


class StateWriteFailureError(SubscriptionError):
    """
    Raised when an event was recorded as received but its state change failed.

    The event ID is now taken, so redeliveries are duplicates; the record
    must be repaired manually.
    """

    def __init__(self, event_id: str, reason: Optional[str] = None):
        super().__init__(
            f"State write failed for event: {event_id}",
            code="STATE_WRITE_FAILED",
            details={"event_id": event_id},
        )
        if reason:
            self.details["reason"] = reason
