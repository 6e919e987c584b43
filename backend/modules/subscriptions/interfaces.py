"""
Subscriptions module interfaces.

Other modules should depend on ISubscriptionService for reads. The
reconciler depends on ISubscriptionStore, which owns the atomic
dedup-then-write step.
"""

from typing import Callable, Optional, Protocol, runtime_checkable

from .models import ProcessedEvent, SubscriptionState
from .transitions import TransitionResult

Transition = Callable[[Optional[SubscriptionState]], TransitionResult]


@runtime_checkable
class ISubscriptionService(Protocol):
    """
    Read-only subscription queries.

    All methods are pure reads against current state, safe to call for
    principals that have never subscribed.
    """

    def has_active_subscription(self, principal_id: str) -> bool:
        """
        Whether the principal's subscription currently grants access.

        Returns:
            True if status is active or trialing and the period has not
            ended; False otherwise, including when no record exists
        """
        ...

    def get_subscription_status(self, principal_id: str) -> str:
        """
        Get the principal's subscription status.

        Returns:
            The status value, or "none" when no record exists
        """
        ...

    def get_subscription(self, principal_id: str) -> Optional[SubscriptionState]:
        """Get the principal's subscription record, if any."""
        ...


@runtime_checkable
class ISubscriptionStore(Protocol):
    """Persistence for subscription state and processed events."""

    def get_by_principal(self, principal_id: str) -> Optional[SubscriptionState]:
        ...

    def get_by_subscription_ref(self, subscription_ref: str) -> Optional[SubscriptionState]:
        ...

    def find_principal_by_customer(self, customer_ref: str) -> Optional[str]:
        ...

    def get_processed_event(self, event_id: str) -> Optional[ProcessedEvent]:
        ...

    def apply_event(
        self,
        record: ProcessedEvent,
        subscription_ref: str,
        transition: Transition,
    ) -> Optional[TransitionResult]:
        """
        Record an event and apply its transition as one unit.

        The event ID insert is the mutual-exclusion gate: if the ID is
        already recorded, nothing else happens.

        Args:
            record: The event to record
            subscription_ref: Subscription whose current state is passed
                to ``transition``
            transition: Computes the state to write from the current state

        Returns:
            The transition result, or None if the event was a duplicate

        Raises:
            StateWriteFailureError: The event was recorded (unprocessed)
                but its state change could not be applied
        """
        ...
