"""
Subscription read service.

Answers "does this principal currently have access" from stored state.
Every call reads the store; nothing is cached between calls.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from .interfaces import ISubscriptionService, ISubscriptionStore
from .models import NO_SUBSCRIPTION, SubscriptionState, SubscriptionStatusResponse


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionService(ISubscriptionService):
    """
    Read-only view of subscription state.

    Synchronous so the access layer can call it while evaluating policies.
    """

    def __init__(
        self,
        store: ISubscriptionStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._clock = clock or utc_now

    def get_subscription(self, principal_id: str) -> Optional[SubscriptionState]:
        if not principal_id:
            return None
        return self._store.get_by_principal(principal_id)

    def has_active_subscription(self, principal_id: str) -> bool:
        state = self.get_subscription(principal_id)
        if state is None:
            return False
        return state.is_active(self._clock())

    def get_subscription_status(self, principal_id: str) -> str:
        state = self.get_subscription(principal_id)
        if state is None:
            return NO_SUBSCRIPTION
        return state.status.value

    def describe(self, principal_id: str) -> SubscriptionStatusResponse:
        """Summarize the principal's subscription for API responses."""
        state = self.get_subscription(principal_id)
        if state is None:
            return SubscriptionStatusResponse(status=NO_SUBSCRIPTION, active=False)
        return SubscriptionStatusResponse(
            status=state.status.value,
            active=state.is_active(self._clock()),
            current_period_end=state.current_period_end,
            cancel_at_period_end=state.cancel_at_period_end,
        )
