"""
Access module interface.

The data layer needs one fact from the subscriptions module to gate premium
content. It depends on this protocol, not on the subscriptions package.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ISubscriptionChecker(Protocol):
    """Answers whether a principal currently has an active subscription."""

    def has_active_subscription(self, principal_id: str) -> bool:
        """
        Check subscription access for a principal.

        Must read current state on every call, must not mutate anything,
        and must return False (not raise) when no subscription exists.
        """
        ...
