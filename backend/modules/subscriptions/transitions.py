"""
Subscription state transitions.

Each event kind has one deterministic function from (event, current state)
to the state that should be stored. Transitions never touch storage; the
store runs them inside its dedup transaction.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from .events import (
    InvoicePaymentFailed,
    LifecycleEvent,
    SubscriptionCreated,
    SubscriptionDeleted,
    SubscriptionUpdated,
)
from .exceptions import MissingStatusError, UnresolvedPrincipalError
from .models import ReconcileOutcome, SubscriptionState, SubscriptionStatus

EventOrdering = Literal["arrival", "event_time"]

# Fields an updated event may overwrite when present.
UPDATABLE_FIELDS = (
    "status",
    "current_period_start",
    "current_period_end",
    "cancel_at_period_end",
    "trial_end",
)
NULLABLE_FIELDS = frozenset({"current_period_start", "current_period_end", "trial_end"})


@dataclass(frozen=True)
class TransitionResult:
    """The state to store (None leaves storage untouched) and why."""

    state: Optional[SubscriptionState]
    outcome: ReconcileOutcome


def transition(
    event: LifecycleEvent,
    current: Optional[SubscriptionState],
    *,
    now: datetime,
    ordering: EventOrdering = "arrival",
    principal_id: Optional[str] = None,
    principal_record: Optional[SubscriptionState] = None,
) -> TransitionResult:
    """
    Compute the effect of ``event`` on ``current``.

    Args:
        event: The parsed lifecycle event
        current: The stored record for the event's subscription, if any
        now: Timestamp recorded as ``updated_at``
        ordering: "arrival" applies every event; "event_time" skips events
            older than the last one applied to the record
        principal_id: Owner to use when the event does not name one and a
            new record has to be created
        principal_record: The owner's stored record, when ``current`` is None.
            A deletion or failed payment for an unknown subscription never
            overwrites the record of a different subscription.

    Raises:
        UnresolvedPrincipalError: A new record is needed but has no owner
        MissingStatusError: A new record is needed but the event has no status
    """
    if ordering == "event_time" and _is_stale(event, current):
        return TransitionResult(None, ReconcileOutcome.STALE)

    owner = event.principal_id or principal_id

    if (
        current is None
        and principal_record is not None
        and isinstance(event, (SubscriptionDeleted, InvoicePaymentFailed))
    ):
        return TransitionResult(None, ReconcileOutcome.UNCHANGED)

    if isinstance(event, SubscriptionCreated):
        if current is not None:
            return TransitionResult(None, ReconcileOutcome.UNCHANGED)
        return _applied(_new_state(event, event.status, owner, now))

    if isinstance(event, SubscriptionUpdated):
        if current is None:
            return _applied(_new_state(event, event.status, owner, now))
        return _applied(_patched(current, event, _present_fields(event), now))

    if isinstance(event, SubscriptionDeleted):
        if current is None:
            return _applied(_new_state(event, SubscriptionStatus.CANCELED, owner, now))
        return _applied(_patched(current, event, {"status": SubscriptionStatus.CANCELED}, now))

    if isinstance(event, InvoicePaymentFailed):
        if current is None:
            return _applied(_new_state(event, SubscriptionStatus.PAST_DUE, owner, now))
        return _applied(_patched(current, event, {"status": SubscriptionStatus.PAST_DUE}, now))

    raise TypeError(f"Unhandled lifecycle event: {type(event).__name__}")


def _present_fields(event: SubscriptionUpdated) -> dict:
    """Fields the event actually carries; an explicit null clears a timestamp."""
    changes = {}
    for field in UPDATABLE_FIELDS:
        if field not in event.model_fields_set:
            continue
        value = getattr(event, field)
        if value is None and field not in NULLABLE_FIELDS:
            continue
        changes[field] = value
    return changes


def _applied(state: SubscriptionState) -> TransitionResult:
    return TransitionResult(state, ReconcileOutcome.APPLIED)


def _is_stale(event: LifecycleEvent, current: Optional[SubscriptionState]) -> bool:
    if current is None or current.last_event_at is None or event.occurred_at is None:
        return False
    return event.occurred_at < current.last_event_at


def _new_state(
    event: LifecycleEvent,
    status: Optional[SubscriptionStatus],
    owner: Optional[str],
    now: datetime,
) -> SubscriptionState:
    if not owner:
        raise UnresolvedPrincipalError(event.subscription_ref)
    if status is None:
        raise MissingStatusError(event.subscription_ref)

    fields = {
        field: getattr(event, field)
        for field in UPDATABLE_FIELDS
        if field != "status" and getattr(event, field, None) is not None
    }
    return SubscriptionState(
        principal_id=owner,
        customer_ref=event.customer_ref,
        subscription_ref=event.subscription_ref,
        status=status,
        last_event_at=event.occurred_at,
        updated_at=now,
        **fields,
    )


def _patched(
    current: SubscriptionState,
    event: LifecycleEvent,
    changes: dict,
    now: datetime,
) -> SubscriptionState:
    update = dict(changes)
    if event.customer_ref:
        update["customer_ref"] = event.customer_ref
    update["last_event_at"] = event.occurred_at or current.last_event_at
    update["updated_at"] = now
    return current.model_copy(update=update)
