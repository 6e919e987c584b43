"""
Subscriptions module.

Keeps one subscription record per principal in step with Stripe lifecycle
webhooks, and answers whether a principal currently has access.

Public API:
- ISubscriptionService: Read-only subscription queries
- ISubscriptionStore: Atomic dedup-and-apply persistence
- SubscriptionReconciler: Verifies and applies webhook deliveries
- SubscriptionState: The stored record
- LifecycleEvent: Tagged union of handled event kinds
"""

from .events import (
    INVOICE_PAYMENT_FAILED,
    SUBSCRIPTION_CREATED,
    SUBSCRIPTION_DELETED,
    SUBSCRIPTION_UPDATED,
    InvoicePaymentFailed,
    LifecycleEvent,
    SubscriptionCreated,
    SubscriptionDeleted,
    SubscriptionUpdated,
    WebhookEnvelope,
    parse_envelope,
    to_lifecycle_event,
)
from .exceptions import (
    InvalidEventError,
    MissingStatusError,
    StateWriteFailureError,
    SubscriptionError,
    UnresolvedPrincipalError,
    WebhookVerificationError,
)
from .interfaces import ISubscriptionService, ISubscriptionStore
from .models import (
    ACTIVE_STATUSES,
    NO_SUBSCRIPTION,
    ProcessedEvent,
    ReconcileOutcome,
    ReconcileResult,
    SubscriptionState,
    SubscriptionStatus,
    SubscriptionStatusResponse,
    WebhookResponse,
)
from .reconciler import SubscriptionReconciler
from .service import SubscriptionService
from .store import InMemorySubscriptionStore, SupabaseSubscriptionStore
from .transitions import TransitionResult, transition

__all__ = [
    # Interfaces
    "ISubscriptionService",
    "ISubscriptionStore",
    # Implementations
    "SubscriptionService",
    "SubscriptionReconciler",
    "InMemorySubscriptionStore",
    "SupabaseSubscriptionStore",
    # Models
    "SubscriptionState",
    "SubscriptionStatus",
    "ACTIVE_STATUSES",
    "NO_SUBSCRIPTION",
    "ProcessedEvent",
    "ReconcileOutcome",
    "ReconcileResult",
    "SubscriptionStatusResponse",
    "WebhookResponse",
    # Events
    "SUBSCRIPTION_CREATED",
    "SUBSCRIPTION_UPDATED",
    "SUBSCRIPTION_DELETED",
    "INVOICE_PAYMENT_FAILED",
    "WebhookEnvelope",
    "LifecycleEvent",
    "SubscriptionCreated",
    "SubscriptionUpdated",
    "SubscriptionDeleted",
    "InvoicePaymentFailed",
    "parse_envelope",
    "to_lifecycle_event",
    "TransitionResult",
    "transition",
    # Exceptions
    "SubscriptionError",
    "InvalidEventError",
    "WebhookVerificationError",
    "UnresolvedPrincipalError",
    "MissingStatusError",
    "StateWriteFailureError",
]
