"""
Webhook reconciler.

Turns verified provider events into subscription state. The flow for one
delivery is:

1. Verify the signature over the raw body (rejects are not recorded)
2. Parse the envelope and map it onto a lifecycle event kind
3. Resolve the owning principal when the event does not carry one
4. Hand the event to the store, which records the event ID and applies
   the transition in one transaction

Redelivered events stop at step 4 as duplicates.
"""

import json
import logging
from datetime import datetime
from functools import partial
from typing import Any, Callable, Optional

from .events import parse_envelope, to_lifecycle_event
from .exceptions import InvalidEventError, StateWriteFailureError, WebhookVerificationError
from .interfaces import ISubscriptionStore
from .models import ProcessedEvent, ReconcileOutcome, ReconcileResult
from .service import utc_now
from .signature import verify_signature
from .transitions import EventOrdering, transition

logger = logging.getLogger(__name__)


class SubscriptionReconciler:
    """
    Applies provider lifecycle events to subscription state.

    Stateless between calls; all serialization is left to the store.
    """

    def __init__(
        self,
        store: ISubscriptionStore,
        webhook_secret: str = "",
        tolerance: int = 300,
        ordering: EventOrdering = "arrival",
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._webhook_secret = webhook_secret
        self._tolerance = tolerance
        self._ordering = ordering
        self._clock = clock or utc_now

    async def handle_webhook(
        self,
        payload: bytes,
        signature_header: Optional[str],
    ) -> ReconcileResult:
        """
        Verify and reconcile one webhook delivery.

        Args:
            payload: Raw request body
            signature_header: ``Stripe-Signature`` header value

        Raises:
            WebhookVerificationError: If the signature does not verify
            InvalidEventError: If the body is not a valid event
            StateWriteFailureError: If the event was recorded but not applied
        """
        try:
            verify_signature(
                payload,
                signature_header,
                self._webhook_secret,
                tolerance=self._tolerance,
                now=self._clock(),
            )
        except WebhookVerificationError as e:
            logger.warning("Rejected webhook: %s", e.details.get("reason"))
            raise

        try:
            body = json.loads(payload)
        except ValueError:
            raise InvalidEventError("body is not valid JSON")

        return await self.reconcile(body)

    async def reconcile(self, body: Any) -> ReconcileResult:
        """
        Apply one already-verified event.

        Returns:
            ReconcileResult with outcome applied, unchanged, duplicate,
            stale or ignored

        Raises:
            InvalidEventError: If the event is malformed (nothing recorded)
            StateWriteFailureError: If the event was recorded but its state
                change failed
        """
        envelope = parse_envelope(body)
        event = to_lifecycle_event(envelope)
        if event is None:
            logger.debug("Ignoring unhandled event type %s (%s)", envelope.type, envelope.event_id)
            return ReconcileResult(
                event_id=envelope.event_id,
                event_type=envelope.type,
                outcome=ReconcileOutcome.IGNORED,
            )

        principal_id = event.principal_id
        if principal_id is None and event.customer_ref:
            principal_id = self._store.find_principal_by_customer(event.customer_ref)

        record = ProcessedEvent(
            event_id=envelope.event_id,
            event_type=envelope.type,
            payload=envelope.payload,
        )
        apply = partial(
            self._transition,
            event,
            principal_id=principal_id,
        )

        try:
            result = self._store.apply_event(record, event.subscription_ref, apply)
        except StateWriteFailureError:
            logger.exception(
                "State write failed for %s (%s); event recorded as unprocessed",
                envelope.event_id,
                envelope.type,
            )
            raise

        if result is None:
            logger.debug("Duplicate event %s", envelope.event_id)
            return ReconcileResult(
                event_id=envelope.event_id,
                event_type=envelope.type,
                outcome=ReconcileOutcome.DUPLICATE,
            )

        if result.outcome == ReconcileOutcome.STALE:
            logger.warning(
                "Skipped stale event %s for subscription %s",
                envelope.event_id,
                event.subscription_ref,
            )
        else:
            logger.info(
                "Reconciled %s (%s) for subscription %s: %s",
                envelope.event_id,
                envelope.type,
                event.subscription_ref,
                result.outcome.value,
            )

        return ReconcileResult(
            event_id=envelope.event_id,
            event_type=envelope.type,
            outcome=result.outcome,
            status=result.state.status if result.state else None,
        )

    def _transition(self, event, current, *, principal_id):
        # Runs inside the store's apply call, so this read sees the same state.
        principal_record = None
        if current is None and principal_id:
            principal_record = self._store.get_by_principal(principal_id)
        return transition(
            event,
            current,
            now=self._clock(),
            ordering=self._ordering,
            principal_id=principal_id,
            principal_record=principal_record,
        )
