"""
Subscription state stores.

Provides both in-memory (for testing) and Supabase-backed (for production)
implementations of ISubscriptionStore. In both, recording the event ID and
writing the new state happen in one transaction.
"""

import logging
from typing import Any, Optional

from postgrest.exceptions import APIError

from shared.exceptions import ConflictError, ExternalServiceError
from shared.memory import InMemoryTableGateway
from shared.repository import BaseRepository

from .exceptions import StateWriteFailureError
from .interfaces import Transition
from .models import ProcessedEvent, ReconcileOutcome, SubscriptionState
from .transitions import EventOrdering, TransitionResult

logger = logging.getLogger(__name__)

SUBSCRIPTIONS_TABLE = "subscriptions"
EVENTS_TABLE = "processed_events"


class InMemorySubscriptionStore:
    """
    Subscription store on top of the in-memory table gateway.

    The gateway's transaction lock serializes ``apply_event`` calls, and a
    nested transaction rolls back a failed state write while keeping the
    event record.
    """

    def __init__(self, tables: InMemoryTableGateway) -> None:
        self._tables = tables

    def get_by_principal(self, principal_id: str) -> Optional[SubscriptionState]:
        return self._first(SUBSCRIPTIONS_TABLE, {"principal_id": principal_id})

    def get_by_subscription_ref(self, subscription_ref: str) -> Optional[SubscriptionState]:
        return self._first(SUBSCRIPTIONS_TABLE, {"subscription_ref": subscription_ref})

    def find_principal_by_customer(self, customer_ref: str) -> Optional[str]:
        state = self._first(SUBSCRIPTIONS_TABLE, {"customer_ref": customer_ref})
        return state.principal_id if state else None

    def get_processed_event(self, event_id: str) -> Optional[ProcessedEvent]:
        rows = self._tables.select(EVENTS_TABLE, {"event_id": event_id})
        return ProcessedEvent(**rows[0]) if rows else None

    def apply_event(
        self,
        record: ProcessedEvent,
        subscription_ref: str,
        transition: Transition,
    ) -> Optional[TransitionResult]:
        failure: Optional[Exception] = None
        result: Optional[TransitionResult] = None

        with self._tables.transaction():
            try:
                self._tables.insert(
                    EVENTS_TABLE,
                    record.model_dump(mode="json", exclude_none=True) | {"processed": False},
                )
            except ConflictError:
                return None

            try:
                with self._tables.transaction():
                    result = transition(self.get_by_subscription_ref(subscription_ref))
                    if result.state is not None:
                        self._upsert(result.state)
                    self._tables.update(
                        EVENTS_TABLE, {"event_id": record.event_id}, {"processed": True}
                    )
            except Exception as e:
                failure = e

        if failure is not None:
            raise StateWriteFailureError(record.event_id, reason=str(failure)) from failure
        return result

    def _upsert(self, state: SubscriptionState) -> None:
        row = state.to_row()
        key = {"principal_id": state.principal_id}
        if self._tables.select(SUBSCRIPTIONS_TABLE, key):
            self._tables.update(SUBSCRIPTIONS_TABLE, key, row)
        else:
            self._tables.insert(SUBSCRIPTIONS_TABLE, row)

    def _first(self, table: str, filters: dict[str, Any]) -> Optional[SubscriptionState]:
        rows = self._tables.select(table, filters)
        return SubscriptionState(**rows[0]) if rows else None


class SupabaseSubscriptionStore(BaseRepository[SubscriptionState]):
    """
    Subscription store backed by Supabase.

    Reads go through PostgREST. The dedup insert and the state upsert run
    inside the ``apply_subscription_event`` database function (see
    migrations), so they commit or roll back together. Under "event_time"
    ordering the database repeats the stale check against the locked row.
    """

    def __init__(self, db, ordering: EventOrdering = "arrival") -> None:
        super().__init__(db)
        self._ordering = ordering

    def get_by_principal(self, principal_id: str) -> Optional[SubscriptionState]:
        return self._first({"principal_id": principal_id})

    def get_by_subscription_ref(self, subscription_ref: str) -> Optional[SubscriptionState]:
        return self._first({"subscription_ref": subscription_ref})

    def find_principal_by_customer(self, customer_ref: str) -> Optional[str]:
        state = self._first({"customer_ref": customer_ref})
        return state.principal_id if state else None

    def get_processed_event(self, event_id: str) -> Optional[ProcessedEvent]:
        result = (
            self._db.table(EVENTS_TABLE).select("*").eq("event_id", event_id).execute()
        )
        return ProcessedEvent(**result.data[0]) if result.data else None

    def apply_event(
        self,
        record: ProcessedEvent,
        subscription_ref: str,
        transition: Transition,
    ) -> Optional[TransitionResult]:
        # Computed from a read outside the database transaction.
        failure: Optional[Exception] = None
        result: Optional[TransitionResult] = None
        try:
            result = transition(self.get_by_subscription_ref(subscription_ref))
        except Exception as e:
            failure = e

        state = result.state.to_row() if result and result.state else None
        try:
            response = self._db.rpc(
                "apply_subscription_event",
                {
                    "p_event_id": record.event_id,
                    "p_event_type": record.event_type,
                    "p_payload": record.payload,
                    "p_state": state,
                    "p_processed": failure is None,
                    "p_stale_guard": self._ordering == "event_time",
                },
            ).execute()
        except APIError as e:
            logger.error("apply_subscription_event failed for %s: %s", record.event_id, e.message)
            raise ExternalServiceError(
                "Failed to record subscription event",
                service="supabase",
                details={"event_id": record.event_id},
            )

        outcome = response.data
        if outcome == "duplicate":
            return None
        if failure is not None:
            raise StateWriteFailureError(record.event_id, reason=str(failure)) from failure
        if outcome == "stale":
            return TransitionResult(None, ReconcileOutcome.STALE)
        if outcome != "applied":
            raise StateWriteFailureError(record.event_id, reason=f"database returned {outcome!r}")
        return result

    def _first(self, filters: dict[str, Any]) -> Optional[SubscriptionState]:
        query = self._db.table(SUBSCRIPTIONS_TABLE).select("*")
        for column, value in filters.items():
            query = query.eq(column, value)
        result = query.limit(1).execute()
        return SubscriptionState(**result.data[0]) if result.data else None
