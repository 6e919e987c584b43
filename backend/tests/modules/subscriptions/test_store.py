"""Tests for subscription stores."""

import pytest
from datetime import timedelta
from unittest.mock import MagicMock

from postgrest.exceptions import APIError

from modules.subscriptions import (
    ISubscriptionStore,
    InMemorySubscriptionStore,
    ProcessedEvent,
    ReconcileOutcome,
    StateWriteFailureError,
    SubscriptionState,
    SubscriptionStatus,
    SupabaseSubscriptionStore,
    TransitionResult,
)
from shared.exceptions import ExternalServiceError
from tests.modules.subscriptions.conftest import NOW


def state(**fields) -> SubscriptionState:
    defaults = dict(
        principal_id="auth-alice",
        customer_ref="cus_1",
        subscription_ref="sub_1",
        status=SubscriptionStatus.ACTIVE,
        current_period_end=NOW + timedelta(days=30),
        last_event_at=NOW,
        updated_at=NOW,
    )
    return SubscriptionState(**{**defaults, **fields})


def record(event_id: str = "evt_1") -> ProcessedEvent:
    return ProcessedEvent(event_id=event_id, event_type="customer.subscription.updated", payload={"id": event_id})


def writes(new_state):
    return lambda current: TransitionResult(new_state, ReconcileOutcome.APPLIED)


def fails(current):
    raise RuntimeError("transition exploded")


class TestInMemorySubscriptionStore:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, ISubscriptionStore)

    def test_apply_records_and_writes(self, store):
        result = store.apply_event(record(), "sub_1", writes(state()))
        assert result.outcome == ReconcileOutcome.APPLIED
        assert store.get_by_principal("auth-alice") == state()
        assert store.get_processed_event("evt_1").processed is True

    def test_transition_receives_current_state(self, store):
        store.apply_event(record("evt_1"), "sub_1", writes(state()))
        seen = []

        def capture(current):
            seen.append(current)
            return TransitionResult(None, ReconcileOutcome.UNCHANGED)

        store.apply_event(record("evt_2"), "sub_1", capture)
        assert seen == [state()]

    def test_duplicate_returns_none_without_calling_transition(self, store):
        store.apply_event(record(), "sub_1", writes(state()))
        transition = MagicMock()
        assert store.apply_event(record(), "sub_1", transition) is None
        transition.assert_not_called()

    def test_upserts_by_principal(self, store, gateway):
        store.apply_event(record("evt_1"), "sub_1", writes(state()))
        store.apply_event(record("evt_2"), "sub_1", writes(state(status=SubscriptionStatus.PAST_DUE)))
        assert len(gateway.select("subscriptions")) == 1
        assert store.get_by_principal("auth-alice").status == SubscriptionStatus.PAST_DUE

    def test_no_state_write_still_marks_processed(self, store, gateway):
        store.apply_event(record(), "sub_1", lambda current: TransitionResult(None, ReconcileOutcome.STALE))
        assert gateway.select("subscriptions") == []
        assert store.get_processed_event("evt_1").processed is True

    def test_failed_transition_keeps_unprocessed_event(self, store, gateway):
        with pytest.raises(StateWriteFailureError) as exc_info:
            store.apply_event(record(), "sub_1", fails)
        assert exc_info.value.details["event_id"] == "evt_1"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert gateway.select("subscriptions") == []
        assert store.get_processed_event("evt_1").processed is False

    def test_failed_write_rolls_back_state(self, store, gateway):
        store.apply_event(record("evt_1"), "sub_1", writes(state()))
        # Another principal already owns sub_2; taking it violates uniqueness.
        store.apply_event(
            record("evt_2"), "sub_2", writes(state(principal_id="auth-bob", subscription_ref="sub_2"))
        )
        with pytest.raises(StateWriteFailureError):
            store.apply_event(record("evt_3"), "sub_2", writes(state(subscription_ref="sub_2")))
        assert store.get_by_principal("auth-alice").subscription_ref == "sub_1"
        assert store.get_processed_event("evt_3").processed is False

    def test_redelivery_after_failure_is_duplicate(self, store):
        with pytest.raises(StateWriteFailureError):
            store.apply_event(record(), "sub_1", fails)
        assert store.apply_event(record(), "sub_1", writes(state())) is None

    def test_lookups(self, store):
        store.apply_event(record(), "sub_1", writes(state()))
        assert store.get_by_subscription_ref("sub_1").principal_id == "auth-alice"
        assert store.find_principal_by_customer("cus_1") == "auth-alice"
        assert store.find_principal_by_customer("cus_unknown") is None
        assert store.get_by_principal("auth-nobody") is None
        assert store.get_processed_event("evt_unknown") is None


class TestSupabaseSubscriptionStore:
    @pytest.fixture
    def db(self):
        db = MagicMock()
        query = db.table.return_value.select.return_value
        query.eq.return_value = query
        query.limit.return_value = query
        query.execute.return_value.data = []
        return db

    @pytest.fixture
    def supabase_store(self, db):
        return SupabaseSubscriptionStore(db)

    def rpc_returns(self, db, value):
        db.rpc.return_value.execute.return_value.data = value

    def test_satisfies_protocol(self, supabase_store):
        assert isinstance(supabase_store, ISubscriptionStore)

    def test_get_by_principal(self, db, supabase_store):
        query = db.table.return_value.select.return_value
        query.execute.return_value.data = [state().to_row()]

        assert supabase_store.get_by_principal("auth-alice") == state()
        db.table.assert_called_with("subscriptions")
        query.eq.assert_called_with("principal_id", "auth-alice")

    def test_get_by_principal_missing(self, supabase_store):
        assert supabase_store.get_by_principal("auth-alice") is None

    def test_apply_calls_rpc_with_state(self, db, supabase_store):
        self.rpc_returns(db, "applied")
        result = supabase_store.apply_event(record(), "sub_1", writes(state()))

        assert result.outcome == ReconcileOutcome.APPLIED
        name, params = db.rpc.call_args.args
        assert name == "apply_subscription_event"
        assert params["p_event_id"] == "evt_1"
        assert params["p_event_type"] == "customer.subscription.updated"
        assert params["p_payload"] == {"id": "evt_1"}
        assert params["p_state"] == state().to_row()
        assert params["p_processed"] is True

    def test_apply_without_state(self, db, supabase_store):
        self.rpc_returns(db, "applied")
        supabase_store.apply_event(
            record(), "sub_1", lambda current: TransitionResult(None, ReconcileOutcome.UNCHANGED)
        )
        assert db.rpc.call_args.args[1]["p_state"] is None

    def test_arrival_ordering_skips_database_stale_check(self, db, supabase_store):
        self.rpc_returns(db, "applied")
        supabase_store.apply_event(record(), "sub_1", writes(state()))
        assert db.rpc.call_args.args[1]["p_stale_guard"] is False

    def test_event_time_stale_in_database(self, db):
        """The row moved on between the read and the write."""
        store = SupabaseSubscriptionStore(db, ordering="event_time")
        self.rpc_returns(db, "stale")

        result = store.apply_event(record(), "sub_1", writes(state()))

        assert db.rpc.call_args.args[1]["p_stale_guard"] is True
        assert result.outcome == ReconcileOutcome.STALE
        assert result.state is None

    def test_duplicate(self, db, supabase_store):
        self.rpc_returns(db, "duplicate")
        assert supabase_store.apply_event(record(), "sub_1", writes(state())) is None

    def test_transition_failure_records_unprocessed(self, db, supabase_store):
        self.rpc_returns(db, "failed")
        with pytest.raises(StateWriteFailureError):
            supabase_store.apply_event(record(), "sub_1", fails)
        params = db.rpc.call_args.args[1]
        assert params["p_processed"] is False
        assert params["p_state"] is None

    def test_transition_failure_on_duplicate_is_duplicate(self, db, supabase_store):
        self.rpc_returns(db, "duplicate")
        assert supabase_store.apply_event(record(), "sub_1", fails) is None

    def test_database_write_failure(self, db, supabase_store):
        self.rpc_returns(db, "failed")
        with pytest.raises(StateWriteFailureError) as exc_info:
            supabase_store.apply_event(record(), "sub_1", writes(state()))
        assert "failed" in exc_info.value.details["reason"]

    def test_rpc_error(self, db, supabase_store):
        db.rpc.return_value.execute.side_effect = APIError(
            {"code": "08006", "message": "connection failure", "details": None, "hint": None}
        )
        with pytest.raises(ExternalServiceError):
            supabase_store.apply_event(record(), "sub_1", writes(state()))
