"""
Inbound lifecycle events.

A webhook body is parsed in two steps: ``parse_envelope`` checks the outer
shape (id, type, data) that every provider event has, then
``to_lifecycle_event`` maps the handled event types onto a closed tagged
union. Event types outside that union map to None and are ignored.

Only the fields present in the provider object are set on the event model,
so ``model_fields_set`` tells transitions which fields an update carries.
"""

from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .exceptions import InvalidEventError
from .models import SubscriptionStatus, UtcDatetime

SUBSCRIPTION_CREATED = "customer.subscription.created"
SUBSCRIPTION_UPDATED = "customer.subscription.updated"
SUBSCRIPTION_DELETED = "customer.subscription.deleted"
INVOICE_PAYMENT_FAILED = "invoice.payment_failed"

SUBSCRIPTION_EVENT_TYPES = frozenset(
    {SUBSCRIPTION_CREATED, SUBSCRIPTION_UPDATED, SUBSCRIPTION_DELETED}
)
HANDLED_EVENT_TYPES = SUBSCRIPTION_EVENT_TYPES | {INVOICE_PAYMENT_FAILED}

# Stripe subscription object field -> event field
SUBSCRIPTION_FIELDS = {
    "status": "status",
    "current_period_start": "current_period_start",
    "current_period_end": "current_period_end",
    "cancel_at_period_end": "cancel_at_period_end",
    "trial_end": "trial_end",
}


class WebhookEnvelope(BaseModel):
    """The outer shape shared by all provider events."""

    model_config = ConfigDict(frozen=True)

    event_id: str
    type: str
    created: Optional[UtcDatetime] = None
    data: dict[str, Any] = Field(default_factory=dict, description="The event's object")
    payload: dict[str, Any] = Field(default_factory=dict, description="Raw body")


class _LifecycleEventBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    event_id: str
    occurred_at: Optional[UtcDatetime] = None
    subscription_ref: str = Field(..., min_length=1)
    customer_ref: Optional[str] = None
    principal_id: Optional[str] = None


class _SubscriptionEventBase(_LifecycleEventBase):
    status: Optional[SubscriptionStatus] = None
    current_period_start: Optional[UtcDatetime] = None
    current_period_end: Optional[UtcDatetime] = None
    cancel_at_period_end: Optional[bool] = None
    trial_end: Optional[UtcDatetime] = None


class SubscriptionCreated(_SubscriptionEventBase):
    kind: Literal["customer.subscription.created"] = SUBSCRIPTION_CREATED
    status: SubscriptionStatus


class SubscriptionUpdated(_SubscriptionEventBase):
    kind: Literal["customer.subscription.updated"] = SUBSCRIPTION_UPDATED


class SubscriptionDeleted(_SubscriptionEventBase):
    kind: Literal["customer.subscription.deleted"] = SUBSCRIPTION_DELETED


class InvoicePaymentFailed(_LifecycleEventBase):
    kind: Literal["invoice.payment_failed"] = INVOICE_PAYMENT_FAILED


LifecycleEvent = Annotated[
    Union[SubscriptionCreated, SubscriptionUpdated, SubscriptionDeleted, InvoicePaymentFailed],
    Field(discriminator="kind"),
]

_lifecycle_adapter: TypeAdapter = TypeAdapter(LifecycleEvent)


def parse_envelope(body: Any) -> WebhookEnvelope:
    """
    Validate the outer event shape.

    Accepts ``event_id`` or Stripe's ``id``, and ``data.object`` or a bare
    ``data`` object.

    Raises:
        InvalidEventError: If the id, type or data object is missing
    """
    if not isinstance(body, Mapping):
        raise InvalidEventError("body must be a JSON object")

    event_id = body.get("event_id") or body.get("id")
    if not isinstance(event_id, str) or not event_id:
        raise InvalidEventError("missing event id")

    event_type = body.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise InvalidEventError("missing event type", event_id=event_id)

    data = body.get("data")
    if not isinstance(data, Mapping):
        raise InvalidEventError("missing event data", event_id=event_id)
    obj = data.get("object", data)
    if not isinstance(obj, Mapping):
        raise InvalidEventError("event data is not an object", event_id=event_id)

    try:
        return WebhookEnvelope(
            event_id=event_id,
            type=event_type,
            created=body.get("created"),
            data=dict(obj),
            payload=dict(body),
        )
    except PydanticValidationError:
        raise InvalidEventError("invalid created timestamp", event_id=event_id)


def to_lifecycle_event(envelope: WebhookEnvelope) -> Optional[LifecycleEvent]:
    """
    Map an envelope onto the handled event kinds.

    Returns:
        The typed event, or None if the event type is not handled

    Raises:
        InvalidEventError: If a handled event lacks its subscription
            reference or carries values of the wrong type
    """
    if envelope.type not in HANDLED_EVENT_TYPES:
        return None

    obj = envelope.data
    fields: dict[str, Any] = {
        "kind": envelope.type,
        "event_id": envelope.event_id,
        "occurred_at": envelope.created,
    }

    if envelope.type == INVOICE_PAYMENT_FAILED:
        details = obj.get("subscription_details")
        subscription = obj.get("subscription")
        metadata = details.get("metadata") if isinstance(details, Mapping) else None
        if subscription is None and isinstance(details, Mapping):
            subscription = details.get("subscription")
    else:
        subscription = obj.get("id")
        metadata = obj.get("metadata")
        fields.update(_subscription_fields(obj))

    fields["subscription_ref"] = _reference(subscription)
    customer_ref = _reference(obj.get("customer"))
    if customer_ref is not None:
        fields["customer_ref"] = customer_ref
    if isinstance(metadata, Mapping) and metadata.get("user_id"):
        fields["principal_id"] = str(metadata["user_id"])

    try:
        return _lifecycle_adapter.validate_python(fields)
    except PydanticValidationError as e:
        problems = ", ".join(".".join(str(p) for p in err["loc"][1:]) for err in e.errors())
        raise InvalidEventError(f"invalid fields: {problems}", event_id=envelope.event_id)


def _subscription_fields(obj: Mapping[str, Any]) -> dict[str, Any]:
    fields = {
        target: obj[source]
        for source, target in SUBSCRIPTION_FIELDS.items()
        if source in obj
    }
    # Newer API versions report billing periods on the subscription items.
    items = obj.get("items")
    if isinstance(items, Mapping) and isinstance(items.get("data"), list) and items["data"]:
        first = items["data"][0]
        if isinstance(first, Mapping):
            for key in ("current_period_start", "current_period_end"):
                if key not in fields and key in first:
                    fields[key] = first[key]
    return fields


def _reference(value: Any) -> Optional[str]:
    """Provider references are either an ID string or an expanded object."""
    if isinstance(value, Mapping):
        value = value.get("id")
    if isinstance(value, str) and value:
        return value
    return None
