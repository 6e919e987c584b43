"""
Subscription API endpoints.

Two routers: the Stripe webhook receiver (unauthenticated, verified by
signature) and the current principal's subscription summary.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from api.dependencies import get_subscription_reconciler, get_subscription_service
from api.middleware.auth import get_current_principal
from shared.models import Principal

from .exceptions import InvalidEventError, StateWriteFailureError
from .models import SubscriptionStatusResponse, WebhookResponse
from .reconciler import SubscriptionReconciler
from .service import SubscriptionService

router = APIRouter()
webhook_router = APIRouter()


@router.get("/me", response_model=SubscriptionStatusResponse)
async def get_my_subscription(
    principal: Principal = Depends(get_current_principal),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionStatusResponse:
    """
    Get the current principal's subscription status.

    Principals without a subscription get status "none".
    """
    return service.describe(principal.id)


@webhook_router.post("/stripe", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None),
    reconciler: SubscriptionReconciler = Depends(get_subscription_reconciler),
) -> WebhookResponse:
    """
    Receive a Stripe webhook delivery.

    Returns 400 for unverifiable or malformed events so they are not
    recorded. A state-write failure is acknowledged with outcome "failed"
    since redelivery would only be a duplicate; it is logged for repair.
    """
    payload = await request.body()
    try:
        result = await reconciler.handle_webhook(payload, stripe_signature)
    except InvalidEventError:
        raise HTTPException(status_code=400, detail="Invalid webhook event")
    except StateWriteFailureError:
        return WebhookResponse(outcome="failed")

    return WebhookResponse(outcome=result.outcome.value)
