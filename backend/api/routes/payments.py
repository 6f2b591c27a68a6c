"""
Payment routes: Stripe Checkout sessions and the completion webhook.
"""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.payments.stripe_adapter import (
    StripeAdapter,
    StripeAPIError,
    StripeAuthError,
    StripeWebhookError,
    get_stripe_adapter,
)
from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User
from api.dependencies import get_current_user
from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.payment import CheckoutRequest, CheckoutResponse, WebhookResponse
from services.checkout import CheckoutService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])

CHECKOUT_COMPLETED = "checkout.session.completed"


@router.post("/subscribe", response_model=CheckoutResponse)
@limiter.limit(get_rate_limit("checkout"))
async def create_checkout(
    request: Request,
    body: CheckoutRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    payments: StripeAdapter = Depends(get_stripe_adapter),
):
    """
    Start a Stripe Checkout session for subscribing to a creator.

    The subscription is created by the webhook once payment completes.
    """
    try:
        session = await CheckoutService(db, payments).start_checkout(
            current_user, body.creator_id, body.amount
        )
    except StripeAuthError as e:
        logger.error("Stripe not configured: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payments are not configured",
        )
    except StripeAPIError as e:
        logger.error("Checkout session creation failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Payment provider error",
        )

    return {"session_id": session.id, "url": session.url}


@router.post("/webhook", response_model=WebhookResponse)
@limiter.limit(get_rate_limit("default"))
async def handle_webhook(
    request: Request,
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
    db: AsyncSession = Depends(get_db),
    payments: StripeAdapter = Depends(get_stripe_adapter),
):
    """
    Handle Stripe webhook events.

    checkout.session.completed subscribes the paying account to the creator
    named in the session metadata. Other event types are acknowledged and
    ignored.
    """
    body = await request.body()

    if not stripe_signature:
        logger.warning("Webhook received without signature")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing Stripe-Signature header",
        )

    try:
        valid = payments.verify_webhook_signature(body, stripe_signature)
    except StripeWebhookError:
        logger.error("Webhook rejected: STRIPE_WEBHOOK_SECRET not configured")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Webhook verification not configured",
        )

    if not valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook signature",
        )

    try:
        event = payments.parse_webhook_event(json.loads(body))
    except (ValueError, StripeWebhookError) as e:
        logger.error("Invalid webhook payload: %s", e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook payload",
        )

    if event.type != CHECKOUT_COMPLETED:
        logger.info("Ignoring webhook event %s", event.type)
        return {"received": True, "status": "ignored"}

    subscription = await CheckoutService(db, payments).confirm_checkout(event.metadata)
    if subscription is None:
        return {"received": True, "status": "ignored"}

    await db.commit()
    return {"received": True, "status": "processed"}
