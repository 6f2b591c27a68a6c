"""
Subscription routes.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User
from api.dependencies import get_current_creator, get_current_user
from api.schemas.photo import MessageResponse
from api.schemas.subscription import (
    MySubscriberItem,
    MySubscriptionItem,
    SubscribeRequest,
    SubscriptionCheckResponse,
    SubscriptionResponse,
    SubscriptionStatusResponse,
)
from services.subscription_ledger import SubscriptionLedger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("/subscribe", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(
    body: SubscribeRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """
    Subscribe the current account to a creator.

    Paid subscriptions go through /payments/subscribe; this endpoint records
    the edge directly. Subscribing twice returns the existing subscription.
    """
    subscription = await SubscriptionLedger(db).subscribe(current_user.id, body.creator_id)
    await db.commit()
    return subscription


@router.delete("/{creator_id}", response_model=MessageResponse)
async def unsubscribe(
    creator_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """End the current account's subscription to a creator."""
    await SubscriptionLedger(db).unsubscribe(current_user.id, creator_id)
    await db.commit()
    return {"message": "Unsubscribed successfully"}


@router.get("/my-subscriptions", response_model=List[MySubscriptionItem])
async def my_subscriptions(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Creators the current account actively subscribes to."""
    return await SubscriptionLedger(db).subscriptions_for(current_user.id)


@router.get("/my-subscribers", response_model=List[MySubscriberItem])
async def my_subscribers(
    current_user: Annotated[User, Depends(get_current_creator)],
    db: AsyncSession = Depends(get_db),
):
    """Active subscribers of the current creator."""
    return await SubscriptionLedger(db).subscribers_of(current_user.id)


@router.get("/check/{creator_id}", response_model=SubscriptionCheckResponse)
async def check_subscription(
    creator_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Whether the current account actively subscribes to a creator."""
    is_subscribed = await SubscriptionLedger(db).is_subscribed(current_user.id, creator_id)
    return {"is_subscribed": is_subscribed}


@router.get("/status/{creator_id}", response_model=SubscriptionStatusResponse)
async def subscription_status(
    creator_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Subscription date and next billing date for a creator."""
    return await SubscriptionLedger(db).status(current_user.id, creator_id)
