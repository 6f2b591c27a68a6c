"""
Subscription schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .user import UserSummary


class SubscribeRequest(BaseModel):
    """Direct subscription request schema."""

    creator_id: int = Field(..., gt=0)


class SubscriptionResponse(BaseModel):
    """A single subscription edge."""

    id: int
    subscriber_id: int
    creator_id: int
    start_date: datetime
    end_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubscribedCreator(UserSummary):
    bio: Optional[str] = None
    subscription_price: Optional[float] = None


class MySubscriptionItem(BaseModel):
    """Creator the current account subscribes to."""

    id: int
    creator_id: int
    start_date: datetime
    creator: SubscribedCreator


class MySubscriberItem(BaseModel):
    """Account subscribing to the current creator."""

    id: int
    subscriber_id: int
    start_date: datetime
    subscriber: UserSummary


class SubscriptionCheckResponse(BaseModel):
    is_subscribed: bool


class SubscriptionStatusResponse(BaseModel):
    """Subscription state between the current account and a creator."""

    is_subscribed: bool
    subscription_date: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
