"""
Subscription ledger: the record of which accounts subscribe to which creators.

An edge is active while its end_date is NULL. Ending a subscription keeps
the row as history; at most one active edge exists per (subscriber, creator)
pair, backed by a partial unique index.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.entitlements import BILLING_PERIOD_DAYS
from core.exceptions import InvalidOperationError, NotFoundError
from infrastructure.database.models import Subscription, User
from services.accounts import user_summary

logger = logging.getLogger(__name__)


class SubscriptionLedger:
    """Service for creating, ending and querying subscription edges."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_creator(self, creator_id: int) -> User:
        creator = await self.db.get(User, creator_id)
        if not creator or not creator.is_creator or not creator.is_active:
            raise NotFoundError("Creator not found")
        return creator

    async def get_active(
        self, subscriber_id: int, creator_id: int
    ) -> Optional[Subscription]:
        """Return the active edge for the pair, if any."""
        result = await self.db.execute(
            select(Subscription).where(
                Subscription.subscriber_id == subscriber_id,
                Subscription.creator_id == creator_id,
                Subscription.end_date.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def subscribe(self, subscriber_id: int, creator_id: int) -> Subscription:
        """
        Create an active subscription from subscriber to creator.

        Subscribing to a creator the account already follows returns the
        existing edge unchanged, so repeated payment confirmations never
        create duplicates.

        Args:
            subscriber_id: Account paying for access
            creator_id: Creator being subscribed to

        Returns:
            The active Subscription

        Raises:
            InvalidOperationError: If subscriber and creator are the same account
            NotFoundError: If the creator does not exist or is not an active creator
        """
        if subscriber_id == creator_id:
            raise InvalidOperationError("Cannot subscribe to yourself")

        await self._get_creator(creator_id)

        existing = await self.get_active(subscriber_id, creator_id)
        if existing:
            logger.info(
                "Subscription %s already active",
                existing.id,
                extra={"subscriber_id": subscriber_id, "creator_id": creator_id},
            )
            return existing

        subscription = Subscription(
            subscriber_id=subscriber_id,
            creator_id=creator_id,
            start_date=datetime.now(timezone.utc),
            end_date=None,
        )
        self.db.add(subscription)
        try:
            await self.db.flush()
        except IntegrityError:
            # A concurrent request created the edge first
            await self.db.rollback()
            existing = await self.get_active(subscriber_id, creator_id)
            if existing is None:
                raise
            return existing

        logger.info(
            "Subscription %s created",
            subscription.id,
            extra={"subscriber_id": subscriber_id, "creator_id": creator_id},
        )
        return subscription

    async def unsubscribe(self, subscriber_id: int, creator_id: int) -> Subscription:
        """
        End the active subscription for the pair.

        Raises:
            NotFoundError: If no active subscription exists
        """
        subscription = await self.get_active(subscriber_id, creator_id)
        if not subscription:
            raise NotFoundError("Subscription not found")

        subscription.end_date = datetime.now(timezone.utc)
        await self.db.flush()

        logger.info(
            "Subscription %s ended",
            subscription.id,
            extra={"subscriber_id": subscriber_id, "creator_id": creator_id},
        )
        return subscription

    async def subscribed_creator_ids(self, subscriber_id: int) -> Set[int]:
        result = await self.db.execute(
            select(Subscription.creator_id).where(
                Subscription.subscriber_id == subscriber_id,
                Subscription.end_date.is_(None),
            )
        )
        return set(result.scalars().all())

    async def is_subscribed(self, subscriber_id: int, creator_id: int) -> bool:
        return await self.get_active(subscriber_id, creator_id) is not None

    async def subscriptions_for(self, subscriber_id: int) -> List[Dict[str, Any]]:
        """Active subscriptions of an account with creator summaries, newest first."""
        result = await self.db.execute(
            select(Subscription, User)
            .join(User, User.id == Subscription.creator_id)
            .where(
                Subscription.subscriber_id == subscriber_id,
                Subscription.end_date.is_(None),
            )
            .order_by(Subscription.start_date.desc(), Subscription.id.desc())
        )
        return [
            {
                "id": subscription.id,
                "creator_id": subscription.creator_id,
                "start_date": subscription.start_date,
                "creator": {
                    **user_summary(creator),
                    "bio": creator.bio,
                    "subscription_price": creator.subscription_price,
                },
            }
            for subscription, creator in result.all()
        ]

    async def subscribers_of(self, creator_id: int) -> List[Dict[str, Any]]:
        """Active subscribers of a creator, newest first."""
        result = await self.db.execute(
            select(Subscription, User)
            .join(User, User.id == Subscription.subscriber_id)
            .where(
                Subscription.creator_id == creator_id,
                Subscription.end_date.is_(None),
            )
            .order_by(Subscription.start_date.desc(), Subscription.id.desc())
        )
        return [
            {
                "id": subscription.id,
                "subscriber_id": subscription.subscriber_id,
                "start_date": subscription.start_date,
                "subscriber": user_summary(subscriber),
            }
            for subscription, subscriber in result.all()
        ]

    async def subscriber_count(self, creator_id: int) -> int:
        count = await self.db.scalar(
            select(func.count(Subscription.id)).where(
                Subscription.creator_id == creator_id,
                Subscription.end_date.is_(None),
            )
        )
        return count or 0

    async def status(self, subscriber_id: int, creator_id: int) -> Dict[str, Any]:
        """Subscription state for the pair, with the next billing date when active."""
        subscription = await self.get_active(subscriber_id, creator_id)
        if not subscription:
            return {
                "is_subscribed": False,
                "subscription_date": None,
                "next_billing_date": None,
            }
        return {
            "is_subscribed": True,
            "subscription_date": subscription.start_date,
            "next_billing_date": subscription.start_date
            + timedelta(days=BILLING_PERIOD_DAYS),
        }
