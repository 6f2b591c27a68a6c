"""
Checkout service: starts paid checkouts and applies payment confirmations
to the subscription ledger.
"""

import logging
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from adapters.payments.stripe_adapter import CheckoutSession, StripeAdapter
from core.exceptions import InvalidInputError, InvalidOperationError, NotFoundError
from infrastructure.config.settings import settings
from infrastructure.database.models import Subscription, User
from services.subscription_ledger import SubscriptionLedger

logger = logging.getLogger(__name__)


def _parse_id(value: Any) -> Optional[int]:
    """Positive integer id from webhook metadata, None when malformed."""
    if isinstance(value, bool):
        return None
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


class CheckoutService:
    """Bridges the payment provider and the subscription ledger."""

    def __init__(self, db: AsyncSession, payments: StripeAdapter):
        self.db = db
        self.payments = payments
        self.ledger = SubscriptionLedger(db)

    async def start_checkout(
        self, subscriber: User, creator_id: int, amount: int
    ) -> CheckoutSession:
        """
        Open a payment session for subscribing to a creator.

        Raises:
            InvalidInputError: If the amount is outside the allowed range
            InvalidOperationError: If the subscriber is the creator
            NotFoundError: If the creator does not exist or is not a creator
        """
        if not settings.checkout_min_amount <= amount <= settings.checkout_max_amount:
            raise InvalidInputError(
                f"Amount must be between {settings.checkout_min_amount} "
                f"and {settings.checkout_max_amount}"
            )
        if subscriber.id == creator_id:
            raise InvalidOperationError("Cannot subscribe to yourself")

        creator = await self.db.get(User, creator_id)
        if not creator or not creator.is_creator or not creator.is_active:
            raise NotFoundError("Creator not found")

        return await self.payments.create_checkout_session(
            creator_id=creator_id,
            subscriber_id=subscriber.id,
            amount=amount,
            product_name=f"Subscription to {creator.display_name}",
        )

    async def confirm_checkout(
        self, metadata: Mapping[str, Any]
    ) -> Optional[Subscription]:
        """
        Apply a completed checkout to the ledger.

        Malformed metadata or references to unknown accounts are logged at
        ERROR and reported as None; the webhook still acknowledges receipt
        so the provider does not retry a payload that can never succeed.
        """
        creator_id = _parse_id(metadata.get("creatorId"))
        subscriber_id = _parse_id(metadata.get("subscriberId"))

        if creator_id is None or subscriber_id is None:
            logger.error(
                "Checkout completed with invalid metadata: %r",
                dict(metadata),
                extra={"event": "checkout_metadata_invalid"},
            )
            return None

        subscriber = await self.db.get(User, subscriber_id)
        if not subscriber:
            logger.error(
                "Checkout completed for unknown subscriber %s",
                subscriber_id,
                extra={
                    "event": "checkout_metadata_invalid",
                    "subscriber_id": subscriber_id,
                    "creator_id": creator_id,
                },
            )
            return None

        try:
            subscription = await self.ledger.subscribe(subscriber_id, creator_id)
        except (NotFoundError, InvalidOperationError) as e:
            logger.error(
                "Checkout could not be applied: %s",
                e.message,
                extra={
                    "event": "checkout_metadata_invalid",
                    "subscriber_id": subscriber_id,
                    "creator_id": creator_id,
                },
            )
            return None

        logger.info(
            "Checkout confirmed, subscription %s active",
            subscription.id,
            extra={
                "event": "checkout_confirmed",
                "subscriber_id": subscriber_id,
                "creator_id": creator_id,
            },
        )
        return subscription
