"""
Entitlement service: applies the access rules in core.entitlements to
stored photos and subscriptions.

Every decision re-reads the subscription ledger; nothing is cached, so an
unsubscribe takes effect on the very next request.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.entitlements import PREVIEW_LIMIT, can_view, has_creator_access
from core.exceptions import ForbiddenError, NotFoundError
from infrastructure.database.models import Photo, Subscription, User
from services.subscription_ledger import SubscriptionLedger

logger = logging.getLogger(__name__)


@dataclass
class CreatorPhotos:
    """A creator's gallery as seen by one viewer."""

    has_access: bool
    photos: List[Photo]
    public_photos: List[Photo]
    premium_photos: List[Photo]
    total_count: int
    premium_count: int
    preview_count: Optional[int] = None
    creator_id: int = 0


class EntitlementService:
    """Service answering who may see which photos."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = SubscriptionLedger(db)

    def _active_creator_ids(self, viewer_id: int):
        return select(Subscription.creator_id).where(
            Subscription.subscriber_id == viewer_id,
            Subscription.end_date.is_(None),
        )

    async def can_view(self, viewer_id: Optional[int], photo: Photo) -> bool:
        """Whether the viewer may see this photo."""
        if not photo.is_premium or viewer_id is None or viewer_id == photo.creator_id:
            return can_view(viewer_id, photo.creator_id, photo.is_premium)

        subscribed = await self.ledger.is_subscribed(viewer_id, photo.creator_id)
        return can_view(
            viewer_id,
            photo.creator_id,
            photo.is_premium,
            {photo.creator_id} if subscribed else (),
        )

    async def get_photo_for_viewer(self, photo_id: int, viewer_id: Optional[int]) -> Photo:
        """
        Load a photo the viewer is entitled to see.

        Raises:
            NotFoundError: If the photo does not exist
            ForbiddenError: If the photo is premium and the viewer has no access
        """
        photo = await self.db.get(Photo, photo_id)
        if not photo:
            raise NotFoundError("Photo not found")
        if not await self.can_view(viewer_id, photo):
            logger.debug(
                "Viewer %s denied premium photo %s",
                viewer_id,
                photo_id,
                extra={"photo_id": photo_id, "creator_id": photo.creator_id},
            )
            raise ForbiddenError("Subscription required to access this photo")
        return photo

    async def accessible_photos(self, viewer_id: Optional[int]) -> List[Photo]:
        """
        Every photo the viewer may see, in upload order.

        Public photos, the viewer's own photos, and premium photos of
        creators the viewer actively subscribes to, in a single query.
        """
        conditions = [Photo.is_premium.is_(False)]
        if viewer_id is not None:
            conditions.append(Photo.creator_id == viewer_id)
            conditions.append(Photo.creator_id.in_(self._active_creator_ids(viewer_id)))

        result = await self.db.execute(
            select(Photo).where(or_(*conditions)).order_by(Photo.id)
        )
        return list(result.scalars().all())

    async def subscribed_feed(self, viewer_id: int) -> List[Photo]:
        """All photos of creators the viewer subscribes to, newest first."""
        result = await self.db.execute(
            select(Photo)
            .where(Photo.creator_id.in_(self._active_creator_ids(viewer_id)))
            .order_by(Photo.created_at.desc(), Photo.id.desc())
        )
        return list(result.scalars().all())

    async def creator_photos(
        self, creator_id: int, viewer_id: Optional[int]
    ) -> CreatorPhotos:
        """
        A creator's gallery filtered by the viewer's entitlement.

        Viewers with access get every photo. Everyone else gets up to
        PREVIEW_LIMIT public photos plus the true totals; premium rows are
        never loaded for them.

        Raises:
            NotFoundError: If no creator account has this id
        """
        creator = await self.db.get(User, creator_id)
        if not creator or not creator.is_creator:
            raise NotFoundError("Creator not found")

        subscribed = set()
        if viewer_id is not None and viewer_id != creator_id:
            if await self.ledger.is_subscribed(viewer_id, creator_id):
                subscribed.add(creator_id)
        access = has_creator_access(viewer_id, creator_id, subscribed)

        newest_first = (Photo.created_at.desc(), Photo.id.desc())

        if access:
            result = await self.db.execute(
                select(Photo).where(Photo.creator_id == creator_id).order_by(*newest_first)
            )
            photos = list(result.scalars().all())
            premium = [p for p in photos if p.is_premium]
            return CreatorPhotos(
                has_access=True,
                photos=photos,
                public_photos=[p for p in photos if not p.is_premium],
                premium_photos=premium,
                total_count=len(photos),
                premium_count=len(premium),
                creator_id=creator_id,
            )

        counts = await self.db.execute(
            select(
                func.count(Photo.id),
                func.coalesce(func.sum(case((Photo.is_premium.is_(True), 1), else_=0)), 0),
            ).where(Photo.creator_id == creator_id)
        )
        total_count, premium_count = counts.one()

        result = await self.db.execute(
            select(Photo)
            .where(Photo.creator_id == creator_id, Photo.is_premium.is_(False))
            .order_by(*newest_first)
            .limit(PREVIEW_LIMIT)
        )
        preview = list(result.scalars().all())

        return CreatorPhotos(
            has_access=False,
            photos=preview,
            public_photos=list(preview),
            premium_photos=[],
            total_count=int(total_count),
            premium_count=int(premium_count),
            preview_count=len(preview),
            creator_id=creator_id,
        )
