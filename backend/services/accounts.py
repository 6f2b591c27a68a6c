"""
Account service: registration, credentials, profiles and the creator role.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from core.security.password import PasswordHasher
from infrastructure.config.settings import settings
from infrastructure.database.models import Photo, Subscription, User

logger = logging.getLogger(__name__)

password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

_PROFILE_FIELDS = ("name", "bio", "avatar_url")


def author_summary(user: User) -> Dict[str, Any]:
    """Account fields safe to show anonymous viewers. Never includes the email."""
    return {
        "id": user.id,
        "name": user.display_name,
        "avatar_url": user.avatar_url,
    }


def user_summary(user: User) -> Dict[str, Any]:
    """Account fields shared with authenticated counterparts (subscribers, creators)."""
    return {**author_summary(user), "email": user.email}


class AccountService:
    """Service for account lifecycle operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def register(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        is_creator: bool = False,
        subscription_price: Optional[Decimal] = None,
    ) -> User:
        """
        Create a new account.

        Raises:
            ConflictError: If the email is already registered
        """
        email = email.lower()
        if await self.get_by_email(email):
            raise ConflictError("Email already registered")

        user = User(
            email=email,
            password_hash=password_hasher.hash(password),
            name=name,
            is_creator=is_creator,
            subscription_price=subscription_price if is_creator else None,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Email already registered")

        logger.info("Registered account %s", user.id, extra={"user_id": user.id})
        return user

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the account if the credentials match, None otherwise."""
        user = await self.get_by_email(email)
        if not user or not password_hasher.verify(password, user.password_hash):
            return None
        return user

    async def update_profile(self, user: User, patch: Dict[str, Any]) -> User:
        """Apply name/bio/avatar changes. Unknown keys are ignored."""
        for field in _PROFILE_FIELDS:
            if field in patch:
                setattr(user, field, patch[field])
        await self.db.flush()
        return user

    async def change_password(
        self, user: User, current_password: str, new_password: str
    ) -> None:
        """
        Replace the account password.

        Raises:
            ForbiddenError: If the current password is wrong
            InvalidInputError: If the new password equals the current one
        """
        if not password_hasher.verify(current_password, user.password_hash):
            raise ForbiddenError("Current password is incorrect")
        if current_password == new_password:
            raise InvalidInputError("New password must differ from the current password")

        user.password_hash = password_hasher.hash(new_password)
        await self.db.flush()
        logger.info("Password changed for account %s", user.id, extra={"user_id": user.id})

    async def become_creator(self, user: User, subscription_price: Decimal) -> User:
        """
        Promote an account to creator. The role is never revoked.

        Raises:
            ConflictError: If the account is already a creator
        """
        if user.is_creator:
            raise ConflictError("User is already a creator")

        user.is_creator = True
        user.subscription_price = subscription_price
        await self.db.flush()
        logger.info("Account %s became a creator", user.id, extra={"user_id": user.id})
        return user

    async def list_creators(self) -> List[Dict[str, Any]]:
        """Active creators with their photo counts, newest account first."""
        photo_counts = (
            select(Photo.creator_id, func.count(Photo.id).label("photo_count"))
            .group_by(Photo.creator_id)
            .subquery()
        )
        result = await self.db.execute(
            select(User, func.coalesce(photo_counts.c.photo_count, 0))
            .outerjoin(photo_counts, photo_counts.c.creator_id == User.id)
            .where(User.is_creator.is_(True), User.is_active.is_(True))
            .order_by(User.created_at.desc(), User.id.desc())
        )
        return [
            {
                **author_summary(user),
                "bio": user.bio,
                "subscription_price": user.subscription_price,
                "photo_count": photo_count,
            }
            for user, photo_count in result.all()
        ]

    async def creator_profile(self, creator_id: int) -> Dict[str, Any]:
        """
        Public profile of a creator with content and audience counts.

        Raises:
            NotFoundError: If no active creator has this id
        """
        creator = await self.db.get(User, creator_id)
        if not creator or not creator.is_creator or not creator.is_active:
            raise NotFoundError("Creator not found")

        photo_count = await self.db.scalar(
            select(func.count(Photo.id)).where(Photo.creator_id == creator_id)
        )
        premium_count = await self.db.scalar(
            select(func.count(Photo.id)).where(
                Photo.creator_id == creator_id, Photo.is_premium.is_(True)
            )
        )
        subscriber_count = await self.db.scalar(
            select(func.count(Subscription.id)).where(
                Subscription.creator_id == creator_id,
                Subscription.end_date.is_(None),
            )
        )
        return {
            **author_summary(creator),
            "bio": creator.bio,
            "subscription_price": creator.subscription_price,
            "photo_count": photo_count or 0,
            "premium_count": premium_count or 0,
            "subscriber_count": subscriber_count or 0,
            "created_at": creator.created_at,
        }
