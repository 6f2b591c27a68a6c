"""
Content store for photos, likes and comments.

Mutations are guarded by ownership: only a photo's creator may edit or
delete it, and a comment may be removed by its author or by the creator
of the photo it was left on. Visibility checks live in
services/entitlements.py.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from infrastructure.database.models import Photo, PhotoComment, PhotoLike, User
from services.accounts import author_summary

logger = logging.getLogger(__name__)

_PATCHABLE_FIELDS = ("description", "is_premium")
# Columns that cannot be cleared; a None in the patch leaves them unchanged
_NON_NULLABLE_FIELDS = {"is_premium"}


class ContentStore:
    """Service for photo, like and comment persistence."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, photo_id: int) -> Photo:
        photo = await self.db.get(Photo, photo_id)
        if not photo:
            raise NotFoundError("Photo not found")
        return photo

    async def _get_owned(self, photo_id: int, requester_id: int) -> Photo:
        photo = await self.get(photo_id)
        if photo.creator_id != requester_id:
            raise ForbiddenError("You can only modify your own photos")
        return photo

    async def create(
        self,
        owner_id: int,
        url: str,
        description: Optional[str] = None,
        is_premium: bool = False,
    ) -> Photo:
        photo = Photo(
            creator_id=owner_id,
            url=url,
            description=description,
            is_premium=is_premium,
        )
        self.db.add(photo)
        await self.db.flush()
        logger.info(
            "Photo %s created (premium=%s)",
            photo.id,
            is_premium,
            extra={"photo_id": photo.id, "creator_id": owner_id},
        )
        return photo

    async def update(
        self, photo_id: int, requester_id: int, patch: Dict[str, Any]
    ) -> Photo:
        """
        Update description and/or premium flag of a photo.

        Args:
            photo_id: Photo to update
            requester_id: Account asking for the change
            patch: Fields to change; keys other than description and is_premium are ignored

        Raises:
            NotFoundError: If the photo does not exist
            ForbiddenError: If the requester is not the photo's creator
        """
        photo = await self._get_owned(photo_id, requester_id)
        for field in _PATCHABLE_FIELDS:
            if field not in patch:
                continue
            if patch[field] is None and field in _NON_NULLABLE_FIELDS:
                continue
            setattr(photo, field, patch[field])
        await self.db.flush()
        return photo

    async def delete(self, photo_id: int, requester_id: int) -> str:
        """
        Delete a photo together with its likes and comments.

        Returns:
            The stored url, so the caller can remove the file
        """
        photo = await self._get_owned(photo_id, requester_id)
        url = photo.url

        await self.db.execute(delete(PhotoLike).where(PhotoLike.photo_id == photo_id))
        await self.db.execute(delete(PhotoComment).where(PhotoComment.photo_id == photo_id))
        await self.db.delete(photo)
        await self.db.flush()

        logger.info(
            "Photo %s deleted",
            photo_id,
            extra={"photo_id": photo_id, "creator_id": requester_id},
        )
        return url

    async def list_by_owner(self, owner_id: int) -> List[Photo]:
        result = await self.db.execute(
            select(Photo)
            .where(Photo.creator_id == owner_id)
            .order_by(Photo.created_at.desc(), Photo.id.desc())
        )
        return list(result.scalars().all())

    # Likes

    async def react(self, photo_id: int, account_id: int) -> PhotoLike:
        """
        Like a photo.

        Raises:
            NotFoundError: If the photo does not exist
            ConflictError: If the account already likes the photo
        """
        await self.get(photo_id)

        existing = await self.db.execute(
            select(PhotoLike.id).where(
                PhotoLike.photo_id == photo_id, PhotoLike.user_id == account_id
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("Photo already liked")

        like = PhotoLike(photo_id=photo_id, user_id=account_id)
        self.db.add(like)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Photo already liked")
        return like

    async def unreact(self, photo_id: int, account_id: int) -> None:
        """
        Remove a like.

        Raises:
            NotFoundError: If the account has not liked the photo
        """
        result = await self.db.execute(
            select(PhotoLike).where(
                PhotoLike.photo_id == photo_id, PhotoLike.user_id == account_id
            )
        )
        like = result.scalar_one_or_none()
        if not like:
            raise NotFoundError("Like not found")
        await self.db.delete(like)
        await self.db.flush()

    async def list_reactions(self, photo_id: int) -> Dict[str, Any]:
        """Like count and likers of a photo, oldest like first."""
        await self.get(photo_id)
        result = await self.db.execute(
            select(PhotoLike, User)
            .join(User, User.id == PhotoLike.user_id)
            .where(PhotoLike.photo_id == photo_id)
            .order_by(PhotoLike.id)
        )
        likes = [
            {"id": like.id, "created_at": like.created_at, "user": author_summary(user)}
            for like, user in result.all()
        ]
        return {"count": len(likes), "likes": likes}

    # Comments

    async def annotate(self, photo_id: int, account_id: int, text: str) -> PhotoComment:
        """
        Comment on a photo. Surrounding whitespace is stripped.

        Raises:
            NotFoundError: If the photo does not exist
            InvalidInputError: If the comment is empty after stripping
        """
        await self.get(photo_id)

        content = (text or "").strip()
        if not content:
            raise InvalidInputError("Comment content cannot be empty")

        comment = PhotoComment(photo_id=photo_id, user_id=account_id, content=content)
        self.db.add(comment)
        await self.db.flush()
        return comment

    async def list_annotations(self, photo_id: int) -> List[Dict[str, Any]]:
        """Comments on a photo with author summaries, newest first."""
        await self.get(photo_id)
        result = await self.db.execute(
            select(PhotoComment, User)
            .join(User, User.id == PhotoComment.user_id)
            .where(PhotoComment.photo_id == photo_id)
            .order_by(PhotoComment.created_at.desc(), PhotoComment.id.desc())
        )
        return [
            {
                "id": comment.id,
                "photo_id": comment.photo_id,
                "content": comment.content,
                "created_at": comment.created_at,
                "updated_at": comment.updated_at,
                "user": author_summary(author),
            }
            for comment, author in result.all()
        ]

    async def delete_annotation(self, comment_id: int, requester_id: int) -> None:
        """
        Delete a comment.

        Allowed for the comment's author and for the creator of the photo
        the comment belongs to.

        Raises:
            NotFoundError: If the comment does not exist
            ForbiddenError: If the requester is neither author nor photo owner
        """
        result = await self.db.execute(
            select(PhotoComment, Photo.creator_id)
            .join(Photo, Photo.id == PhotoComment.photo_id)
            .where(PhotoComment.id == comment_id)
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("Comment not found")

        comment, photo_owner_id = row
        is_author = comment.user_id == requester_id
        is_photo_owner = photo_owner_id == requester_id
        if not (is_author or is_photo_owner):
            raise ForbiddenError(
                "You can only delete your own comments or comments on your photos"
            )

        await self.db.delete(comment)
        await self.db.flush()
        logger.info(
            "Comment %s deleted by %s",
            comment_id,
            "author" if is_author else "photo owner",
            extra={"user_id": requester_id},
        )
