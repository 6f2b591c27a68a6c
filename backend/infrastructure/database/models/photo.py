"""
Content database models: Photo, PhotoLike and PhotoComment.
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class Photo(Base, TimestampMixin):
    """Photo uploaded by a creator, optionally gated behind a subscription."""

    __tablename__ = "photos"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Owner, fixed at creation
    creator_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Opaque locator of the stored image
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_photos_creator_premium", "creator_id", "is_premium"),
        Index("ix_photos_premium", "is_premium"),
    )

    def __repr__(self) -> str:
        return f"<Photo(id={self.id}, creator_id={self.creator_id}, is_premium={self.is_premium})>"


class PhotoLike(Base, TimestampMixin):
    """A user's like on a photo. One per (user, photo)."""

    __tablename__ = "photo_likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    photo_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("photos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "photo_id", name="uq_photo_likes_user_photo"),
    )

    def __repr__(self) -> str:
        return f"<PhotoLike(user_id={self.user_id}, photo_id={self.photo_id})>"


class PhotoComment(Base, TimestampMixin):
    """Comment left by a user on a photo."""

    __tablename__ = "photo_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    photo_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("photos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<PhotoComment(id={self.id}, photo_id={self.photo_id}, user_id={self.user_id})>"
