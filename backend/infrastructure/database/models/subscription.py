"""
Subscription database model.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class Subscription(Base):
    """Directed subscriber -> creator edge. end_date is NULL while active."""

    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subscriber_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    creator_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    end_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        # At most one active edge per (subscriber, creator); ended rows are kept as history
        Index(
            "uq_subscriptions_active_pair",
            "subscriber_id",
            "creator_id",
            unique=True,
            postgresql_where=text("end_date IS NULL"),
            sqlite_where=text("end_date IS NULL"),
        ),
        Index("ix_subscriptions_creator_active", "creator_id", "end_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Subscription(id={self.id}, subscriber_id={self.subscriber_id}, "
            f"creator_id={self.creator_id}, active={self.is_active})>"
        )

    @property
    def is_active(self) -> bool:
        return self.end_date is None
