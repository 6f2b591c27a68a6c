"""
SQLAlchemy database models.
"""

from .base import Base, TimestampMixin
from .photo import Photo, PhotoComment, PhotoLike
from .subscription import Subscription
from .user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "Photo",
    "PhotoLike",
    "PhotoComment",
    "Subscription",
]
