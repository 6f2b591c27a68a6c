"""
User profile and creator schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .auth import validate_password_strength


class AuthorSummary(BaseModel):
    """Account fields shown to anonymous viewers."""

    id: int
    name: str
    avatar_url: Optional[str] = None


class UserSummary(AuthorSummary):
    """Account embedded in subscription listings."""

    email: str


class ProfileUpdateRequest(BaseModel):
    """Profile update request schema. Omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    bio: Optional[str] = Field(None, max_length=2000)
    avatar_url: Optional[str] = Field(None, max_length=500)


class PasswordChangeRequest(BaseModel):
    """Password change request schema."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=100)

    @field_validator("new_password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class BecomeCreatorRequest(BaseModel):
    """Promote the current account to creator."""

    subscription_price: Decimal = Field(..., gt=0, le=99999, max_digits=10, decimal_places=2)


class CreatorListItem(AuthorSummary):
    """Creator entry in the public directory."""

    bio: Optional[str] = None
    subscription_price: Optional[float] = None
    photo_count: int = 0


class CreatorProfileResponse(CreatorListItem):
    """Public profile of a single creator."""

    premium_count: int = 0
    subscriber_count: int = 0
    created_at: datetime
