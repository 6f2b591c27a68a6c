"""
Photo, like and comment schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .user import AuthorSummary


class PhotoResponse(BaseModel):
    """Photo response schema."""

    id: int
    creator_id: int
    url: str
    description: Optional[str] = None
    is_premium: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PhotoUpdateRequest(BaseModel):
    """Photo update request schema. Omitted fields are left unchanged."""

    description: Optional[str] = Field(None, max_length=2000)
    is_premium: Optional[bool] = None

    @field_validator("is_premium")
    @classmethod
    def reject_null_premium(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("is_premium must be true or false")
        return v


class CreatorPhotosResponse(BaseModel):
    """A creator's gallery as seen by the requesting viewer."""

    creator_id: int
    has_access: bool
    photos: List[PhotoResponse]
    public_photos: List[PhotoResponse]
    premium_photos: List[PhotoResponse]
    total_count: int
    premium_count: int
    preview_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class LikeEntry(BaseModel):
    id: int
    created_at: datetime
    user: AuthorSummary


class LikesResponse(BaseModel):
    """Likes on a photo."""

    count: int
    likes: List[LikeEntry]


class CommentRequest(BaseModel):
    """New comment. Whitespace-only content is rejected by the service."""

    content: str = Field(..., max_length=2000)


class CommentResponse(BaseModel):
    """Comment with its author."""

    id: int
    photo_id: int
    content: str
    created_at: datetime
    updated_at: datetime
    user: AuthorSummary


class MessageResponse(BaseModel):
    message: str
