"""
Photo routes: upload, gated viewing, likes and comments.
"""

import logging
import os
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.storage.photo_storage import ALLOWED_EXTENSIONS, StorageAdapter, get_storage_adapter
from infrastructure.config.settings import settings
from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User
from api.dependencies import get_current_creator, get_current_user, get_optional_user
from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.photo import (
    CommentRequest,
    CommentResponse,
    CreatorPhotosResponse,
    LikesResponse,
    MessageResponse,
    PhotoResponse,
    PhotoUpdateRequest,
)
from services.accounts import author_summary
from services.content_store import ContentStore
from services.entitlements import EntitlementService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["Photos"])

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/gif"}


def _viewer_id(user: Optional[User]) -> Optional[int]:
    return user.id if user else None


@router.post("/upload", response_model=PhotoResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("upload"))
async def upload_photo(
    request: Request,
    current_user: Annotated[User, Depends(get_current_creator)],
    file: UploadFile = File(...),
    description: Optional[str] = Form(None),
    is_premium: bool = Form(False),
    db: AsyncSession = Depends(get_db),
    storage: StorageAdapter = Depends(get_storage_adapter),
):
    """
    Upload a photo. Creators only; jpg, jpeg, png or gif up to the configured size.
    """
    ext = os.path.splitext(file.filename or "")[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files (jpg, jpeg, png, gif) are allowed",
        )
    if file.content_type and file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported content type: {file.content_type}",
        )

    max_bytes = settings.max_upload_size_bytes
    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.max_upload_size_mb}MB limit",
        )
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty",
        )

    path = await storage.save_photo(data, file.filename or "")
    photo = await ContentStore(db).create(
        owner_id=current_user.id,
        url=storage.get_photo_url(path),
        description=description,
        is_premium=is_premium,
    )
    await db.commit()
    return photo


@router.get("/list", response_model=List[PhotoResponse])
async def list_photos(
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
    db: AsyncSession = Depends(get_db),
):
    """Every photo the viewer may see, in upload order."""
    return await EntitlementService(db).accessible_photos(_viewer_id(current_user))


@router.get("/subscribed-content", response_model=List[PhotoResponse])
async def subscribed_content(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Photos from creators the current account subscribes to, newest first."""
    return await EntitlementService(db).subscribed_feed(current_user.id)


@router.get("/my/photos", response_model=List[PhotoResponse])
async def my_photos(
    current_user: Annotated[User, Depends(get_current_creator)],
    db: AsyncSession = Depends(get_db),
):
    """The current creator's own photos, newest first."""
    return await ContentStore(db).list_by_owner(current_user.id)


@router.get("/creator/{creator_id}", response_model=CreatorPhotosResponse)
async def creator_photos(
    creator_id: int,
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
    db: AsyncSession = Depends(get_db),
):
    """A creator's gallery; non-subscribers get a public preview and totals."""
    gallery = await EntitlementService(db).creator_photos(
        creator_id, _viewer_id(current_user)
    )
    return CreatorPhotosResponse.model_validate(gallery, from_attributes=True)


@router.get("/{photo_id}", response_model=PhotoResponse)
async def get_photo(
    photo_id: int,
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
    db: AsyncSession = Depends(get_db),
):
    """A single photo; premium photos require ownership or a subscription."""
    return await EntitlementService(db).get_photo_for_viewer(
        photo_id, _viewer_id(current_user)
    )


@router.put("/{photo_id}", response_model=PhotoResponse)
async def update_photo(
    photo_id: int,
    body: PhotoUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Change description or premium flag of an owned photo."""
    photo = await ContentStore(db).update(
        photo_id, current_user.id, body.model_dump(exclude_unset=True)
    )
    await db.commit()
    await db.refresh(photo)
    return photo


@router.delete("/{photo_id}", response_model=MessageResponse)
async def delete_photo(
    photo_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    storage: StorageAdapter = Depends(get_storage_adapter),
):
    """Delete an owned photo along with its likes, comments and stored file."""
    url = await ContentStore(db).delete(photo_id, current_user.id)
    await db.commit()
    await storage.delete_photo(url)
    return {"message": "Photo deleted successfully"}


# Likes


@router.post("/{photo_id}/like", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def like_photo(
    photo_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Like a photo the current account can view."""
    await EntitlementService(db).get_photo_for_viewer(photo_id, current_user.id)
    await ContentStore(db).react(photo_id, current_user.id)
    await db.commit()
    return {"message": "Photo liked successfully"}


@router.delete("/{photo_id}/like", response_model=MessageResponse)
async def unlike_photo(
    photo_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Remove the current account's like."""
    await ContentStore(db).unreact(photo_id, current_user.id)
    await db.commit()
    return {"message": "Photo unliked successfully"}


@router.get("/{photo_id}/likes", response_model=LikesResponse)
async def photo_likes(
    photo_id: int,
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
    db: AsyncSession = Depends(get_db),
):
    """Like count and likers of a viewable photo."""
    await EntitlementService(db).get_photo_for_viewer(photo_id, _viewer_id(current_user))
    return await ContentStore(db).list_reactions(photo_id)


# Comments


@router.post("/{photo_id}/comment", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def comment_on_photo(
    photo_id: int,
    body: CommentRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Comment on a photo the current account can view."""
    await EntitlementService(db).get_photo_for_viewer(photo_id, current_user.id)
    comment = await ContentStore(db).annotate(photo_id, current_user.id, body.content)
    await db.commit()
    return {
        "id": comment.id,
        "photo_id": comment.photo_id,
        "content": comment.content,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
        "user": author_summary(current_user),
    }


@router.get("/{photo_id}/comments", response_model=List[CommentResponse])
async def photo_comments(
    photo_id: int,
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
    db: AsyncSession = Depends(get_db),
):
    """Comments on a viewable photo, newest first."""
    await EntitlementService(db).get_photo_for_viewer(photo_id, _viewer_id(current_user))
    return await ContentStore(db).list_annotations(photo_id)


@router.delete("/comment/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Delete a comment as its author or as the photo's creator."""
    await ContentStore(db).delete_annotation(comment_id, current_user.id)
    await db.commit()
    return {"message": "Comment deleted successfully"}
