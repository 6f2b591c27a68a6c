"""
User profile and creator directory routes.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User
from api.dependencies import get_current_user
from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.auth import UserResponse
from api.schemas.photo import MessageResponse
from api.schemas.user import (
    BecomeCreatorRequest,
    CreatorListItem,
    CreatorProfileResponse,
    PasswordChangeRequest,
    ProfileUpdateRequest,
)
from services.accounts import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get the current account's profile."""
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    body: ProfileUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> User:
    """Update name, bio and avatar of the current account."""
    user = await AccountService(db).update_profile(
        current_user, body.model_dump(exclude_unset=True)
    )
    await db.commit()
    await db.refresh(user)
    return user


@router.put("/password", response_model=MessageResponse)
@limiter.limit(get_rate_limit("password_change"))
async def change_password(
    request: Request,
    body: PasswordChangeRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Change the current account's password."""
    await AccountService(db).change_password(
        current_user, body.current_password, body.new_password
    )
    await db.commit()
    return {"message": "Password changed successfully"}


@router.put("/become-creator", response_model=UserResponse)
async def become_creator(
    body: BecomeCreatorRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Turn the current account into a creator.

    Tokens issued earlier still carry is_creator=false; clients should
    refresh to pick up the new role claim.
    """
    user = await AccountService(db).become_creator(current_user, body.subscription_price)
    await db.commit()
    await db.refresh(user)
    return user


@router.get("/creators", response_model=List[CreatorListItem])
async def list_creators(db: AsyncSession = Depends(get_db)) -> list:
    """List active creators with their photo counts."""
    return await AccountService(db).list_creators()


@router.get("/creators/{creator_id}", response_model=CreatorProfileResponse)
async def get_creator(creator_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    """Public profile of a creator."""
    return await AccountService(db).creator_profile(creator_id)
