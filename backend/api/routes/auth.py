"""
Authentication API routes.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User
from api.dependencies import get_current_user, token_service
from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.auth import (
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from services.accounts import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_response(user: User) -> dict:
    access_token, refresh_token = token_service.create_token_pair(
        user_id=user.id,
        email=user.email,
        is_creator=user.is_creator,
    )
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "expires_in": token_service.access_token_expire_seconds,
    }


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("register"))
async def register(
    request: Request,
    register_data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Register a new account and sign it in.
    """
    user = await AccountService(db).register(
        email=register_data.email,
        password=register_data.password,
        name=register_data.name,
        is_creator=register_data.is_creator,
        subscription_price=register_data.subscription_price,
    )
    await db.commit()
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(get_rate_limit("login"))
async def login(
    request: Request,
    login_data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Authenticate user and return access tokens.
    """
    user = await AccountService(db).authenticate(login_data.email, login_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    logger.info("Account %s logged in", user.id, extra={"user_id": user.id})
    return _token_response(user)


@router.post("/refresh", response_model=TokenResponse)
@limiter.limit(get_rate_limit("login"))
async def refresh_token(
    request: Request,
    body: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Exchange a refresh token for a new token pair.

    The creator flag is re-read from the database, so a fresh access token
    reflects a role change made after the original login.
    """
    payload = token_service.verify_refresh_token(body.refresh_token)
    user_id = payload.user_id if payload else None

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    user = await db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Get the current authenticated account.
    """
    return current_user
