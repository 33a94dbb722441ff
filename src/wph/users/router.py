"""User router: sign-in sync and profiles."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wph.auth.dependencies import get_current_user, get_identity
from wph.auth.jwt import Identity
from wph.auth.service import get_user_by_username
from wph.database import get_session
from wph.db.models import User
from wph.errors import NotFound
from wph.users.schemas import (
    ProfileUpdateRequest,
    PublicUserResponse,
    UserResponse,
    UserSyncRequest,
    UserSyncResponse,
)
from wph.users.service import sync_user, update_profile

router = APIRouter(prefix="/api/users", tags=["Users"])


def user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(
        id=user.id,
        email=user.email,
        username=user.username,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        bio=user.bio,
        role=user.role,
        wallet_address=user.wallet_address,
        is_verified=user.is_verified,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


@router.post("", response_model=UserSyncResponse)
async def sync_signed_in_user(
    body: UserSyncRequest | None = None,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
) -> UserSyncResponse:
    """Create the local account on first sign-in, refresh it afterwards."""
    body = body or UserSyncRequest()
    user = await sync_user(
        db,
        identity,
        username=body.username,
        display_name=body.display_name,
        avatar_url=body.avatar_url,
    )
    await db.commit()
    return UserSyncResponse(user=user_response(user))


@router.get("/me", response_model=UserResponse)
async def get_profile(user: User = Depends(get_current_user)) -> UserResponse:
    """Get own full profile."""
    return user_response(user)


@router.patch("/me", response_model=UserResponse)
async def update_my_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Update display name, username, bio, avatar or wallet."""
    user = await update_profile(
        db,
        user,
        display_name=body.display_name,
        username=body.username,
        bio=body.bio,
        avatar_url=body.avatar_url,
        wallet_address=body.wallet_address,
    )
    await db.commit()
    return user_response(user)


@router.get("/{username}", response_model=PublicUserResponse)
async def get_public_profile(
    username: str,
    db: AsyncSession = Depends(get_session),
) -> PublicUserResponse:
    """Public profile of an active user."""
    user = await get_user_by_username(db, username.lower())
    if user is None:
        raise NotFound("User not found")
    return PublicUserResponse(
        id=user.id,
        username=user.username,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        bio=user.bio,
        role=user.role,
        is_verified=user.is_verified,
        created_at=user.created_at,
    )
