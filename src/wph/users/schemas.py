"""Request/response schemas for user endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class UserSyncRequest(BaseModel):
    """Sign-in sync body; every field is optional."""

    username: str | None = Field(None, min_length=1, max_length=64)
    display_name: str | None = Field(None, max_length=128)
    avatar_url: str | None = None


class ProfileUpdateRequest(BaseModel):
    """Partial profile update."""

    display_name: str | None = Field(None, min_length=1, max_length=128)
    username: str | None = Field(None, min_length=1, max_length=64)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = None
    wallet_address: str | None = Field(None, max_length=128)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str | None) -> str | None:
        """Usernames are compared lowercase."""
        return v.lower().strip() if v is not None else v


class UserResponse(BaseModel):
    """Full profile, visible to its owner."""

    id: str
    email: str
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    role: str
    wallet_address: str | None = None
    is_verified: bool
    created_at: datetime
    updated_at: datetime


class PublicUserResponse(BaseModel):
    """Public profile; no email or wallet."""

    id: str
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    role: str
    is_verified: bool
    created_at: datetime


class UserSyncResponse(BaseModel):
    """Result of a sign-in sync."""

    success: bool = True
    user: UserResponse
