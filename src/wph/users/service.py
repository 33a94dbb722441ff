"""User profile business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from wph.auth.service import DISPLAY_NAME_MAX_LENGTH, find_user, provision_user
from wph.db.models import User
from wph.errors import Conflict, ValidationFailed
from wph.projects.slugs import slugify

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from wph.auth.jwt import Identity

logger = structlog.get_logger()


async def sync_user(
    db: AsyncSession,
    identity: Identity,
    username: str | None = None,
    display_name: str | None = None,
    avatar_url: str | None = None,
) -> User:
    """
    Create or refresh the local user after a provider sign-in.

    Existing users get their display name and avatar refreshed from the
    identity (body values win when given). New users are provisioned as
    submitters with a unique username.
    """
    user = await find_user(db, identity)
    if user is None:
        user = await provision_user(db, identity, requested_username=username)
        if display_name:
            user.display_name = display_name
        if avatar_url:
            user.avatar_url = avatar_url
        await db.flush()
        return user

    new_name = display_name or identity.name
    new_avatar = avatar_url or identity.avatar_url
    if new_name:
        user.display_name = new_name[:DISPLAY_NAME_MAX_LENGTH]
    if new_avatar:
        user.avatar_url = new_avatar
    await db.flush()
    logger.info("user_synced", user_id=user.id)
    return user


async def update_profile(
    db: AsyncSession,
    user: User,
    display_name: str | None = None,
    username: str | None = None,
    bio: str | None = None,
    avatar_url: str | None = None,
    wallet_address: str | None = None,
) -> User:
    """
    Update profile fields.

    Raises:
        ValidationFailed: If the username has no usable characters.
        Conflict: If another user already holds the username.
    """
    if username is not None and username != user.username:
        if slugify(username).replace("-", "") != username:
            msg = "Username may only contain lowercase letters and digits"
            raise ValidationFailed(msg)
        result = await db.execute(select(User.id).where(User.username == username).where(User.id != user.id))
        if result.scalar_one_or_none() is not None:
            msg = "Username already taken"
            raise Conflict(msg)
        user.username = username

    if display_name is not None:
        user.display_name = display_name
    if bio is not None:
        user.bio = bio
    if avatar_url is not None:
        user.avatar_url = avatar_url
    if wallet_address is not None:
        user.wallet_address = wallet_address or None

    await db.flush()
    return user
