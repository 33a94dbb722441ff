"""User lookup and first-sign-in provisioning."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from wph.config import get_settings
from wph.db.models import User
from wph.errors import Conflict
from wph.projects.slugs import resolve_unique, slugify

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from wph.auth.jwt import Identity

logger = structlog.get_logger()

# users.username is 64 wide; keep room for a numeric suffix
USERNAME_BASE_MAX_LENGTH = 56
DISPLAY_NAME_MAX_LENGTH = 128


async def get_user_by_auth_id(db: AsyncSession, auth_id: str) -> User | None:
    """Get user by identity-provider subject."""
    result = await db.execute(select(User).where(User.auth_id == auth_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Get user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str, *, active_only: bool = True) -> User | None:
    """Get user by username."""
    stmt = select(User).where(User.username == username)
    if active_only:
        stmt = stmt.where(User.is_active.is_(True))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def username_taken(db: AsyncSession, username: str) -> bool:
    """True if any user (active or not) already holds this username."""
    result = await db.execute(select(User.id).where(User.username == username).limit(1))
    return result.scalar_one_or_none() is not None


def username_base(requested: str | None, email: str) -> str:
    """Username seed: the requested name, else the email local part."""
    raw = requested or email.split("@", 1)[0]
    base = slugify(raw).replace("-", "")[:USERNAME_BASE_MAX_LENGTH]
    return base or "user"


async def find_user(db: AsyncSession, identity: Identity) -> User | None:
    """Resolve the local user for an identity, linking by email if needed."""
    user = await get_user_by_auth_id(db, identity.auth_id)
    if user is not None:
        return user

    user = await get_user_by_email(db, identity.email)
    if user is not None and user.auth_id != identity.auth_id:
        logger.info("user_auth_id_linked", user_id=user.id)
        user.auth_id = identity.auth_id
        await db.flush()
    return user


async def provision_user(db: AsyncSession, identity: Identity, requested_username: str | None = None) -> User:
    """
    Create the local user record on first sign-in.

    New users are always submitters; the username is made globally unique by
    appending a bare number (alice, alice1, alice2, ...).

    A concurrent sign-in can take the chosen username, or create this very
    account, between the lookup and the insert. Either shows up as an
    IntegrityError at flush: the transaction is rolled back, an account that
    now exists for the identity is returned as is, and otherwise a fresh
    username is resolved, up to ``slug_max_attempts`` times.

    Raises:
        Conflict: No free username after the allowed attempts.
    """
    base = username_base(requested_username, identity.email)
    display_name = (identity.name or identity.email.split("@", 1)[0])[:DISPLAY_NAME_MAX_LENGTH]
    attempts = get_settings().slug_max_attempts

    for attempt in range(1, attempts + 1):
        username = await resolve_unique(base, lambda candidate: username_taken(db, candidate), separator="")
        user = User(
            auth_id=identity.auth_id,
            email=identity.email,
            username=username,
            display_name=display_name,
            avatar_url=identity.avatar_url,
            role="submitter",
        )
        try:
            db.add(user)
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning("username_conflict", auth_id=identity.auth_id, username=username, attempt=attempt)
            existing = await find_user(db, identity)
            if existing is not None:
                return existing
            continue

        logger.info("user_provisioned", user_id=user.id, username=username)
        return user

    msg = "Could not allocate a unique username"
    raise Conflict(msg)
