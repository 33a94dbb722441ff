"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
import structlog
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from wph.auth.jwt import Identity, verify_access_token
from wph.auth.service import find_user, provision_user
from wph.database import get_session
from wph.db.models import User
from wph.errors import AuthenticationRequired, PermissionDenied

logger = structlog.get_logger()

_bearer = HTTPBearer(auto_error=False)


def _identity(credentials: HTTPAuthorizationCredentials | None) -> Identity | None:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return verify_access_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        logger.info("access_token_rejected", error=str(e))
        raise AuthenticationRequired(f"Invalid token: {e}") from e


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> Identity:
    """Verified identity of the caller; 401 without a valid token."""
    identity = _identity(credentials)
    if identity is None:
        raise AuthenticationRequired
    return identity


async def _resolve_user(db: AsyncSession, identity: Identity) -> User:
    user = await find_user(db, identity)
    if user is None:
        user = await provision_user(db, identity)
    # Persist a fresh account or an email link before the handler runs
    await db.commit()
    if not user.is_active:
        raise PermissionDenied("Account is disabled")
    return user


async def get_current_user(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Return the local User for the verified caller.

    A caller seen for the first time is provisioned on the spot.
    Raises 401 without a valid token and 403 for deactivated accounts.
    """
    return await _resolve_user(db, identity)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User | None:
    """Like get_current_user, but anonymous requests yield None."""
    identity = _identity(credentials)
    if identity is None:
        return None
    return await _resolve_user(db, identity)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Only admins pass."""
    if user.role != "admin":
        raise PermissionDenied("Admin role required")
    return user
