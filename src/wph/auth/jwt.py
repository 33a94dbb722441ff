"""
Verification of identity-provider access tokens.

Sign-in happens at Supabase Auth; this service only verifies the HS256
access tokens it issues and extracts the identity they carry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jwt

from wph.config import get_settings

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Identity:
    """Who the provider says the caller is."""

    auth_id: str
    email: str
    name: str | None = None
    avatar_url: str | None = None


def verify_access_token(token: str) -> Identity:
    """
    Decode and verify an access token.

    Checks the signature, expiry and audience, plus the issuer when
    ``supabase_url`` is configured.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or lacks
            a subject or email.
    """
    settings = get_settings()
    if not settings.supabase_jwt_secret:
        msg = "Token verification is not configured"
        raise jwt.InvalidTokenError(msg)

    options: dict[str, Any] = {"require": ["exp", "sub"]}
    kwargs: dict[str, Any] = {}
    if settings.supabase_url:
        kwargs["issuer"] = f"{settings.supabase_url.rstrip('/')}/auth/v1"

    payload = jwt.decode(
        token,
        settings.supabase_jwt_secret,
        algorithms=[ALGORITHM],
        audience=settings.supabase_jwt_audience,
        options=options,
        **kwargs,
    )

    email = payload.get("email")
    if not email:
        msg = "Token has no email claim"
        raise jwt.InvalidTokenError(msg)

    metadata = payload.get("user_metadata") or {}
    return Identity(
        auth_id=str(payload["sub"]),
        email=str(email).lower().strip(),
        name=metadata.get("full_name") or metadata.get("name"),
        avatar_url=metadata.get("avatar_url") or metadata.get("picture"),
    )
