"""Shared test fixtures.

Tests run against a throwaway SQLite file through aiosqlite; the app's
session dependencies are overridden to use it. Redis is never initialized,
so rate limiting passes every request through.
"""

from __future__ import annotations

import os
import time
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

TEST_JWT_SECRET = "test-secret-for-access-tokens-0123456789"

os.environ["WPH_SUPABASE_JWT_SECRET"] = TEST_JWT_SECRET
os.environ["WPH_SUPABASE_URL"] = ""
os.environ["WPH_LOG_FORMAT"] = "console"

from wph.config import get_settings  # noqa: E402

get_settings.cache_clear()

from wph.database import get_session, get_session_factory  # noqa: E402
from wph.db.base import Base  # noqa: E402
from wph.db.models import Category, Project, User  # noqa: E402
from wph.main import create_app  # noqa: E402


def make_token(
    auth_id: str,
    email: str,
    *,
    name: str | None = None,
    avatar_url: str | None = None,
    expires_in: int = 3600,
    secret: str = TEST_JWT_SECRET,
    **claims: Any,
) -> str:
    """Mint an access token shaped like the identity provider's."""
    now = int(time.time())
    metadata: dict[str, Any] = {}
    if name:
        metadata["full_name"] = name
    if avatar_url:
        metadata["avatar_url"] = avatar_url
    payload: dict[str, Any] = {
        "sub": auth_id,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
        "user_metadata": metadata,
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def bearer(token: str) -> dict[str, str]:
    """Authorization header for a token."""
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def session_factory(tmp_path: Path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh schema in a temporary SQLite database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'wph.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """A direct session for seeding and assertions."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app wired to the test database."""
    app = create_app()

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def create_user(
    db: AsyncSession,
    username: str,
    *,
    role: str = "submitter",
    is_active: bool = True,
    display_name: str | None = None,
) -> User:
    """Insert a user whose auth id is ``auth-{username}``."""
    user = User(
        auth_id=f"auth-{username}",
        email=f"{username}@example.com",
        username=username,
        display_name=display_name or username.title(),
        role=role,
        is_active=is_active,
    )
    db.add(user)
    await db.commit()
    return user


async def create_category(db: AsyncSession, slug: str, name: str | None = None, sort_order: int = 0) -> Category:
    """Insert an active category."""
    category = Category(slug=slug, name=name or slug.title(), sort_order=sort_order, icon="box", color="#10b981")
    db.add(category)
    await db.commit()
    return category


async def create_project(
    db: AsyncSession,
    owner: User,
    category: Category,
    title: str,
    *,
    slug: str | None = None,
    description: str | None = None,
    is_featured: bool = False,
    views: int = 0,
    is_active: bool = True,
) -> Project:
    """Insert a project directly, bypassing the submission path."""
    project = Project(
        title=title,
        slug=slug or title.lower().replace(" ", "-"),
        description=description,
        category_id=category.id,
        user_id=owner.id,
        is_featured=is_featured,
        views=views,
        is_active=is_active,
    )
    db.add(project)
    await db.commit()
    return project


def user_token(user: User) -> dict[str, str]:
    """Authorization header for a seeded user."""
    return bearer(make_token(user.auth_id, user.email))


@pytest_asyncio.fixture
async def alice(db_session: AsyncSession) -> User:
    return await create_user(db_session, "alice", display_name="Alice Liddell")


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await create_user(db_session, "root", role="admin")


@pytest_asyncio.fixture
async def defi(db_session: AsyncSession) -> Category:
    return await create_category(db_session, "defi", "DeFi", sort_order=1)


@pytest.fixture
def alice_headers(alice: User) -> dict[str, str]:
    return user_token(alice)
