"""Homepage aggregation.

The three lookups are independent, so they run concurrently, each in its own
session. Any one of them failing yields its empty default.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wph.categories.schemas import CategoryResponse
from wph.categories.service import list_categories
from wph.config import get_settings
from wph.db.models import Category, Project, ProjectView, User
from wph.home.schemas import HomeResponse, PlatformStats
from wph.projects.schemas import ProjectResponse
from wph.projects.service import CATALOG_ORDER, shape_projects

logger = structlog.get_logger()

T = TypeVar("T")


async def featured_projects(db: AsyncSession, limit: int) -> list[ProjectResponse]:
    """Newest featured projects, shaped like catalog entries."""
    result = await db.execute(
        select(Project)
        .where(Project.is_active.is_(True))
        .where(Project.is_featured.is_(True))
        .order_by(*CATALOG_ORDER)
        .limit(limit)
    )
    return await shape_projects(db, list(result.scalars().all()))


async def platform_stats(db: AsyncSession) -> PlatformStats:
    """Counts of active projects, active users, view events and active categories."""
    projects = await db.scalar(select(func.count()).select_from(Project).where(Project.is_active.is_(True)))
    users = await db.scalar(select(func.count()).select_from(User).where(User.is_active.is_(True)))
    views = await db.scalar(select(func.count()).select_from(ProjectView))
    categories = await db.scalar(select(func.count()).select_from(Category).where(Category.is_active.is_(True)))
    return PlatformStats(
        projects=projects or 0,
        users=users or 0,
        views=views or 0,
        categories=categories or 0,
    )


async def _with_default(
    factory: async_sessionmaker[AsyncSession],
    name: str,
    fetch: Callable[[AsyncSession], Awaitable[T]],
    default: T,
) -> T:
    try:
        async with factory() as session:
            return await fetch(session)
    except SQLAlchemyError as exc:
        logger.error("home_section_fallback", section=name, error=str(exc))
        return default


async def get_home(factory: async_sessionmaker[AsyncSession]) -> HomeResponse:
    """Featured projects, categories and stats, fetched concurrently."""
    limit = get_settings().featured_projects_limit
    empty_projects: list[ProjectResponse] = []
    empty_categories: list[CategoryResponse] = []

    featured, categories, stats = await asyncio.gather(
        _with_default(factory, "featured_projects", lambda db: featured_projects(db, limit), empty_projects),
        _with_default(factory, "categories", list_categories, empty_categories),
        _with_default(factory, "stats", platform_stats, PlatformStats()),
    )
    return HomeResponse(featured_projects=featured, categories=categories, stats=stats)
