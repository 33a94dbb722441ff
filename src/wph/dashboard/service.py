"""Dashboard aggregation.

Folds the user's projects, their tags and their view events into summary
counters. Per-project views come from a grouped count over ``project_views``.
A failing sub-fetch degrades to empty defaults instead of failing the page.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from wph.dashboard.schemas import DashboardProfile, DashboardProject, DashboardResponse, DashboardStats
from wph.db.models import Project
from wph.projects.service import categories_by_id, tags_by_project
from wph.projects.views import view_counts

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from wph.db.models import User

logger = structlog.get_logger()

DEFAULT_BIO = "No bio set yet"


def build_profile(user: User) -> DashboardProfile:
    """Profile block with display fallbacks."""
    return DashboardProfile(
        id=user.id,
        email=user.email,
        name=user.display_name or user.email.split("@", 1)[0] or "User",
        username=user.username,
        avatar=user.avatar_url,
        bio=user.bio or DEFAULT_BIO,
        role=user.role,
        wallet_address=user.wallet_address,
        is_verified=user.is_verified,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


async def get_user_projects(db: AsyncSession, user_id: str) -> list[DashboardProject]:
    """The user's active projects, newest first, with tags and view counts."""
    result = await db.execute(
        select(Project)
        .where(Project.user_id == user_id)
        .where(Project.is_active.is_(True))
        .order_by(Project.created_at.desc(), Project.id)
    )
    projects = list(result.scalars().all())
    if not projects:
        return []

    ids = [p.id for p in projects]
    categories = await categories_by_id(db, {p.category_id for p in projects})
    tags = await tags_by_project(db, ids)
    views = await view_counts(db, ids)

    return [
        DashboardProject(
            id=p.id,
            title=p.title,
            slug=p.slug,
            description=p.description,
            logo_url=p.logo_url,
            website_url=p.website_url,
            github_url=p.github_url,
            is_featured=p.is_featured,
            views=views.get(p.id, 0),
            created_at=p.created_at,
            updated_at=p.updated_at,
            category=categories.get(p.category_id),
            tags=tags.get(p.id, []),
        )
        for p in projects
    ]


def summarize(projects: list[DashboardProject]) -> DashboardStats:
    """Fold projects into the stats block."""
    return DashboardStats(
        projects_submitted=len(projects),
        total_views=sum(p.views for p in projects),
        total_tags=sum(len(p.tags) for p in projects),
        featured_projects=sum(1 for p in projects if p.is_featured),
    )


async def get_dashboard(db: AsyncSession, user: User) -> DashboardResponse:
    """Assemble the dashboard for a signed-in user."""
    profile = build_profile(user)

    try:
        projects = await get_user_projects(db, profile.id)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("dashboard_projects_fallback", user_id=profile.id, error=str(exc))
        projects = []

    return DashboardResponse(profile=profile, stats=summarize(projects), projects=projects, recent_activity=[])
