"""Category reads with project counts, and category creation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from wph.categories.schemas import CategoryCreateRequest, CategoryResponse
from wph.db.models import Category, Project
from wph.errors import Conflict, NotFound, ValidationFailed
from wph.projects.slugs import slugify

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def category_response(category: Category, projects_count: int = 0) -> CategoryResponse:
    """Build a CategoryResponse from a Category model."""
    return CategoryResponse(
        id=category.id,
        slug=category.slug,
        name=category.name,
        description=category.description,
        icon=category.icon,
        color=category.color,
        gradient=category.gradient,
        sort_order=category.sort_order,
        is_active=category.is_active,
        created_at=category.created_at,
        projects_count=projects_count,
    )


async def project_counts(db: AsyncSession, category_ids: list[str] | None = None) -> dict[str, int]:
    """Active projects per category id, from one grouped query."""
    stmt = (
        select(Project.category_id, func.count())
        .where(Project.is_active.is_(True))
        .group_by(Project.category_id)
    )
    if category_ids is not None:
        stmt = stmt.where(Project.category_id.in_(category_ids))
    result = await db.execute(stmt)
    return {category_id: count for category_id, count in result.all()}


async def list_categories(db: AsyncSession) -> list[CategoryResponse]:
    """Active categories by sort order, each with its project count."""
    result = await db.execute(
        select(Category).where(Category.is_active.is_(True)).order_by(Category.sort_order, Category.name)
    )
    categories = list(result.scalars().all())
    counts = await project_counts(db, [c.id for c in categories])
    return [category_response(c, counts.get(c.id, 0)) for c in categories]


async def get_category(db: AsyncSession, slug: str) -> CategoryResponse:
    """
    One active category with its project count.

    Raises:
        NotFound: Unknown or inactive slug.
    """
    result = await db.execute(select(Category).where(Category.slug == slug).where(Category.is_active.is_(True)))
    category = result.scalar_one_or_none()
    if category is None:
        msg = "Category not found"
        raise NotFound(msg)
    counts = await project_counts(db, [category.id])
    return category_response(category, counts.get(category.id, 0))


async def create_category(db: AsyncSession, body: CategoryCreateRequest) -> CategoryResponse:
    """
    Create a category.

    Raises:
        ValidationFailed: Name or slug missing, or slug not URL-safe.
        Conflict: Slug already exists.
    """
    name = (body.name or "").strip()
    slug = (body.slug or "").strip()
    if not name or not slug:
        msg = "Name and slug are required"
        raise ValidationFailed(msg)
    if slugify(slug) != slug:
        msg = "Slug may only contain lowercase letters, digits and hyphens"
        raise ValidationFailed(msg)

    existing = await db.execute(select(Category.id).where(Category.slug == slug))
    if existing.scalar_one_or_none() is not None:
        msg = "Category with this slug already exists"
        raise Conflict(msg)

    category = Category(
        slug=slug,
        name=name,
        description=body.description,
        icon=body.icon,
        color=body.color,
        gradient=body.gradient,
        sort_order=body.sort_order,
    )
    db.add(category)
    await db.commit()
    logger.info("category_created", category_id=category.id, slug=slug)
    return category_response(category)
