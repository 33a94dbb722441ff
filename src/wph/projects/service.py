"""Project catalog: filtered listing, response shaping and submission."""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from wph.config import get_settings
from wph.db.models import Category, Project, ProjectTag, User
from wph.errors import Conflict, NotFound, ValidationFailed
from wph.projects.schemas import (
    SLUG_BASE_MAX_LENGTH,
    CategorySummary,
    OwnerSummary,
    ProjectCreateRequest,
    ProjectListResponse,
    ProjectResponse,
)
from wph.projects.slugs import resolve_unique, slugify

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

# Used when a title has no sluggable characters at all
FALLBACK_SLUG = "project"

CATALOG_ORDER = (Project.is_featured.desc(), Project.created_at.desc(), Project.id)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally (escape char ``\\``)."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def clean_tags(tags: list[str]) -> list[str]:
    """Strip, drop empties and de-duplicate, keeping first-seen order."""
    seen: dict[str, None] = {}
    for tag in tags:
        name = tag.strip()
        if name and name not in seen:
            seen[name] = None
    return list(seen)


async def get_category_by_slug(db: AsyncSession, slug: str) -> Category | None:
    """Active category by slug."""
    result = await db.execute(select(Category).where(Category.slug == slug).where(Category.is_active.is_(True)))
    return result.scalar_one_or_none()


async def project_slug_taken(db: AsyncSession, user_id: str, slug: str) -> bool:
    """True if this owner already has a project with the slug."""
    result = await db.execute(
        select(Project.id).where(Project.user_id == user_id).where(Project.slug == slug).limit(1)
    )
    return result.scalar_one_or_none() is not None


# ---------------------------------------------------------------------------
# Shaping
# ---------------------------------------------------------------------------


def _category_summary(category: Category) -> CategorySummary:
    return CategorySummary(
        id=category.id,
        slug=category.slug,
        name=category.name,
        icon=category.icon,
        color=category.color,
        gradient=category.gradient,
    )


async def tags_by_project(db: AsyncSession, project_ids: list[str]) -> dict[str, list[str]]:
    """Tag names per project id, alphabetical, in one query."""
    tags: dict[str, list[str]] = defaultdict(list)
    if not project_ids:
        return tags
    result = await db.execute(
        select(ProjectTag.project_id, ProjectTag.tag_name)
        .where(ProjectTag.project_id.in_(project_ids))
        .order_by(ProjectTag.tag_name)
    )
    for project_id, tag_name in result.all():
        tags[project_id].append(tag_name)
    return tags


async def categories_by_id(db: AsyncSession, category_ids: set[str]) -> dict[str, CategorySummary]:
    """Category summaries keyed by id, in one query."""
    if not category_ids:
        return {}
    result = await db.execute(select(Category).where(Category.id.in_(category_ids)))
    return {c.id: _category_summary(c) for c in result.scalars().all()}


async def owners_by_id(db: AsyncSession, user_ids: set[str]) -> dict[str, OwnerSummary]:
    """Owner username and display name for the distinct owners of a page."""
    if not user_ids:
        return {}
    result = await db.execute(
        select(User.id, User.username, User.display_name).where(User.id.in_(user_ids))
    )
    return {
        row.id: OwnerSummary(username=row.username, display_name=row.display_name)
        for row in result.all()
    }


async def shape_projects(db: AsyncSession, projects: list[Project]) -> list[ProjectResponse]:
    """Attach category, tags and owner to each project with three batch queries."""
    if not projects:
        return []
    ids = [p.id for p in projects]
    categories = await categories_by_id(db, {p.category_id for p in projects})
    tags = await tags_by_project(db, ids)
    owners = await owners_by_id(db, {p.user_id for p in projects})

    return [
        ProjectResponse(
            id=p.id,
            title=p.title,
            slug=p.slug,
            description=p.description,
            logo_url=p.logo_url,
            website_url=p.website_url,
            github_url=p.github_url,
            category_id=p.category_id,
            user_id=p.user_id,
            is_featured=p.is_featured,
            views=p.views,
            created_at=p.created_at,
            updated_at=p.updated_at,
            category=categories.get(p.category_id),
            tags=tags.get(p.id, []),
            owner=owners.get(p.user_id),
        )
        for p in projects
    ]


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


async def _catalog_conditions(
    db: AsyncSession,
    *,
    category: str | None,
    search: str | None,
    featured: bool | None,
    username: str | None,
) -> list[Any] | None:
    """WHERE clauses shared by the page and count queries.

    Returns None when a category or username filter names nothing, meaning
    the result is empty without querying projects.
    """
    conditions: list[Any] = [Project.is_active.is_(True)]

    if category:
        cat = await get_category_by_slug(db, category)
        if cat is None:
            return None
        conditions.append(Project.category_id == cat.id)

    if username:
        result = await db.execute(
            select(User.id).where(User.username == username.lower()).where(User.is_active.is_(True))
        )
        user_id = result.scalar_one_or_none()
        if user_id is None:
            return None
        conditions.append(Project.user_id == user_id)

    if featured:
        conditions.append(Project.is_featured.is_(True))

    if search:
        pattern = f"%{escape_like(search)}%"
        conditions.append(
            or_(
                Project.title.ilike(pattern, escape="\\"),
                Project.description.ilike(pattern, escape="\\"),
            )
        )

    return conditions


async def list_projects(
    db: AsyncSession,
    *,
    category: str | None = None,
    search: str | None = None,
    featured: bool | None = None,
    username: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> ProjectListResponse:
    """
    One page of the catalog, featured first then newest.

    ``total`` counts every project matching the same filters, so
    ``hasMore`` is ``offset + limit < total``.
    """
    settings = get_settings()
    limit = min(limit or settings.catalog_default_limit, settings.catalog_max_limit)

    conditions = await _catalog_conditions(
        db, category=category, search=search, featured=featured, username=username
    )
    if conditions is None:
        return ProjectListResponse(projects=[], total=0, has_more=False)

    total = (await db.execute(select(func.count()).select_from(Project).where(*conditions))).scalar_one()
    result = await db.execute(
        select(Project).where(*conditions).order_by(*CATALOG_ORDER).offset(offset).limit(limit)
    )
    projects = await shape_projects(db, list(result.scalars().all()))

    return ProjectListResponse(projects=projects, total=total, has_more=offset + limit < total)


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


async def create_project(db: AsyncSession, user: User, body: ProjectCreateRequest) -> ProjectResponse:
    """
    Insert a project and its tags in one transaction.

    The slug comes from ``body.slug`` or the title and is made unique within
    the owner's projects. Losing a race for a slug surfaces as an
    IntegrityError at commit; the insert is retried with a fresh slug up to
    ``slug_max_attempts`` times before giving up with Conflict.

    Raises:
        ValidationFailed: Title or category missing.
        NotFound: Unknown category.
        Conflict: No free slug after the allowed attempts.
    """
    title = (body.title or "").strip()
    if not title or not body.category_slug:
        msg = "Title and category are required"
        raise ValidationFailed(msg)

    category = await get_category_by_slug(db, body.category_slug)
    if category is None:
        msg = "Category not found"
        raise NotFound(msg)

    # Rollback expires loaded instances, so keep plain values for retries
    user_id = user.id
    category_id = category.id
    tags = clean_tags(body.tags)
    # Slugifying can lengthen text (ligatures decompose), so cap after it
    base = slugify(body.slug or title)[:SLUG_BASE_MAX_LENGTH].rstrip("-") or FALLBACK_SLUG
    attempts = get_settings().slug_max_attempts

    for attempt in range(1, attempts + 1):
        slug = await resolve_unique(base, lambda candidate: project_slug_taken(db, user_id, candidate))
        project = Project(
            id=str(uuid.uuid4()),
            title=title,
            slug=slug,
            description=body.description,
            logo_url=body.logo_url,
            website_url=body.website_url,
            github_url=body.github_url,
            category_id=category_id,
            user_id=user_id,
            is_featured=body.is_featured,
        )
        try:
            db.add(project)
            await db.flush()
            db.add_all(ProjectTag(project_id=project.id, tag_name=name) for name in tags)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning("project_slug_conflict", user_id=user_id, slug=slug, attempt=attempt)
            continue

        logger.info("project_created", project_id=project.id, user_id=user_id, slug=slug, tags=len(tags))
        shaped = await shape_projects(db, [project])
        return shaped[0]

    msg = "Could not allocate a unique slug for this project"
    raise Conflict(msg)
