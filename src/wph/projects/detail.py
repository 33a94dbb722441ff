"""Project detail page data and reviews."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from wph.auth.service import get_user_by_username
from wph.db.models import Project, Review, User
from wph.errors import Conflict, NotFound
from wph.projects.schemas import (
    OwnerDetail,
    ProjectDetailResponse,
    ReviewCreateRequest,
    ReviewResponse,
)
from wph.projects.seo import build_project_metadata
from wph.projects.service import shape_projects
from wph.projects.views import record_view

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def average_rating(ratings: list[int]) -> float | None:
    """Mean rating rounded to one decimal, or None without reviews."""
    if not ratings:
        return None
    return round(sum(ratings) / len(ratings), 1)


async def get_active_project(db: AsyncSession, project_id: str) -> Project | None:
    """Active project by id."""
    result = await db.execute(select(Project).where(Project.id == project_id).where(Project.is_active.is_(True)))
    return result.scalar_one_or_none()


async def list_reviews(db: AsyncSession, project_id: str) -> list[ReviewResponse]:
    """Reviews of a project with their authors, newest first."""
    result = await db.execute(
        select(Review, User.username, User.display_name, User.avatar_url)
        .join(User, User.id == Review.user_id)
        .where(Review.project_id == project_id)
        .order_by(Review.created_at.desc(), Review.id)
    )
    return [
        ReviewResponse(
            id=review.id,
            project_id=review.project_id,
            rating=review.rating,
            review_text=review.review_text,
            created_at=review.created_at,
            username=username,
            display_name=display_name,
            avatar_url=avatar_url,
        )
        for review, username, display_name, avatar_url in result.all()
    ]


async def get_project_detail(
    db: AsyncSession,
    username: str,
    slug: str,
    *,
    viewer_id: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ProjectDetailResponse:
    """
    Resolve ``/{username}/{slug}`` and assemble the project page.

    Rendering records a view. A failure to record it is logged and the page
    is still returned with the last known count.

    Raises:
        NotFound: Unknown or inactive user, or no such project.
    """
    owner = await get_user_by_username(db, username.lower())
    if owner is None:
        msg = "User not found"
        raise NotFound(msg)

    result = await db.execute(
        select(Project)
        .where(Project.user_id == owner.id)
        .where(Project.slug == slug)
        .where(Project.is_active.is_(True))
    )
    project = result.scalar_one_or_none()
    if project is None:
        msg = "Project not found"
        raise NotFound(msg)

    shaped = (await shape_projects(db, [project]))[0]
    reviews = await list_reviews(db, project.id)
    rating = average_rating([r.rating for r in reviews])

    metadata = build_project_metadata(
        title=shaped.title,
        slug=shaped.slug,
        description=shaped.description,
        logo_url=shaped.logo_url,
        website_url=shaped.website_url,
        owner_username=owner.username,
        owner_name=owner.display_name,
        category_name=shaped.category.name if shaped.category else None,
        tags=shaped.tags,
        average_rating=rating,
        review_count=len(reviews),
    )
    detail = ProjectDetailResponse(
        **shaped.model_dump(exclude={"owner"}),
        owner=OwnerDetail(
            id=owner.id,
            username=owner.username,
            display_name=owner.display_name,
            avatar_url=owner.avatar_url,
            bio=owner.bio,
        ),
        reviews=reviews,
        average_rating=rating,
        review_count=len(reviews),
        metadata=metadata,
    )

    try:
        detail.views = await record_view(
            db, detail.id, user_id=viewer_id, ip_address=ip_address, user_agent=user_agent
        )
    except (SQLAlchemyError, NotFound) as exc:
        await db.rollback()
        logger.warning("view_record_failed", project_id=detail.id, error=str(exc))

    return detail


async def create_review(
    db: AsyncSession,
    project_id: str,
    user_id: str,
    body: ReviewCreateRequest,
) -> Review:
    """
    Add the caller's review of a project.

    Raises:
        NotFound: Unknown or inactive project.
        Conflict: The user already reviewed this project.
    """
    if await get_active_project(db, project_id) is None:
        msg = "Project not found"
        raise NotFound(msg)

    existing = await db.execute(
        select(Review.id).where(Review.project_id == project_id).where(Review.user_id == user_id)
    )
    if existing.scalar_one_or_none() is not None:
        msg = "You have already reviewed this project"
        raise Conflict(msg)

    review = Review(project_id=project_id, user_id=user_id, rating=body.rating, review_text=body.review_text)
    db.add(review)
    await db.commit()
    logger.info("review_created", project_id=project_id, user_id=user_id, rating=body.rating)
    return review
