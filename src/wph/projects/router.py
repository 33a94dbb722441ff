"""Project router: catalog, submission, views, detail pages and reviews."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wph.auth.dependencies import get_current_user, get_optional_user
from wph.database import get_session
from wph.db.models import User
from wph.middleware.rate_limit import client_ip
from wph.projects.detail import create_review, get_project_detail
from wph.projects.schemas import (
    ProjectCreateRequest,
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectResponse,
    ReviewCreateRequest,
    ReviewResponse,
    ViewResponse,
)
from wph.projects.service import create_project, list_projects
from wph.projects.views import record_view

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.get("", response_model=ProjectListResponse)
async def get_projects(
    category: str | None = Query(None, description="Category slug"),
    search: str | None = Query(None, max_length=200),
    featured: bool | None = Query(None),
    username: str | None = Query(None),
    limit: int | None = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_session),
) -> ProjectListResponse:
    """Catalog page: featured first, then newest."""
    return await list_projects(
        db,
        category=category,
        search=search,
        featured=featured,
        username=username,
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=ProjectResponse, status_code=201)
async def submit_project(
    body: ProjectCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProjectResponse:
    """Submit a new project."""
    return await create_project(db, user, body)


@router.post("/{project_id}/view", response_model=ViewResponse)
async def track_view(
    project_id: uuid.UUID,
    request: Request,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
) -> ViewResponse:
    """Record one view of a project."""
    views = await record_view(
        db,
        str(project_id),
        user_id=viewer.id if viewer else None,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return ViewResponse(views=views)


@router.post("/{project_id}/reviews", response_model=ReviewResponse, status_code=201)
async def add_review(
    project_id: uuid.UUID,
    body: ReviewCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ReviewResponse:
    """Rate a project (once per user)."""
    user_id, username, display_name, avatar_url = user.id, user.username, user.display_name, user.avatar_url
    review = await create_review(db, str(project_id), user_id, body)
    return ReviewResponse(
        id=review.id,
        project_id=review.project_id,
        rating=review.rating,
        review_text=review.review_text,
        created_at=review.created_at,
        username=username,
        display_name=display_name,
        avatar_url=avatar_url,
    )


@router.get("/{username}/{slug}", response_model=ProjectDetailResponse)
async def get_project_page(
    username: str,
    slug: str,
    request: Request,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
) -> ProjectDetailResponse:
    """Project page data; records a view."""
    return await get_project_detail(
        db,
        username,
        slug,
        viewer_id=viewer.id if viewer else None,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
