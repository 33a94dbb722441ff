"""Category router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wph.auth.dependencies import require_admin
from wph.categories.schemas import CategoryCreateRequest, CategoryResponse
from wph.categories.service import create_category, get_category, list_categories
from wph.database import get_session
from wph.db.models import User

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("", response_model=CategoryResponse | list[CategoryResponse])
async def get_categories(
    slug: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
) -> CategoryResponse | list[CategoryResponse]:
    """One category by slug, or every active category."""
    if slug:
        return await get_category(db, slug)
    return await list_categories(db)


@router.post("", response_model=CategoryResponse, status_code=201)
async def add_category(
    body: CategoryCreateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> CategoryResponse:
    """Create a category (admins only)."""
    return await create_category(db, body)
