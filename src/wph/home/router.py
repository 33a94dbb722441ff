"""Homepage router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wph.database import get_session_factory
from wph.home.schemas import HomeResponse
from wph.home.service import get_home

router = APIRouter(prefix="/api/home", tags=["Home"])


@router.get("", response_model=HomeResponse)
async def home(
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> HomeResponse:
    """Landing page data."""
    return await get_home(factory)
