"""Dashboard router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wph.auth.dependencies import get_current_user
from wph.dashboard.schemas import DashboardResponse
from wph.dashboard.service import get_dashboard
from wph.database import get_session
from wph.db.models import User

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
async def dashboard(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DashboardResponse:
    """Profile, stats and projects of the signed-in user."""
    return await get_dashboard(db, user)
