"""Sitemap router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from wph.database import get_session
from wph.sitemap.service import build_sitemap

router = APIRouter(tags=["SEO"])


@router.get("/sitemap.xml", response_class=Response)
async def sitemap(db: AsyncSession = Depends(get_session)) -> Response:
    """XML sitemap for crawlers."""
    return Response(content=await build_sitemap(db), media_type="application/xml")
