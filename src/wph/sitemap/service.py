"""sitemaps.org XML for the public pages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING
from xml.etree import ElementTree as ET

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from wph.config import get_settings
from wph.db.models import Category, Project, User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

# (path, changefreq, priority)
STATIC_PAGES: tuple[tuple[str, str, float], ...] = (
    ("", "daily", 1.0),
    ("/projects", "daily", 0.9),
    ("/categories", "weekly", 0.8),
    ("/submit", "monthly", 0.7),
)


@dataclass(frozen=True)
class SitemapEntry:
    """One <url> element."""

    loc: str
    lastmod: datetime
    changefreq: str
    priority: float


async def collect_entries(db: AsyncSession, base_url: str) -> list[SitemapEntry]:
    """Every active project page and category page."""
    entries: list[SitemapEntry] = []

    projects = await db.execute(
        select(User.username, Project.slug, Project.updated_at)
        .join(User, User.id == Project.user_id)
        .where(Project.is_active.is_(True))
        .where(User.is_active.is_(True))
        .order_by(Project.created_at.desc())
    )
    for username, slug, updated_at in projects.all():
        entries.append(SitemapEntry(f"{base_url}/projects/{username}/{slug}", updated_at, "weekly", 0.8))

    categories = await db.execute(
        select(Category.slug, Category.created_at).where(Category.is_active.is_(True)).order_by(Category.sort_order)
    )
    for slug, created_at in categories.all():
        entries.append(SitemapEntry(f"{base_url}/categories/{slug}", created_at, "weekly", 0.8))

    return entries


def render_sitemap(entries: list[SitemapEntry]) -> str:
    """Serialize entries as a sitemap ``urlset`` document."""
    root = ET.Element("urlset", xmlns=SITEMAP_NS)
    for entry in entries:
        url = ET.SubElement(root, "url")
        ET.SubElement(url, "loc").text = entry.loc
        ET.SubElement(url, "lastmod").text = entry.lastmod.date().isoformat()
        ET.SubElement(url, "changefreq").text = entry.changefreq
        ET.SubElement(url, "priority").text = f"{entry.priority:.1f}"
    body = ET.tostring(root, encoding="unicode", method="xml")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'


async def build_sitemap(db: AsyncSession) -> str:
    """Static pages plus dynamic ones; static only if the store fails."""
    base_url = get_settings().site_url.rstrip("/")
    now = datetime.now(timezone.utc)
    entries = [SitemapEntry(f"{base_url}{path}", now, freq, prio) for path, freq, prio in STATIC_PAGES]

    try:
        entries.extend(await collect_entries(db, base_url))
    except SQLAlchemyError as exc:
        logger.error("sitemap_fallback", error=str(exc))

    return render_sitemap(entries)
