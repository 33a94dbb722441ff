"""Homepage schemas."""

from __future__ import annotations

from pydantic import BaseModel

from wph.categories.schemas import CategoryResponse
from wph.projects.schemas import ProjectResponse


class PlatformStats(BaseModel):
    """Site-wide counters."""

    projects: int = 0
    users: int = 0
    views: int = 0
    categories: int = 0


class HomeResponse(BaseModel):
    """Everything the landing page needs in one payload."""

    featured_projects: list[ProjectResponse] = []
    categories: list[CategoryResponse] = []
    stats: PlatformStats = PlatformStats()
