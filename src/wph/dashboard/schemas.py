"""Dashboard Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from wph.projects.schemas import CategorySummary


class DashboardProfile(BaseModel):
    """The signed-in user's profile as the dashboard shows it."""

    id: str
    email: str
    name: str
    username: str
    avatar: str | None = None
    bio: str
    role: str
    wallet_address: str | None = None
    is_verified: bool
    created_at: datetime
    updated_at: datetime


class DashboardStats(BaseModel):
    """Summary counters; ``projects_submitted`` always equals ``len(projects)``."""

    projects_submitted: int = 0
    total_views: int = 0
    total_tags: int = 0
    featured_projects: int = 0


class DashboardProject(BaseModel):
    """One of the user's projects with its view-event count."""

    id: str
    title: str
    slug: str
    description: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    github_url: str | None = None
    is_featured: bool
    views: int
    created_at: datetime
    updated_at: datetime
    category: CategorySummary | None = None
    tags: list[str] = []


class DashboardResponse(BaseModel):
    """Full dashboard payload."""

    profile: DashboardProfile
    stats: DashboardStats
    projects: list[DashboardProject]
    recent_activity: list[dict[str, Any]] = []
