"""Project catalog schemas.

Response field names follow what the web client already consumes, so a few
fields serialize in camelCase (``hasMore``, ``displayName``, ``avatarUrl``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, Field

# Column widths: project_tags.tag_name is 64 and projects.slug is 220, leaving
# room for a "-<n>" suffix after a 200 character base
TAG_MAX_LENGTH = 64
SLUG_BASE_MAX_LENGTH = 200


class CategorySummary(BaseModel):
    """Category fields embedded in a project."""

    id: str
    slug: str
    name: str
    icon: str | None = None
    color: str | None = None
    gradient: str | None = None


class OwnerSummary(BaseModel):
    """Owner fields embedded in a catalog entry."""

    username: str
    display_name: str | None = Field(None, serialization_alias="displayName")


class OwnerDetail(OwnerSummary):
    """Owner fields on the project detail page."""

    id: str
    avatar_url: str | None = Field(None, serialization_alias="avatarUrl")
    bio: str | None = None


class ProjectResponse(BaseModel):
    """A project as listed in the catalog."""

    id: str
    title: str
    slug: str
    description: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    github_url: str | None = None
    category_id: str
    user_id: str
    is_featured: bool
    views: int
    created_at: datetime
    updated_at: datetime
    category: CategorySummary | None = None
    tags: list[str] = []
    owner: OwnerSummary | None = None


class ProjectListResponse(BaseModel):
    """One catalog page plus pagination metadata."""

    projects: list[ProjectResponse]
    total: int
    has_more: bool = Field(serialization_alias="hasMore")


class ProjectCreateRequest(BaseModel):
    """Submission body. Title and category are checked by the service (400)."""

    title: str | None = Field(None, max_length=200)
    category_slug: str | None = None
    description: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    github_url: str | None = None
    tags: list[Annotated[str, Field(max_length=TAG_MAX_LENGTH)]] = []
    is_featured: bool = False
    slug: str | None = Field(None, max_length=SLUG_BASE_MAX_LENGTH)


class ViewResponse(BaseModel):
    """Result of recording a view."""

    success: bool = True
    views: int
    message: str = "View recorded"


class ReviewCreateRequest(BaseModel):
    """A star rating with optional text."""

    rating: int = Field(..., ge=1, le=5)
    review_text: str | None = Field(None, max_length=5000)


class ReviewResponse(BaseModel):
    """A review with its author."""

    id: str
    project_id: str
    rating: int
    review_text: str | None = None
    created_at: datetime
    username: str | None = None
    display_name: str | None = Field(None, serialization_alias="displayName")
    avatar_url: str | None = Field(None, serialization_alias="avatarUrl")


class ProjectMetadata(BaseModel):
    """Page metadata for search engines and link previews."""

    title: str
    description: str
    keywords: list[str]
    canonical_url: str
    open_graph: dict[str, Any]
    twitter: dict[str, Any]
    json_ld: dict[str, Any]


class ProjectDetailResponse(ProjectResponse):
    """Everything the project page renders."""

    owner: OwnerDetail | None = None
    reviews: list[ReviewResponse] = []
    average_rating: float | None = None
    review_count: int = 0
    metadata: ProjectMetadata
