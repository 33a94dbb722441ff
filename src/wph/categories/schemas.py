"""Category schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CategoryResponse(BaseModel):
    """A category with its number of active projects."""

    id: str
    slug: str
    name: str
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    gradient: str | None = None
    sort_order: int
    is_active: bool
    created_at: datetime
    projects_count: int = 0


class CategoryCreateRequest(BaseModel):
    """New category. Name and slug are checked by the service (400)."""

    name: str | None = Field(None, max_length=128)
    slug: str | None = Field(None, max_length=64)
    description: str | None = None
    icon: str | None = Field(None, max_length=64)
    color: str | None = Field(None, max_length=32)
    gradient: str | None = Field(None, max_length=128)
    sort_order: int = 0
