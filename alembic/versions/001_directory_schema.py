"""Project directory schema.

Creates users, categories, projects, project_tags, project_views and reviews.
Project slugs are unique per owner; usernames are globally unique.

Revision ID: 001_directory_schema
Revises:
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_directory_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_UUID = postgresql.UUID(as_uuid=False)


def _id_column() -> sa.Column:
    return sa.Column("id", _UUID, primary_key=True, server_default=sa.text("gen_random_uuid()"))


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    """Create the directory tables."""
    op.create_table(
        "users",
        _id_column(),
        sa.Column("auth_id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("display_name", sa.String(128), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("bio", sa.String(500), nullable=True),
        sa.Column("role", sa.String(16), server_default="submitter", nullable=False),
        sa.Column("wallet_address", sa.String(128), nullable=True),
        sa.Column("is_verified", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("auth_id", name="uq_users_auth_id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.CheckConstraint("role IN ('submitter', 'tester', 'creator', 'admin')", name="ck_users_role"),
    )

    op.create_table(
        "categories",
        _id_column(),
        sa.Column("slug", sa.String(64), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon", sa.String(64), nullable=True),
        sa.Column("color", sa.String(32), nullable=True),
        sa.Column("gradient", sa.String(128), nullable=True),
        sa.Column("sort_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        _created_at(),
        sa.UniqueConstraint("slug", name="uq_categories_slug"),
    )

    op.create_table(
        "projects",
        _id_column(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(220), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("logo_url", sa.Text(), nullable=True),
        sa.Column("website_url", sa.Text(), nullable=True),
        sa.Column("github_url", sa.Text(), nullable=True),
        sa.Column("category_id", _UUID, sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("user_id", _UUID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_featured", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("views", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "slug", name="uq_projects_user_id_slug"),
    )
    op.create_index("ix_projects_category_id", "projects", ["category_id"])
    op.create_index("ix_projects_user_id", "projects", ["user_id"])
    # Catalog ordering: featured first, newest first
    op.create_index(
        "ix_projects_catalog_order",
        "projects",
        [sa.text("is_featured DESC"), sa.text("created_at DESC")],
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "project_tags",
        _id_column(),
        sa.Column("project_id", _UUID, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tag_name", sa.String(64), nullable=False),
        _created_at(),
        sa.UniqueConstraint("project_id", "tag_name", name="uq_project_tags_project_id_tag_name"),
    )
    op.create_index("ix_project_tags_project_id", "project_tags", ["project_id"])

    op.create_table(
        "project_views",
        _id_column(),
        sa.Column("project_id", _UUID, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", _UUID, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("viewed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_project_views_project_id", "project_views", ["project_id"])

    op.create_table(
        "reviews",
        _id_column(),
        sa.Column("project_id", _UUID, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", _UUID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.SmallInteger(), nullable=False),
        sa.Column("review_text", sa.Text(), nullable=True),
        _created_at(),
        sa.UniqueConstraint("project_id", "user_id", name="uq_reviews_project_id_user_id"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_project_id", "reviews", ["project_id"])


def downgrade() -> None:
    """Drop the directory tables."""
    op.drop_table("reviews")
    op.drop_table("project_views")
    op.drop_table("project_tags")
    op.drop_table("projects")
    op.drop_table("categories")
    op.drop_table("users")
