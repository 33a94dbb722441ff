"""View recording.

``project_views`` is the source of truth for views; ``projects.views`` is a
materialized count bumped atomically in the same transaction as each event.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select, update

from wph.db.models import Project, ProjectView
from wph.errors import NotFound

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

USER_AGENT_MAX = 512


async def record_view(
    db: AsyncSession,
    project_id: str,
    *,
    user_id: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> int:
    """
    Append a view event and bump the counter; returns the new count.

    The increment is a single ``UPDATE ... SET views = views + 1 RETURNING``,
    so concurrent views never overwrite each other.

    Raises:
        NotFound: If the project does not exist or is inactive.
    """
    result = await db.execute(
        update(Project)
        .where(Project.id == project_id)
        .where(Project.is_active.is_(True))
        .values(views=Project.views + 1)
        .returning(Project.views)
        .execution_options(synchronize_session=False)
    )
    views = result.scalar_one_or_none()
    if views is None:
        await db.rollback()
        msg = "Project not found"
        raise NotFound(msg)

    db.add(
        ProjectView(
            project_id=project_id,
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent[:USER_AGENT_MAX] if user_agent else None,
        )
    )
    await db.commit()
    logger.debug("view_recorded", project_id=project_id, views=views)
    return views


async def view_counts(db: AsyncSession, project_ids: list[str]) -> dict[str, int]:
    """Number of view events per project, from one grouped query."""
    if not project_ids:
        return {}
    result = await db.execute(
        select(ProjectView.project_id, func.count())
        .where(ProjectView.project_id.in_(project_ids))
        .group_by(ProjectView.project_id)
    )
    return {project_id: count for project_id, count in result.all()}
