"""Loading helpers that eager-load everything a project response needs."""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.core import Project, ProjectFile, User

PROJECT_LOAD_OPTIONS = (
    selectinload(Project.creator),
    selectinload(Project.collaborators),
    selectinload(Project.lease_holder),
    selectinload(Project.files).selectinload(ProjectFile.uploaded_by),
)


async def load_project(session: AsyncSession, project_id: int) -> Optional[Project]:
    """Fetch a project with its relationships, bypassing stale identity-map state."""
    result = await session.execute(
        select(Project)
        .options(*PROJECT_LOAD_OPTIONS)
        .where(Project.id == project_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def load_user(session: AsyncSession, user_id: int) -> Optional[User]:
    return await session.get(User, user_id)


async def load_user_profile(session: AsyncSession, user_id: int) -> Optional[User]:
    """Fetch a user with friends, pending requests and project lists."""
    result = await session.execute(
        select(User)
        .options(
            selectinload(User.friends),
            selectinload(User.friend_requests),
            selectinload(User.owned_projects),
            selectinload(User.shared_projects),
        )
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
