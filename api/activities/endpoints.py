"""Activity feed endpoints."""
import logging
from typing import List

from fastapi import Depends, HTTPException, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.auth.security import get_current_user
from database.session import get_async_session
from models.base import user_friends
from models.core import Activity, Project, User
from project_module.activity_log import build_activity
from . import router
from .models import ActivityResponse, CreateActivity

logger = logging.getLogger(__name__)

def _feed_query():
    return (
        select(Activity)
        .options(selectinload(Activity.user), selectinload(Activity.project))
        .order_by(Activity.created_at.desc(), Activity.id.desc())
    )

async def _fetch(db: AsyncSession, query) -> List[Activity]:
    result = await db.execute(query)
    return list(result.scalars().all())

@router.get("", response_model=List[ActivityResponse])
async def get_feed(
    feed: str = Query("global", pattern="^(global|local)$"),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> List[Activity]:
    """Global feed, or the caller's and their friends' activity."""
    query = _feed_query()
    if feed == "local":
        me = current_user.id
        friend_ids = select(user_friends.c.friend_id).where(user_friends.c.user_id == me)
        query = query.where(or_(Activity.user_id == me, Activity.user_id.in_(friend_ids)))
    return await _fetch(db, query.limit(limit))

@router.get("/search", response_model=List[ActivityResponse])
async def search_activities(
    query: str = Query("", description="Substring of the activity message"),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> List[Activity]:
    """Search activities by message."""
    term = query.strip()
    if not term:
        return []
    stmt = _feed_query().where(Activity.message.icontains(term, autoescape=True)).limit(limit)
    return await _fetch(db, stmt)

@router.get("/project/{project_id}", response_model=List[ActivityResponse])
async def get_project_activities(
    project_id: int,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> List[Activity]:
    """Activities recorded against one project."""
    return await _fetch(db, _feed_query().where(Activity.project_id == project_id).limit(limit))

@router.get("/user/{user_id}", response_model=List[ActivityResponse])
async def get_user_activities(
    user_id: int,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> List[Activity]:
    """Activities performed by one user."""
    return await _fetch(db, _feed_query().where(Activity.user_id == user_id).limit(limit))

@router.post("", response_model=ActivityResponse, status_code=201)
async def create_activity(
    data: CreateActivity,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Activity:
    """Record an activity performed by the caller."""
    if data.project_id is not None and await db.get(Project, data.project_id) is None:
        raise HTTPException(status_code=404, detail="Project not found")

    activity = build_activity(
        current_user.id,
        data.action,
        project_id=data.project_id,
        file_name=data.file_name,
        message=data.message,
        details=data.details,
    )
    db.add(activity)
    await db.commit()
    activity_id = activity.id
    logger.debug(f"Recorded {data.action.value} activity {activity_id}")

    result = await db.execute(
        _feed_query().where(Activity.id == activity_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()
