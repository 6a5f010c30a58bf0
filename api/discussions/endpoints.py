"""Project discussion endpoints."""
import logging
from typing import Dict, List

from fastapi import Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.auth.security import get_current_user
from database.session import get_async_session
from models.core import Discussion, User
from project_module.membership import require_view
from project_module.queries import load_project
from . import router
from .models import CreateDiscussion, DiscussionResponse, UpdateDiscussion

logger = logging.getLogger(__name__)

DISCUSSION_PAGE = 100

async def _load_discussion(db: AsyncSession, discussion_id: int) -> Discussion:
    result = await db.execute(
        select(Discussion)
        .options(selectinload(Discussion.user))
        .where(Discussion.id == discussion_id)
        .execution_options(populate_existing=True)
    )
    discussion = result.scalar_one_or_none()
    if not discussion:
        raise HTTPException(status_code=404, detail="Discussion not found")
    return discussion

async def _viewable_project(db: AsyncSession, project_id: int, user: User):
    project = await load_project(db, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    require_view(project, user)
    return project

async def _subtree_ids(db: AsyncSession, root_id: int) -> List[int]:
    """Ids of a comment and every reply beneath it."""
    ids = [root_id]
    frontier = [root_id]
    while frontier:
        result = await db.execute(
            select(Discussion.id).where(Discussion.parent_comment_id.in_(frontier))
        )
        frontier = [row[0] for row in result.all() if row[0] not in ids]
        ids.extend(frontier)
    return ids

@router.get("/project/{project_id}", response_model=List[DiscussionResponse])
async def list_discussions(
    project_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> List[Discussion]:
    """Comments on a project, newest first."""
    await _viewable_project(db, project_id, current_user)
    result = await db.execute(
        select(Discussion)
        .options(selectinload(Discussion.user))
        .where(Discussion.project_id == project_id)
        .order_by(Discussion.created_at.desc(), Discussion.id.desc())
        .limit(DISCUSSION_PAGE)
    )
    return list(result.scalars().all())

@router.post("", response_model=DiscussionResponse, status_code=201)
async def create_discussion(
    data: CreateDiscussion,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Discussion:
    """Post a comment, optionally as a reply."""
    await _viewable_project(db, data.project_id, current_user)
    if data.parent_comment_id is not None:
        parent = await db.get(Discussion, data.parent_comment_id)
        if parent is None or parent.project_id != data.project_id:
            raise HTTPException(status_code=400, detail="Parent comment not found in this project")

    discussion = Discussion(
        project_id=data.project_id,
        user_id=current_user.id,
        message=data.message,
        parent_comment_id=data.parent_comment_id,
    )
    db.add(discussion)
    await db.commit()
    return await _load_discussion(db, discussion.id)

@router.put("/{discussion_id}", response_model=DiscussionResponse)
async def update_discussion(
    discussion_id: int,
    data: UpdateDiscussion,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Discussion:
    """Edit one of the caller's own comments."""
    discussion = await _load_discussion(db, discussion_id)
    if discussion.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only edit your own comments")

    discussion.message = data.message
    await db.commit()
    return await _load_discussion(db, discussion_id)

@router.delete("/{discussion_id}")
async def delete_discussion(
    discussion_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Dict[str, str]:
    """Delete one of the caller's own comments together with its replies."""
    discussion = await _load_discussion(db, discussion_id)
    if discussion.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only delete your own comments")

    ids = await _subtree_ids(db, discussion_id)
    await db.execute(
        delete(Discussion)
        .where(Discussion.id.in_(ids))
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    logger.info(f"Deleted discussion {discussion_id} and {len(ids) - 1} repl(ies)")
    return {"message": "Discussion deleted successfully"}
