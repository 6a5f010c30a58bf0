"""User profile and friend management endpoints."""
import logging
from typing import Dict, List, Optional

from fastapi import Depends, HTTPException, Query
from sqlalchemy import and_, delete, insert, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.auth.security import get_current_user
from database.session import get_async_session
from models.base import friend_requests, user_friends
from models.core import User
from project_module.queries import load_user_profile
from . import router
from .models import UpdateProfile, UserProfile, UserResponse

logger = logging.getLogger(__name__)

async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

async def _are_friends(db: AsyncSession, user_id: int, other_id: int) -> bool:
    result = await db.execute(
        select(user_friends.c.user_id).where(
            user_friends.c.user_id == user_id,
            user_friends.c.friend_id == other_id
        )
    )
    return result.first() is not None

async def _has_request(db: AsyncSession, requester_id: int, recipient_id: int) -> bool:
    result = await db.execute(
        select(friend_requests.c.requester_id).where(
            friend_requests.c.requester_id == requester_id,
            friend_requests.c.recipient_id == recipient_id
        )
    )
    return result.first() is not None

@router.get("", response_model=List[UserResponse])
async def list_users(
    search: Optional[str] = Query(None, description="Match username, email or occupation"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> List[User]:
    """List users, optionally filtered by a search term."""
    query = select(User).order_by(User.username).limit(50)
    if search and search.strip():
        term = search.strip()
        query = query.where(or_(
            User.username.icontains(term, autoescape=True),
            User.email.icontains(term, autoescape=True),
            User.occupation.icontains(term, autoescape=True),
        ))
    result = await db.execute(query)
    return list(result.scalars().all())

@router.put("/profile", response_model=UserResponse)
async def update_profile(
    data: UpdateProfile,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> User:
    """Update the current user's profile."""
    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    clashes = []
    if "username" in update_data:
        clashes.append(User.username == update_data["username"])
    if "email" in update_data:
        clashes.append(User.email == update_data["email"])
    if clashes:
        result = await db.execute(
            select(User.id).where(and_(User.id != current_user.id, or_(*clashes)))
        )
        if result.first() is not None:
            raise HTTPException(status_code=400, detail="Username or email already taken by another user")

    for key, value in update_data.items():
        setattr(current_user, key, value)
    await db.commit()
    await db.refresh(current_user)
    return current_user

@router.post("/accept-friend/{user_id}")
async def accept_friend_request(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Dict[str, str]:
    """Accept a pending friend request from ``user_id``."""
    me = current_user.id
    if not await _has_request(db, user_id, me):
        raise HTTPException(status_code=400, detail="No friend request from this user")
    await _get_user_or_404(db, user_id)

    await db.execute(insert(user_friends), [
        {"user_id": me, "friend_id": user_id},
        {"user_id": user_id, "friend_id": me},
    ])
    await db.execute(
        delete(friend_requests).where(or_(
            and_(friend_requests.c.requester_id == user_id, friend_requests.c.recipient_id == me),
            and_(friend_requests.c.requester_id == me, friend_requests.c.recipient_id == user_id),
        ))
    )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Already friends with this user")

    logger.info(f"User {me} accepted friend request from user {user_id}")
    return {"message": "Friend request accepted successfully"}

@router.delete("/unfriend/{user_id}")
async def unfriend(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Dict[str, str]:
    """Remove the friendship with ``user_id`` in both directions."""
    me = current_user.id
    await _get_user_or_404(db, user_id)
    if not await _are_friends(db, me, user_id):
        raise HTTPException(status_code=400, detail="You are not friends with this user")

    await db.execute(
        delete(user_friends).where(or_(
            and_(user_friends.c.user_id == me, user_friends.c.friend_id == user_id),
            and_(user_friends.c.user_id == user_id, user_friends.c.friend_id == me),
        ))
    )
    await db.commit()
    return {"message": "Friend removed successfully"}

@router.get("/{user_id}", response_model=UserProfile)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> User:
    """Get a user's profile by ID."""
    user = await load_user_profile(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

@router.post("/{user_id}/friend-request")
async def send_friend_request(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Dict[str, str]:
    """Send a friend request to ``user_id``."""
    me = current_user.id
    if user_id == me:
        raise HTTPException(status_code=400, detail="Cannot send friend request to yourself")
    await _get_user_or_404(db, user_id)
    if await _are_friends(db, me, user_id):
        raise HTTPException(status_code=400, detail="Already friends with this user")
    if await _has_request(db, me, user_id):
        raise HTTPException(status_code=400, detail="Friend request already sent")

    await db.execute(insert(friend_requests).values(requester_id=me, recipient_id=user_id))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Friend request already sent")
    return {"message": "Friend request sent successfully"}
