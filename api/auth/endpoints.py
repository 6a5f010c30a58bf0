"""Signup, signin and current-user endpoints."""
import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.session import get_async_session
from models.core import User
from project_module.queries import load_user_profile
from . import router
from .models import SignupRequest, SigninRequest, TokenResponse
from .security import create_access_token, get_current_user, get_password_hash, verify_password
from api.users.models import CurrentUser, UserResponse

logger = logging.getLogger(__name__)

@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    db: AsyncSession = Depends(get_async_session)
) -> TokenResponse:
    """Register a new user and issue a token."""
    result = await db.execute(
        select(User).where(or_(User.email == data.email, User.username == data.username))
    )
    if result.scalars().first() is not None:
        raise HTTPException(status_code=400, detail="User with this email or username already exists")

    user = User(
        username=data.username,
        email=data.email,
        password_hash=get_password_hash(data.password),
        date_of_birth=data.date_of_birth,
        occupation=data.occupation,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.username})")

    return TokenResponse(token=create_access_token(user.id), user=UserResponse.model_validate(user))

@router.post("/signin", response_model=TokenResponse)
async def signin(
    data: SigninRequest,
    db: AsyncSession = Depends(get_async_session)
) -> TokenResponse:
    """Exchange email and password for a token."""
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(data.password, user.password_hash):
        logger.debug(f"Failed signin for {data.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return TokenResponse(token=create_access_token(user.id), user=UserResponse.model_validate(user))

@router.get("/me", response_model=CurrentUser)
async def me(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> User:
    """Get the authenticated user with friends and projects."""
    return await load_user_profile(db, current_user.id)
