"""Administration endpoints."""
import logging
from typing import Dict, List

from fastapi import Depends, HTTPException
from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.auth.security import get_current_admin, get_current_user
from api.deps import get_object_store
from api.users.models import UserResponse
from database.session import get_async_session
from models.core import Activity, ProjectType, User
from project_module import lifecycle
from project_module.queries import load_project
from project_module.storage import ObjectStore
from . import router
from .models import AdminUpdateUser, CreateProjectType

logger = logging.getLogger(__name__)

async def _project_type_names(db: AsyncSession) -> List[str]:
    result = await db.execute(select(ProjectType.name).order_by(ProjectType.position, ProjectType.id))
    return list(result.scalars().all())

@router.get("/users", response_model=List[UserResponse])
async def list_users(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session)
) -> List[User]:
    """List every account."""
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())

@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: AdminUpdateUser,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session)
) -> User:
    """Update any user's account details or admin flag."""
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    clashes = []
    if "username" in update_data:
        clashes.append(User.username == update_data["username"])
    if "email" in update_data:
        clashes.append(User.email == update_data["email"])
    if clashes:
        result = await db.execute(select(User.id).where(and_(User.id != user_id, or_(*clashes))))
        if result.first() is not None:
            raise HTTPException(status_code=400, detail="Username or email already taken by another user")

    for key, value in update_data.items():
        setattr(user, key, value)
    await db.commit()
    logger.info(f"Admin {admin.id} updated user {user_id}: {sorted(update_data)}")
    await db.refresh(user)
    return user

@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
    store: ObjectStore = Depends(get_object_store)
) -> Dict[str, str]:
    """Delete a user with their projects, activity and social links."""
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    admin_id = admin.id
    await lifecycle.delete_user(db, user, store)
    logger.info(f"Admin {admin_id} deleted user {user_id}")
    return {"message": "User and associated data deleted successfully"}

@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
    store: ObjectStore = Depends(get_object_store)
) -> Dict[str, str]:
    """Delete any project."""
    project = await load_project(db, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    admin_id = admin.id
    await lifecycle.delete_project(db, project, store)
    logger.info(f"Admin {admin_id} deleted project {project_id}")
    return {"message": "Project deleted successfully"}

@router.delete("/activities/{activity_id}")
async def delete_activity(
    activity_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session)
) -> Dict[str, str]:
    """Delete a single feed entry."""
    activity = await db.get(Activity, activity_id)
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")
    await db.delete(activity)
    await db.commit()
    return {"message": "Activity deleted successfully"}

@router.get("/project-types", response_model=List[str])
async def list_project_types(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> List[str]:
    """Project types available when creating a project."""
    return await _project_type_names(db)

@router.post("/project-types", response_model=List[str], status_code=201)
async def add_project_type(
    data: CreateProjectType,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session)
) -> List[str]:
    """Add a project type; returns the updated list."""
    name = data.type.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Project type is required")

    names = await _project_type_names(db)
    if name.lower() in (existing.lower() for existing in names):
        raise HTTPException(status_code=400, detail="Project type already exists")

    result = await db.execute(select(func.coalesce(func.max(ProjectType.position), -1)))
    db.add(ProjectType(name=name, position=result.scalar_one() + 1))
    await db.commit()
    logger.info(f"Project type added: {name}")
    return await _project_type_names(db)
