"""Project management API endpoints."""
import logging
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.auth.security import get_current_user
from api.config import get_settings
from api.deps import get_lease_manager, get_object_store
from database.session import get_async_session
from models.base import project_collaborators, user_friends
from models.core import ActivityAction, Project, ProjectType, User
from project_module import lifecycle
from project_module.activity_log import ActivityLog
from project_module.exceptions import NotFoundError
from project_module.lease_manager import IncomingFile, LeaseManager
from project_module.membership import require_owner, require_view
from project_module.queries import PROJECT_LOAD_OPTIONS, load_project
from project_module.storage import ObjectStore
from . import router
from .models import (
    CreateProject,
    UpdateProject,
    ProjectResponse,
    ProjectCollaborator,
)
from api.users.models import UserSummary

logger = logging.getLogger(__name__)

async def get_project_or_404(db: AsyncSession, project_id: int) -> Project:
    project = await load_project(db, project_id)
    if not project:
        raise NotFoundError("Project not found")
    return project

async def _ensure_project_type(db: AsyncSession, name: str) -> None:
    result = await db.execute(select(ProjectType.id).where(ProjectType.name == name))
    if result.first() is None:
        raise HTTPException(status_code=400, detail=f"Unknown project type: {name}")

@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    feed: str = Query("global", pattern="^(global|local)$"),
    search: Optional[str] = Query(None, description="Match name, description or tag"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> List[Project]:
    """List projects for the global or local feed."""
    me = current_user.id
    try:
        query = select(Project).options(*PROJECT_LOAD_OPTIONS)
        if feed == "local":
            friend_ids = select(user_friends.c.friend_id).where(user_friends.c.user_id == me)
            shared_ids = select(project_collaborators.c.project_id).where(project_collaborators.c.user_id == me)
            query = query.where(or_(
                Project.creator_id == me,
                Project.creator_id.in_(friend_ids),
                Project.id.in_(shared_ids),
            ))
        else:
            query = query.where(Project.is_public.is_(True))

        if search and search.strip():
            term = search.strip()
            query = query.where(or_(
                Project.name.icontains(term, autoescape=True),
                Project.description.icontains(term, autoescape=True),
                cast(Project.tags, String).icontains(term.lower(), autoescape=True),
            ))

        result = await db.execute(
            query.order_by(Project.updated_at.desc(), Project.id.desc())
            .limit(get_settings().feed_limit)
        )
        return list(result.scalars().all())
    except Exception as e:
        logger.error(f"Error fetching projects: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error fetching projects")

@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    data: CreateProject,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Project:
    """Create a new project owned by the caller."""
    await _ensure_project_type(db, data.type)
    me = current_user.id

    project = Project(
        name=data.name,
        description=data.description,
        type=data.type,
        tags=data.tags,
        is_public=data.is_public,
        version=data.version.strip() or "1.0.0",
        creator_id=me,
    )
    db.add(project)
    await db.commit()
    project_id = project.id
    logger.info(f"User {me} created project {project_id}")

    await ActivityLog(db).record(
        me,
        ActivityAction.CREATED_PROJECT,
        project_id=project_id,
        details=f"Created project: {data.name}",
    )
    return await load_project(db, project_id)

@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Project:
    """Get a project by ID."""
    logger.debug(f"Fetching project with ID: {project_id}")
    project = await get_project_or_404(db, project_id)
    require_view(project, current_user)
    return project

@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    data: UpdateProject,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Project:
    """Update project metadata. Only the owner may do this."""
    project = await get_project_or_404(db, project_id)
    require_owner(project, current_user, "Only project creator can update project details")
    me = current_user.id

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    if "type" in update_data:
        await _ensure_project_type(db, update_data["type"])
    if update_data:
        for key, value in update_data.items():
            setattr(project, key, value)
        await db.commit()
        await ActivityLog(db).record(
            me,
            ActivityAction.EDITED,
            project_id=project_id,
            details=f"Updated {', '.join(sorted(update_data))}",
        )

    return await load_project(db, project_id)

@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    store: ObjectStore = Depends(get_object_store)
) -> Dict[str, str]:
    """Delete a project with its activities, discussions and files."""
    project = await get_project_or_404(db, project_id)
    require_owner(project, current_user, "Only project creator can delete project")
    me = current_user.id
    name = project.name

    await lifecycle.delete_project(db, project, store)
    await ActivityLog(db).record(me, ActivityAction.DELETED, details=f"Deleted project: {name}")

    return {"message": f"Project {project_id} deleted successfully"}

@router.get("/{project_id}/collaborators", response_model=List[UserSummary])
async def list_collaborators(
    project_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> List[User]:
    """List all collaborators in a project."""
    project = await get_project_or_404(db, project_id)
    require_view(project, current_user)
    return list(project.collaborators)

@router.post("/{project_id}/collaborators", response_model=ProjectResponse)
async def add_collaborator(
    project_id: int,
    data: ProjectCollaborator,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Project:
    """Add a collaborator to a project."""
    project = await get_project_or_404(db, project_id)
    return await lifecycle.add_collaborator(db, project, current_user, data.user_id)

@router.delete("/{project_id}/collaborators/{user_id}", response_model=ProjectResponse)
async def remove_collaborator(
    project_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Project:
    """Remove a collaborator from a project."""
    project = await get_project_or_404(db, project_id)
    return await lifecycle.remove_collaborator(db, project, current_user, user_id)

@router.post("/{project_id}/transfer", response_model=ProjectResponse)
async def transfer_ownership(
    project_id: int,
    data: ProjectCollaborator,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> Project:
    """Transfer ownership to one of the project's collaborators."""
    project = await get_project_or_404(db, project_id)
    return await lifecycle.transfer_ownership(db, project, current_user, data.user_id)

@router.post("/{project_id}/checkout", response_model=ProjectResponse)
async def checkout_project(
    project_id: int,
    current_user: User = Depends(get_current_user),
    leases: LeaseManager = Depends(get_lease_manager)
) -> Project:
    """Check out a project for exclusive editing."""
    return await leases.checkout(project_id, current_user)

@router.post("/{project_id}/checkin", response_model=ProjectResponse)
async def checkin_project(
    project_id: int,
    message: Optional[str] = Form(None),
    version: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    leases: LeaseManager = Depends(get_lease_manager)
) -> Project:
    """Check a project back in, optionally replacing its files."""
    incoming = None
    # Browsers send an empty part when no file was picked; treat that as "no files"
    uploads = [f for f in (files or []) if f.filename]
    if uploads:
        incoming = []
        for upload in uploads:
            try:
                incoming.append(IncomingFile(name=Path(upload.filename).name, data=await upload.read()))
            finally:
                await upload.close()

    return await leases.checkin(
        project_id,
        current_user,
        message,
        new_files=incoming,
        new_version=version,
    )

@router.get("/{project_id}/files/{file_id}")
async def download_file(
    project_id: int,
    file_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    store: ObjectStore = Depends(get_object_store)
) -> FileResponse:
    """Download one file of a project."""
    project = await get_project_or_404(db, project_id)
    require_view(project, current_user)
    entry = next((f for f in project.files if f.id == file_id), None)
    if entry is None:
        raise NotFoundError("File not found")

    me = current_user.id
    name = entry.name
    try:
        path = store.path_for(entry.storage_location)
    except ValueError:
        raise NotFoundError("File not found")
    if not path.is_file():
        logger.warning(f"Stored object missing for file {file_id} of project {project_id}")
        raise NotFoundError("File content is no longer available")

    await ActivityLog(db).record(me, ActivityAction.DOWNLOADED, project_id=project_id, file_name=name)
    return FileResponse(path, filename=name)
