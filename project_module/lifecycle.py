"""Owner-only project operations that share the membership predicate."""
import logging
from typing import List

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import friend_requests, project_collaborators, user_friends
from models.core import Activity, ActivityAction, Discussion, Project, ProjectFile, User
from project_module.activity_log import ActivityLog
from project_module.exceptions import ConflictError, NotFoundError, ValidationError
from project_module.membership import is_member, require_owner
from project_module.queries import load_project
from project_module.storage import ObjectStore

logger = logging.getLogger(__name__)


async def _get_user(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def add_collaborator(session: AsyncSession, project: Project, owner: User, user_id: int) -> Project:
    """Add ``user_id`` to the project's collaborators."""
    require_owner(project, owner, "Only the project owner can add collaborators")
    user = await _get_user(session, user_id)
    if is_member(project, user):
        raise ConflictError(f"{user.username} is already a member of this project")

    project_id = project.id
    project_name = project.name
    project.collaborators.append(user)
    await session.commit()
    logger.info(f"User {user_id} joined project {project_id}")

    await ActivityLog(session).record(
        user_id,
        ActivityAction.JOINED_PROJECT,
        project_id=project_id,
        details=f"Added to {project_name}"[:200],
    )
    return await load_project(session, project_id)


async def remove_collaborator(session: AsyncSession, project: Project, owner: User, user_id: int) -> Project:
    """Remove a collaborator; the current lease holder cannot be removed."""
    require_owner(project, owner, "Only the project owner can remove collaborators")
    collaborator = next((c for c in project.collaborators if c.id == user_id), None)
    if collaborator is None:
        raise NotFoundError("User is not a collaborator on this project")
    if project.lease_holder_id == user_id:
        raise ConflictError("Cannot remove a collaborator while they have the project checked out")

    project_id = project.id
    project_name = project.name
    result = await session.execute(
        delete(project_collaborators).where(
            project_collaborators.c.project_id == project_id,
            project_collaborators.c.user_id == user_id,
            # refuse if the lease was taken after the read above
            ~select(Project.id)
            .where(Project.id == project_id, Project.lease_holder_id == user_id)
            .exists(),
        )
    )
    if result.rowcount != 1:
        await session.rollback()
        raise ConflictError("Cannot remove a collaborator while they have the project checked out")
    await session.commit()
    logger.info(f"User {user_id} removed from project {project_id}")

    await ActivityLog(session).record(
        user_id,
        ActivityAction.LEFT_PROJECT,
        project_id=project_id,
        details=f"Removed from {project_name}"[:200],
    )
    return await load_project(session, project_id)


async def transfer_ownership(session: AsyncSession, project: Project, owner: User, user_id: int) -> Project:
    """Hand the project to an existing collaborator.

    The new owner leaves the collaborator list and the previous owner joins
    it, so the member set (and any lease holder's membership) is unchanged.
    """
    require_owner(project, owner, "Only the project owner can transfer ownership")
    new_owner = next((c for c in project.collaborators if c.id == user_id), None)
    if new_owner is None:
        raise ValidationError("Ownership can only be transferred to a collaborator")

    project_id = project.id
    previous_owner_id = project.creator_id
    new_owner_name = new_owner.username
    project.collaborators = [c for c in project.collaborators if c.id != user_id] + [project.creator]
    project.creator_id = new_owner.id
    await session.commit()
    logger.info(f"Project {project_id} transferred from user {previous_owner_id} to user {user_id}")

    await ActivityLog(session).record(
        previous_owner_id,
        ActivityAction.TRANSFERRED_OWNERSHIP,
        project_id=project_id,
        details=f"Transferred ownership to {new_owner_name}"[:200],
    )
    return await load_project(session, project_id)


async def delete_project(session: AsyncSession, project: Project, object_store: ObjectStore) -> None:
    """Delete a project with its discussions, activities and files.

    Database rows go in one transaction; stored objects are removed
    best-effort once that transaction has committed.
    """
    project_id = project.id
    locations: List[str] = [f.storage_location for f in project.files]
    try:
        await session.execute(delete(Discussion).where(Discussion.project_id == project_id))
        await session.execute(delete(Activity).where(Activity.project_id == project_id))
        await session.execute(delete(ProjectFile).where(ProjectFile.project_id == project_id))
        await session.execute(
            delete(project_collaborators).where(project_collaborators.c.project_id == project_id)
        )
        await session.execute(delete(Project).where(Project.id == project_id))
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to delete project {project_id}: {e}", exc_info=True)
        raise

    logger.info(f"Project {project_id} deleted")
    if locations:
        await object_store.delete_many(locations)


async def release_leases_held_by(session: AsyncSession, user_id: int) -> int:
    """Clear every lease held by ``user_id``; used when the user is removed."""
    result = await session.execute(
        update(Project)
        .where(Project.lease_holder_id == user_id)
        .values(lease_holder_id=None, lease_acquired_at=None)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        logger.info(f"Released {result.rowcount} lease(s) held by user {user_id}")
    return result.rowcount


async def delete_user(session: AsyncSession, user: User, object_store: ObjectStore) -> None:
    """Remove a user and everything that only makes sense with them around.

    Owned projects go through :func:`delete_project`. Leases the user holds on
    other projects are released before their collaborator links are dropped,
    so no project is left checked out by a non-member.
    """
    user_id = user.id
    result = await session.execute(select(Project.id).where(Project.creator_id == user_id))
    for project_id in result.scalars().all():
        project = await load_project(session, project_id)
        if project is not None:
            await delete_project(session, project, object_store)

    try:
        await release_leases_held_by(session, user_id)
        await session.execute(
            delete(project_collaborators).where(project_collaborators.c.user_id == user_id)
        )
        await session.execute(
            update(ProjectFile)
            .where(ProjectFile.uploaded_by_id == user_id)
            .values(uploaded_by_id=None)
            .execution_options(synchronize_session=False)
        )
        await session.execute(delete(Activity).where(Activity.user_id == user_id))
        await session.execute(delete(Discussion).where(Discussion.user_id == user_id))
        await _delete_orphaned_replies(session)
        await session.execute(
            delete(user_friends).where(
                or_(user_friends.c.user_id == user_id, user_friends.c.friend_id == user_id)
            )
        )
        await session.execute(
            delete(friend_requests).where(
                or_(friend_requests.c.requester_id == user_id, friend_requests.c.recipient_id == user_id)
            )
        )
        await session.execute(delete(User).where(User.id == user_id))
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to delete user {user_id}: {e}", exc_info=True)
        raise

    logger.info(f"User {user_id} deleted")


async def _delete_orphaned_replies(session: AsyncSession) -> None:
    parents = Discussion.__table__.alias("parents")
    while True:
        result = await session.execute(
            delete(Discussion)
            .where(
                Discussion.parent_comment_id.is_not(None),
                Discussion.parent_comment_id.not_in(select(parents.c.id)),
            )
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            break
