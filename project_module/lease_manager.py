"""Exclusive-edit lease (checkout / check-in) for projects.

A project is either available (``lease_holder_id`` is NULL) or checked out by
exactly one member. Checkout and check-in are each decided by a single
conditional UPDATE, so two concurrent requests can never both believe they
hold the lease:

    checkout:  SET lease_holder_id = :user WHERE id = :project
               AND lease_holder_id IS NULL AND :user is a member
    check-in:  SET lease_holder_id = NULL  WHERE id = :project
               AND lease_holder_id = :user

Check-in replaces the project's whole file set (never merges) in the same
transaction that releases the lease. Storage objects of the previous file set
are removed after that transaction commits; failures there are logged only.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import project_collaborators, utcnow
from models.core import ActivityAction, Project, ProjectFile, User
from project_module.activity_log import ActivityLog, MESSAGE_MAX
from project_module.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from project_module.membership import is_member, require_member
from project_module.queries import load_project
from project_module.storage import ObjectStore, StoredObject

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """A file submitted with a check-in."""
    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class LeaseManager:
    """Serializes edits of a project's file set to one member at a time."""

    def __init__(
        self,
        session: AsyncSession,
        object_store: ObjectStore,
        max_file_bytes: Optional[int] = None,
        clock: Callable = utcnow,
    ) -> None:
        """Initialize LeaseManager.

        Args:
            session: Database session used for every read and write
            object_store: Storage for uploaded file bytes
            max_file_bytes: Per-file size limit for check-in uploads
            clock: Source of timestamps
        """
        self.session = session
        self.store = object_store
        self.max_file_bytes = max_file_bytes
        self.clock = clock
        self.activities = ActivityLog(session)

    async def checkout(self, project_id: int, user: User) -> Project:
        """Acquire the edit lease for ``user``.

        Raises:
            NotFoundError: project does not exist
            ForbiddenError: user is neither owner nor collaborator
            ConflictError: lease is already held, including by ``user``
        """
        user_id = user.id
        project = await load_project(self.session, project_id)
        if project is None:
            raise NotFoundError("Project not found")
        require_member(project, user_id)
        if project.lease_holder_id is not None:
            raise self._conflict(project)

        now = self.clock()
        collaborator_projects = select(project_collaborators.c.project_id).where(
            project_collaborators.c.user_id == user_id
        )
        stmt = (
            update(Project)
            .where(
                Project.id == project_id,
                Project.lease_holder_id.is_(None),
                or_(Project.creator_id == user_id, Project.id.in_(collaborator_projects)),
            )
            .values(lease_holder_id=user_id, lease_acquired_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            if result.rowcount != 1:
                await self.session.rollback()
                await self._refuse_checkout(project_id, user_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Checkout of project {project_id} by user {user_id} failed: {e}", exc_info=True)
            raise

        logger.info(f"Project {project_id} checked out by user {user_id}")
        await self.activities.record(
            user_id,
            ActivityAction.CHECKED_OUT,
            project_id=project_id,
            details="Checked out project for editing",
        )
        return await load_project(self.session, project_id)

    async def checkin(
        self,
        project_id: int,
        user: User,
        message: Optional[str],
        new_files: Optional[Sequence[IncomingFile]] = None,
        new_version: Optional[str] = None,
    ) -> Project:
        """Release the lease held by ``user``, optionally replacing the file set.

        ``new_files=None`` leaves the files untouched; any sequence (even an
        empty one) replaces them entirely. A blank ``new_version`` keeps the
        current version.

        Raises:
            NotFoundError: project does not exist
            ValidationError: message blank or too long, or a file too large
            ForbiddenError: ``user`` does not hold the lease
        """
        user_id = user.id
        project = await load_project(self.session, project_id)
        if project is None:
            raise NotFoundError("Project not found")

        message = (message or "").strip()
        if not message:
            raise ValidationError("Check-in message is required")
        if len(message) > MESSAGE_MAX:
            raise ValidationError(f"Check-in message must be at most {MESSAGE_MAX} characters")

        if project.lease_holder_id != user_id:
            raise ForbiddenError("You have not checked out this project")

        files = list(new_files) if new_files is not None else None
        if files:
            self._validate_files(files)
        version = (new_version or "").strip() or None

        written = await self._write_files(files) if files else []
        now = self.clock()
        values = {"lease_holder_id": None, "lease_acquired_at": None, "updated_at": now}
        if version:
            values["version"] = version

        old_locations: List[str] = []
        try:
            result = await self.session.execute(
                update(Project)
                .where(Project.id == project_id, Project.lease_holder_id == user_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ForbiddenError("You have not checked out this project")

            if files is not None:
                old_locations = [f.storage_location for f in project.files]
                project.files = [
                    ProjectFile(
                        position=position,
                        name=incoming.name,
                        storage_location=stored.location,
                        size_label=stored.size_label,
                        uploaded_by_id=user_id,
                        uploaded_at=now,
                    )
                    for position, (incoming, stored) in enumerate(zip(files, written))
                ]
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            if written:
                await self.store.delete_many(obj.location for obj in written)
            if isinstance(e, SQLAlchemyError):
                logger.error(f"Check-in of project {project_id} by user {user_id} failed: {e}", exc_info=True)
            elif isinstance(e, ForbiddenError) and await load_project(self.session, project_id) is None:
                raise NotFoundError("Project not found") from e
            raise

        logger.info(
            f"Project {project_id} checked in by user {user_id}"
            + (f" with {len(files)} file(s)" if files is not None else "")
        )
        if old_locations:
            failed = await self.store.delete_many(old_locations)
            if failed:
                logger.warning(f"{len(failed)} stale object(s) left behind for project {project_id}")

        await self.activities.record(
            user_id,
            ActivityAction.CHECKED_IN,
            project_id=project_id,
            message=message,
            file_name=", ".join(f.name for f in files) if files else None,
        )
        return await load_project(self.session, project_id)

    def _validate_files(self, files: Sequence[IncomingFile]) -> None:
        for incoming in files:
            if not incoming.name or not incoming.name.strip():
                raise ValidationError("Every uploaded file needs a name")
            if self.max_file_bytes is not None and incoming.size > self.max_file_bytes:
                raise ValidationError(
                    f"File {incoming.name} is too large (max {self.max_file_bytes} bytes)"
                )

    async def _write_files(self, files: Sequence[IncomingFile]) -> List[StoredObject]:
        written: List[StoredObject] = []
        try:
            for incoming in files:
                written.append(await self.store.put(incoming.name, incoming.data))
        except OSError:
            await self.store.delete_many(obj.location for obj in written)
            raise
        return written

    async def _refuse_checkout(self, project_id: int, user_id: int) -> None:
        """Explain why the conditional checkout update matched no row."""
        project = await load_project(self.session, project_id)
        if project is None:
            raise NotFoundError("Project not found")
        if not is_member(project, user_id):
            raise ForbiddenError("Access denied to this project")
        raise self._conflict(project)

    @staticmethod
    def _conflict(project: Project) -> ConflictError:
        holder = project.lease_holder.username if project.lease_holder is not None else "another user"
        return ConflictError(f"Project is already checked out by {holder}")
