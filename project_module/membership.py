"""Ownership and membership checks for projects.

The owner is the project's creator; members are the owner plus collaborators.
Ownership-only operations (delete, transfer, collaborator changes) use
``require_owner``; checkout and check-in use ``require_member``.
"""
from typing import Optional

from models.core import Project, User
from project_module.exceptions import ForbiddenError


def _user_id(user) -> Optional[int]:
    if user is None:
        return None
    return user if isinstance(user, int) else user.id


def is_owner(project: Project, user) -> bool:
    """Return True when ``user`` (a User or user id) created the project."""
    user_id = _user_id(user)
    return user_id is not None and project.creator_id == user_id


def is_member(project: Project, user) -> bool:
    """Return True for the owner or any collaborator."""
    user_id = _user_id(user)
    if user_id is None:
        return False
    return is_owner(project, user_id) or any(c.id == user_id for c in project.collaborators)


def can_view(project: Project, user) -> bool:
    """Public projects are visible to everyone, private ones to members only."""
    return bool(project.is_public) or is_member(project, user)


def require_owner(project: Project, user: User, message: str = "Only the project owner can do this") -> None:
    if not is_owner(project, user):
        raise ForbiddenError(message)


def require_member(project: Project, user: User, message: str = "Access denied to this project") -> None:
    if not is_member(project, user):
        raise ForbiddenError(message)


def require_view(project: Project, user: User) -> None:
    if not can_view(project, user):
        raise ForbiddenError("Access denied to this project")
