"""
Error taxonomy for project operations.

Every error carries a ``kind`` and a human readable ``message``; the API layer
maps the kind to an HTTP status. None of these are retried: they describe
conditions the caller can correct.

Usage:
    from project_module.exceptions import NotFoundError

    if project is None:
        raise NotFoundError("Project not found")
"""
from typing import Any, Dict


class ProjectError(Exception):
    """Base exception for all project operation errors"""

    kind = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message
        }


class NotFoundError(ProjectError):
    """Project, user or related record does not exist"""

    kind = "not_found"

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ForbiddenError(ProjectError):
    """Caller lacks the membership, ownership or lease required"""

    kind = "forbidden"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class ConflictError(ProjectError):
    """Operation clashes with current state, e.g. lease already held"""

    kind = "conflict"

    def __init__(self, message: str = "Conflict with current state"):
        super().__init__(message)


class ValidationError(ProjectError):
    """Required input missing or malformed"""

    kind = "validation_error"

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)


__all__ = [
    "ProjectError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "ValidationError",
]
