"""Project domain core: membership, the exclusive-edit lease and lifecycle operations."""

from project_module.exceptions import (
    ProjectError,
    NotFoundError,
    ForbiddenError,
    ConflictError,
    ValidationError,
)
from project_module.membership import is_owner, is_member, can_view
from project_module.storage import ObjectStore, StoredObject, format_size
from project_module.lease_manager import LeaseManager, IncomingFile
from project_module.activity_log import ActivityLog

__all__ = [
    'ProjectError',
    'NotFoundError',
    'ForbiddenError',
    'ConflictError',
    'ValidationError',
    'is_owner',
    'is_member',
    'can_view',
    'ObjectStore',
    'StoredObject',
    'format_size',
    'LeaseManager',
    'IncomingFile',
    'ActivityLog',
]
