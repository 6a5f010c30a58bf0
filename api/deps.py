"""Shared FastAPI dependencies."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.config import get_settings
from api.auth.security import get_current_user
from database.session import get_async_session
from models.core import User
from project_module.lease_manager import LeaseManager
from project_module.storage import ObjectStore


def get_object_store() -> ObjectStore:
    """Object store rooted at the configured upload directory."""
    return ObjectStore(get_settings().storage_dir)


def get_lease_manager(
    db: AsyncSession = Depends(get_async_session),
    store: ObjectStore = Depends(get_object_store),
) -> LeaseManager:
    """Lease manager bound to the request's session."""
    return LeaseManager(db, store, max_file_bytes=get_settings().max_upload_bytes)


__all__ = ["get_async_session", "get_current_user", "get_object_store", "get_lease_manager", "User"]
