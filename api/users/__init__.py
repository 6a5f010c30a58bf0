"""Users API package."""
from fastapi import APIRouter

router = APIRouter(prefix="/api/users", tags=["users"])

from . import endpoints  # noqa: E402,F401

__all__ = ["router"]
