"""Authentication API package."""
from fastapi import APIRouter

router = APIRouter(prefix="/api/auth", tags=["auth"])

from . import endpoints  # noqa: E402,F401

__all__ = ["router"]
