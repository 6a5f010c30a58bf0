"""Administration API module."""
from fastapi import APIRouter

router = APIRouter(prefix="/api/admin", tags=["admin"])

from . import endpoints

__all__ = ["router"]
