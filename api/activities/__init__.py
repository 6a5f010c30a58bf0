"""Activity feed API module."""
from fastapi import APIRouter

router = APIRouter(prefix="/api/activities", tags=["activities"])

from . import endpoints

__all__ = ["router"]
