"""Project discussion API module."""
from fastapi import APIRouter

router = APIRouter(prefix="/api/discussions", tags=["discussions"])

from . import endpoints

__all__ = ["router"]
