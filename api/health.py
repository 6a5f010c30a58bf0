"""Health check and version information endpoints."""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from api.config import get_settings
from version import __version__, get_version_info

router = APIRouter(prefix="/api", tags=["system"])

@router.get("/health")
async def health_check() -> Dict[str, str]:
    """Get system health status and version information."""
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": get_settings().environment
    }

@router.get("/version")
async def version_info() -> Dict[str, Any]:
    """Get detailed version information."""
    return {
        **get_version_info(),
        "name": "Codebase",
        "api_compatibility": f"^{__version__.split('.')[0]}.0.0"
    }
