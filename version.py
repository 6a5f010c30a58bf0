"""Version information for Codebase."""

from datetime import datetime, timezone
from typing import Dict, Any

# Version components
VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

# Build version string
__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

# Component versions - all components share the same version in development
COMPONENT_VERSIONS: Dict[str, str] = {
    "api": __version__,
    "project_module": __version__,
    "database": __version__,
}

# Build information
BUILD_INFO: Dict[str, str] = {
    "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    "build_type": "development"  # development, release, etc.
}

def get_version() -> str:
    """Return the current version string."""
    return __version__

def get_version_info() -> Dict[str, Any]:
    """Return detailed version information."""
    return {
        "version": __version__,
        "build": BUILD_INFO,
        "components": COMPONENT_VERSIONS,
        "metadata": {
            "author": "Codebase Team",
            "license": "MIT"
        }
    }
