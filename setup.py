"""Setup file for Codebase."""
from setuptools import setup, find_packages

import re
from pathlib import Path

def get_version() -> str:
    """Get version from version.py."""
    version_file = Path(__file__).parent / "version.py"
    if not version_file.exists():
        return "0.1.0"

    content = version_file.read_text()
    version_match = re.search(r"VERSION_MAJOR = (\d+)\s+VERSION_MINOR = (\d+)\s+VERSION_PATCH = (\d+)", content)
    if version_match:
        return ".".join(version_match.groups())
    return "0.1.0"

version = get_version()

setup(
    name="codebase",
    version=version,  # Version is read from version.py
    packages=find_packages(include=[
        "api",
        "api.*",
        "database",
        "database.*",
        "models",
        "models.*",
        "project_module",
        "project_module.*",
    ]),
    py_modules=["main", "version"],
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.100.0,<1.0.0",
        "uvicorn>=0.22.0,<1.0.0",
        "sqlalchemy[asyncio]>=2.0.0,<3.0.0",
        "aiosqlite>=0.19.0",
        "alembic>=1.11.1,<2.0.0",
        "asyncpg>=0.28.0,<1.0.0",
        "pydantic>=2.0.0,<3.0.0",
        "pydantic-settings>=2.0.0",
        "email-validator>=2.0.0",
        "python-multipart>=0.0.5",
        "python-jose[cryptography]>=3.3.0",
        "bcrypt>=4.0.0",
        "aiofiles>=23.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.24.0",
        ],
    },
)
