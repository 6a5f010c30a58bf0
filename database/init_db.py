"""Schema creation and seed data."""
import logging
from pathlib import Path
from typing import Iterable

from sqlalchemy import select, func
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from database.base import Base

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_TYPES = [
    "Web Application",
    "Mobile Application",
    "Desktop Application",
    "Library",
    "Framework",
    "API",
    "CLI Tool",
    "Other",
]

def _ensure_sqlite_dir(engine: AsyncEngine) -> None:
    url = make_url(str(engine.url))
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables registered on the metadata."""
    # Register models on Base.metadata
    import models  # noqa: F401

    _ensure_sqlite_dir(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")

async def seed_project_types(
    session: AsyncSession,
    names: Iterable[str] = DEFAULT_PROJECT_TYPES
) -> None:
    """Insert the default project types when the table is empty."""
    from models.core import ProjectType

    count = await session.scalar(select(func.count()).select_from(ProjectType))
    if count:
        return
    for position, name in enumerate(names):
        session.add(ProjectType(name=name, position=position))
    await session.commit()
    logger.info("Seeded default project types")

async def init_db(engine: AsyncEngine, session_factory) -> None:
    """Create tables and seed reference data."""
    await create_tables(engine)
    async with session_factory() as session:
        await seed_project_types(session)
