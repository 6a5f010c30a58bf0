"""Database session management."""
import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from api.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()
SQLALCHEMY_DATABASE_URL = settings.database_url

def _engine_options(url: str) -> dict:
    """Pool options for the configured backend."""
    if url.startswith("sqlite"):
        return {"connect_args": {"timeout": 30}}
    return {
        "pool_pre_ping": True,  # Enable connection health checks
        "pool_size": 20,
        "max_overflow": 30,
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
    }

engine = create_async_engine(
    SQLALCHEMY_DATABASE_URL,
    echo=settings.database_echo,
    **_engine_options(SQLALCHEMY_DATABASE_URL)
)

# Create session factory with explicit configuration
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Prevent expired object errors
    autoflush=False
)

async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
