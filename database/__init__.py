"""Database package."""
from database.base import Base
from database.session import get_async_session, engine, AsyncSessionLocal, SQLALCHEMY_DATABASE_URL
from database.init_db import init_db

__all__ = ["Base", "get_async_session", "engine", "AsyncSessionLocal", "SQLALCHEMY_DATABASE_URL", "init_db"]
