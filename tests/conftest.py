"""Common test fixtures and utilities."""
import os

# Settings are cached on first use, so the environment is prepared before any
# application module is imported.
os.environ.setdefault("CODEBASE_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CODEBASE_BCRYPT_ROUNDS", "4")
os.environ.setdefault("CODEBASE_JWT_SECRET", "test-secret")
os.environ.setdefault("CODEBASE_ENVIRONMENT", "test")

from pathlib import Path
from typing import AsyncGenerator, Iterable, Optional

import pytest
import pytest_asyncio
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from api.auth.security import get_password_hash
from database.init_db import create_tables, seed_project_types
from models.base import project_collaborators
from models.core import Project, User
from project_module.queries import load_project
from project_module.storage import ObjectStore

TEST_PASSWORD = "secret123"

@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Per-test SQLite database file with the full schema."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        connect_args={"timeout": 30}
    )
    await create_tables(engine)
    try:
        yield engine
    finally:
        await engine.dispose()

@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine):
    factory = sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )
    async with factory() as session:
        await seed_project_types(session)
    return factory

@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session

@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    return tmp_path / "uploads"

@pytest.fixture
def object_store(storage_root: Path) -> ObjectStore:
    return ObjectStore(storage_root)

@pytest.fixture
def stored_names(storage_root: Path):
    """Callable listing the names of every object currently in the store."""
    def _list() -> list:
        directory = storage_root / "projects"
        if not directory.exists():
            return []
        return sorted(p.name for p in directory.iterdir())
    return _list

@pytest_asyncio.fixture
async def make_user(session: AsyncSession):
    """Factory inserting a user straight into the database."""
    async def _make(username: str, is_admin: bool = False) -> User:
        user = User(
            username=username,
            email=f"{username}@mail.com",
            password_hash=get_password_hash(TEST_PASSWORD),
            occupation="Engineer",
            is_admin=is_admin,
        )
        session.add(user)
        await session.commit()
        return user
    return _make

@pytest_asyncio.fixture
async def make_project(session: AsyncSession):
    """Factory inserting a project with optional collaborators."""
    async def _make(
        creator: User,
        collaborators: Iterable[User] = (),
        name: str = "Demo",
        is_public: bool = True,
        tags: Optional[list] = None,
    ) -> Project:
        project = Project(
            name=name,
            description=f"{name} description",
            type="Library",
            creator_id=creator.id,
            tags=tags or [],
            is_public=is_public,
        )
        session.add(project)
        await session.commit()
        project_id = project.id
        for user in collaborators:
            await session.execute(
                insert(project_collaborators).values(project_id=project_id, user_id=user.id)
            )
        await session.commit()
        return await load_project(session, project_id)
    return _make

@pytest_asyncio.fixture
async def team(make_user, make_project):
    """alice owns the project, bob collaborates, carol is an outsider."""
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    project = await make_project(alice, collaborators=[bob])
    return alice, bob, carol, project
