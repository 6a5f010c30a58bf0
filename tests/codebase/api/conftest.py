"""Test fixtures for API tests."""
import logging
from typing import Any, AsyncGenerator, Dict

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update

from api import create_app
from api.deps import get_object_store
from database.session import get_async_session
from models.core import User

logger = logging.getLogger("api_tests")

@pytest.fixture
def app(session_factory, object_store) -> FastAPI:
    """Application wired to the per-test database and storage root."""
    app = create_app({"debug": True, "cors_origins": ["http://test"]})

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[get_object_store] = lambda: object_store
    return app

@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

@pytest.fixture
def signup(async_client: AsyncClient):
    """Register a user through the API; returns id, token and auth headers."""
    async def _signup(username: str, **extra: Any) -> Dict[str, Any]:
        payload = {
            "username": username,
            "email": f"{username}@mail.com",
            "password": "secret123",
            "date_of_birth": "1990-01-01",
            "occupation": "Engineer",
            **extra,
        }
        response = await async_client.post("/api/auth/signup", json=payload)
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "id": body["user"]["id"],
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
        }
    return _signup

@pytest.fixture
def promote(session_factory):
    """Grant admin rights directly in the database."""
    async def _promote(user_id: int) -> None:
        async with session_factory() as session:
            await session.execute(update(User).where(User.id == user_id).values(is_admin=True))
            await session.commit()
    return _promote

@pytest.fixture
def create_project(async_client: AsyncClient):
    async def _create(headers: Dict[str, str], **fields: Any) -> Dict[str, Any]:
        payload = {
            "name": "Demo",
            "description": "A demo project",
            "type": "Library",
            "tags": ["python"],
            **fields,
        }
        response = await async_client.post("/api/projects", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create

@pytest_asyncio.fixture
async def crew(signup, create_project, async_client) -> Dict[str, Any]:
    """alice owns a project with bob as collaborator; carol is an outsider."""
    alice = await signup("alice")
    bob = await signup("bob")
    carol = await signup("carol")
    project = await create_project(alice["headers"])
    response = await async_client.post(
        f"/api/projects/{project['id']}/collaborators",
        json={"user_id": bob["id"]},
        headers=alice["headers"],
    )
    assert response.status_code == 200, response.text
    return {"alice": alice, "bob": bob, "carol": carol, "project": response.json()}
