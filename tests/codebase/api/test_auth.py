"""Tests for authentication endpoints."""
from datetime import timedelta

import pytest

from api.auth.security import create_access_token


@pytest.mark.asyncio
async def test_signup_returns_token_and_user(async_client):
    response = await async_client.post("/api/auth/signup", json={
        "username": "  alice ",
        "email": "Alice@Mail.com",
        "password": "secret123",
        "date_of_birth": "1990-01-01",
        "occupation": "Engineer",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["token"]
    assert data["token_type"] == "bearer"
    assert data["user"]["username"] == "alice"
    assert data["user"]["email"] == "alice@mail.com"
    assert data["user"]["is_admin"] is False
    assert "password_hash" not in data["user"]


@pytest.mark.asyncio
async def test_signup_duplicate_rejected(async_client, signup):
    await signup("alice")
    response = await async_client.post("/api/auth/signup", json={
        "username": "alice",
        "email": "other@mail.com",
        "password": "secret123",
        "date_of_birth": "1990-01-01",
        "occupation": "Engineer",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "User with this email or username already exists"


@pytest.mark.asyncio
async def test_signup_validation(async_client):
    response = await async_client.post("/api/auth/signup", json={
        "username": "al",
        "email": "not-an-email",
        "password": "123",
        "date_of_birth": "1990-01-01",
        "occupation": "Engineer",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_signin(async_client, signup):
    await signup("alice")

    response = await async_client.post("/api/auth/signin", json={"email": "ALICE@mail.com", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["user"]["username"] == "alice"

    response = await async_client.post("/api/auth/signin", json={"email": "alice@mail.com", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_me_requires_token(async_client):
    response = await async_client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

    response = await async_client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


@pytest.mark.asyncio
async def test_expired_token_rejected(async_client, signup):
    alice = await signup("alice")
    token = create_access_token(alice["id"], expires_delta=timedelta(minutes=-1))

    response = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"


@pytest.mark.asyncio
async def test_token_for_missing_user(async_client):
    token = create_access_token(4242)
    response = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token valid but user not found"


@pytest.mark.asyncio
async def test_me_includes_projects(async_client, crew):
    response = await async_client.get("/api/auth/me", headers=crew["bob"]["headers"])

    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "bob"
    assert data["owned_projects"] == []
    assert [p["name"] for p in data["shared_projects"]] == ["Demo"]
    assert data["friend_requests"] == []
