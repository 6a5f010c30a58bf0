"""Tests for user profile and friend endpoints."""
import pytest


@pytest.mark.asyncio
async def test_list_and_search_users(async_client, signup):
    alice = await signup("alice")
    await signup("bob", occupation="Designer")

    response = await async_client.get("/api/users", headers=alice["headers"])
    assert [u["username"] for u in response.json()] == ["alice", "bob"]

    response = await async_client.get("/api/users?search=DESIGN", headers=alice["headers"])
    assert [u["username"] for u in response.json()] == ["bob"]


@pytest.mark.asyncio
async def test_get_profile(async_client, crew):
    alice = crew["alice"]
    response = await async_client.get(f"/api/users/{alice['id']}", headers=crew["carol"]["headers"])
    assert response.status_code == 200
    assert [p["name"] for p in response.json()["owned_projects"]] == ["Demo"]

    response = await async_client.get("/api/users/9999", headers=alice["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_profile(async_client, signup):
    alice = await signup("alice")
    await signup("bob")

    response = await async_client.put(
        "/api/users/profile", json={"occupation": "Architect"}, headers=alice["headers"]
    )
    assert response.status_code == 200
    assert response.json()["occupation"] == "Architect"

    response = await async_client.put(
        "/api/users/profile", json={"username": "bob"}, headers=alice["headers"]
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_friend_request_flow(async_client, signup):
    alice = await signup("alice")
    bob = await signup("bob")

    response = await async_client.post(f"/api/users/{alice['id']}/friend-request", headers=alice["headers"])
    assert response.status_code == 400

    response = await async_client.post("/api/users/9999/friend-request", headers=alice["headers"])
    assert response.status_code == 404

    response = await async_client.post(f"/api/users/{bob['id']}/friend-request", headers=alice["headers"])
    assert response.status_code == 200
    response = await async_client.post(f"/api/users/{bob['id']}/friend-request", headers=alice["headers"])
    assert response.status_code == 400

    response = await async_client.get("/api/auth/me", headers=bob["headers"])
    assert [u["username"] for u in response.json()["friend_requests"]] == ["alice"]

    response = await async_client.post(f"/api/users/accept-friend/{alice['id']}", headers=bob["headers"])
    assert response.status_code == 200

    for user, friend in ((alice, "bob"), (bob, "alice")):
        response = await async_client.get("/api/auth/me", headers=user["headers"])
        assert [u["username"] for u in response.json()["friends"]] == [friend]
        assert response.json()["friend_requests"] == []

    response = await async_client.post(f"/api/users/{bob['id']}/friend-request", headers=alice["headers"])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_accept_without_request(async_client, signup):
    alice = await signup("alice")
    bob = await signup("bob")
    response = await async_client.post(f"/api/users/accept-friend/{alice['id']}", headers=bob["headers"])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unfriend(async_client, signup):
    alice = await signup("alice")
    bob = await signup("bob")
    await async_client.post(f"/api/users/{bob['id']}/friend-request", headers=alice["headers"])
    await async_client.post(f"/api/users/accept-friend/{alice['id']}", headers=bob["headers"])

    response = await async_client.delete(f"/api/users/unfriend/{bob['id']}", headers=alice["headers"])
    assert response.status_code == 200

    response = await async_client.get("/api/auth/me", headers=bob["headers"])
    assert response.json()["friends"] == []

    response = await async_client.delete(f"/api/users/unfriend/{bob['id']}", headers=alice["headers"])
    assert response.status_code == 400
    response = await async_client.delete("/api/users/unfriend/9999", headers=alice["headers"])
    assert response.status_code == 404
