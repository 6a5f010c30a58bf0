"""Tests for owner-only project operations."""
import pytest
from sqlalchemy import func, select

from models.base import friend_requests, project_collaborators, user_friends
from models.core import Activity, ActivityAction, Discussion, Project, User
from project_module import lifecycle
from project_module.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from project_module.lease_manager import IncomingFile, LeaseManager
from project_module.membership import is_member, is_owner
from project_module.queries import load_project


async def _count(session, stmt) -> int:
    return await session.scalar(select(func.count()).select_from(stmt.subquery()))


@pytest.mark.asyncio
async def test_add_collaborator(session, team):
    alice, bob, carol, project = team

    updated = await lifecycle.add_collaborator(session, project, alice, carol.id)

    assert [c.username for c in updated.collaborators] == ["bob", "carol"]
    assert is_member(updated, carol)
    result = await session.execute(select(Activity).where(Activity.action == ActivityAction.JOINED_PROJECT))
    assert result.scalar_one().user_id == carol.id


@pytest.mark.asyncio
async def test_add_collaborator_rejects_members(session, team):
    alice, bob, carol, project = team
    with pytest.raises(ConflictError):
        await lifecycle.add_collaborator(session, project, alice, bob.id)
    with pytest.raises(ConflictError):
        await lifecycle.add_collaborator(session, project, alice, alice.id)


@pytest.mark.asyncio
async def test_add_collaborator_unknown_user(session, team):
    alice, bob, carol, project = team
    with pytest.raises(NotFoundError):
        await lifecycle.add_collaborator(session, project, alice, 9999)


@pytest.mark.asyncio
async def test_add_collaborator_owner_only(session, team):
    alice, bob, carol, project = team
    with pytest.raises(ForbiddenError):
        await lifecycle.add_collaborator(session, project, bob, carol.id)


@pytest.mark.asyncio
async def test_remove_collaborator(session, team):
    alice, bob, carol, project = team

    updated = await lifecycle.remove_collaborator(session, project, alice, bob.id)

    assert updated.collaborators == []
    assert not is_member(updated, bob)


@pytest.mark.asyncio
async def test_remove_collaborator_not_listed(session, team):
    alice, bob, carol, project = team
    with pytest.raises(NotFoundError):
        await lifecycle.remove_collaborator(session, project, alice, carol.id)


@pytest.mark.asyncio
async def test_remove_lease_holder_conflicts(session, object_store, team):
    """The lease holder must stay a member while the lease is held."""
    alice, bob, carol, project = team
    checked_out = await LeaseManager(session, object_store).checkout(project.id, bob)

    with pytest.raises(ConflictError):
        await lifecycle.remove_collaborator(session, checked_out, alice, bob.id)

    reloaded = await load_project(session, project.id)
    assert is_member(reloaded, bob)


@pytest.mark.asyncio
async def test_transfer_ownership(session, team):
    alice, bob, carol, project = team

    updated = await lifecycle.transfer_ownership(session, project, alice, bob.id)

    assert updated.creator_id == bob.id
    assert is_owner(updated, bob)
    assert [c.username for c in updated.collaborators] == ["alice"]
    result = await session.execute(
        select(Activity).where(Activity.action == ActivityAction.TRANSFERRED_OWNERSHIP)
    )
    assert result.scalar_one().user_id == alice.id


@pytest.mark.asyncio
async def test_transfer_requires_collaborator(session, team):
    alice, bob, carol, project = team
    with pytest.raises(ValidationError):
        await lifecycle.transfer_ownership(session, project, alice, carol.id)


@pytest.mark.asyncio
async def test_transfer_owner_only(session, team):
    alice, bob, carol, project = team
    with pytest.raises(ForbiddenError):
        await lifecycle.transfer_ownership(session, project, bob, bob.id)


@pytest.mark.asyncio
async def test_transfer_keeps_lease_holder_a_member(session, object_store, team):
    alice, bob, carol, project = team
    leases = LeaseManager(session, object_store)
    checked_out = await leases.checkout(project.id, alice)

    updated = await lifecycle.transfer_ownership(session, checked_out, alice, bob.id)

    assert updated.lease_holder_id == alice.id
    assert is_member(updated, alice)
    released = await leases.checkin(project.id, alice, "handing over")
    assert released.lease_holder_id is None


@pytest.mark.asyncio
async def test_delete_project_cascades(session, object_store, stored_names, team):
    alice, bob, carol, project = team
    project_id = project.id
    leases = LeaseManager(session, object_store)
    await leases.checkout(project_id, bob)
    checked_in = await leases.checkin(project_id, bob, "files", new_files=[IncomingFile("a.txt", b"a")])
    session.add(Discussion(project_id=project_id, user_id=carol.id, message="nice"))
    await session.commit()

    await lifecycle.delete_project(session, checked_in, object_store)

    assert await session.get(Project, project_id) is None
    assert await _count(session, select(Activity).where(Activity.project_id == project_id)) == 0
    assert await _count(session, select(Discussion).where(Discussion.project_id == project_id)) == 0
    assert await _count(
        session,
        select(project_collaborators).where(project_collaborators.c.project_id == project_id)
    ) == 0
    assert stored_names() == []


@pytest.mark.asyncio
async def test_delete_user_cleans_up(session, object_store, make_user, make_project, team):
    """Removing a user releases their leases and drops their links and records."""
    alice, bob, carol, project = team
    admin = await make_user("root", is_admin=True)
    own = await make_project(bob, name="Bob's")
    project_id, own_id, bob_id = project.id, own.id, bob.id

    await LeaseManager(session, object_store).checkout(project_id, bob)
    session.add(Discussion(project_id=project_id, user_id=bob_id, message="hello"))
    await session.execute(user_friends.insert().values(user_id=alice.id, friend_id=bob_id))
    await session.execute(user_friends.insert().values(user_id=bob_id, friend_id=alice.id))
    await session.execute(friend_requests.insert().values(requester_id=bob_id, recipient_id=carol.id))
    await session.commit()

    await lifecycle.delete_user(session, await session.get(User, bob_id), object_store)

    assert await session.get(User, bob_id) is None
    assert await session.get(Project, own_id) is None
    remaining = await load_project(session, project_id)
    assert remaining.lease_holder_id is None
    assert remaining.collaborators == []
    assert await _count(session, select(Activity).where(Activity.user_id == bob_id)) == 0
    assert await _count(session, select(Discussion).where(Discussion.user_id == bob_id)) == 0
    assert await _count(
        session,
        select(user_friends).where((user_friends.c.user_id == bob_id) | (user_friends.c.friend_id == bob_id))
    ) == 0
    assert await _count(session, select(friend_requests)) == 0
    assert await session.get(User, admin.id) is not None


@pytest.mark.asyncio
async def test_delete_user_removes_reply_threads(session, object_store, team):
    alice, bob, carol, project = team
    top = Discussion(project_id=project.id, user_id=bob.id, message="question")
    session.add(top)
    await session.commit()
    reply = Discussion(project_id=project.id, user_id=alice.id, message="answer", parent_comment_id=top.id)
    session.add(reply)
    await session.commit()
    session.add(Discussion(project_id=project.id, user_id=carol.id, message="follow-up", parent_comment_id=reply.id))
    session.add(Discussion(project_id=project.id, user_id=carol.id, message="unrelated"))
    await session.commit()

    await lifecycle.delete_user(session, bob, object_store)

    result = await session.execute(select(Discussion.message))
    assert result.scalars().all() == ["unrelated"]
