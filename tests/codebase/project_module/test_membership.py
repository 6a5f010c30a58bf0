"""Tests for ownership and membership predicates."""
import pytest

from models.core import Project, User
from project_module.exceptions import ForbiddenError
from project_module.membership import (
    can_view,
    is_member,
    is_owner,
    require_member,
    require_owner,
    require_view,
)


@pytest.fixture
def people():
    return User(id=1, username="alice"), User(id=2, username="bob"), User(id=3, username="carol")


@pytest.fixture
def private_project(people):
    alice, bob, carol = people
    project = Project(id=10, name="Secret", creator_id=alice.id, is_public=False)
    project.collaborators = [bob]
    return project


def test_owner_is_member(people, private_project):
    alice, bob, carol = people
    assert is_owner(private_project, alice)
    assert is_member(private_project, alice)


def test_collaborator_is_member_not_owner(people, private_project):
    alice, bob, carol = people
    assert not is_owner(private_project, bob)
    assert is_member(private_project, bob)


def test_outsider(people, private_project):
    alice, bob, carol = people
    assert not is_member(private_project, carol)
    assert not can_view(private_project, carol)


def test_predicates_accept_ids(people, private_project):
    assert is_owner(private_project, 1)
    assert is_member(private_project, 2)
    assert not is_member(private_project, 3)
    assert not is_member(private_project, None)


def test_public_projects_visible_to_everyone(people, private_project):
    alice, bob, carol = people
    private_project.is_public = True
    assert can_view(private_project, carol)
    assert not is_member(private_project, carol)


def test_require_helpers(people, private_project):
    alice, bob, carol = people
    require_owner(private_project, alice)
    require_member(private_project, bob)
    require_view(private_project, bob)

    with pytest.raises(ForbiddenError):
        require_owner(private_project, bob)
    with pytest.raises(ForbiddenError) as exc_info:
        require_member(private_project, carol, "Members only")
    assert exc_info.value.message == "Members only"
    assert exc_info.value.to_dict() == {"kind": "forbidden", "message": "Members only"}
    with pytest.raises(ForbiddenError):
        require_view(private_project, carol)
