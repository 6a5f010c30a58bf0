"""Tests for the activity log."""
import logging

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from models.core import Activity, ActivityAction
from project_module.activity_log import ActivityLog, build_activity


def test_build_activity_clips_text():
    activity = build_activity(1, "edited", message="m" * 600, details="d" * 300, file_name="")
    assert activity.action is ActivityAction.EDITED
    assert len(activity.message) == 500
    assert len(activity.details) == 200
    assert activity.file_name is None


@pytest.mark.asyncio
async def test_record_persists(session, team):
    alice, bob, carol, project = team

    activity = await ActivityLog(session).record(
        alice.id, ActivityAction.UPLOADED, project_id=project.id, file_name="a.txt"
    )

    assert activity is not None
    result = await session.execute(select(Activity))
    stored = result.scalar_one()
    assert stored.action is ActivityAction.UPLOADED
    assert stored.file_name == "a.txt"


@pytest.mark.asyncio
async def test_record_failure_is_logged_not_raised(session, team, monkeypatch, caplog):
    alice, bob, carol, project = team
    user_id = alice.id

    async def broken_commit():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "commit", broken_commit)
    with caplog.at_level(logging.WARNING, logger="project_module.activity_log"):
        assert await ActivityLog(session).record(user_id, ActivityAction.EDITED) is None
    monkeypatch.undo()

    assert "Failed to record" in caplog.text
    result = await session.execute(select(Activity))
    assert result.scalars().all() == []
