"""Append-only activity log written as a side effect of user actions."""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.core import Activity, ActivityAction

logger = logging.getLogger(__name__)

MESSAGE_MAX = 500
DETAILS_MAX = 200


def _clip(value: Optional[str], limit: int) -> Optional[str]:
    if value is None:
        return None
    return value[:limit]


def build_activity(
    user_id: int,
    action: ActivityAction,
    project_id: Optional[int] = None,
    file_name: Optional[str] = None,
    message: Optional[str] = None,
    details: Optional[str] = None,
) -> Activity:
    """Create (but do not persist) an activity row."""
    return Activity(
        user_id=user_id,
        action=ActivityAction(action),
        project_id=project_id,
        file_name=file_name or None,
        message=_clip(message, MESSAGE_MAX),
        details=_clip(details, DETAILS_MAX),
    )


class ActivityLog:
    """Records activities in their own commit.

    A failure to record is logged and swallowed: the action the activity
    describes has already been committed.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def record(self, user_id: int, action: ActivityAction, **fields) -> Optional[Activity]:
        activity = build_activity(user_id, action, **fields)
        try:
            self.session.add(activity)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"Failed to record {action} activity for user {user_id}: {e}")
            return None
        return activity
