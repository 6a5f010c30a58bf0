"""Models package."""
from database.base import Base
from models.base import project_collaborators, user_friends, friend_requests
from models.core import (
    ActivityAction, User, ProjectType, Project, ProjectFile, Activity, Discussion
)

__all__ = [
    "Base", "project_collaborators", "user_friends", "friend_requests",
    "ActivityAction", "User", "ProjectType", "Project", "ProjectFile", "Activity", "Discussion"
]
