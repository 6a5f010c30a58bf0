"""Base SQLAlchemy models and common tables."""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, Table, DateTime, UniqueConstraint
from database.base import Base

def utcnow() -> datetime:
    """Timezone-aware current time used for all timestamps."""
    return datetime.now(timezone.utc)

# Association table for project collaborators; id keeps insertion order for display
project_collaborators = Table(
    'project_collaborators',
    Base.metadata,
    Column('id', Integer, primary_key=True),
    Column('project_id', Integer, ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
    Column('user_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
    Column('added_at', DateTime(timezone=True), default=utcnow),
    UniqueConstraint('project_id', 'user_id', name='uq_project_collaborator')
)

# Friendship is symmetric: both (a, b) and (b, a) are stored
user_friends = Table(
    'user_friends',
    Base.metadata,
    Column('user_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    Column('friend_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True)
)

# Pending friend requests, requester -> recipient
friend_requests = Table(
    'friend_requests',
    Base.metadata,
    Column('requester_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    Column('recipient_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    Column('created_at', DateTime(timezone=True), default=utcnow)
)

__all__ = ["Base", "utcnow", "project_collaborators", "user_friends", "friend_requests"]
