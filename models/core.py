"""Core models for the application."""
import enum

from sqlalchemy import (
    Column, Integer, String, DateTime, Date, ForeignKey, JSON, Boolean, Text, Enum, Index
)
from sqlalchemy.orm import relationship

from database.base import Base
from models.base import utcnow, project_collaborators, user_friends, friend_requests

class ActivityAction(str, enum.Enum):
    """Kinds of user actions recorded in the activity feed."""
    UPLOADED = "uploaded"
    DOWNLOADED = "downloaded"
    EDITED = "edited"
    DELETED = "deleted"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CREATED_PROJECT = "created_project"
    JOINED_PROJECT = "joined_project"
    LEFT_PROJECT = "left_project"
    TRANSFERRED_OWNERSHIP = "transferred_ownership"

class User(Base):
    """User model."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    date_of_birth = Column(Date, nullable=True)
    occupation = Column(String(100), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    owned_projects = relationship(
        "Project",
        back_populates="creator",
        foreign_keys="Project.creator_id",
        order_by="Project.created_at"
    )
    shared_projects = relationship(
        "Project",
        secondary=project_collaborators,
        order_by="Project.created_at",
        viewonly=True
    )
    friends = relationship(
        "User",
        secondary=user_friends,
        primaryjoin=id == user_friends.c.user_id,
        secondaryjoin=id == user_friends.c.friend_id
    )
    # Users who sent this user a friend request
    friend_requests = relationship(
        "User",
        secondary=friend_requests,
        primaryjoin=id == friend_requests.c.recipient_id,
        secondaryjoin=id == friend_requests.c.requester_id
    )

    def __repr__(self) -> str:
        return f"<User {self.username}>"

class ProjectType(Base):
    """Admin-extendable list of project types, ordered by position."""
    __tablename__ = "project_types"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    position = Column(Integer, nullable=False, default=0)

class Project(Base):
    """Project model.

    ``lease_holder_id`` is the exclusive-edit lease: when set, only that member
    may check in and replace ``files``.
    """
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=False)
    type = Column(String(100), nullable=False)
    version = Column(String(50), nullable=False, default="1.0.0")
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    tags = Column(JSON, default=list)
    is_public = Column(Boolean, default=True, nullable=False)
    lease_holder_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    lease_acquired_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    creator = relationship("User", back_populates="owned_projects", foreign_keys=[creator_id])
    lease_holder = relationship("User", foreign_keys=[lease_holder_id])
    collaborators = relationship(
        "User",
        secondary=project_collaborators,
        order_by=project_collaborators.c.id
    )
    files = relationship(
        "ProjectFile",
        back_populates="project",
        order_by="ProjectFile.position",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Project {self.id} {self.name!r}>"

class ProjectFile(Base):
    """One entry of a project's ordered file set."""
    __tablename__ = "project_files"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String(255), nullable=False)
    storage_location = Column(String(1024), nullable=False)
    size_label = Column(String(32), nullable=False)
    uploaded_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), default=utcnow)

    project = relationship("Project", back_populates="files")
    uploaded_by = relationship("User")

class Activity(Base):
    """Append-only record of a user action."""
    __tablename__ = "activities"
    __table_args__ = (
        Index("ix_activities_user_created", "user_id", "created_at"),
        Index("ix_activities_project_created", "project_id", "created_at"),
        Index("ix_activities_action_created", "action", "created_at"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    action = Column(
        Enum(ActivityAction, name="activity_action", values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True)
    file_name = Column(Text, nullable=True)
    message = Column(String(500), nullable=True)
    details = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User")
    project = relationship("Project")

class Discussion(Base):
    """Comment on a project, optionally replying to another comment."""
    __tablename__ = "discussions"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(String(1000), nullable=False)
    parent_comment_id = Column(Integer, ForeignKey("discussions.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User")
