"""Discussion models for API."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from api.users.models import UserSummary

class CreateDiscussion(BaseModel):
    """Model for posting a comment on a project."""
    project_id: int
    message: str = Field(..., min_length=1, max_length=1000)
    parent_comment_id: Optional[int] = None

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message cannot be empty")
        return v

class UpdateDiscussion(BaseModel):
    """Model for editing a comment."""
    message: str = Field(..., min_length=1, max_length=1000)

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message cannot be empty")
        return v

class DiscussionResponse(BaseModel):
    """Response model for a comment."""
    id: int
    project_id: int
    user: UserSummary
    message: str
    parent_comment_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
