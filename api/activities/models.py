"""Activity models for API."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from api.users.models import UserSummary
from models.core import ActivityAction

class ProjectBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class CreateActivity(BaseModel):
    """Model for recording an activity."""
    action: ActivityAction
    project_id: Optional[int] = None
    file_name: Optional[str] = None
    message: Optional[str] = Field(None, max_length=500)
    details: Optional[str] = Field(None, max_length=200)

class ActivityResponse(BaseModel):
    """Response model for a feed entry."""
    id: int
    action: ActivityAction
    user: UserSummary
    project: Optional[ProjectBrief] = None
    file_name: Optional[str] = None
    message: Optional[str] = None
    details: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
