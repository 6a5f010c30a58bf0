"""User models for API."""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

class UserSummary(BaseModel):
    """Compact user reference embedded in other responses."""
    id: int
    username: str
    email: str

    class Config:
        from_attributes = True

class UserResponse(UserSummary):
    """Response model for user data."""
    occupation: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None

class ProjectRef(BaseModel):
    """Project reference listed on a profile."""
    id: int
    name: str
    description: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserProfile(UserResponse):
    """Public profile with friends and projects."""
    friends: List[UserSummary] = []
    owned_projects: List[ProjectRef] = []
    shared_projects: List[ProjectRef] = []

class CurrentUser(UserProfile):
    """The authenticated user, including pending friend requests."""
    friend_requests: List[UserSummary] = []

class UpdateProfile(BaseModel):
    """Model for updating the current user's profile."""
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    occupation: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v is not None else v
