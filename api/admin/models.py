"""Administration models for API."""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

class AdminUpdateUser(BaseModel):
    """Fields an administrator may change on any account."""
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    occupation: Optional[str] = Field(None, max_length=100)
    is_admin: Optional[bool] = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v is not None else v

class CreateProjectType(BaseModel):
    type: str = Field(..., max_length=100)
