"""Authentication request and response models."""
from datetime import date

from pydantic import BaseModel, EmailStr, Field, field_validator

from api.users.models import UserResponse

class SignupRequest(BaseModel):
    """Model for registering a new user."""
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    date_of_birth: date
    occupation: str = Field(..., min_length=1, max_length=100)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

class SigninRequest(BaseModel):
    """Model for signing in."""
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

class TokenResponse(BaseModel):
    """Issued access token with the signed-in user."""
    token: str
    token_type: str = "bearer"
    user: UserResponse
