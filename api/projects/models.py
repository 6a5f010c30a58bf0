"""Project management API models."""
from typing import List, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from api.users.models import UserSummary

def normalize_tags(value: Union[str, List[str], None]) -> List[str]:
    """Accept a list or a comma-separated string; trim, lower-case, drop blanks and repeats."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value
    tags: List[str] = []
    for item in items:
        tag = str(item).strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags

class CreateProject(BaseModel):
    """Model for creating a new project."""
    name: str = Field(..., min_length=1, max_length=100, description="Project name")
    description: str = Field(..., min_length=1, max_length=500, description="Project description")
    type: str = Field(..., min_length=1, description="Project type, one of the configured types")
    tags: Union[List[str], str] = Field(default_factory=list, description="Tags as a list or comma-separated string")
    is_public: bool = Field(True, description="Whether the project appears in the global feed")
    version: str = Field("1.0.0", max_length=50, description="Free-form version label")

    @field_validator("name", "type")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("tags", mode="after")
    @classmethod
    def clean_tags(cls, v):
        return normalize_tags(v)

class UpdateProject(BaseModel):
    """Model for updating project metadata. Files and the lease are not editable here."""
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="Project name")
    description: Optional[str] = Field(None, min_length=1, max_length=500, description="Project description")
    type: Optional[str] = Field(None, min_length=1, description="Project type")
    tags: Optional[Union[List[str], str]] = Field(None, description="Tags as a list or comma-separated string")
    is_public: Optional[bool] = Field(None, description="Whether the project is public")

    @field_validator("tags", mode="after")
    @classmethod
    def clean_tags(cls, v):
        return normalize_tags(v) if v is not None else v

class ProjectFileResponse(BaseModel):
    """One file of a project's file set."""
    id: int
    name: str
    storage_location: str
    size_label: str
    uploaded_by: Optional[UserSummary] = None
    uploaded_at: Optional[datetime] = None

    class Config:
        """Pydantic config."""
        from_attributes = True

class ProjectResponse(BaseModel):
    """API response model for projects."""
    id: int
    name: str
    description: str
    type: str
    version: str
    creator: UserSummary
    collaborators: List[UserSummary]
    tags: List[str]
    is_public: bool
    files: List[ProjectFileResponse]
    lease_holder: Optional[UserSummary] = None
    lease_acquired_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        """Pydantic config."""
        from_attributes = True

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v):
        return v or []

class ProjectCollaborator(BaseModel):
    """Model for naming a user in collaborator and ownership operations."""
    user_id: int = Field(..., description="ID of the user")

__all__ = [
    'normalize_tags',
    'CreateProject',
    'UpdateProject',
    'ProjectFileResponse',
    'ProjectResponse',
    'ProjectCollaborator'
]
