"""
Issue model for MongoDB with Pydantic validation.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, validator

from .common import PyObjectId
from .manuscript import ManuscriptInDB


class IssueStatus(str, Enum):
    """Issue lifecycle; ARCHIVED is terminal."""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


# Issues in these states no longer accept edits or membership changes
LOCKED_ISSUE_STATUSES = (IssueStatus.PUBLISHED, IssueStatus.ARCHIVED)


class IssueBase(BaseModel):
    """Base issue model with common fields."""
    volume: int = Field(..., ge=1, description="Volume number")
    issue_number: int = Field(..., ge=1, description="Issue number within the volume")
    title: str = Field(..., min_length=1, max_length=300, description="Issue title")
    description: Optional[str] = Field(None, description="Issue description")
    publication_date: Optional[datetime] = Field(None, description="Publication date")
    keywords: List[str] = Field(default_factory=list, description="Keywords")

    @validator('title')
    def strip_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Title cannot be blank')
        return v

    class Config:
        populate_by_name = True
        use_enum_values = True


class IssueCreate(IssueBase):
    """Issue creation model."""


class IssueUpdate(BaseModel):
    """Issue update model; only provided fields change."""
    volume: Optional[int] = Field(None, ge=1, description="Volume number")
    issue_number: Optional[int] = Field(None, ge=1, description="Issue number within the volume")
    title: Optional[str] = Field(None, min_length=1, max_length=300, description="Issue title")
    description: Optional[str] = Field(None, description="Issue description")
    publication_date: Optional[datetime] = Field(None, description="Publication date")
    keywords: Optional[List[str]] = Field(None, description="Keywords")


class IssueManuscriptChange(BaseModel):
    """Manuscript membership change request."""
    manuscript_id: str = Field(..., description="Manuscript to add or remove")


class IssueInDB(IssueBase):
    """Issue model as stored in database."""
    id: PyObjectId = Field(default_factory=PyObjectId, alias="_id")
    slug: str = Field(..., description="URL slug derived from the title")
    manuscripts: List[PyObjectId] = Field(default_factory=list, description="Ordered manuscript ids")
    total_pages: int = Field(default=0, ge=0, description="Sum of member manuscripts' page counts")
    status: IssueStatus = Field(default=IssueStatus.DRAFT, description="Lifecycle status")
    is_active: bool = Field(default=True, description="False once archived")
    created_by: Optional[PyObjectId] = Field(None, description="Creating user")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
        use_enum_values = True


class IssueWithManuscripts(IssueInDB):
    """Issue with its manuscripts resolved, in issue order."""
    manuscripts: List[ManuscriptInDB] = Field(default_factory=list, description="Member manuscripts")
