"""
Editorial board member model.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, EmailStr, validator

from .common import PyObjectId


class EditorialBoardBase(BaseModel):
    type: str = Field(..., min_length=1, description="Board section, e.g. Editor-in-Chief")
    post: str = Field(..., min_length=1, description="Position held")
    name: str = Field(..., min_length=1, description="Member name")
    address: Optional[str] = Field(None, description="Postal or institutional address")
    email: EmailStr = Field(..., description="Contact email, unique per member")
    website: Optional[str] = Field(None, description="Personal website")

    @validator('type', 'post', 'name')
    def strip_text(cls, v):
        return v.strip()

    @validator('email')
    def lowercase_email(cls, v):
        return v.strip().lower()

    class Config:
        populate_by_name = True


class EditorialBoardCreate(EditorialBoardBase):
    is_active: bool = Field(default=True, description="Shown on the public board")


class EditorialBoardUpdate(BaseModel):
    type: Optional[str] = Field(None, min_length=1)
    post: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    is_active: Optional[bool] = None


class EditorialBoardInDB(EditorialBoardBase):
    id: PyObjectId = Field(default_factory=PyObjectId, alias="_id")
    is_active: bool = Field(default=True, description="Shown on the public board")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
