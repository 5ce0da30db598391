"""
Blog post model.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, validator

from .common import PyObjectId


class BlogBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=300, description="Post title")
    description: List[str] = Field(..., min_length=1, description="Body paragraphs")
    category: str = Field(..., min_length=1, description="Category")
    tags: List[str] = Field(default_factory=list, description="Tags")
    image: Optional[str] = Field(None, description="Image URL")

    @validator('description', pre=True)
    def wrap_description(cls, v):
        if isinstance(v, str):
            return [v]
        return v

    class Config:
        populate_by_name = True


class BlogCreate(BlogBase):
    slug: Optional[str] = Field(None, description="URL slug; derived from the title when omitted")
    is_active: bool = Field(default=True, description="Published on the site")


class BlogUpdate(BaseModel):
    slug: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[List[str]] = None
    category: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = None
    image: Optional[str] = None
    is_active: Optional[bool] = None


class BlogInDB(BlogBase):
    id: PyObjectId = Field(default_factory=PyObjectId, alias="_id")
    slug: str = Field(..., description="Unique lowercase slug")
    is_active: bool = Field(default=True, description="Published on the site")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
