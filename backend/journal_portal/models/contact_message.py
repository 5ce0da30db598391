"""
Contact form message model.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import PyObjectId


class ContactMessageCreate(BaseModel):
    # Presence is checked by the service, which answers 400
    name: Optional[str] = Field(None, description="Sender name")
    email: Optional[str] = Field(None, description="Sender email")
    message: Optional[str] = Field(None, description="Message body")
    source: Optional[str] = Field(None, description="Page or form the message came from")


class ContactMessageInDB(BaseModel):
    id: PyObjectId = Field(default_factory=PyObjectId, alias="_id")
    name: str
    email: str
    message: str
    source: Optional[str] = None
    is_read: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
