"""
Common response models and utilities.
"""
import math
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, Field
from pydantic_core import core_schema


class PyObjectId(ObjectId):
    """Custom ObjectId type for Pydantic v2."""

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.no_info_plain_validator_function(
            cls.validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str, when_used="json")
        )

    @classmethod
    def validate(cls, v):
        if not ObjectId.is_valid(v):
            raise ValueError("Invalid ObjectId")
        return ObjectId(v)

    @classmethod
    def __get_pydantic_json_schema__(cls, schema, handler):
        return handler(core_schema.str_schema())


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Return an ObjectId for a valid id value, otherwise None."""
    if isinstance(value, ObjectId):
        return value
    if value is None or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


class PaginationMeta(BaseModel):
    """Pagination metadata attached to list responses."""
    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Total number of items")
    total_pages: int = Field(..., alias="totalPages", description="Total number of pages")

    class Config:
        populate_by_name = True

    @classmethod
    def create(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if limit else 0
        )


class ErrorResponse(BaseModel):
    """Error response model."""
    status: bool = Field(default=False, description="Always false for errors")
    message: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[dict] = Field(None, description="Additional error details")
    error: Optional[str] = Field(None, description="Raw error message (non-production only)")
    stack: Optional[str] = Field(None, description="Stack trace (non-production only)")

    class Config:
        json_schema_extra = {
            "example": {
                "status": False,
                "message": "Issue not found",
                "error_code": "NOT_FOUND",
                "details": {"resource": "issue"}
            }
        }


class TokenResponse(BaseModel):
    """JWT token response model."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")
    user: Optional[dict] = Field(None, description="Authenticated user summary")

    class Config:
        json_schema_extra = {
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer",
                "expires_in": 1800,
                "user": {"email": "editor@example.org", "name": "Ada Editor", "roles": ["editor"]}
            }
        }
