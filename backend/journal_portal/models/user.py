"""
User model for MongoDB with Pydantic validation.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, EmailStr, validator

from .common import PyObjectId


class UserRole(str, Enum):
    """Role tags a user can hold; a user may hold several."""
    AUTHOR = "author"
    REVIEWER = "reviewer"
    EDITOR = "editor"
    PUBLISHER = "publisher"
    ADMIN = "admin"


STAFF_ROLES = (UserRole.EDITOR, UserRole.PUBLISHER, UserRole.ADMIN)
ADMIN_ROLES = (UserRole.PUBLISHER, UserRole.ADMIN)


class UserStatus(str, Enum):
    """Account approval status."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


def normalize_roles(v):
    """Accept a single role string (legacy clients) or a list of roles."""
    if v is None:
        return [UserRole.AUTHOR.value]
    if isinstance(v, str):
        v = [part for part in v.replace(";", ",").split(",")]
    roles = []
    for role in v:
        value = role.value if isinstance(role, UserRole) else str(role).strip().lower()
        if value and value not in roles:
            roles.append(value)
    return roles or [UserRole.AUTHOR.value]


class UnavailableDates(BaseModel):
    """Periods a reviewer cannot take assignments."""
    ranges: Optional[str] = Field(None, description="Free-form date ranges")
    note: Optional[str] = Field(None, description="Explanatory note")


class UserBase(BaseModel):
    """Base user model with common fields."""
    email: EmailStr = Field(..., description="User email address")
    name: str = Field(..., min_length=1, max_length=200, description="Full name")
    phone: Optional[str] = Field(None, description="Phone number")
    roles: List[UserRole] = Field(default_factory=lambda: [UserRole.AUTHOR.value], description="Role tags")
    expertise: Optional[str] = Field(None, description="Areas of expertise")
    unavailable_dates: Optional[UnavailableDates] = Field(None, description="Reviewer availability")

    @validator('roles', pre=True)
    def validate_roles(cls, v):
        return normalize_roles(v)

    @validator('email')
    def lowercase_email(cls, v):
        return v.strip().lower()

    class Config:
        populate_by_name = True
        use_enum_values = True


class UserCreate(UserBase):
    """User registration model."""
    password: str = Field(..., min_length=6, description="User password (min 6 characters)")


class UserUpdate(BaseModel):
    """Profile update model."""
    name: Optional[str] = Field(None, min_length=1, max_length=200, description="Full name")
    phone: Optional[str] = Field(None, description="Phone number")
    expertise: Optional[str] = Field(None, description="Areas of expertise")
    unavailable_dates: Optional[UnavailableDates] = Field(None, description="Reviewer availability")
    password: Optional[str] = Field(None, min_length=6, description="Updated password")


class UserStatusUpdate(BaseModel):
    """Administrative status change."""
    status: UserStatus = Field(..., description="New account status")


class UserRolesUpdate(BaseModel):
    """Administrative role assignment."""
    roles: List[UserRole] = Field(..., min_length=1, description="Full replacement set of roles")

    @validator('roles', pre=True)
    def validate_roles(cls, v):
        return normalize_roles(v)

    class Config:
        use_enum_values = True


class UserInDB(UserBase):
    """User model as stored in database."""
    id: PyObjectId = Field(default_factory=PyObjectId, alias="_id")
    password_hash: str = Field(..., description="Hashed password")
    status: UserStatus = Field(default=UserStatus.PENDING, description="Account approval status")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="User creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    def has_any_role(self, *roles) -> bool:
        wanted = {r.value if isinstance(r, UserRole) else r for r in roles}
        return bool(wanted.intersection(self.roles))

    @property
    def is_staff(self) -> bool:
        return self.has_any_role(*STAFF_ROLES)

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
        use_enum_values = True


class UserResponse(BaseModel):
    """User model for API responses (without sensitive data)."""
    id: PyObjectId = Field(..., description="User ID")
    email: str = Field(..., description="User email address")
    name: str = Field(..., description="Full name")
    phone: Optional[str] = Field(None, description="Phone number")
    roles: List[str] = Field(..., description="Role tags")
    expertise: Optional[str] = Field(None, description="Areas of expertise")
    unavailable_dates: Optional[UnavailableDates] = Field(None, description="Reviewer availability")
    status: str = Field(..., description="Account approval status")
    created_at: datetime = Field(..., description="User creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True


class UserSummary(BaseModel):
    """Reference to a user embedded in other responses."""
    id: PyObjectId = Field(..., description="User ID")
    name: str = Field(..., description="Full name")
    email: Optional[str] = Field(None, description="User email address")

    class Config:
        arbitrary_types_allowed = True


class UserLogin(BaseModel):
    """User login model."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")

    @validator('email')
    def lowercase_email(cls, v):
        return v.strip().lower()
