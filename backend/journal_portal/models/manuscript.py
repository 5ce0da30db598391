"""
Manuscript model for MongoDB with Pydantic validation.

``MANUSCRIPT_TRANSITIONS`` is the single table of allowed status moves; both
the editorial status endpoint and review decisions are checked against it.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field, validator

from .common import PyObjectId
from .user import UserSummary


MIN_MANUSCRIPT_FILES = 3
MAX_MANUSCRIPT_FILES = 10


class ManuscriptStatus(str, Enum):
    """Editorial status of a manuscript."""
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    REVISION_REQUESTED = "REVISION_REQUESTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    PUBLISHED = "PUBLISHED"


# Reviewer assignment and reviewer verdicts. Every unpublished status
# reaches all of them, so the latest verdict always applies.
_REVIEW_DRIVEN = frozenset({
    ManuscriptStatus.UNDER_REVIEW,
    ManuscriptStatus.ACCEPTED,
    ManuscriptStatus.REJECTED,
    ManuscriptStatus.REVISION_REQUESTED,
})

MANUSCRIPT_TRANSITIONS: Dict[ManuscriptStatus, FrozenSet[ManuscriptStatus]] = {
    ManuscriptStatus.DRAFT: _REVIEW_DRIVEN | {ManuscriptStatus.SUBMITTED},
    ManuscriptStatus.SUBMITTED: _REVIEW_DRIVEN | {ManuscriptStatus.DRAFT},
    ManuscriptStatus.UNDER_REVIEW: _REVIEW_DRIVEN,
    ManuscriptStatus.REVISION_REQUESTED: _REVIEW_DRIVEN | {ManuscriptStatus.SUBMITTED},
    ManuscriptStatus.ACCEPTED: _REVIEW_DRIVEN | {ManuscriptStatus.PUBLISHED},
    ManuscriptStatus.REJECTED: _REVIEW_DRIVEN,
    # A published manuscript can only go back under review
    ManuscriptStatus.PUBLISHED: frozenset({ManuscriptStatus.UNDER_REVIEW}),
}

# Statuses a new manuscript may be created in
INITIAL_STATUSES = (ManuscriptStatus.DRAFT, ManuscriptStatus.SUBMITTED)

# Statuses in which the author may still edit their own manuscript
AUTHOR_EDITABLE_STATUSES = (ManuscriptStatus.DRAFT, ManuscriptStatus.REVISION_REQUESTED)

# Statuses visible through public search
PUBLIC_STATUSES = (ManuscriptStatus.PUBLISHED, ManuscriptStatus.ACCEPTED)


def can_transition(current: str, target: str) -> bool:
    """Whether a manuscript in ``current`` may move to ``target``.

    Writing the current status again is always allowed.
    """
    current = ManuscriptStatus(current)
    target = ManuscriptStatus(target)
    if current == target:
        return True
    return target in MANUSCRIPT_TRANSITIONS[current]


class ManuscriptFile(BaseModel):
    """One attached file of a manuscript."""
    item_title: str = Field(..., min_length=1, description="Title of the attached item")
    item_description: str = Field(..., description="Description of the attached item")
    file_name: str = Field(..., min_length=1, max_length=255, description="Original file name")
    file_url: str = Field(..., description="Public URL of the stored file")
    page_count: int = Field(default=0, ge=0, description="Pages for PDF files, 0 otherwise")


class AuthorList(BaseModel):
    """Corresponding author metadata as printed with the article."""
    fname: str = Field(..., min_length=1, description="First name")
    mname: str = Field(default="", description="Middle name")
    lname: str = Field(..., description="Last name")
    degrees: Optional[str] = Field(None, description="Academic degrees")
    email: str = Field(..., description="Contact email")
    orcid: Optional[str] = Field(None, description="ORCID identifier")
    institution: str = Field(..., description="Affiliation")
    country: Optional[str] = Field(None, description="Country")
    contributor_role: str = Field(..., description="Contributor role")


class ManuscriptBase(BaseModel):
    """Base manuscript model with common fields."""
    title: str = Field(..., min_length=1, max_length=500, description="Manuscript title")
    abstract: str = Field(..., min_length=1, description="Abstract")
    type: str = Field(..., min_length=1, description="Article type")
    image_url: Optional[str] = Field(None, description="Cover image URL")
    comment: Optional[str] = Field(None, description="Comment to the editors")
    keywords: List[str] = Field(default_factory=list, description="Keywords")

    @validator('keywords', pre=True)
    def split_keywords(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [k.strip() for k in v.split(",") if k.strip()]
        return v

    class Config:
        populate_by_name = True
        use_enum_values = True


class ManuscriptCreate(ManuscriptBase):
    """Manuscript creation model; files are already stored."""
    author_id: PyObjectId = Field(..., description="ID of the submitting author")
    status: ManuscriptStatus = Field(default=ManuscriptStatus.DRAFT, description="Initial status")
    files: List[ManuscriptFile] = Field(default_factory=list, description="Attached files")
    author_list: AuthorList = Field(..., description="Corresponding author metadata")

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
        use_enum_values = True


class ManuscriptUpdate(BaseModel):
    """Editable manuscript metadata."""
    title: Optional[str] = Field(None, min_length=1, max_length=500, description="Manuscript title")
    abstract: Optional[str] = Field(None, min_length=1, description="Abstract")
    type: Optional[str] = Field(None, min_length=1, description="Article type")
    image_url: Optional[str] = Field(None, description="Cover image URL")
    comment: Optional[str] = Field(None, description="Comment to the editors")
    keywords: Optional[List[str]] = Field(None, description="Keywords")


class ManuscriptStatusUpdate(BaseModel):
    """Editorial status change request."""
    status: ManuscriptStatus = Field(..., description="Target status")

    class Config:
        use_enum_values = True


class ManuscriptInDB(ManuscriptBase):
    """Manuscript model as stored in database."""
    id: PyObjectId = Field(default_factory=PyObjectId, alias="_id")
    author_id: PyObjectId = Field(..., description="ID of the submitting author")
    status: ManuscriptStatus = Field(default=ManuscriptStatus.DRAFT, description="Editorial status")
    files: List[ManuscriptFile] = Field(default_factory=list, description="Attached files")
    total_page_count: int = Field(default=0, ge=0, description="Sum of file page counts")
    author_list: Optional[AuthorList] = Field(None, description="Corresponding author metadata")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
        use_enum_values = True


class ManuscriptWithAuthor(ManuscriptInDB):
    """Manuscript with its author reference resolved."""
    author: Optional[UserSummary] = Field(None, description="Submitting author")


class FeaturedManuscript(ManuscriptInDB):
    """Manuscript annotated with the issue it is published in."""
    issue_volume: int = Field(..., description="Volume of the containing issue")
    issue_number: int = Field(..., description="Number of the containing issue")
    issue_title: str = Field(..., description="Title of the containing issue")
    issue_slug: str = Field(..., description="Slug of the containing issue")


class ManuscriptSummary(BaseModel):
    """Per-status counts of an author's manuscripts."""
    total: int = Field(..., description="Total manuscripts")
    by_status: Dict[str, int] = Field(..., description="Counts keyed by status")
