"""
Review model for MongoDB with Pydantic validation.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, validator

from .common import PyObjectId
from .manuscript import ManuscriptInDB, ManuscriptStatus, ManuscriptWithAuthor
from .user import UserSummary


class ReviewDecision(str, Enum):
    """Decisions with a defined effect on the manuscript."""
    PENDING = "PENDING"
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    REVISE = "REVISE"


DECISION_STATUS = {
    ReviewDecision.ACCEPT.value: ManuscriptStatus.ACCEPTED,
    ReviewDecision.REJECT.value: ManuscriptStatus.REJECTED,
    ReviewDecision.REVISE.value: ManuscriptStatus.REVISION_REQUESTED,
}


def normalize_decision(decision: Optional[str]) -> str:
    return (decision or "").strip().upper()


class ReviewAssign(BaseModel):
    """Reviewer assignment request."""
    manuscript_id: str = Field(..., description="Manuscript to review")
    reviewer_id: str = Field(..., description="User assigned as reviewer")


class ReviewSubmit(BaseModel):
    """Reviewer verdict."""
    content: str = Field(default="", description="Review text")
    decision: str = Field(..., min_length=1, description="ACCEPT, REJECT, REVISE or free text")

    @validator('decision')
    def upper_decision(cls, v):
        return normalize_decision(v)


class ReviewInDB(BaseModel):
    """Review model as stored in database."""
    id: PyObjectId = Field(default_factory=PyObjectId, alias="_id")
    manuscript_id: PyObjectId = Field(..., description="Reviewed manuscript")
    reviewer_id: PyObjectId = Field(..., description="Assigned reviewer")
    content: str = Field(default="", description="Review text")
    decision: str = Field(default=ReviewDecision.PENDING.value, description="Upper-cased decision")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Assignment timestamp")
    updated_at: Optional[datetime] = Field(None, description="Submission timestamp")

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True


class ReviewWithManuscript(ReviewInDB):
    """Review with the reviewed manuscript resolved."""
    manuscript: Optional[ManuscriptInDB] = Field(None, description="Reviewed manuscript")


class ReviewWithReviewer(ReviewInDB):
    """Review with the reviewer's name and email resolved."""
    reviewer: Optional[UserSummary] = Field(None, description="Reviewer")


class ManuscriptDetail(ManuscriptWithAuthor):
    """Manuscript with author and all of its reviews."""
    reviews: List[ReviewInDB] = Field(default_factory=list, description="Reviews of this manuscript")
