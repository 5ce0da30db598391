"""
Review API endpoints.
"""
import logging

from fastapi import APIRouter, Depends

from journal_portal.core.dependencies import get_current_user, get_review_service, require_staff
from journal_portal.core.response_formatter import (
    ResponseFormatter,
    response_400,
    response_403,
    response_404,
)
from journal_portal.models import ReviewAssign, ReviewSubmit, UserInDB
from journal_portal.services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post(
    "/assign",
    status_code=201,
    summary="Assign a reviewer",
    description="Moves the manuscript to UNDER_REVIEW and opens a pending review",
    responses={**response_400("Manuscript cannot go under review"), **response_403(), **response_404()}
)
async def assign_reviewer(
    assignment: ReviewAssign,
    current_user: UserInDB = Depends(require_staff),
    review_service: ReviewService = Depends(get_review_service)
):
    review = await review_service.assign_reviewer(
        assignment.manuscript_id, assignment.reviewer_id, actor_id=str(current_user.id)
    )
    return ResponseFormatter.created(data=review, message="Reviewer assigned successfully")


@router.patch(
    "/{review_id}/submit",
    summary="Submit a review",
    responses={**response_400("Decision not allowed for the manuscript"), **response_403(), **response_404()}
)
async def submit_review(
    review_id: str,
    submission: ReviewSubmit,
    current_user: UserInDB = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
):
    """Reviewers submit their own reviews; staff may submit any."""
    review = await review_service.submit_review(
        review_id,
        submission.content,
        submission.decision,
        reviewer_id=None if current_user.is_staff else current_user.id
    )
    return ResponseFormatter.success(data=review, message="Review submitted successfully")


@router.get("/my", summary="Reviews assigned to me")
async def list_my_reviews(
    current_user: UserInDB = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
):
    return ResponseFormatter.success(data=await review_service.find_by_reviewer(current_user.id))


@router.get("/manuscript/{manuscript_id}", summary="Reviews of a manuscript", responses={**response_403()})
async def list_manuscript_reviews(
    manuscript_id: str,
    current_user: UserInDB = Depends(require_staff),
    review_service: ReviewService = Depends(get_review_service)
):
    return ResponseFormatter.success(data=await review_service.find_for_manuscript(manuscript_id))
