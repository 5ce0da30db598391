"""
Review service: reviewer assignment and verdicts.
"""
import logging
from datetime import datetime
from typing import Any, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from journal_portal.core.collections import Collections
from journal_portal.core.error_handling import AuthorizationError, NotFoundError
from journal_portal.core.logging_config import workflow_logger
from journal_portal.models import (
    ManuscriptStatus,
    ReviewDecision,
    ReviewInDB,
    ReviewWithManuscript,
    ReviewWithReviewer,
    to_object_id,
)
from journal_portal.models.review import DECISION_STATUS, normalize_decision
from journal_portal.services.manuscript_service import ManuscriptService
from journal_portal.services.user_service import UserService

logger = logging.getLogger(__name__)


class ReviewService:
    """Service for review database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.manuscript_service = ManuscriptService(db)
        self.user_service = UserService(db)

    def _get_collection(self):
        """Get the reviews collection."""
        return self.db[Collections.REVIEWS]

    async def get_review_by_id(self, review_id: Any) -> Optional[ReviewInDB]:
        object_id = to_object_id(review_id)
        if object_id is None:
            return None
        doc = await self._get_collection().find_one({"_id": object_id})
        return ReviewInDB(**doc) if doc else None

    async def assign_reviewer(self, manuscript_id: Any, reviewer_id: Any,
                              actor_id: Optional[str] = None) -> ReviewInDB:
        """
        Assign a reviewer to a manuscript.

        The manuscript moves to UNDER_REVIEW and a pending review is created
        for the reviewer. Each call creates its own review record.

        Raises:
            NotFoundError: Unknown manuscript or reviewer
            BusinessLogicError: The manuscript cannot go under review from its
                current status
        """
        manuscript = await self.manuscript_service.get_manuscript_by_id(manuscript_id)
        if manuscript is None:
            raise NotFoundError("Manuscript not found", resource="manuscript", resource_id=manuscript_id)

        reviewer = await self.user_service.get_user_by_id(reviewer_id)
        if reviewer is None:
            raise NotFoundError("Reviewer not found", resource="user", resource_id=reviewer_id)

        await self.manuscript_service.transition_status(
            manuscript.id, ManuscriptStatus.UNDER_REVIEW, actor_id=actor_id
        )

        review_doc = {
            "manuscript_id": manuscript.id,
            "reviewer_id": reviewer.id,
            "content": "",
            "decision": ReviewDecision.PENDING.value,
            "created_at": datetime.utcnow(),
            "updated_at": None,
        }
        result = await self._get_collection().insert_one(review_doc)
        review_doc["_id"] = result.inserted_id

        logger.info(f"Assigned reviewer {reviewer.id} to manuscript {manuscript.id}")
        workflow_logger.log_event("manuscript", manuscript.id, "reviewer_assigned",
                                  review_id=str(result.inserted_id), reviewer_id=str(reviewer.id))
        return ReviewInDB(**review_doc)

    async def submit_review(
        self,
        review_id: Any,
        content: str,
        decision: str,
        reviewer_id: Optional[Any] = None
    ) -> ReviewInDB:
        """
        Record a reviewer's verdict.

        ACCEPT, REJECT and REVISE move the manuscript to ACCEPTED, REJECTED
        and REVISION_REQUESTED. Any other decision is stored on the review
        and leaves the manuscript alone. With several reviewers the latest
        verdict decides the manuscript status.

        Args:
            review_id: Review to update
            content: Review text
            decision: Decision, compared case-insensitively
            reviewer_id: When given, must be the review's assigned reviewer
        """
        review = await self.get_review_by_id(review_id)
        if review is None:
            raise NotFoundError("Review not found", resource="review", resource_id=review_id)

        if reviewer_id is not None and to_object_id(reviewer_id) != review.reviewer_id:
            raise AuthorizationError("Only the assigned reviewer can submit this review")

        decision = normalize_decision(decision)
        target_status = DECISION_STATUS.get(decision)

        # Check the move before anything is written
        manuscript = None
        if target_status is not None:
            manuscript = await self.manuscript_service.get_manuscript_by_id(review.manuscript_id)
            if manuscript is None:
                raise NotFoundError("Manuscript not found", resource="manuscript",
                                    resource_id=review.manuscript_id)
            self.manuscript_service.ensure_transition(manuscript, target_status.value)

        updated = await self._get_collection().find_one_and_update(
            {"_id": review.id},
            {"$set": {"content": content or "", "decision": decision, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        logger.info(f"Review {review.id} submitted with decision {decision}")

        if manuscript is not None:
            await self.manuscript_service.transition_status(
                manuscript.id, target_status, actor_id=str(review.reviewer_id)
            )

        return ReviewInDB(**updated)

    async def find_by_reviewer(self, reviewer_id: Any) -> List[ReviewWithManuscript]:
        """Reviews assigned to a reviewer, newest first, with manuscripts."""
        object_id = to_object_id(reviewer_id)
        if object_id is None:
            return []
        cursor = self._get_collection().find({"reviewer_id": object_id}).sort("created_at", DESCENDING)
        reviews = [ReviewInDB(**doc) async for doc in cursor]

        manuscripts = await self.manuscript_service.get_manuscripts_by_ids(
            list({r.manuscript_id for r in reviews})
        )
        by_id = {m.id: m for m in manuscripts}
        return [ReviewWithManuscript(**r.dict(), manuscript=by_id.get(r.manuscript_id)) for r in reviews]

    async def find_for_manuscript(self, manuscript_id: Any) -> List[ReviewWithReviewer]:
        """Reviews of a manuscript with reviewer name and email; [] for an invalid id."""
        object_id = to_object_id(manuscript_id)
        if object_id is None:
            return []
        cursor = self._get_collection().find({"manuscript_id": object_id}).sort("created_at", DESCENDING)
        reviews = [ReviewInDB(**doc) async for doc in cursor]

        reviewers = await self.user_service.get_summaries([r.reviewer_id for r in reviews])
        return [ReviewWithReviewer(**r.dict(), reviewer=reviewers.get(r.reviewer_id)) for r in reviews]
