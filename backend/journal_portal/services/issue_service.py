"""
Issue service: assembling accepted manuscripts into journal issues.

Membership changes are single conditional updates, so concurrent adds and
removes can neither duplicate a manuscript nor lose a page-count change.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from journal_portal.core.collections import Collections
from journal_portal.core.error_handling import (
    BusinessLogicError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from journal_portal.core.logging_config import workflow_logger
from journal_portal.models import (
    FeaturedManuscript,
    IssueCreate,
    IssueInDB,
    IssueStatus,
    IssueUpdate,
    IssueWithManuscripts,
    LOCKED_ISSUE_STATUSES,
    ManuscriptStatus,
    UserInDB,
    to_object_id,
)
from journal_portal.services.manuscript_service import ManuscriptService
from journal_portal.utils.text_utils import generate_slug

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
LATEST_ISSUES_LIMIT = 10
FEATURED_PER_ISSUE = 6


class IssueService:
    """Service for issue database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.manuscript_service = ManuscriptService(db)

    def _get_collection(self):
        """Get the issues collection."""
        return self.db[Collections.ISSUES]

    async def _get_issue_or_raise(self, issue_id: Any) -> IssueInDB:
        issue = await self.get_issue_by_id(issue_id)
        if issue is None:
            raise NotFoundError("Issue not found", resource="issue", resource_id=issue_id)
        return issue

    async def get_issue_by_id(self, issue_id: Any) -> Optional[IssueInDB]:
        object_id = to_object_id(issue_id)
        if object_id is None:
            return None
        doc = await self._get_collection().find_one({"_id": object_id})
        return IssueInDB(**doc) if doc else None

    async def _ensure_unique(self, volume: int, issue_number: int, slug: str,
                             exclude_id: Optional[Any] = None) -> None:
        collection = self._get_collection()
        not_self = {"_id": {"$ne": exclude_id}} if exclude_id is not None else {}

        if await collection.find_one({"volume": volume, "issue_number": issue_number, **not_self}):
            raise ConflictError("Issue already exists for this volume and number")
        if await collection.find_one({"slug": slug, **not_self}):
            raise ConflictError("An issue with this title already exists")

    async def create_issue(self, issue_data: IssueCreate, user: Optional[UserInDB] = None) -> IssueInDB:
        """
        Create a draft issue.

        Raises:
            ValidationError: Title produces an empty slug
            ConflictError: Volume and number, or slug, already taken
        """
        slug = generate_slug(issue_data.title)
        if not slug:
            raise ValidationError("Missing required fields", field="title")

        await self._ensure_unique(issue_data.volume, issue_data.issue_number, slug)

        now = datetime.utcnow()
        issue_doc = issue_data.dict()
        issue_doc.update({
            "slug": slug,
            "manuscripts": [],
            "total_pages": 0,
            "status": IssueStatus.DRAFT.value,
            "is_active": True,
            "created_by": user.id if user else None,
            "created_at": now,
            "updated_at": now,
        })

        try:
            result = await self._get_collection().insert_one(issue_doc)
        except DuplicateKeyError:
            raise ConflictError("Issue already exists for this volume and number")
        issue_doc["_id"] = result.inserted_id

        logger.info(f"Created issue {result.inserted_id}: volume {issue_data.volume} number {issue_data.issue_number}")
        return IssueInDB(**issue_doc)

    def _ensure_editable(self, issue: IssueInDB, action: str = "updated") -> None:
        if issue.status not in [s.value for s in LOCKED_ISSUE_STATUSES]:
            return
        if issue.status == IssueStatus.ARCHIVED.value:
            raise BusinessLogicError(f"Archived issues cannot be {action}", rule="issue_archived")
        raise BusinessLogicError("Published issues cannot be edited", rule="issue_published")

    async def update_issue(self, issue_id: Any, issue_data: IssueUpdate) -> IssueInDB:
        """Update a draft issue; a new title regenerates the slug."""
        issue = await self._get_issue_or_raise(issue_id)
        self._ensure_editable(issue)

        update_dict: Dict[str, Any] = issue_data.dict(exclude_unset=True)
        if "title" in update_dict:
            update_dict["title"] = update_dict["title"].strip()
            update_dict["slug"] = generate_slug(update_dict["title"])
            if not update_dict["slug"]:
                raise ValidationError("Missing required fields", field="title")

        if not update_dict:
            return issue

        await self._ensure_unique(
            update_dict.get("volume", issue.volume),
            update_dict.get("issue_number", issue.issue_number),
            update_dict.get("slug", issue.slug),
            exclude_id=issue.id
        )

        update_dict["updated_at"] = datetime.utcnow()
        updated = await self._get_collection().find_one_and_update(
            {"_id": issue.id, "status": IssueStatus.DRAFT.value},
            {"$set": update_dict},
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            # Published or archived between the read and the write
            self._ensure_editable(await self._get_issue_or_raise(issue.id))
            raise NotFoundError("Issue not found", resource="issue", resource_id=issue_id)

        logger.info(f"Updated issue {issue.id}")
        return IssueInDB(**updated)

    async def publish_issue(self, issue_id: Any, actor_id: Optional[str] = None) -> IssueInDB:
        """
        Publish an issue.

        Requires at least one member manuscript in ACCEPTED status. The
        publication date is set to now when the issue has none.
        """
        issue = await self._get_issue_or_raise(issue_id)

        if issue.status == IssueStatus.ARCHIVED.value:
            raise BusinessLogicError("Archived issues cannot be published", rule="issue_archived")
        if not issue.manuscripts:
            raise BusinessLogicError("Cannot publish issue without manuscripts", rule="issue_empty")

        accepted = await self.db[Collections.MANUSCRIPTS].count_documents({
            "_id": {"$in": list(issue.manuscripts)},
            "status": ManuscriptStatus.ACCEPTED.value,
        })
        if accepted == 0:
            raise BusinessLogicError("At least one ACCEPTED manuscript required to publish",
                                     rule="issue_needs_accepted")

        fields: Dict[str, Any] = {"status": IssueStatus.PUBLISHED.value, "updated_at": datetime.utcnow()}
        if issue.publication_date is None:
            fields["publication_date"] = datetime.utcnow()

        updated = await self._get_collection().find_one_and_update(
            {"_id": issue.id, "status": {"$ne": IssueStatus.ARCHIVED.value}},
            {"$set": fields},
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            raise BusinessLogicError("Archived issues cannot be published", rule="issue_archived")

        workflow_logger.log_transition("issue", issue.id, issue.status, IssueStatus.PUBLISHED.value,
                                       actor_id=actor_id, manuscripts=len(issue.manuscripts))
        return IssueInDB(**updated)

    async def add_manuscript(self, issue_id: Any, manuscript_id: Any) -> IssueInDB:
        """
        Append an ACCEPTED manuscript and add its pages to the issue total.

        Raises:
            NotFoundError: Unknown issue or manuscript
            BusinessLogicError: Issue locked, or manuscript not ACCEPTED
            ConflictError: Manuscript already in the issue
        """
        issue = await self._get_issue_or_raise(issue_id)
        self._ensure_editable(issue, "modified")

        manuscript = await self.manuscript_service.get_manuscript_by_id(manuscript_id)
        if manuscript is None:
            raise NotFoundError("Manuscript not found", resource="manuscript", resource_id=manuscript_id)
        if manuscript.id in issue.manuscripts:
            raise ConflictError("Manuscript already added")
        if manuscript.status != ManuscriptStatus.ACCEPTED.value:
            raise BusinessLogicError("Only ACCEPTED manuscripts can be added", rule="manuscript_not_accepted")

        updated = await self._get_collection().find_one_and_update(
            {"_id": issue.id, "status": IssueStatus.DRAFT.value, "manuscripts": {"$ne": manuscript.id}},
            {
                "$push": {"manuscripts": manuscript.id},
                "$inc": {"total_pages": manuscript.total_page_count},
                "$set": {"updated_at": datetime.utcnow()},
            },
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            current = await self._get_issue_or_raise(issue.id)
            self._ensure_editable(current, "modified")
            raise ConflictError("Manuscript already added")

        workflow_logger.log_event("issue", issue.id, "manuscript_added",
                                  manuscript_id=str(manuscript.id), pages=manuscript.total_page_count)
        return IssueInDB(**updated)

    async def remove_manuscript(self, issue_id: Any, manuscript_id: Any) -> IssueInDB:
        """
        Remove a manuscript and subtract its pages, never going below zero.

        Raises:
            NotFoundError: Unknown issue
            BusinessLogicError: Issue locked
            ValidationError: Manuscript is not part of the issue
        """
        issue = await self._get_issue_or_raise(issue_id)
        self._ensure_editable(issue, "modified")

        object_id = to_object_id(manuscript_id)
        if object_id is None or object_id not in issue.manuscripts:
            raise ValidationError("Manuscript is not part of this issue", field="manuscript_id")

        manuscript = await self.manuscript_service.get_manuscript_by_id(object_id)
        pages = manuscript.total_page_count if manuscript else 0

        collection = self._get_collection()
        updated = await collection.find_one_and_update(
            {"_id": issue.id, "status": IssueStatus.DRAFT.value, "manuscripts": object_id},
            {
                "$pull": {"manuscripts": object_id},
                "$inc": {"total_pages": -pages},
                "$set": {"updated_at": datetime.utcnow()},
            },
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            current = await self._get_issue_or_raise(issue.id)
            self._ensure_editable(current, "modified")
            raise ValidationError("Manuscript is not part of this issue", field="manuscript_id")

        if updated.get("total_pages", 0) < 0:
            updated = await collection.find_one_and_update(
                {"_id": issue.id, "total_pages": {"$lt": 0}},
                {"$set": {"total_pages": 0}},
                return_document=ReturnDocument.AFTER
            ) or await collection.find_one({"_id": issue.id})

        workflow_logger.log_event("issue", issue.id, "manuscript_removed",
                                  manuscript_id=str(object_id), pages=pages)
        return IssueInDB(**updated)

    async def archive_issue(self, issue_id: Any, actor_id: Optional[str] = None) -> IssueInDB:
        """Archive an issue; archiving is final."""
        issue = await self._get_issue_or_raise(issue_id)
        if issue.status == IssueStatus.ARCHIVED.value:
            raise ConflictError("Issue already archived")

        updated = await self._get_collection().find_one_and_update(
            {"_id": issue.id, "status": {"$ne": IssueStatus.ARCHIVED.value}},
            {"$set": {"status": IssueStatus.ARCHIVED.value, "is_active": False, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            raise ConflictError("Issue already archived")

        workflow_logger.log_transition("issue", issue.id, issue.status, IssueStatus.ARCHIVED.value, actor_id=actor_id)
        return IssueInDB(**updated)

    async def delete_issue(self, issue_id: Any) -> None:
        """Delete a draft issue. Published and archived issues are kept."""
        issue = await self._get_issue_or_raise(issue_id)
        if issue.status != IssueStatus.DRAFT.value:
            raise BusinessLogicError(f"{issue.status.capitalize()} issues cannot be deleted", rule="issue_locked")

        result = await self._get_collection().delete_one({"_id": issue.id, "status": IssueStatus.DRAFT.value})
        if result.deleted_count == 0:
            raise BusinessLogicError("Only draft issues can be deleted", rule="issue_locked")
        logger.info(f"Deleted issue {issue.id}")

    async def _populate(self, issues: List[IssueInDB]) -> List[IssueWithManuscripts]:
        all_ids = [mid for issue in issues for mid in issue.manuscripts]
        manuscripts = await self.manuscript_service.get_manuscripts_by_ids(all_ids)
        by_id = {m.id: m for m in manuscripts}
        return [
            IssueWithManuscripts(
                **issue.dict(exclude={"manuscripts"}),
                manuscripts=[by_id[mid] for mid in issue.manuscripts if mid in by_id]
            )
            for issue in issues
        ]

    async def list_issues(
        self,
        page: int = 1,
        limit: int = 10,
        year: Optional[int] = None,
        volume: Optional[int] = None,
        status: Optional[str] = None
    ) -> Tuple[List[IssueWithManuscripts], int, int, int]:
        """
        Filtered issue listing, newest publication first.

        Returns:
            (issues, total, page, limit) with page and limit after clamping
        """
        page = max(page or 1, 1)
        limit = min(max(limit or 10, 1), MAX_PAGE_SIZE)

        query: Dict[str, Any] = {}
        if status:
            query["status"] = status.upper()
        if volume is not None:
            query["volume"] = volume
        if year is not None:
            query["publication_date"] = {"$gte": datetime(year, 1, 1), "$lt": datetime(year + 1, 1, 1)}

        collection = self._get_collection()
        total = await collection.count_documents(query)
        cursor = (
            collection.find(query)
            .sort([("publication_date", DESCENDING), ("created_at", DESCENDING)])
            .skip((page - 1) * limit)
            .limit(limit)
        )
        issues = [IssueInDB(**doc) async for doc in cursor]
        return await self._populate(issues), total, page, limit

    async def get_latest(self) -> List[IssueWithManuscripts]:
        """Most recently published issues."""
        cursor = (
            self._get_collection()
            .find({"status": IssueStatus.PUBLISHED.value})
            .sort("publication_date", DESCENDING)
            .limit(LATEST_ISSUES_LIMIT)
        )
        issues = [IssueInDB(**doc) async for doc in cursor]
        if not issues:
            raise NotFoundError("No published issues found", resource="issue")
        return await self._populate(issues)

    async def get_issue(self, issue_id: Any) -> IssueWithManuscripts:
        issue = await self._get_issue_or_raise(issue_id)
        return (await self._populate([issue]))[0]

    async def get_issue_by_slug(self, slug: str) -> IssueWithManuscripts:
        doc = await self._get_collection().find_one({"slug": slug})
        if doc is None:
            raise NotFoundError("Issue not found", resource="issue", resource_id=slug)
        return (await self._populate([IssueInDB(**doc)]))[0]

    async def get_featured_manuscripts(self) -> List[FeaturedManuscript]:
        """First manuscripts of every published issue, tagged with their issue."""
        cursor = (
            self._get_collection()
            .find({"status": IssueStatus.PUBLISHED.value})
            .sort("publication_date", DESCENDING)
        )
        issues = [IssueInDB(**doc) async for doc in cursor]
        populated = await self._populate(
            [issue.copy(update={"manuscripts": issue.manuscripts[:FEATURED_PER_ISSUE]}) for issue in issues]
        )

        featured = []
        for issue in populated:
            for manuscript in issue.manuscripts:
                featured.append(FeaturedManuscript(
                    **manuscript.dict(),
                    issue_volume=issue.volume,
                    issue_number=issue.issue_number,
                    issue_title=issue.title,
                    issue_slug=issue.slug,
                ))
        return featured
