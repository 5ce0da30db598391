"""
Manuscript service for database operations.

Every status change goes through ``transition_status``, which checks the
move against ``MANUSCRIPT_TRANSITIONS`` and records it in the workflow log.
"""
import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from journal_portal.core.collections import Collections
from journal_portal.core.error_handling import (
    AuthorizationError,
    BusinessLogicError,
    NotFoundError,
    ValidationError,
)
from journal_portal.core.logging_config import workflow_logger
from journal_portal.models import (
    AuthorList,
    ManuscriptCreate,
    ManuscriptDetail,
    ManuscriptInDB,
    ManuscriptStatus,
    ManuscriptSummary,
    ManuscriptUpdate,
    ManuscriptWithAuthor,
    MIN_MANUSCRIPT_FILES,
    ReviewInDB,
    UserInDB,
    can_transition,
    to_object_id,
)
from journal_portal.models.manuscript import AUTHOR_EDITABLE_STATUSES, INITIAL_STATUSES, PUBLIC_STATUSES
from journal_portal.services.user_service import UserService
from journal_portal.utils.text_utils import split_full_name

logger = logging.getLogger(__name__)


def build_author_list_from_user(user: UserInDB) -> AuthorList:
    """Corresponding-author block filled in from a user record."""
    fname, mname, lname = split_full_name(user.name if user else "")
    return AuthorList(
        fname=fname or "Author",
        mname=mname or "-",
        lname=lname or "Team",
        degrees="",
        email=(user.email if user else None) or "author@example.com",
        orcid="",
        institution="Unknown Institution",
        country="",
        contributor_role="Author",
    )


class ManuscriptService:
    """Service for manuscript database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.user_service = UserService(db)

    def _get_collection(self):
        """Get the manuscripts collection."""
        return self.db[Collections.MANUSCRIPTS]

    async def create_manuscript(self, manuscript_data: ManuscriptCreate) -> ManuscriptInDB:
        """
        Create a new manuscript record.

        Args:
            manuscript_data: Metadata plus already stored files

        Returns:
            Created manuscript document

        Raises:
            ValidationError: Fewer than three files, or an initial status
                other than DRAFT or SUBMITTED
        """
        if len(manuscript_data.files) < MIN_MANUSCRIPT_FILES:
            raise ValidationError(f"At least {MIN_MANUSCRIPT_FILES} files are required", field="files")

        if manuscript_data.status not in [s.value for s in INITIAL_STATUSES]:
            raise ValidationError(
                "New manuscripts must start as DRAFT or SUBMITTED",
                field="status",
                value=manuscript_data.status
            )

        now = datetime.utcnow()
        manuscript_doc = manuscript_data.dict()
        manuscript_doc.update({
            "total_page_count": sum(f.page_count for f in manuscript_data.files),
            "created_at": now,
            "updated_at": now,
        })

        result = await self._get_collection().insert_one(manuscript_doc)
        manuscript_doc["_id"] = result.inserted_id

        logger.info(f"Created manuscript {result.inserted_id} for author {manuscript_data.author_id}")
        workflow_logger.log_transition(
            "manuscript", result.inserted_id, None, manuscript_data.status,
            actor_id=str(manuscript_data.author_id)
        )
        return ManuscriptInDB(**manuscript_doc)

    async def get_manuscript_by_id(self, manuscript_id: Any) -> Optional[ManuscriptInDB]:
        """Get a manuscript by ID; an invalid id reads as not found."""
        object_id = to_object_id(manuscript_id)
        if object_id is None:
            return None
        doc = await self._get_collection().find_one({"_id": object_id})
        return ManuscriptInDB(**doc) if doc else None

    async def get_manuscripts_by_ids(self, ids: Sequence[Any]) -> List[ManuscriptInDB]:
        """Manuscripts for the given ids, in the order given; unknown ids are skipped."""
        object_ids = [oid for oid in (to_object_id(i) for i in ids) if oid is not None]
        if not object_ids:
            return []
        cursor = self._get_collection().find({"_id": {"$in": object_ids}})
        by_id = {doc["_id"]: ManuscriptInDB(**doc) async for doc in cursor}
        return [by_id[oid] for oid in object_ids if oid in by_id]

    async def _with_authors(self, manuscripts: List[ManuscriptInDB],
                            include_email: bool) -> List[ManuscriptWithAuthor]:
        summaries = await self.user_service.get_summaries([m.author_id for m in manuscripts])
        result = []
        for manuscript in manuscripts:
            author = summaries.get(manuscript.author_id)
            if author is not None and not include_email:
                author = author.copy(update={"email": None})
            result.append(ManuscriptWithAuthor(**manuscript.dict(), author=author))
        return result

    async def search_public(
        self,
        q: Optional[str] = None,
        manuscript_type: Optional[str] = None,
        issue_slug: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[ManuscriptWithAuthor], int]:
        """
        Search accepted and published manuscripts.

        ``q`` is matched case-insensitively as a literal substring of the
        title, abstract or any keyword. ``issue_slug`` restricts results to
        one issue's manuscripts; it is looked up as an issue id first, then as
        a slug. An unknown issue, or one without manuscripts, gives no results.
        """
        query: Dict[str, Any] = {"status": {"$in": [s.value for s in PUBLIC_STATUSES]}}

        if manuscript_type:
            query["type"] = manuscript_type

        if q:
            pattern = {"$regex": re.escape(q), "$options": "i"}
            query["$or"] = [{"title": pattern}, {"abstract": pattern}, {"keywords": pattern}]

        if issue_slug:
            issue_ids = await self._issue_manuscript_ids(issue_slug)
            if not issue_ids:
                return [], 0
            query["_id"] = {"$in": issue_ids}

        page, limit = max(page, 1), max(limit, 1)
        collection = self._get_collection()
        total = await collection.count_documents(query)
        cursor = collection.find(query).sort("created_at", DESCENDING).skip((page - 1) * limit).limit(limit)
        manuscripts = [ManuscriptInDB(**doc) async for doc in cursor]
        return await self._with_authors(manuscripts, include_email=False), total

    async def _issue_manuscript_ids(self, issue_ref: str) -> List[Any]:
        issues = self.db[Collections.ISSUES]
        object_id = to_object_id(issue_ref)
        issue = None
        if object_id is not None:
            issue = await issues.find_one({"_id": object_id}, {"manuscripts": 1})
        if issue is None:
            issue = await issues.find_one({"slug": issue_ref}, {"manuscripts": 1})
        if issue is None:
            return []
        return list(issue.get("manuscripts") or [])

    async def find_all(self, page: int = 1, limit: int = 10) -> Tuple[List[ManuscriptWithAuthor], int]:
        """All manuscripts with author name and email, newest first."""
        page, limit = max(page, 1), max(limit, 1)
        collection = self._get_collection()
        total = await self.count_all()
        cursor = collection.find({}).sort("created_at", DESCENDING).skip((page - 1) * limit).limit(limit)
        manuscripts = [ManuscriptInDB(**doc) async for doc in cursor]
        return await self._with_authors(manuscripts, include_email=True), total

    async def count_all(self) -> int:
        return await self._get_collection().count_documents({})

    async def get_types(self) -> List[str]:
        """Distinct article types among published manuscripts."""
        types = await self._get_collection().distinct("type", {"status": ManuscriptStatus.PUBLISHED.value})
        return sorted(t for t in types if t)

    async def find_one_public(self, manuscript_id: Any) -> Optional[ManuscriptWithAuthor]:
        manuscript = await self.get_manuscript_by_id(manuscript_id)
        if manuscript is None:
            return None
        return (await self._with_authors([manuscript], include_email=False))[0]

    async def find_mine(self, author_id: Any, statuses: Optional[List[str]] = None) -> List[ManuscriptInDB]:
        """The author's manuscripts, newest first, optionally by status."""
        object_id = to_object_id(author_id)
        if object_id is None:
            return []
        query: Dict[str, Any] = {"author_id": object_id}
        if statuses:
            query["status"] = {"$in": [s.upper() for s in statuses]}
        cursor = self._get_collection().find(query).sort("created_at", DESCENDING)
        return [ManuscriptInDB(**doc) async for doc in cursor]

    async def get_summary(self, author_id: Any) -> ManuscriptSummary:
        """Per-status counts of an author's manuscripts."""
        object_id = to_object_id(author_id)
        collection = self._get_collection()
        by_status = {}
        for manuscript_status in ManuscriptStatus:
            by_status[manuscript_status.value] = await collection.count_documents(
                {"author_id": object_id, "status": manuscript_status.value}
            ) if object_id else 0
        return ManuscriptSummary(total=sum(by_status.values()), by_status=by_status)

    async def find_one(self, manuscript_id: Any) -> Optional[ManuscriptDetail]:
        """Manuscript with author (name, email) and reviews; None if not found."""
        manuscript = await self.get_manuscript_by_id(manuscript_id)
        if manuscript is None:
            return None

        with_author = (await self._with_authors([manuscript], include_email=True))[0]
        cursor = self.db[Collections.REVIEWS].find({"manuscript_id": manuscript.id}).sort("created_at", ASCENDING)
        reviews = [ReviewInDB(**doc) async for doc in cursor]
        return ManuscriptDetail(**with_author.dict(), reviews=reviews)

    async def transition_status(
        self,
        manuscript_id: Any,
        status: ManuscriptStatus,
        actor_id: Optional[str] = None
    ) -> ManuscriptInDB:
        """
        Move a manuscript to ``status``.

        Raises:
            NotFoundError: Unknown manuscript
            BusinessLogicError: The move is not in the transition table
        """
        manuscript = await self.get_manuscript_by_id(manuscript_id)
        if manuscript is None:
            raise NotFoundError("Manuscript not found", resource="manuscript", resource_id=manuscript_id)

        target = ManuscriptStatus(status).value
        self.ensure_transition(manuscript, target)

        if manuscript.status == target:
            return manuscript

        updated = await self._get_collection().find_one_and_update(
            {"_id": manuscript.id, "status": manuscript.status},
            {"$set": {"status": target, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            # Status moved underneath us; re-check against the fresh state
            return await self.transition_status(manuscript.id, target, actor_id)

        workflow_logger.log_transition("manuscript", manuscript.id, manuscript.status, target, actor_id=actor_id)
        return ManuscriptInDB(**updated)

    @staticmethod
    def ensure_transition(manuscript: ManuscriptInDB, target: str) -> None:
        if not can_transition(manuscript.status, target):
            raise BusinessLogicError(
                f"Cannot change manuscript status from {manuscript.status} to {target}",
                rule="manuscript_transition",
                details={"from": manuscript.status, "to": target}
            )

    async def update_status(self, manuscript_id: Any, status: ManuscriptStatus,
                            actor_id: Optional[str] = None) -> ManuscriptInDB:
        """Editorial status change."""
        return await self.transition_status(manuscript_id, status, actor_id)

    async def update_manuscript(self, manuscript_id: Any, manuscript_data: ManuscriptUpdate,
                                user: UserInDB) -> ManuscriptInDB:
        """
        Edit manuscript metadata.

        Staff may edit any manuscript. Authors may edit their own while it is
        a draft or has a revision requested.
        """
        manuscript = await self.get_manuscript_by_id(manuscript_id)
        if manuscript is None:
            raise NotFoundError("Manuscript not found", resource="manuscript", resource_id=manuscript_id)

        if not user.is_staff:
            if manuscript.author_id != user.id:
                raise AuthorizationError("You can only edit your own manuscripts")
            if manuscript.status not in [s.value for s in AUTHOR_EDITABLE_STATUSES]:
                raise BusinessLogicError(
                    f"Manuscripts in status {manuscript.status} cannot be edited by the author",
                    rule="author_edit_window"
                )

        update_dict = manuscript_data.dict(exclude_unset=True)
        if not update_dict:
            return manuscript
        update_dict["updated_at"] = datetime.utcnow()

        updated = await self._get_collection().find_one_and_update(
            {"_id": manuscript.id},
            {"$set": update_dict},
            return_document=ReturnDocument.AFTER
        )
        logger.info(f"Updated manuscript {manuscript_id}: {', '.join(k for k in update_dict if k != 'updated_at')}")
        return ManuscriptInDB(**updated)
