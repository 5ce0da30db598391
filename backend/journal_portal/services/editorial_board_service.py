"""
Editorial board member directory.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from journal_portal.core.collections import Collections
from journal_portal.core.error_handling import ConflictError, NotFoundError
from journal_portal.models import (
    EditorialBoardCreate,
    EditorialBoardInDB,
    EditorialBoardUpdate,
    to_object_id,
)

logger = logging.getLogger(__name__)


class EditorialBoardService:
    """Service for editorial board database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    def _get_collection(self):
        """Get the editorial board collection."""
        return self.db[Collections.EDITORIAL_BOARD]

    async def create_member(self, member_data: EditorialBoardCreate) -> EditorialBoardInDB:
        collection = self._get_collection()
        if await collection.find_one({"email": member_data.email}):
            raise ConflictError("Email already exists")

        member_doc = member_data.dict()
        member_doc.update({"created_at": datetime.utcnow(), "updated_at": None})
        try:
            result = await collection.insert_one(member_doc)
        except DuplicateKeyError:
            raise ConflictError("Email already exists")
        member_doc["_id"] = result.inserted_id

        logger.info(f"Created editorial board member {result.inserted_id}")
        return EditorialBoardInDB(**member_doc)

    async def list_members(self, is_active: Optional[bool] = None,
                           skip: int = 0, limit: int = 100) -> List[EditorialBoardInDB]:
        """Members, newest first, optionally filtered on ``is_active``."""
        query: Dict[str, Any] = {}
        if is_active is not None:
            query["is_active"] = is_active
        cursor = (
            self._get_collection()
            .find(query)
            .sort("created_at", DESCENDING)
            .skip(max(skip, 0))
            .limit(max(limit, 1))
        )
        return [EditorialBoardInDB(**doc) async for doc in cursor]

    async def get_member(self, member_id: Any) -> EditorialBoardInDB:
        object_id = to_object_id(member_id)
        doc = await self._get_collection().find_one({"_id": object_id}) if object_id else None
        if doc is None:
            raise NotFoundError("Editorial Board member not found", resource="editorial_board",
                                resource_id=member_id)
        return EditorialBoardInDB(**doc)

    async def update_member(self, member_id: Any, member_data: EditorialBoardUpdate) -> EditorialBoardInDB:
        member = await self.get_member(member_id)
        update_dict: Dict[str, Any] = member_data.dict(exclude_unset=True)

        if update_dict.get("email"):
            update_dict["email"] = update_dict["email"].strip().lower()
            if await self._get_collection().find_one({"email": update_dict["email"], "_id": {"$ne": member.id}}):
                raise ConflictError("Email already exists")

        update_dict["updated_at"] = datetime.utcnow()
        try:
            updated = await self._get_collection().find_one_and_update(
                {"_id": member.id},
                {"$set": update_dict},
                return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            raise ConflictError("Email already exists")
        if updated is None:
            raise NotFoundError("Editorial Board member not found", resource="editorial_board",
                                resource_id=member_id)

        logger.info(f"Updated editorial board member {member.id}")
        return EditorialBoardInDB(**updated)

    async def deactivate_member(self, member_id: Any) -> EditorialBoardInDB:
        """Soft delete: the member stays stored but leaves the public board."""
        return await self.update_member(member_id, EditorialBoardUpdate(is_active=False))
