"""
Contact form messages.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from journal_portal.core.collections import Collections
from journal_portal.core.error_handling import NotFoundError, ValidationError
from journal_portal.models import ContactMessageCreate, ContactMessageInDB, to_object_id

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20


class ContactMessageService:
    """Service for contact message database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    def _get_collection(self):
        """Get the contact messages collection."""
        return self.db[Collections.CONTACT_MESSAGES]

    async def create_message(self, message_data: ContactMessageCreate) -> ContactMessageInDB:
        name = (message_data.name or "").strip()
        email = (message_data.email or "").strip().lower()
        message = (message_data.message or "").strip()
        if not (name and email and message):
            raise ValidationError("Name, email, and message are required")

        message_doc = {
            "name": name,
            "email": email,
            "message": message,
            "source": message_data.source,
            "is_read": False,
            "created_at": datetime.utcnow(),
            "updated_at": None,
        }
        result = await self._get_collection().insert_one(message_doc)
        message_doc["_id"] = result.inserted_id

        logger.info(f"Stored contact message {result.inserted_id} from {email}")
        return ContactMessageInDB(**message_doc)

    async def list_messages(self, is_read: Optional[bool] = None, page: int = 1,
                            limit: int = DEFAULT_LIST_LIMIT) -> Tuple[List[ContactMessageInDB], int]:
        """Messages, newest first, with the total matching count."""
        query: Dict[str, Any] = {}
        if is_read is not None:
            query["is_read"] = is_read
        page = max(page, 1)
        limit = min(max(limit, 1), 100)

        collection = self._get_collection()
        total = await collection.count_documents(query)
        cursor = collection.find(query).sort("created_at", DESCENDING).skip((page - 1) * limit).limit(limit)
        return [ContactMessageInDB(**doc) async for doc in cursor], total

    async def mark_read(self, message_id: Any) -> ContactMessageInDB:
        object_id = to_object_id(message_id)
        updated = None
        if object_id is not None:
            updated = await self._get_collection().find_one_and_update(
                {"_id": object_id},
                {"$set": {"is_read": True, "updated_at": datetime.utcnow()}},
                return_document=ReturnDocument.AFTER
            )
        if updated is None:
            raise NotFoundError("Message not found", resource="contact_message", resource_id=message_id)
        return ContactMessageInDB(**updated)
