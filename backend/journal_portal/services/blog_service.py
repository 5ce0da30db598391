"""
Blog posts.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from journal_portal.core.collections import Collections
from journal_portal.core.error_handling import ConflictError, NotFoundError, ValidationError
from journal_portal.models import BlogCreate, BlogInDB, BlogUpdate, to_object_id
from journal_portal.utils.text_utils import generate_slug

logger = logging.getLogger(__name__)


class BlogService:
    """Service for blog database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    def _get_collection(self):
        """Get the blogs collection."""
        return self.db[Collections.BLOGS]

    @staticmethod
    def _slug_for(slug: Optional[str], title: str) -> str:
        value = generate_slug(slug or title)
        if not value:
            raise ValidationError("Slug cannot be empty", field="slug")
        return value

    async def create_blog(self, blog_data: BlogCreate) -> BlogInDB:
        """Create a post; the slug comes from the title when not supplied."""
        slug = self._slug_for(blog_data.slug, blog_data.title)
        collection = self._get_collection()
        if await collection.find_one({"slug": slug}):
            raise ConflictError("Blog with this slug already exists")

        blog_doc = blog_data.dict()
        blog_doc.update({"slug": slug, "created_at": datetime.utcnow(), "updated_at": None})
        try:
            result = await collection.insert_one(blog_doc)
        except DuplicateKeyError:
            raise ConflictError("Blog with this slug already exists")
        blog_doc["_id"] = result.inserted_id

        logger.info(f"Created blog post {slug}")
        return BlogInDB(**blog_doc)

    async def list_blogs(self, is_active: Optional[bool] = None, category: Optional[str] = None,
                         skip: int = 0, limit: int = 100) -> List[BlogInDB]:
        query: Dict[str, Any] = {}
        if is_active is not None:
            query["is_active"] = is_active
        if category:
            query["category"] = category
        cursor = (
            self._get_collection()
            .find(query)
            .sort("created_at", DESCENDING)
            .skip(max(skip, 0))
            .limit(max(limit, 1))
        )
        return [BlogInDB(**doc) async for doc in cursor]

    async def get_blog(self, blog_id: Any) -> BlogInDB:
        object_id = to_object_id(blog_id)
        doc = await self._get_collection().find_one({"_id": object_id}) if object_id else None
        if doc is None:
            raise NotFoundError("Blog not found", resource="blog", resource_id=blog_id)
        return BlogInDB(**doc)

    async def get_blog_by_slug(self, slug: str) -> BlogInDB:
        doc = await self._get_collection().find_one({"slug": (slug or "").lower()})
        if doc is None:
            raise NotFoundError("Blog not found", resource="blog", resource_id=slug)
        return BlogInDB(**doc)

    async def update_blog(self, blog_id: Any, blog_data: BlogUpdate) -> BlogInDB:
        blog = await self.get_blog(blog_id)
        update_dict: Dict[str, Any] = blog_data.dict(exclude_unset=True)

        if "slug" in update_dict:
            update_dict["slug"] = self._slug_for(update_dict["slug"], update_dict.get("title", blog.title))
            if await self._get_collection().find_one({"slug": update_dict["slug"], "_id": {"$ne": blog.id}}):
                raise ConflictError("Blog with this slug already exists")

        update_dict["updated_at"] = datetime.utcnow()
        try:
            updated = await self._get_collection().find_one_and_update(
                {"_id": blog.id},
                {"$set": update_dict},
                return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            raise ConflictError("Blog with this slug already exists")
        if updated is None:
            raise NotFoundError("Blog not found", resource="blog", resource_id=blog_id)

        logger.info(f"Updated blog post {blog.id}")
        return BlogInDB(**updated)

    async def deactivate_blog(self, blog_id: Any) -> BlogInDB:
        """Soft delete by clearing ``is_active``."""
        return await self.update_blog(blog_id, BlogUpdate(is_active=False))
