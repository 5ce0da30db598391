"""
MongoDB collections and indexes setup.
"""
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import IndexModel, ASCENDING, DESCENDING
import logging

logger = logging.getLogger(__name__)


class Collections:
    """MongoDB collection names."""
    USERS = "users"
    MANUSCRIPTS = "manuscripts"
    REVIEWS = "reviews"
    ISSUES = "issues"
    EDITORIAL_BOARD = "editorial_board"
    BLOGS = "blogs"
    CONTACT_MESSAGES = "contact_messages"


INDEXES = {
    Collections.USERS: [
        IndexModel([("email", ASCENDING)], unique=True, name="email_unique"),
        IndexModel([("status", ASCENDING)], name="status_asc"),
        IndexModel([("roles", ASCENDING)], name="roles_asc"),
        IndexModel([("created_at", DESCENDING)], name="created_at_desc"),
    ],
    Collections.MANUSCRIPTS: [
        IndexModel([("author_id", ASCENDING)], name="author_id_asc"),
        IndexModel([("status", ASCENDING)], name="status_asc"),
        IndexModel([("author_id", ASCENDING), ("created_at", DESCENDING)], name="author_created_at"),
        IndexModel([("type", ASCENDING)], name="type_asc"),
    ],
    Collections.REVIEWS: [
        IndexModel([("manuscript_id", ASCENDING)], name="manuscript_id_asc"),
        IndexModel([("reviewer_id", ASCENDING)], name="reviewer_id_asc"),
    ],
    Collections.ISSUES: [
        IndexModel([("volume", ASCENDING), ("issue_number", ASCENDING)], unique=True, name="volume_issue_unique"),
        IndexModel([("slug", ASCENDING)], unique=True, name="slug_unique"),
        IndexModel([("status", ASCENDING), ("publication_date", DESCENDING)], name="status_publication_date"),
    ],
    Collections.EDITORIAL_BOARD: [
        IndexModel([("email", ASCENDING)], unique=True, name="email_unique"),
        IndexModel([("is_active", ASCENDING), ("created_at", DESCENDING)], name="active_created_at"),
    ],
    Collections.BLOGS: [
        IndexModel([("slug", ASCENDING)], unique=True, sparse=True, name="slug_unique"),
        IndexModel([("is_active", ASCENDING), ("created_at", DESCENDING)], name="active_created_at"),
    ],
    Collections.CONTACT_MESSAGES: [
        IndexModel([("is_read", ASCENDING), ("created_at", DESCENDING)], name="read_created_at"),
    ],
}


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create database indexes, including the uniqueness constraints."""
    try:
        for collection_name, indexes in INDEXES.items():
            await db[collection_name].create_indexes(indexes)
            logger.info(f"Created indexes for {collection_name} collection")
    except Exception as e:
        logger.error(f"Failed to create database indexes: {e}")
        raise


async def setup_collections(db: AsyncIOMotorDatabase) -> None:
    """Setup collections and indexes."""
    logger.info("Setting up database collections and indexes...")

    await create_indexes(db)

    # Collections are created automatically when the first document is inserted
    collections = await db.list_collection_names()
    logger.info(f"Available collections: {collections}")

    logger.info("Database setup completed successfully")

