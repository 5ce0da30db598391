"""
Database connection and configuration.
"""
import logging

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from journal_portal.core.config import Settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """Database connection manager.

    One instance is opened in the application lifespan and kept on
    ``app.state.mongo``; request handlers reach it through ``get_database``.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client: AsyncIOMotorClient = None
        self.database: AsyncIOMotorDatabase = None

    async def connect(self) -> AsyncIOMotorDatabase:
        """Create database connection and verify it with a ping."""
        logger.info(f"Connecting to MongoDB at {self.settings.mongodb_host}")
        self.client = AsyncIOMotorClient(self.settings.mongodb_url)
        self.database = self.client[self.settings.mongodb_database]

        try:
            await self.client.admin.command('ping')
            logger.info("Connected to MongoDB successfully")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

        return self.database

    async def close(self) -> None:
        """Close database connection."""
        logger.info("Closing MongoDB connection")
        if self.client:
            self.client.close()
            self.client = None
            self.database = None
        logger.info("MongoDB connection closed")


def get_database(request: Request) -> AsyncIOMotorDatabase:
    """Get the database opened for this application."""
    return request.app.state.mongo.database
