"""
Main FastAPI application.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from journal_portal.api import api_router
from journal_portal.core.api_docs import API_DESCRIPTION, API_TITLE, API_VERSION, get_api_info, setup_api_docs
from journal_portal.core.collections import setup_collections
from journal_portal.core.config import settings
from journal_portal.core.database import MongoDatabase, get_database
from journal_portal.core.logging_config import setup_logging
from journal_portal.core.middleware import setup_exception_handlers, setup_middleware
from journal_portal.services.storage_service import S3StorageService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()

    mongo = MongoDatabase(settings)
    await setup_collections(await mongo.connect())
    app.state.mongo = mongo
    app.state.storage = S3StorageService(settings)
    logger.info(f"{API_TITLE} started in {settings.environment} mode")

    yield

    await mongo.close()


def create_app() -> FastAPI:
    """Build the application with middleware, error handlers and routes."""
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        debug=settings.debug,
        lifespan=lifespan
    )

    # Credentialed requests carry the auth cookie, so origins are explicit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_middleware(app)
    setup_exception_handlers(app)
    setup_api_docs(app)

    app.include_router(api_router, prefix="/api")

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {**get_api_info(), "status": "running"}

    @app.get("/health", tags=["Health Check"])
    async def health_check():
        """Liveness check."""
        return {"status": "healthy", "message": f"{API_TITLE} is running"}

    @app.get("/health/detailed", tags=["Health Check"])
    async def detailed_health_check(db: AsyncIOMotorDatabase = Depends(get_database)):
        """Health check including a database ping."""
        try:
            await db.command("ping")
            db_status = "healthy"
        except PyMongoError as e:
            logger.error(f"Database health check failed: {e}")
            db_status = "unhealthy"

        return {
            "overall_status": "healthy" if db_status == "healthy" else "unhealthy",
            "checks": {
                "database": {"status": db_status},
                "api": {"status": "healthy"}
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "journal_portal.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
