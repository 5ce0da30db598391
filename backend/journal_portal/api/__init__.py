"""
API package initialization and router organization.
"""
from fastapi import APIRouter

from .auth import router as auth_router
from .blog import router as blog_router
from .contact_messages import router as contact_messages_router
from .editorial_board import router as editorial_board_router
from .issues import router as issues_router
from .manuscripts import router as manuscripts_router
from .reviews import router as reviews_router
from .users import router as users_router

# Mounted under /api by the application
api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(manuscripts_router)
api_router.include_router(reviews_router)
api_router.include_router(issues_router)
api_router.include_router(editorial_board_router)
api_router.include_router(blog_router)
api_router.include_router(contact_messages_router)

__all__ = ["api_router"]
