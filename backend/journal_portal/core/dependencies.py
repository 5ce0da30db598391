"""
FastAPI dependencies for authentication, authorization and services.
"""
import logging
from typing import Callable, List, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from motor.motor_asyncio import AsyncIOMotorDatabase

from journal_portal.core.config import settings
from journal_portal.core.database import get_database
from journal_portal.core.logging_config import security_logger, set_request_context
from journal_portal.core.security import verify_token
from journal_portal.models import UserInDB, UserStatus
from journal_portal.models.user import ADMIN_ROLES, STAFF_ROLES
from journal_portal.services.blog_service import BlogService
from journal_portal.services.contact_message_service import ContactMessageService
from journal_portal.services.editorial_board_service import EditorialBoardService
from journal_portal.services.issue_service import IssueService
from journal_portal.services.manuscript_service import ManuscriptService
from journal_portal.services.review_service import ReviewService
from journal_portal.services.user_service import UserService

logger = logging.getLogger(__name__)

# Cookie is checked first, so a missing header is not an error here
security = HTTPBearer(auto_error=False)


def get_user_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> UserService:
    return UserService(db)


def get_manuscript_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> ManuscriptService:
    return ManuscriptService(db)


def get_review_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> ReviewService:
    return ReviewService(db)


def get_issue_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> IssueService:
    return IssueService(db)


def get_editorial_board_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> EditorialBoardService:
    return EditorialBoardService(db)


def get_blog_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> BlogService:
    return BlogService(db)


def get_contact_message_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> ContactMessageService:
    return ContactMessageService(db)


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Token from the auth cookie, falling back to the Bearer header."""
    token = request.cookies.get(settings.access_token_cookie_name)
    if token:
        return token
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    user_service: UserService = Depends(get_user_service)
) -> UserInDB:
    """
    Get current authenticated user from the JWT.

    The user is reloaded on every request so status and role changes take
    effect immediately.

    Raises:
        HTTPException: 401 if the token is missing or invalid, the user no
            longer exists, or the account is not approved
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = extract_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(token)
    if payload is None:
        logger.warning("Invalid JWT token provided")
        raise credentials_exception

    user_id: Optional[str] = payload.get("sub")
    if user_id is None:
        logger.warning("JWT token missing user ID (sub claim)")
        raise credentials_exception

    user = await user_service.get_user_by_id(user_id)
    if user is None:
        logger.warning(f"User not found for ID: {user_id}")
        raise credentials_exception

    if user.status != UserStatus.APPROVED.value:
        logger.warning(f"Unapproved user attempted access: {user.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is not approved",
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_request_context(user_id=str(user.id))
    return user


def require_roles(*roles: str) -> Callable:
    """
    Dependency factory allowing users holding any of ``roles``.

    Usage:
        current_user: UserInDB = Depends(require_roles(*STAFF_ROLES))
    """
    allowed: List[str] = [getattr(r, "value", r) for r in roles]

    async def role_checker(
        request: Request,
        current_user: UserInDB = Depends(get_current_user)
    ) -> UserInDB:
        if not current_user.has_any_role(*allowed):
            security_logger.log_unauthorized_access(
                user_id=str(current_user.id),
                resource=request.url.path,
                action=request.method,
                ip_address=request.client.host if request.client else "unknown"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action"
            )
        return current_user

    return role_checker


require_staff = require_roles(*STAFF_ROLES)
require_admin = require_roles(*ADMIN_ROLES)
