"""
User profile and administration API endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from journal_portal.core.dependencies import get_current_user, get_user_service, require_admin
from journal_portal.core.error_handling import NotFoundError
from journal_portal.core.response_formatter import ResponseFormatter, response_403, response_404
from journal_portal.models import (
    UserInDB,
    UserRolesUpdate,
    UserStatus,
    UserStatusUpdate,
    UserUpdate,
)
from journal_portal.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["User Management"])


@router.get("/profile", summary="Get user profile")
async def get_user_profile(
    current_user: UserInDB = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    return ResponseFormatter.success(data=user_service.user_to_response(current_user))


@router.put("/profile", summary="Update user profile")
async def update_user_profile(
    profile_data: UserUpdate,
    current_user: UserInDB = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    user = await user_service.update_profile(current_user.id, profile_data)
    return ResponseFormatter.success(
        data=user_service.user_to_response(user),
        message="Profile updated successfully"
    )


@router.delete("/profile", summary="Delete own account")
async def delete_user_profile(
    current_user: UserInDB = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    await user_service.delete_user(current_user.id)
    logger.info(f"User deleted own account: {current_user.email}")
    return ResponseFormatter.success(message="Account deleted successfully")


@router.get(
    "",
    summary="List users",
    description="Filter by status, role and free text over name and email",
    responses={**response_403()}
)
async def list_users(
    status_filter: Optional[UserStatus] = Query(None, alias="status", description="Account status"),
    role: Optional[str] = Query(None, description="Role tag"),
    q: Optional[str] = Query(None, description="Search name or email"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserInDB = Depends(require_admin),
    user_service: UserService = Depends(get_user_service)
):
    users, total = await user_service.list_users(
        status=status_filter.value if status_filter else None,
        role=role,
        q=q,
        page=page,
        limit=limit
    )
    return ResponseFormatter.paginated(
        items=[user_service.user_to_response(u) for u in users],
        total=total,
        page=page,
        limit=limit
    )


@router.get("/{user_id}", summary="Get user", responses={**response_403(), **response_404()})
async def get_user(
    user_id: str,
    current_user: UserInDB = Depends(require_admin),
    user_service: UserService = Depends(get_user_service)
):
    user = await user_service.get_user_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found", resource="user", resource_id=user_id)
    return ResponseFormatter.success(data=user_service.user_to_response(user))


@router.patch("/{user_id}/status", summary="Approve or reject a user", responses={**response_404()})
async def update_user_status(
    user_id: str,
    status_data: UserStatusUpdate,
    current_user: UserInDB = Depends(require_admin),
    user_service: UserService = Depends(get_user_service)
):
    user = await user_service.set_status(user_id, status_data.status)
    if user is None:
        raise NotFoundError("User not found", resource="user", resource_id=user_id)
    logger.info(f"User {user_id} set to {user.status} by {current_user.email}")
    return ResponseFormatter.success(
        data=user_service.user_to_response(user),
        message=f"User status updated to {user.status}"
    )


@router.patch("/{user_id}/roles", summary="Replace a user's roles", responses={**response_404()})
async def update_user_roles(
    user_id: str,
    roles_data: UserRolesUpdate,
    current_user: UserInDB = Depends(require_admin),
    user_service: UserService = Depends(get_user_service)
):
    user = await user_service.set_roles(user_id, roles_data.roles)
    if user is None:
        raise NotFoundError("User not found", resource="user", resource_id=user_id)
    logger.info(f"User {user_id} roles set to {user.roles} by {current_user.email}")
    return ResponseFormatter.success(data=user_service.user_to_response(user), message="User roles updated")
