"""
Authentication API endpoints.
"""
import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials

from journal_portal.core.config import settings
from journal_portal.core.dependencies import extract_token, get_current_user, get_user_service, security
from journal_portal.core.error_handling import AuthenticationError
from journal_portal.core.logging_config import security_logger
from journal_portal.core.response_formatter import ResponseFormatter, response_401, response_409
from journal_portal.core.security import create_access_token, verify_token
from journal_portal.models import (
    TokenResponse,
    UserCreate,
    UserInDB,
    UserLogin,
    UserUpdate,
)
from journal_portal.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    responses={**response_409("Email already registered")}
)
async def register(user_data: UserCreate, user_service: UserService = Depends(get_user_service)):
    """
    Register a new user account.

    The account starts pending and must be approved by a publisher or admin
    before the user can log in.
    """
    user = await user_service.create_user(user_data)
    logger.info(f"User registered successfully: {user.email}")
    return ResponseFormatter.created(
        data=user_service.user_to_response(user),
        message="User registered successfully. Your account is pending approval."
    )


@router.post(
    "/login",
    summary="User login",
    description="Authenticate and receive a JWT, also set as an HTTP-only cookie",
    responses={**response_401("Invalid credentials or account not approved")}
)
async def login(
    request: Request,
    user_credentials: UserLogin,
    user_service: UserService = Depends(get_user_service)
):
    try:
        user = await user_service.authenticate_user(user_credentials.email, user_credentials.password)
    except AuthenticationError as e:
        security_logger.log_authentication_failure(user_credentials.email, _client_ip(request), e.message)
        raise

    if not user:
        security_logger.log_authentication_failure(
            user_credentials.email, _client_ip(request), "invalid_credentials"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expires_in = settings.access_token_expire_minutes * 60
    access_token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "name": user.name, "roles": list(user.roles)},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes)
    )

    token = TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=expires_in,
        user={"email": user.email, "name": user.name, "roles": list(user.roles), "expertise": user.expertise}
    )
    response = ResponseFormatter.success(data=token, message="Login successful")
    response.set_cookie(
        key=settings.access_token_cookie_name,
        value=access_token,
        max_age=expires_in,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    logger.info(f"User logged in successfully: {user.email}")
    return response


@router.post("/logout", summary="User logout")
async def logout(current_user: UserInDB = Depends(get_current_user)):
    """Clear the auth cookie. Bearer tokens stay valid until they expire."""
    response = ResponseFormatter.success(message="Logged out successfully")
    response.delete_cookie(key=settings.access_token_cookie_name)
    logger.info(f"User logged out: {current_user.email}")
    return response


@router.get(
    "/access-token",
    summary="Current access token",
    description="Return the cookie token while it is still valid",
    responses={**response_401("No valid token")}
)
async def get_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
):
    token = extract_token(request, credentials)
    if not token or verify_token(token) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No valid access token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return ResponseFormatter.success(data={"access_token": token, "token_type": "bearer"})


@router.get("/profile", summary="Get current user")
async def get_profile(
    current_user: UserInDB = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    return ResponseFormatter.success(data=user_service.user_to_response(current_user))


@router.put("/settings", summary="Update account settings")
async def update_settings(
    user_data: UserUpdate,
    current_user: UserInDB = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Update profile fields and optionally the password."""
    user = await user_service.update_profile(current_user.id, user_data)
    return ResponseFormatter.success(
        data=user_service.user_to_response(user),
        message="Settings updated successfully"
    )
