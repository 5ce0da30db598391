"""
User service for database operations.
"""
import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from journal_portal.core.collections import Collections
from journal_portal.core.error_handling import AuthenticationError, ConflictError, NotFoundError
from journal_portal.core.security import get_password_hash, verify_password
from journal_portal.models import (
    UserCreate,
    UserInDB,
    UserResponse,
    UserRole,
    UserStatus,
    UserSummary,
    UserUpdate,
    to_object_id,
)

logger = logging.getLogger(__name__)


class UserService:
    """Service for user database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    def _get_collection(self):
        """Get the users collection."""
        return self.db[Collections.USERS]

    async def create_user(self, user_data: UserCreate, allow_admin: bool = False) -> UserInDB:
        """
        Register a new user.

        Accounts start PENDING and cannot log in until approved. The admin role
        can only be granted through role administration unless ``allow_admin``.
        """
        existing_user = await self.get_user_by_email(user_data.email)
        if existing_user:
            raise ConflictError("User with this email already exists", details={"field": "email"})

        roles = list(user_data.roles)
        if not allow_admin and UserRole.ADMIN.value in roles:
            logger.warning(f"Dropping self-assigned admin role for {user_data.email}")
            roles = [r for r in roles if r != UserRole.ADMIN.value] or [UserRole.AUTHOR.value]

        user_dict = user_data.dict(exclude={"password"})
        user_dict.update({
            "roles": roles,
            "password_hash": get_password_hash(user_data.password),
            "status": UserStatus.PENDING.value,
            "created_at": datetime.utcnow(),
            "updated_at": None,
        })

        collection = self._get_collection()
        try:
            result = await collection.insert_one(user_dict)
        except DuplicateKeyError:
            raise ConflictError("User with this email already exists", details={"field": "email"})
        user_dict["_id"] = result.inserted_id

        logger.info(f"Created user: {user_data.email}")
        return UserInDB(**user_dict)

    async def get_user_by_id(self, user_id: Any) -> Optional[UserInDB]:
        """Get user by ID; an invalid id reads as not found."""
        object_id = to_object_id(user_id)
        if object_id is None:
            return None
        user_doc = await self._get_collection().find_one({"_id": object_id})
        return UserInDB(**user_doc) if user_doc else None

    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        """Get user by email."""
        if not email:
            return None
        user_doc = await self._get_collection().find_one({"email": email.strip().lower()})
        return UserInDB(**user_doc) if user_doc else None

    async def authenticate_user(self, email: str, password: str) -> Optional[UserInDB]:
        """
        Check credentials.

        Returns None for an unknown email or a wrong password. A correct
        password on an account that is not APPROVED raises AuthenticationError
        so the caller can tell the user why.
        """
        user = await self.get_user_by_email(email)

        if not user:
            logger.warning(f"Authentication failed: User not found for email {email}")
            return None

        if not verify_password(password, user.password_hash):
            logger.warning(f"Authentication failed: Invalid password for email {email}")
            return None

        if user.status != UserStatus.APPROVED.value:
            logger.warning(f"Authentication failed: User {email} is {user.status}")
            if user.status == UserStatus.REJECTED.value:
                raise AuthenticationError("Account has been rejected")
            raise AuthenticationError("Account is pending approval")

        logger.info(f"User authenticated successfully: {email}")
        return user

    async def update_profile(self, user_id: Any, user_data: UserUpdate) -> UserInDB:
        """Update the caller's own profile fields."""
        object_id = to_object_id(user_id)
        if object_id is None:
            raise NotFoundError("User not found", resource="user", resource_id=user_id)

        update_dict: Dict[str, Any] = user_data.dict(exclude_unset=True, exclude={"password"})
        if user_data.password is not None:
            update_dict["password_hash"] = get_password_hash(user_data.password)
        update_dict["updated_at"] = datetime.utcnow()

        result = await self._get_collection().update_one({"_id": object_id}, {"$set": update_dict})
        if result.matched_count == 0:
            raise NotFoundError("User not found", resource="user", resource_id=user_id)

        logger.info(f"Updated profile for user {user_id}")
        return await self.get_user_by_id(object_id)

    async def delete_user(self, user_id: Any) -> bool:
        """Delete a user account."""
        object_id = to_object_id(user_id)
        if object_id is None:
            return False
        result = await self._get_collection().delete_one({"_id": object_id})
        if result.deleted_count:
            logger.info(f"User deleted: {user_id}")
        return result.deleted_count > 0

    async def list_users(
        self,
        status: Optional[str] = None,
        role: Optional[str] = None,
        q: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[UserInDB], int]:
        """List users for administration, newest first."""
        query: Dict[str, Any] = {}
        if status:
            query["status"] = status.upper()
        if role:
            query["roles"] = role.lower()
        if q:
            pattern = {"$regex": re.escape(q.strip()), "$options": "i"}
            query["$or"] = [{"name": pattern}, {"email": pattern}]

        page = max(page, 1)
        limit = min(max(limit, 1), 100)

        collection = self._get_collection()
        total = await collection.count_documents(query)
        cursor = collection.find(query).sort("created_at", DESCENDING).skip((page - 1) * limit).limit(limit)
        users = [UserInDB(**doc) async for doc in cursor]
        return users, total

    async def set_status(self, user_id: Any, status: UserStatus) -> Optional[UserInDB]:
        """Approve or reject an account."""
        return await self._set_fields(user_id, {"status": UserStatus(status).value})

    async def set_roles(self, user_id: Any, roles: List[str]) -> Optional[UserInDB]:
        """Replace the user's role set."""
        return await self._set_fields(user_id, {"roles": list(roles)})

    async def _set_fields(self, user_id: Any, fields: Dict[str, Any]) -> Optional[UserInDB]:
        object_id = to_object_id(user_id)
        if object_id is None:
            return None
        fields["updated_at"] = datetime.utcnow()
        result = await self._get_collection().update_one({"_id": object_id}, {"$set": fields})
        if result.matched_count == 0:
            return None
        logger.info(f"Updated user {user_id}: {', '.join(k for k in fields if k != 'updated_at')}")
        return await self.get_user_by_id(object_id)

    async def get_summaries(self, user_ids: List[Any]) -> Dict[Any, UserSummary]:
        """Name and email for each id, keyed by ObjectId."""
        object_ids = [oid for oid in (to_object_id(u) for u in user_ids) if oid is not None]
        if not object_ids:
            return {}
        cursor = self._get_collection().find({"_id": {"$in": object_ids}}, {"name": 1, "email": 1})
        return {
            doc["_id"]: UserSummary(id=doc["_id"], name=doc.get("name", ""), email=doc.get("email"))
            async for doc in cursor
        }

    def user_to_response(self, user: UserInDB) -> UserResponse:
        """Convert UserInDB to the response model without the password hash."""
        return UserResponse(**user.dict(exclude={"password_hash"}))
