"""
API tests for authentication, profiles and user administration.
"""
import pytest
from fastapi import status
from httpx import AsyncClient

from journal_portal.core.config import settings
from journal_portal.core.security import verify_token
from journal_portal.models import UserStatus

pytestmark = pytest.mark.asyncio


class TestRegisterAndLogin:

    async def test_register_creates_pending_user(self, async_client: AsyncClient):
        response = await async_client.post("/api/auth/register", json={
            "email": "new.author@example.org",
            "name": "New Author",
            "password": "s3cret-pass",
            "roles": ["author", "admin"],
        })

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["status"] is True
        user = body["data"]
        assert user["status"] == UserStatus.PENDING.value
        assert user["roles"] == ["author"]
        assert "password_hash" not in user
        assert "id" in user

    async def test_register_duplicate_email(self, async_client: AsyncClient, author):
        response = await async_client.post("/api/auth/register", json={
            "email": author.email, "name": "Copy Cat", "password": "s3cret-pass",
        })

        assert response.status_code == status.HTTP_409_CONFLICT
        body = response.json()
        assert body["status"] is False
        assert body["error_code"] == "CONFLICT"

    async def test_register_invalid_email(self, async_client: AsyncClient):
        response = await async_client.post("/api/auth/register", json={
            "email": "not-an-email", "name": "X", "password": "s3cret-pass",
        })
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["status"] is False

    async def test_login_sets_cookie_and_returns_token(self, async_client: AsyncClient, editor, password):
        response = await async_client.post("/api/auth/login", json={"email": editor.email, "password": password})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == settings.access_token_expire_minutes * 60
        assert data["user"] == {
            "email": editor.email, "name": editor.name, "roles": ["editor"], "expertise": None
        }

        claims = verify_token(data["access_token"])
        assert claims["sub"] == str(editor.id)
        assert claims["roles"] == ["editor"]

        set_cookie = response.headers["set-cookie"]
        assert f"{settings.access_token_cookie_name}=" in set_cookie
        assert "httponly" in set_cookie.lower()

    async def test_login_pending_account(self, async_client: AsyncClient, user_factory, password):
        pending = await user_factory(status=UserStatus.PENDING)

        response = await async_client.post("/api/auth/login", json={"email": pending.email, "password": password})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "pending" in response.json()["message"].lower()

    async def test_login_wrong_password(self, async_client: AsyncClient, author):
        response = await async_client.post("/api/auth/login", json={"email": author.email, "password": "wrong!!"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Incorrect email or password"


class TestTokens:

    async def test_profile_requires_token(self, async_client: AsyncClient):
        response = await async_client.get("/api/auth/profile")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["status"] is False

    async def test_profile_with_bearer(self, async_client: AsyncClient, author, author_headers):
        response = await async_client.get("/api/auth/profile", headers=author_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["email"] == author.email

    async def test_cookie_is_accepted(self, async_client: AsyncClient, author, author_headers):
        token = author_headers["Authorization"].split(" ", 1)[1]
        async_client.cookies.set(settings.access_token_cookie_name, token)

        response = await async_client.get("/api/auth/profile")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["id"] == str(author.id)

    async def test_access_token_echoes_cookie(self, async_client: AsyncClient, author_headers):
        token = author_headers["Authorization"].split(" ", 1)[1]
        async_client.cookies.set(settings.access_token_cookie_name, token)

        response = await async_client.get("/api/auth/access-token")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["access_token"] == token

    async def test_access_token_without_cookie(self, async_client: AsyncClient):
        response = await async_client.get("/api/auth/access-token")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_invalid_token(self, async_client: AsyncClient):
        response = await async_client.get("/api/auth/profile", headers={"Authorization": "Bearer junk"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_rejected_user_token_stops_working(self, async_client: AsyncClient, author, author_headers, db):
        await db["users"].update_one({"_id": author.id}, {"$set": {"status": UserStatus.REJECTED.value}})

        response = await async_client.get("/api/auth/profile", headers=author_headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_logout_clears_cookie(self, async_client: AsyncClient, author_headers):
        response = await async_client.post("/api/auth/logout", headers=author_headers)
        assert response.status_code == status.HTTP_200_OK
        assert settings.access_token_cookie_name in response.headers["set-cookie"]


class TestProfile:

    async def test_update_settings(self, async_client: AsyncClient, author_headers):
        response = await async_client.put("/api/auth/settings", headers=author_headers, json={
            "phone": "+1 555 0100",
            "expertise": "Soil ecology",
            "unavailable_dates": {"ranges": "2024-07-01 to 2024-07-14", "note": "Field work"},
        })

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["expertise"] == "Soil ecology"
        assert data["unavailable_dates"]["note"] == "Field work"

    async def test_users_profile_round_trip(self, async_client: AsyncClient, author_headers):
        response = await async_client.put("/api/users/profile", headers=author_headers, json={"name": "Ada L."})
        assert response.json()["data"]["name"] == "Ada L."

        response = await async_client.get("/api/users/profile", headers=author_headers)
        assert response.json()["data"]["name"] == "Ada L."

    async def test_delete_own_account(self, async_client: AsyncClient, author, author_headers, db):
        response = await async_client.delete("/api/users/profile", headers=author_headers)

        assert response.status_code == status.HTTP_200_OK
        assert await db["users"].find_one({"_id": author.id}) is None


class TestAdministration:

    async def test_author_cannot_list_users(self, async_client: AsyncClient, author_headers):
        response = await async_client.get("/api/users", headers=author_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_editor_is_not_admin(self, async_client: AsyncClient, editor_headers):
        response = await async_client.get("/api/users", headers=editor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_admin_lists_with_meta(self, async_client: AsyncClient, admin_headers, user_factory):
        for _ in range(3):
            await user_factory(["reviewer"], status=UserStatus.PENDING)

        response = await async_client.get(
            "/api/users", headers=admin_headers, params={"status": "PENDING", "limit": 2}
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert len(body["data"]) == 2
        assert body["meta"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}

    async def test_admin_approves_and_sets_roles(self, async_client: AsyncClient, admin_headers, user_factory):
        pending = await user_factory(["author"], status=UserStatus.PENDING)

        response = await async_client.patch(
            f"/api/users/{pending.id}/status", headers=admin_headers, json={"status": "APPROVED"}
        )
        assert response.json()["data"]["status"] == "APPROVED"

        response = await async_client.patch(
            f"/api/users/{pending.id}/roles", headers=admin_headers, json={"roles": ["reviewer", "author"]}
        )
        assert response.json()["data"]["roles"] == ["reviewer", "author"]

    async def test_admin_get_unknown_user(self, async_client: AsyncClient, admin_headers):
        response = await async_client.get("/api/users/64b7f0f0f0f0f0f0f0f0f0f0", headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "User not found"
