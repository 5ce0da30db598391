"""
API tests for the editorial board, blog and contact form endpoints.
"""
import pytest
from fastapi import status
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestEditorialBoard:

    async def test_member_lifecycle(self, async_client: AsyncClient, editor_headers):
        response = await async_client.post("/api/editorial-board/create", headers=editor_headers, json={
            "type": "Editor-in-Chief", "post": "Chief Editor", "name": "  Rosalind Franklin ",
            "email": "R.Franklin@Example.org", "address": "King's College London",
        })
        assert response.status_code == status.HTTP_201_CREATED
        member = response.json()["data"]
        assert member["name"] == "Rosalind Franklin"
        assert member["email"] == "r.franklin@example.org"

        response = await async_client.put(f"/api/editorial-board/update/{member['id']}", headers=editor_headers,
                                          json={"post": "Founding Editor"})
        assert response.json()["data"]["post"] == "Founding Editor"

        response = await async_client.delete(f"/api/editorial-board/{member['id']}", headers=editor_headers)
        assert response.status_code == status.HTTP_200_OK

        response = await async_client.get("/api/editorial-board", params={"is_active": True})
        assert response.json()["data"] == []

        response = await async_client.get(f"/api/editorial-board/{member['id']}")
        assert response.json()["data"]["is_active"] is False

    async def test_duplicate_email(self, async_client: AsyncClient, editor_headers):
        payload = {"type": "Associate", "post": "Editor", "name": "A", "email": "board@example.org"}
        await async_client.post("/api/editorial-board/create", headers=editor_headers, json=payload)

        response = await async_client.post("/api/editorial-board/create", headers=editor_headers, json=payload)
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["message"] == "Email already exists"

    async def test_writes_require_staff(self, async_client: AsyncClient, author_headers):
        response = await async_client.post("/api/editorial-board/create", headers=author_headers, json={
            "type": "Associate", "post": "Editor", "name": "A", "email": "a@example.org"
        })
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_unknown_member(self, async_client: AsyncClient):
        response = await async_client.get("/api/editorial-board/64b7f0f0f0f0f0f0f0f0f0f0")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Editorial Board member not found"


class TestBlog:

    async def test_post_lifecycle(self, async_client: AsyncClient, editor_headers):
        response = await async_client.post("/api/blog", headers=editor_headers, json={
            "title": "Call for Papers: Climate 2025",
            "description": "Submissions open in March.",
            "category": "News",
            "tags": ["cfp"],
        })
        assert response.status_code == status.HTTP_201_CREATED
        post = response.json()["data"]
        assert post["slug"] == "call-for-papers-climate-2025"
        assert post["description"] == ["Submissions open in March."]

        response = await async_client.get(f"/api/blog/slug/{post['slug']}")
        assert response.json()["data"]["id"] == post["id"]

        response = await async_client.put(f"/api/blog/{post['id']}", headers=editor_headers,
                                          json={"category": "Announcements"})
        assert response.json()["data"]["category"] == "Announcements"

        response = await async_client.get("/api/blog", params={"category": "Announcements"})
        assert len(response.json()["data"]) == 1

        await async_client.delete(f"/api/blog/{post['id']}", headers=editor_headers)
        response = await async_client.get("/api/blog", params={"is_active": True})
        assert response.json()["data"] == []

    async def test_duplicate_slug(self, async_client: AsyncClient, editor_headers):
        payload = {"title": "Welcome", "description": ["Hello"], "category": "News"}
        await async_client.post("/api/blog", headers=editor_headers, json=payload)

        response = await async_client.post("/api/blog", headers=editor_headers, json=payload)
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["message"] == "Blog with this slug already exists"

    async def test_missing_post(self, async_client: AsyncClient):
        response = await async_client.get("/api/blog/slug/nothing-here")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Blog not found"


class TestContactMessages:

    async def test_public_create_and_admin_listing(self, async_client: AsyncClient, admin_headers):
        response = await async_client.post("/api/contact-messages", json={
            "name": "Visitor", "email": "Visitor@Example.org", "message": "How do I submit?"
        })
        assert response.status_code == status.HTTP_201_CREATED
        message = response.json()["data"]
        assert message["email"] == "visitor@example.org"
        assert message["is_read"] is False

        response = await async_client.get("/api/contact-messages", headers=admin_headers)
        body = response.json()
        assert body["meta"]["total"] == 1
        assert body["meta"]["limit"] == 20

        response = await async_client.patch(f"/api/contact-messages/{message['id']}/read", headers=admin_headers)
        assert response.json()["data"]["is_read"] is True

        response = await async_client.get("/api/contact-messages", headers=admin_headers,
                                          params={"is_read": False})
        assert response.json()["data"] == []

    async def test_missing_fields(self, async_client: AsyncClient):
        response = await async_client.post("/api/contact-messages", json={"name": "Visitor"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Name, email, and message are required"

    async def test_listing_requires_admin(self, async_client: AsyncClient, editor_headers):
        response = await async_client.get("/api/contact-messages", headers=editor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
