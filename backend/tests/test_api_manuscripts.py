"""
API tests for manuscript submission, search and editorial status changes.
"""
import json

import pytest
from fastapi import status
from httpx import AsyncClient

from journal_portal.models import ManuscriptStatus

pytestmark = pytest.mark.asyncio


def _form(**overrides):
    data = {
        "title": "Rainfall variability and yields",
        "abstract": "A ten year field study.",
        "type": "Research Article",
        "keywords": "rainfall, maize , ",
        "item_title[]": ["Manuscript", "Figures", "Cover letter"],
        "item_description[]": ["Main text", "All figures", ""],
    }
    data.update(overrides)
    return data


def _uploads(pdf_bytes, page_counts=(2, 3)):
    files = [("files", (f"part_{idx}.pdf", pdf_bytes(pages), "application/pdf"))
             for idx, pages in enumerate(page_counts)]
    files.append(("files", ("cover_letter.docx", b"not a pdf", "application/octet-stream")))
    return files


class TestCreate:

    async def test_create_uploads_and_counts_pages(self, async_client: AsyncClient, author, author_headers,
                                                   pdf_bytes, mock_storage):
        response = await async_client.post(
            "/api/manuscripts/create", headers=author_headers,
            data=_form(), files=_uploads(pdf_bytes, (2, 3))
        )

        assert response.status_code == status.HTTP_201_CREATED
        manuscript = response.json()["data"]
        assert manuscript["status"] == ManuscriptStatus.DRAFT.value
        assert manuscript["total_page_count"] == 5
        assert manuscript["keywords"] == ["rainfall", "maize"]
        assert manuscript["author_id"] == str(author.id)
        assert [f["page_count"] for f in manuscript["files"]] == [2, 3, 0]
        assert manuscript["files"][1]["item_title"] == "Figures"
        assert manuscript["files"][0]["file_url"].startswith("https://test-bucket.s3.amazonaws.com/manuscripts/")
        assert manuscript["author_list"]["fname"] == "Ada"
        assert manuscript["author_list"]["lname"] == "Lovelace"
        assert mock_storage.upload_bytes.call_count == 3

    async def test_cover_image_is_stored(self, async_client: AsyncClient, author_headers, pdf_bytes, mock_storage):
        files = _uploads(pdf_bytes) + [("image", ("cover.png", b"\x89PNG....", "image/png"))]

        response = await async_client.post(
            "/api/manuscripts/create", headers=author_headers, data=_form(), files=files
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert "/manuscripts/images/" in response.json()["data"]["image_url"]
        assert mock_storage.upload_bytes.call_count == 4

    async def test_too_few_files_uploads_nothing(self, async_client: AsyncClient, author_headers,
                                                 pdf_bytes, mock_storage, db):
        files = [("files", (f"f{i}.pdf", pdf_bytes(1), "application/pdf")) for i in range(2)]

        response = await async_client.post(
            "/api/manuscripts/create", headers=author_headers, data=_form(), files=files
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["status"] is False
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["message"] == "At least 3 files are required"
        mock_storage.upload_bytes.assert_not_called()
        assert await db["manuscripts"].count_documents({}) == 0

    async def test_too_many_files(self, async_client: AsyncClient, author_headers, pdf_bytes, mock_storage):
        files = [("files", (f"f{i}.pdf", pdf_bytes(1), "application/pdf")) for i in range(11)]

        response = await async_client.post(
            "/api/manuscripts/create", headers=author_headers, data=_form(), files=files
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        mock_storage.upload_bytes.assert_not_called()

    async def test_non_initial_status_uploads_nothing(self, async_client: AsyncClient, author_headers,
                                                      pdf_bytes, mock_storage, db):
        files = _uploads(pdf_bytes) + [("image", ("cover.png", b"\x89PNG....", "image/png"))]

        response = await async_client.post(
            "/api/manuscripts/create", headers=author_headers, data=_form(status="ACCEPTED"), files=files
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "New manuscripts must start as DRAFT or SUBMITTED"
        mock_storage.upload_bytes.assert_not_called()
        assert await db["manuscripts"].count_documents({}) == 0

    async def test_explicit_author_list(self, async_client: AsyncClient, author_headers, pdf_bytes):
        author_list = {"fname": "Grace", "lname": "Hopper", "email": "grace@example.org",
                       "institution": "Yale", "contributor_role": "Corresponding"}

        response = await async_client.post(
            "/api/manuscripts/create", headers=author_headers,
            data=_form(author_list=json.dumps(author_list), status="SUBMITTED"), files=_uploads(pdf_bytes)
        )

        data = response.json()["data"]
        assert data["author_list"]["institution"] == "Yale"
        assert data["status"] == ManuscriptStatus.SUBMITTED.value

    async def test_malformed_author_list(self, async_client: AsyncClient, author_headers, pdf_bytes):
        response = await async_client.post(
            "/api/manuscripts/create", headers=author_headers,
            data=_form(author_list="{not json"), files=_uploads(pdf_bytes)
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_staff_submits_on_behalf(self, async_client: AsyncClient, editor_headers, author, pdf_bytes):
        response = await async_client.post(
            "/api/manuscripts/create", headers=editor_headers,
            data=_form(author_email=author.email), files=_uploads(pdf_bytes)
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["data"]["author_id"] == str(author.id)

    async def test_author_cannot_submit_on_behalf(self, async_client: AsyncClient, author, author_headers,
                                                  user_factory, pdf_bytes):
        other = await user_factory(["author"])

        response = await async_client.post(
            "/api/manuscripts/create", headers=author_headers,
            data=_form(author_id=str(other.id)), files=_uploads(pdf_bytes)
        )

        assert response.json()["data"]["author_id"] == str(author.id)

    async def test_unknown_on_behalf_author(self, async_client: AsyncClient, editor_headers, pdf_bytes):
        response = await async_client.post(
            "/api/manuscripts/create", headers=editor_headers,
            data=_form(author_email="ghost@example.org"), files=_uploads(pdf_bytes)
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Author not found"

    async def test_requires_login(self, async_client: AsyncClient, pdf_bytes):
        response = await async_client.post("/api/manuscripts/create", data=_form(), files=_uploads(pdf_bytes))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestPublicSearch:

    async def test_search_paginates(self, async_client: AsyncClient, manuscript_factory):
        for i in range(3):
            await manuscript_factory(ManuscriptStatus.PUBLISHED, title=f"Wetland study {i}")
        await manuscript_factory(ManuscriptStatus.DRAFT, title="Wetland draft")

        response = await async_client.get("/api/manuscripts/public", params={"q": "wetland", "limit": 2})

        body = response.json()
        assert response.status_code == status.HTTP_200_OK
        assert len(body["data"]) == 2
        assert body["meta"]["total"] == 3
        assert body["meta"]["totalPages"] == 2
        assert all("email" not in m["author"] or m["author"]["email"] is None for m in body["data"])

    async def test_types(self, async_client: AsyncClient, manuscript_factory):
        await manuscript_factory(ManuscriptStatus.PUBLISHED, manuscript_type="Short Communication")

        response = await async_client.get("/api/manuscripts/types")
        assert response.json()["data"] == ["Short Communication"]

    async def test_public_detail(self, async_client: AsyncClient, manuscript_factory):
        published = await manuscript_factory(ManuscriptStatus.PUBLISHED, title="Open paper")

        response = await async_client.get(f"/api/manuscripts/public/{published.id}")
        assert response.json()["data"]["title"] == "Open paper"

        missing = await async_client.get("/api/manuscripts/public/64b7f0f0f0f0f0f0f0f0f0f0")
        assert missing.status_code == status.HTTP_404_NOT_FOUND
        assert missing.json()["error_code"] == "NOT_FOUND"


class TestAuthorViews:

    async def test_my_manuscripts_and_summary(self, async_client: AsyncClient, author_headers, manuscript_factory):
        await manuscript_factory(ManuscriptStatus.DRAFT)
        await manuscript_factory(ManuscriptStatus.ACCEPTED)

        response = await async_client.get(
            "/api/manuscripts/my", headers=author_headers, params={"status": ["accepted"]}
        )
        assert [m["status"] for m in response.json()["data"]] == ["ACCEPTED"]

        response = await async_client.get("/api/manuscripts/my/summary", headers=author_headers)
        summary = response.json()["data"]
        assert summary["total"] == 2
        assert summary["by_status"]["DRAFT"] == 1

    async def test_author_edits_own_draft(self, async_client: AsyncClient, author_headers, manuscript_factory):
        manuscript = await manuscript_factory(ManuscriptStatus.DRAFT)

        response = await async_client.patch(
            f"/api/manuscripts/{manuscript.id}", headers=author_headers, json={"title": "Revised title"}
        )
        assert response.json()["data"]["title"] == "Revised title"

    async def test_author_cannot_edit_submitted(self, async_client: AsyncClient, author_headers, manuscript_factory):
        manuscript = await manuscript_factory(ManuscriptStatus.SUBMITTED)

        response = await async_client.patch(
            f"/api/manuscripts/{manuscript.id}", headers=author_headers, json={"title": "Too late"}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestStaffViews:

    async def test_listing_requires_staff(self, async_client: AsyncClient, author_headers, editor_headers,
                                          manuscript_factory):
        await manuscript_factory(ManuscriptStatus.SUBMITTED)

        forbidden = await async_client.get("/api/manuscripts/all", headers=author_headers)
        assert forbidden.status_code == status.HTTP_403_FORBIDDEN

        for path in ("/api/manuscripts", "/api/manuscripts/all"):
            response = await async_client.get(path, headers=editor_headers)
            assert response.status_code == status.HTTP_200_OK
            assert response.json()["meta"]["total"] == 1

    async def test_status_change(self, async_client: AsyncClient, editor_headers, manuscript_factory):
        manuscript = await manuscript_factory(ManuscriptStatus.SUBMITTED)

        response = await async_client.patch(
            f"/api/manuscripts/{manuscript.id}/status", headers=editor_headers, json={"status": "UNDER_REVIEW"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["status"] == "UNDER_REVIEW"

    async def test_status_change_not_allowed(self, async_client: AsyncClient, editor_headers, manuscript_factory):
        manuscript = await manuscript_factory(ManuscriptStatus.DRAFT)

        response = await async_client.patch(
            f"/api/manuscripts/{manuscript.id}/status", headers=editor_headers, json={"status": "PUBLISHED"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "BUSINESS_LOGIC_ERROR"

    async def test_author_cannot_change_status(self, async_client: AsyncClient, author_headers, manuscript_factory):
        manuscript = await manuscript_factory(ManuscriptStatus.SUBMITTED)

        response = await async_client.patch(
            f"/api/manuscripts/{manuscript.id}/status", headers=author_headers, json={"status": "ACCEPTED"}
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_detail_access(self, async_client: AsyncClient, author_headers, editor_headers,
                                 user_factory, auth_headers_for, manuscript_factory):
        manuscript = await manuscript_factory(ManuscriptStatus.SUBMITTED)
        stranger = await user_factory(["author"])

        own = await async_client.get(f"/api/manuscripts/{manuscript.id}", headers=author_headers)
        assert own.status_code == status.HTTP_200_OK
        assert own.json()["data"]["reviews"] == []

        staff = await async_client.get(f"/api/manuscripts/{manuscript.id}", headers=editor_headers)
        assert staff.status_code == status.HTTP_200_OK

        other = await async_client.get(f"/api/manuscripts/{manuscript.id}", headers=auth_headers_for(stranger))
        assert other.status_code == status.HTTP_403_FORBIDDEN
