"""
Tests for issue assembly, publishing and archiving.
"""
import asyncio
from datetime import datetime

import pytest

from journal_portal.core.error_handling import (
    BusinessLogicError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from journal_portal.models import IssueCreate, IssueStatus, IssueUpdate, ManuscriptStatus
from journal_portal.services.issue_service import IssueService

pytestmark = pytest.mark.asyncio


@pytest.fixture
def service(db) -> IssueService:
    return IssueService(db)


class TestCreateAndUpdate:

    async def test_create_generates_slug(self, service, issue_data, editor):
        issue = await service.create_issue(issue_data(title="  Spring Issue: 2024!  "), editor)

        assert issue.slug == "spring-issue-2024"
        assert issue.status == IssueStatus.DRAFT.value
        assert issue.manuscripts == []
        assert issue.total_pages == 0
        assert issue.created_by == editor.id

    async def test_duplicate_volume_and_number(self, service, issue_data):
        await service.create_issue(issue_data(volume=2, issue_number=1, title="One"))

        with pytest.raises(ConflictError, match="volume and number"):
            await service.create_issue(issue_data(volume=2, issue_number=1, title="Two"))

    async def test_duplicate_title_slug(self, service, issue_data):
        await service.create_issue(issue_data(volume=1, issue_number=1, title="Winter Issue"))

        with pytest.raises(ConflictError, match="title already exists"):
            await service.create_issue(issue_data(volume=1, issue_number=2, title="winter issue!"))

    async def test_title_change_regenerates_slug(self, service, issue_data):
        issue = await service.create_issue(issue_data())

        updated = await service.update_issue(issue.id, IssueUpdate(title="Summer Special"))
        assert updated.slug == "summer-special"

        fetched = await service.get_issue_by_slug("summer-special")
        assert fetched.id == issue.id

    async def test_update_rechecks_uniqueness(self, service, issue_data):
        await service.create_issue(issue_data(volume=1, issue_number=1, title="First"))
        second = await service.create_issue(issue_data(volume=1, issue_number=2, title="Second"))

        with pytest.raises(ConflictError):
            await service.update_issue(second.id, IssueUpdate(issue_number=1))
        with pytest.raises(ConflictError):
            await service.update_issue(second.id, IssueUpdate(title="First"))

    async def test_published_issue_cannot_be_updated(self, service, issue_data, manuscript_factory):
        issue = await service.create_issue(issue_data())
        accepted = await manuscript_factory(ManuscriptStatus.ACCEPTED)
        await service.add_manuscript(issue.id, accepted.id)
        await service.publish_issue(issue.id)

        with pytest.raises(BusinessLogicError, match="Published issues cannot be edited"):
            await service.update_issue(issue.id, IssueUpdate(description="changed"))

    async def test_archived_issue_cannot_be_updated(self, service, issue_data):
        issue = await service.create_issue(issue_data())
        await service.archive_issue(issue.id)

        with pytest.raises(BusinessLogicError, match="Archived issues cannot be updated"):
            await service.update_issue(issue.id, IssueUpdate(description="changed"))


class TestMembership:

    async def test_add_increments_pages(self, service, issue_data, manuscript_factory):
        issue = await service.create_issue(issue_data())
        first = await manuscript_factory(ManuscriptStatus.ACCEPTED, page_counts=(2, 3, 0))
        second = await manuscript_factory(ManuscriptStatus.ACCEPTED, page_counts=(4, 4, 4))

        await service.add_manuscript(issue.id, first.id)
        updated = await service.add_manuscript(issue.id, second.id)

        assert updated.manuscripts == [first.id, second.id]
        assert updated.total_pages == 17

    async def test_add_twice_conflicts(self, service, issue_data, manuscript_factory):
        issue = await service.create_issue(issue_data())
        accepted = await manuscript_factory(ManuscriptStatus.ACCEPTED)
        await service.add_manuscript(issue.id, accepted.id)

        with pytest.raises(ConflictError, match="Manuscript already added"):
            await service.add_manuscript(issue.id, accepted.id)

        stored = await service.get_issue_by_id(issue.id)
        assert stored.manuscripts == [accepted.id]
        assert stored.total_pages == accepted.total_page_count

    async def test_only_accepted_manuscripts(self, service, issue_data, manuscript_factory):
        issue = await service.create_issue(issue_data())
        draft = await manuscript_factory(ManuscriptStatus.UNDER_REVIEW)

        with pytest.raises(BusinessLogicError, match="Only ACCEPTED manuscripts can be added"):
            await service.add_manuscript(issue.id, draft.id)

    async def test_missing_manuscript(self, service, issue_data):
        issue = await service.create_issue(issue_data())
        with pytest.raises(NotFoundError):
            await service.add_manuscript(issue.id, "64b7f0f0f0f0f0f0f0f0f0f0")

    async def test_concurrent_adds_keep_every_increment(self, service, issue_data, manuscript_factory):
        issue = await service.create_issue(issue_data())
        manuscripts = [await manuscript_factory(ManuscriptStatus.ACCEPTED, page_counts=(1, 1, 1))
                       for _ in range(5)]

        await asyncio.gather(*(service.add_manuscript(issue.id, m.id) for m in manuscripts))

        stored = await service.get_issue_by_id(issue.id)
        assert sorted(stored.manuscripts) == sorted(m.id for m in manuscripts)
        assert stored.total_pages == 15

    async def test_remove_decrements_pages(self, service, issue_data, manuscript_factory):
        issue = await service.create_issue(issue_data())
        first = await manuscript_factory(ManuscriptStatus.ACCEPTED, page_counts=(2, 3, 0))
        second = await manuscript_factory(ManuscriptStatus.ACCEPTED, page_counts=(1, 1, 1))
        await service.add_manuscript(issue.id, first.id)
        await service.add_manuscript(issue.id, second.id)

        updated = await service.remove_manuscript(issue.id, first.id)

        assert updated.manuscripts == [second.id]
        assert updated.total_pages == 3

    async def test_remove_floors_total_at_zero(self, service, issue_data, manuscript_factory, db):
        issue = await service.create_issue(issue_data())
        accepted = await manuscript_factory(ManuscriptStatus.ACCEPTED, page_counts=(5, 5, 5))
        await service.add_manuscript(issue.id, accepted.id)
        # Drifted total, lower than the member's pages
        await db["issues"].update_one({"_id": issue.id}, {"$set": {"total_pages": 4}})

        updated = await service.remove_manuscript(issue.id, accepted.id)

        assert updated.manuscripts == []
        assert updated.total_pages == 0

    async def test_remove_non_member(self, service, issue_data, manuscript_factory):
        issue = await service.create_issue(issue_data())
        accepted = await manuscript_factory(ManuscriptStatus.ACCEPTED)

        with pytest.raises(ValidationError):
            await service.remove_manuscript(issue.id, accepted.id)

    async def test_locked_issue_membership(self, service, issue_data, manuscript_factory):
        issue = await service.create_issue(issue_data())
        accepted = await manuscript_factory(ManuscriptStatus.ACCEPTED)
        await service.archive_issue(issue.id)

        with pytest.raises(BusinessLogicError, match="Archived issues cannot be modified"):
            await service.add_manuscript(issue.id, accepted.id)


class TestPublishArchiveDelete:

    async def test_publish_requires_manuscripts(self, service, issue_data):
        issue = await service.create_issue(issue_data())
        with pytest.raises(BusinessLogicError, match="without manuscripts"):
            await service.publish_issue(issue.id)

    async def test_publish_requires_an_accepted_member(self, service, issue_data, manuscript_factory, db):
        issue = await service.create_issue(issue_data())
        accepted = await manuscript_factory(ManuscriptStatus.ACCEPTED)
        await service.add_manuscript(issue.id, accepted.id)
        await db["manuscripts"].update_one({"_id": accepted.id}, {"$set": {"status": "REJECTED"}})

        with pytest.raises(BusinessLogicError, match="At least one ACCEPTED manuscript"):
            await service.publish_issue(issue.id)

    async def test_publish_sets_publication_date(self, service, issue_data, manuscript_factory):
        issue = await service.create_issue(issue_data())
        accepted = await manuscript_factory(ManuscriptStatus.ACCEPTED)
        await service.add_manuscript(issue.id, accepted.id)

        published = await service.publish_issue(issue.id)

        assert published.status == IssueStatus.PUBLISHED.value
        assert published.publication_date is not None

    async def test_archived_issue_cannot_be_published(self, service, issue_data):
        issue = await service.create_issue(issue_data())
        await service.archive_issue(issue.id)

        with pytest.raises(BusinessLogicError, match="Archived issues cannot be published"):
            await service.publish_issue(issue.id)

    async def test_archive_is_final(self, service, issue_data):
        issue = await service.create_issue(issue_data())

        archived = await service.archive_issue(issue.id)
        assert archived.status == IssueStatus.ARCHIVED.value
        assert archived.is_active is False

        with pytest.raises(ConflictError, match="Issue already archived"):
            await service.archive_issue(issue.id)

    async def test_delete_draft_only(self, service, issue_data):
        draft = await service.create_issue(issue_data(issue_number=1, title="Draft"))
        archived = await service.create_issue(issue_data(issue_number=2, title="Archived"))
        await service.archive_issue(archived.id)

        await service.delete_issue(draft.id)
        assert await service.get_issue_by_id(draft.id) is None

        with pytest.raises(BusinessLogicError):
            await service.delete_issue(archived.id)

    async def test_missing_issue(self, service):
        with pytest.raises(NotFoundError, match="Issue not found"):
            await service.get_issue("64b7f0f0f0f0f0f0f0f0f0f0")


class TestQueries:

    async def _published(self, service, manuscript_factory, volume, number, title, when):
        issue = await service.create_issue(
            IssueCreate(volume=volume, issue_number=number, title=title, publication_date=when)
        )
        accepted = await manuscript_factory(ManuscriptStatus.ACCEPTED, title=f"{title} paper")
        await service.add_manuscript(issue.id, accepted.id)
        return await service.publish_issue(issue.id)

    async def test_list_filters_by_year_and_sorts(self, service, manuscript_factory):
        await self._published(service, manuscript_factory, 1, 1, "Old", datetime(2023, 5, 1))
        await self._published(service, manuscript_factory, 2, 1, "Early", datetime(2024, 2, 1))
        await self._published(service, manuscript_factory, 2, 2, "Late", datetime(2024, 11, 1))

        issues, total, page, limit = await service.list_issues(year=2024)

        assert total == 2
        assert [i.title for i in issues] == ["Late", "Early"]
        assert issues[0].manuscripts[0].title == "Late paper"

    async def test_list_clamps_limit(self, service):
        _, _, page, limit = await service.list_issues(page=0, limit=1000)
        assert (page, limit) == (1, 100)

    async def test_latest_without_published_issues(self, service, issue_data):
        await service.create_issue(issue_data())
        with pytest.raises(NotFoundError, match="No published issues found"):
            await service.get_latest()

    async def test_featured_manuscripts_are_tagged(self, service, manuscript_factory):
        issue = await self._published(service, manuscript_factory, 3, 1, "Featured", datetime(2024, 6, 1))

        featured = await service.get_featured_manuscripts()

        assert len(featured) == 1
        assert featured[0].issue_slug == issue.slug
        assert featured[0].issue_volume == 3
        assert featured[0].issue_title == "Featured"

    async def test_featured_caps_per_issue(self, service, manuscript_factory, issue_data):
        issue = await service.create_issue(issue_data(volume=4, issue_number=1, title="Big"))
        for _ in range(8):
            accepted = await manuscript_factory(ManuscriptStatus.ACCEPTED)
            await service.add_manuscript(issue.id, accepted.id)
        await service.publish_issue(issue.id)

        assert len(await service.get_featured_manuscripts()) == 6
