"""
Issue API endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from journal_portal.core.dependencies import get_issue_service, require_staff
from journal_portal.core.response_formatter import (
    ResponseFormatter,
    response_400,
    response_403,
    response_404,
    response_409,
)
from journal_portal.models import IssueCreate, IssueManuscriptChange, IssueUpdate, UserInDB
from journal_portal.services.issue_service import IssueService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/issues", tags=["Issues"])


@router.post(
    "/create",
    status_code=201,
    summary="Create a draft issue",
    responses={**response_403(), **response_409("Volume and number or title already used")}
)
async def create_issue(
    issue_data: IssueCreate,
    current_user: UserInDB = Depends(require_staff),
    issue_service: IssueService = Depends(get_issue_service)
):
    issue = await issue_service.create_issue(issue_data, current_user)
    return ResponseFormatter.created(data=issue, message="Issue created successfully")


@router.put(
    "/update/{issue_id}",
    summary="Update a draft issue",
    responses={**response_400("Issue is published or archived"), **response_404(), **response_409()}
)
async def update_issue(
    issue_id: str,
    issue_data: IssueUpdate,
    current_user: UserInDB = Depends(require_staff),
    issue_service: IssueService = Depends(get_issue_service)
):
    issue = await issue_service.update_issue(issue_id, issue_data)
    return ResponseFormatter.success(data=issue, message="Issue updated successfully")


@router.patch(
    "/update-status/{issue_id}/publish",
    summary="Publish an issue",
    responses={**response_400("Issue cannot be published"), **response_404()}
)
async def publish_issue(
    issue_id: str,
    current_user: UserInDB = Depends(require_staff),
    issue_service: IssueService = Depends(get_issue_service)
):
    issue = await issue_service.publish_issue(issue_id, actor_id=str(current_user.id))
    return ResponseFormatter.success(data=issue, message="Issue published successfully")


@router.patch("/{issue_id}/archive", summary="Archive an issue", responses={**response_404(), **response_409()})
async def archive_issue(
    issue_id: str,
    current_user: UserInDB = Depends(require_staff),
    issue_service: IssueService = Depends(get_issue_service)
):
    issue = await issue_service.archive_issue(issue_id, actor_id=str(current_user.id))
    return ResponseFormatter.success(data=issue, message="Issue archived successfully")


@router.patch(
    "/{issue_id}/add-manuscript",
    summary="Add an accepted manuscript",
    responses={**response_400(), **response_404(), **response_409("Manuscript already added")}
)
async def add_manuscript(
    issue_id: str,
    change: IssueManuscriptChange,
    current_user: UserInDB = Depends(require_staff),
    issue_service: IssueService = Depends(get_issue_service)
):
    issue = await issue_service.add_manuscript(issue_id, change.manuscript_id)
    return ResponseFormatter.success(data=issue, message="Manuscript added to issue")


@router.patch(
    "/{issue_id}/remove-manuscript",
    summary="Remove a manuscript",
    responses={**response_400(), **response_404()}
)
async def remove_manuscript(
    issue_id: str,
    change: IssueManuscriptChange,
    current_user: UserInDB = Depends(require_staff),
    issue_service: IssueService = Depends(get_issue_service)
):
    issue = await issue_service.remove_manuscript(issue_id, change.manuscript_id)
    return ResponseFormatter.success(data=issue, message="Manuscript removed from issue")


@router.delete("/{issue_id}", summary="Delete a draft issue", responses={**response_400(), **response_404()})
async def delete_issue(
    issue_id: str,
    current_user: UserInDB = Depends(require_staff),
    issue_service: IssueService = Depends(get_issue_service)
):
    await issue_service.delete_issue(issue_id)
    return ResponseFormatter.success(message="Issue deleted successfully")


@router.get("", summary="List issues")
async def list_issues(
    page: int = Query(1),
    limit: int = Query(10),
    year: Optional[int] = Query(None, description="Publication year"),
    volume: Optional[int] = Query(None),
    status: Optional[str] = Query(None, description="DRAFT, PUBLISHED or ARCHIVED"),
    issue_service: IssueService = Depends(get_issue_service)
):
    issues, total, page, limit = await issue_service.list_issues(
        page=page, limit=limit, year=year, volume=volume, status=status
    )
    return ResponseFormatter.paginated(items=issues, total=total, page=page, limit=limit)


@router.get("/latest", summary="Latest published issues", responses={**response_404()})
async def get_latest_issues(issue_service: IssueService = Depends(get_issue_service)):
    return ResponseFormatter.success(data=await issue_service.get_latest())


@router.get("/featured-manuscripts", summary="Manuscripts from published issues")
async def get_featured_manuscripts(issue_service: IssueService = Depends(get_issue_service)):
    return ResponseFormatter.success(data=await issue_service.get_featured_manuscripts())


@router.get("/slug/{slug}", summary="Get an issue by slug", responses={**response_404()})
async def get_issue_by_slug(slug: str, issue_service: IssueService = Depends(get_issue_service)):
    return ResponseFormatter.success(data=await issue_service.get_issue_by_slug(slug))


@router.get("/{issue_id}", summary="Get an issue", responses={**response_404()})
async def get_issue(issue_id: str, issue_service: IssueService = Depends(get_issue_service)):
    return ResponseFormatter.success(data=await issue_service.get_issue(issue_id))
