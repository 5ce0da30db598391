"""
Manuscript API endpoints for submission, search and editorial workflow.
"""
import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from journal_portal.core.config import settings
from journal_portal.core.dependencies import (
    get_current_user,
    get_manuscript_service,
    get_user_service,
    require_staff,
)
from journal_portal.core.error_handling import AuthorizationError, NotFoundError, ValidationError
from journal_portal.core.response_formatter import (
    ResponseFormatter,
    response_400,
    response_403,
    response_404,
)
from journal_portal.models import (
    AuthorList,
    ManuscriptCreate,
    ManuscriptFile,
    ManuscriptStatus,
    ManuscriptStatusUpdate,
    ManuscriptUpdate,
    UserInDB,
)
from journal_portal.models.manuscript import INITIAL_STATUSES, MAX_MANUSCRIPT_FILES, MIN_MANUSCRIPT_FILES
from journal_portal.services.manuscript_service import ManuscriptService, build_author_list_from_user
from journal_portal.services.storage_service import S3StorageService, get_storage_service
from journal_portal.services.user_service import UserService
from journal_portal.utils.pdf_utils import get_page_count

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/manuscripts", tags=["Manuscript Management"])


@router.get(
    "/public",
    summary="Search published manuscripts",
    description="Case-insensitive search over title, abstract and keywords of accepted and published work"
)
async def search_public_manuscripts(
    q: Optional[str] = Query(None, description="Search text"),
    manuscript_type: Optional[str] = Query(None, alias="type", description="Article type"),
    issue_slug: Optional[str] = Query(None, description="Issue id or slug"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    manuscript_service: ManuscriptService = Depends(get_manuscript_service)
):
    manuscripts, total = await manuscript_service.search_public(
        q=q, manuscript_type=manuscript_type, issue_slug=issue_slug, page=page, limit=limit
    )
    return ResponseFormatter.paginated(items=manuscripts, total=total, page=page, limit=limit)


@router.get("/types", summary="Published article types")
async def get_manuscript_types(manuscript_service: ManuscriptService = Depends(get_manuscript_service)):
    return ResponseFormatter.success(data=await manuscript_service.get_types())


@router.get("/public/{manuscript_id}", summary="Get a manuscript", responses={**response_404()})
async def get_public_manuscript(
    manuscript_id: str,
    manuscript_service: ManuscriptService = Depends(get_manuscript_service)
):
    manuscript = await manuscript_service.find_one_public(manuscript_id)
    if manuscript is None:
        raise NotFoundError("Manuscript not found", resource="manuscript", resource_id=manuscript_id)
    return ResponseFormatter.success(data=manuscript)


async def _resolve_author(
    current_user: UserInDB,
    author_id: Optional[str],
    author_email: Optional[str],
    user_service: UserService
) -> UserInDB:
    """Submitting author: the caller, or for staff the named user."""
    if not current_user.is_staff or not (author_id or author_email):
        return current_user

    author = None
    if author_id:
        author = await user_service.get_user_by_id(author_id)
    if author is None and author_email:
        author = await user_service.get_user_by_email(author_email)
    if author is None:
        raise ValidationError("Author not found", field="author_id")
    return author


def _parse_author_list(raw: Optional[str]) -> Optional[AuthorList]:
    if not raw:
        return None
    try:
        return AuthorList(**json.loads(raw))
    except (ValueError, TypeError) as e:
        raise ValidationError("author_list must be a JSON object with the author fields", field="author_list",
                              value=str(e))


async def _store_upload(upload: UploadFile, prefix: str, storage: S3StorageService):
    """Read an upload, push it to storage and return (bytes, url)."""
    data = await upload.read()
    if len(data) > settings.max_upload_size_mb * 1024 * 1024:
        raise ValidationError(
            f"{upload.filename} exceeds the {settings.max_upload_size_mb}MB upload limit",
            field="files"
        )
    key = storage.build_key(prefix, upload.filename)
    url = await run_in_threadpool(storage.upload_bytes, data, key, upload.content_type)
    return data, url


@router.post(
    "/create",
    status_code=201,
    summary="Submit a manuscript",
    description="Multipart submission with 3 to 10 files and an optional cover image",
    responses={**response_400()}
)
async def create_manuscript(
    title: str = Form(...),
    abstract: str = Form(...),
    manuscript_type: str = Form(..., alias="type"),
    keywords: Optional[str] = Form(None, description="Comma separated keywords"),
    comment: Optional[str] = Form(None),
    status: ManuscriptStatus = Form(ManuscriptStatus.DRAFT),
    author_list: Optional[str] = Form(None, description="Corresponding author as a JSON object"),
    author_id: Optional[str] = Form(None, description="Submit on behalf of this user (staff only)"),
    author_email: Optional[str] = Form(None, description="Submit on behalf of this user (staff only)"),
    item_title: List[str] = Form([], alias="item_title[]"),
    item_description: List[str] = Form([], alias="item_description[]"),
    files: List[UploadFile] = File([]),
    image: Optional[UploadFile] = File(None),
    current_user: UserInDB = Depends(get_current_user),
    manuscript_service: ManuscriptService = Depends(get_manuscript_service),
    user_service: UserService = Depends(get_user_service),
    storage: S3StorageService = Depends(get_storage_service)
):
    # Checked before anything is uploaded
    if len(files) < MIN_MANUSCRIPT_FILES:
        raise ValidationError(f"At least {MIN_MANUSCRIPT_FILES} files are required", field="files")
    if len(files) > MAX_MANUSCRIPT_FILES:
        raise ValidationError(f"At most {MAX_MANUSCRIPT_FILES} files are allowed", field="files")
    if status not in INITIAL_STATUSES:
        raise ValidationError("New manuscripts must start as DRAFT or SUBMITTED", field="status",
                              value=status.value)

    author = await _resolve_author(current_user, author_id, author_email, user_service)
    authors = _parse_author_list(author_list) or build_author_list_from_user(author)

    stored_files = []
    for idx, upload in enumerate(files):
        data, url = await _store_upload(upload, "manuscripts", storage)
        page_count = await run_in_threadpool(get_page_count, data, upload.filename)
        stored_files.append(ManuscriptFile(
            item_title=(item_title[idx] if idx < len(item_title) else "") or upload.filename,
            item_description=item_description[idx] if idx < len(item_description) else "",
            file_name=upload.filename,
            file_url=url,
            page_count=page_count,
        ))

    image_url = None
    if image is not None and image.filename:
        _, image_url = await _store_upload(image, "manuscripts/images", storage)

    manuscript = await manuscript_service.create_manuscript(ManuscriptCreate(
        title=title,
        abstract=abstract,
        type=manuscript_type,
        keywords=keywords,
        comment=comment,
        image_url=image_url,
        status=status,
        author_id=author.id,
        files=stored_files,
        author_list=authors,
    ))
    logger.info(f"Manuscript {manuscript.id} submitted by {current_user.email} for {author.email}")
    return ResponseFormatter.created(data=manuscript, message="Manuscript created successfully")


@router.get("", summary="List all manuscripts", responses={**response_403()})
@router.get("/all", summary="List all manuscripts", responses={**response_403()})
async def list_manuscripts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserInDB = Depends(require_staff),
    manuscript_service: ManuscriptService = Depends(get_manuscript_service)
):
    manuscripts, total = await manuscript_service.find_all(page=page, limit=limit)
    return ResponseFormatter.paginated(items=manuscripts, total=total, page=page, limit=limit)


@router.get("/my", summary="My manuscripts")
async def list_my_manuscripts(
    status: Optional[List[str]] = Query(None, description="Filter by one or more statuses"),
    current_user: UserInDB = Depends(get_current_user),
    manuscript_service: ManuscriptService = Depends(get_manuscript_service)
):
    manuscripts = await manuscript_service.find_mine(current_user.id, status)
    return ResponseFormatter.success(data=manuscripts)


@router.get("/my/summary", summary="My manuscripts by status")
async def get_my_summary(
    current_user: UserInDB = Depends(get_current_user),
    manuscript_service: ManuscriptService = Depends(get_manuscript_service)
):
    return ResponseFormatter.success(data=await manuscript_service.get_summary(current_user.id))


@router.patch(
    "/{manuscript_id}/status",
    summary="Change manuscript status",
    responses={**response_400("Transition not allowed"), **response_403(), **response_404()}
)
async def update_manuscript_status(
    manuscript_id: str,
    status_data: ManuscriptStatusUpdate,
    current_user: UserInDB = Depends(require_staff),
    manuscript_service: ManuscriptService = Depends(get_manuscript_service)
):
    manuscript = await manuscript_service.update_status(
        manuscript_id, status_data.status, actor_id=str(current_user.id)
    )
    return ResponseFormatter.success(data=manuscript, message=f"Manuscript status updated to {manuscript.status}")


@router.patch("/{manuscript_id}", summary="Edit manuscript metadata", responses={**response_403(), **response_404()})
async def update_manuscript(
    manuscript_id: str,
    manuscript_data: ManuscriptUpdate,
    current_user: UserInDB = Depends(get_current_user),
    manuscript_service: ManuscriptService = Depends(get_manuscript_service)
):
    manuscript = await manuscript_service.update_manuscript(manuscript_id, manuscript_data, current_user)
    return ResponseFormatter.success(data=manuscript, message="Manuscript updated successfully")


@router.get("/{manuscript_id}", summary="Manuscript with reviews", responses={**response_403(), **response_404()})
async def get_manuscript(
    manuscript_id: str,
    current_user: UserInDB = Depends(get_current_user),
    manuscript_service: ManuscriptService = Depends(get_manuscript_service)
):
    """
    Full manuscript record with author and reviews.

    Visible to staff, the submitting author and assigned reviewers.
    """
    manuscript = await manuscript_service.find_one(manuscript_id)
    if manuscript is None:
        raise NotFoundError("Manuscript not found", resource="manuscript", resource_id=manuscript_id)

    is_reviewer = any(r.reviewer_id == current_user.id for r in manuscript.reviews)
    if not (current_user.is_staff or manuscript.author_id == current_user.id or is_reviewer):
        raise AuthorizationError("You do not have access to this manuscript")
    return ResponseFormatter.success(data=manuscript)
