"""
Contact form API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from journal_portal.core.dependencies import get_contact_message_service, require_admin
from journal_portal.core.response_formatter import ResponseFormatter, response_400, response_403, response_404
from journal_portal.models import ContactMessageCreate, UserInDB
from journal_portal.services.contact_message_service import DEFAULT_LIST_LIMIT, ContactMessageService

router = APIRouter(prefix="/contact-messages", tags=["Contact Messages"])


@router.post("", status_code=201, summary="Send a message", responses={**response_400()})
async def create_message(
    message_data: ContactMessageCreate,
    message_service: ContactMessageService = Depends(get_contact_message_service)
):
    message = await message_service.create_message(message_data)
    return ResponseFormatter.created(data=message, message="Message sent successfully")


@router.get("", summary="List messages", responses={**response_403()})
async def list_messages(
    is_read: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=100),
    current_user: UserInDB = Depends(require_admin),
    message_service: ContactMessageService = Depends(get_contact_message_service)
):
    messages, total = await message_service.list_messages(is_read=is_read, page=page, limit=limit)
    return ResponseFormatter.paginated(items=messages, total=total, page=page, limit=limit)


@router.patch("/{message_id}/read", summary="Mark a message read", responses={**response_404()})
async def mark_message_read(
    message_id: str,
    current_user: UserInDB = Depends(require_admin),
    message_service: ContactMessageService = Depends(get_contact_message_service)
):
    return ResponseFormatter.success(data=await message_service.mark_read(message_id))
