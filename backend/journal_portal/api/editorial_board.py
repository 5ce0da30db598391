"""
Editorial board API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from journal_portal.core.dependencies import get_editorial_board_service, require_staff
from journal_portal.core.response_formatter import ResponseFormatter, response_404, response_409
from journal_portal.models import EditorialBoardCreate, EditorialBoardUpdate, UserInDB
from journal_portal.services.editorial_board_service import EditorialBoardService

router = APIRouter(prefix="/editorial-board", tags=["Editorial Board"])


@router.post("/create", status_code=201, summary="Add a board member", responses={**response_409()})
async def create_member(
    member_data: EditorialBoardCreate,
    current_user: UserInDB = Depends(require_staff),
    board_service: EditorialBoardService = Depends(get_editorial_board_service)
):
    member = await board_service.create_member(member_data)
    return ResponseFormatter.created(data=member, message="Editorial Board member created successfully")


@router.put("/update/{member_id}", summary="Update a board member", responses={**response_404(), **response_409()})
async def update_member(
    member_id: str,
    member_data: EditorialBoardUpdate,
    current_user: UserInDB = Depends(require_staff),
    board_service: EditorialBoardService = Depends(get_editorial_board_service)
):
    member = await board_service.update_member(member_id, member_data)
    return ResponseFormatter.success(data=member, message="Editorial Board member updated successfully")


@router.delete("/{member_id}", summary="Deactivate a board member", responses={**response_404()})
async def delete_member(
    member_id: str,
    current_user: UserInDB = Depends(require_staff),
    board_service: EditorialBoardService = Depends(get_editorial_board_service)
):
    await board_service.deactivate_member(member_id)
    return ResponseFormatter.success(message="Editorial Board member deleted successfully")


@router.get("", summary="List board members")
async def list_members(
    is_active: Optional[bool] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    board_service: EditorialBoardService = Depends(get_editorial_board_service)
):
    members = await board_service.list_members(is_active=is_active, skip=skip, limit=limit)
    return ResponseFormatter.success(data=members)


@router.get("/{member_id}", summary="Get a board member", responses={**response_404()})
async def get_member(member_id: str, board_service: EditorialBoardService = Depends(get_editorial_board_service)):
    return ResponseFormatter.success(data=await board_service.get_member(member_id))
