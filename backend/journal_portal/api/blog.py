"""
Blog API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from journal_portal.core.dependencies import get_blog_service, require_staff
from journal_portal.core.response_formatter import ResponseFormatter, response_404, response_409
from journal_portal.models import BlogCreate, BlogUpdate, UserInDB
from journal_portal.services.blog_service import BlogService

router = APIRouter(prefix="/blog", tags=["Blog"])


@router.post("", status_code=201, summary="Create a post", responses={**response_409("Slug already used")})
async def create_blog(
    blog_data: BlogCreate,
    current_user: UserInDB = Depends(require_staff),
    blog_service: BlogService = Depends(get_blog_service)
):
    blog = await blog_service.create_blog(blog_data)
    return ResponseFormatter.created(data=blog, message="Blog created successfully")


@router.put("/{blog_id}", summary="Update a post", responses={**response_404(), **response_409()})
async def update_blog(
    blog_id: str,
    blog_data: BlogUpdate,
    current_user: UserInDB = Depends(require_staff),
    blog_service: BlogService = Depends(get_blog_service)
):
    blog = await blog_service.update_blog(blog_id, blog_data)
    return ResponseFormatter.success(data=blog, message="Blog updated successfully")


@router.delete("/{blog_id}", summary="Deactivate a post", responses={**response_404()})
async def delete_blog(
    blog_id: str,
    current_user: UserInDB = Depends(require_staff),
    blog_service: BlogService = Depends(get_blog_service)
):
    await blog_service.deactivate_blog(blog_id)
    return ResponseFormatter.success(message="Blog deleted successfully")


@router.get("", summary="List posts")
async def list_blogs(
    is_active: Optional[bool] = Query(None),
    category: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    blog_service: BlogService = Depends(get_blog_service)
):
    blogs = await blog_service.list_blogs(is_active=is_active, category=category, skip=skip, limit=limit)
    return ResponseFormatter.success(data=blogs)


@router.get("/slug/{slug}", summary="Get a post by slug", responses={**response_404()})
async def get_blog_by_slug(slug: str, blog_service: BlogService = Depends(get_blog_service)):
    return ResponseFormatter.success(data=await blog_service.get_blog_by_slug(slug))


@router.get("/{blog_id}", summary="Get a post", responses={**response_404()})
async def get_blog(blog_id: str, blog_service: BlogService = Depends(get_blog_service)):
    return ResponseFormatter.success(data=await blog_service.get_blog(blog_id))
