"""
Post routes
"""
from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from ...application.services import PostService
from ...config import settings
from ...domain.models import Page, Post, PostQuery, User
from ...schemas import (
    CategoryCount,
    CategoryListResponse,
    LikeResponse,
    MessageResponse,
    PaginationResponse,
    PostCreate,
    PostListResponse,
    PostResponse,
    PostUpdate,
)
from ..dependencies import get_current_user, get_post_service


router = APIRouter(prefix="/api/v1/posts", tags=["Posts"])


def to_list_response(page: Page[Post], category: Optional[str] = None) -> PostListResponse:
    return PostListResponse(
        posts=[PostResponse.model_validate(post) for post in page.items],
        pagination=PaginationResponse.model_validate(page.pagination),
        category=category,
    )


@router.get("", response_model=PostListResponse)
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    category: Optional[str] = None,
    search: Optional[str] = None,
    author_id: Optional[str] = Query(None, alias="authorId"),
    post_service: PostService = Depends(get_post_service)
):
    """
    List posts, newest first

    - **category**: Exact category match
    - **search**: Case-insensitive substring of title or content
    - **authorId**: Only posts by this user
    """
    criteria = PostQuery(category=category, search=search, author_id=author_id, page=page, limit=limit)
    return to_list_response(await post_service.list_posts(criteria))


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(post_service: PostService = Depends(get_post_service)):
    """Categories in use, most used first"""
    categories = await post_service.list_categories()
    return CategoryListResponse(
        categories=[CategoryCount(category=name, count=count) for name, count in categories]
    )


@router.get("/category/{category}", response_model=PostListResponse)
async def list_category_posts(
    category: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    post_service: PostService = Depends(get_post_service)
):
    """List posts of one category, newest first"""
    criteria = PostQuery(category=category, page=page, limit=limit)
    return to_list_response(await post_service.list_posts(criteria), category=category)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, post_service: PostService = Depends(get_post_service)):
    """Get post by ID, author bio included"""
    return PostResponse.model_validate(await post_service.get_post(post_id))


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """
    Create a new post

    Requires authentication.
    """
    post = await post_service.create_post(
        author_id=current_user.id,
        title=post_data.title,
        content=post_data.content,
        category=post_data.category,
        tags=post_data.tags,
        image=post_data.image,
    )
    return PostResponse.model_validate(post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    post_data: PostUpdate,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """
    Update a post

    Only the author or an admin may edit. Omitted fields are kept.
    """
    post = await post_service.update_post(
        post_id,
        current_user,
        title=post_data.title,
        content=post_data.content,
        category=post_data.category,
        tags=post_data.tags,
        image=post_data.image,
    )
    return PostResponse.model_validate(post)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Delete a post (author or admin only)"""
    await post_service.delete_post(post_id, current_user)
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=LikeResponse)
async def like_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Like or unlike a post"""
    is_liked, like_count = await post_service.toggle_like(post_id, current_user.id)
    return LikeResponse(id=post_id, is_liked=is_liked, like_count=like_count)
