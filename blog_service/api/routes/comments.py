"""
Comment routes
"""
from fastapi import APIRouter, Depends, Query, status

from ...application.services import CommentService
from ...config import settings
from ...domain.models import User
from ...schemas import (
    CommentCreate,
    CommentDeleteResponse,
    CommentResponse,
    CommentThreadResponse,
    CommentUpdate,
    LikeResponse,
    PaginationResponse,
)
from ..dependencies import get_comment_service, get_current_user


router = APIRouter(prefix="/api/v1/comments", tags=["Comments"])


def _count(comments) -> int:
    return sum(1 + _count(comment.replies) for comment in comments)


@router.get("/post/{post_id}", response_model=CommentThreadResponse)
async def get_comments_for_post(
    post_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_COMMENT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    comment_service: CommentService = Depends(get_comment_service)
):
    """
    Comment threads of a post, newest first at every level

    Pages count top-level comments; replies always come with their thread.
    """
    threads = await comment_service.list_comments(post_id, page=page, limit=limit)
    return CommentThreadResponse(
        comments=[CommentResponse.model_validate(root) for root in threads.items],
        total=_count(threads.items),
        pagination=PaginationResponse.model_validate(threads.pagination),
    )


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    payload: CommentCreate,
    current_user: User = Depends(get_current_user),
    comment_service: CommentService = Depends(get_comment_service)
):
    """
    Comment on a post, or reply to a comment with **parent_id**

    Requires authentication.
    """
    comment = await comment_service.create_comment(
        post_id=payload.post_id,
        user_id=current_user.id,
        content=payload.content,
        parent_id=payload.parent_id,
    )
    return CommentResponse.model_validate(comment)


@router.get("/{comment_id}", response_model=CommentResponse)
async def get_comment(
    comment_id: str,
    comment_service: CommentService = Depends(get_comment_service)
):
    """Get comment by ID"""
    return CommentResponse.model_validate(await comment_service.get_comment(comment_id))


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: str,
    payload: CommentUpdate,
    current_user: User = Depends(get_current_user),
    comment_service: CommentService = Depends(get_comment_service)
):
    """Edit a comment (author or admin only)"""
    comment = await comment_service.update_comment(comment_id, current_user, payload.content)
    return CommentResponse.model_validate(comment)


@router.delete("/{comment_id}", response_model=CommentDeleteResponse)
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    comment_service: CommentService = Depends(get_comment_service)
):
    """Delete a comment and all of its replies (author or admin only)"""
    deleted = await comment_service.delete_comment(comment_id, current_user)
    return CommentDeleteResponse(
        message="Comment deleted successfully",
        deleted_ids=sorted(deleted),
    )


@router.post("/{comment_id}/like", response_model=LikeResponse)
async def like_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    comment_service: CommentService = Depends(get_comment_service)
):
    """Like or unlike a comment"""
    is_liked, like_count = await comment_service.toggle_like(comment_id, current_user.id)
    return LikeResponse(id=comment_id, is_liked=is_liked, like_count=like_count)
