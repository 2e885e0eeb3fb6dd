"""
FastAPI dependencies
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from ..application.services import CommentService, PostService, UserService
from ..domain.errors import AuthenticationError
from ..domain.models import User
from ..domain.repositories import IAuthProvider, IRecordStore
from ..infrastructure.auth import get_auth_provider
from ..infrastructure.storage import get_record_store


# Security scheme
security = HTTPBearer(auto_error=False)


async def get_post_service(store: IRecordStore = Depends(get_record_store)) -> PostService:
    """Get post service dependency"""
    return PostService(store)


async def get_comment_service(store: IRecordStore = Depends(get_record_store)) -> CommentService:
    """Get comment service dependency"""
    return CommentService(store)


async def get_user_service(
    store: IRecordStore = Depends(get_record_store),
    auth_provider: IAuthProvider = Depends(get_auth_provider)
) -> UserService:
    """Get user service dependency"""
    return UserService(store, auth_provider)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    user_service: UserService = Depends(get_user_service)
) -> User:
    """
    Get current authenticated user from the bearer token

    Raises:
        HTTPException: If the token is missing, invalid or its user is gone
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return await user_service.resolve_token(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
