"""
Authentication and profile routes
"""
from fastapi import APIRouter, Depends, status

from ...application.services import UserService
from ...domain.models import User
from ...schemas import AuthResponse, UpdateProfile, UserLogin, UserProfile, UserRegister
from ..dependencies import get_current_user, get_user_service


router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    user_service: UserService = Depends(get_user_service)
):
    """
    Register a new user

    - **username**: Unique username
    - **email**: Unique, valid email address
    - **password**: Plain password, stored hashed
    """
    user, token = await user_service.register(user_data.username, user_data.email, user_data.password)
    return AuthResponse(
        message="User registered successfully",
        user=UserProfile.model_validate(user),
        access_token=token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    user_service: UserService = Depends(get_user_service)
):
    """Login with email and password"""
    user, token = await user_service.login(credentials.email, credentials.password)
    return AuthResponse(
        message="Login successful",
        user=UserProfile.model_validate(user),
        access_token=token,
    )


@router.get("/profile", response_model=UserProfile)
async def get_my_profile(current_user: User = Depends(get_current_user)):
    """
    Get current user's profile

    Requires authentication.
    """
    return UserProfile.model_validate(current_user)


@router.put("/profile", response_model=UserProfile)
async def update_my_profile(
    profile_data: UpdateProfile,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """
    Update current user's profile

    Omitted fields keep their current value. Requires authentication.
    """
    user = await user_service.update_profile(
        current_user.id,
        username=profile_data.username,
        bio=profile_data.bio,
        avatar=profile_data.avatar,
    )
    return UserProfile.model_validate(user)
