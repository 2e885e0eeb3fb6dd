"""
Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional, Union
from datetime import datetime


class PostCreate(BaseModel):
    """Post creation request"""
    title: str = Field(..., max_length=200)
    content: str
    category: Optional[str] = Field(None, max_length=100)
    tags: Optional[Union[List[str], str]] = Field(None, description="List of tags or a comma separated string")
    image: Optional[str] = None


class PostUpdate(BaseModel):
    """Post update request; omitted fields keep their current value"""
    title: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    tags: Optional[Union[List[str], str]] = None
    image: Optional[str] = None


class ProfileSnapshot(BaseModel):
    """Public profile attached to posts and comments"""
    id: str
    username: str
    avatar: str = ""
    bio: Optional[str] = None

    class Config:
        from_attributes = True


class PostResponse(BaseModel):
    """Post response"""
    id: str
    title: str
    content: str
    category: str
    tags: List[str] = []
    image: str = ""
    author_id: str
    author: Optional[ProfileSnapshot] = None
    likes: List[str] = []
    like_count: int = 0
    views: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaginationResponse(BaseModel):
    """Pagination metadata"""
    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool

    class Config:
        from_attributes = True


class PostListResponse(BaseModel):
    """Post list response"""
    posts: List[PostResponse]
    pagination: PaginationResponse
    category: Optional[str] = None


class CategoryCount(BaseModel):
    """Category with its number of posts"""
    category: str
    count: int


class CategoryListResponse(BaseModel):
    """Category list response"""
    categories: List[CategoryCount]


class LikeResponse(BaseModel):
    """Like toggle response"""
    id: str
    is_liked: bool
    like_count: int


class CommentCreate(BaseModel):
    """Comment creation request"""
    post_id: str
    content: str = Field(..., max_length=5000)
    parent_id: Optional[str] = None


class CommentUpdate(BaseModel):
    """Comment update request"""
    content: str = Field(..., max_length=5000)


class CommentResponse(BaseModel):
    """Comment response with nested replies"""
    id: str
    post_id: str
    user_id: str
    user: Optional[ProfileSnapshot] = None
    content: str
    parent_id: Optional[str] = None
    likes: List[str] = []
    like_count: int = 0
    created_at: datetime
    updated_at: datetime
    replies: List["CommentResponse"] = []

    class Config:
        from_attributes = True


CommentResponse.model_rebuild()


class CommentThreadResponse(BaseModel):
    """One page of a post's comment threads"""
    comments: List[CommentResponse]
    total: int = Field(..., description="Comments on this page, replies included")
    pagination: PaginationResponse


class CommentDeleteResponse(BaseModel):
    """Cascading delete result"""
    message: str
    deleted_ids: List[str]


class UserRegister(BaseModel):
    """User registration request"""
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserLogin(BaseModel):
    """User login request"""
    email: str
    password: str


class UserProfile(BaseModel):
    """User profile response; never carries the password hash"""
    id: str
    username: str
    email: str
    avatar: str = ""
    bio: str = ""
    role: str = "user"
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UpdateProfile(BaseModel):
    """Update profile request"""
    username: Optional[str] = Field(None, max_length=50)
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None


class AuthResponse(BaseModel):
    """Registration/login response"""
    message: str
    user: UserProfile
    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    """Generic message response"""
    message: str
    success: bool = True


class ErrorResponse(BaseModel):
    """Error response"""
    error: str
    detail: Optional[str] = None
    success: bool = False
