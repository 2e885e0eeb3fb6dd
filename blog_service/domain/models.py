"""
Domain models - Core business entities
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar
import uuid


Record = Dict[str, Any]
T = TypeVar("T")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse a stored ISO-8601 timestamp; naive values are taken as UTC"""
    if not value:
        return EPOCH
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format as millisecond-precision UTC with a trailing Z"""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class PublicProfile:
    """Denormalized, read-only snapshot of a user's public fields"""
    id: str
    username: str
    avatar: str = ""
    bio: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "username": self.username, "avatar": self.avatar}
        if self.bio is not None:
            data["bio"] = self.bio
        return data


@dataclass
class User:
    """User domain model"""
    id: str
    username: str
    email: str
    password: str = ""
    avatar: str = ""
    bio: str = ""
    role: str = "user"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def can_modify(self, owner_id: str) -> bool:
        """Check if this user may edit or delete a resource owned by owner_id"""
        return self.id == owner_id or self.is_admin

    def to_profile(self, include_bio: bool = False) -> PublicProfile:
        return PublicProfile(
            id=self.id,
            username=self.username,
            avatar=self.avatar,
            bio=self.bio if include_bio else None,
        )

    @classmethod
    def from_record(cls, record: Record) -> "User":
        return cls(
            id=record["id"],
            username=record.get("username") or "",
            email=record.get("email") or "",
            password=record.get("password") or "",
            avatar=record.get("avatar") or "",
            bio=record.get("bio") or "",
            role=record.get("role") or "user",
            created_at=parse_timestamp(record.get("createdAt")),
            updated_at=parse_timestamp(record.get("updatedAt")),
        )

    def to_record(self) -> Record:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "password": self.password,
            "avatar": self.avatar,
            "bio": self.bio,
            "role": self.role,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }


@dataclass
class Post:
    """Post domain model"""
    id: str
    title: str
    content: str
    author_id: str
    category: str = "General"
    tags: List[str] = field(default_factory=list)
    image: str = ""
    likes: List[str] = field(default_factory=list)
    views: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    # Attached by enrichment, never persisted
    author: Optional[PublicProfile] = None

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @classmethod
    def from_record(cls, record: Record) -> "Post":
        return cls(
            id=record["id"],
            title=record.get("title") or "",
            content=record.get("content") or "",
            author_id=record.get("authorId") or "",
            category=record.get("category") or "General",
            tags=list(record.get("tags") or []),
            image=record.get("image") or "",
            likes=list(record.get("likes") or []),
            views=max(int(record.get("views") or 0), 0),
            created_at=parse_timestamp(record.get("createdAt")),
            updated_at=parse_timestamp(record.get("updatedAt")),
        )

    def to_record(self) -> Record:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "tags": list(self.tags),
            "image": self.image,
            "authorId": self.author_id,
            "likes": list(self.likes),
            "views": self.views,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }


@dataclass
class Comment:
    """Comment domain model; parent_id None marks a top-level comment"""
    id: str
    post_id: str
    user_id: str
    content: str
    parent_id: Optional[str] = None
    likes: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    # Attached by enrichment and tree building, never persisted
    user: Optional[PublicProfile] = None
    replies: List["Comment"] = field(default_factory=list)

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @classmethod
    def from_record(cls, record: Record) -> "Comment":
        return cls(
            id=record["id"],
            post_id=record.get("postId") or "",
            user_id=record.get("userId") or "",
            content=record.get("content") or "",
            parent_id=record.get("parentId") or None,
            likes=list(record.get("likes") or []),
            created_at=parse_timestamp(record.get("createdAt")),
            updated_at=parse_timestamp(record.get("updatedAt")),
        )

    def to_record(self) -> Record:
        return {
            "id": self.id,
            "postId": self.post_id,
            "userId": self.user_id,
            "content": self.content,
            "parentId": self.parent_id,
            "likes": list(self.likes),
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }


@dataclass
class PostQuery:
    """Listing criteria; every set criterion must match"""
    category: Optional[str] = None
    search: Optional[str] = None
    author_id: Optional[str] = None
    page: int = 1
    limit: int = 10


@dataclass
class Pagination:
    """Pagination metadata for a listing"""
    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool


@dataclass
class Page(Generic[T]):
    """One page of a listing"""
    items: List[T]
    pagination: Pagination
