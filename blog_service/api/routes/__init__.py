from .auth import router as auth_router
from .comments import router as comments_router
from .posts import router as posts_router


__all__ = [
    # auth.py
    "auth_router",
    # comments.py
    "comments_router",
    # posts.py
    "posts_router",
]
