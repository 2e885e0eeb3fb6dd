"""
Application services - Business logic layer
"""
from collections import Counter
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union
import logging

from ..config import settings
from ..domain.enrichment import attach, enrich, index_users
from ..domain.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from ..domain.listing import paginate, query
from ..domain.models import (
    Comment,
    Page,
    Post,
    PostQuery,
    Record,
    User,
    new_id,
    utcnow,
)
from ..domain.repositories import COMMENTS, POSTS, USERS, IAuthProvider, IRecordStore
from ..domain.threads import build_forest, descendants_of

logger = logging.getLogger(__name__)


def normalize_tags(tags: Union[str, Sequence[str], None]) -> List[str]:
    """Accept a list or a comma separated string; strip items and drop blanks"""
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [tag.strip() for tag in tags if tag and tag.strip()]


def _find_index(records: List[Record], record_id: str) -> int:
    for index, record in enumerate(records):
        if record.get("id") == record_id:
            return index
    return -1


def _toggle(likes: List[str], user_id: str) -> bool:
    """Add or remove user_id; True when the user now likes the item"""
    if user_id in likes:
        likes.remove(user_id)
        return False
    likes.append(user_id)
    return True


class _StoreService:
    """Shared lookups over the record store"""

    def __init__(self, store: IRecordStore):
        self.store = store

    async def _users_by_id(self) -> Dict[str, User]:
        return index_users(User.from_record(r) for r in await self.store.load(USERS))

    async def _require_user(self, user_id: str) -> User:
        users = await self._users_by_id()
        if user_id not in users:
            raise NotFoundError("User", user_id)
        return users[user_id]

    async def _require_post(self, post_id: str) -> Post:
        for record in await self.store.load(POSTS):
            if record.get("id") == post_id:
                return Post.from_record(record)
        logger.warning(f"Post {post_id} not found")
        raise NotFoundError("Post", post_id)


class PostService(_StoreService):
    """Post service - listing, lookup, authoring and likes"""

    async def list_posts(self, criteria: PostQuery) -> Page[Post]:
        """
        List posts matching the criteria, newest first, one page at a time

        Browse, category and search listings all go through here.
        """
        posts = [Post.from_record(r) for r in await self.store.load(POSTS)]
        page = query(posts, criteria)
        page.items = enrich(page.items, await self._users_by_id())
        return page

    async def get_post(self, post_id: str) -> Post:
        """Get a single post with its author's public profile, bio included"""
        post = await self._require_post(post_id)
        return attach(post, await self._users_by_id(), include_bio=True)

    async def list_categories(self) -> List[Tuple[str, int]]:
        """Categories in use with their post counts, most used first"""
        counts = Counter(Post.from_record(r).category for r in await self.store.load(POSTS))
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))

    async def create_post(
        self,
        author_id: str,
        title: str,
        content: str,
        category: Optional[str] = None,
        tags: Union[str, Sequence[str], None] = None,
        image: Optional[str] = None
    ) -> Post:
        """Create a post; the author must exist at creation time"""
        if not title or not title.strip() or not content or not content.strip():
            raise ValidationError("Title and content are required")

        users = await self._users_by_id()
        if author_id not in users:
            raise NotFoundError("User", author_id)

        now = utcnow()
        post = Post(
            id=new_id(),
            title=title,
            content=content,
            author_id=author_id,
            category=category or settings.DEFAULT_CATEGORY,
            tags=normalize_tags(tags),
            image=image or "",
            created_at=now,
            updated_at=now,
        )

        def append(records: List[Record]):
            return records + [post.to_record()], None

        await self.store.mutate(POSTS, append)
        logger.info(f"User {author_id} created post {post.id}")
        return attach(post, users)

    async def update_post(
        self,
        post_id: str,
        requester: User,
        title: Optional[str] = None,
        content: Optional[str] = None,
        category: Optional[str] = None,
        tags: Union[str, Sequence[str], None] = None,
        image: Optional[str] = None
    ) -> Post:
        """Replace a post, keeping the previous value of every omitted field"""

        def apply(records: List[Record]):
            index = _find_index(records, post_id)
            if index == -1:
                raise NotFoundError("Post", post_id)

            post = Post.from_record(records[index])
            if not requester.can_modify(post.author_id):
                raise ForbiddenError("Not authorized to edit this post")

            updated = replace(
                post,
                title=title or post.title,
                content=content or post.content,
                category=category or post.category,
                tags=normalize_tags(tags) if tags else post.tags,
                image=image or post.image,
                updated_at=utcnow(),
            )
            records[index] = updated.to_record()
            return records, updated

        updated = await self.store.mutate(POSTS, apply)
        logger.info(f"User {requester.id} updated post {post_id}")
        return attach(updated, await self._users_by_id())

    async def delete_post(self, post_id: str, requester: User) -> None:
        """Delete a single post"""

        def remove(records: List[Record]):
            index = _find_index(records, post_id)
            if index == -1:
                raise NotFoundError("Post", post_id)
            if not requester.can_modify(records[index].get("authorId")):
                raise ForbiddenError("Not authorized to delete this post")
            return records[:index] + records[index + 1:], None

        await self.store.mutate(POSTS, remove)
        logger.info(f"User {requester.id} deleted post {post_id}")

    async def toggle_like(self, post_id: str, user_id: str) -> Tuple[bool, int]:
        """
        Like the post, or unlike it if already liked

        Returns:
            Tuple of (is_liked, like_count)
        """

        def apply(records: List[Record]):
            index = _find_index(records, post_id)
            if index == -1:
                raise NotFoundError("Post", post_id)
            post = Post.from_record(records[index])
            liked = _toggle(post.likes, user_id)
            post.updated_at = utcnow()
            records[index] = post.to_record()
            return records, (liked, post.like_count)

        return await self.store.mutate(POSTS, apply)


class CommentService(_StoreService):
    """Comment service - threads, replies, cascading deletes and likes"""

    async def list_comments(
        self,
        post_id: str,
        page: int = 1,
        limit: Optional[int] = None
    ) -> Page[Comment]:
        """
        Reply forest for a post, every comment carrying its author's profile

        Pages count top-level threads; each root comes with all of its replies.
        """
        await self._require_post(post_id)
        comments = [
            Comment.from_record(r)
            for r in await self.store.load(COMMENTS)
            if r.get("postId") == post_id
        ]
        forest = build_forest(enrich(comments, await self._users_by_id()))
        return paginate(forest, page, limit or settings.DEFAULT_COMMENT_PAGE_SIZE)

    async def get_comment(self, comment_id: str) -> Comment:
        for record in await self.store.load(COMMENTS):
            if record.get("id") == comment_id:
                return attach(Comment.from_record(record), await self._users_by_id())
        raise NotFoundError("Comment", comment_id)

    async def create_comment(
        self,
        post_id: str,
        user_id: str,
        content: str,
        parent_id: Optional[str] = None
    ) -> Comment:
        """
        Add a comment to a post, or a reply when parent_id is given

        The parent must be an existing comment on the same post.
        """
        if not post_id or not content or not content.strip():
            raise ValidationError("Post ID and content are required")

        await self._require_post(post_id)
        user = await self._require_user(user_id)

        now = utcnow()
        comment = Comment(
            id=new_id(),
            post_id=post_id,
            user_id=user_id,
            content=content,
            parent_id=parent_id or None,
            created_at=now,
            updated_at=now,
        )

        def append(records: List[Record]):
            if comment.parent_id is not None:
                index = _find_index(records, comment.parent_id)
                if index == -1:
                    raise NotFoundError("Parent comment", comment.parent_id)
                if records[index].get("postId") != post_id:
                    raise ValidationError("Parent comment belongs to a different post")
            return records + [comment.to_record()], None

        await self.store.mutate(COMMENTS, append)
        logger.info(f"User {user_id} commented {comment.id} on post {post_id}")
        return replace(comment, user=user.to_profile())

    async def update_comment(self, comment_id: str, requester: User, content: str) -> Comment:
        if not content or not content.strip():
            raise ValidationError("Content is required")

        def apply(records: List[Record]):
            index = _find_index(records, comment_id)
            if index == -1:
                raise NotFoundError("Comment", comment_id)
            comment = Comment.from_record(records[index])
            if not requester.can_modify(comment.user_id):
                raise ForbiddenError("Not authorized to edit this comment")
            updated = replace(comment, content=content, updated_at=utcnow())
            records[index] = updated.to_record()
            return records, updated

        updated = await self.store.mutate(COMMENTS, apply)
        logger.info(f"User {requester.id} updated comment {comment_id}")
        return attach(updated, await self._users_by_id())

    async def delete_comment(self, comment_id: str, requester: User) -> Set[str]:
        """
        Delete a comment together with every transitive reply

        All removed ids are dropped in a single save.

        Returns:
            The set of deleted comment ids
        """

        def remove(records: List[Record]):
            comments = [Comment.from_record(r) for r in records]
            target = next((c for c in comments if c.id == comment_id), None)
            if target is None:
                raise NotFoundError("Comment", comment_id)
            if not requester.can_modify(target.user_id):
                raise ForbiddenError("Not authorized to delete this comment")

            doomed = descendants_of(comment_id, comments)
            return [r for r in records if r.get("id") not in doomed], doomed

        deleted = await self.store.mutate(COMMENTS, remove)
        logger.info(f"User {requester.id} deleted comment {comment_id} and {len(deleted) - 1} replies")
        return deleted

    async def toggle_like(self, comment_id: str, user_id: str) -> Tuple[bool, int]:
        """
        Like the comment, or unlike it if already liked

        Returns:
            Tuple of (is_liked, like_count)
        """

        def apply(records: List[Record]):
            index = _find_index(records, comment_id)
            if index == -1:
                raise NotFoundError("Comment", comment_id)
            comment = Comment.from_record(records[index])
            liked = _toggle(comment.likes, user_id)
            comment.updated_at = utcnow()
            records[index] = comment.to_record()
            return records, (liked, comment.like_count)

        return await self.store.mutate(COMMENTS, apply)


class UserService(_StoreService):
    """User service - registration, login and profiles"""

    def __init__(self, store: IRecordStore, auth_provider: IAuthProvider):
        super().__init__(store)
        self.auth = auth_provider

    async def register(self, username: str, email: str, password: str) -> Tuple[User, str]:
        """
        Register a new user

        Returns:
            Tuple of (user, access_token)
        """
        if not username or not email or not password:
            raise ValidationError("All fields are required")

        now = utcnow()
        user = User(
            id=new_id(),
            username=username,
            email=email,
            password=self.auth.hash_password(password),
            created_at=now,
            updated_at=now,
        )

        def append(records: List[Record]):
            for record in records:
                if record.get("email") == email or record.get("username") == username:
                    raise ConflictError("User already exists")
            return records + [user.to_record()], None

        await self.store.mutate(USERS, append)
        logger.info(f"Registered user {user.id} ({username})")
        return user, self.auth.create_access_token(user.id)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Login with email and password

        Returns:
            Tuple of (user, access_token)
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = next(
            (u for u in (await self._users_by_id()).values() if u.email == email),
            None
        )
        if user is None or not self.auth.verify_password(password, user.password):
            raise AuthenticationError("Invalid credentials")

        return user, self.auth.create_access_token(user.id)

    async def get_profile(self, user_id: str) -> User:
        return await self._require_user(user_id)

    async def update_profile(
        self,
        user_id: str,
        username: Optional[str] = None,
        bio: Optional[str] = None,
        avatar: Optional[str] = None
    ) -> User:
        """Update profile fields, keeping the previous value of omitted ones"""

        def apply(records: List[Record]):
            index = _find_index(records, user_id)
            if index == -1:
                raise NotFoundError("User", user_id)
            user = User.from_record(records[index])

            if username and username != user.username:
                if any(r.get("username") == username for r in records):
                    raise ConflictError("Username already taken")

            updated = replace(
                user,
                username=username or user.username,
                bio=bio or user.bio,
                avatar=avatar or user.avatar,
                updated_at=utcnow(),
            )
            records[index] = updated.to_record()
            return records, updated

        updated = await self.store.mutate(USERS, apply)
        logger.info(f"User {user_id} updated profile")
        return updated

    async def resolve_token(self, token: str) -> User:
        """Return the user an access token belongs to"""
        user_id = self.auth.decode_access_token(token)
        if not user_id:
            raise AuthenticationError("Invalid or expired token")

        user = (await self._users_by_id()).get(user_id)
        if user is None:
            raise AuthenticationError("User not found")
        return user
