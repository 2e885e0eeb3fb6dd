"""
Author/user enrichment - attach public profile snapshots to posts and comments
"""
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, TypeVar, Union

from .models import Comment, Post, PublicProfile, User


Enrichable = TypeVar("Enrichable", Post, Comment)


def index_users(users: Iterable[User]) -> Dict[str, User]:
    return {user.id: user for user in users}


def profile_for(
    user_id: Optional[str],
    users_by_id: Mapping[str, User],
    include_bio: bool = False
) -> Optional[PublicProfile]:
    """Public snapshot of a user, None when the reference dangles"""
    user = users_by_id.get(user_id) if user_id else None
    if user is None:
        return None
    return user.to_profile(include_bio=include_bio)


def attach(
    record: Enrichable,
    users_by_id: Mapping[str, User],
    include_bio: bool = False
) -> Enrichable:
    """
    Return a copy of a post with `author` set, or of a comment with `user` set

    A missing user yields None; the record is kept either way.
    """
    if isinstance(record, Post):
        return replace(record, author=profile_for(record.author_id, users_by_id, include_bio))
    return replace(record, user=profile_for(record.user_id, users_by_id, include_bio))


def enrich(
    records: Iterable[Enrichable],
    users: Union[Iterable[User], Mapping[str, User]],
    include_bio: bool = False
) -> List[Enrichable]:
    """Attach profiles to every record, indexing the users once"""
    users_by_id = users if isinstance(users, Mapping) else index_users(users)
    return [attach(record, users_by_id, include_bio) for record in records]
