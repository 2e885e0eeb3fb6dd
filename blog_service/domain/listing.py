"""
Filter, sort and paginate pipeline shared by post and comment listings
"""
import math
from typing import Callable, Iterable, List, Sequence

from .errors import PageSizeError
from .models import Page, Pagination, Post, PostQuery, T


def newest_first(items: Iterable[T]) -> List[T]:
    """Sort by created_at descending; equal timestamps keep their input order"""
    return sorted(items, key=lambda item: item.created_at, reverse=True)


def build_filters(criteria: PostQuery) -> List[Callable[[Post], bool]]:
    """Turn the set criteria into predicates; empty strings count as unset"""
    predicates: List[Callable[[Post], bool]] = []

    if criteria.category:
        category = criteria.category
        predicates.append(lambda post: post.category == category)

    if criteria.search:
        needle = criteria.search.lower()
        predicates.append(
            lambda post: needle in post.title.lower() or needle in post.content.lower()
        )

    if criteria.author_id:
        author_id = criteria.author_id
        predicates.append(lambda post: post.author_id == author_id)

    return predicates


def filter_posts(posts: Iterable[Post], criteria: PostQuery) -> List[Post]:
    predicates = build_filters(criteria)
    return [post for post in posts if all(check(post) for check in predicates)]


def paginate(items: Sequence[T], page: int, limit: int) -> Page[T]:
    """
    Slice one page out of an already ordered sequence

    has_prev_page is simply page > 1, so it is also true past the last page.
    The page number itself is not validated here.
    """
    if limit <= 0:
        raise PageSizeError(limit)

    total = len(items)
    start = (page - 1) * limit
    end = page * limit

    return Page(
        items=list(items[max(start, 0):max(end, 0)]),
        pagination=Pagination(
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_items=total,
            has_next_page=end < total,
            has_prev_page=page > 1,
        ),
    )


def query(posts: Iterable[Post], criteria: PostQuery) -> Page[Post]:
    """Filter, order newest first, then paginate"""
    if criteria.limit <= 0:
        raise PageSizeError(criteria.limit)
    return paginate(newest_first(filter_posts(posts, criteria)), criteria.page, criteria.limit)
