"""
Comment threads - reply forests and cascading deletes over parent references
"""
from collections import deque
from dataclasses import replace
from typing import Dict, Iterable, List, Set

from .errors import CycleDetectedError
from .listing import newest_first
from .models import Comment


def index_children(comments: Iterable[Comment]) -> Dict[str, List[str]]:
    """
    Map each parent id to its direct reply ids, newest first

    Built once per query so tree walks never rescan the flat list.
    """
    children: Dict[str, List[str]] = {}
    for comment in newest_first({c.id: c for c in comments}.values()):
        if comment.parent_id is not None:
            children.setdefault(comment.parent_id, []).append(comment.id)
    return children


def _ensure_acyclic(comment_id: str, by_id: Dict[str, Comment], settled: Set[str]) -> None:
    """Walk up the parent chain from comment_id until it leaves the known set"""
    path: Set[str] = set()
    current = comment_id
    while current in by_id and current not in settled:
        if current in path:
            raise CycleDetectedError(current)
        path.add(current)
        current = by_id[current].parent_id
    settled.update(path)


def build_forest(comments: Iterable[Comment]) -> List[Comment]:
    """
    Build the reply forest for one post's comments

    Roots are the top-level comments. Every node gets its direct replies in
    `replies`, ordered newest first like the roots. Replies whose parent is not
    among the given comments are left out. Input comments are not modified.

    Raises:
        CycleDetectedError: If parent references loop
    """
    by_id = {comment.id: comment for comment in comments}
    children = index_children(by_id.values())
    roots = newest_first(c for c in by_id.values() if c.parent_id is None)

    nodes: Dict[str, Comment] = {}
    stack = [root.id for root in roots]
    while stack:
        comment_id = stack.pop()
        if comment_id in nodes:
            raise CycleDetectedError(comment_id)
        nodes[comment_id] = replace(by_id[comment_id], replies=[])
        stack.extend(children.get(comment_id, ()))

    # Loops never hang off a root, so check whatever the descent did not reach
    settled = set(nodes)
    for comment_id in by_id:
        if comment_id not in settled:
            _ensure_acyclic(comment_id, by_id, settled)

    for comment_id, node in nodes.items():
        node.replies = [nodes[child_id] for child_id in children.get(comment_id, ())]

    return [nodes[root.id] for root in roots]


def descendants_of(comment_id: str, comments: Iterable[Comment]) -> Set[str]:
    """
    Collect comment_id and every transitive reply to it

    Raises:
        CycleDetectedError: If a reply chain leads back to an id already collected
    """
    children = index_children(comments)
    collected = {comment_id}
    frontier = deque([comment_id])

    while frontier:
        current = frontier.popleft()
        for child_id in children.get(current, ()):
            if child_id in collected:
                raise CycleDetectedError(child_id)
            collected.add(child_id)
            frontier.append(child_id)

    return collected

