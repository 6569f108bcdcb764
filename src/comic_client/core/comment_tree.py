"""
Threaded comment tree building.

The API returns the comments of a comic or chapter as a flat list where each
record names its parent (``parent_comment``) and its direct replies
(``child_comments_ids``). This module nests that list into the tree shown
on a page.

Depth counts materialized levels, roots included: with ``depth=2`` a root
gets its replies, and those replies get an empty ``child_comments``. The
depth limit also bounds cyclic input, so it is applied unconditionally.
"""

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple, Union

from pydantic import BaseModel

from comic_client.utils.logging import get_logger

logger = get_logger(__name__)

CommentRecord = Dict[str, Any]
CommentInput = Union[Mapping[str, Any], BaseModel]


def _as_record(comment: CommentInput) -> CommentRecord:
    if isinstance(comment, BaseModel):
        return comment.model_dump()
    return dict(comment)


def index_comments(comments: Iterable[CommentRecord]) -> Dict[str, CommentRecord]:
    """
    Map comment ids to records.

    Records without an ``id`` cannot be referenced and are left out. On
    duplicate ids the first record wins.
    """
    index: Dict[str, CommentRecord] = {}
    for comment in comments:
        comment_id = comment.get("id")
        if comment_id is None:
            continue
        index.setdefault(str(comment_id), comment)
    return index


def is_top_level(comment: Mapping[str, Any]) -> bool:
    return comment.get("parent_comment") is None


def _node(comment: CommentRecord) -> CommentRecord:
    node = {key: value for key, value in comment.items() if key != "child_comments"}
    node["child_comments"] = []
    return node


def _expand(
    comment: CommentRecord,
    index: Mapping[str, CommentRecord],
    depth: int,
) -> CommentRecord:
    root = _node(comment)
    # Explicit stack: depth may exceed the interpreter recursion limit.
    pending = [(comment, root, depth)]
    while pending:
        record, node, remaining = pending.pop()
        if remaining <= 1:
            continue
        for child_id in record.get("child_comments_ids") or []:
            child = index.get(str(child_id))
            if child is None:
                logger.debug(f"Skipping dangling child id {child_id} of comment {record.get('id')}")
                continue
            child_node = _node(child)
            node["child_comments"].append(child_node)
            pending.append((child, child_node, remaining - 1))
    return root


def build_comment_tree(comments: Iterable[CommentInput], depth: int) -> List[CommentRecord]:
    """
    Nest a flat list of comments under their top-level comments.

    Args:
        comments: Flat comment records (dicts or ``Comment`` models) in API order
        depth: Number of levels to materialize, roots included. Values below
            one return the roots with empty ``child_comments``.

    Returns:
        New dicts for the top-level comments in input order, each with
        ``child_comments`` filled in the order of its ``child_comments_ids``.
        The input records are not modified.
    """
    records = [_as_record(comment) for comment in comments]
    index = index_comments(records)

    tree = [_expand(record, index, depth) for record in records if is_top_level(record)]

    logger.debug(
        f"Built comment tree: {len(tree)} top-level of {len(records)} comments (depth={depth})"
    )
    return tree


def iter_comment_tree(tree: Iterable[CommentRecord], level: int = 1) -> Iterator[Tuple[int, CommentRecord]]:
    """Walk a comment tree depth-first, yielding ``(level, node)`` with roots at level 1."""
    pending = [(level, node) for node in reversed(list(tree))]
    while pending:
        node_level, node = pending.pop()
        yield node_level, node
        children = node.get("child_comments") or []
        pending.extend((node_level + 1, child) for child in reversed(children))


def flatten_comment_tree(tree: Iterable[CommentRecord]) -> List[CommentRecord]:
    """Return every node of a tree in depth-first order, without ``child_comments``."""
    return [
        {key: value for key, value in node.items() if key != "child_comments"}
        for _, node in iter_comment_tree(tree)
    ]


def count_comments(tree: Iterable[CommentRecord]) -> int:
    return sum(1 for _ in iter_comment_tree(tree))
