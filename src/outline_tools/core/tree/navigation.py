"""Tree navigation: traversal, searching, ancestry."""

import heapq
from collections.abc import Callable, Iterator
from datetime import datetime

from outline_tools.core.tags import does_node_have_tag
from outline_tools.protocols import NodeProtocol


def iter_nodes(search_root: NodeProtocol) -> Iterator[NodeProtocol]:
    """Yield ``search_root`` and its descendants in pre-order (as shown in the UI)."""
    todo = [search_root]
    while todo:
        node = todo.pop()
        yield node
        todo.extend(reversed(node.children))


def apply_to_each_node(
    function: Callable[[NodeProtocol], object],
    search_root: NodeProtocol,
) -> None:
    for node in iter_nodes(search_root):
        function(node)


def find_matching_nodes(
    predicate: Callable[[NodeProtocol], bool],
    search_root: NodeProtocol,
) -> list[NodeProtocol]:
    """Nodes under ``search_root`` (inclusive) matching ``predicate``, in pre-order."""
    return [node for node in iter_nodes(search_root) if predicate(node)]


def find_nodes_with_tag(tag: str, search_root: NodeProtocol) -> list[NodeProtocol]:
    return find_matching_nodes(lambda n: does_node_have_tag(tag, n), search_root)


def node_to_path_as_nodes(node: NodeProtocol) -> tuple[NodeProtocol, ...]:
    """Path from the root down to ``node`` (both inclusive)."""
    return (*reversed(node.ancestors), node)


def is_ancestor(candidate: NodeProtocol, node: NodeProtocol) -> bool:
    """Whether ``candidate`` is a strict ancestor of ``node``."""
    return any(a.id == candidate.id for a in node.ancestors)


def find_closest_common_ancestor(node_a: NodeProtocol, node_b: NodeProtocol) -> NodeProtocol:
    """The deepest node that is an ancestor of both (inclusive of the nodes themselves).

    Raises:
        ValueError: If the nodes do not share a root.
    """
    path_a = node_to_path_as_nodes(node_a)
    path_b = node_to_path_as_nodes(node_b)
    shared = 0
    for a, b in zip(path_a, path_b, strict=False):
        if a.id != b.id:
            break
        shared += 1
    if shared == 0:
        msg = f"Nodes {node_a.id!r} and {node_b.id!r} share no common root"
        raise ValueError(msg)
    return path_a[shared - 1]


def find_top_nodes_by_score(
    score: Callable[[NodeProtocol], float],
    min_score: float,
    max_size: int,
    search_root: NodeProtocol,
) -> list[NodeProtocol]:
    """Highest-scoring nodes first; ties keep document order."""
    scored = (
        (value, node) for node in iter_nodes(search_root) if (value := score(node)) >= min_score
    )
    return [node for _, node in heapq.nlargest(max_size, scored, key=lambda pair: pair[0])]


def find_recently_edited_nodes(
    earliest_modified: datetime,
    max_size: int,
    search_root: NodeProtocol,
) -> list[NodeProtocol]:
    """Most recently edited nodes first, excluding those edited before ``earliest_modified``."""
    return find_top_nodes_by_score(
        lambda node: node.last_modified.timestamp(),
        earliest_modified.timestamp(),
        max_size,
        search_root,
    )
