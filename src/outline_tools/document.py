"""In-memory outline document, loadable from Dynalist .c.json data."""

import json
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger

from outline_tools.core.text import rich_to_plain

ROOT_ID = "root"


class OutlineNode:
    """A node of an OutlineDocument. Mutated only through the document."""

    def __init__(
        self,
        node_id: str,
        *,
        name: str = "",
        note: str = "",
        completed: bool = False,
        read_only: bool = False,
        embedded: bool = False,
        modified: datetime | None = None,
    ) -> None:
        self._id = node_id
        self._name = name
        self._note = note
        self._completed = completed
        self._read_only = read_only
        self._embedded = embedded
        self._modified = modified or datetime.now(UTC)
        self._parent: OutlineNode | None = None
        self._children: list[OutlineNode] = []

    def __repr__(self) -> str:
        return f"OutlineNode({self._id!r}, name={self._name[:30]!r})"

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def note(self) -> str:
        return self._note

    @property
    def plain_name(self) -> str:
        return rich_to_plain(self._name)

    @property
    def plain_note(self) -> str:
        return rich_to_plain(self._note)

    @property
    def parent(self) -> "OutlineNode | None":
        return self._parent

    @property
    def children(self) -> tuple["OutlineNode", ...]:
        return tuple(self._children)

    @property
    def ancestors(self) -> tuple["OutlineNode", ...]:
        result: list[OutlineNode] = []
        current = self._parent
        while current is not None:
            result.append(current)
            current = current._parent
        return tuple(result)

    @property
    def is_read_only(self) -> bool:
        return self._read_only

    @property
    def is_embedded(self) -> bool:
        return self._embedded

    @property
    def is_completed(self) -> bool:
        return self._completed

    @property
    def last_modified(self) -> datetime:
        return self._modified


class OutlineDocument:
    """Host document keeping nodes in memory.

    Every write is journaled with its inverse. Writes made inside the
    outermost ``edit_group()`` form one undo step.
    """

    def __init__(self, root: OutlineNode | None = None, *, title: str = "") -> None:
        self.title = title
        self._root = root or OutlineNode(ROOT_ID)
        self._nodes: dict[str, OutlineNode] = {}
        self._register(self._root)
        self._group_depth = 0
        self._current_step: list[Callable[[], None]] | None = None
        self._undo_steps: list[list[Callable[[], None]]] = []
        self._next_id = 0

    def _register(self, node: OutlineNode) -> None:
        if node.id in self._nodes:
            msg = f"Duplicate node id: {node.id!r}"
            raise ValueError(msg)
        self._nodes[node.id] = node
        for child in node._children:
            self._register(child)

    @property
    def root(self) -> OutlineNode:
        return self._root

    @property
    def undo_depth(self) -> int:
        return len(self._undo_steps)

    def get_node(self, node_id: str) -> OutlineNode | None:
        return self._nodes.get(node_id)

    def __iter__(self) -> Iterator[OutlineNode]:
        todo = [self._root]
        while todo:
            node = todo.pop()
            yield node
            todo.extend(reversed(node._children))

    def __len__(self) -> int:
        return len(self._nodes)

    # --- Edit groups ---

    @contextmanager
    def edit_group(self) -> Iterator[None]:
        """Group writes into a single undo step. Re-entrant."""
        if self._group_depth == 0:
            self._current_step = []
        self._group_depth += 1
        try:
            yield
        finally:
            self._group_depth -= 1
            if self._group_depth == 0:
                if self._current_step:
                    self._undo_steps.append(self._current_step)
                    logger.debug("Edit group closed with {} change(s)", len(self._current_step))
                self._current_step = None

    def _record(self, inverse: Callable[[], None]) -> None:
        if self._current_step is None:
            self._undo_steps.append([inverse])
        else:
            self._current_step.append(inverse)

    def undo(self) -> bool:
        """Revert the most recent undo step. Returns False if there is none."""
        if self._group_depth:
            msg = "Cannot undo while an edit group is open"
            raise RuntimeError(msg)
        if not self._undo_steps:
            return False
        step = self._undo_steps.pop()
        for inverse in reversed(step):
            inverse()
        return True

    # --- Writes ---

    def _check_writable(self, node: OutlineNode) -> None:
        if self._nodes.get(node.id) is not node:
            msg = f"Node {node.id!r} does not belong to this document"
            raise ValueError(msg)

    def _touch(self, node: OutlineNode) -> None:
        node._modified = datetime.now(UTC)

    def set_name(self, node: OutlineNode, name: str) -> None:
        self._check_writable(node)
        old, old_modified = node._name, node._modified

        def inverse() -> None:
            node._name, node._modified = old, old_modified

        node._name = name
        self._touch(node)
        self._record(inverse)

    def set_note(self, node: OutlineNode, note: str) -> None:
        self._check_writable(node)
        old, old_modified = node._note, node._modified

        def inverse() -> None:
            node._note, node._modified = old, old_modified

        node._note = note
        self._touch(node)
        self._record(inverse)

    def set_completed(self, node: OutlineNode, completed: bool = True) -> None:
        self._check_writable(node)
        old, old_modified = node._completed, node._modified

        def inverse() -> None:
            node._completed, node._modified = old, old_modified

        node._completed = completed
        self._touch(node)
        self._record(inverse)

    def _place(self, node: OutlineNode, parent: OutlineNode, priority: int) -> None:
        if node._parent is not None:
            node._parent._children.remove(node)
        index = max(0, min(priority, len(parent._children)))
        parent._children.insert(index, node)
        node._parent = parent

    def move(self, node: OutlineNode, parent: OutlineNode, priority: int = 0) -> None:
        self._check_writable(node)
        self._check_writable(parent)
        if node is self._root:
            msg = "Cannot move the root node"
            raise ValueError(msg)
        if node is parent or node in parent.ancestors:
            msg = f"Cannot move {node.id!r} below itself"
            raise ValueError(msg)
        old_parent = node._parent
        if old_parent is None:
            msg = f"Node {node.id!r} is detached from the document"
            raise ValueError(msg)
        old_index = old_parent._children.index(node)

        def inverse() -> None:
            self._place(node, old_parent, old_index)

        self._place(node, parent, priority)
        self._record(inverse)

    def create_node(
        self,
        parent: OutlineNode,
        *,
        priority: int = 0,
        name: str = "",
        note: str = "",
    ) -> OutlineNode:
        self._check_writable(parent)
        self._next_id += 1
        node_id = f"new-{self._next_id}"
        while node_id in self._nodes:
            self._next_id += 1
            node_id = f"new-{self._next_id}"
        node = OutlineNode(node_id, name=name, note=note)
        self._nodes[node_id] = node
        self._place(node, parent, priority)

        def inverse() -> None:
            parent._children.remove(node)
            node._parent = None
            del self._nodes[node_id]

        self._record(inverse)
        return node

    # --- Serialization ---

    def to_data(self) -> dict[str, Any]:
        """Return the document in the .c.json shape it was loaded from."""
        nodes: list[dict[str, Any]] = []
        for node in self:
            raw: dict[str, Any] = {
                "id": node.id,
                "content": node.name,
                "note": node.note,
                "modified": int(node.last_modified.timestamp() * 1000),
            }
            if node._children:
                raw["children"] = [c.id for c in node._children]
            if node.is_completed:
                raw["checked"] = True
            if node.is_read_only:
                raw["readonly"] = True
            if node.is_embedded:
                raw["embedded"] = True
            nodes.append(raw)
        return {"title": self.title, "nodes": nodes}


def parse_document_data(data: dict[str, Any]) -> OutlineDocument:
    """Build an OutlineDocument from raw .c.json-style data.

    Args:
        data: Dict with a ``nodes`` list; each node has ``id`` and optional
            ``content``, ``note``, ``children``, ``checked``, ``modified``
            (ms since epoch), ``readonly`` and ``embedded``.

    Raises:
        ValueError: If the root is missing, a child id is unknown or listed
            twice, or some nodes are unreachable.
    """
    nodes_by_id = {n["id"]: n for n in data["nodes"]}
    if ROOT_ID not in nodes_by_id:
        msg = f"Document has no {ROOT_ID!r} node"
        raise ValueError(msg)

    def build(raw: dict[str, Any]) -> OutlineNode:
        modified_ms = raw.get("modified")
        return OutlineNode(
            raw["id"],
            name=raw.get("content", ""),
            note=raw.get("note", ""),
            completed=bool(raw.get("checked", False)),
            read_only=bool(raw.get("readonly", False)),
            embedded=bool(raw.get("embedded", False)),
            modified=(
                datetime.fromtimestamp(modified_ms / 1000, UTC) if modified_ms is not None else None
            ),
        )

    root_raw = nodes_by_id.pop(ROOT_ID)
    root = build(root_raw)
    todo: deque[tuple[OutlineNode, list[str]]] = deque([(root, root_raw.get("children", []))])
    while todo:
        parent, child_ids = todo.popleft()
        for child_id in child_ids:
            if child_id not in nodes_by_id:
                msg = f"Unknown or repeated child id {child_id!r} under {parent.id!r}"
                raise ValueError(msg)
            raw = nodes_by_id.pop(child_id)
            child = build(raw)
            child._parent = parent
            parent._children.append(child)
            todo.append((child, raw.get("children", [])))

    if nodes_by_id:
        msg = f"Orphaned nodes: {sorted(nodes_by_id.keys())!r}"
        raise ValueError(msg)

    return OutlineDocument(root, title=data.get("title", ""))


def load_document(path: Path) -> OutlineDocument:
    with open(path, encoding="utf-8") as f:
        return parse_document_data(json.load(f))


def save_document(document: OutlineDocument, path: Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document.to_data(), f, indent=2, ensure_ascii=False)
        f.write("\n")
