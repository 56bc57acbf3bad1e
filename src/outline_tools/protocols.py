"""Protocols describing what outline-tools needs from a host document."""

from collections.abc import Sequence
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class NodeProtocol(Protocol):
    """Read-only view of a single node owned by the host document."""

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str:
        """Rich text name (may contain markup such as date markers)."""
        ...

    @property
    def note(self) -> str:
        """Rich text note."""
        ...

    @property
    def plain_name(self) -> str: ...

    @property
    def plain_note(self) -> str: ...

    @property
    def parent(self) -> "NodeProtocol | None": ...

    @property
    def children(self) -> Sequence["NodeProtocol"]: ...

    @property
    def ancestors(self) -> Sequence["NodeProtocol"]:
        """Ancestors ordered from the parent up to the root."""
        ...

    @property
    def is_read_only(self) -> bool: ...

    @property
    def is_embedded(self) -> bool: ...

    @property
    def is_completed(self) -> bool: ...

    @property
    def last_modified(self) -> datetime: ...


@runtime_checkable
class DocumentProtocol(Protocol):
    """Write access to the host document.

    All writes made inside one ``edit_group()`` block form a single atomic
    edit (one undo step) as far as the host is concerned.
    """

    @property
    def root(self) -> NodeProtocol: ...

    def get_node(self, node_id: str) -> NodeProtocol | None:
        """Look up a node by id, returning None when it does not exist."""
        ...

    def set_name(self, node: NodeProtocol, name: str) -> None: ...

    def set_note(self, node: NodeProtocol, note: str) -> None: ...

    def move(self, node: NodeProtocol, parent: NodeProtocol, priority: int = 0) -> None:
        """Move ``node`` to become the child of ``parent`` at index ``priority``."""
        ...

    def set_completed(self, node: NodeProtocol, completed: bool = True) -> None: ...

    def create_node(
        self,
        parent: NodeProtocol,
        *,
        priority: int = 0,
        name: str = "",
        note: str = "",
    ) -> NodeProtocol: ...

    def edit_group(self) -> AbstractContextManager[None]: ...


@runtime_checkable
class NavigatorProtocol(Protocol):
    """Host actions used when activating a target."""

    def go_to(self, node_id: str, query: str | None = None) -> None:
        """Zoom into a node, optionally applying a search query."""
        ...

    def run_script(self, source: str) -> None:
        """Run a user script in the host environment."""
        ...
