"""Things an action can point at: a function, a node, or a script."""

import inspect
from collections.abc import Callable
from dataclasses import dataclass

from outline_tools.core.tags import node_to_tag_args_text
from outline_tools.protocols import NavigatorProtocol, NodeProtocol


@dataclass(frozen=True)
class RunFunction:
    function: Callable[[], object]

    def __post_init__(self) -> None:
        if not callable(self.function):
            msg = f"RunFunction needs a callable, got {self.function!r}"
            raise TypeError(msg)
        try:
            signature = inspect.signature(self.function)
        except (TypeError, ValueError):
            return
        required = [
            p
            for p in signature.parameters.values()
            if p.default is p.empty and p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
        ]
        if required:
            msg = f"RunFunction needs a function without arguments, {self.function!r} takes some"
            raise TypeError(msg)


@dataclass(frozen=True)
class GoToNode:
    node_id: str
    query: str | None = None


@dataclass(frozen=True)
class RunScript:
    source: str


Target = RunFunction | GoToNode | RunScript


def activate(target: Target, navigator: NavigatorProtocol) -> None:
    if isinstance(target, RunFunction):
        target.function()
    elif isinstance(target, GoToNode):
        navigator.go_to(target.node_id, target.query)
    elif isinstance(target, RunScript):
        navigator.run_script(target.source)
    else:
        msg = f"Not a target: {target!r}"
        raise TypeError(msg)


def target_from_node(node: NodeProtocol, tag: str = "#goto") -> GoToNode:
    """Zoom target for a node; ``#goto(query)`` in the node supplies the query."""
    query = node_to_tag_args_text(tag, node)
    return GoToNode(node_id=node.id, query=query or None)
