"""Dating and completion actions against a host document."""

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from loguru import logger

from outline_tools.config import END_OF_TIME_DATE
from outline_tools.core.dates.annotation import (
    MultipleDatesError,
    clear_date,
    fail_if_multiple,
    has_date,
    set_date,
)
from outline_tools.core.dates.interpreter import interpret
from outline_tools.models.node import DateEntry, DateError
from outline_tools.protocols import DocumentProtocol, NodeProtocol


def set_node_date(
    document: DocumentProtocol,
    node: NodeProtocol,
    entry: DateEntry,
) -> dict[str, Any]:
    """Set the date shown in a node.

    The node's existing marker is replaced wherever it is (name or note);
    otherwise a marker is prepended to the name.

    Args:
        document: The host document.
        node: Node to date.
        entry: The date to show.
    """
    try:
        fail_if_multiple(node.name, node.note)
    except MultipleDatesError as e:
        return {"success": False, "error": str(e)}
    if node.is_read_only:
        return {"success": False, "error": f"Node {node.id} is read-only"}

    with document.edit_group():
        if has_date(node.note) and not has_date(node.name):
            document.set_note(node, set_date(node.note, entry))
        else:
            document.set_name(node, set_date(node.name, entry))

    logger.info("Dated node {} as {}", node.id, entry.label)
    return {"success": True, "node_id": node.id, "date": entry.iso}


def clear_node_date(document: DocumentProtocol, node: NodeProtocol) -> dict[str, Any]:
    """Remove the date marker from a node's name, or else from its note."""
    try:
        fail_if_multiple(node.name, node.note)
    except MultipleDatesError as e:
        return {"success": False, "error": str(e)}
    if not (has_date(node.name) or has_date(node.note)):
        return {"success": False, "error": f"Node {node.id} has no date."}
    if node.is_read_only:
        return {"success": False, "error": f"Node {node.id} is read-only"}

    with document.edit_group():
        if has_date(node.name):
            document.set_name(node, clear_date(node.name))
        else:
            document.set_note(node, clear_date(node.note))
    return {"success": True, "node_id": node.id}


def schedule_node(
    document: DocumentProtocol,
    node: NodeProtocol,
    expression: str,
    reference: date | datetime,
    *,
    end_of_time: date = END_OF_TIME_DATE,
) -> dict[str, Any]:
    """Interpret ``expression`` (e.g. "fri week") and date the node with it."""
    result = interpret(expression, reference, end_of_time=end_of_time)
    if isinstance(result, DateError):
        return {"success": False, "error": result.message, "kind": result.kind.value}

    output = set_node_date(document, node, result.entry)
    if output["success"]:
        output["description"] = result.description
    return output


def complete_nodes(document: DocumentProtocol, nodes: Sequence[NodeProtocol]) -> dict[str, Any]:
    """Mark nodes completed as a single edit. Read-only nodes are refused up front."""
    read_only = [n.id for n in nodes if n.is_read_only]
    if read_only:
        return {"success": False, "error": f"Read-only nodes: {read_only!r}"}

    with document.edit_group():
        for node in nodes:
            if not node.is_completed:
                document.set_completed(node, True)
    return {"success": True, "completed": len(nodes)}
