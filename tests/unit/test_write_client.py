"""Tests for the dating and completion actions."""

from datetime import date, datetime

from outline_tools.core.dates.annotation import first_date, has_date, render_marker
from outline_tools.core.write.client import (
    clear_node_date,
    complete_nodes,
    schedule_node,
    set_node_date,
)
from outline_tools.document import OutlineDocument, OutlineNode
from outline_tools.models.node import DateEntry
from tests.unit.fakes import build_document

MARKER = render_marker(DateEntry.from_date(date(2024, 1, 5)))


def _doc_with(name: str, note: str = "", **extra: object) -> tuple[OutlineDocument, OutlineNode]:
    doc = build_document([("n", name, [], {"note": note, **extra})])
    node = doc.get_node("n")
    assert node is not None
    return doc, node


def test_schedule_node_prepends_date_to_name(monday: datetime) -> None:
    doc, node = _doc_with("Call the bank")

    result = schedule_node(doc, node, "fri", monday)

    assert result["success"] is True
    assert result["date"] == "2024-03-15"
    assert result["description"] == "Friday, 4 days away"
    assert node.plain_name == "Fri, Mar 15, 2024 Call the bank"
    assert doc.undo_depth == 1


def test_schedule_node_replaces_existing_date(monday: datetime) -> None:
    doc, node = _doc_with(f"Call {MARKER} the bank")

    schedule_node(doc, node, "tomorrow", monday)

    assert first_date(node.name) == DateEntry.from_date(date(2024, 3, 12))
    assert node.plain_name == "Call Tue, Mar 12, 2024 the bank"


def test_schedule_node_updates_date_in_note(monday: datetime) -> None:
    doc, node = _doc_with("Task", note=f"due {MARKER}")

    schedule_node(doc, node, "2w", monday)

    assert not has_date(node.name)
    assert first_date(node.note) == DateEntry.from_date(date(2024, 3, 25))


def test_schedule_node_reports_interpretation_errors(monday: datetime) -> None:
    doc, node = _doc_with("Task")

    result = schedule_node(doc, node, "t", monday)

    assert result["success"] is False
    assert result["kind"] == "ambiguous"
    assert node.name == "Task"
    assert doc.undo_depth == 0


def test_set_node_date_refuses_multiple_dates() -> None:
    doc, node = _doc_with(f"{MARKER} twice", note=MARKER)

    result = set_node_date(doc, node, DateEntry.from_date(date(2030, 1, 1)))

    assert result["success"] is False
    assert "2 dates" in result["error"]
    assert doc.undo_depth == 0


def test_set_node_date_refuses_read_only() -> None:
    doc, node = _doc_with("Frozen", readonly=True)
    result = set_node_date(doc, node, DateEntry.from_date(date(2030, 1, 1)))
    assert result["success"] is False


def test_clear_node_date() -> None:
    doc, node = _doc_with(f"Call{MARKER}back")

    assert clear_node_date(doc, node)["success"] is True
    assert node.name == "Call back"
    assert clear_node_date(doc, node)["success"] is False


def test_complete_nodes_is_one_edit() -> None:
    doc = build_document([("a", "A", []), ("b", "B", []), ("c", "C", [], {"checked": True})])
    nodes = [doc.get_node(i) for i in ("a", "b", "c")]

    result = complete_nodes(doc, nodes)  # type: ignore[arg-type]

    assert result == {"success": True, "completed": 3}
    assert all(n is not None and n.is_completed for n in nodes)
    assert doc.undo_depth == 1


def test_complete_nodes_refuses_read_only_up_front() -> None:
    doc = build_document([("a", "A", []), ("r", "R", [], {"readonly": True})])
    nodes = [doc.get_node("a"), doc.get_node("r")]

    result = complete_nodes(doc, nodes)  # type: ignore[arg-type]

    assert result["success"] is False
    assert doc.undo_depth == 0
