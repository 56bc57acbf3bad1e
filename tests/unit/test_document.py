"""Tests for the in-memory outline document."""

from pathlib import Path

import pytest

from outline_tools.document import (
    OutlineDocument,
    load_document,
    parse_document_data,
    save_document,
)
from outline_tools.protocols import DocumentProtocol, NodeProtocol
from tests.unit.fakes import build_data, build_document

MINIMAL_DOC = {
    "file_id": "doc1",
    "title": "Test Doc",
    "nodes": [
        {"id": "root", "content": "", "note": "", "modified": 2000, "children": ["a"]},
        {
            "id": "a",
            "content": "<b>Child</b> A",
            "note": "a &amp; note",
            "modified": 2001,
            "checked": True,
        },
    ],
}


def test_parse_builds_tree_and_flags() -> None:
    doc = parse_document_data(MINIMAL_DOC)
    a = doc.get_node("a")
    assert doc.title == "Test Doc"
    assert len(doc) == 2
    assert a is not None
    assert a.parent is doc.root
    assert a.ancestors == (doc.root,)
    assert a.plain_name == "Child A"
    assert a.plain_note == "a & note"
    assert a.is_completed
    assert not a.is_read_only
    assert a.last_modified.timestamp() == pytest.approx(2.001)


def test_document_satisfies_protocols() -> None:
    doc = parse_document_data(MINIMAL_DOC)
    assert isinstance(doc, DocumentProtocol)
    assert isinstance(doc.root, NodeProtocol)


def test_parse_raises_on_orphans() -> None:
    data = build_data([("a", "A", [])])
    data["nodes"].append({"id": "stray", "content": "lost"})
    with pytest.raises(ValueError, match="Orphaned nodes"):
        parse_document_data(data)


def test_parse_requires_root() -> None:
    with pytest.raises(ValueError, match="root"):
        parse_document_data({"nodes": [{"id": "a"}]})


@pytest.mark.parametrize("children", [["zz"], ["a", "a"]])
def test_parse_rejects_unknown_or_repeated_children(children: list[str]) -> None:
    data = {"nodes": [{"id": "root", "children": children}, {"id": "a"}]}
    with pytest.raises(ValueError, match="Unknown or repeated child id"):
        parse_document_data(data)


def test_iteration_is_pre_order() -> None:
    doc = build_document([("a", "A", [("a1", "A1", [])]), ("b", "B", [])])
    assert [n.id for n in doc] == ["root", "a", "a1", "b"]


def test_move_below_itself_is_refused() -> None:
    doc = build_document([("a", "A", [("a1", "A1", [])])])
    a, a1 = doc.get_node("a"), doc.get_node("a1")
    assert a is not None and a1 is not None
    with pytest.raises(ValueError, match="below itself"):
        doc.move(a, a1)
    with pytest.raises(ValueError, match="root"):
        doc.move(doc.root, a)


def test_nested_edit_groups_form_one_undo_step() -> None:
    doc = build_document([("a", "A", []), ("b", "B", [])])
    a, b = doc.get_node("a"), doc.get_node("b")
    assert a is not None and b is not None

    with doc.edit_group():
        doc.set_name(a, "A2")
        with doc.edit_group():
            doc.move(b, a)
            doc.set_completed(b)
    doc.set_note(a, "outside")

    assert doc.undo_depth == 2
    assert doc.undo()
    assert a.note == ""
    assert doc.undo()
    assert a.name == "A"
    assert b.parent is doc.root
    assert not b.is_completed
    assert not doc.undo()


def test_create_node_is_undoable() -> None:
    doc = build_document([("a", "A", [])])
    a = doc.get_node("a")
    assert a is not None
    created = doc.create_node(a, name="new")
    assert created.parent is a
    assert doc.get_node(created.id) is created

    doc.undo()
    assert a.children == ()
    assert doc.get_node(created.id) is None


def test_nodes_from_another_document_are_refused() -> None:
    first, second = build_document([("a", "A", [])]), build_document([("a", "A", [])])
    node = second.get_node("a")
    assert node is not None
    with pytest.raises(ValueError, match="does not belong"):
        first.set_name(node, "x")


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    doc = build_document([("a", "A", [("a1", "A1", [], {"readonly": True})])])
    path = tmp_path / "out.c.json"
    save_document(doc, path)

    loaded = load_document(path)
    a1 = loaded.get_node("a1")
    assert [n.id for n in loaded] == ["root", "a", "a1"]
    assert a1 is not None and a1.is_read_only


def test_empty_document_has_a_root() -> None:
    doc = OutlineDocument()
    assert doc.root.children == ()
    assert doc.get_node("root") is doc.root
