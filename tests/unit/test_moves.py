"""Tests for move safety checks and batched moves."""

import pytest

from outline_tools.core.write.moves import check_move, perform_moves
from outline_tools.document import OutlineDocument, OutlineNode
from outline_tools.models.node import ItemMove
from tests.unit.fakes import build_document


@pytest.fixture
def doc() -> OutlineDocument:
    return build_document(
        [
            ("a", "A", [("c", "C", [])]),
            ("b", "B", []),
            ("d", "D", []),
            ("e", "E", []),
            ("locked", "Locked", [], {"readonly": True}),
        ]
    )


def _node(doc: OutlineDocument, node_id: str) -> OutlineNode:
    node = doc.get_node(node_id)
    assert node is not None
    return node


def test_check_move_accepts_plain_move(doc: OutlineDocument) -> None:
    assert check_move(ItemMove(_node(doc, "b"), _node(doc, "a"))) is None


def test_check_move_rejects_missing_nodes(doc: OutlineDocument) -> None:
    assert check_move(ItemMove(None, _node(doc, "a"))) == "source or target no longer exists"
    assert check_move(ItemMove(_node(doc, "a"), None)) == "source or target no longer exists"


def test_check_move_rejects_self_and_read_only(doc: OutlineDocument) -> None:
    a, locked = _node(doc, "a"), _node(doc, "locked")
    assert check_move(ItemMove(a, a)) == "cannot move a node into itself"
    assert check_move(ItemMove(locked, a)) == "source is read-only"
    assert check_move(ItemMove(a, locked)) == "target is read-only"


def test_check_move_rejects_cycles(doc: OutlineDocument) -> None:
    assert check_move(ItemMove(_node(doc, "a"), _node(doc, "c"))) == (
        "source is an ancestor of the target"
    )


def test_empty_batch_is_a_no_op(doc: OutlineDocument) -> None:
    result = perform_moves(doc, [])
    assert result.success
    assert result.moves_applied == 0
    assert doc.undo_depth == 0


def test_batch_moves_to_first_position_as_one_undo_step(doc: OutlineDocument) -> None:
    a = _node(doc, "a")
    result = perform_moves(doc, [ItemMove(_node(doc, "b"), a), ItemMove(_node(doc, "d"), a)])
    assert result.success
    assert result.moves_applied == 2
    assert [n.id for n in a.children] == ["d", "b", "c"]
    assert doc.undo_depth == 1

    doc.undo()
    assert [n.id for n in a.children] == ["c"]
    assert [n.id for n in doc.root.children] == ["a", "b", "d", "e", "locked"]


def test_batch_stops_at_first_unsafe_move(doc: OutlineDocument) -> None:
    a, b, e = _node(doc, "a"), _node(doc, "b"), _node(doc, "e")
    valid = ItemMove(b, a)
    unsafe = ItemMove(_node(doc, "locked"), a)
    never = ItemMove(e, a)

    result = perform_moves(doc, [valid, unsafe, never])

    assert not result.success
    assert result.moves_applied == 1
    assert result.error is not None
    assert "(locked)" in result.error
    assert "1 move was already applied" in result.error
    assert b.parent is a
    assert e.parent is doc.root


def test_moves_are_rechecked_when_applied(doc: OutlineDocument) -> None:
    """Moving B under C makes A an ancestor of B, so A can no longer go under B."""
    a, b, c = _node(doc, "a"), _node(doc, "b"), _node(doc, "c")
    second = ItemMove(a, b)
    assert check_move(second) is None

    result = perform_moves(doc, [ItemMove(b, c), second])

    assert not result.success
    assert result.moves_applied == 1
    assert result.error is not None
    assert "ancestor" in result.error
    assert a.parent is doc.root
