"""Validate and apply batches of node moves as one edit group."""

from loguru import logger

from outline_tools.core.tree.navigation import is_ancestor
from outline_tools.models.node import ItemMove, MoveResult
from outline_tools.protocols import DocumentProtocol, NodeProtocol


def describe_node(node: NodeProtocol | None) -> str:
    if node is None:
        return "<missing node>"
    name = node.plain_name.split("\n", 1)[0]
    if len(name) > 40:
        name = name[:37] + "..."
    return f"{name!r} ({node.id})"


def check_move(move: ItemMove) -> str | None:
    """Return why ``move`` is unsafe, or None if it can be applied."""
    node, target = move.node, move.target
    if node is None or target is None:
        return "source or target no longer exists"
    if node.id == target.id:
        return "cannot move a node into itself"
    if node.is_read_only:
        return "source is read-only"
    if target.is_read_only:
        return "target is read-only"
    if is_ancestor(node, target):
        return "source is an ancestor of the target"
    return None


def format_unsafe_move(move: ItemMove, reason: str) -> str:
    return f"Cannot move {describe_node(move.node)} to {describe_node(move.target)}: {reason}"


def perform_moves(document: DocumentProtocol, moves: list[ItemMove]) -> MoveResult:
    """Apply ``moves`` in order inside a single edit group.

    Each move is checked again right before it is applied, since earlier
    moves in the batch can change what is safe. The batch stops at the first
    unsafe move; moves already applied are kept.

    Args:
        document: The host document.
        moves: Moves to apply; each node becomes the first child of its target.

    Returns:
        MoveResult with the number of moves applied and, on failure, a
        message naming the offending move.
    """
    if not moves:
        return MoveResult(success=True, moves_applied=0)

    applied = 0
    with document.edit_group():
        for move in moves:
            reason = check_move(move)
            if reason is not None:
                error = format_unsafe_move(move, reason)
                if applied:
                    noun = "move was" if applied == 1 else "moves were"
                    error += f" ({applied} {noun} already applied)"
                logger.warning(error)
                return MoveResult(success=False, moves_applied=applied, error=error)
            node, target = move.node, move.target
            if node is None or target is None:
                msg = "check_move passed a move with a missing node"
                raise RuntimeError(msg)
            document.move(node, target, 0)
            applied += 1
            logger.debug("Moved {} under {}", describe_node(node), describe_node(target))

    logger.info("Applied {} move(s)", applied)
    return MoveResult(success=True, moves_applied=applied)
