"""Compare the hierarchy declared by name chains with the actual tree.

A node whose chain is ``a::b::`` belongs under the node whose chain is
``a::``. ``analyze`` classifies every node by how many such parents exist
and works out which moves would bring the tree in line; ``reconcile_name_tree``
runs the whole pipeline against a document.
"""

from collections.abc import Callable, Mapping, Sequence

from loguru import logger

from outline_tools.config import Settings
from outline_tools.core.tree.name_chain import node_to_name_chain, parent_chain
from outline_tools.core.tree.navigation import iter_nodes
from outline_tools.core.write.moves import (
    check_move,
    describe_node,
    format_unsafe_move,
    perform_moves,
)
from outline_tools.models.node import ItemMove, NameTreeAnalysisResult, ReconcileReport
from outline_tools.protocols import DocumentProtocol, NodeProtocol

NodeFilter = Callable[[NodeProtocol], bool]
ChainFilter = Callable[[str], bool]


def find_name_chains(
    search_root: NodeProtocol,
    predicate: NodeFilter | None = None,
    *,
    settings: Settings | None = None,
) -> dict[str, list[NodeProtocol]]:
    """Group the nodes under ``search_root`` (inclusive) by name chain.

    Nodes without a chain are left out, as are embedded nodes and completed
    nodes unless ``settings`` asks for them.
    """
    settings = settings or Settings()
    chains: dict[str, list[NodeProtocol]] = {}
    for node in iter_nodes(search_root):
        if node.is_embedded and not settings.include_embedded:
            continue
        if node.is_completed and settings.ignore_completed:
            continue
        if predicate is not None and not predicate(node):
            continue
        chain = node_to_name_chain(node)
        if chain is not None:
            chains.setdefault(chain, []).append(node)
    return chains


def _is_child_of(node: NodeProtocol, parent: NodeProtocol) -> bool:
    return node.parent is not None and node.parent.id == parent.id


def analyze(
    chain_to_nodes: Mapping[str, Sequence[NodeProtocol]],
    chain_filter: ChainFilter | None = None,
    node_filter: NodeFilter | None = None,
) -> NameTreeAnalysisResult:
    """Classify nodes against their declared parents and compute the moves.

    Args:
        chain_to_nodes: Every node with a chain, grouped by chain. Parent
            candidates are looked up here regardless of the filters.
        chain_filter: Only chains passing this are analysed.
        node_filter: Only nodes passing this are classified.

    Returns:
        A fresh snapshot. Moves that fail the safety check are reported in
        ``impossible_moves`` instead of ``moves``.
    """
    roots: list[NodeProtocol] = []
    single_parent: list[NodeProtocol] = []
    no_parent: list[NodeProtocol] = []
    many_parent: list[NodeProtocol] = []
    duplicates: dict[str, tuple[NodeProtocol, ...]] = {}
    pending: list[ItemMove] = []
    impossible: list[str] = []

    for chain, nodes in chain_to_nodes.items():
        if chain_filter is not None and not chain_filter(chain):
            continue
        parent = parent_chain(chain)
        candidates = list(chain_to_nodes.get(parent, ())) if parent is not None else []
        selected = [n for n in nodes if node_filter is None or node_filter(n)]
        if len(selected) > 1:
            duplicates[chain] = tuple(selected)

        for node in selected:
            if parent is None:
                roots.append(node)
            elif not candidates:
                no_parent.append(node)
                impossible.append(f"No node named {parent!r} to hold {describe_node(node)}")
            elif len(candidates) == 1:
                single_parent.append(node)
                if not _is_child_of(node, candidates[0]):
                    pending.append(ItemMove(node=node, target=candidates[0]))
            else:
                many_parent.append(node)
                if not any(_is_child_of(node, c) for c in candidates):
                    names = ", ".join(describe_node(c) for c in candidates)
                    impossible.append(
                        f"{len(candidates)} nodes named {parent!r} could hold "
                        f"{describe_node(node)}: {names}"
                    )

    moves: list[ItemMove] = []
    for move in pending:
        reason = check_move(move)
        if reason is None:
            moves.append(move)
        else:
            impossible.append(format_unsafe_move(move, reason))

    return NameTreeAnalysisResult(
        roots=tuple(roots),
        single_parent=tuple(single_parent),
        no_parent=tuple(no_parent),
        many_parent=tuple(many_parent),
        duplicates=duplicates,
        moves=tuple(moves),
        impossible_moves=tuple(impossible),
    )


def reconcile_name_tree(
    document: DocumentProtocol,
    search_root: NodeProtocol | None = None,
    *,
    settings: Settings | None = None,
    predicate: NodeFilter | None = None,
    confirm: Callable[[NameTreeAnalysisResult], bool] | None = None,
    dry_run: bool = False,
) -> ReconcileReport:
    """Analyse the name tree under ``search_root`` and apply the safe moves.

    Args:
        document: The host document.
        search_root: Where to look for named nodes (default: document root).
        settings: Which nodes take part (see ``find_name_chains``).
        predicate: Extra node filter applied while collecting chains.
        confirm: Called with the analysis before anything changes; returning
            False leaves the document untouched.
        dry_run: Analyse only.
    """
    root = search_root or document.root
    analysis = analyze(find_name_chains(root, predicate, settings=settings))

    logger.info(
        "Name tree: {} root(s), {} placed by name, {} without parent, {} ambiguous",
        len(analysis.roots),
        len(analysis.single_parent),
        len(analysis.no_parent),
        len(analysis.many_parent),
    )
    for chain, nodes in analysis.duplicates.items():
        logger.info("{} nodes share the name {!r}", len(nodes), chain)
    for problem in analysis.impossible_moves:
        logger.warning(problem)

    if dry_run or not analysis.moves:
        return ReconcileReport(analysis=analysis)
    if confirm is not None and not confirm(analysis):
        logger.info("Not moving {} node(s): declined", len(analysis.moves))
        return ReconcileReport(analysis=analysis)

    return ReconcileReport(analysis=analysis, result=perform_moves(document, list(analysis.moves)))
