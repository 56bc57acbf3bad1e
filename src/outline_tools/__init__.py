"""Relative dates, tag arguments and name-tree reconciliation for outline documents."""

from outline_tools.core.dates.interpreter import date_range, interpret
from outline_tools.core.tags import string_to_tag_args_text
from outline_tools.core.tree.name_chain import extract
from outline_tools.core.tree.name_tree import analyze, reconcile_name_tree
from outline_tools.core.write.moves import perform_moves
from outline_tools.document import OutlineDocument, load_document
from outline_tools.protocols import DocumentProtocol, NodeProtocol

__all__ = [
    "DocumentProtocol",
    "NodeProtocol",
    "OutlineDocument",
    "analyze",
    "date_range",
    "extract",
    "interpret",
    "load_document",
    "perform_moves",
    "reconcile_name_tree",
    "string_to_tag_args_text",
]
