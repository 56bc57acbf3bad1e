"""Shared test fixtures."""

import json
from datetime import datetime
from pathlib import Path

import pytest

from outline_tools.document import OutlineDocument
from tests.unit.fakes import Tree, build_data, build_document

# root
# |- w      Work::
# |  `- p   Work::Proj::          (already in place)
# |- q      work :: [Other] ::    (belongs under w)
# |- o      Home::Garden::        (no "home::" node)
# |- a1     Dup::
# |- a2     dup::                 (same chain as a1)
# |- x      Dup::Child::          (two possible parents)
# |- ro     Work::RO::            (read-only, cannot be moved)
# `- plain  Just a note
NAME_TREE: Tree = [
    ("w", "Work::", [("p", "Work::Proj::", [])]),
    ("q", "work :: [Other] :: details", []),
    ("o", "Home::Garden::", []),
    ("a1", "Dup::", []),
    ("a2", "dup::", []),
    ("x", "Dup::Child::", []),
    ("ro", "Work::RO::", [], {"readonly": True}),
    ("plain", "Just a note", []),
]


@pytest.fixture
def name_tree_doc() -> OutlineDocument:
    return build_document(NAME_TREE)


@pytest.fixture
def monday() -> datetime:
    return datetime(2024, 3, 11, 8, 30)


@pytest.fixture
def name_tree_file(tmp_path: Path) -> Path:
    """Write the name tree document to disk and return its path."""
    path = tmp_path / "outline.c.json"
    path.write_text(json.dumps(build_data(NAME_TREE)))
    return path
