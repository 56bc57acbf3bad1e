"""Tests for name chain extraction."""

from datetime import date

from outline_tools.core.dates.annotation import render_marker
from outline_tools.core.text import rich_to_plain
from outline_tools.core.tree.name_chain import (
    chain_segments,
    extract,
    normalize_segment,
    parent_chain,
)
from outline_tools.models.node import DateEntry


def _chain(rich: str) -> str | None:
    return extract(rich_to_plain(rich), rich)


def test_chain_is_lower_cased_with_trailing_separator() -> None:
    assert _chain("Work::Project::") == "work::project::"


def test_text_after_last_separator_is_not_part_of_chain() -> None:
    assert _chain("Work::Project:: kickoff notes") == "work::project::"
    assert _chain("Work::Project") == "work::"


def test_no_separator_means_no_chain() -> None:
    assert _chain("Just a node") is None
    assert _chain("") is None
    assert extract(None, None) is None


def test_wrapping_brackets_and_whitespace_are_stripped() -> None:
    assert _chain(" [Work] :: ( Big {Project} ) ::") == "work::big {project}::"
    assert _chain("{[ (a) ]}::") == "a::"


def test_brackets_that_do_not_wrap_the_segment_stay() -> None:
    assert normalize_segment("[a] b [c]") == "[a] b [c]"
    assert normalize_segment("(a) b") == "(a) b"
    assert normalize_segment("[x)") == "[x)"


def test_markup_and_entities_are_ignored() -> None:
    assert _chain("<b>R&amp;D</b>::Lab::") == "r&d::lab::"


def test_only_first_line_counts() -> None:
    assert _chain("a::b::\nc::d::") == "a::b::"
    assert _chain("plain first line\nc::d::") is None


def test_dates_are_removed_before_parsing() -> None:
    marker = render_marker(DateEntry.from_date(date(2024, 5, 1)))
    assert _chain(f"{marker} Work::Plan::") == "work::plan::"
    assert _chain(f"Work::{marker}Plan::") == "work::plan::"


def test_separator_only_inside_a_date_label_is_not_a_chain() -> None:
    marker = '<time startYear="2024" startMonth="5" startDay="1">May::1</time>'
    assert _chain(f"{marker} agenda") is None


def test_extract_is_stable_on_its_own_output() -> None:
    for text in ("Work::Project:: notes", "[A]::(b)::{c}::", "x::"):
        chain = _chain(text)
        assert chain is not None
        assert extract(chain, chain) == chain


def test_parent_chain() -> None:
    assert parent_chain("a::b::c::") == "a::b::"
    assert parent_chain("a::b::") == "a::"
    assert parent_chain("a::") is None


def test_chain_segments() -> None:
    assert chain_segments("a::b::") == ["a", "b"]
