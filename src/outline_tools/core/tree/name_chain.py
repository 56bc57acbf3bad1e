"""Derive name chains ("work::project::") from node names.

A node named ``Work :: [Project X] :: kickoff notes`` declares the chain
``work::project x::``: everything before the final separator, split into
segments, each lower-cased and stripped of wrapping brackets. The text after
the final separator is free-form and not part of the chain.
"""

from outline_tools.config import CHAIN_SEPARATOR
from outline_tools.core.dates.annotation import clear_date, has_date
from outline_tools.core.text import first_line, rich_to_plain
from outline_tools.protocols import NodeProtocol

_CLOSING = {"[": "]", "(": ")", "{": "}"}


def _unwrap(segment: str) -> str | None:
    """Inner text if ``segment`` is wrapped in one matched bracket pair, else None."""
    if len(segment) < 2:
        return None
    opening = segment[0]
    closing = _CLOSING.get(opening)
    if closing is None or segment[-1] != closing:
        return None
    depth = 0
    for i, ch in enumerate(segment):
        if ch == opening:
            depth += 1
        elif ch == closing:
            depth -= 1
            if depth == 0:
                # "[a] b [c]" closes before the end, so it is not a wrapping.
                return segment[1:-1] if i == len(segment) - 1 else None
    return None


def normalize_segment(segment: str) -> str:
    current = segment.casefold()
    while True:
        stripped = current.strip()
        inner = _unwrap(stripped)
        if inner is None:
            return stripped
        current = inner


def extract(plain_text: str | None, rich_text: str | None) -> str | None:
    """Return the normalized name chain declared by a node's text, or None.

    Args:
        plain_text: The text as displayed, used for a quick rejection.
        rich_text: The same text with markup; date markers are removed
            before the chain is parsed.
    """
    if not plain_text or CHAIN_SEPARATOR not in plain_text:
        return None

    text = rich_text or ""
    while has_date(text):
        cleared = clear_date(text)
        if cleared == text:
            break
        text = cleared
        # The marker's label may have been what contained the separator.
        if CHAIN_SEPARATOR not in rich_to_plain(text):
            return None

    line = first_line(rich_to_plain(text))
    if CHAIN_SEPARATOR not in line:
        return None
    segments = line.split(CHAIN_SEPARATOR)[:-1]
    return CHAIN_SEPARATOR.join(normalize_segment(s) for s in segments) + CHAIN_SEPARATOR


def chain_segments(chain: str) -> list[str]:
    return chain.split(CHAIN_SEPARATOR)[:-1]


def parent_chain(chain: str) -> str | None:
    """The chain without its last segment, or None for a single-segment chain."""
    segments = chain_segments(chain)
    if len(segments) < 2:
        return None
    return CHAIN_SEPARATOR.join(segments[:-1]) + CHAIN_SEPARATOR


def node_to_name_chain(node: NodeProtocol) -> str | None:
    return extract(node.plain_name, node.name)
