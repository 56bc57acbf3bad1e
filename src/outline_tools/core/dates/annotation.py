"""Read and write the date marker embedded in a node's rich text.

A marker looks like::

    <time startYear="2020" startMonth="2" startDay="29">Sat, Feb 29, 2020</time>

Text may hold several markers, but only the first one is ever read or
changed here.
"""

import html
import re

from outline_tools.config import DATE_MARKER_TAG
from outline_tools.models.node import DateEntry

_OPEN = f"<{DATE_MARKER_TAG}"
_MARKER_RE = re.compile(
    rf"<{DATE_MARKER_TAG}\b[^>]*>.*?</{DATE_MARKER_TAG}>",
    re.DOTALL,
)
_ATTR_RE = re.compile(r'(\w+)="([^"]*)"')


class MultipleDatesError(ValueError):
    """A node holds more than one date marker."""


def has_date(text: str | None) -> bool:
    if not text:
        return False
    return _OPEN in text


def count_dates(text: str | None) -> int:
    if not text:
        return 0
    return len(_MARKER_RE.findall(text))


def split_first(text: str) -> tuple[str, str, str] | None:
    """Split ``text`` into (before, marker, after) around the first marker."""
    m = _MARKER_RE.search(text)
    if m is None:
        return None
    return text[: m.start()], m.group(0), text[m.end() :]


def render_marker(entry: DateEntry) -> str:
    return (
        f'<{DATE_MARKER_TAG} startYear="{entry.year}" startMonth="{entry.month}" '
        f'startDay="{entry.day}">{html.escape(entry.label, quote=False)}</{DATE_MARKER_TAG}>'
    )


def parse_marker(marker: str) -> DateEntry:
    """Decode a marker produced by ``render_marker`` (or the host).

    Raises:
        ValueError: If the attributes are missing or form an invalid date.
    """
    head, _, rest = marker.partition(">")
    attrs = dict(_ATTR_RE.findall(head))
    label = html.unescape(rest.rsplit("<", 1)[0])
    try:
        return DateEntry(
            year=int(attrs["startYear"]),
            month=int(attrs["startMonth"]),
            day=int(attrs["startDay"]),
            label=label,
        )
    except KeyError as e:
        msg = f"Date marker is missing attribute {e.args[0]!r}: {marker!r}"
        raise ValueError(msg) from None


def first_date(text: str | None) -> DateEntry | None:
    if not text:
        return None
    parts = split_first(text)
    if parts is None:
        return None
    return parse_marker(parts[1])


def _pad(before: str, marker: str, after: str) -> str:
    if before and not before[-1].isspace():
        before += " "
    if after and not after[0].isspace():
        after = " " + after
    return before + marker + after


def set_date(text: str, entry: DateEntry) -> str:
    """Replace the first marker with one for ``entry``, or prepend one."""
    marker = render_marker(entry)
    parts = split_first(text)
    if parts is None:
        return _pad("", marker, text)
    before, _, after = parts
    return _pad(before, marker, after)


def clear_date(text: str) -> str:
    """Remove the first marker without gluing the words around it together."""
    parts = split_first(text)
    if parts is None:
        return text
    before, _, after = parts
    before, after = before.rstrip(), after.lstrip()
    if before and after:
        return f"{before} {after}"
    return before + after


def fail_if_multiple(name: str | None, note: str | None) -> None:
    """Raise MultipleDatesError if name and note hold more than one marker."""
    found = count_dates(name) + count_dates(note)
    if found > 1:
        msg = f"Found {found} dates, expected at most one: {(name or '')[:60]!r}"
        raise MultipleDatesError(msg)
