"""Tags in node text, and passing arguments to them.

A tag followed directly by a parenthesized group is treated as a call:
``#foo(bar, baz)`` passes the string ``"bar, baz"`` to ``#foo``.
"""

import re

from outline_tools.protocols import NodeProtocol

_TAG_RE = re.compile(r"(?<![\w#@])[#@]\w[\w\-:.]*")
_VALID_TAG_RE = re.compile(r"^[#@][^\s()]+$")
_CALL_RE = re.compile(r"^\([^()]*\)$")


def _check_tag(tag: str) -> None:
    if not isinstance(tag, str) or not _VALID_TAG_RE.match(tag):
        msg = f"Malformed tag: {tag!r} (expected e.g. '#foo' or '@bar')"
        raise ValueError(msg)


def string_to_tags(text: str | None) -> list[str]:
    """Return the tags found in ``text``, in order of appearance.

    Tags may contain '-', '_', ':' and '.', but a trailing ':' or '.' is
    treated as punctuation and not part of the tag.
    """
    if not text:
        return []
    return [m.group(0).rstrip(":.") for m in _TAG_RE.finditer(text)]


def does_string_have_tag(tag: str, text: str | None) -> bool:
    """Whether ``text`` contains exactly ``tag``, ignoring case."""
    _check_tag(tag)
    if not text:
        return False
    # Most strings do not contain the tag at all.
    if tag.lower() not in text.lower():
        return False
    wanted = tag.lower()
    return any(found.lower() == wanted for found in string_to_tags(text))


def string_to_tag_args_text(tag: str, text: str | None) -> str | None:
    """Return the trimmed argument string passed to ``tag`` in ``text``.

    The parsing is naive: the call ends at the first ')' after the opening
    '(', so ``#foo('bar)', baz')`` yields ``"'bar"``.

    Returns:
        The arguments, or None when no call of the tag is found.
    """
    if not does_string_have_tag(tag, text) or text is None:
        return None

    start = 0
    while True:
        tag_index = text.find(tag, start)
        if tag_index == -1:
            return None
        after_tag = tag_index + len(tag)
        open_index = text.find("(", after_tag)
        if open_index == -1:
            return None
        close_index = text.find(")", open_index + 1)
        if close_index == -1:
            return None
        if _CALL_RE.match(text[after_tag : close_index + 1]):
            return text[open_index + 1 : close_index].strip()
        start = after_tag


def node_to_tag_args_text(tag: str, node: NodeProtocol) -> str | None:
    """Arguments passed to ``tag`` in the node's name, falling back to its note."""
    from_name = string_to_tag_args_text(tag, node.plain_name)
    if from_name is not None:
        return from_name
    return string_to_tag_args_text(tag, node.plain_note)


def does_node_have_tag(tag: str, node: NodeProtocol) -> bool:
    return does_string_have_tag(tag, node.plain_name) or does_string_have_tag(
        tag, node.plain_note
    )
