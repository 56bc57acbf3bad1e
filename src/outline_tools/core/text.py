"""Rich text helpers."""

import html
import re

_TAG_RE = re.compile(r"<[^<>]*>")


def rich_to_plain(rich: str | None) -> str:
    """Drop markup tags and decode entities, keeping the visible text."""
    if not rich:
        return ""
    return html.unescape(_TAG_RE.sub("", rich))


def first_line(text: str) -> str:
    return text.split("\n", 1)[0]
