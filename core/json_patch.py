"""
In-place value replacement for JSON documents.

JSON manifests (package.json, composer.json) are usually hand-formatted and
reviewed as diffs, so a version write should touch only the version token.
This module locates the exact character span of the value at a dot-notation
path and splices a new value in, leaving key order, indentation and every
sibling byte-identical.
"""

import json
from json.decoder import scanstring  # type: ignore[attr-defined]
import re
from typing import Any, Optional

_DECODER = json.JSONDecoder()
_WHITESPACE = re.compile(r"[ \t\n\r]*")
_INDENT = re.compile(r"\n([ \t]+)\S")


def _skip_ws(text: str, pos: int) -> int:
    return _WHITESPACE.match(text, pos).end()  # type: ignore[union-attr]


def _member_span(text: str, pos: int, key: str) -> Optional[tuple[int, int]]:
    """
    Scan the object starting at pos and return the span of the value for key.

    With duplicate keys the last occurrence wins, matching json.loads.
    """
    if pos >= len(text) or text[pos] != "{":
        return None

    pos = _skip_ws(text, pos + 1)
    if text[pos] == "}":
        return None

    found: Optional[tuple[int, int]] = None
    while True:
        if text[pos] != '"':
            return None
        member, pos = scanstring(text, pos + 1)
        pos = _skip_ws(text, pos)
        if text[pos] != ":":
            return None
        start = _skip_ws(text, pos + 1)
        _, end = _DECODER.raw_decode(text, start)
        if member == key:
            found = (start, end)

        pos = _skip_ws(text, end)
        if text[pos] == ",":
            pos = _skip_ws(text, pos + 1)
            continue
        if text[pos] == "}":
            return found
        return None


def find_value_span(text: str, parts: list[str]) -> Optional[tuple[int, int]]:
    """
    Locate the value addressed by parts in a JSON document.

    Args:
        text: JSON source text.
        parts: Field path segments, e.g. ["version"] or ["package", "version"].

    Returns:
        (start, end) character offsets of the value token, or None if any
        segment is missing or the text is not well-formed.
    """
    pos = _skip_ws(text, 0)
    span: Optional[tuple[int, int]] = None
    try:
        for part in parts:
            span = _member_span(text, pos, part)
            if span is None:
                return None
            pos = span[0]
    except (IndexError, ValueError):
        return None
    return span


def patch_json_value(text: str, parts: list[str], value: Any) -> Optional[str]:
    """
    Replace the value at parts with value, preserving all other text.

    Returns:
        The patched text, or None if the path does not exist yet.
    """
    span = find_value_span(text, parts)
    if span is None:
        return None
    start, end = span
    return text[:start] + json.dumps(value, ensure_ascii=False) + text[end:]


def detect_indent(text: str) -> str | int:
    """Return the indentation used by text, defaulting to two spaces."""
    m = _INDENT.search(text)
    if m is None:
        return 2
    return m.group(1)
