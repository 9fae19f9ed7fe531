"""
Module: resolving.json_path

Purpose:
    Path extractor for JSON documents. Walks the document text with the
    standard library decoder, descending only into the containers named
    by the path, so the exact source text of the selected value is
    available as well as its parsed form.

Key Functions:
    - extract_json_path(): Reader + ``/a/0/b`` path -> serialized value

Path syntax:
    Segments separated by ``/``; a leading ``/`` is optional. Object
    segments are keys, array segments are non-negative indices. The
    empty path selects the whole document.
"""

from __future__ import annotations

import json
import re
from json.decoder import scanstring
from typing import List, TextIO

from pullquote.core.errors import (
    BadPathSegmentError,
    JsonValueNotFoundError,
    MalformedJsonError,
)

_WHITESPACE = re.compile(r"[ \t\n\r]*")
_DECODER = json.JSONDecoder()


def _skip(text: str, pos: int) -> int:
    return _WHITESPACE.match(text, pos).end()


def _expect(text: str, pos: int, chars: str) -> str:
    if pos >= len(text) or text[pos] not in chars:
        found = repr(text[pos]) if pos < len(text) else "end of input"
        raise MalformedJsonError(f"expected one of {chars!r} at offset {pos}, found {found}")
    return text[pos]


def _skip_value(text: str, pos: int) -> int:
    try:
        _, end = _DECODER.raw_decode(text, pos)
    except json.JSONDecodeError as e:
        raise MalformedJsonError(f"invalid JSON: {e}") from e
    return end


def _enter_object(text: str, pos: int, key: str) -> int:
    """Return the offset of the value stored under ``key`` in the object at ``pos``."""
    pos = _skip(text, pos + 1)
    if _expect(text, pos, '"}') == "}":
        raise JsonValueNotFoundError(f"no such value: {key!r}")
    while True:
        _expect(text, pos, '"')
        try:
            name, pos = scanstring(text, pos + 1)
        except json.JSONDecodeError as e:
            raise MalformedJsonError(f"invalid JSON: {e}") from e
        pos = _skip(text, pos)
        _expect(text, pos, ":")
        pos = _skip(text, pos + 1)
        if name == key:
            return pos
        pos = _skip(text, _skip_value(text, pos))
        if _expect(text, pos, ",}") == "}":
            raise JsonValueNotFoundError(f"no such value: {key!r}")
        pos = _skip(text, pos + 1)


def _enter_array(text: str, pos: int, segment: str) -> int:
    """Return the offset of element ``segment`` of the array at ``pos``."""
    if not segment.isdigit():
        raise BadPathSegmentError(f"array index must be a non-negative integer: {segment!r}")
    index = int(segment)
    pos = _skip(text, pos + 1)
    if pos < len(text) and text[pos] == "]":
        raise JsonValueNotFoundError(f"no such value: index {index}")
    for _ in range(index):
        pos = _skip(text, _skip_value(text, pos))
        if _expect(text, pos, ",]") == "]":
            raise JsonValueNotFoundError(f"no such value: index {index}")
        pos = _skip(text, pos + 1)
    return pos


def _segments(json_path: str) -> List[str]:
    parts = json_path.split("/")
    if parts and parts[0] == "":
        parts = parts[1:]
    if parts == [""]:
        return []
    return parts


def extract_json_path(reader: TextIO, json_path: str, *, no_reformat: bool = False) -> str:
    """
    Extract the value at ``json_path`` from a JSON document.

    Args:
        reader: Text stream holding the document.
        json_path: Slash-delimited path, e.g. ``/servers/0/name``.
        no_reformat: Return the value's exact source text instead of
            pretty-printing it with two-space indentation.

    Returns:
        Serialized value.

    Raises:
        JsonValueNotFoundError: A key or index does not exist.
        MalformedJsonError: The document is not valid JSON.
        BadPathSegmentError: A segment cannot address its container.

    Example:
        >>> import io
        >>> extract_json_path(io.StringIO('{"a": [1, {"b": 2}]}'), "/a/1/b")
        '2'
    """
    text = reader.read()
    pos = _skip(text, 0)
    for segment in _segments(json_path):
        if pos >= len(text):
            raise MalformedJsonError("invalid JSON: unexpected end of input")
        head = text[pos]
        if head == "{":
            pos = _enter_object(text, pos, segment)
        elif head == "[":
            pos = _enter_array(text, pos, segment)
        else:
            raise BadPathSegmentError(f"cannot select {segment!r} from a scalar value")

    try:
        value, end = _DECODER.raw_decode(text, pos)
    except json.JSONDecodeError as e:
        raise MalformedJsonError(f"invalid JSON: {e}") from e
    if no_reformat:
        return text[pos:end]
    return json.dumps(value, indent=2, ensure_ascii=False)
