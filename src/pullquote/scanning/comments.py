"""
Module: scanning.comments

Purpose:
    Find ``<!-- ... -->`` comments in a markdown document. Comments that
    sit inside fenced code blocks are example text, not live directives,
    so fences are skipped as opaque regions.

Key Classes:
    - CommentScanner: Yields comments with their byte offsets

Fence rules:
    - A fence opens on a line starting with three or more backticks or
      tildes.
    - It closes on a later line starting with a run of the same
      character at least as long as the opener, followed only by
      whitespace.
    - An unclosed fence swallows the rest of the document.
    - A comment opened before a fence but not closed before it is
      dropped; scanning resumes after the fence.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Optional, Tuple

from .base import Scanner, Token

logger = logging.getLogger(__name__)

COMMENT_OPEN = b"<!--"
COMMENT_CLOSE = b"-->"

_FENCE_OPEN = re.compile(rb"^(`{3,}|~{3,})", re.MULTILINE)


def find_fence(data: bytes, pos: int) -> Optional[Tuple[int, Optional[int]]]:
    """
    Find the next fenced block starting at or after ``pos``.

    Args:
        data: Document bytes.
        pos: Offset to search from.

    Returns:
        None when there is no fence ahead, otherwise ``(start, end)``
        where ``start`` is the offset of the opening run and ``end`` is
        the offset just past the closing fence line, or None when the
        fence is never closed.
    """
    opening = _FENCE_OPEN.search(data, pos)
    if opening is None:
        return None

    run = opening.group(1)
    closing_re = re.compile(
        rb"^" + re.escape(run[:1]) + rb"{" + str(len(run)).encode() + rb",}[ \t]*\r?$",
        re.MULTILINE,
    )
    line_end = data.find(b"\n", opening.end())
    if line_end == -1:
        return opening.start(), None

    closing = closing_re.search(data, line_end + 1)
    if closing is None:
        return opening.start(), None

    end = closing.end()
    if end < len(data) and data[end:end + 1] == b"\n":
        end += 1
    return opening.start(), end


class CommentScanner(Scanner):
    """
    Scan a document for HTML comments outside code fences.

    Token text is the comment decoded as UTF-8 (undecodable bytes are
    preserved as surrogate escapes); offsets are byte offsets into the
    document.

    Example:
        >>> [t.text for t in CommentScanner(b"a<!-- x -->b")]
        ['<!-- x -->']
    """

    def __init__(self, data: bytes):
        self._data = data
        super().__init__()

    def _scan(self) -> Iterator[Token]:
        data = self._data
        pos = 0
        while True:
            fence = find_fence(data, pos)
            limit = fence[0] if fence is not None else len(data)

            while True:
                start = data.find(COMMENT_OPEN, pos, limit)
                if start == -1:
                    break
                close = data.find(COMMENT_CLOSE, start + len(COMMENT_OPEN), limit)
                if close == -1:
                    break
                end = close + len(COMMENT_CLOSE)
                yield Token(data[start:end].decode("utf-8", "surrogateescape"), start, end)
                pos = end

            if fence is None:
                return
            fence_start, fence_end = fence
            if fence_end is None:
                logger.debug(f"unclosed code fence at offset {fence_start}; skipping rest of document")
                return
            pos = fence_end
