"""
Module: parsing.reader

Purpose:
    Drive the comment scanner over a whole document, parse opening
    markers, pair them with their closing comments and return the
    markers in document order.

Key Functions:
    - read_markers(): Document bytes -> ordered list of Marker

State machine:
    Scanning --open--> AwaitingClose --matching close--> Scanning

    - An opening marker seen while another is awaiting its close starts
      a new marker; the earlier one stays open.
    - A close whose kind differs from the open marker, or a close with
      nothing open, raises MarkerStructureError.
    - A marker still open at end of document is returned with
      ``close_offset=None``; the rewriter appends its closing tag.
    - Comments with any other keyword are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional

from pullquote.core.errors import MarkerStructureError, MarkerSyntaxError
from pullquote.core.models import Marker, MarkerKind
from pullquote.logging_setup import DocumentLogger
from pullquote.scanning import CommentScanner, TokenScanner
from pullquote.scanning.comments import COMMENT_CLOSE, COMMENT_OPEN

from .options import parse_marker_options

logger = logging.getLogger(__name__)


def read_markers(data: bytes, log: Optional[DocumentLogger] = None) -> List[Marker]:
    """
    Find and parse every marker in a document.

    Args:
        data: Document bytes.
        log: Per-document logger; defaults to this module's logger.

    Returns:
        Markers in strictly increasing ``open_offset`` order.

    Raises:
        MarkerSyntaxError: An opening marker has malformed attributes.
        MarkerStructureError: A closing marker has nothing to close.

    Example:
        >>> doc = b'<!-- pullquote src=a.go start=a end=b -->\\n<!-- /pullquote -->'
        >>> [m.kind.value for m in read_markers(doc)]
        ['pull']
    """
    log = log.for_module(__name__) if log is not None else DocumentLogger(logger)
    markers: List[Marker] = []

    for comment in CommentScanner(data):
        body = comment.text[len(COMMENT_OPEN):-len(COMMENT_CLOSE)]
        tokens = TokenScanner(body)
        try:
            keyword = next(tokens).text
        except (StopIteration, MarkerSyntaxError):
            continue  # empty or unparseable comment; not ours

        clog = log.bind(start=comment.start, end=comment.end)

        kind = MarkerKind.from_tag(keyword)
        if kind is not None:
            options = parse_marker_options(kind, tokens, comment.start)
            marker = Marker(
                kind=kind,
                open_offset=comment.start,
                content_start=comment.end,
                source_path=options.source_path,
                start_pattern=options.start_pattern,
                end_pattern=options.end_pattern,
                end_occurrence=options.end_occurrence,
                object_path=options.object_path,
                format=options.format,
                language=options.language,
                flags=options.flags,
            )
            clog.debug(f'msg="found marker" marker={marker.describe()!r}')
            markers.append(marker)
            continue

        close_kind = MarkerKind.from_close_tag(keyword)
        if close_kind is None:
            clog.debug('msg="unsupported comment tag"')
            continue

        if markers and not markers[-1].is_closed and markers[-1].kind is close_kind:
            markers[-1] = replace(markers[-1], close_offset=comment.start)
            clog.debug(f'msg="found marker end" tag={close_kind.tag}')
            continue

        raise MarkerStructureError(
            f'unexpected {keyword} at offset {comment.start}: "{comment.text}"',
            offset=comment.start,
        )

    return markers
