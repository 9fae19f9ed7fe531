"""
Module: resolving.pull

Purpose:
    Resolve pull markers by regex-matching a line range in a source file.
    All markers quoting the same file are matched in one linear pass:
    each keeps its own match state and every line is offered to every
    state that is still open.

Key Functions:
    - resolve_pull_markers(): Markers sharing one source file -> content

Matching rules:
    - The region starts at the first line matching ``start_pattern``
      (inclusive).
    - Every line of the region, the first included, that matches
      ``end_pattern`` decrements the marker's end count; the line that
      brings it to zero ends the region (inclusive).
    - Trailing line terminators are trimmed from the captured text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from pullquote.core.errors import ResolutionError
from pullquote.core.models import Marker, ResolvedContent
from pullquote.logging_setup import DocumentLogger

logger = logging.getLogger(__name__)


@dataclass
class _MatchState:
    """In-flight match for one marker."""
    marker: Marker
    remaining: int
    lines: Optional[List[str]] = None
    result: Optional[ResolvedContent] = None


def resolve_pull_markers(
    markers: Sequence[Marker],
    log: Optional[DocumentLogger] = None,
) -> List[ResolvedContent]:
    """
    Capture the quoted region of each marker from their shared source.

    Args:
        markers: Pull markers that all have the same ``source_path``.
        log: Per-document logger.

    Returns:
        ResolvedContent per marker, in the order given.

    Raises:
        OSError: The source file cannot be read.
        ResolutionError: A start or end pattern never matched.
    """
    if not markers:
        return []
    log = log.for_module(__name__) if log is not None else DocumentLogger(logger)
    path = Path(markers[0].source_path)

    states = [_MatchState(m, m.end_occurrence) for m in markers]
    with open(path, "rb") as f:
        for raw in f:
            line = raw.decode("utf-8", "surrogateescape")
            for state in states:
                if state.result is not None:
                    continue
                if state.lines is None:
                    if not state.marker.start_pattern.search(line):
                        continue
                    state.lines = []
                state.lines.append(line)
                if state.marker.end_pattern.search(line):
                    state.remaining -= 1
                    if state.remaining == 0:
                        state.result = ResolvedContent("".join(state.lines).rstrip("\r\n"))
                        state.lines = None

    results: List[ResolvedContent] = []
    for state in states:
        if state.result is not None:
            results.append(state.result)
            continue
        if state.lines is not None:
            raise ResolutionError(
                f'never matched end: "{state.marker.end_pattern.pattern}" in {path}', path=path
            )
        raise ResolutionError(
            f'never matched start: "{state.marker.start_pattern.pattern}" in {path}', path=path
        )

    log.debug(f'msg="resolved pull quotes" src="{path}" count={len(results)}')
    return results
