"""
Module: resolving

Purpose:
    Content resolution for a document's markers. Dispatches by marker
    kind and batches the work: go markers share one symbol extractor,
    json markers are resolved together, and pull markers are grouped by
    source file so each file is scanned once.

Key Functions:
    - resolve_markers(): Markers -> ResolvedContent, in marker order

Dependencies:
    - resolving.pull: Regex line-range matcher
    - resolving.go: Go symbol extractor (tree-sitter)
    - resolving.json_path: JSON path extractor

Used By:
    - pipeline: Resolve stage of the per-document pipeline
"""

from __future__ import annotations

import io
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pullquote.core.cancellation import raise_if_cancelled
from pullquote.core.errors import ExampleSplitError
from pullquote.core.models import Flags, Format, Marker, MarkerKind, ResolvedContent
from pullquote.logging_setup import DocumentLogger

from .example import realign_tabs, split_example
from .go import ExtractedSymbol, GoSymbolExtractor
from .json_path import extract_json_path
from .pull import resolve_pull_markers

logger = logging.getLogger(__name__)

__all__ = [
    "ExtractedSymbol",
    "GoSymbolExtractor",
    "extract_json_path",
    "realign_tabs",
    "resolve_go_markers",
    "resolve_json_markers",
    "resolve_markers",
    "resolve_pull_markers",
    "split_example",
]


def resolve_go_markers(
    markers: Sequence[Marker],
    extractor: GoSymbolExtractor,
    log: DocumentLogger,
) -> List[ResolvedContent]:
    """
    Resolve go markers with one shared extractor.

    Example-format markers are split into code and output; when the
    split is not possible the whole text is used as a plain code block.
    """
    results: List[ResolvedContent] = []
    for marker in markers:
        extracted = extractor.extract(
            marker.location,
            marker.symbol,
            include_group=bool(marker.flags & Flags.INCLUDE_GROUP),
            no_reformat=bool(marker.flags & Flags.NO_REFORMAT),
        )
        parts = None
        if marker.format is Format.EXAMPLE:
            try:
                parts = split_example(extracted.text)
            except ExampleSplitError as e:
                log.debug(f'msg="example split failed; using code fence" symbol={marker.symbol} err="{e}"')
        results.append(ResolvedContent(extracted.text, parts))
    return results


def resolve_json_markers(markers: Sequence[Marker], log: DocumentLogger) -> List[ResolvedContent]:
    """Resolve json markers, reading each referenced file once."""
    texts: Dict[str, str] = {}
    results: List[ResolvedContent] = []
    for marker in markers:
        if marker.location not in texts:
            with open(Path(marker.location), "r", encoding="utf-8") as f:
                texts[marker.location] = f.read()
        value = extract_json_path(
            io.StringIO(texts[marker.location]),
            marker.symbol,
            no_reformat=bool(marker.flags & Flags.NO_REFORMAT),
        )
        log.debug(f'msg="extracted json value" path="{marker.object_path}"')
        results.append(ResolvedContent(value))
    return results


def resolve_markers(
    markers: Sequence[Marker],
    *,
    go_command: str = "go",
    log: Optional[DocumentLogger] = None,
    cancel: Optional[threading.Event] = None,
    extractor: Optional[GoSymbolExtractor] = None,
) -> List[ResolvedContent]:
    """
    Resolve replacement content for every marker of one document.

    Markers must already carry resolved source paths (see
    ``pipeline.resolve_paths``).

    Args:
        markers: Markers in document order.
        go_command: Executable used to locate Go packages.
        log: Per-document logger.
        cancel: Run-wide cancellation event, checked between batches.
        extractor: Go extractor to use (a new one by default).

    Returns:
        ResolvedContent per marker, in the same order as ``markers``.

    Raises:
        ResolutionError: Content could not be located.
        OSError: A source file cannot be read.
        Cancelled: ``cancel`` was set.
    """
    log = log.for_module(__name__) if log is not None else DocumentLogger(logger)
    results: List[Optional[ResolvedContent]] = [None] * len(markers)

    go_idx = [i for i, m in enumerate(markers) if m.kind is MarkerKind.GO]
    if go_idx:
        raise_if_cancelled(cancel)
        if extractor is None:
            extractor = GoSymbolExtractor(go_command=go_command, log=log)
        found = resolve_go_markers([markers[i] for i in go_idx], extractor, log)
        for i, res in zip(go_idx, found):
            results[i] = res

    json_idx = [i for i, m in enumerate(markers) if m.kind is MarkerKind.JSON]
    if json_idx:
        raise_if_cancelled(cancel)
        found = resolve_json_markers([markers[i] for i in json_idx], log)
        for i, res in zip(json_idx, found):
            results[i] = res

    # group pull markers by source without hash maps; documents carry few markers
    for i, marker in enumerate(markers):
        if results[i] is not None:
            continue
        raise_if_cancelled(cancel)
        group = [
            j for j in range(i, len(markers))
            if results[j] is None
            and markers[j].kind is MarkerKind.PULL
            and markers[j].source_path == marker.source_path
        ]
        found = resolve_pull_markers([markers[j] for j in group], log)
        for j, res in zip(group, found):
            results[j] = res

    return results
