"""
Module: pipeline

Purpose:
    The per-document pipeline: read the document, find its markers,
    resolve their content, rewrite the document and decide whether it
    changed. A changed document's output is left in a temporary file
    beside it; the runner persists it once every document has
    succeeded.

Key Functions:
    - process_document(): Run the whole pipeline for one document
    - resolve_paths(): Make marker source paths relative to the document

Key Classes:
    - DocumentResult: Outcome of processing one document

Dependencies:
    - parsing, resolving, rewriting: Pipeline stages
    - locking: Content digests

Used By:
    - runner: One call per document, in worker threads
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Sequence

from pullquote.config import RunConfig
from pullquote.core.cancellation import raise_if_cancelled
from pullquote.core.errors import Cancelled, DocumentError
from pullquote.core.models import Marker, MarkerKind
from pullquote.locking import content_digest
from pullquote.logging_setup import DocumentLogger
from pullquote.parsing import read_markers
from pullquote.resolving import resolve_markers
from pullquote.rewriting import apply_markers
from pullquote.timing import TimingLog, timed_phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentResult:
    """
    Outcome of processing one document.

    Attributes:
        path: The document.
        digest: SHA-1 digest of the document as read.
        temp_path: Rewritten output awaiting persistence, or None when
            the document is unchanged or nothing was written (check mode).
        changed: Whether the rewritten output differs from the original.
        marker_count: Number of markers found.
    """
    path: Path
    digest: str
    temp_path: Optional[Path] = None
    changed: bool = False
    marker_count: int = 0


def _join(directory: Path, location: str) -> str:
    return os.path.normpath(os.path.join(directory, location))


def resolve_paths(markers: Sequence[Marker], document: Path) -> List[Marker]:
    """
    Resolve relative source locations against the document's directory.

    Pull sources and json files are always resolved. Go locations are
    resolved only when they look like paths (start with ``./`` or name
    a ``.go`` file); anything else is an importable package.
    Absolute paths are left as they are.
    """
    directory = document.parent
    resolved: List[Marker] = []
    for marker in markers:
        if marker.kind is MarkerKind.PULL:
            marker = replace(marker, source_path=_join(directory, marker.source_path))
        elif marker.kind is MarkerKind.JSON or (
            marker.location.startswith("./") or ".go" in marker.location
        ):
            location, sep, rest = marker.object_path.partition("#")
            marker = replace(marker, object_path=_join(directory, location) + sep + rest)
        resolved.append(marker)
    return resolved


def _write_temp(path: Path, data: bytes) -> Path:
    """Write ``data`` to a new temporary file beside ``path``, keeping its mode."""
    with tempfile.NamedTemporaryFile(
        mode="wb",
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=path.parent,
        delete=False,
    ) as f:
        temp_path = Path(f.name)
        try:
            f.write(data)
        except OSError:
            f.close()
            temp_path.unlink()
            raise
    os.chmod(temp_path, stat.S_IMODE(path.stat().st_mode))
    return temp_path


def process_document(
    path: Path,
    config: RunConfig,
    cancel: Optional[threading.Event] = None,
    timing: Optional[TimingLog] = None,
) -> DocumentResult:
    """
    Run the read, resolve, rewrite and compare stages for one document.

    Args:
        path: Absolute path of the document.
        config: Run configuration.
        cancel: Run-wide cancellation event, checked between stages.
        timing: Phase timing collector.

    Returns:
        DocumentResult; ``temp_path`` is set only for changed documents
        outside check mode.

    Raises:
        DocumentError: Any stage failed; the cause is chained.
        Cancelled: ``cancel`` was set.
    """
    timing = timing if timing is not None else TimingLog()
    log = DocumentLogger(logger, {"file": str(path)})
    name = str(path)

    try:
        raise_if_cancelled(cancel)
        with timed_phase(timing, name, "read"):
            data = path.read_bytes()
            digest = content_digest(data)
            markers = read_markers(data, log)
        log.debug(f"total_markers={len(markers)}")
        if not markers:
            return DocumentResult(path=path, digest=digest)

        raise_if_cancelled(cancel)
        with timed_phase(timing, name, "resolve"):
            markers = resolve_paths(markers, path)
            contents = resolve_markers(
                markers, go_command=config.go_command, log=log, cancel=cancel
            )

        raise_if_cancelled(cancel)
        with timed_phase(timing, name, "rewrite"):
            output = apply_markers(data, markers, contents)

        raise_if_cancelled(cancel)
        with timed_phase(timing, name, "compare"):
            changed = content_digest(output) != digest
        if not changed:
            log.debug('msg="no change detected"')
            return DocumentResult(path=path, digest=digest, marker_count=len(markers))

        log.info('msg="change detected"')
        temp_path = None if config.check_mode else _write_temp(path, output)
        return DocumentResult(
            path=path,
            digest=digest,
            temp_path=temp_path,
            changed=True,
            marker_count=len(markers),
        )
    except Cancelled:
        raise
    except Exception as e:
        raise DocumentError(path, e) from e
