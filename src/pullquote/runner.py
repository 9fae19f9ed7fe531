"""
Module: runner

Purpose:
    Run orchestration. Every discovered document is processed by its
    own task in a thread pool; no task shares mutable state with another
    except the cancellation event and the timing log. Only after every
    document has succeeded are the rewritten documents persisted, so a
    failed run changes no files.

Key Functions:
    - run(): Process a set of documents; persist or check

Key Classes:
    - RunSummary: Outcome of a successful run

Failure reporting:
    When documents fail, the one with the lexicographically smallest
    path is reported and the rest are counted, so repeated runs over
    the same input report the same error.

Dependencies:
    - concurrent.futures: Thread pool execution
    - discovery: Producer of document paths
    - locking: Atomic, locked persistence

Used By:
    - cli: Entry point
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, TextIO, Tuple

from pullquote.config import RunConfig
from pullquote.core.errors import (
    Cancelled,
    ChangesDetected,
    DiscoveryError,
    DocumentError,
    PullquoteError,
    RunError,
)
from pullquote.discovery import FileProducer
from pullquote.locking import discard_temp, persist_document
from pullquote.pipeline import DocumentResult, process_document
from pullquote.timing import TimingLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunSummary:
    """
    Outcome of a successful run.

    Attributes:
        documents: Number of documents processed.
        changed: Documents that were (or in check mode, would be) rewritten.
        timing: Phase timings of every document.
    """
    documents: int
    changed: List[Path] = field(default_factory=list)
    timing: Optional[TimingLog] = None


def _collect(
    futures: List[Tuple[Path, Future]],
) -> Tuple[List[DocumentResult], List[DocumentError], bool]:
    results: List[DocumentResult] = []
    failures: List[DocumentError] = []
    cancelled = False
    for path, future in futures:
        try:
            results.append(future.result())
        except Cancelled:
            cancelled = True
        except DocumentError as e:
            logger.error(f'msg="processing failed" file="{path}" err="{e.cause}"')
            failures.append(e)
        except Exception as e:
            logger.error(f'msg="processing failed" file="{path}" err="{e!r}"')
            failures.append(DocumentError(path, e))
    return results, failures, cancelled


def _discard_all(results: Iterable[DocumentResult]) -> None:
    for result in results:
        discard_temp(result.temp_path)


def _persist_all(changed: List[DocumentResult]) -> None:
    """Persist changed documents in path order; on failure discard the rest."""
    for i, result in enumerate(changed):
        try:
            persist_document(result.path, result.temp_path, result.digest)
        except (PullquoteError, OSError) as e:
            _discard_all(changed[i:])
            raise RunError(result.path, e) from e


def run(
    paths: Iterable[str],
    config: RunConfig,
    stdin: Optional[TextIO] = None,
    cancel: Optional[threading.Event] = None,
) -> RunSummary:
    """
    Process documents and persist those that changed.

    Args:
        paths: Target paths; relative ones are resolved against ``config.root``.
        config: Run configuration.
        stdin: Stream of additional target paths, one per line.
        cancel: Cancellation event (e.g. set by a SIGINT handler).

    Returns:
        RunSummary of the processed documents.

    Raises:
        RunError: At least one document failed; nothing was persisted.
        ChangesDetected: Check mode found documents that would change.
        Cancelled: ``cancel`` was set before the run finished.
        DiscoveryError: Target paths could not be produced (e.g. the
            walk root is unreadable).
    """
    cancel = cancel if cancel is not None else threading.Event()
    timing = TimingLog()
    futures: List[Tuple[Path, Future]] = []
    discovery_error: Optional[DiscoveryError] = None

    producer = FileProducer(paths, config, stdin=stdin, cancel=cancel)
    producer.start()
    with ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="pullquote") as pool:
        try:
            for path in producer:
                futures.append((path, pool.submit(process_document, path, config, cancel, timing)))
        except DiscoveryError as e:
            discovery_error = e
        finally:
            producer.drain()

    results: List[DocumentResult] = []
    try:
        results, failures, cancelled = _collect(futures)
        if config.debug:
            logger.debug(timing.summary())

        if failures:
            failures.sort(key=lambda e: str(e.path))
            primary = failures[0]
            raise RunError(primary.path, primary.cause, others=len(failures) - 1)
        if discovery_error is not None:
            raise discovery_error
        if cancelled or cancel.is_set():
            raise Cancelled("cancelled")

        changed = sorted((r for r in results if r.changed), key=lambda r: str(r.path))
        if config.check_mode:
            if changed:
                raise ChangesDetected([r.path for r in changed])
            return RunSummary(documents=len(results), timing=timing)

        _persist_all(changed)
    finally:
        # persisted temps are already renamed away
        _discard_all(results)

    logger.info(f"processing complete files_updated={len(changed)}")
    return RunSummary(documents=len(results), changed=[r.path for r in changed], timing=timing)
