"""
Module: discovery

Purpose:
    Produce the documents to process. Explicit paths, paths read from
    stdin and (in walk mode) markdown files found under the root are
    normalised to absolute paths, de-duplicated and handed to the
    consumer through a bounded queue filled by a producer thread.

Key Classes:
    - FileProducer: Producer thread; iterate it to consume paths

Key Functions:
    - walk_markdown(): Recursive ``*.md`` discovery

Cancellation:
    When the cancel event is set the producer stops looking for new
    paths but still terminates the queue. A consumer that stops early
    must call ``drain()`` so the producer is never left blocked on a
    full queue. The consumer polls the queue, so a producer stuck
    reading stdin is abandoned (it is a daemon thread) rather than
    waited for once the run is cancelled.

Used By:
    - runner: Feeds one document worker per produced path
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, TextIO

from pullquote.config import RunConfig
from pullquote.core.errors import DiscoveryError

logger = logging.getLogger(__name__)

QUEUE_SIZE = 64
POLL_INTERVAL_S = 0.1
ABANDON_JOIN_TIMEOUT_S = 0.5
SKIPPED_DIRS = frozenset({"testdata"})

_DONE = object()


def _raise(error: OSError) -> None:
    raise error


def walk_markdown(root: Path) -> Iterator[Path]:
    """
    Yield ``*.md`` files under ``root`` in sorted order.

    Hidden directories and directories named ``testdata`` are skipped.
    The extension check is case-insensitive.
    """
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = sorted(
            d for d in dirnames if not d.startswith(".") and d not in SKIPPED_DIRS
        )
        for filename in sorted(filenames):
            if filename.lower().endswith(".md"):
                yield Path(dirpath) / filename


def _stdin_paths(stdin: TextIO) -> Iterator[str]:
    for line in stdin:
        line = line.strip()
        if line:
            yield line


class FileProducer(threading.Thread):
    """
    Producer thread for the paths of one run.

    Usage:
        producer = FileProducer(paths, config, stdin=sys.stdin, cancel=event)
        producer.start()
        try:
            for path in producer:
                ...
        finally:
            producer.drain()

    Attributes:
        error: Discovery failure (e.g. unreadable directory or an
            undecodable stdin line), raised to the consumer as a
            DiscoveryError once the queue is exhausted.
    """

    def __init__(
        self,
        paths: Iterable[str],
        config: RunConfig,
        stdin: Optional[TextIO] = None,
        cancel: Optional[threading.Event] = None,
        maxsize: int = QUEUE_SIZE,
    ):
        super().__init__(name="pullquote-discovery", daemon=True)
        self._paths: List[str] = list(paths)
        self._config = config
        self._stdin = stdin
        self._cancel = cancel if cancel is not None else threading.Event()
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._seen: Set[Path] = set()
        self._finished = False
        self._abandoned = False
        self.error: Optional[Exception] = None

    def _standardize(self, path: str) -> Path:
        p = Path(path)
        if not p.is_absolute():
            p = self._config.root / p
        return Path(os.path.normpath(p))

    def _submit(self, path: Path) -> bool:
        """Queue ``path`` unless already seen; False once cancelled."""
        if self._cancel.is_set():
            return False
        if path in self._seen:
            logger.debug(f"Skipping duplicate {path}")
            return True
        self._seen.add(path)
        self._queue.put(path)
        return True

    def _sources(self) -> Iterator[Path]:
        for path in self._paths:
            yield self._standardize(path)
        if self._stdin is not None:
            for path in _stdin_paths(self._stdin):
                yield self._standardize(path)
        if self._config.walk:
            root = Path(os.path.normpath(self._config.root.absolute()))
            yield from walk_markdown(root)

    def run(self) -> None:
        try:
            for path in self._sources():
                if not self._submit(path):
                    break
        except Exception as e:
            logger.debug(f"Discovery failed: {e!r}")
            self.error = e
            self._cancel.set()
        finally:
            self._queue.put(_DONE)

    def _next(self):
        """
        Next queued item, or ``_DONE``.

        Once cancelled, an empty queue counts as exhausted: the producer
        may be blocked reading stdin and never reach its ``_DONE``.
        """
        while True:
            try:
                return self._queue.get(timeout=POLL_INTERVAL_S)
            except queue.Empty:
                if self._cancel.is_set():
                    self._abandoned = True
                    return _DONE

    def _finish(self) -> None:
        self._finished = True
        if self._abandoned:
            self.join(ABANDON_JOIN_TIMEOUT_S)
            if self.is_alive():
                logger.debug("Abandoning discovery thread blocked on input")
        else:
            self.join()

    def __iter__(self) -> Iterator[Path]:
        while not self._finished:
            item = self._next()
            if item is _DONE:
                self._finish()
                break
            yield item
        if self.error is not None:
            raise DiscoveryError(self.error) from self.error

    def drain(self) -> int:
        """
        Consume and discard whatever is left in the queue.

        Returns:
            Number of discarded paths.
        """
        discarded = 0
        while not self._finished:
            if self._next() is _DONE:
                self._finish()
            else:
                discarded += 1
        return discarded
