"""
Module: timing

Purpose:
    Phase timing for document workers, to see where a run spends its
    time (reading, resolving, rewriting or comparing).

Key Classes:
    - TimingLog: Collects per-document phase durations

Key Functions:
    - timed_phase: Context manager for timing code blocks

Dependencies:
    - time (std)
    - contextlib (std)
    - threading (std)

Used By:
    - pipeline: Times each stage of one document
    - runner: Logs the summary at DEBUG
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Generator, List, Tuple

PHASES = ("read", "resolve", "rewrite", "compare")


@dataclass
class TimingLog:
    """
    Timing metrics for a run.

    Shared by all document workers; recording is guarded by a lock.

    Attributes:
        document_timings: Dict of document -> {phase_name -> duration_seconds}

    Example:
        >>> log = TimingLog()
        >>> log.log_document("README.md", "resolve", 0.012)
        >>> print(log.summary())
    """
    document_timings: Dict[str, Dict[str, float]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def log_document(self, document: str, phase: str, duration: float) -> None:
        """Log a document-level timing metric."""
        with self._lock:
            self.document_timings.setdefault(document, {})[phase] = duration

    def get_document_total(self, document: str) -> float:
        """Get total time for a document."""
        return sum(self.document_timings.get(document, {}).values())

    def get_phase_totals(self) -> Dict[str, float]:
        """Sum each phase across all documents."""
        totals: Dict[str, float] = {}
        for phases in self.document_timings.values():
            for phase, duration in phases.items():
                totals[phase] = totals.get(phase, 0.0) + duration
        return totals

    def get_slowest_documents(self, n: int = 3) -> List[Tuple[str, float]]:
        """Get the N slowest documents with their total time."""
        results = [(doc, sum(phases.values())) for doc, phases in self.document_timings.items()]
        results.sort(key=lambda x: x[1], reverse=True)
        return results[:n]

    def summary(self) -> str:
        """Generate human-readable timing summary."""
        lines = ["=== Timing Summary ==="]
        totals = self.get_phase_totals()
        ordered = [p for p in PHASES if p in totals] + sorted(p for p in totals if p not in PHASES)
        for phase in ordered:
            lines.append(f"  {phase:10s} {totals[phase]:.3f}s")
        slowest = self.get_slowest_documents()
        if slowest:
            lines.append("Slowest documents:")
            for doc, total in slowest:
                lines.append(f"  {doc}: {total:.3f}s")
        return "\n".join(lines)


@contextmanager
def timed_phase(log: TimingLog, document: str, phase: str) -> Generator[None, None, None]:
    """
    Context manager for timing a code phase of one document.

    Example:
        >>> log = TimingLog()
        >>> with timed_phase(log, "README.md", "read"):
        ...     data = Path("README.md").read_bytes()
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        log.log_document(document, phase, time.perf_counter() - start)
