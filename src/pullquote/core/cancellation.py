"""
Module: core.cancellation

Purpose:
    Cooperative cancellation. A single threading.Event is shared by the
    whole run; stages call raise_if_cancelled() at their boundaries.
"""

from __future__ import annotations

import threading
from typing import Optional

from .errors import Cancelled


def raise_if_cancelled(cancel: Optional[threading.Event]) -> None:
    """Raise Cancelled if ``cancel`` has been set."""
    if cancel is not None and cancel.is_set():
        raise Cancelled("cancelled")
