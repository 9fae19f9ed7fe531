"""
Module: logging_setup

Purpose:
    Logging configuration for the command line entry point, and a
    LoggerAdapter that carries ``key=value`` context (file name, marker
    offsets) through one document's processing without global state.

Key Functions:
    - configure_logging(): One-time root logger setup

Key Classes:
    - DocumentLogger: LoggerAdapter appending bound key=value context

Used By:
    - cli: Configures logging from RunConfig.debug
    - pipeline, parsing.reader, resolving: Per-document context
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, MutableMapping, Optional, Tuple

PLAIN_FORMAT = "%(message)s"
DEBUG_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"


def configure_logging(debug: bool = False, stream=None) -> None:
    """
    Configure the root logger for command line use.

    Args:
        debug: Log at DEBUG with timestamps and source locations.
        stream: Destination stream (default stderr).
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=DEBUG_FORMAT if debug else PLAIN_FORMAT,
        stream=stream or sys.stderr,
        force=True,
    )


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"' if (not value or " " in value or '"' in value) else value
    return str(value)


class DocumentLogger(logging.LoggerAdapter):
    """
    LoggerAdapter that appends ``key=value`` pairs to every message.

    Example:
        >>> log = DocumentLogger(logging.getLogger("pullquote"), {"file": "README.md"})
        >>> log.bind(start=10).debug("found marker")  # "found marker file=README.md start=10"
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        super().__init__(logger, dict(context or {}))

    def bind(self, **context: Any) -> DocumentLogger:
        """Return a logger with ``context`` added to the current context."""
        merged = dict(self.extra)
        merged.update(context)
        return DocumentLogger(self.logger, merged)

    def for_module(self, name: str) -> DocumentLogger:
        """Return a logger for module ``name`` carrying the same context."""
        return DocumentLogger(logging.getLogger(name), dict(self.extra))

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        if self.extra:
            pairs = " ".join(f"{k}={_format_value(v)}" for k, v in self.extra.items())
            msg = f"{msg} {pairs}"
        return msg, kwargs
