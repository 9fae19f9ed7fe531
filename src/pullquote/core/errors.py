"""
Module: core.errors

Purpose:
    Exception taxonomy for the pipeline. Every failure that belongs to a
    single document ends up wrapped in a DocumentError; the runner folds
    those into one RunError per run.

Key Classes:
    - PullquoteError: Base class for all pullquote failures
    - MarkerSyntaxError: Malformed marker attribute text
    - MarkerStructureError: Unexpected or mismatched closing marker
    - ResolutionError: Quoted region could not be located
    - DocumentError: Failure of one document, with its path
    - RunError: Aggregate failure of a run
    - DocumentChangedError: Target modified between read and persist
    - DiscoveryError: Target paths could not be produced

Used By:
    - every pullquote module
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class PullquoteError(Exception):
    """Base class for pullquote failures."""
    pass


class MarkerSyntaxError(PullquoteError):
    """Marker attribute text could not be tokenized, parsed or validated."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset


class MarkerStructureError(PullquoteError):
    """Closing marker does not match any open marker."""

    def __init__(self, message: str, offset: int):
        super().__init__(message)
        self.offset = offset


class ResolutionError(PullquoteError):
    """Replacement content could not be located in its source."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class SymbolNotFoundError(ResolutionError):
    """Symbol extractor found no declaration with the requested name."""
    pass


class SymbolParseError(ResolutionError):
    """Symbol extractor could not parse a source file."""
    pass


class JsonPathError(ResolutionError):
    """Base class for path extractor failures."""
    pass


class JsonValueNotFoundError(JsonPathError):
    """No value exists at the requested path."""
    pass


class MalformedJsonError(JsonPathError):
    """The JSON document is not valid JSON."""
    pass


class BadPathSegmentError(JsonPathError):
    """A path segment cannot be applied to the value it addresses."""
    pass


class ExampleSplitError(PullquoteError):
    """An example function could not be split into code and output."""
    pass


class Cancelled(PullquoteError):
    """The run was cancelled before the document finished."""
    pass


class DocumentError(PullquoteError):
    """Processing of a single document failed."""

    def __init__(self, path: Path, cause: BaseException):
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


class RunError(PullquoteError):
    """
    Aggregate failure of a run.

    Attributes:
        path: The failing document reported as primary (smallest path).
        cause: The primary document's error.
        others: How many other documents also failed.
    """

    def __init__(self, path: Path, cause: BaseException, others: int = 0):
        if others > 0:
            message = f"{path} failed (along with {others} others): {cause}"
        else:
            message = f"{path} failed: {cause}"
        super().__init__(message)
        self.path = path
        self.cause = cause
        self.others = others


class ChangesDetected(PullquoteError):
    """Check mode found documents that would change."""

    def __init__(self, paths: list[Path]):
        super().__init__(f"files changed: {len(paths)}")
        self.paths = paths


class DocumentChangedError(PullquoteError):
    """A document was modified by someone else while the run was in progress."""

    def __init__(self, path: Path):
        super().__init__(f"{path} changed during run")
        self.path = path


class DiscoveryError(PullquoteError):
    """Target paths could not be produced (unreadable walk root, undecodable stdin)."""

    def __init__(self, cause: BaseException):
        super().__init__(f"discovering files: {cause}")
        self.cause = cause
