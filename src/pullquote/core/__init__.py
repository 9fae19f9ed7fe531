"""
pullquote Core Package

Shared data models and the error taxonomy used by every stage of the
pipeline. Models are frozen dataclasses: a stage that needs a changed
value builds a new instance with ``dataclasses.replace`` rather than
mutating one it has already handed downstream.
"""

from .errors import (
    PullquoteError,
    MarkerSyntaxError,
    MarkerStructureError,
    ResolutionError,
    DocumentError,
    DocumentChangedError,
    DiscoveryError,
    RunError,
    ChangesDetected,
    Cancelled,
)
from .models import Flags, Format, Marker, MarkerKind, ResolvedContent

__all__ = [
    "Flags",
    "Format",
    "Marker",
    "MarkerKind",
    "ResolvedContent",
    "PullquoteError",
    "MarkerSyntaxError",
    "MarkerStructureError",
    "ResolutionError",
    "DocumentError",
    "DocumentChangedError",
    "DiscoveryError",
    "RunError",
    "ChangesDetected",
    "Cancelled",
]
