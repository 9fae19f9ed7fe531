"""
Core Models Package

Immutable data models passed between pipeline stages: the Marker parsed
from a document and the ResolvedContent substituted into it.
"""

from .marker import Flags, Format, Marker, MarkerKind, ResolvedContent

__all__ = [
    "Flags",
    "Format",
    "Marker",
    "MarkerKind",
    "ResolvedContent",
]
