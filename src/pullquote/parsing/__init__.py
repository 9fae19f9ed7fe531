"""
Module: parsing

Purpose:
    Marker option parsing/validation and document-level marker pairing.

Key Functions:
    - read_markers(): Ordered markers for a document
    - parse_marker_options(): Validated options for one opening marker
"""

from .options import MarkerOptions, parse_marker_options
from .reader import read_markers

__all__ = [
    "MarkerOptions",
    "parse_marker_options",
    "read_markers",
]
