"""
Module: scanning

Purpose:
    Low-level incremental scanners. CommentScanner finds ``<!-- -->``
    comments in a document while skipping fenced code blocks;
    TokenScanner splits marker attribute text into words, quoted
    strings and ``=`` separators.

Key Classes:
    - Scanner: Common interface yielding Token(text, start, end)
    - CommentScanner: HTML comments outside code fences
    - TokenScanner: Marker attribute tokens
"""

from .base import Scanner, Token
from .comments import CommentScanner
from .tokens import TokenScanner

__all__ = [
    "Scanner",
    "Token",
    "CommentScanner",
    "TokenScanner",
]
