"""
Module: scanning.base

Purpose:
    Common interface for the scanners. A scanner is a lazy, finite,
    non-restartable iterator of Tokens; each Token reports the offsets
    it was found at so callers can splice the original input.

Key Classes:
    - Token: Scanned text with start/end offsets
    - Scanner: Abstract iterator of Tokens
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Token:
    """
    One scanned token.

    Attributes:
        text: Token text. For comments, the whole ``<!-- ... -->``; for
            attribute tokens, the value with quotes and escapes resolved.
        start: Offset of the first character of the raw token.
        end: Offset just past the raw token.
    """
    text: str
    start: int
    end: int


class Scanner(ABC):
    """
    Lazy token iterator over a fixed input.

    Iterating a scanner consumes it; a second pass yields nothing.
    Errors are raised from ``__next__`` at the point they are detected.
    """

    def __init__(self) -> None:
        self._tokens: Iterator[Token] = self._scan()

    @abstractmethod
    def _scan(self) -> Iterator[Token]:
        """Generate tokens in input order."""

    def __iter__(self) -> Scanner:
        return self

    def __next__(self) -> Token:
        return next(self._tokens)
