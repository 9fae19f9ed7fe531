"""
Module: scanning.tokens

Purpose:
    Tokenize the attribute text of a marker comment into bare words,
    quoted strings and ``=`` separators.

Key Classes:
    - TokenScanner: Yields attribute tokens with their offsets

Rules:
    - Whitespace between tokens is insignificant.
    - Single or double quotes group text containing spaces or ``=``;
      the quotes are removed from the emitted token.
    - A backslash escapes a following quote or backslash (``\\"`` -> ``"``,
      ``\\\\`` -> ``\\``). Before any other character it is kept, so
      regular expressions such as ``func foo\\(\\)`` pass through as written.
    - ``=`` outside quotes is always its own token, so ``key=value``
      and ``key = value`` tokenize identically.
    - End of input inside a quote or right after a backslash raises
      ``MarkerSyntaxError("unterminated token")``.
"""

from __future__ import annotations

from typing import Iterator, Optional

from pullquote.core.errors import MarkerSyntaxError

from .base import Scanner, Token

ERR_UNTERMINATED = "unterminated token"

_QUOTES = ("'", '"')


def unescape(raw: str) -> str:
    """
    Remove quoting and resolve backslash escapes in a raw token.

    Example:
        >>> unescape(r'"h \\"here"')
        'h "here'
    """
    out = []
    quote: Optional[str] = None
    escaped = False
    for ch in raw:
        if not escaped:
            if ch == "\\":
                escaped = True
                continue
            if quote is not None:
                if ch == quote:
                    quote = None
                    continue
            elif ch in _QUOTES:
                quote = ch
                continue
        elif ch != "\\" and ch not in _QUOTES:
            out.append("\\")
        escaped = False
        out.append(ch)
    return "".join(out)


class TokenScanner(Scanner):
    """
    Scan marker attribute text into tokens.

    Offsets are character offsets into the text given to the scanner.

    Example:
        >>> [t.text for t in TokenScanner('src="a b" start=x')]
        ['src', '=', 'a b', 'start', '=', 'x']
    """

    def __init__(self, text: str):
        self._text = text
        super().__init__()

    def _scan(self) -> Iterator[Token]:
        text = self._text
        n = len(text)
        i = 0
        while True:
            while i < n and text[i].isspace():
                i += 1
            if i >= n:
                return

            start = i
            quote: Optional[str] = None
            escaped = False
            while i < n:
                ch = text[i]
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif quote is not None:
                    if ch == quote:
                        quote = None
                elif ch in _QUOTES:
                    quote = ch
                elif ch == "=":
                    if i == start:
                        i += 1
                    break
                elif ch.isspace():
                    break
                i += 1
            else:
                if quote is not None or escaped:
                    raise MarkerSyntaxError(ERR_UNTERMINATED, offset=start)

            yield Token(unescape(text[start:i]), start, i)
