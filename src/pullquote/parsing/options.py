"""
Module: parsing.options

Purpose:
    Turn the attribute tokens of an opening marker into typed, validated
    marker options. Parsing is split in two passes: ``collect_options``
    assembles ``key = value`` triples and bare keys into a mapping plus a
    list of violations; ``validate_options`` applies the per-kind rules
    and defaults and returns MarkerOptions.

Key Functions:
    - collect_options(): Token pass, returns ParsedOptions
    - validate_options(): Validation pass, returns MarkerOptions
    - parse_marker_options(): Both passes with offset-prefixed errors

Key Classes:
    - ParsedOptions: Raw key/value mapping plus violations
    - MarkerOptions: Validated options for one marker

Error order:
    1. First token-pass violation in token order (duplicate key, value
       given to a flag, value missing, bad pattern, bad endcount,
       unterminated token)
    2. Unrecognized fmt
    3. Missing required key (src, start, end for pull; the object path
       for go/json)
    4. Keys left over for the marker kind
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from pullquote.core.errors import MarkerSyntaxError
from pullquote.core.models import Flags, Format, MarkerKind
from pullquote.scanning import Token, TokenScanner

logger = logging.getLogger(__name__)

# disables realigning tabs in extracted code
KEY_NO_REFORMAT = "noreformat"
# path to a go declaration; can also be given positionally to goquote
KEY_GO_PATH = "gopath"
# include the whole grouped declaration, not just the named spec
KEY_INCLUDE_GROUP = "includegroup"
# path to a JSON value; can also be given positionally to jsonquote
KEY_JSON_PATH = "jsonpath"
# file from which to take a pullquote
KEY_SRC = "src"
# pattern for the line on which a pullquote begins
KEY_START = "start"
# pattern for the line on which a pullquote ends
KEY_END = "end"
# number of times `end` must match before the quote ends; default 1
KEY_END_COUNT = "endcount"
# none, blockquote, codefence or example
KEY_FMT = "fmt"
# code fence language
KEY_LANG = "lang"

KEYS_COMMON_OPTIONAL = (KEY_FMT, KEY_LANG)
KEYS_GO_QUOTE_VALID = (KEY_GO_PATH, KEY_NO_REFORMAT, KEY_INCLUDE_GROUP)
KEYS_JSON_QUOTE_VALID = (KEY_JSON_PATH, KEY_NO_REFORMAT)
KEYS_PULL_QUOTE_OPTIONAL = (KEY_END_COUNT,)
KEYS_PULL_QUOTE_REQUIRED = (KEY_SRC, KEY_START, KEY_END)

FLAG_KEYS = {
    KEY_NO_REFORMAT: Flags.NO_REFORMAT,
    KEY_INCLUDE_GROUP: Flags.INCLUDE_GROUP,
}
VALUE_KEYS = frozenset({
    KEY_SRC, KEY_START, KEY_END, KEY_END_COUNT,
    KEY_FMT, KEY_LANG, KEY_GO_PATH, KEY_JSON_PATH,
})

ERR_BAD_FMT = "fmt must be example, codefence, blockquote, or none"

_SEPARATOR = "="


@dataclass
class ParsedOptions:
    """
    Result of the token pass.

    Attributes:
        values: Keys in the order first seen; bare keys map to None.
        patterns: Compiled ``start``/``end`` patterns.
        end_count: Parsed ``endcount`` if given and valid.
        violations: Problems found, in token order.
    """
    values: Dict[str, Optional[str]] = field(default_factory=dict)
    patterns: Dict[str, re.Pattern] = field(default_factory=dict)
    end_count: Optional[int] = None
    violations: List[str] = field(default_factory=list)

    def add(self, key: str, value: Optional[str]) -> None:
        """Record one key, noting any violation it introduces."""
        if key in self.values:
            self.violations.append(f"key {key} already seen")
            return
        self.values[key] = value

        if key in FLAG_KEYS:
            if value is not None:
                self.violations.append(f'"{key}" does not take a value')
            return
        if key not in VALUE_KEYS:
            return  # reported by the kind's leftover check
        if value is None:
            self.violations.append(f'"{key}" requires value')
            return

        if key in (KEY_START, KEY_END):
            try:
                self.patterns[key] = re.compile(value)
            except re.error as e:
                self.violations.append(f'invalid {key} "{value}": {e}')
        elif key == KEY_END_COUNT:
            try:
                count = int(value)
            except ValueError:
                count = 0
            if count < 1:
                self.violations.append(f'invalid endcount "{value}": must be a positive integer')
            else:
                self.end_count = count


@dataclass(frozen=True)
class MarkerOptions:
    """Validated options for one marker, ready to build a Marker from."""
    source_path: Optional[str] = None
    start_pattern: Optional[re.Pattern] = None
    end_pattern: Optional[re.Pattern] = None
    end_occurrence: int = 1
    object_path: Optional[str] = None
    format: Format = Format.NONE
    language: str = ""
    flags: Flags = Flags.NONE


def _texts(tokens: Iterable[Token]) -> Tuple[List[str], Optional[str]]:
    """Drain tokens, returning their texts and a tokenizer error if one ended the input."""
    texts: List[str] = []
    try:
        for tok in tokens:
            texts.append(tok.text)
    except MarkerSyntaxError as e:
        return texts, str(e)
    return texts, None


def collect_options(kind: MarkerKind, tokens: Iterable[Token]) -> ParsedOptions:
    """
    Assemble tokens into keys and values.

    Uses a three-token window: ``key = value`` sets a value, a key not
    followed by ``=`` is a bare flag. For go/json markers a leading value
    with no key is the object path, so ``goquote pkg#Sym`` equals
    ``goquote gopath=pkg#Sym``.

    Args:
        kind: Kind of the marker being parsed.
        tokens: Attribute tokens following the tag keyword.

    Returns:
        ParsedOptions; never raises for bad input.
    """
    parsed = ParsedOptions()
    texts, token_error = _texts(tokens)

    # our expressions require maximum three tokens
    window: List[str] = []
    path_key = kind.path_key
    if path_key is not None and texts and not (len(texts) > 1 and texts[1] == _SEPARATOR):
        window = [path_key, _SEPARATOR]

    for text in texts:
        window.append(text)
        if len(window) == 2 and window[1] != _SEPARATOR:  # one off key
            parsed.add(window[0], None)
            window = [window[1]]
        elif len(window) == 3:  # key = value
            parsed.add(window[0], window[2])
            window = []

    for key in window:  # remainders
        parsed.add(key, None)

    if token_error is not None:
        parsed.violations.append(token_error)
    return parsed


def _leftover_error(kind: MarkerKind, seen: Iterable[str]) -> Optional[str]:
    keys = sorted(seen)
    if not keys:
        return None
    label = "invalid keys" if kind is MarkerKind.PULL else "unknown keys"
    return f"{kind.tag}: {label}: {', '.join(keys)}"


def validate_options(kind: MarkerKind, parsed: ParsedOptions) -> MarkerOptions:
    """
    Apply per-kind rules and defaults.

    Go markers default to a ``go`` code fence, switching to example
    format when the symbol name contains ``Example``. Json markers
    default to a ``json`` code fence. Pull markers default to no
    formatting.

    Raises:
        MarkerSyntaxError: On the first rule violated.
    """
    values = parsed.values
    fmt_name = values.get(KEY_FMT)
    fmt: Optional[Format] = None
    if fmt_name is not None:
        try:
            fmt = Format(fmt_name)
        except ValueError:
            raise MarkerSyntaxError(ERR_BAD_FMT) from None
    lang = values.get(KEY_LANG)

    seen = set(values) - set(KEYS_COMMON_OPTIONAL)
    flags = Flags.NONE
    for key, flag in FLAG_KEYS.items():
        if key in values:
            flags |= flag

    if kind is MarkerKind.PULL:
        seen -= set(KEYS_PULL_QUOTE_OPTIONAL)
        for key in KEYS_PULL_QUOTE_REQUIRED:
            if key not in seen:
                raise MarkerSyntaxError(f'"{key}" cannot be unset')
            seen.discard(key)
        leftover = _leftover_error(kind, seen)
        if leftover:
            raise MarkerSyntaxError(leftover)
        return MarkerOptions(
            source_path=values[KEY_SRC],
            start_pattern=parsed.patterns[KEY_START],
            end_pattern=parsed.patterns[KEY_END],
            end_occurrence=parsed.end_count or 1,
            format=fmt or Format.NONE,
            language=lang or "",
            flags=flags,
        )

    path_key = kind.path_key
    valid = KEYS_GO_QUOTE_VALID if kind is MarkerKind.GO else KEYS_JSON_QUOTE_VALID
    if path_key not in seen:
        raise MarkerSyntaxError(f'"{path_key}" cannot be unset')
    seen -= set(valid)
    leftover = _leftover_error(kind, seen)
    if leftover:
        raise MarkerSyntaxError(leftover)

    object_path = values[path_key]
    location, sep, symbol = object_path.partition("#")
    if not sep or not location or not symbol:
        form = "LOCATION#SYMBOL" if kind is MarkerKind.GO else "FILE#/PATH"
        raise MarkerSyntaxError(f"{path_key} must be of the form {form}: {object_path!r}")

    if fmt is None:
        fmt = Format.CODEFENCE
        if kind is MarkerKind.GO and "Example" in symbol:  # likely example test
            fmt = Format.EXAMPLE
    if lang is None:
        lang = kind.value

    return MarkerOptions(
        object_path=object_path,
        format=fmt,
        language=lang,
        flags=flags,
    )


def parse_marker_options(kind: MarkerKind, tokens: Iterable[Token], offset: int) -> MarkerOptions:
    """
    Parse and validate the attribute text of an opening marker.

    Args:
        kind: Kind named by the tag keyword.
        tokens: Attribute tokens following the tag keyword.
        offset: Document offset of the comment, used in error messages.

    Returns:
        Validated MarkerOptions.

    Raises:
        MarkerSyntaxError: ``parsing <tag> at offset N: ...`` for token
            pass violations, ``validating <tag> at offset N: ...`` for
            rule violations.

    Example:
        >>> opts = parse_marker_options(MarkerKind.GO, TokenScanner(" .#Foo "), 0)
        >>> opts.object_path, opts.format.value, opts.language
        ('.#Foo', 'codefence', 'go')
    """
    parsed = collect_options(kind, tokens)
    if parsed.violations:
        raise MarkerSyntaxError(
            f"parsing {kind.tag} at offset {offset}: {parsed.violations[0]}", offset=offset
        )
    try:
        return validate_options(kind, parsed)
    except MarkerSyntaxError as e:
        raise MarkerSyntaxError(f"validating {kind.tag} at offset {offset}: {e}", offset=offset) from e
