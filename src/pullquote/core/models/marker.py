"""
Module: marker

Purpose:
    Provides the Marker dataclass - one parsed directive found in a
    document - and ResolvedContent, the text that replaces a marker's
    body. Both are created fresh for every document run.

Key Classes:
    - MarkerKind: pull / go / json, keyed by the opening tag name
    - Format: presentation of resolved content
    - Flags: resolver hints (noreformat, includegroup)
    - Marker: parsed directive with byte offsets in the host document
    - ResolvedContent: replacement text plus optional code/output parts

Dependencies:
    - dataclasses (std)
    - enum (std)
    - re (std)

Used By:
    - parsing.options: Builds Marker options
    - parsing.reader: Builds Markers with offsets
    - resolving: Produces ResolvedContent per Marker
    - rewriting.writer: Splices ResolvedContent into the document
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Optional, Tuple


class MarkerKind(enum.Enum):
    """Marker kind, named after the prefix of its ``<kind>quote`` tag."""
    PULL = "pull"
    GO = "go"
    JSON = "json"

    @property
    def tag(self) -> str:
        """Opening tag keyword, e.g. ``pullquote``."""
        return f"{self.value}quote"

    @property
    def close_tag(self) -> str:
        """Closing tag keyword, e.g. ``/pullquote``."""
        return f"/{self.value}quote"

    @property
    def path_key(self) -> Optional[str]:
        """Key that holds the object path for go/json markers."""
        if self is MarkerKind.GO:
            return "gopath"
        if self is MarkerKind.JSON:
            return "jsonpath"
        return None

    @classmethod
    def from_tag(cls, keyword: str) -> Optional[MarkerKind]:
        """Return the kind opened by ``keyword``, or None if unrecognized."""
        for kind in cls:
            if kind.tag == keyword:
                return kind
        return None

    @classmethod
    def from_close_tag(cls, keyword: str) -> Optional[MarkerKind]:
        """Return the kind closed by ``keyword``, or None if unrecognized."""
        for kind in cls:
            if kind.close_tag == keyword:
                return kind
        return None


class Format(enum.Enum):
    """How resolved content is presented in the document."""
    NONE = "none"
    CODEFENCE = "codefence"
    BLOCKQUOTE = "blockquote"
    EXAMPLE = "example"


class Flags(enum.IntFlag):
    """Resolver hints set by bare keys in the marker."""
    NONE = 0
    NO_REFORMAT = 1
    INCLUDE_GROUP = 2


@dataclass(frozen=True)
class Marker:
    """
    One parsed directive from a document.

    Offsets are byte offsets into the host document. The content region
    replaced by the rewriter is ``[content_start, close_offset)``.

    Attributes:
        kind: Which tag opened the marker.
        open_offset: Offset of the ``<!--`` of the opening comment.
        content_start: Offset just past the opening comment's ``-->``.
        close_offset: Offset of the ``<!--`` of the closing comment, or
            None when no closing comment was found.
        source_path: Pull only - file holding the quoted region.
        start_pattern: Pull only - pattern for the first line.
        end_pattern: Pull only - pattern for the last line.
        end_occurrence: Pull only - which match of ``end_pattern`` ends
            the region (default 1).
        object_path: Go/Json only - ``location#symbol`` or
            ``file#/json/path``.
        format: Presentation of the resolved content.
        language: Code fence language hint.
        flags: Resolver hints.

    Invariants:
        - close_offset, if set, is greater than open_offset
        - content_start is greater than open_offset
        - end_occurrence >= 1
        - pull markers carry source/start/end and no object path;
          go/json markers carry an object path and no pull keys

    Example:
        >>> m = Marker(MarkerKind.GO, 0, 28, object_path="./#fooBar")
        >>> m.symbol
        'fooBar'
    """

    kind: MarkerKind
    open_offset: int
    content_start: int
    close_offset: Optional[int] = None
    source_path: Optional[str] = None
    start_pattern: Optional[re.Pattern] = None
    end_pattern: Optional[re.Pattern] = None
    end_occurrence: int = 1
    object_path: Optional[str] = None
    format: Format = Format.NONE
    language: str = ""
    flags: Flags = Flags.NONE

    def __post_init__(self) -> None:
        """Validate marker invariants on construction."""
        if self.content_start <= self.open_offset:
            raise ValueError(
                f"content_start {self.content_start} must follow open_offset {self.open_offset}"
            )
        if self.close_offset is not None and self.close_offset <= self.open_offset:
            raise ValueError(
                f"close_offset {self.close_offset} must follow open_offset {self.open_offset}"
            )
        if self.end_occurrence < 1:
            raise ValueError(f"end_occurrence must be positive: {self.end_occurrence}")

        pull_fields = (self.source_path, self.start_pattern, self.end_pattern)
        if self.kind is MarkerKind.PULL:
            if any(f is None for f in pull_fields):
                raise ValueError("pull markers need source_path, start_pattern and end_pattern")
            if self.object_path is not None:
                raise ValueError("pull markers cannot carry an object_path")
        else:
            if self.object_path is None:
                raise ValueError(f"{self.kind.tag} markers need an object_path")
            if any(f is not None for f in pull_fields):
                raise ValueError(f"{self.kind.tag} markers cannot carry pull keys")

    @property
    def is_closed(self) -> bool:
        """Whether a closing comment was found for this marker."""
        return self.close_offset is not None

    @property
    def location(self) -> str:
        """Part of ``object_path`` before the first ``#``."""
        return (self.object_path or "").partition("#")[0]

    @property
    def symbol(self) -> str:
        """Part of ``object_path`` after the first ``#``."""
        return (self.object_path or "").partition("#")[2]

    def describe(self) -> str:
        """
        Render the marker as comment-like text for debug logs.

        This is not a valid serialization; patterns and offsets are
        shown for inspection only.
        """
        parts = [f"<!-- {self.kind.tag}"]
        if self.object_path is not None:
            parts.append(f"{self.kind.path_key}={self.object_path!r}")
        parts.append(f"open={self.open_offset}")
        parts.append(f"content={self.content_start}")
        parts.append(f"close={self.close_offset if self.is_closed else 'none'}")
        if self.source_path is not None:
            parts.append(f"src={self.source_path!r}")
        if self.start_pattern is not None:
            parts.append(f"start={self.start_pattern.pattern!r}")
        if self.end_pattern is not None:
            parts.append(f"end={self.end_pattern.pattern!r}")
        if self.end_occurrence != 1:
            parts.append(f"endcount={self.end_occurrence}")
        parts.append(f"fmt={self.format.value}")
        if self.language:
            parts.append(f"lang={self.language!r}")
        if self.flags & Flags.INCLUDE_GROUP:
            parts.append("includegroup")
        if self.flags & Flags.NO_REFORMAT:
            parts.append("noreformat")
        parts.append("-->")
        return " ".join(parts)


@dataclass(frozen=True)
class ResolvedContent:
    """
    Replacement text for one Marker.

    Attributes:
        text: The resolved content, used verbatim unless ``parts`` is set.
        parts: Example format only - (code, expected output) when the
            extractor split the example successfully.
    """

    text: str
    parts: Optional[Tuple[str, str]] = None
