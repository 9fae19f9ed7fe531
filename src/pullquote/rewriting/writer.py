"""
Module: rewriting.writer

Purpose:
    Produce the rewritten document. Bytes outside marker bodies are
    copied verbatim and in order; each marker body is replaced by its
    formatted resolved content. Unclosed markers get their closing tag
    written after the content, so a second run finds a closed marker
    and produces identical output.

Key Functions:
    - apply_markers(): Original bytes + markers + content -> new bytes
    - format_content(): Render one ResolvedContent per Marker.format
    - code_fence(): Fenced code block, switching to ~~~ when needed
"""

from __future__ import annotations

import io
from typing import BinaryIO, Sequence

from pullquote.core.models import Format, Marker, ResolvedContent


def code_fence(content: str, language: str = "") -> str:
    """
    Wrap ``content`` in a fenced code block.

    Content that itself holds a backtick fence is wrapped with tildes
    so the inner fence does not close the outer one.

    Example:
        >>> code_fence("x := 1", "go")
        '\\n```go\\nx := 1\\n```\\n'
    """
    fence = "```"
    if content.startswith("```") or "\n```" in content:
        fence = "~~~"
    return f"\n{fence}{language}\n{content}\n{fence}\n"


def format_content(marker: Marker, content: ResolvedContent) -> str:
    """Render ``content`` the way ``marker.format`` asks for."""
    if marker.format is Format.EXAMPLE:
        if content.parts is None:
            return code_fence(content.text, marker.language)
        code, output = content.parts
        return "\nCode:" + code_fence(code, marker.language) + "Output:" + code_fence(output)
    if marker.format is Format.CODEFENCE:
        return code_fence(content.text, marker.language)
    if marker.format is Format.BLOCKQUOTE:
        return "\n> " + content.text.replace("\n", "\n> ") + "\n"
    return "\n" + content.text + "\n"


def write_markers(
    data: bytes,
    markers: Sequence[Marker],
    contents: Sequence[ResolvedContent],
    out: BinaryIO,
) -> None:
    """
    Stream the rewritten document to ``out``.

    Args:
        data: Original document bytes.
        markers: Markers in document order.
        contents: Resolved content, one per marker.
        out: Binary destination.

    Raises:
        ValueError: ``markers`` and ``contents`` differ in length.
    """
    if len(markers) != len(contents):
        raise ValueError(f"{len(markers)} markers but {len(contents)} resolved contents")

    read_through = 0
    for marker, content in zip(markers, contents):
        out.write(data[read_through:marker.content_start])
        read_through = marker.content_start

        out.write(format_content(marker, content).encode("utf-8", "surrogateescape"))

        if marker.close_offset is None:
            out.write(f"<!-- {marker.kind.close_tag} -->".encode("utf-8"))
        else:
            # the old body is dropped
            read_through = marker.close_offset

    out.write(data[read_through:])


def apply_markers(
    data: bytes,
    markers: Sequence[Marker],
    contents: Sequence[ResolvedContent],
) -> bytes:
    """
    Return the rewritten document.

    Example:
        >>> apply_markers(b"doc", [], [])
        b'doc'
    """
    buf = io.BytesIO()
    write_markers(data, markers, contents, buf)
    return buf.getvalue()
