"""
Module: resolving.example

Purpose:
    Text helpers for extracted Go code: re-aligning indentation of
    snippets cut out of nested scopes, and splitting example functions
    into the code they run and the output they document.

Key Functions:
    - realign_tabs(): Remove excess leading tabs from continuation lines
    - split_example(): Example function -> (code, output)
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from pullquote.core.errors import ExampleSplitError

_OUTPUT_COMMENT = re.compile(r"^\s*//\s*Output:\s*$")
_COMMENT_PREFIX = re.compile(r"^\s*//\s?(.*)$")


def _leading_tabs(line: str) -> int:
    return len(line) - len(line.lstrip("\t"))


def _strip_tabs(line: str, count: int) -> str:
    return line[min(count, _leading_tabs(line)):]


def realign_tabs(found: str) -> str:
    """
    Outdent a snippet whose first line was cut mid-indentation.

    A declaration taken from inside a group or function keeps the
    indentation of its continuation lines while its first line starts at
    column zero. The tabs on the second line, less one level of body
    indentation (none if the snippet starts with a ``//`` comment), are
    removed from every continuation line.

    Example:
        >>> realign_tabs("// doc\\n\\tFoo = iota")
        '// doc\\nFoo = iota'
    """
    lines = found.split("\n")
    if len(lines) < 2:
        return found

    expected_inset = 0 if found.startswith("//") else 1
    to_remove = _leading_tabs(lines[1]) - expected_inset
    if to_remove <= 0:
        return found
    return "\n".join([lines[0]] + [_strip_tabs(line, to_remove) for line in lines[1:]])


def split_example(text: str) -> Optional[Tuple[str, str]]:
    """
    Split an example function into its code and expected output.

    Lines before the ``func`` line (doc comments) are skipped. Body lines
    up to a ``// Output:`` comment form the code, with the first body
    line's leading tabs removed from each; comment lines after it form
    the output, with the ``//`` prefix removed.

    Args:
        text: Extracted function source.

    Returns:
        (code, output), or None when the function has no Output comment.

    Raises:
        ExampleSplitError: The text contains no function declaration.
    """
    saw_decl = False
    saw_output = False
    first_prefix: Optional[int] = None
    code = ""
    buf: List[str] = []

    for line in text.splitlines():
        if not saw_decl:
            saw_decl = line.startswith("func ")
            continue
        if saw_output:
            match = _COMMENT_PREFIX.match(line)
            if match:
                buf.append(match.group(1))
            continue
        if _OUTPUT_COMMENT.match(line):
            code = "\n".join(buf)
            buf = []
            saw_output = True
            continue
        if first_prefix is None:
            first_prefix = _leading_tabs(line)
        buf.append(_strip_tabs(line, first_prefix))

    if not saw_decl:
        raise ExampleSplitError("no function declaration in example")
    if not saw_output:
        return None
    return code, "\n".join(buf)
