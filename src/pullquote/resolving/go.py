"""
Module: resolving.go

Purpose:
    Symbol extractor for Go sources. Parses files with tree-sitter's Go
    grammar and returns the source text of a named declaration together
    with its doc comment.

Key Classes:
    - GoSymbolExtractor: Locates and renders named declarations
    - ExtractedSymbol: Extracted text plus doc comment

Dependencies:
    - tree_sitter_language_pack: Go grammar and parser
    - subprocess (std): ``go list`` for importable package specifiers

Used By:
    - resolving: Resolves goquote markers

Locations:
    - ``path/to/file.go``: that file
    - a directory: every ``.go`` file in it, non-test files first
    - anything else: an importable package, located with ``go list``

Symbols (first match in depth-first source order wins):
    - functions, and methods by plain name or ``Type.Method``
    - type, const and var specs; the whole grouped declaration when
      ``include_group`` is set or the declaration is not grouped
    - short variable declarations (``name := ...``), without doc
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from tree_sitter_language_pack import get_parser

from pullquote.core.errors import SymbolNotFoundError, SymbolParseError
from pullquote.logging_setup import DocumentLogger

from .example import realign_tabs

logger = logging.getLogger(__name__)

GO_LIST_TIMEOUT_S = 60

_SPEC_DECLARATIONS = {
    "const_spec": "const_declaration",
    "var_spec": "var_declaration",
    "type_spec": "type_declaration",
    "type_alias": "type_declaration",
}


@dataclass(frozen=True)
class ExtractedSymbol:
    """
    Source of one declaration.

    Attributes:
        text: Declaration source, preceded by its doc comment if any.
        doc: The doc comment alone, or None.
    """
    text: str
    doc: Optional[str] = None


def _text(source: bytes, node) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", "surrogateescape")


def _field_text(source: bytes, node, name: str) -> Optional[str]:
    child = node.child_by_field_name(name)
    return _text(source, child) if child is not None else None


def _receiver_type(source: bytes, method) -> Optional[str]:
    """Base type name of a method receiver: ``(f *Foo[T])`` -> ``Foo``."""
    receiver = method.child_by_field_name("receiver")
    if receiver is None:
        return None
    for param in receiver.named_children:
        if param.type != "parameter_declaration":
            continue
        type_name = _field_text(source, param, "type")
        if type_name is None:
            return None
        return type_name.lstrip("*").strip().split("[", 1)[0]
    return None


def _is_grouped(declaration) -> bool:
    """Whether a const/var/type declaration uses the parenthesized form."""
    for child in declaration.children:
        if child.type == "(" or child.type.endswith("_spec_list"):
            return True
    return False


def _enclosing(node, node_type: str):
    parent = node.parent
    while parent is not None and parent.type != node_type:
        parent = parent.parent
    return parent


def _doc_comments(node) -> List:
    """Contiguous comments directly above ``node``, top to bottom."""
    docs = []
    current = node
    prev = node.prev_sibling
    while prev is not None and prev.type == "comment" and prev.end_point[0] >= current.start_point[0] - 1:
        before = prev.prev_sibling
        if before is not None and before.type != "comment" and before.end_point[0] == prev.start_point[0]:
            break  # trailing comment of the previous statement
        docs.append(prev)
        current = prev
        prev = prev.prev_sibling
    docs.reverse()
    return docs


def _match(source: bytes, node, symbol: str, include_group: bool):
    """
    Return ``(node_to_render, render_doc)`` if ``node`` declares ``symbol``.

    ``render_doc`` is False for short variable declarations, which are
    rendered without a doc comment.
    """
    kind = node.type

    if kind == "function_declaration":
        if "." not in symbol and _field_text(source, node, "name") == symbol:
            return node, True

    elif kind == "method_declaration":
        name = _field_text(source, node, "name")
        if "." in symbol:
            recv, _, method = symbol.partition(".")
            if name == method and _receiver_type(source, node) == recv:
                return node, True
        elif name == symbol:
            return node, True

    elif kind == "short_var_declaration":
        left = node.child_by_field_name("left")
        if left is not None:
            for ident in left.named_children:
                if ident.type == "identifier" and _text(source, ident) == symbol:
                    return node, False

    elif kind in _SPEC_DECLARATIONS:
        names = [_text(source, n) for n in node.children_by_field_name("name")]
        if symbol in names:
            declaration = _enclosing(node, _SPEC_DECLARATIONS[kind])
            if declaration is not None and (include_group or not _is_grouped(declaration)):
                return declaration, True
            return node, True

    return None


class GoSymbolExtractor:
    """
    Extract named declarations from Go sources.

    Parsed files and resolved locations are cached on the instance, so
    one extractor serves a whole batch of markers without re-parsing.

    Example:
        >>> extractor = GoSymbolExtractor()
        >>> extractor.extract("errors", "New").text.splitlines()[-1]
        '}'
    """

    def __init__(self, go_command: str = "go", log: Optional[DocumentLogger] = None):
        self._go_command = go_command
        self._log = log.for_module(__name__) if log is not None else DocumentLogger(logger)
        self._parser = None
        self._trees: Dict[Path, Tuple[bytes, object]] = {}
        self._locations: Dict[str, List[Path]] = {}

    def extract(
        self,
        location: str,
        symbol: str,
        *,
        include_group: bool = False,
        no_reformat: bool = False,
    ) -> ExtractedSymbol:
        """
        Extract ``symbol`` from the Go sources at ``location``.

        Args:
            location: File, directory or importable package.
            symbol: Declaration name, or ``Type.Method``.
            include_group: Return whole grouped declarations.
            no_reformat: Keep the original indentation.

        Returns:
            ExtractedSymbol for the first matching declaration.

        Raises:
            SymbolNotFoundError: No declaration named ``symbol``, or the
                package cannot be located.
            SymbolParseError: A source file has syntax errors, or the Go
                grammar cannot be loaded.
            OSError: A source file cannot be read.
        """
        for path in self._files_for(location):
            source, root = self._parse(path, location)
            found = self._find(source, root, symbol, include_group)
            if found is None:
                continue

            node, render_doc = found
            docs = _doc_comments(node) if render_doc else []
            start = docs[0].start_byte if docs else node.start_byte
            text = source[start:node.end_byte].decode("utf-8", "surrogateescape")
            doc = None
            if docs:
                doc = source[docs[0].start_byte:docs[-1].end_byte].decode("utf-8", "surrogateescape")
            if not no_reformat:
                text = realign_tabs(text)

            self._log.debug(f'msg="extracted symbol" location="{location}" symbol={symbol} file="{path}"')
            return ExtractedSymbol(text=text, doc=doc)

        raise SymbolNotFoundError(f'error within {location}: couldn\'t find "{symbol}"')

    @staticmethod
    def _find(source: bytes, root, symbol: str, include_group: bool):
        stack = [root]
        while stack:
            node = stack.pop()
            found = _match(source, node, symbol, include_group)
            if found is not None:
                return found
            stack.extend(reversed(node.children))
        return None

    def _parse(self, path: Path, location: str):
        if path not in self._trees:
            source = path.read_bytes()
            try:
                if self._parser is None:
                    self._parser = get_parser("go")
                tree = self._parser.parse(source)
            except Exception as e:
                # grammar download or load failures surface as library-specific errors
                raise SymbolParseError(
                    f"error within {location}: unable to parse {path}: {e}", path=path
                ) from e
            if tree.root_node.has_error:
                raise SymbolParseError(f"error within {location}: unable to parse {path}", path=path)
            self._trees[path] = (source, tree.root_node)
        return self._trees[path]

    def _files_for(self, location: str) -> List[Path]:
        if location not in self._locations:
            self._locations[location] = self._locate(location)
        return self._locations[location]

    def _locate(self, location: str) -> List[Path]:
        path = Path(location)
        if location.endswith(".go"):
            return [path]
        if not path.is_dir():
            path = self._package_dir(location)
        files = [p for p in path.iterdir() if p.suffix == ".go" and p.is_file()]
        # sort so that `blah.go` files come before `blah_test.go` files
        return sorted(files, key=lambda p: (p.name.endswith("_test.go"), p.name))

    def _package_dir(self, package: str) -> Path:
        """Locate an importable package with ``go list``."""
        try:
            proc = subprocess.run(
                [self._go_command, "list", "-f", "{{.Dir}}", package],
                capture_output=True,
                text=True,
                timeout=GO_LIST_TIMEOUT_S,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise SymbolNotFoundError(f"error within {package}: unable to run {self._go_command} list: {e}") from e

        directory = proc.stdout.strip()
        if proc.returncode != 0 or not directory:
            reason = proc.stderr.strip() or "no such package"
            raise SymbolNotFoundError(f"error within {package}: {reason}")
        return Path(directory)
