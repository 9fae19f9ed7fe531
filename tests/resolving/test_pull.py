"""
Unit Tests for the Pull Resolver

Tests for resolve_pull_markers(): line range capture, end counts,
shared-file batches and error text.
"""

import re
from pathlib import Path

import pytest

from pullquote.core.errors import ResolutionError
from pullquote.core.models import Marker, MarkerKind
from pullquote.resolving import resolve_pull_markers


def marker(src: Path, start: str, end: str, endcount: int = 1, offset: int = 0) -> Marker:
    return Marker(
        kind=MarkerKind.PULL,
        open_offset=offset,
        content_start=offset + 1,
        close_offset=offset + 2,
        source_path=str(src),
        start_pattern=re.compile(start),
        end_pattern=re.compile(end),
        end_occurrence=endcount,
    )


class TestResolvePullMarkers:
    """Tests for resolve_pull_markers()."""

    def test_resolve_when_function_block_then_three_lines_without_trailing_newline(
        self, write_files, foo_bar_source
    ):
        root = write_files({"local.go": foo_bar_source})
        [content] = resolve_pull_markers([marker(root / "local.go", r"func fooBar\(\) \{", r"\}")])
        assert content.text == "func fooBar() {\n\t// OK COOL\n}"
        assert content.parts is None

    def test_resolve_when_endcount_two_then_second_end_match(self, write_files):
        root = write_files({"s.txt": "start\na end\nb end\nc\n"})
        [first, second] = resolve_pull_markers([
            marker(root / "s.txt", "start", "end"),
            marker(root / "s.txt", "start", "end", endcount=2),
        ])
        assert first.text == "start\na end"
        assert second.text == "start\na end\nb end"

    def test_resolve_when_start_line_matches_end_then_single_line(self, write_files):
        root = write_files({"s.txt": "x\nSTART and END\ny\n"})
        [content] = resolve_pull_markers([marker(root / "s.txt", "START", "END")])
        assert content.text == "START and END"

    def test_resolve_when_disjoint_regions_then_order_independent(self, write_files):
        root = write_files({"s.txt": "a1\na2\nb1\nb2\n"})
        a = marker(root / "s.txt", "a1", "a2")
        b = marker(root / "s.txt", "b1", "b2")
        forward = [c.text for c in resolve_pull_markers([a, b])]
        backward = [c.text for c in resolve_pull_markers([b, a])]
        assert forward == ["a1\na2", "b1\nb2"]
        assert backward == ["b1\nb2", "a1\na2"]

    def test_resolve_when_overlapping_regions_then_each_captured(self, write_files):
        root = write_files({"s.txt": "one\ntwo\nthree\nfour\n"})
        outer = marker(root / "s.txt", "one", "four")
        inner = marker(root / "s.txt", "two", "three")
        assert [c.text for c in resolve_pull_markers([outer, inner])] == [
            "one\ntwo\nthree\nfour",
            "two\nthree",
        ]

    def test_resolve_when_crlf_source_then_trailing_terminator_trimmed(self, write_files):
        root = write_files({"s.txt": b"a\r\nb\r\nc\r\n"})
        [content] = resolve_pull_markers([marker(root / "s.txt", "a", "b")])
        assert content.text == "a\r\nb"

    def test_resolve_when_last_line_unterminated_then_captured(self, write_files):
        root = write_files({"s.txt": "a\nb"})
        [content] = resolve_pull_markers([marker(root / "s.txt", "a", "b")])
        assert content.text == "a\nb"

    def test_resolve_when_start_never_matches_then_raises(self, write_files):
        root = write_files({"s.txt": "a\nb\n"})
        path = root / "s.txt"
        with pytest.raises(ResolutionError) as exc:
            resolve_pull_markers([marker(path, "nope", "b")])
        assert str(exc.value) == f'never matched start: "nope" in {path}'

    def test_resolve_when_end_never_matches_then_raises(self, write_files):
        root = write_files({"s.txt": "a\nb\n"})
        with pytest.raises(ResolutionError, match='never matched end: "zzz"'):
            resolve_pull_markers([marker(root / "s.txt", "a", "zzz")])

    def test_resolve_when_endcount_exceeds_matches_then_never_matched_end(self, write_files):
        root = write_files({"s.txt": "a\nend\n"})
        with pytest.raises(ResolutionError, match="never matched end"):
            resolve_pull_markers([marker(root / "s.txt", "a", "end", endcount=3)])

    def test_resolve_when_source_missing_then_oserror(self, tmp_path):
        with pytest.raises(OSError):
            resolve_pull_markers([marker(tmp_path / "missing.txt", "a", "b")])

    def test_resolve_when_no_markers_then_empty(self):
        assert resolve_pull_markers([]) == []
