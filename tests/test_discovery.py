"""
Unit Tests for File Discovery

Tests for walk_markdown() and FileProducer: normalisation,
de-duplication, stdin paths and draining after cancellation.
"""

import io
import threading
import time
from pathlib import Path

import pytest

from pullquote.config import RunConfig
from pullquote.core.errors import DiscoveryError
from pullquote.discovery import FileProducer, walk_markdown


def produce(paths, config, stdin=None):
    producer = FileProducer(paths, config, stdin=stdin)
    producer.start()
    return list(producer)


class TestWalkMarkdown:
    """Tests for walk_markdown()."""

    def test_walk_when_tree_then_markdown_files_only(self, write_files):
        root = write_files({
            "README.md": "",
            "docs/guide.MD": "",
            "docs/notes.txt": "",
            ".hidden/secret.md": "",
            "pkg/testdata/fixture.md": "",
        })
        found = [p.relative_to(root).as_posix() for p in walk_markdown(root)]
        assert found == ["README.md", "docs/guide.MD"]


class TestFileProducer:
    """Tests for FileProducer."""

    def test_produce_when_relative_paths_then_resolved_against_root(self, tmp_path):
        paths = produce(["a.md", "sub/../b.md"], RunConfig(root=tmp_path))
        assert paths == [tmp_path / "a.md", tmp_path / "b.md"]

    def test_produce_when_duplicates_then_each_path_once(self, tmp_path):
        paths = produce(["a.md", str(tmp_path / "a.md"), "./a.md"], RunConfig(root=tmp_path))
        assert paths == [tmp_path / "a.md"]

    def test_produce_when_stdin_then_lines_added(self, tmp_path):
        stdin = io.StringIO("b.md\n\n  c.md  \na.md\n")
        paths = produce(["a.md"], RunConfig(root=tmp_path), stdin=stdin)
        assert paths == [tmp_path / "a.md", tmp_path / "b.md", tmp_path / "c.md"]

    def test_produce_when_walk_then_explicit_and_walked_merged(self, write_files):
        root = write_files({"x.md": "", "y.md": ""})
        paths = produce(["x.md"], RunConfig(root=root, walk=True))
        assert paths == [root / "x.md", root / "y.md"]

    def test_produce_when_walk_root_missing_then_error_raised_after_queue(self, tmp_path):
        config = RunConfig(root=tmp_path / "missing", walk=True)
        producer = FileProducer([], config)
        producer.start()
        with pytest.raises(DiscoveryError) as exc:
            list(producer)
        assert isinstance(exc.value.cause, OSError)
        assert producer.drain() == 0

    def test_drain_when_cancelled_with_full_queue_then_producer_finishes(self, tmp_path):
        cancel = threading.Event()
        paths = [f"{i}.md" for i in range(20)]
        producer = FileProducer(paths, RunConfig(root=tmp_path), cancel=cancel, maxsize=2)
        producer.start()

        first = next(iter(producer))
        cancel.set()
        producer.drain()

        assert first == tmp_path / "0.md"
        assert not producer.is_alive()

    def test_drain_when_already_exhausted_then_zero(self, tmp_path):
        producer = FileProducer(["a.md"], RunConfig(root=tmp_path))
        producer.start()
        assert list(producer) == [Path(tmp_path / "a.md")]
        assert producer.drain() == 0

    def test_produce_when_stdin_undecodable_then_discovery_error(self, tmp_path):
        stdin = io.TextIOWrapper(io.BytesIO(b"a.md\n\xff\xfe.md\n"), encoding="utf-8")
        producer = FileProducer([], RunConfig(root=tmp_path), stdin=stdin)
        producer.start()
        with pytest.raises(DiscoveryError) as exc:
            list(producer)
        assert isinstance(exc.value.cause, UnicodeDecodeError)
        assert str(exc.value).startswith("discovering files: ")

    def test_iterate_when_cancelled_while_stdin_blocks_then_returns(self, tmp_path, idle_stdin):
        cancel = threading.Event()
        producer = FileProducer(["a.md"], RunConfig(root=tmp_path), stdin=idle_stdin, cancel=cancel)
        producer.start()
        timer = threading.Timer(0.2, cancel.set)
        timer.start()

        started = time.monotonic()
        paths = list(producer)
        assert producer.drain() == 0
        timer.join()

        assert paths == [tmp_path / "a.md"]
        assert time.monotonic() - started < 5
