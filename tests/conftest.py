import os
import sys
import threading
from pathlib import Path
from typing import Dict, Union

import pytest

# Add src to sys.path so we can import pullquote
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())


# Common test fixtures
@pytest.fixture
def write_files(tmp_path: Path):
    """Return a helper writing ``{relative_name: content}`` under tmp_path."""

    def _write(files: Dict[str, Union[str, bytes]]) -> Path:
        for name, content in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                content = content.encode("utf-8")
            path.write_bytes(content)
        return tmp_path

    return _write


@pytest.fixture
def foo_bar_source() -> str:
    """Go source with a three line fooBar function."""
    return "package local\n\nfunc fooBar() {\n\t// OK COOL\n}\n\nfunc other() {}\n"


@pytest.fixture
def idle_stdin():
    """Text stream over a pipe whose write end stays open, so reads block."""
    read_fd, write_fd = os.pipe()
    stdin = os.fdopen(read_fd, "r")
    yield stdin
    # EOF releases any discovery thread still blocked reading
    os.close(write_fd)
    for thread in threading.enumerate():
        if thread.name == "pullquote-discovery":
            thread.join(5)
    stdin.close()
