"""
Module: locking

Purpose:
    Locked, atomic persistence of rewritten documents. Rewritten output
    waits in a temporary file beside its document; persisting locks the
    document, confirms nobody changed it since it was read, and renames
    the temporary file over it. Uses portalocker for Mac, Windows, and
    Linux compatibility.

Key Functions:
    - content_digest: SHA-1 hex digest used for change detection
    - locked_file: Context manager for locked file access
    - persist_document: Verify digest and rename temp file into place
    - discard_temp: Remove a temporary file if it still exists

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - pipeline: Digest of original and rewritten bytes
    - runner: Final persistence step
"""

from __future__ import annotations

import hashlib
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Generator, Optional

import portalocker

from pullquote.core.errors import DocumentChangedError

logger = logging.getLogger(__name__)


def content_digest(data: bytes) -> str:
    """Return the SHA-1 hex digest of ``data``."""
    return hashlib.sha1(data).hexdigest()


@contextmanager
def locked_file(
    path: Path,
    mode: str = "rb",
    lock_type: int = portalocker.LOCK_EX,
) -> Generator[BinaryIO, None, None]:
    """
    Context manager for cross-platform locked file access.

    Args:
        path: Path to an existing file.
        mode: Binary file open mode ('rb', 'r+b', ...).
        lock_type: Lock type (LOCK_EX for exclusive, LOCK_SH for shared).

    Yields:
        Open file handle with lock held.

    Example:
        >>> with locked_file(path) as f:
        ...     data = f.read()
    """
    with open(path, mode) as f:
        portalocker.lock(f, lock_type)
        try:
            yield f
        finally:
            portalocker.unlock(f)


def persist_document(path: Path, temp_path: Path, expected_digest: str) -> None:
    """
    Replace ``path`` with ``temp_path`` if ``path`` is unchanged.

    Args:
        path: Document to replace.
        temp_path: Rewritten output, in the same directory as ``path``.
        expected_digest: Digest of ``path`` when the run read it.

    Raises:
        DocumentChangedError: ``path`` no longer has ``expected_digest``.
        OSError: Lock, read or rename failed.
    """
    with locked_file(path) as f:
        if content_digest(f.read()) != expected_digest:
            raise DocumentChangedError(path)
        os.replace(temp_path, path)
    logger.debug(f"Persisted {path.name}")


def discard_temp(temp_path: Optional[Path]) -> None:
    """Remove ``temp_path``; a file that is already gone is not an error."""
    if temp_path is None:
        return
    try:
        temp_path.unlink()
    except FileNotFoundError:
        pass
