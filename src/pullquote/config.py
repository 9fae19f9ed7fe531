"""
Module: config

Purpose:
    Run configuration. One immutable value built by the command line
    entry point and passed explicitly to discovery, every document
    worker and the resolvers.

Key Classes:
    - RunConfig: Settings for one pullquote run

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - cli: Builds the configuration from arguments
    - runner, pipeline, discovery: Read settings
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

TRUTHY = frozenset({"1", "t", "true", "y", "yes", "on"})


def env_flag(value: Optional[str]) -> bool:
    """Return True if ``value`` spells a truthy flag (``1``, ``yes``, ``on``...)."""
    return value is not None and value.strip().lower() in TRUTHY


@dataclass(frozen=True)
class RunConfig:
    """
    Configuration for one run (immutable).

    Attributes:
        check_mode: Run the full pipeline but persist nothing; report
            whether any document would change.
        walk: Discover ``*.md`` files under ``root`` recursively.
        debug: Verbose logging.
        max_workers: Worker thread cap, None for the executor default.
        root: Directory walked in walk mode; relative targets are
            resolved against it.
        go_command: Executable used to locate Go packages.

    Example:
        >>> config = RunConfig(check_mode=True, root=Path("docs"))
    """

    check_mode: bool = False
    walk: bool = False
    debug: bool = False
    max_workers: Optional[int] = None
    root: Path = field(default_factory=Path.cwd)
    go_command: str = "go"

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive: {self.max_workers}")
        if not self.go_command:
            raise ValueError("go_command must not be empty")
        if not isinstance(self.root, Path):
            object.__setattr__(self, "root", Path(self.root))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs) -> RunConfig:
        """
        Build a configuration, enabling debug output when ``DEBUG`` is set.

        Explicit keyword arguments win over the environment, except that
        ``debug=False`` does not switch off a truthy ``DEBUG``.
        """
        environ = os.environ if environ is None else environ
        debug = kwargs.pop("debug", False) or env_flag(environ.get("DEBUG"))
        return cls(debug=debug, **kwargs)
