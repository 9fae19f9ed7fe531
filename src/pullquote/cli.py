"""
Module: cli

Purpose:
    Command line entry point. Parses arguments into a RunConfig, sets up
    logging and interrupt handling, runs the documents and maps the
    outcome to an exit code.

Exit codes:
    0   success (check mode: no changes detected)
    1   at least one document failed
    2   check mode: changes detected
    130 interrupted

Usage:
    pullquote README.md docs/usage.md
    pullquote --walk --check
    git ls-files '*.md' | pullquote
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional, TextIO

from pullquote import __version__
from pullquote.config import RunConfig
from pullquote.core.errors import Cancelled, ChangesDetected, DiscoveryError, RunError
from pullquote.logging_setup import configure_logging
from pullquote.runner import run

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CHANGES = 2
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pullquote",
        description="Keep code quoted in markdown documents in sync with its source.",
    )
    parser.add_argument("files", nargs="*", help="Markdown files to update")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report whether any file would change without writing (exit 2 if so)",
    )
    parser.add_argument(
        "--walk",
        action="store_true",
        help="Also process every *.md file under the current directory",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose output (also enabled by the DEBUG environment variable)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Maximum number of documents processed at once",
    )
    parser.add_argument("--go", dest="go_command", default="go", help="Go executable (default: go)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _default_stdin() -> Optional[TextIO]:
    if sys.stdin is None or sys.stdin.isatty():
        return None
    return sys.stdin


def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None) -> int:
    """
    Run pullquote from the command line.

    Args:
        argv: Arguments (default ``sys.argv[1:]``).
        stdin: Stream of extra target paths (default: ``sys.stdin``
            unless it is a terminal).

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = RunConfig.from_env(
            check_mode=args.check,
            walk=args.walk,
            debug=args.debug,
            max_workers=args.workers,
            root=Path.cwd(),
            go_command=args.go_command,
        )
    except ValueError as e:
        parser.error(str(e))

    configure_logging(debug=config.debug)
    if stdin is None:
        stdin = _default_stdin()

    cancel = threading.Event()
    previous = None
    if threading.current_thread() is threading.main_thread():
        previous = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())

    try:
        run(args.files, config, stdin=stdin, cancel=cancel)
    except ChangesDetected as e:
        for path in e.paths:
            logger.debug(f'msg="would change" file="{path}"')
        logger.info("changes detected")
        return EXIT_CHANGES
    except Cancelled:
        logger.error("cancelled")
        return EXIT_CANCELLED
    except RunError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except DiscoveryError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)

    if config.check_mode:
        logger.info("no changes detected")
    return EXIT_OK
