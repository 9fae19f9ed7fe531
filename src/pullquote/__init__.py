"""Top-level package for pullquote.

Keeps documentation snippets in sync with their source of truth by
rewriting the content between marker comments.

Provides subpackages:
- pullquote.scanning – comment and attribute scanners
- pullquote.parsing – marker parsing, validation and pairing
- pullquote.resolving – content resolvers (pull, go, json)
- pullquote.rewriting – document rewriter
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
        except OSError:
            content = ""
        for line in content.splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.4.0"
                return line.split("=")[1].strip().strip('"').strip("'")

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("pullquote")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
