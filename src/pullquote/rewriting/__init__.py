"""Rewriting of documents with resolved marker content."""

from .writer import apply_markers, code_fence, format_content, write_markers

__all__ = ["apply_markers", "code_fence", "format_content", "write_markers"]
