"""Per-file failures that are recovered locally.

None of these abort a run: callers substitute a neutral result for the
affected file, log a warning with the path and diagnostic, and move on.
"""

from __future__ import annotations


class AnalysisError(Exception):
    """Base class for recoverable per-file failures."""

    def __init__(self, path: str, detail: str = ""):
        self.path = path
        self.detail = detail
        message = f"{path}: {detail}" if detail else path
        super().__init__(message)


class ParseFailure(AnalysisError):
    """Source text could not be converted into a clean syntax tree."""


class UnreadableFile(AnalysisError):
    """I/O failure while reading a discovered path."""


class UnresolvedImport(AnalysisError):
    """A local, aliased or workspace import has no existing target file."""

    def __init__(self, path: str, source_module: str):
        self.source_module = source_module
        super().__init__(path, f"cannot resolve '{source_module}'")
