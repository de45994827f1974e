"""Grammar selection and tree-sitter parsing for JS/TS sources."""

from __future__ import annotations

import os
from pathlib import Path

from tree_sitter_language_pack import get_parser

from sweepp.errors import ParseFailure, UnreadableFile

# Extension -> tree-sitter grammar.  The javascript grammar parses JSX.
EXTENSION_MAP: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

# Grammar for files whose extension is not in EXTENSION_MAP (the most permissive one)
FALLBACK_LANGUAGE = "tsx"


def detect_language(path: str) -> str | None:
    """Return the grammar name for *path*, or None for unsupported extensions."""
    _, ext = os.path.splitext(path)
    return EXTENSION_MAP.get(ext.lower())


def read_source(path) -> bytes:
    """Read a file as bytes, raising UnreadableFile on I/O failure."""
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise UnreadableFile(str(path), e.strerror or str(e)) from e


def _first_error(node):
    """Depth-first search for the first ERROR / MISSING node."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def parse_source(source: bytes, language: str | None, path: str = "<source>"):
    """Parse *source* and return the tree-sitter tree.

    tree-sitter always produces a tree; ERROR and MISSING nodes are the
    parse-failure signal, reported as ParseFailure with the first location.
    """
    parser = get_parser(language or FALLBACK_LANGUAGE)
    tree = parser.parse(source)
    if tree.root_node.has_error:
        bad = _first_error(tree.root_node)
        if bad is not None:
            row, col = bad.start_point
            kind = "missing token" if bad.is_missing else "syntax error"
            raise ParseFailure(path, f"{kind} at line {row + 1}, column {col + 1}")
        raise ParseFailure(path, "syntax error")
    return tree
