"""Source file discovery: git ls-files with fallback to os.walk."""

from __future__ import annotations

import glob
import logging
import os
import subprocess
from fnmatch import fnmatchcase
from pathlib import Path

log = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")

# Never analyzed, whatever the user passes
ALWAYS_IGNORE = ("node_modules", ".git", "**/*.d.ts")

# Build output and tool directories, ignored by `unused-code`
DEFAULT_IGNORE_DIRS = (
    "node_modules", "dist", "build", "out", ".next", ".vercel", ".git",
    "coverage", "public", "static", "storybook-static", "tmp", "temp",
    ".cache", ".expo", ".idea", ".vscode",
)

# Framework entry files loaded by convention, never by import
ROUTE_SPECIAL_FILES = (
    "**/pages/_*",
    "**/pages/_api/**",
    "**/app/_*",
    "**/app/layout.*",
    "**/app/error.*",
    "**/app/loading.*",
    "**/app/not-found.*",
    "**/app/head.*",
    "**/app/global-error.*",
)

_GLOB_CHARS = frozenset("*?[")


def normalize_extensions(extensions) -> tuple[str, ...]:
    """``"ts, .tsx"`` / ``["ts", ".tsx"]`` -> ``(".ts", ".tsx")``."""
    if isinstance(extensions, str):
        extensions = extensions.split(",")
    out = []
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        ext = ext if ext.startswith(".") else "." + ext
        if ext not in out:
            out.append(ext)
    return tuple(out)


def _has_glob(text: str) -> bool:
    return any(c in _GLOB_CHARS for c in text)


def _matches_ignore(rel_path: str, patterns) -> bool:
    """Match a root-relative POSIX path against ignore entries.

    A bare name (``dist``) matches any path segment; anything else is a glob
    over the whole relative path, with an optional leading ``**/``.
    """
    parts = rel_path.split("/")
    for pattern in patterns:
        pattern = pattern.replace("\\", "/")
        if pattern.startswith("./"):
            pattern = pattern[2:]
        if not pattern:
            continue
        if not _has_glob(pattern) and "/" not in pattern.rstrip("/"):
            if pattern.rstrip("/") in parts:
                return True
            continue
        bare = pattern[3:] if pattern.startswith("**/") else pattern
        if bare.endswith("/"):
            bare += "**"
        for candidate in (bare, "*/" + bare):
            if fnmatchcase(rel_path, candidate):
                return True
            # dir/** also covers everything below dir
            if candidate.endswith("/**") and fnmatchcase(rel_path, candidate[:-3] + "/*"):
                return True
    return False


def _prunable_dirs(patterns) -> set[str]:
    return {p.strip("/") for p in patterns if not _has_glob(p) and "/" not in p.strip("/")}


def _git_ls_files(root: Path) -> list[str] | None:
    """Try to list files using git ls-files. Returns None if git unavailable."""
    try:
        result = subprocess.run(
            ["git", "ls-files", "--cached", "--others", "--exclude-standard"],
            cwd=str(root),
            capture_output=True,
            text=True,
            timeout=30,
        )
        if result.returncode != 0:
            return None
        return [p.strip() for p in result.stdout.splitlines() if p.strip()]
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None


def _walk_files(root: Path, prune: set[str]) -> list[str]:
    """Fallback file discovery using os.walk, pruning ignored directories."""
    result = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in prune and not d.startswith(".")]
        for fname in filenames:
            full = os.path.join(dirpath, fname)
            try:
                rel = os.path.relpath(full, root).replace("\\", "/")
            except (ValueError, OSError):
                continue
            result.append(rel)
    return result


def _rel_to(path: str, root: Path) -> str:
    try:
        return os.path.relpath(path, root).replace("\\", "/")
    except ValueError:
        return path.replace("\\", "/")


def discover_files(target, root=None, extensions=DEFAULT_EXTENSIONS, ignore=()) -> list[str]:
    """Discover source files to analyze.

    *target* is a directory (walked), a single file, or a glob pattern
    (relative to *root*).  Ignore entries are matched against paths relative
    to *root*.  Returns a sorted list of absolute paths.
    """
    root = Path(root or os.getcwd()).resolve()
    exts = normalize_extensions(extensions)
    patterns = list(ALWAYS_IGNORE) + [p for p in (ignore or ()) if p]
    target = str(target)

    if _has_glob(target):
        pattern = target if os.path.isabs(target) else os.path.join(str(root), target)
        candidates = [os.path.abspath(p) for p in glob.glob(pattern, recursive=True)]
        candidates = [p for p in candidates if os.path.isfile(p) and p.lower().endswith(exts)]
    else:
        base = Path(target) if os.path.isabs(target) else root / target
        base = base.resolve()
        if base.is_file():
            candidates = [str(base)]
        elif base.is_dir():
            raw = _git_ls_files(base)
            if raw is None:
                raw = _walk_files(base, _prunable_dirs(patterns))
            candidates = [
                os.path.normpath(os.path.join(str(base), rel))
                for rel in raw
                if rel.lower().endswith(exts)
            ]
            candidates = [p for p in candidates if os.path.isfile(p)]
        else:
            log.warning("%s: no such file or directory", target)
            return []

    kept = {p for p in candidates if not _matches_ignore(_rel_to(p, root), patterns)}
    return sorted(kept)
