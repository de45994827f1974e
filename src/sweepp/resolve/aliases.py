"""Path aliases from ``tsconfig.json`` / ``jsconfig.json``.

Only ``compilerOptions.baseUrl`` and ``compilerOptions.paths`` are read.
Relative ``extends`` chains are followed; package ``extends`` (e.g.
``@tsconfig/node18``) are skipped.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

CONFIG_FILES = ("tsconfig.json", "jsconfig.json")

# Strings are kept as-is so "//" inside a path is not mistaken for a comment
_JSONC_TOKENS = re.compile(
    r'("(?:\\.|[^"\\])*")|/\*.*?\*/|//[^\n]*|,(?=\s*[}\]])',
    re.DOTALL,
)


def _strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas from JSON-with-comments text."""
    return _JSONC_TOKENS.sub(lambda m: m.group(1) or "", text)


def load_jsonc(path: str) -> dict:
    with open(path, encoding="utf-8") as f:
        data = json.loads(_strip_jsonc(f.read()))
    if not isinstance(data, dict):
        raise ValueError("top-level value is not an object")
    return data


@dataclass
class AliasEntry:
    """One ``paths`` pattern and its target templates (absolute paths)."""

    pattern: str
    targets: list[str] = field(default_factory=list)

    @property
    def prefix(self) -> str:
        return self.pattern.split("*", 1)[0]

    def match(self, source: str) -> str | None:
        """Text captured by ``*`` (empty for exact patterns), or None."""
        if "*" not in self.pattern:
            return "" if source == self.pattern else None
        prefix, suffix = self.pattern.split("*", 1)
        if len(source) < len(prefix) + len(suffix):
            return None
        if source.startswith(prefix) and source.endswith(suffix):
            return source[len(prefix) : len(source) - len(suffix)]
        return None


@dataclass
class AliasTable:
    entries: list[AliasEntry] = field(default_factory=list)
    base_url: str | None = None

    def __post_init__(self):
        # Longest prefix wins, like the TypeScript compiler
        self.entries.sort(key=lambda e: len(e.prefix), reverse=True)

    def matches(self, source: str) -> bool:
        return any(entry.match(source) is not None for entry in self.entries)

    def candidates(self, source: str) -> list[str]:
        """Paths to probe for *source*, in preference order."""
        out = []
        for entry in self.entries:
            captured = entry.match(source)
            if captured is None:
                continue
            for target in entry.targets:
                out.append(target.replace("*", captured, 1))
        return out


def _read_compiler_options(path: str, seen: set[str]) -> tuple[dict, str | None, str | None]:
    """Merged compilerOptions for *path* following relative ``extends``.

    Returns ``(options, base_url_abs, paths_base_abs)``.
    """
    path = os.path.abspath(path)
    if path in seen:
        return {}, None, None
    seen.add(path)
    data = load_jsonc(path)
    config_dir = os.path.dirname(path)

    options: dict = {}
    base_url = None
    paths_base = None
    extends = data.get("extends")
    parents = extends if isinstance(extends, list) else [extends] if extends else []
    for parent in parents:
        if not isinstance(parent, str) or not parent.startswith("."):
            continue
        parent_path = os.path.join(config_dir, parent)
        if not parent_path.endswith(".json"):
            parent_path += ".json"
        if not os.path.isfile(parent_path):
            log.debug("tsconfig extends target not found: %s", parent_path)
            continue
        parent_options, parent_base, parent_paths_base = _read_compiler_options(parent_path, seen)
        options.update(parent_options)
        base_url = parent_base or base_url
        paths_base = parent_paths_base or paths_base

    own = data.get("compilerOptions") or {}
    if isinstance(own, dict):
        options.update(own)
        if isinstance(own.get("baseUrl"), str):
            base_url = os.path.normpath(os.path.join(config_dir, own["baseUrl"]))
        if isinstance(own.get("paths"), dict):
            paths_base = config_dir
    return options, base_url, paths_base


def load_alias_table(root) -> AliasTable:
    """Build the alias table for the project at *root*."""
    root = os.path.abspath(str(root))
    table = AliasTable()
    for name in CONFIG_FILES:
        config_path = os.path.join(root, name)
        if not os.path.isfile(config_path):
            continue
        try:
            options, base_url, paths_base = _read_compiler_options(config_path, set())
        except (OSError, ValueError) as e:
            log.warning("%s: ignoring unreadable config (%s)", config_path, e)
            continue
        table.base_url = base_url
        anchor = base_url or paths_base or root
        paths = options.get("paths") or {}
        for pattern, targets in paths.items():
            if not isinstance(targets, list):
                continue
            table.entries.append(
                AliasEntry(
                    pattern=pattern,
                    targets=[os.path.normpath(os.path.join(anchor, t)) for t in targets if isinstance(t, str)],
                )
            )
        break

    if not any(entry.pattern == "@/*" for entry in table.entries):
        src = os.path.join(root, "src")
        if os.path.isdir(src):
            table.entries.append(AliasEntry(pattern="@/*", targets=[os.path.join(src, "*")]))
    table.entries.sort(key=lambda e: len(e.prefix), reverse=True)
    return table
