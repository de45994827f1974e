"""Module specifier -> file resolution.

``PathResolver.resolve`` is the single entry point every analyzer goes
through, so relative paths, aliases and workspace packages are handled the
same way by ``clean --check-local`` and by ``unused-code``.
"""

from __future__ import annotations

import logging
import os

from sweepp.errors import UnresolvedImport

log = logging.getLogger(__name__)

# Probe order for extension-less specifiers
RESOLVE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".mts", ".cts")

# ESM-style TS imports name the emitted file: './a.js' means './a.ts'
_EMITTED_TO_SOURCE = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}

# Entry-point fields tried, in order, for a bare workspace package import
_ENTRY_FIELDS = ("source", "module", "main")

# package.json "exports" conditions tried, in order
_EXPORT_CONDITIONS = ("source", "import", "default", "types", "require")


def _condition_target(value) -> str | None:
    """Pick a path out of a conditional ``exports`` value."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        for item in value:
            target = _condition_target(item)
            if target is not None:
                return target
        return None
    if isinstance(value, dict):
        for condition in _EXPORT_CONDITIONS:
            if condition in value:
                target = _condition_target(value[condition])
                if target is not None:
                    return target
    return None


def _exports_target(exports, subpath: str) -> str | None:
    """Relative path the ``exports`` field maps *subpath* to, or None.

    Handles the string shorthand, ``"."`` and ``"./sub"`` keys, single
    ``*`` patterns and nested conditions.
    """
    if exports is None:
        return None
    key = "./" + subpath if subpath else "."
    if not isinstance(exports, dict) or not any(k.startswith(".") for k in exports):
        # shorthand: the value is the "." entry
        return _condition_target(exports) if key == "." else None
    if key in exports:
        return _condition_target(exports[key])
    for pattern, value in exports.items():
        prefix, star, suffix = pattern.partition("*")
        if not star or not key.startswith(prefix) or not key.endswith(suffix):
            continue
        if len(key) < len(prefix) + len(suffix):
            continue
        target = _condition_target(value)
        if target is not None:
            return target.replace("*", key[len(prefix) : len(key) - len(suffix)])
    return None


def is_local_import(source: str) -> bool:
    """True for relative or absolute path specifiers."""
    return (
        source in (".", "..")
        or source.startswith("./")
        or source.startswith("../")
        or source.startswith("/")
    )


def probe_file(base: str, extensions=RESOLVE_EXTENSIONS) -> str | None:
    """Find the file a path-like specifier denotes, or None."""
    if os.path.isfile(base):
        return os.path.normpath(base)
    stem, ext = os.path.splitext(base)
    for replacement in _EMITTED_TO_SOURCE.get(ext, ()):
        if os.path.isfile(stem + replacement):
            return os.path.normpath(stem + replacement)
    for candidate_ext in extensions:
        if os.path.isfile(base + candidate_ext):
            return os.path.normpath(base + candidate_ext)
    if os.path.isdir(base):
        for candidate_ext in extensions:
            index = os.path.join(base, "index" + candidate_ext)
            if os.path.isfile(index):
                return os.path.normpath(index)
    return None


class PathResolver:
    """Resolve import specifiers against one project.

    *aliases* is an ``AliasTable`` (or None), *workspace* a
    ``WorkspaceConfig`` (or None).  Results are cached per specifier and
    importing directory.
    """

    def __init__(self, project_root, aliases=None, workspace=None, extensions=RESOLVE_EXTENSIONS):
        self.project_root = os.path.abspath(str(project_root))
        self.aliases = aliases
        self.workspace = workspace
        self.extensions = tuple(extensions)
        self._cache: dict[tuple[str, str], str | None] = {}

    def is_internal(self, source: str) -> bool:
        """True when *source* names project code rather than a registry dependency."""
        if is_local_import(source):
            return True
        if self.aliases is not None and self.aliases.matches(source):
            return True
        if self.workspace is not None and self.workspace.find_package(source) is not None:
            return True
        base_url = self.aliases.base_url if self.aliases is not None else None
        if base_url and probe_file(os.path.join(base_url, source), self.extensions) is not None:
            return True
        return False

    def resolve(self, source: str, from_file: str) -> str | None:
        """Absolute path of the file *source* refers to, or None."""
        key = (source, os.path.dirname(os.path.abspath(from_file)))
        if key in self._cache:
            return self._cache[key]
        resolved = self._resolve(source, key[1])
        if resolved is None:
            log.debug("unresolved import '%s' from %s", source, from_file)
        self._cache[key] = resolved
        return resolved

    def require(self, source: str, from_file: str) -> str:
        """Like :meth:`resolve` but raise ``UnresolvedImport`` on a miss."""
        resolved = self.resolve(source, from_file)
        if resolved is None:
            raise UnresolvedImport(from_file, source)
        return resolved

    def _resolve(self, source: str, directory: str) -> str | None:
        if source.startswith("/"):
            return probe_file(source, self.extensions) or probe_file(
                os.path.join(self.project_root, source.lstrip("/")), self.extensions
            )
        if is_local_import(source):
            return probe_file(os.path.join(directory, source), self.extensions)

        if self.aliases is not None:
            for candidate in self.aliases.candidates(source):
                found = probe_file(candidate, self.extensions)
                if found is not None:
                    return found

        if self.workspace is not None:
            found = self._resolve_workspace(source)
            if found is not None:
                return found

        base_url = self.aliases.base_url if self.aliases is not None else None
        if base_url:
            return probe_file(os.path.join(base_url, source), self.extensions)
        return None

    def _resolve_workspace(self, source: str) -> str | None:
        match = self.workspace.find_package(source)
        if match is None:
            return None
        package, subpath = match
        exported = _exports_target(package.manifest.get("exports"), subpath)
        if exported is not None:
            found = probe_file(os.path.join(package.root, exported), self.extensions)
            if found is not None:
                return found
        if subpath:
            return probe_file(os.path.join(package.root, subpath), self.extensions) or probe_file(
                os.path.join(package.root, "src", subpath), self.extensions
            )
        for field_name in _ENTRY_FIELDS:
            entry = package.manifest.get(field_name)
            if isinstance(entry, str) and entry:
                found = probe_file(os.path.join(package.root, entry), self.extensions)
                if found is not None:
                    return found
        return probe_file(os.path.join(package.root, "src", "index"), self.extensions) or probe_file(
            os.path.join(package.root, "index"), self.extensions
        )
