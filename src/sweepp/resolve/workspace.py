"""Monorepo workspace detection (pnpm, yarn, npm, lerna)."""

from __future__ import annotations

import glob
import json
import logging
import os
from dataclasses import dataclass, field

import yaml

log = logging.getLogger(__name__)


@dataclass
class WorkspacePackage:
    name: str
    root: str
    manifest: dict = field(default_factory=dict)


@dataclass
class WorkspaceConfig:
    kind: str = "none"
    root: str = ""
    packages: list[WorkspacePackage] = field(default_factory=list)

    @property
    def is_monorepo(self) -> bool:
        return self.kind != "none"

    def find_package(self, source: str):
        """``(package, subpath)`` for a specifier naming a workspace package.

        The longest package name wins so ``@acme/ui-kit`` is not taken for
        ``@acme/ui``.
        """
        best = None
        for package in self.packages:
            name = package.name
            if source == name:
                subpath = ""
            elif source.startswith(name + "/"):
                subpath = source[len(name) + 1 :]
            else:
                continue
            if best is None or len(name) > len(best[0].name):
                best = (package, subpath)
        return best


def _read_json(path: str) -> dict | None:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning("%s: unreadable (%s)", path, e)
        return None
    return data if isinstance(data, dict) else None


def _pnpm_globs(path: str) -> list[str]:
    """``packages`` entries of a pnpm-workspace.yaml."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        return []
    return [p for p in data.get("packages") or [] if isinstance(p, str)]


def _expand_packages(root: str, patterns: list[str]) -> list[WorkspacePackage]:
    packages = []
    seen = set()
    excluded = set()
    for pattern in patterns:
        if pattern.startswith("!"):
            excluded.update(os.path.normpath(p) for p in glob.glob(os.path.join(root, pattern[1:])))
    for pattern in patterns:
        if pattern.startswith("!"):
            continue
        for directory in sorted(glob.glob(os.path.join(root, pattern), recursive=True)):
            directory = os.path.normpath(directory)
            if "node_modules" in directory.split(os.sep) or directory in excluded or directory in seen:
                continue
            manifest_path = os.path.join(directory, "package.json")
            if not os.path.isfile(manifest_path):
                continue
            seen.add(directory)
            manifest = _read_json(manifest_path)
            if manifest and isinstance(manifest.get("name"), str):
                packages.append(WorkspacePackage(name=manifest["name"], root=directory, manifest=manifest))
    return packages


def detect_workspace(root) -> WorkspaceConfig:
    """Detect the monorepo layout at *root*; kind ``none`` when there is none."""
    root = os.path.abspath(str(root))

    pnpm_file = os.path.join(root, "pnpm-workspace.yaml")
    if os.path.isfile(pnpm_file):
        try:
            patterns = _pnpm_globs(pnpm_file)
        except (OSError, yaml.YAMLError) as e:
            log.warning("%s: unreadable (%s)", pnpm_file, e)
            patterns = []
        return WorkspaceConfig("pnpm", root, _expand_packages(root, patterns))

    manifest_path = os.path.join(root, "package.json")
    manifest = _read_json(manifest_path) if os.path.isfile(manifest_path) else None
    if manifest is not None and manifest.get("workspaces"):
        workspaces = manifest["workspaces"]
        # yarn also accepts {"packages": [...], "nohoist": [...]}
        if isinstance(workspaces, dict):
            workspaces = workspaces.get("packages") or []
        patterns = [p for p in workspaces if isinstance(p, str)]
        kind = "yarn" if os.path.isfile(os.path.join(root, "yarn.lock")) else "npm"
        return WorkspaceConfig(kind, root, _expand_packages(root, patterns))

    lerna_file = os.path.join(root, "lerna.json")
    if os.path.isfile(lerna_file):
        lerna = _read_json(lerna_file) or {}
        patterns = [p for p in lerna.get("packages", ["packages/*"]) if isinstance(p, str)]
        return WorkspaceConfig("lerna", root, _expand_packages(root, patterns))

    return WorkspaceConfig("none", root, [])
