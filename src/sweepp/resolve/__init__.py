"""Module specifier resolution: relative paths, aliases, workspace packages."""

from __future__ import annotations

from sweepp.resolve.aliases import load_alias_table
from sweepp.resolve.paths import PathResolver
from sweepp.resolve.workspace import detect_workspace


def build_resolver(project_root, extensions=None) -> PathResolver:
    """Resolver for *project_root* with its alias table and workspace layout."""
    kwargs = {"extensions": extensions} if extensions else {}
    return PathResolver(
        project_root,
        aliases=load_alias_table(project_root),
        workspace=detect_workspace(project_root),
        **kwargs,
    )


__all__ = ["PathResolver", "build_resolver", "detect_workspace", "load_alias_table"]
