"""Build the NetworkX file graph from per-file analyses."""

from __future__ import annotations

import networkx as nx

from sweepp.models import ModuleGraph


def _target(resolver, graph: ModuleGraph, source_module: str, from_file: str) -> str | None:
    if not resolver.is_internal(source_module):
        return None
    resolved = resolver.resolve(source_module, from_file)
    if resolved is None or resolved not in graph:
        return None
    return resolved


def build_file_graph(graph: ModuleGraph, resolver) -> nx.MultiDiGraph:
    """Build a directed multigraph of resolved module references.

    Nodes are discovered file paths.  Edges point from the importing file
    to the imported one and carry a ``kind`` attribute:

    * ``import``: static import, with ``specifiers`` (the ImportDeclaration's)
    * ``reexport``: ``export ... from``, with ``re_export`` (the ReExport)
    * ``dynamic``: ``require('x')`` / ``import('x')``

    References that are external, unresolvable, or resolve outside the
    discovered file set produce no edge.
    """
    G = nx.MultiDiGraph()
    G.add_nodes_from(graph.paths())

    for path, analysis in graph.items():
        for decl in analysis.imports:
            target = _target(resolver, graph, decl.source_module, path)
            if target is not None:
                G.add_edge(path, target, kind="import", specifiers=decl.specifiers, line=decl.line)
        for re_export in analysis.re_exports:
            target = _target(resolver, graph, re_export.source_module, path)
            if target is not None:
                G.add_edge(path, target, kind="reexport", re_export=re_export, line=re_export.line)
        for module in analysis.dynamic_imports:
            target = _target(resolver, graph, module, path)
            if target is not None:
                G.add_edge(path, target, kind="dynamic")

    return G


def edges_of_kind(G: nx.MultiDiGraph, kind: str):
    """Yield ``(source, target, data)`` for edges of *kind*, in insertion order."""
    for src, tgt, data in G.edges(data=True):
        if data.get("kind") == kind:
            yield src, tgt, data
