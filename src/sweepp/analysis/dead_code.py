"""Cross-file dead-code detection.

The analysis is a batch computation over the whole discovered file set:

1. every file is parsed into a FileAnalysis (declarations, local usage,
   exports, module references);
2. imports of a file mark the imported names used in the target file;
3. pass-through re-exports forward usage from the re-exporting file to the
   file that declares the name;
4. top-level declarations whose name is still unused become candidates.

Steps 2 and 3 first collect marks against the current state and merge them
afterwards, so no file's usage set changes while another one is read.
The result is a heuristic: names are matched by text, not by scope.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor

from sweepp.analysis.conventions import ROUTING_EXEMPTIONS
from sweepp.analysis.usage import collect_usage
from sweepp.errors import AnalysisError
from sweepp.graph.builder import build_file_graph, edges_of_kind
from sweepp.index.parser import read_source
from sweepp.languages.registry import parse_module
from sweepp.models import DEFAULT, NAMED, NAMESPACE, FileAnalysis, ModuleGraph, UnusedCodeItem

log = logging.getLogger(__name__)

# Files read concurrently per batch (bounds open descriptors)
BATCH_SIZE = 32

# Safety cap for --converge on pathological re-export cycles
MAX_CONVERGE_ROUNDS = 50


# ---------------------------------------------------------------------------
# Step 1: per-file analysis
# ---------------------------------------------------------------------------


def _read_or_error(path: str):
    try:
        return read_source(path)
    except AnalysisError as e:
        return e


def read_sources(files, batch_size: int = BATCH_SIZE):
    """Yield ``(path, bytes | AnalysisError)`` in input order, batch by batch."""
    files = list(files)
    with ThreadPoolExecutor(max_workers=max(1, min(batch_size, len(files) or 1))) as pool:
        for i in range(0, len(files), batch_size):
            batch = files[i : i + batch_size]
            yield from zip(batch, pool.map(_read_or_error, batch))


def collect_file_analysis(source: bytes, path: str) -> FileAnalysis:
    """Parse *source* and build its FileAnalysis.  Raises ParseFailure."""
    tree, extractor = parse_module(source, path)
    exports = extractor.extract_exports(tree, source)
    re_exports = exports["re_exports"]
    re_exported = set()
    for re_export in re_exports:
        re_exported.update(re_export.exported_names)
    exported_names = set(exports["exported_names"])
    declarations = extractor.extract_declarations(tree, source, path)
    # `export { x }` / `export default x` export a declaration made elsewhere
    for decl in declarations:
        if decl.name in exported_names:
            decl.exported = True
    return FileAnalysis(
        declarations=declarations,
        used_symbols=collect_usage(tree, source).used,
        exported_names=exported_names,
        default_export_name=exports["default_export_name"],
        re_exported_names=re_exported,
        imports=extractor.extract_imports(tree, source),
        re_exports=re_exports,
        dynamic_imports=extractor.extract_dynamic_imports(tree, source),
    )


def build_module_graph(files) -> ModuleGraph:
    """Run Step 1 for every file.  Failures leave an empty analysis and a warning."""
    graph = ModuleGraph()
    for path, source in read_sources(files):
        if isinstance(source, AnalysisError):
            log.warning("%s (skipped)", source)
            graph.add(path, FileAnalysis())
            continue
        try:
            graph.add(path, collect_file_analysis(source, path))
        except AnalysisError as e:
            log.warning("%s (skipped)", e)
            graph.add(path, FileAnalysis())
    return graph


# ---------------------------------------------------------------------------
# Steps 2-3: usage propagation
# ---------------------------------------------------------------------------


def _namespace_names(target: FileAnalysis) -> set[str]:
    names = set(target.exported_names) | target.re_exported_names
    if target.default_export_name:
        names.add(target.default_export_name)
    return names


def collect_import_marks(graph: ModuleGraph, file_graph) -> dict[str, set[str]]:
    """Names each target file has used by its importers (Step 2)."""
    marks: dict[str, set[str]] = {}
    for _src, tgt, data in edges_of_kind(file_graph, "import"):
        target = graph[tgt]
        names = marks.setdefault(tgt, set())
        for spec in data["specifiers"]:
            if spec.kind == NAMED and spec.imported_name:
                if spec.imported_name == "default":
                    # import { default as X } from './x'
                    if target.default_export_name:
                        names.add(target.default_export_name)
                else:
                    names.add(spec.imported_name)
            elif spec.kind == NAMESPACE:
                names.update(_namespace_names(target))
            elif spec.kind == DEFAULT and target.default_export_name:
                names.add(target.default_export_name)
    # require() / import() hand the whole module to the caller
    for _src, tgt, _data in edges_of_kind(file_graph, "dynamic"):
        marks.setdefault(tgt, set()).update(_namespace_names(graph[tgt]))
    return marks


def _users_by_name(graph: ModuleGraph) -> dict[str, set[str]]:
    users: dict[str, set[str]] = {}
    for path, analysis in graph.items():
        for name in analysis.used_symbols:
            users.setdefault(name, set()).add(path)
    return users


def _used_outside(users: dict[str, set[str]], name: str, path: str) -> bool:
    return bool(users.get(name, set()) - {path})


def collect_reexport_marks(graph: ModuleGraph, file_graph) -> dict[str, set[str]]:
    """Names forwarded through pass-through re-exports (Step 3, one hop).

    For a re-export in file F of a name declared in T, the name is marked
    used in T when any file other than T uses the exported name.  A consumer
    importing it from F has marked it in F during Step 2.
    """
    users = _users_by_name(graph)
    marks: dict[str, set[str]] = {}
    for _src, tgt, data in edges_of_kind(file_graph, "reexport"):
        re_export = data["re_export"]
        target = graph[tgt]
        if re_export.namespace:
            # export * as ns from './t': the namespace object exposes everything
            if _used_outside(users, re_export.namespace, tgt):
                marks.setdefault(tgt, set()).update(_namespace_names(target))
            continue
        if re_export.star:
            pairs = [(name, name) for name in sorted(target.exported_names | target.re_exported_names)]
        else:
            pairs = re_export.names
        for name_in_source, exported in pairs:
            if name_in_source == "default":
                name_in_source = target.default_export_name
                if not name_in_source:
                    continue
            if name_in_source in target.used_symbols:
                continue
            if _used_outside(users, exported, tgt):
                marks.setdefault(tgt, set()).add(name_in_source)
    return marks


def merge_marks(graph: ModuleGraph, marks: dict[str, set[str]]) -> int:
    """Fold *marks* into the usage sets; return how many names were new."""
    added = 0
    for path in sorted(marks):
        used = graph[path].used_symbols
        new = marks[path] - used
        used |= new
        added += len(new)
    return added


# ---------------------------------------------------------------------------
# Step 4: candidates
# ---------------------------------------------------------------------------


def _rel_path(path: str, project_root: str) -> str:
    try:
        rel = os.path.relpath(path, project_root)
    except ValueError:
        rel = path
    return rel.replace(os.sep, "/")


def select_candidates(graph: ModuleGraph, project_root, exemptions=ROUTING_EXEMPTIONS) -> list[UnusedCodeItem]:
    """Declarations nothing uses, sorted by file then name."""
    root = os.path.abspath(str(project_root))
    items = []
    for path, analysis in graph.items():
        rel = _rel_path(path, root)
        for decl in analysis.declarations:
            if decl.name in analysis.used_symbols:
                continue
            if any(rule.exempts(rel, decl) for rule in exemptions):
                continue
            items.append(
                UnusedCodeItem(
                    file=path,
                    name=decl.name,
                    kind=decl.kind,
                    exported=decl.exported,
                    start_line=decl.start_line,
                    end_line=decl.end_line,
                )
            )
    items.sort(key=lambda item: (item.file, item.name))
    return items


def find_unused_code(
    files,
    resolver,
    project_root,
    exemptions=ROUTING_EXEMPTIONS,
    converge: bool = False,
) -> list[UnusedCodeItem]:
    """Dead-code candidates for *files* (absolute paths, discovery order).

    With *converge*, the re-export step repeats until no new names are
    marked, so usage crosses chains of barrels instead of a single hop.
    """
    t0 = time.monotonic()
    graph = build_module_graph(files)
    file_graph = build_file_graph(graph, resolver)
    log.debug(
        "module graph: %d files, %d edges (%.2fs)",
        file_graph.number_of_nodes(),
        file_graph.number_of_edges(),
        time.monotonic() - t0,
    )

    merge_marks(graph, collect_import_marks(graph, file_graph))
    rounds = 1
    added = merge_marks(graph, collect_reexport_marks(graph, file_graph))
    while converge and added and rounds < MAX_CONVERGE_ROUNDS:
        rounds += 1
        added = merge_marks(graph, collect_reexport_marks(graph, file_graph))
    if converge:
        log.debug("re-export propagation settled after %d rounds", rounds)

    return select_candidates(graph, project_root, exemptions)
