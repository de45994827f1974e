"""Unused import detection and safe removal, one file at a time.

Each import declaration is judged against the names the rest of the file
references (see :mod:`sweepp.analysis.usage`).  Kept declarations are
re-rendered only in their binding clause, so the module string, import
attributes and comments survive byte-for-byte and a second run over the
output changes nothing.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from sweepp.analysis.conventions import MARKUP_DEFAULT_IMPORTS
from sweepp.analysis.usage import collect_usage
from sweepp.errors import ParseFailure, UnreadableFile, UnresolvedImport
from sweepp.index.parser import read_source
from sweepp.languages.registry import parse_module
from sweepp.models import DEFAULT, NAMED, NAMESPACE
from sweepp.refactor.printer import apply_edits, clause_edit, removal_edit

if TYPE_CHECKING:
    from sweepp.resolve.paths import PathResolver

log = logging.getLogger(__name__)

DEFAULT_WORKERS = 10


@dataclass
class RemovedImport:
    source: str
    specifiers: list[str] = field(default_factory=list)


@dataclass
class ImportCleanupResult:
    file_path: str
    removed: list[RemovedImport] = field(default_factory=list)
    original_import_decls: int = 0
    final_import_decls: int = 0
    changed: bool = False
    new_source: bytes | None = field(default=None, repr=False)

    @property
    def total_removed_specifiers(self) -> int:
        return sum(len(r.specifiers) for r in self.removed)

    @property
    def new_code(self) -> str | None:
        if self.new_source is None:
            return None
        return self.new_source.decode("utf-8", errors="replace")

    def to_dict(self, include_code: bool = False) -> dict:
        d = {
            "file": self.file_path,
            "removed": [{"source": r.source, "specifiers": list(r.specifiers)} for r in self.removed],
            "original_import_decls": self.original_import_decls,
            "final_import_decls": self.final_import_decls,
            "changed": self.changed,
            "total_removed_specifiers": self.total_removed_specifiers,
        }
        if include_code and self.changed:
            d["new_code"] = self.new_code
        return d


@dataclass
class AnalyzeOptions:
    """Knobs for one cleanup run.

    ``check_local_imports`` needs a ``resolver`` (a PathResolver) to decide
    which internal modules exist.
    """

    check_local_imports: bool = False
    resolver: PathResolver | None = None
    implicit_imports: tuple = MARKUP_DEFAULT_IMPORTS

    def __post_init__(self):
        if self.check_local_imports and self.resolver is None:
            raise ValueError("check_local_imports requires a resolver")


def _missing_module(decl, file_path: str, options: AnalyzeOptions) -> bool:
    resolver = options.resolver
    if not resolver.is_internal(decl.source_module):
        return False
    try:
        resolver.require(decl.source_module, file_path)
    except UnresolvedImport as e:
        log.warning("%s (import removed)", e)
        return True
    return False


def _is_retained(decl, spec, used: set[str], has_markup: bool, options: AnalyzeOptions) -> bool:
    if spec.kind == DEFAULT:
        if any(rule.retains(decl.source_module, spec, has_markup) for rule in options.implicit_imports):
            return True
    elif spec.kind not in (NAMED, NAMESPACE):
        return True
    return spec.local_name in used


def analyze_source(source: bytes, file_path: str, options: AnalyzeOptions | None = None) -> ImportCleanupResult:
    """Decide which import bindings of *source* are unused and rewrite it.

    A parse failure yields a zero-change result and a logged warning.
    """
    options = options or AnalyzeOptions()
    result = ImportCleanupResult(file_path=file_path)
    try:
        tree, extractor = parse_module(source, file_path)
    except ParseFailure as e:
        log.warning("%s (skipped)", e)
        return result

    imports = extractor.extract_imports(tree, source)
    result.original_import_decls = len(imports)
    result.final_import_decls = len(imports)
    if not imports:
        return result

    usage = collect_usage(tree, source)
    edits = []
    for decl in imports:
        # Side-effect imports stay untouched, even when the module is missing
        if decl.is_side_effect:
            continue

        if options.check_local_imports and _missing_module(decl, file_path, options):
            result.removed.append(RemovedImport(decl.source_module, [s.local_name for s in decl.specifiers]))
            edits.append(removal_edit(source, decl))
            result.final_import_decls -= 1
            continue

        kept, dropped = [], []
        for spec in decl.specifiers:
            if _is_retained(decl, spec, usage.used, usage.has_markup, options):
                kept.append(spec)
            else:
                dropped.append(spec.local_name)
        if not dropped:
            continue

        result.removed.append(RemovedImport(decl.source_module, dropped))
        if kept:
            edits.append(clause_edit(decl, kept))
        else:
            edits.append(removal_edit(source, decl))
            result.final_import_decls -= 1

    if edits:
        result.changed = True
        result.new_source = apply_edits(source, edits)
    return result


def analyze_and_clean(file_path, dry_run: bool = True, options: AnalyzeOptions | None = None) -> ImportCleanupResult:
    """Analyze one file and, unless *dry_run*, write it back when it changed."""
    path = str(file_path)
    try:
        source = read_source(path)
    except UnreadableFile as e:
        log.warning("%s (skipped)", e)
        return ImportCleanupResult(file_path=path)

    result = analyze_source(source, path, options)
    if result.changed and not dry_run:
        Path(path).write_bytes(result.new_source)
        log.debug("rewrote %s (%d specifiers removed)", path, result.total_removed_specifiers)
    return result


def clean_files(
    files,
    dry_run: bool = True,
    options: AnalyzeOptions | None = None,
    max_workers: int = DEFAULT_WORKERS,
) -> list[ImportCleanupResult]:
    """Run :func:`analyze_and_clean` over *files* on a bounded thread pool.

    Results come back in completion order.  A file whose analysis raises
    unexpectedly is logged and left out; the others still complete.
    """
    files = [str(f) for f in files]
    if not files:
        return []
    t0 = time.monotonic()
    results = []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(files)))) as pool:
        futures = {pool.submit(analyze_and_clean, f, dry_run, options): f for f in files}
        for future in as_completed(futures):
            try:
                results.append(future.result())
            except Exception as e:
                log.error("%s: analysis failed: %s", futures[future], e)
    log.debug("analyzed %d files in %.2fs", len(files), time.monotonic() - t0)
    return results
