"""Records shared by the extractors, the analyzers and the reports."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

NAMED = "named"
DEFAULT = "default"
NAMESPACE = "namespace"


@dataclass
class Specifier:
    """One binding introduced by an import declaration."""

    kind: str
    local_name: str
    imported_name: str | None = None
    type_only: bool = False
    text: str = ""


@dataclass
class ImportDeclaration:
    """A static ``import ... from '...'`` statement.

    ``span`` covers the whole statement and ``clause_span`` the bindings
    between ``import`` and ``from`` (None for side-effect imports).
    ``named_block`` is the original ``{ ... }`` text, reused verbatim when
    every named specifier survives.
    """

    source_module: str
    specifiers: list[Specifier] = field(default_factory=list)
    type_only: bool = False
    line: int = 0
    span: tuple[int, int] = (0, 0)
    clause_span: tuple[int, int] | None = None
    named_block: str | None = None

    @property
    def is_side_effect(self) -> bool:
        return not self.specifiers


@dataclass
class ReExport:
    """``export { a, b as c } from '...'`` or ``export * from '...'``.

    ``names`` holds ``(name_in_source, exported_name)`` pairs in source order.
    ``namespace`` is set for ``export * as ns from '...'``.
    """

    source_module: str
    names: list[tuple[str, str]] = field(default_factory=list)
    star: bool = False
    namespace: str | None = None
    line: int = 0

    @property
    def exported_names(self) -> list[str]:
        names = [exported for _, exported in self.names]
        if self.namespace:
            names.append(self.namespace)
        return names


@dataclass
class Declaration:
    name: str
    kind: str
    exported: bool
    start_line: int
    end_line: int
    file: str = ""


@dataclass
class FileAnalysis:
    """Declarations, usage and export bookkeeping for one file."""

    declarations: list[Declaration] = field(default_factory=list)
    used_symbols: set[str] = field(default_factory=set)
    exported_names: set[str] = field(default_factory=set)
    default_export_name: str | None = None
    re_exported_names: set[str] = field(default_factory=set)
    imports: list[ImportDeclaration] = field(default_factory=list)
    re_exports: list[ReExport] = field(default_factory=list)
    dynamic_imports: list[str] = field(default_factory=list)


@dataclass
class ModuleGraph:
    """Resolved file path -> FileAnalysis, in discovery order."""

    files: dict[str, FileAnalysis] = field(default_factory=dict)

    def __contains__(self, path: str) -> bool:
        return path in self.files

    def __getitem__(self, path: str) -> FileAnalysis:
        return self.files[path]

    def add(self, path: str, analysis: FileAnalysis) -> None:
        self.files[path] = analysis

    def paths(self) -> list[str]:
        return list(self.files)

    def items(self):
        return self.files.items()


@dataclass
class UnusedCodeItem:
    file: str
    name: str
    kind: str
    exported: bool
    start_line: int | None
    end_line: int | None

    def to_dict(self) -> dict:
        return asdict(self)
