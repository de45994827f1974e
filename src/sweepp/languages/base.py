from __future__ import annotations

from abc import ABC, abstractmethod

from sweepp.models import Declaration


class LanguageExtractor(ABC):
    """Base class for language-specific extraction of module structure."""

    @abstractmethod
    def extract_imports(self, tree, source: bytes) -> list:
        """Extract static import declarations, in source order.

        Returns a list of ImportDeclaration records.
        """
        ...

    @abstractmethod
    def extract_declarations(self, tree, source: bytes, file_path: str) -> list[Declaration]:
        """Extract top-level declarations (first occurrence of each name wins)."""
        ...

    @abstractmethod
    def extract_exports(self, tree, source: bytes) -> dict:
        """Extract export bookkeeping.

        The returned dict contains:
            exported_names, default_export_name, re_exports
        """
        ...

    def extract_dynamic_imports(self, tree, source: bytes) -> list[str]:
        """Module strings loaded at runtime (``require``, ``import()``). Override per language."""
        return []

    def node_text(self, node, source: bytes) -> str:
        if node is None:
            return ""
        return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def _make_declaration(
        self,
        name: str,
        kind: str,
        node,
        *,
        exported: bool = False,
        file_path: str = "",
    ) -> Declaration:
        return Declaration(
            name=name,
            kind=kind,
            exported=exported,
            start_line=node.start_point[0] + 1,
            end_line=node.end_point[0] + 1,
            file=file_path,
        )
