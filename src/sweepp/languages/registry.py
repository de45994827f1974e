"""Grammar -> extractor registry."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from sweepp.index.parser import FALLBACK_LANGUAGE, detect_language, parse_source

if TYPE_CHECKING:
    from .base import LanguageExtractor


@lru_cache(maxsize=None)
def _create_extractor(language: str) -> "LanguageExtractor":
    """Create and cache an extractor instance for a grammar."""
    if language == "javascript":
        from .javascript_lang import JavaScriptExtractor

        return JavaScriptExtractor()
    from .typescript_lang import TypeScriptExtractor

    return TypeScriptExtractor()


def parse_module(source: bytes, path: str):
    """Parse *source* with the grammar for *path*.

    Returns ``(tree, extractor)``; raises ParseFailure like ``parse_source``.
    Unknown extensions use the most permissive grammar.
    """
    language = detect_language(path) or FALLBACK_LANGUAGE
    return parse_source(source, language, path), _create_extractor(language)
