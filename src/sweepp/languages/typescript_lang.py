from __future__ import annotations

from .javascript_lang import JavaScriptExtractor


class TypeScriptExtractor(JavaScriptExtractor):
    """TypeScript extractor extending JavaScript with TS-specific declarations.

    Type-only imports (``import type {...}``, ``import { type T }``) come out
    of the shared import walk with ``type_only`` set.  Ambient ``declare``
    statements, overload signatures, enums and namespaces are not tracked as
    declarations.
    """

    DECLARATION_KINDS = {
        **JavaScriptExtractor.DECLARATION_KINDS,
        "abstract_class_declaration": "class",
        "interface_declaration": "interface",
        "type_alias_declaration": "type",
    }

