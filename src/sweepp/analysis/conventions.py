"""Framework conventions injected into the analyzers.

Two kinds of rule exist:

* ``ExemptionRule``: declarations in matching files are never reported
  unused (file-based routers load these modules by path, not by import).
* ``ImplicitImportRule``: a default import that the markup transform uses
  without naming it (the classic JSX runtime needs ``React`` in scope).

The defaults cover Next.js / Remix style routing and React.  Projects add
their own through ``routeDirs`` and ``implicitImports`` in the config.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sweepp.models import DEFAULT, Declaration, Specifier


@dataclass(frozen=True)
class ExemptionRule:
    """Exempt declarations whose project-relative path matches *pattern*.

    ``scope`` is ``"exported"`` (only exported declarations are exempt) or
    ``"all"``.
    """

    pattern: str
    scope: str = "exported"

    def matches(self, rel_path: str) -> bool:
        return re.search(self.pattern, rel_path) is not None

    def exempts(self, rel_path: str, decl: Declaration) -> bool:
        if self.scope == "exported" and not decl.exported:
            return False
        return self.matches(rel_path)


@dataclass(frozen=True)
class ImplicitImportRule:
    module: str
    kind: str = DEFAULT
    requires_markup: bool = True

    def retains(self, source_module: str, spec: Specifier, has_markup: bool) -> bool:
        if source_module != self.module or spec.kind != self.kind:
            return False
        return has_markup or not self.requires_markup


def route_dir_rule(directory: str) -> ExemptionRule:
    """Exemption for a routing directory name, at any depth."""
    name = directory.strip("/")
    return ExemptionRule(pattern=rf"(^|/){re.escape(name)}/")


ROUTING_EXEMPTIONS: tuple[ExemptionRule, ...] = tuple(
    route_dir_rule(name) for name in ("pages", "app", "routes")
)

MARKUP_DEFAULT_IMPORTS: tuple[ImplicitImportRule, ...] = (ImplicitImportRule("react"),)


def build_exemptions(route_dirs=None) -> tuple[ExemptionRule, ...]:
    """Default routing exemptions plus one rule per extra directory."""
    extra = tuple(route_dir_rule(d) for d in (route_dirs or ()) if d.strip("/"))
    return ROUTING_EXEMPTIONS + extra


def build_implicit_imports(modules=None) -> tuple[ImplicitImportRule, ...]:
    """Default implicit imports plus one default-import rule per extra module."""
    known = {rule.module for rule in MARKUP_DEFAULT_IMPORTS}
    extra = tuple(ImplicitImportRule(m) for m in (modules or ()) if m not in known)
    return MARKUP_DEFAULT_IMPORTS + extra
