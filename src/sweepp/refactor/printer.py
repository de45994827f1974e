"""Span-based source printer for import rewrites.

Only the bytes of edited import statements change: a trimmed declaration
gets its clause re-rendered, a dropped declaration is cut out together with
its line when nothing else shares that line.  Everything else (quotes,
attributes, semicolons, comments, line endings) is carried over untouched.
"""

from __future__ import annotations

from dataclasses import dataclass

from sweepp.models import DEFAULT, NAMED, NAMESPACE, ImportDeclaration, Specifier


@dataclass(frozen=True)
class TextEdit:
    start: int
    end: int
    replacement: bytes = b""


def render_import_clause(decl: ImportDeclaration, kept: list[Specifier]) -> str:
    """Render the bindings of *decl* keeping only *kept*, in original order."""
    parts = []
    named = []
    for spec in kept:
        if spec.kind == NAMED:
            named.append(spec)
        elif spec.kind in (DEFAULT, NAMESPACE):
            parts.append(spec.text or spec.local_name)
    if named:
        all_named = [s for s in decl.specifiers if s.kind == NAMED]
        if len(named) == len(all_named) and decl.named_block:
            parts.append(decl.named_block)
        else:
            parts.append("{ " + ", ".join(s.text or s.local_name for s in named) + " }")
    return ", ".join(parts)


def clause_edit(decl: ImportDeclaration, kept: list[Specifier]) -> TextEdit:
    start, end = decl.clause_span
    return TextEdit(start, end, render_import_clause(decl, kept).encode("utf-8"))


def removal_edit(source: bytes, decl: ImportDeclaration) -> TextEdit:
    """Edit deleting the statement, and its whole line when it stands alone."""
    start, end = decl.span
    line_start = source.rfind(b"\n", 0, start) + 1
    leading_blank = not source[line_start:start].strip()

    cursor = end
    while cursor < len(source) and source[cursor : cursor + 1] in (b" ", b"\t"):
        cursor += 1
    if source[cursor : cursor + 2] == b"\r\n":
        line_end = cursor + 2
    elif source[cursor : cursor + 1] == b"\n" or cursor == len(source):
        line_end = min(cursor + 1, len(source))
    else:
        line_end = None

    if leading_blank and line_end is not None:
        return TextEdit(line_start, line_end)
    return TextEdit(start, cursor if line_end is not None else end)


def apply_edits(source: bytes, edits: list[TextEdit]) -> bytes:
    """Apply non-overlapping edits, back to front so offsets stay valid."""
    out = source
    for edit in sorted(edits, key=lambda e: e.start, reverse=True):
        out = out[: edit.start] + edit.replacement + out[edit.end :]
    return out
