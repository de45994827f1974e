"""Symbol usage collection over a tree-sitter syntax tree.

A name is "used" when an identifier-like node carrying it appears outside
its own binding position.  Matching is by name text only: two unrelated
bindings that share a name are not told apart, which errs towards keeping
code rather than reporting it unused.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Node types whose text is a symbol reference
_REFERENCE_TYPES = frozenset({
    "identifier",
    "shorthand_property_identifier",
    "type_identifier",
})

_MARKUP_TYPES = frozenset({
    "jsx_element",
    "jsx_self_closing_element",
    "jsx_fragment",
})

_JSX_TAG_TYPES = frozenset({
    "jsx_opening_element",
    "jsx_closing_element",
    "jsx_self_closing_element",
})

# Parents whose ``name`` field is the binding being declared
_NAMED_BINDING_PARENTS = frozenset({
    "variable_declarator",
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "class_declaration",
    "abstract_class_declaration",
    "class",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
})

# TS parameter wrappers: the ``pattern`` field is the parameter name
_TS_PARAMETER_TYPES = frozenset({"required_parameter", "optional_parameter"})


@dataclass
class UsageInfo:
    used: set[str] = field(default_factory=set)
    has_markup: bool = False


def _is_parameter(node, parent) -> bool:
    ptype = parent.type
    if ptype == "formal_parameters":
        return True
    if ptype in _TS_PARAMETER_TYPES:
        return parent.child_by_field_name("pattern") == node
    if ptype == "arrow_function":
        return parent.child_by_field_name("parameter") == node
    grand = parent.parent
    if grand is None:
        return False
    if ptype == "assignment_pattern":
        # function f(x = 1) / TS: required_parameter wraps the pattern instead
        return grand.type == "formal_parameters" and parent.child_by_field_name("left") == node
    if ptype == "rest_pattern":
        return grand.type == "formal_parameters" or grand.type in _TS_PARAMETER_TYPES
    return False


def _is_excluded(node, source: bytes) -> bool:
    """True for identifiers in binding position (not a use of the name)."""
    parent = node.parent
    if parent is None:
        return False
    if parent.type in _NAMED_BINDING_PARENTS:
        return parent.child_by_field_name("name") == node
    if parent.type in _JSX_TAG_TYPES:
        # <div> is an intrinsic element, <Button> a reference
        return source[node.start_byte : node.start_byte + 1].islower()
    return _is_parameter(node, parent)


def _is_pass_through_export(node) -> bool:
    return node.type == "export_statement" and node.child_by_field_name("source") is not None


def collect_usage(tree, source: bytes) -> UsageInfo:
    """Collect the names referenced in *tree* and whether it contains markup."""
    info = UsageInfo()
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        ntype = node.type
        # Import bindings and names re-exported from other modules are not local uses
        if ntype == "import_statement" or _is_pass_through_export(node):
            continue
        if ntype in _MARKUP_TYPES:
            info.has_markup = True
        elif ntype in _REFERENCE_TYPES:
            if not _is_excluded(node, source):
                info.used.add(source[node.start_byte : node.end_byte].decode("utf-8", errors="replace"))
            continue
        stack.extend(node.children)
    return info
