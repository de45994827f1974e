from __future__ import annotations

from sweepp.languages.base import LanguageExtractor
from sweepp.models import DEFAULT, NAMED, NAMESPACE, ImportDeclaration, ReExport, Specifier

_VARIABLE_TYPES = ("lexical_declaration", "variable_declaration")


class JavaScriptExtractor(LanguageExtractor):
    """JavaScript / JSX extractor: ES module imports, exports and top-level declarations."""

    # tree-sitter node type -> declaration kind
    DECLARATION_KINDS = {
        "function_declaration": "function",
        "generator_function_declaration": "function",
        "class_declaration": "class",
    }

    # ---- Imports ----------------------------------------------------------

    def extract_imports(self, tree, source):
        imports = []
        for node in tree.root_node.named_children:
            if node.type != "import_statement":
                continue
            source_node = node.child_by_field_name("source")
            if source_node is None:
                # TS `import x = require('...')` is not an ES import declaration
                continue
            clause = None
            for child in node.named_children:
                if child.type == "import_clause":
                    clause = child
                    break
            specifiers, named_block = [], None
            if clause is not None:
                specifiers, named_block = self._import_specifiers(clause, source)
            imports.append(
                ImportDeclaration(
                    source_module=self._string_value(source_node, source),
                    specifiers=specifiers,
                    type_only=self._has_type_keyword(node),
                    line=node.start_point[0] + 1,
                    span=(node.start_byte, node.end_byte),
                    clause_span=(clause.start_byte, clause.end_byte) if clause is not None else None,
                    named_block=named_block,
                )
            )
        return imports

    def _import_specifiers(self, clause, source):
        specifiers = []
        named_block = None
        for child in clause.named_children:
            if child.type == "identifier":
                name = self.node_text(child, source)
                specifiers.append(Specifier(kind=DEFAULT, local_name=name, text=name))
            elif child.type == "namespace_import":
                local = ""
                for sub in child.named_children:
                    if sub.type == "identifier":
                        local = self.node_text(sub, source)
                specifiers.append(Specifier(kind=NAMESPACE, local_name=local, text=self.node_text(child, source)))
            elif child.type == "named_imports":
                named_block = self.node_text(child, source)
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    imported = self._name_value(spec.child_by_field_name("name"), source)
                    alias = spec.child_by_field_name("alias")
                    specifiers.append(
                        Specifier(
                            kind=NAMED,
                            local_name=self.node_text(alias, source) if alias is not None else imported,
                            imported_name=imported,
                            type_only=self._has_type_keyword(spec),
                            text=self.node_text(spec, source),
                        )
                    )
        return specifiers, named_block

    # ---- Exports ----------------------------------------------------------

    def extract_exports(self, tree, source):
        exported: set[str] = set()
        default_name = None
        re_exports = []
        for node in tree.root_node.named_children:
            if node.type != "export_statement":
                continue
            source_node = node.child_by_field_name("source")
            if source_node is not None:
                re_export = self._re_export(node, source_node, source)
                re_exports.append(re_export)
                # export { default } from './x' makes this module's default the forwarded one
                if "default" in re_export.exported_names:
                    default_name = "default"
                    exported.add("default")
                continue

            is_default = any(child.type == "default" for child in node.children)
            declaration = node.child_by_field_name("declaration")
            if declaration is not None:
                names = self._declared_names(declaration, source)
                exported.update(names)
                if is_default:
                    default_name = names[0] if names else "default"
                continue

            if is_default:
                value = node.child_by_field_name("value")
                if value is not None and value.type == "identifier":
                    default_name = self.node_text(value, source)
                    exported.add(default_name)
                else:
                    default_name = "default"
                continue

            for child in node.named_children:
                if child.type != "export_clause":
                    continue
                for spec in child.named_children:
                    if spec.type != "export_specifier":
                        continue
                    local = self._name_value(spec.child_by_field_name("name"), source)
                    exported.add(local)
                    alias = spec.child_by_field_name("alias")
                    if alias is not None and self._name_value(alias, source) == "default":
                        default_name = local
        return {
            "exported_names": exported,
            "default_export_name": default_name,
            "re_exports": re_exports,
        }

    def _re_export(self, node, source_node, source) -> ReExport:
        re_export = ReExport(
            source_module=self._string_value(source_node, source),
            line=node.start_point[0] + 1,
        )
        for child in node.children:
            if child.type == "*":
                re_export.star = True
            elif child.type == "namespace_export":
                re_export.star = True
                for sub in child.named_children:
                    re_export.namespace = self._name_value(sub, source)
            elif child.type == "export_clause":
                for spec in child.named_children:
                    if spec.type != "export_specifier":
                        continue
                    name = self._name_value(spec.child_by_field_name("name"), source)
                    alias = spec.child_by_field_name("alias")
                    exported_as = self._name_value(alias, source) if alias is not None else name
                    re_export.names.append((name, exported_as))
        return re_export

    def _declared_names(self, node, source) -> list[str]:
        if node.type in _VARIABLE_TYPES:
            names = []
            for child in node.named_children:
                if child.type != "variable_declarator":
                    continue
                name_node = child.child_by_field_name("name")
                if name_node is not None and name_node.type == "identifier":
                    names.append(self.node_text(name_node, source))
            return names
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return []
        return [self.node_text(name_node, source)]

    # ---- Declarations -----------------------------------------------------

    def extract_declarations(self, tree, source, file_path):
        declarations = []
        by_name = {}
        for node in tree.root_node.named_children:
            if node.type == "export_statement":
                target = node.child_by_field_name("declaration")
                exported = True
            else:
                target = node
                exported = False
            if target is None:
                continue
            for decl in self._declarations_of(target, source, file_path, exported):
                existing = by_name.get(decl.name)
                if existing is None:
                    by_name[decl.name] = decl
                    declarations.append(decl)
                elif decl.exported:
                    existing.exported = True
        return declarations

    def _declarations_of(self, node, source, file_path, exported):
        kind = self.DECLARATION_KINDS.get(node.type)
        if kind is not None:
            name_node = node.child_by_field_name("name")
            if name_node is None:
                return []
            return [
                self._make_declaration(
                    self.node_text(name_node, source), kind, node, exported=exported, file_path=file_path
                )
            ]
        if node.type not in _VARIABLE_TYPES:
            return []
        decls = []
        for child in node.named_children:
            if child.type != "variable_declarator":
                continue
            name_node = child.child_by_field_name("name")
            # Destructuring patterns are not tracked as declarations
            if name_node is None or name_node.type != "identifier":
                continue
            decls.append(
                self._make_declaration(
                    self.node_text(name_node, source), "variable", child, exported=exported, file_path=file_path
                )
            )
        return decls

    # ---- Runtime loads ----------------------------------------------------

    def extract_dynamic_imports(self, tree, source):
        modules = []
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            if node.type == "call_expression":
                module = self._loaded_module(node, source)
                if module is not None:
                    modules.append(module)
            stack.extend(reversed(node.children))
        return modules

    def _loaded_module(self, call, source) -> str | None:
        """Module string of ``require('x')`` / ``import('x')``, else None."""
        function = call.child_by_field_name("function")
        if function is None:
            return None
        if function.type != "import" and not (
            function.type == "identifier" and self.node_text(function, source) == "require"
        ):
            return None
        arguments = call.child_by_field_name("arguments")
        if arguments is None:
            return None
        args = [arg for arg in arguments.named_children if arg.type != "comment"]
        if len(args) != 1 or args[0].type != "string":
            return None
        return self._string_value(args[0], source)

    # ---- Helpers ----------------------------------------------------------

    def _string_value(self, node, source) -> str:
        text = self.node_text(node, source)
        if len(text) >= 2 and text[0] in "'\"" and text[-1] == text[0]:
            return text[1:-1]
        return text

    def _name_value(self, node, source) -> str:
        # Module export names may be string literals: export { x as "a-b" }
        if node is not None and node.type == "string":
            return self._string_value(node, source)
        return self.node_text(node, source)

    @staticmethod
    def _has_type_keyword(node) -> bool:
        return any(child.type == "type" for child in node.children)
