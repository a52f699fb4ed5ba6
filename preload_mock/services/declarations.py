from dataclasses import dataclass
from typing import Dict, Optional, Union

from tree_sitter import Node

from preload_mock.services.syntax import (
    FUNCTION_DECLARATION_TYPES,
    node_text,
    string_value,
)


@dataclass(frozen=True)
class VariableDeclaration:
    node: Node  # the variable_declarator
    value: Optional[Node]


@dataclass(frozen=True)
class FunctionDeclaration:
    node: Node


@dataclass(frozen=True)
class ImportBinding:
    source: str
    # Name as exported by `source`: the pre-alias name, "default" or "*" (namespace).
    imported: str


Declaration = Union[VariableDeclaration, FunctionDeclaration, ImportBinding]


def module_export_name(node: Node) -> str:
    """Export/import specifier names may be identifiers or (ES2022) string literals."""
    if node.type == 'string':
        return string_value(node)
    return node_text(node)


def collect_declarations(root: Node) -> Dict[str, Declaration]:
    """
    Map every declared identifier in the module to its declaration.

    The walk covers the whole tree, not just top-level statements, so helpers
    declared inside other scopes can still be found by name. When a name is
    declared more than once the last declaration in source order wins.
    """
    declarations: Dict[str, Declaration] = {}

    def traverse(n: Node):
        if n.type == 'variable_declarator':
            name_node = n.child_by_field_name('name')
            # Destructuring patterns are not tracked.
            if name_node is not None and name_node.type == 'identifier':
                declarations[node_text(name_node)] = VariableDeclaration(
                    node=n,
                    value=n.child_by_field_name('value'),
                )
        elif n.type in FUNCTION_DECLARATION_TYPES:
            name_node = n.child_by_field_name('name')
            if name_node is not None:
                declarations[node_text(name_node)] = FunctionDeclaration(node=n)
        elif n.type == 'import_statement':
            _collect_import_bindings(n, declarations)
            return

        for child in n.children:
            traverse(child)

    traverse(root)
    return declarations


def _collect_import_bindings(statement: Node, declarations: Dict[str, Declaration]) -> None:
    source_node = statement.child_by_field_name('source')
    if source_node is None:
        return
    source = string_value(source_node)

    for clause in statement.named_children:
        if clause.type != 'import_clause':
            continue
        for part in clause.named_children:
            if part.type == 'identifier':
                # import lib from './lib'
                declarations[node_text(part)] = ImportBinding(source=source, imported='default')
            elif part.type == 'namespace_import':
                # import * as lib from './lib'
                for ident in part.named_children:
                    if ident.type == 'identifier':
                        declarations[node_text(ident)] = ImportBinding(source=source, imported='*')
            elif part.type == 'named_imports':
                # import { a, b as c } from './lib'
                for spec in part.named_children:
                    if spec.type != 'import_specifier':
                        continue
                    name_node = spec.child_by_field_name('name')
                    if name_node is None:
                        continue
                    alias_node = spec.child_by_field_name('alias')
                    local = node_text(alias_node) if alias_node is not None else module_export_name(name_node)
                    declarations[local] = ImportBinding(
                        source=source,
                        imported=module_export_name(name_node),
                    )
