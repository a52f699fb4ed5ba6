from typing import Dict, FrozenSet, Optional

from tree_sitter import Node

from preload_mock.services.declarations import Declaration, VariableDeclaration
from preload_mock.services.syntax import (
    code_children,
    node_text,
    string_value,
    unwrap_expression,
)


def _single_quoted(raw: str, quote: str) -> str:
    """Re-quote the raw body of a string literal with single quotes."""
    out = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == '\\' and i + 1 < len(raw):
            escaped = raw[i + 1]
            # The old delimiter needs no escape inside single quotes.
            out.append(escaped if escaped == quote and quote != "'" else ch + escaped)
            i += 2
            continue
        if ch == "'":
            out.append("\\'")
        elif ch == '\n':
            out.append('\\n')
        elif ch == '\r':
            out.append('\\r')
        else:
            out.append(ch)
        i += 1
    return "'" + ''.join(out) + "'"


def serialize_literal(
    node: Node,
    declarations: Dict[str, Declaration],
    _resolving: FrozenSet[str] = frozenset(),
) -> Optional[str]:
    """
    Render a literal expression as canonical source text.

    Returns None for anything that is not a recognised literal shape; callers
    fall back to export resolution in that case.
    """
    node = unwrap_expression(node)
    kind = node.type

    if kind == 'string':
        return _single_quoted(string_value(node), node_text(node)[0])

    if kind == 'template_string':
        if any(c.type == 'template_substitution' for c in node.named_children):
            return None
        return _single_quoted(string_value(node), '`')

    if kind == 'number':
        return node_text(node)

    if kind in ('true', 'false'):
        return kind

    if kind == 'array':
        return _serialize_array(node, declarations, _resolving)

    if kind == 'object':
        return _serialize_object(node, declarations, _resolving)

    if kind == 'identifier':
        return _serialize_identifier(node_text(node), declarations, _resolving)

    return None


def _serialize_array(
    node: Node,
    declarations: Dict[str, Declaration],
    resolving: FrozenSet[str],
) -> str:
    items = []
    # A comma with no element since the previous one is a hole: `[1, , 3]`.
    hole = True
    for child in node.children:
        if child.type in ('[', ']', 'comment'):
            continue
        if child.type == ',':
            if hole:
                items.append('undefined')
            hole = True
            continue
        value = serialize_literal(child, declarations, resolving)
        items.append(value if value is not None else 'undefined')
        hole = False
    return f"[{', '.join(items)}]"


def _serialize_object(
    node: Node,
    declarations: Dict[str, Declaration],
    resolving: FrozenSet[str],
) -> str:
    entries = []
    for prop in code_children(node):
        if prop.type == 'pair':
            key = prop.child_by_field_name('key')
            value_node = prop.child_by_field_name('value')
            if key is None or value_node is None or key.type == 'computed_property_name':
                continue
            value = serialize_literal(value_node, declarations, resolving)
            entries.append(f"{node_text(key)}: {value if value is not None else 'undefined'}")
        elif prop.type == 'shorthand_property_identifier':
            name = node_text(prop)
            value = _serialize_identifier(name, declarations, resolving)
            entries.append(f"{name}: {value if value is not None else 'undefined'}")
        # Methods and spreads have no literal form.
    return '{' + ', '.join(entries) + '}'


def _serialize_identifier(
    name: str,
    declarations: Dict[str, Declaration],
    resolving: FrozenSet[str],
) -> Optional[str]:
    if name in resolving:
        return None
    decl = declarations.get(name)
    if isinstance(decl, VariableDeclaration) and decl.value is not None:
        return serialize_literal(decl.value, declarations, resolving | {name})
    return None
