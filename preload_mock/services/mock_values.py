from typing import Dict, List

from tree_sitter import Node

from preload_mock.config import UNKNOWN_VALUE
from preload_mock.services.syntax import code_children, has_keyword, node_text

PROMISE_VALUE = 'Promise.resolve()'
OPAQUE_OBJECT = '{}'

_PREDEFINED_TYPE_VALUES: Dict[str, str] = {
    'string': "''",
    'number': '0',
    'boolean': 'false',
    'void': 'undefined',
    'undefined': 'undefined',
    'null': 'null',
    'any': OPAQUE_OBJECT,
    'unknown': OPAQUE_OBJECT,
}


def infer_mock_return_value(func_node: Node) -> str:
    """
    Pick a placeholder return expression for a function-like node.

    This is a switch over the written annotation only; nothing is resolved, so
    a type alias of `string` still mocks as `{}`.
    """
    if has_keyword(func_node, 'async'):
        return PROMISE_VALUE

    return_type = func_node.child_by_field_name('return_type')
    if return_type is None:
        return UNKNOWN_VALUE

    # `: T` wraps the type; type predicates and asserts clauses fall through to `{}`.
    if return_type.type != 'type_annotation':
        return OPAQUE_OBJECT
    inner = code_children(return_type)
    if not inner:
        return UNKNOWN_VALUE
    return _mock_for_type(inner[0])


def _mock_for_type(type_node: Node) -> str:
    kind = type_node.type
    text = node_text(type_node)

    if kind == 'predefined_type':
        return _PREDEFINED_TYPE_VALUES.get(text, OPAQUE_OBJECT)

    if kind == 'literal_type':
        inner = code_children(type_node)
        if inner and inner[0].type in ('undefined', 'null'):
            return inner[0].type
        return OPAQUE_OBJECT

    if kind == 'type_identifier':
        if text == 'Promise':
            return PROMISE_VALUE
        if text in ('undefined', 'null'):
            return text
        return OPAQUE_OBJECT

    if kind == 'generic_type':
        name_node = type_node.child_by_field_name('name')
        if name_node is not None and node_text(name_node) == 'Promise':
            return PROMISE_VALUE

    return OPAQUE_OBJECT


def parameter_names(func_node: Node) -> List[str]:
    # `x => ...` has a bare identifier instead of a parameter list.
    single = func_node.child_by_field_name('parameter')
    if single is not None:
        return [node_text(single)]

    params = func_node.child_by_field_name('parameters')
    if params is None:
        return []

    names: List[str] = []
    for param in code_children(params):
        pattern = param
        if param.type in ('required_parameter', 'optional_parameter'):
            pattern = param.child_by_field_name('pattern')
            if pattern is None:
                continue
        elif param.type == 'assignment_pattern':
            pattern = param.child_by_field_name('left') or param

        text = node_text(pattern)
        if pattern.type == 'rest_pattern':
            text = text.lstrip('.').strip()
        names.append(text)
    return names
