import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from tree_sitter import Node

from preload_mock.models import PurifyResult
from preload_mock.services.syntax import SourceParser, code_children, has_keyword, node_text

logger = logging.getLogger(__name__)

_DEFINE_PROPERTY_FUNCTIONS = frozenset({'defineProperty', 'defineProperties'})

_USE_STRICT = re.compile(r"""("|')use strict\1[ \t]*;?""")
# `export { a, b };` left behind by the bundler.
_AGGREGATE_EXPORT = re.compile(r'^export\s*\{[^}]+\};?', re.MULTILINE)


@dataclass(frozen=True)
class _Edit:
    start: int
    end: int
    replacement: bytes = b''


_parser = None


def _get_parser() -> SourceParser:
    global _parser
    if _parser is None:
        _parser = SourceParser()
    return _parser


def purify_bundle(code: str) -> PurifyResult:
    """
    Strip CommonJS export plumbing from a compiled preload bundle.

    Only top-level expression statements are inspected:

    - `Object.defineProperty(exports, ...)` / `Object.defineProperties(exports, ...)`
      and `module.exports = ...` are removed.
    - `exports.default = X` becomes `Object.assign(window, X);`.
    - `exports.name = X` becomes `const name = X;`, unless it is `void 0`
      initialisation, a chained `exports.a = exports.b = ...` initialiser, or a
      passthrough of a local binding with the same name, all of which are removed.

    Every other statement is left byte-for-byte as it was.
    """
    source = code.encode('utf-8')
    tree = _get_parser().parse(code)
    edits: List[_Edit] = []
    has_default_export = False

    for statement in tree.root_node.named_children:
        if statement.type != 'expression_statement':
            continue
        inner = code_children(statement)
        if not inner:
            continue
        expr = inner[0]

        if expr.type == 'call_expression' and _is_define_property_on_exports(expr):
            edits.append(_removal(source, statement))
            continue

        if expr.type != 'assignment_expression':
            continue
        left = expr.child_by_field_name('left')
        right = expr.child_by_field_name('right')
        if left is None or right is None or left.type != 'member_expression':
            continue

        target = _member_parts(left)
        if target == ('module', 'exports'):
            edits.append(_removal(source, statement))
            continue
        if target is None or target[0] != 'exports':
            continue

        name = target[1]
        value_text = node_text(right)
        if name == 'default':
            has_default_export = True
            edits.append(_replacement(statement, f"Object.assign(window, {value_text});"))
        elif _is_void(right) or _is_exports_assignment(right) or value_text.strip() == name:
            edits.append(_removal(source, statement))
        else:
            edits.append(_replacement(statement, f"const {name} = {value_text};"))

    logger.debug("Purified bundle: %d statements rewritten or removed", len(edits))
    return PurifyResult(code=_apply_edits(source, edits), has_default_export=has_default_export)


def assemble_preload_bundle(cleaned_code: str, mount_name: str, export_names: Iterable[str]) -> str:
    """
    Turn a purified bundle into the script the host loads as its preload.

    The mount object is created right after the "use strict" directive, leftover
    `export { ... }` aggregates are dropped, and the named exports are gathered
    onto `window.<mount_name>` at the end.
    """
    code = cleaned_code
    match = _USE_STRICT.search(code)
    if match:
        insert_at = match.end()
        code = f"{code[:insert_at]}\nwindow.{mount_name} = Object.create(null);{code[insert_at:]}"

    code = _AGGREGATE_EXPORT.sub('', code)

    names = [name for name in export_names if name != 'default']
    if names:
        if not code.endswith('\n'):
            code += '\n'
        code += f"window.{mount_name} = {{ {', '.join(names)} }};\n"
    return code


def _member_parts(node: Node) -> Optional[tuple]:
    obj = node.child_by_field_name('object')
    prop = node.child_by_field_name('property')
    if obj is None or prop is None:
        return None
    return node_text(obj), node_text(prop)


def _is_define_property_on_exports(call: Node) -> bool:
    func = call.child_by_field_name('function')
    args = call.child_by_field_name('arguments')
    if func is None or args is None or func.type != 'member_expression':
        return False
    parts = _member_parts(func)
    if parts is None or parts[0] != 'Object' or parts[1] not in _DEFINE_PROPERTY_FUNCTIONS:
        return False
    arg_nodes = code_children(args)
    return bool(arg_nodes) and node_text(arg_nodes[0]) == 'exports'


def _is_void(node: Node) -> bool:
    if node.type == 'unary_expression' and has_keyword(node, 'void'):
        return True
    return node_text(node) == 'undefined'


def _is_exports_assignment(node: Node) -> bool:
    if node.type != 'assignment_expression':
        return False
    left = node.child_by_field_name('left')
    if left is None or left.type != 'member_expression':
        return False
    parts = _member_parts(left)
    return parts is not None and parts[0] == 'exports'


def _replacement(statement: Node, text: str) -> _Edit:
    return _Edit(statement.start_byte, statement.end_byte, text.encode('utf-8'))


def _removal(source: bytes, statement: Node) -> _Edit:
    """Remove a statement, taking its whole line when nothing else shares it."""
    start = statement.start_byte
    end = statement.end_byte

    line_start = start
    while line_start > 0 and source[line_start - 1:line_start] in (b' ', b'\t'):
        line_start -= 1
    if line_start > 0 and source[line_start - 1:line_start] != b'\n':
        return _Edit(start, end)

    line_end = end
    while line_end < len(source) and source[line_end:line_end + 1] in (b' ', b'\t'):
        line_end += 1
    if source[line_end:line_end + 2] == b'\r\n':
        return _Edit(line_start, line_end + 2)
    if source[line_end:line_end + 1] == b'\n' or line_end == len(source):
        return _Edit(line_start, min(line_end + 1, len(source)))
    return _Edit(start, end)


def _apply_edits(source: bytes, edits: List[_Edit]) -> str:
    buffer = bytearray(source)
    # Statements never overlap, so applying back to front keeps offsets valid.
    for edit in sorted(edits, key=lambda e: e.start, reverse=True):
        buffer[edit.start:edit.end] = edit.replacement
    return buffer.decode('utf-8')
