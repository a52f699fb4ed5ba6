import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Parser, Node, Tree
from typing import List, Optional

# Load TypeScript and TSX grammars
TYPESCRIPT_LANGUAGE = Language(tstypescript.language_typescript())
TSX_LANGUAGE = Language(tstypescript.language_tsx())

# Older grammar releases call function expressions `function`.
FUNCTION_EXPRESSION_TYPES = frozenset({
    'arrow_function',
    'function_expression',
    'function',
    'generator_function',
})

FUNCTION_DECLARATION_TYPES = frozenset({
    'function_declaration',
    'generator_function_declaration',
    'function_signature',
})

# Wrappers that only exist for the type checker; the value underneath is what we want.
TYPE_WRAPPER_TYPES = frozenset({
    'parenthesized_expression',
    'as_expression',
    'satisfies_expression',
    'non_null_expression',
})


class SourceParser:
    def __init__(self):
        self.ts_parser = Parser(TYPESCRIPT_LANGUAGE)
        self.tsx_parser = Parser(TSX_LANGUAGE)

    def parse(self, source: str, file_path: str = '') -> Tree:
        is_tsx = file_path.endswith('x')
        parser = self.tsx_parser if is_tsx else self.ts_parser
        return parser.parse(source.encode('utf-8'))


def node_text(node: Node) -> str:
    return node.text.decode('utf-8')


def code_children(node: Node) -> List[Node]:
    """Named children, minus comments."""
    return [c for c in node.named_children if c.type != 'comment']


def has_keyword(node: Node, keyword: str) -> bool:
    # Keywords such as `async`, `default` or `void` show up as anonymous children.
    return any(not c.is_named and c.type == keyword for c in node.children)


def is_function_expression(node: Optional[Node]) -> bool:
    return node is not None and node.is_named and node.type in FUNCTION_EXPRESSION_TYPES


def unwrap_expression(node: Node) -> Node:
    while node.type in TYPE_WRAPPER_TYPES:
        inner = code_children(node)
        if not inner:
            break
        node = inner[0]
    return node


def string_value(node: Node) -> str:
    """Raw text between the quotes of a `string` or `template_string` node."""
    text = node_text(node)
    return text[1:-1] if len(text) >= 2 else text


def first_syntax_error(root: Node) -> Optional[Node]:
    if not root.has_error:
        return None

    def traverse(n: Node) -> Optional[Node]:
        if n.type == 'ERROR' or n.is_missing:
            return n
        for child in n.children:
            if child.has_error or child.is_missing:
                found = traverse(child)
                if found is not None:
                    return found
        return None

    return traverse(root)
