import logging
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Set

from tree_sitter import Node

from preload_mock.config import (
    ALTERNATE_SOURCE_EXTENSION,
    DEFAULT_SOURCE_EXTENSION,
    INDEX_FILE_NAMES,
    SOURCE_EXTENSIONS,
    UNKNOWN_VALUE,
)
from preload_mock.models import (
    AnalysisResult,
    ConstantEntity,
    ExportEntity,
    FunctionEntity,
    ObjectEntity,
)
from preload_mock.services.declarations import (
    Declaration,
    FunctionDeclaration,
    ImportBinding,
    VariableDeclaration,
    collect_declarations,
    module_export_name,
)
from preload_mock.services.literals import serialize_literal
from preload_mock.services.mock_values import infer_mock_return_value, parameter_names
from preload_mock.services.syntax import (
    FUNCTION_DECLARATION_TYPES,
    FUNCTION_EXPRESSION_TYPES,
    SourceParser,
    code_children,
    first_syntax_error,
    has_keyword,
    is_function_expression,
    node_text,
    string_value,
    unwrap_expression,
)

logger = logging.getLogger(__name__)


def _unknown() -> ConstantEntity:
    return ConstantEntity(value=UNKNOWN_VALUE)


def _module_key(path) -> str:
    return str(Path(path).resolve())


def candidate_module_paths(specifier: str, importer: str) -> List[Path]:
    """
    Files a module specifier may refer to, relative to the importing file.

    The literal path comes first, then the default and alternate source
    extensions, then directory index files.
    """
    base = Path(importer).resolve().parent / specifier
    candidates = [base]

    if base.suffix in SOURCE_EXTENSIONS:
        # TS sources commonly import their siblings with a `.js` suffix.
        if base.suffix == ALTERNATE_SOURCE_EXTENSION:
            candidates.append(base.with_suffix(DEFAULT_SOURCE_EXTENSION))
    else:
        candidates.append(Path(f"{base}{DEFAULT_SOURCE_EXTENSION}"))
        candidates.append(Path(f"{base}{ALTERNATE_SOURCE_EXTENSION}"))

    candidates.extend(base / name for name in INDEX_FILE_NAMES)
    return candidates


class ExportAnalyzer:
    """
    Static analysis of a module's export surface.

    Nothing is executed: every value comes from the syntax tree. Re-exports
    and imports from relative paths are followed by analysing the target file
    from scratch, so the only state kept on the instance is the parsers.
    """

    def __init__(self):
        self.parser = SourceParser()

    def analyze(self, source_text: str, file_path: str) -> AnalysisResult:
        return self._analyze(source_text, file_path, frozenset())

    def analyze_file(self, file_path: str) -> AnalysisResult:
        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.analyze(content, file_path)

    def analyze_module(
        self,
        specifier: str,
        importer: str,
        ancestors: FrozenSet[str],
    ) -> Optional[AnalysisResult]:
        """
        Analyze the module `specifier` imported from `importer`.

        Returns None when no candidate file can be read, or when the target is
        already being analysed further up the chain (a re-export cycle).
        """
        for candidate in candidate_module_paths(specifier, importer):
            if _module_key(candidate) in ancestors:
                logger.debug("Re-export cycle through %s (from %s)", candidate, importer)
                return None
            try:
                source_text = candidate.read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError):
                continue
            return self._analyze(source_text, str(candidate), ancestors)

        logger.debug("Could not read module %r imported from %s", specifier, importer)
        return None

    def _analyze(self, source_text: str, file_path: str, ancestors: FrozenSet[str]) -> AnalysisResult:
        tree = self.parser.parse(source_text, file_path)
        module = _ModuleAnalysis(
            analyzer=self,
            root=tree.root_node,
            file_path=file_path,
            ancestors=ancestors | {_module_key(file_path)},
        )
        return module.run()


class _ModuleAnalysis:
    def __init__(self, analyzer: ExportAnalyzer, root: Node, file_path: str, ancestors: FrozenSet[str]):
        self.analyzer = analyzer
        self.root = root
        self.file_path = file_path
        self.ancestors = ancestors
        # Built in full before any export is resolved.
        self.declarations: Dict[str, Declaration] = collect_declarations(root)
        self.named_exports: Dict[str, ExportEntity] = {}
        self.default_export: Optional[Dict[str, ExportEntity]] = None
        self.errors: List[str] = []
        # Local names currently being resolved, to stop `const a = b; const b = a;`.
        self._resolving: Set[str] = set()

    def run(self) -> AnalysisResult:
        error_node = first_syntax_error(self.root)
        if error_node is not None:
            self.errors.append(
                f"Syntax error in {self.file_path} at line {error_node.start_point.row + 1}"
            )

        for statement in self.root.children:
            if statement.type == 'export_statement':
                self._visit_export(statement)

        return AnalysisResult(
            named_exports=self.named_exports,
            default_export=self.default_export,
            errors=self.errors,
        )

    # ---- export statements ----

    def _visit_export(self, statement: Node):
        declaration = statement.child_by_field_name('declaration')
        source_node = statement.child_by_field_name('source')
        source = string_value(source_node) if source_node is not None else None

        if has_keyword(statement, 'default'):
            self._visit_default_export(statement, declaration or statement.child_by_field_name('value'))
            return

        if declaration is not None:
            declaration = _unwrap_ambient(declaration)
            if declaration.type in ('lexical_declaration', 'variable_declaration'):
                self._visit_variable_declaration(declaration)
            elif declaration.type in FUNCTION_DECLARATION_TYPES:
                name_node = declaration.child_by_field_name('name')
                if name_node is not None:
                    self.named_exports[node_text(name_node)] = self._function_entity(declaration)
            # Classes, interfaces, type aliases and enums are not mocked.
            return

        # export type { A } from './types'
        if has_keyword(statement, 'type'):
            return

        for child in statement.named_children:
            if child.type == 'export_clause':
                self._visit_export_clause(child, source)
                return
            if child.type == 'namespace_export':
                self._visit_namespace_export(child, source)
                return

        if source is not None and has_keyword(statement, '*'):
            self._visit_wildcard_export(source)

    def _visit_variable_declaration(self, declaration: Node):
        for declarator in declaration.named_children:
            if declarator.type != 'variable_declarator':
                continue
            name_node = declarator.child_by_field_name('name')
            if name_node is None or name_node.type != 'identifier':
                continue
            value = declarator.child_by_field_name('value')
            if value is None:
                # export let x: T;
                self.named_exports[node_text(name_node)] = _unknown()
            else:
                self.named_exports[node_text(name_node)] = self._classify_value(value)

    def _visit_export_clause(self, clause: Node, source: Optional[str]):
        target: Optional[AnalysisResult] = None
        if source is not None:
            target = self.analyzer.analyze_module(source, self.file_path, self.ancestors)

        for spec in clause.named_children:
            if spec.type != 'export_specifier' or has_keyword(spec, 'type'):
                continue
            name_node = spec.child_by_field_name('name')
            if name_node is None:
                continue
            alias_node = spec.child_by_field_name('alias')
            original = module_export_name(name_node)
            exported = module_export_name(alias_node) if alias_node is not None else original

            if source is None:
                self.named_exports[exported] = self.resolve(original)
            else:
                self.named_exports[exported] = _entity_from_module(target, original)

    def _visit_namespace_export(self, node: Node, source: Optional[str]):
        names = code_children(node)
        if not names or source is None:
            return
        namespace = module_export_name(names[-1])
        target = self.analyzer.analyze_module(source, self.file_path, self.ancestors)
        self.named_exports[namespace] = _entity_from_module(target, '*')

    def _visit_wildcard_export(self, source: str):
        target = self.analyzer.analyze_module(source, self.file_path, self.ancestors)
        if target is None:
            logger.debug("Skipping `export * from %r` in %s: module not readable", source, self.file_path)
            return
        self.named_exports.update(target.named_exports)

    def _visit_default_export(self, statement: Node, node: Optional[Node]):
        line = statement.start_point.row + 1
        if self.default_export is not None:
            self.errors.append(
                f"Duplicate default export in {self.file_path} at line {line}; keeping the first one"
            )
            return

        if node is not None and node.type != 'arrow_function' and (
            node.type in FUNCTION_DECLARATION_TYPES or node.type in FUNCTION_EXPRESSION_TYPES
        ):
            name_node = node.child_by_field_name('name')
            if name_node is None:
                self.errors.append(
                    f"Anonymous default export in {self.file_path} at line {line} is not supported"
                )
                return
            entity = self._function_entity(node)
            self.named_exports[node_text(name_node)] = entity
            self.default_export = {node_text(name_node): entity}
            return

        expr = unwrap_expression(node) if node is not None else None
        if expr is not None and expr.type == 'object':
            self.default_export = self._expand_object(expr)
        elif expr is not None and expr.type == 'identifier':
            name = node_text(expr)
            self.default_export = {name: self.resolve(name)}
        elif expr is not None and expr.type in FUNCTION_EXPRESSION_TYPES:
            self.errors.append(
                f"Anonymous default export in {self.file_path} at line {line} is not supported; "
                "export an object literal, an identifier or a named function"
            )
        else:
            shape = expr.type if expr is not None else "empty"
            self.errors.append(
                f"Unsupported default export ({shape}) in {self.file_path} at line {line}; "
                "export an object literal, an identifier or a named function"
            )

    # ---- resolution ----

    def resolve(self, identifier: str, source: Optional[str] = None) -> ExportEntity:
        if source is not None:
            target = self.analyzer.analyze_module(source, self.file_path, self.ancestors)
            return _entity_from_module(target, identifier)

        decl = self.declarations.get(identifier)
        if decl is None or identifier in self._resolving:
            return _unknown()

        self._resolving.add(identifier)
        try:
            return self._resolve_declaration(decl)
        finally:
            self._resolving.discard(identifier)

    def _resolve_declaration(self, decl: Declaration) -> ExportEntity:
        if isinstance(decl, VariableDeclaration):
            if decl.value is None:
                return _unknown()
            expr = unwrap_expression(decl.value)
            if is_function_expression(expr):
                return self._function_entity(expr)
            literal = serialize_literal(expr, self.declarations)
            if literal is not None:
                return ConstantEntity(value=literal)
            if expr.type == 'identifier':
                return self.resolve(node_text(expr))
            return _unknown()

        if isinstance(decl, FunctionDeclaration):
            return self._function_entity(decl.node)

        if isinstance(decl, ImportBinding):
            return self.resolve(decl.imported, decl.source)

        return _unknown()

    def _classify_value(self, value: Node) -> ExportEntity:
        """Classify an exported initializer or an object property value."""
        expr = unwrap_expression(value)
        if is_function_expression(expr):
            return self._function_entity(expr)
        if expr.type == 'object':
            return ObjectEntity(props=self._expand_object(expr))
        literal = serialize_literal(expr, self.declarations)
        if literal is not None:
            return ConstantEntity(value=literal)
        if expr.type == 'identifier':
            return self.resolve(node_text(expr))
        # Calls, `new` expressions and the like keep their key with an opaque value.
        return _unknown()

    def _expand_object(self, obj: Node) -> Dict[str, ExportEntity]:
        props: Dict[str, ExportEntity] = {}
        for prop in code_children(obj):
            if prop.type == 'method_definition':
                key = _property_key(prop.child_by_field_name('name'))
                if key is None:
                    continue
                if has_keyword(prop, 'get'):
                    # An accessor is a data property on the mock.
                    props[key] = ConstantEntity(value=infer_mock_return_value(prop))
                elif has_keyword(prop, 'set'):
                    props.setdefault(key, _unknown())
                else:
                    props[key] = self._function_entity(prop)
            elif prop.type == 'pair':
                key = _property_key(prop.child_by_field_name('key'))
                value = prop.child_by_field_name('value')
                if key is not None and value is not None:
                    props[key] = self._classify_value(value)
            elif prop.type == 'shorthand_property_identifier':
                name = node_text(prop)
                props[name] = self.resolve(name)
        return props

    def _function_entity(self, node: Node) -> FunctionEntity:
        return FunctionEntity(
            params=parameter_names(node),
            mock_return_value=infer_mock_return_value(node),
        )


def _unwrap_ambient(declaration: Node) -> Node:
    # export declare function f(): T;
    while declaration.type == 'ambient_declaration':
        inner = code_children(declaration)
        if not inner:
            break
        declaration = inner[0]
    return declaration


def _property_key(node: Optional[Node]) -> Optional[str]:
    # Computed, numeric and private keys are skipped.
    if node is None:
        return None
    if node.type in ('property_identifier', 'identifier'):
        return node_text(node)
    if node.type == 'string':
        return string_value(node)
    return None


def _namespace_entity(result: AnalysisResult) -> ObjectEntity:
    props: Dict[str, ExportEntity] = dict(result.named_exports)
    if result.default_export is not None:
        props['default'] = ObjectEntity(props=result.default_export)
    return ObjectEntity(props=props)


def _entity_from_module(result: Optional[AnalysisResult], identifier: str) -> ExportEntity:
    """Pick `identifier` out of another module's analysis; "*" means the whole namespace."""
    if result is None:
        return _unknown()
    if identifier == '*':
        return _namespace_entity(result)
    if identifier in result.named_exports:
        return result.named_exports[identifier]
    if identifier == 'default' and result.default_export is not None:
        return ObjectEntity(props=result.default_export)
    return _unknown()


_export_analyzer = None


def get_export_analyzer() -> ExportAnalyzer:
    global _export_analyzer
    if _export_analyzer is None:
        _export_analyzer = ExportAnalyzer()
    return _export_analyzer
