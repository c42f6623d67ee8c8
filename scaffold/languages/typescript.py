"""TypeScript/TSX parser built on tree-sitter syntax trees."""

import logging
from typing import Dict, Iterator, List, Optional

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_language

from scaffold.languages.base import LanguageParser
from scaffold.languages.resolver import ModuleResolver
from scaffold.models import ExportFact, ImportFact, ParsedFile, is_external_specifier

logger = logging.getLogger(__name__)

_JSX_NODE_TYPES = frozenset({"jsx_element", "jsx_self_closing_element"})

# Declarations whose `name` field is the exported binding.
_VALUE_DECLARATIONS = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function_signature",
    "class_declaration",
    "abstract_class_declaration",
})
_TYPE_DECLARATIONS = frozenset({"interface_declaration", "type_alias_declaration"})
_VARIABLE_DECLARATIONS = frozenset({"lexical_declaration", "variable_declaration"})

# `export default <expr>` where the expression still carries a name.
_NAMED_DEFAULT_VALUES = frozenset({
    "function_expression", "function", "generator_function", "class",
})


def _has_token(node: Node, token: str) -> bool:
    """True if an anonymous keyword child (e.g. 'type', 'default') is present."""
    return any(not c.is_named and c.type == token for c in node.children)


def _text(node: Optional[Node]) -> str:
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _string_value(node: Node) -> str:
    """Contents of a string literal node without its quotes."""
    fragments = [c for c in node.named_children if c.type == "string_fragment"]
    if fragments:
        return "".join(_text(f) for f in fragments)
    return _text(node)[1:-1]


def _walk(root: Node) -> Iterator[Node]:
    """Pre-order traversal without recursion (JSX nests deeply)."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


class TypeScriptParser(LanguageParser):
    """Extract import/export facts from TypeScript and TSX source."""

    def __init__(self, resolver: Optional[ModuleResolver] = None) -> None:
        self.resolver = resolver or ModuleResolver()
        self._parsers: Dict[str, Parser] = {}

    @property
    def language_id(self) -> str:
        return "typescript"

    @property
    def supported_extensions(self) -> List[str]:
        return [".ts", ".tsx"]

    def can_handle(self, file_path: str) -> bool:
        return any(file_path.endswith(ext) for ext in self.supported_extensions)

    def _get_parser(self, file_path: str) -> Parser:
        grammar = "tsx" if file_path.endswith(".tsx") else "typescript"
        parser = self._parsers.get(grammar)
        if parser is None:
            parser = Parser(get_language(grammar))
            self._parsers[grammar] = parser
        return parser

    # ── Main parse pipeline ─────────────────────────────────────────────

    def parse(self, source: str, file_path: str) -> ParsedFile:
        """Parse source and collect imports, exports and JSX usage.

        tree-sitter recovers from syntax errors by inserting ERROR nodes;
        statements it still recognizes are extracted as usual.
        """
        result = ParsedFile(file_path=file_path)
        if not source or not source.strip():
            return result

        tree = self._get_parser(file_path).parse(source.encode("utf-8"))
        if tree.root_node.has_error:
            logger.debug("Syntax errors in %s, extracting what parses", file_path)

        for node in _walk(tree.root_node):
            if node.type in _JSX_NODE_TYPES:
                result.has_jsx = True
            elif node.type == "import_statement":
                fact = self._parse_import(node, file_path)
                if fact is not None:
                    result.imports.append(fact)
            elif node.type == "export_statement":
                result.exports.extend(self._parse_export(node))

        return result

    # ── Imports ─────────────────────────────────────────────────────────

    def _parse_import(self, node: Node, file_path: str) -> Optional[ImportFact]:
        """One ImportFact per `import ... from '<specifier>'` declaration."""
        # `import x = require('y')` is not an import declaration.
        if any(c.type == "import_require_clause" for c in node.named_children):
            return None

        source_node = node.child_by_field_name("source")
        if source_node is None or source_node.type != "string":
            return None

        source = _string_value(source_node)
        fact = ImportFact(
            source=source,
            is_external=is_external_specifier(source),
            is_type_only=_has_token(node, "type"),
        )

        clause = next((c for c in node.named_children if c.type == "import_clause"), None)
        if clause is not None:
            for child in clause.named_children:
                if child.type == "identifier":
                    fact.has_default = True
                elif child.type == "namespace_import":
                    fact.has_namespace = True
                elif child.type == "named_imports":
                    fact.imported_names.extend(self._import_specifier_names(child))

        if not fact.is_external:
            fact.resolved_path = self.resolver.resolve(source, file_path)

        return fact

    def _import_specifier_names(self, named_imports: Node) -> List[str]:
        """Local binding names: `{ a, b as c }` -> ['a', 'c']."""
        names = []
        for spec in named_imports.named_children:
            if spec.type != "import_specifier":
                continue
            binding = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
            if binding is not None:
                names.append(_text(binding))
        return names

    # ── Exports ─────────────────────────────────────────────────────────

    def _parse_export(self, node: Node) -> List[ExportFact]:
        is_default = _has_token(node, "default")

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            fact = self._parse_exported_declaration(declaration, is_default)
            return [fact] if fact is not None else []

        clause = next((c for c in node.named_children if c.type == "export_clause"), None)
        if clause is not None:
            is_type = _has_token(node, "type")
            exports = []
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                binding = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                if binding is not None:
                    exports.append(ExportFact(
                        name=_string_value(binding) if binding.type == "string" else _text(binding),
                        is_type=is_type or _has_token(spec, "type"),
                    ))
            return exports

        value = node.child_by_field_name("value")
        if is_default and value is not None and value.type in _NAMED_DEFAULT_VALUES:
            name_node = value.child_by_field_name("name")
            if name_node is not None:
                return [ExportFact(name=_text(name_node), is_default=True)]

        # `export default <expr>` and `export = <expr>`
        if is_default or _has_token(node, "="):
            return [ExportFact(name="default", is_default=True)]

        # `export * from`, `export * as ns from`, `export as namespace X`
        return []

    def _parse_exported_declaration(self, decl: Node, is_default: bool) -> Optional[ExportFact]:
        if decl.type == "ambient_declaration":
            inner = next(
                (c for c in decl.named_children if c.type != "statement_block"), None
            )
            if inner is None:
                return None
            decl = inner

        if decl.type in _VALUE_DECLARATIONS:
            name_node = decl.child_by_field_name("name")
            if name_node is None:
                return ExportFact(name="default", is_default=True) if is_default else None
            return ExportFact(name=_text(name_node), is_default=is_default)

        if decl.type in _TYPE_DECLARATIONS:
            name_node = decl.child_by_field_name("name")
            return ExportFact(name=_text(name_node), is_type=True) if name_node else None

        if decl.type == "enum_declaration":
            name_node = decl.child_by_field_name("name")
            return ExportFact(name=_text(name_node)) if name_node else None

        if decl.type in _VARIABLE_DECLARATIONS:
            declarator = next(
                (c for c in decl.named_children if c.type == "variable_declarator"), None
            )
            name_node = declarator.child_by_field_name("name") if declarator else None
            if name_node is not None and name_node.type == "identifier":
                return ExportFact(name=_text(name_node), is_default=is_default)
            return None

        # namespaces, `export import A = B.C`
        return None
