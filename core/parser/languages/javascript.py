"""JavaScript and TypeScript structure extractor using tree-sitter.

This module provides the extractor for the JavaScript family of grammars
(JavaScript with JSX, TypeScript and TSX, which share node names). It walks
the syntax tree once and returns functions, classes, imports, exports,
variables and constants. Each node kind is handled by a method that returns
freshly built models; nothing is accumulated through shared state.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from ..models import (
    ClassInfo,
    CodeStructure,
    ConstantInfo,
    ConstantValue,
    ExportInfo,
    ExportKind,
    FunctionInfo,
    ImportBinding,
    ImportInfo,
    LiteralValue,
    UnknownValue,
    VariableInfo,
    VariableScope,
)
from .base import BaseExtractor

if TYPE_CHECKING:
    from tree_sitter import Node, Tree

logger = structlog.get_logger(__name__)

# Function-like nodes recorded as FunctionInfo outside class bodies
FUNCTION_NODES = {
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
}

# Nodes that open a function scope (methods included)
FUNCTION_SCOPE_NODES = FUNCTION_NODES | {"method_definition"}

CLASS_NODES = {"class_declaration", "abstract_class_declaration"}

# Nodes adding one path each to a function's cyclomatic complexity
BRANCH_NODES = {
    "if_statement",
    "switch_case",
    "switch_default",
    "for_statement",
    "while_statement",
    "ternary_expression",
}

LOGICAL_OPERATORS = {"&&", "||", "??"}

# Statements that open their own scope without being a bare block
SCOPED_STATEMENTS = {"for_statement", "for_in_statement", "switch_statement"}

FIELD_NODES = {"field_definition", "public_field_definition"}


@dataclass(frozen=True)
class _Reassignment:
    """An assignment or update expression targeting a plain identifier."""

    name: str


_Item = FunctionInfo | ClassInfo | ImportInfo | ExportInfo | VariableInfo | ConstantInfo | _Reassignment


class JavaScriptExtractor(BaseExtractor):
    """JavaScript-family structure extractor using tree-sitter.

    Extracts all code entities from JavaScript, JSX, TypeScript and TSX:
    - Functions (declarations, arrows, function expressions; sync and async)
    - Classes (superclass, interfaces, methods, fields)
    - Imports (static, dynamic import(), CommonJS require())
    - Exports (named declarations, default exports, export clauses)
    - Variables (let/var with scope and reassignment) and top-level constants

    Attributes:
        language: The grammar identifier ('javascript').
    """

    language: str = "javascript"

    def extract_structure(self, tree: "Tree", source_code: str) -> CodeStructure:
        """Extract the structural inventory from a JavaScript-family tree.

        Args:
            tree: The tree-sitter parse tree.
            source_code: The original source code.

        Returns:
            The extracted CodeStructure.
        """
        items: list[_Item] = []
        for node in self.iter_descendants(tree.root_node):
            items.extend(self._collect(node))

        reassigned = {item.name for item in items if isinstance(item, _Reassignment)}
        variables = [
            item.model_copy(update={"reassigned": item.name in reassigned})
            for item in items
            if isinstance(item, VariableInfo)
        ]

        structure = CodeStructure(
            functions=[item for item in items if isinstance(item, FunctionInfo)],
            classes=[item for item in items if isinstance(item, ClassInfo)],
            imports=[item for item in items if isinstance(item, ImportInfo)],
            exports=[item for item in items if isinstance(item, ExportInfo)],
            variables=variables,
            constants=[item for item in items if isinstance(item, ConstantInfo)],
        )

        logger.debug(
            "structure_extracted",
            language=self.language,
            lines=source_code.count("\n") + 1,
            functions=len(structure.functions),
            classes=len(structure.classes),
            imports=len(structure.imports),
            exports=len(structure.exports),
        )
        return structure

    def _collect(self, node: "Node") -> list[_Item]:
        """Build the items a single node contributes.

        Args:
            node: The node being visited.

        Returns:
            Items for this node only; descendants are visited separately.
        """
        # Keyword tokens share type names with nodes ("function", "class")
        if not node.is_named:
            return []

        kind = node.type

        if kind in FUNCTION_NODES:
            return [self._function_info(node, self._binding_name(node))]
        if kind in CLASS_NODES:
            return [self._class_info(node)]
        if kind == "import_statement":
            return self._static_imports(node)
        if kind == "call_expression":
            return self._call_imports(node)
        if kind == "export_statement":
            return self._exports(node)
        if kind in ("lexical_declaration", "variable_declaration"):
            return self._declarations(node)
        if kind in ("assignment_expression", "augmented_assignment_expression"):
            return self._reassignments(node.child_by_field_name("left"))
        if kind == "update_expression":
            return self._reassignments(node.child_by_field_name("argument"))
        return []

    # -------------------------------------------------------------------------
    # Functions
    # -------------------------------------------------------------------------

    def _binding_name(self, node: "Node") -> str:
        """Resolve the name a function is bound to."""
        own_name = node.child_by_field_name("name")
        if own_name is not None:
            return self.get_node_text(own_name)

        parent = node.parent
        if parent is not None and parent.type == "variable_declarator":
            target = parent.child_by_field_name("name")
            if target is not None and target.type == "identifier":
                return self.get_node_text(target)

        return "anonymous"

    def _function_info(self, node: "Node", name: str) -> FunctionInfo:
        """Build a FunctionInfo for a function-like node.

        Args:
            node: Function, arrow function or method node.
            name: Resolved name for the function.

        Returns:
            The FunctionInfo.
        """
        # TypeScript annotations include the leading colon
        return_type = self.get_node_text(node.child_by_field_name("return_type"))
        return_type = return_type.lstrip(":").strip()

        return FunctionInfo(
            name=name,
            params=self._parameter_names(node),
            return_type=return_type or None,
            is_async=any(child.type == "async" for child in node.children),
            is_arrow=node.type == "arrow_function",
            span=self.get_node_span(node),
            complexity=self._function_complexity(node),
            calls=self._called_names(node),
        )

    def _parameter_names(self, node: "Node") -> list[str]:
        """Extract parameter identifiers of a function-like node."""
        # Arrow functions with a single bare parameter use a separate field
        single = node.child_by_field_name("parameter")
        if single is not None:
            return [self.get_node_text(single)]

        parameters = node.child_by_field_name("parameters")
        if parameters is None:
            return []

        return [
            self._parameter_name(child)
            for child in parameters.named_children
            if child.type not in ("comment", "decorator")
        ]

    def _parameter_name(self, node: "Node") -> str:
        """Resolve the identifier of a single parameter node."""
        if node.type == "assignment_pattern":
            left = node.child_by_field_name("left")
            return self._parameter_name(left) if left is not None else self.get_node_text(node)

        if node.type in ("required_parameter", "optional_parameter"):
            pattern = node.child_by_field_name("pattern")
            return self._parameter_name(pattern) if pattern is not None else self.get_node_text(node)

        if node.type == "rest_pattern" and node.named_children:
            return self._parameter_name(node.named_children[0])

        # identifiers, and destructuring patterns kept as written
        return self.get_node_text(node)

    def _function_complexity(self, node: "Node") -> int:
        """Count branch and logical nodes in a function's subtree.

        Args:
            node: The function-like node.

        Returns:
            Cyclomatic complexity (minimum 1).
        """
        complexity = 1

        for child in self.iter_descendants(node):
            if child.type in BRANCH_NODES:
                complexity += 1
            elif child.type == "binary_expression":
                operator = child.child_by_field_name("operator")
                if operator is not None and operator.type in LOGICAL_OPERATORS:
                    complexity += 1

        return complexity

    def _called_names(self, node: "Node") -> list[str]:
        """Collect distinct callee names within a function's subtree."""
        names: list[str] = []

        for child in self.iter_descendants(node):
            if child.type != "call_expression":
                continue

            callee = child.child_by_field_name("function")
            if callee is None:
                continue

            if callee.type == "identifier":
                names.append(self.get_node_text(callee))
            elif callee.type == "member_expression":
                prop = callee.child_by_field_name("property")
                if prop is not None and prop.type in (
                    "property_identifier",
                    "private_property_identifier",
                ):
                    names.append(self.get_node_text(prop))

        return list(dict.fromkeys(names))

    # -------------------------------------------------------------------------
    # Classes
    # -------------------------------------------------------------------------

    def _class_info(self, node: "Node") -> ClassInfo:
        """Build a ClassInfo for a class declaration.

        Args:
            node: class_declaration or abstract_class_declaration node.

        Returns:
            The ClassInfo with methods and fields.
        """
        name_node = node.child_by_field_name("name")
        extends, implements = self._class_heritage(node)

        methods: list[FunctionInfo] = []
        properties: list[str] = []

        body = node.child_by_field_name("body")
        if body is not None:
            for member in body.named_children:
                if member.type == "method_definition":
                    method_name = self.get_node_text(member.child_by_field_name("name"))
                    methods.append(self._function_info(member, method_name or "anonymous"))
                elif member.type in FIELD_NODES:
                    field_name = member.child_by_field_name(
                        "property"
                    ) or member.child_by_field_name("name")
                    if field_name is not None:
                        properties.append(self.get_node_text(field_name))

        return ClassInfo(
            name=self.get_node_text(name_node) or "anonymous",
            extends=extends,
            implements=implements,
            methods=methods,
            properties=properties,
            span=self.get_node_span(node),
        )

    def _class_heritage(self, node: "Node") -> tuple[str | None, list[str]]:
        """Extract the superclass and implemented interfaces of a class."""
        heritage = next((c for c in node.named_children if c.type == "class_heritage"), None)
        if heritage is None:
            return None, []

        extends: str | None = None
        implements: list[str] = []

        for child in heritage.named_children:
            if child.type == "extends_clause":
                value = child.child_by_field_name("value")
                if value is None and child.named_children:
                    value = child.named_children[0]
                extends = self.get_node_text(value) or None
            elif child.type == "implements_clause":
                implements.extend(self.get_node_text(t) for t in child.named_children)
            elif extends is None:
                # JavaScript grammar: class_heritage holds the expression directly
                extends = self.get_node_text(child)

        return extends, implements

    # -------------------------------------------------------------------------
    # Imports
    # -------------------------------------------------------------------------

    def _string_value(self, node: "Node | None") -> str:
        """Strip the quotes from a string literal node."""
        text = self.get_node_text(node)
        if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"', "`"):
            return text[1:-1]
        return text

    def _static_imports(self, node: "Node") -> list[ImportInfo]:
        """Extract an ``import ... from "x"`` statement.

        Args:
            node: The import_statement node.

        Returns:
            A single ImportInfo, or nothing if no specifier is present.
        """
        line = node.start_point[0] + 1
        source = self._string_value(node.child_by_field_name("source"))
        bindings: list[ImportBinding] = []
        is_default = False
        is_require = False

        for child in node.named_children:
            if child.type == "import_clause":
                for part in child.named_children:
                    if part.type == "identifier":
                        bindings.append(ImportBinding(name="default", alias=self.get_node_text(part)))
                        is_default = True
                    elif part.type == "namespace_import":
                        local = next((c for c in part.named_children if c.type == "identifier"), None)
                        bindings.append(ImportBinding(name="*", alias=self.get_node_text(local) or None))
                    elif part.type == "named_imports":
                        bindings.extend(self._import_specifiers(part))
            elif child.type == "import_require_clause":
                # TypeScript: import x = require("y")
                source = self._string_value(child.child_by_field_name("source"))
                local = next((c for c in child.named_children if c.type == "identifier"), None)
                bindings.append(ImportBinding(name="default", alias=self.get_node_text(local) or None))
                is_default = True
                is_require = True

        if not source:
            return []

        return [
            ImportInfo(
                source=source,
                bindings=bindings,
                is_default=is_default,
                is_require=is_require,
                line=line,
            )
        ]

    def _import_specifiers(self, node: "Node") -> list[ImportBinding]:
        """Extract ``{ a, b as c }`` import specifiers."""
        bindings: list[ImportBinding] = []

        for specifier in node.named_children:
            if specifier.type != "import_specifier":
                continue
            name = self._string_value(specifier.child_by_field_name("name"))
            alias_node = specifier.child_by_field_name("alias")
            alias = self.get_node_text(alias_node) if alias_node is not None else None
            bindings.append(ImportBinding(name=name, alias=alias if alias != name else None))

        return bindings

    def _call_imports(self, node: "Node") -> list[ImportInfo]:
        """Extract dynamic ``import("x")`` and ``require("x")`` calls.

        Args:
            node: A call_expression node.

        Returns:
            A single ImportInfo when the call loads a literal module specifier.
        """
        callee = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if callee is None or arguments is None:
            return []

        is_dynamic = callee.type == "import"
        is_require = callee.type == "identifier" and self.get_node_text(callee) == "require"
        if not (is_dynamic or is_require):
            return []

        first = next((c for c in arguments.named_children if c.type != "comment"), None)
        if first is None or first.type != "string":
            return []

        source = self._string_value(first)
        if not source:
            return []

        bindings: list[ImportBinding] = []
        parent = node.parent
        if is_require and parent is not None and parent.type == "variable_declarator":
            target = parent.child_by_field_name("name")
            if target is not None and target.type == "identifier":
                bindings.append(ImportBinding(name="default", alias=self.get_node_text(target)))

        return [
            ImportInfo(
                source=source,
                bindings=bindings,
                is_default=bool(bindings),
                is_dynamic=is_dynamic,
                is_require=is_require,
                line=node.start_point[0] + 1,
            )
        ]

    # -------------------------------------------------------------------------
    # Exports
    # -------------------------------------------------------------------------

    def _exports(self, node: "Node") -> list[ExportInfo]:
        """Extract the names an export statement publishes.

        Args:
            node: The export_statement node.

        Returns:
            One ExportInfo per exported name.
        """
        is_default = any(child.type == "default" for child in node.children)
        declaration = node.child_by_field_name("declaration")

        if is_default:
            target = declaration or node.child_by_field_name("value")
            if target is None:
                return []
            kind = self._declaration_kind(target) or ExportKind.VARIABLE
            name_node = target.child_by_field_name("name")
            if target.type == "identifier":
                name_node = target
            return [
                ExportInfo(
                    name=self.get_node_text(name_node) or "default",
                    is_default=True,
                    kind=kind,
                )
            ]

        if declaration is not None:
            if declaration.type in ("lexical_declaration", "variable_declaration"):
                kind = (
                    ExportKind.CONST
                    if self._declaration_keyword(declaration) == "const"
                    else ExportKind.VARIABLE
                )
                return [
                    ExportInfo(name=name, kind=kind)
                    for name, _ in self._declarator_names(declaration)
                ]

            kind = self._declaration_kind(declaration)
            name_node = declaration.child_by_field_name("name")
            if kind is None or name_node is None:
                return []
            return [ExportInfo(name=self.get_node_text(name_node), kind=kind)]

        exports: list[ExportInfo] = []
        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                if specifier.type != "export_specifier":
                    continue
                alias = specifier.child_by_field_name("alias")
                exported = self._string_value(alias or specifier.child_by_field_name("name"))
                exports.append(
                    ExportInfo(
                        name=exported,
                        is_default=exported == "default",
                        kind=ExportKind.VARIABLE,
                    )
                )
        return exports

    def _declaration_kind(self, node: "Node") -> ExportKind | None:
        """Map a declaration or expression node to its export kind."""
        if not node.is_named:
            return None
        if node.type in FUNCTION_NODES:
            return ExportKind.FUNCTION
        if node.type in CLASS_NODES or node.type == "class":
            return ExportKind.CLASS
        if node.type in ("lexical_declaration", "variable_declaration", "identifier"):
            return ExportKind.VARIABLE
        return None

    # -------------------------------------------------------------------------
    # Variables and constants
    # -------------------------------------------------------------------------

    def _declaration_keyword(self, node: "Node") -> str:
        """Return 'const', 'let' or 'var' for a declaration node."""
        if node.type == "variable_declaration":
            return "var"
        return node.children[0].type if node.children else "let"

    def _declarator_names(self, node: "Node") -> Iterator[tuple[str, "Node | None"]]:
        """Yield ``(name, initializer)`` for each identifier declarator."""
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is None or name.type != "identifier":
                continue
            yield self.get_node_text(name), declarator.child_by_field_name("value")

    def _declarations(self, node: "Node") -> list[_Item]:
        """Extract variables and top-level constants from a declaration.

        Args:
            node: A lexical_declaration or variable_declaration node.

        Returns:
            ConstantInfo for top-level ``const`` bindings, VariableInfo for
            ``let``/``var`` bindings.
        """
        keyword = self._declaration_keyword(node)

        if keyword == "const":
            if not self._is_top_level(node):
                return []
            items: list[_Item] = []
            for name, value in self._declarator_names(node):
                literal, inferred = self._literal(value)
                items.append(ConstantInfo(name=name, value=literal, type=inferred))
            return items

        if keyword not in ("let", "var"):
            return []

        scope = self._infer_scope(node)
        return [
            VariableInfo(name=name, kind=keyword, scope=scope)
            for name, _ in self._declarator_names(node)
        ]

    def _is_top_level(self, node: "Node") -> bool:
        """Check whether a declaration sits directly in the program root."""
        parent = node.parent
        if parent is not None and parent.type == "export_statement":
            parent = parent.parent
        return parent is not None and parent.type == "program"

    def _infer_scope(self, node: "Node") -> VariableScope:
        """Infer the scope a declaration belongs to.

        ``global`` when the enclosing block is the program root, ``block`` for
        a bare block, otherwise ``function``.
        """
        parent = node.parent

        while parent is not None:
            if parent.type == "program":
                return VariableScope.GLOBAL
            if parent.type in FUNCTION_SCOPE_NODES or parent.type in SCOPED_STATEMENTS:
                return VariableScope.FUNCTION
            if parent.type == "statement_block":
                owner = parent.parent
                if owner is not None and owner.type in FUNCTION_SCOPE_NODES:
                    return VariableScope.FUNCTION
                return VariableScope.BLOCK
            parent = parent.parent

        return VariableScope.GLOBAL

    def _reassignments(self, target: "Node | None") -> list[_Item]:
        """Record an assignment target when it is a plain identifier."""
        if target is None:
            return []
        if target.type == "parenthesized_expression" and target.named_children:
            target = target.named_children[0]
        if target.type != "identifier":
            return []
        return [_Reassignment(self.get_node_text(target))]

    def _literal(self, node: "Node | None") -> tuple[ConstantValue, str]:
        """Best-effort evaluation of a constant initializer.

        Args:
            node: The initializer node, if any.

        Returns:
            Tuple of (tagged value, inferred type name).
        """
        if node is None:
            return UnknownValue(), "unknown"

        kind = node.type

        if kind == "string":
            return LiteralValue(value=self._string_value(node)), "string"
        if kind == "template_string":
            return UnknownValue(), "string"
        if kind == "number":
            return self._number_value(self.get_node_text(node)), "number"
        if kind in ("true", "false"):
            return LiteralValue(value=kind == "true"), "boolean"
        if kind == "array":
            return UnknownValue(), "array"
        if kind == "object":
            return UnknownValue(), "object"
        if kind in FUNCTION_NODES:
            return UnknownValue(), "function"

        return UnknownValue(), "unknown"

    def _number_value(self, text: str) -> ConstantValue:
        """Parse a numeric literal, giving up on BigInt and odd forms."""
        text = text.replace("_", "")
        if text.endswith("n"):
            return UnknownValue()

        try:
            return LiteralValue(value=int(text, 0))
        except ValueError:
            pass

        try:
            return LiteralValue(value=float(text))
        except ValueError:
            return UnknownValue()
