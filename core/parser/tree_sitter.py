"""Tree-sitter based parser adapter.

This module wraps the tree-sitter JavaScript and TypeScript grammars behind
the BaseParser interface. Grammars are loaded lazily on first use.
"""

import threading
from typing import TYPE_CHECKING

import structlog

from .base import BaseParser, ParserError

if TYPE_CHECKING:
    from tree_sitter import Language, Node, Parser, Tree

logger = structlog.get_logger(__name__)


class TreeSitterParser(BaseParser):
    """Tree-sitter based source code parser.

    Attributes:
        supported_languages: Grammars this parser can handle.
        strict: Reject trees that contain syntax errors.
    """

    supported_languages: set[str] = {"javascript", "typescript", "tsx"}

    def __init__(self, *, strict: bool = True) -> None:
        """Initialize the TreeSitterParser.

        Args:
            strict: When True, a tree containing ERROR or MISSING nodes raises
                ParserError instead of being returned.
        """
        self.strict = strict
        self._initialized = False
        self._lock = threading.Lock()
        self._parsers: dict[str, Parser] = {}
        self._languages: dict[str, Language] = {}
        logger.debug("TreeSitterParser created (lazy initialization)", strict=strict)

    def _ensure_initialized(self) -> None:
        """Lazily load the tree-sitter grammars."""
        if self._initialized:
            return

        self._init_javascript_parser()
        self._init_typescript_parser()

        self._initialized = True
        logger.info(
            "TreeSitterParser initialized",
            languages=sorted(self._parsers.keys()),
        )

    def _init_javascript_parser(self) -> None:
        """Initialize the JavaScript tree-sitter parser (includes JSX)."""
        import tree_sitter_javascript
        from tree_sitter import Language, Parser

        language = Language(tree_sitter_javascript.language())
        self._languages["javascript"] = language
        self._parsers["javascript"] = Parser(language)
        logger.debug("JavaScript tree-sitter parser initialized")

    def _init_typescript_parser(self) -> None:
        """Initialize the TypeScript and TSX tree-sitter parsers."""
        import tree_sitter_typescript
        from tree_sitter import Language, Parser

        ts_language = Language(tree_sitter_typescript.language_typescript())
        self._languages["typescript"] = ts_language
        self._parsers["typescript"] = Parser(ts_language)

        tsx_language = Language(tree_sitter_typescript.language_tsx())
        self._languages["tsx"] = tsx_language
        self._parsers["tsx"] = Parser(tsx_language)

        logger.debug("TypeScript tree-sitter parser initialized")

    def _get_parser(self, grammar: str) -> "Parser":
        """Get the tree-sitter parser for a grammar.

        Raises:
            ParserError: If no parser is available for the grammar.
        """
        if grammar not in self._parsers:
            raise ParserError("No parser available", language=grammar)
        return self._parsers[grammar]

    def parse(self, source_code: str, language: str) -> "Tree":
        """Parse source code into a tree-sitter syntax tree.

        Args:
            source_code: The source code to parse.
            language: Language tag.

        Returns:
            The tree-sitter Tree.

        Raises:
            ParserError: If the language is unsupported, tree-sitter fails, or
                the tree has syntax errors while running in strict mode.
        """
        grammar = self.normalize_language(language)
        if grammar is None or grammar not in self.supported_languages:
            raise ParserError("Unsupported language", language=language)

        # tree-sitter requires bytes; lone surrogates have no UTF-8 form
        try:
            source_bytes = source_code.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ParserError("Source is not valid Unicode text", language=grammar) from e

        # Parser objects are shared; one parse at a time per adapter
        with self._lock:
            self._ensure_initialized()
            parser = self._get_parser(grammar)
            tree = parser.parse(source_bytes)

        if tree is None:
            raise ParserError("tree-sitter failed to parse source", language=grammar)

        if tree.root_node.has_error:
            error_nodes = self._find_error_nodes(tree.root_node)
            first = error_nodes[0] if error_nodes else tree.root_node
            line = first.start_point[0] + 1
            column = first.start_point[1] + 1

            if self.strict:
                raise ParserError("Syntax error", language=grammar, line=line, column=column)

            logger.warning(
                "parse_tree_has_errors",
                language=grammar,
                error_count=len(error_nodes),
                first_line=line,
            )

        return tree

    def _find_error_nodes(self, node: "Node") -> list["Node"]:
        """Find all error nodes in the parse tree.

        Args:
            node: The root node to search from.

        Returns:
            List of nodes representing parsing errors, in document order.
        """
        errors: list[Node] = []
        stack = [node]

        while stack:
            current = stack.pop()
            if current.type == "ERROR" or current.is_missing:
                errors.append(current)
            if current.has_error:
                stack.extend(reversed(current.children))

        return errors

    def get_supported_languages(self) -> list[str]:
        """Get list of grammars this parser handles."""
        return sorted(self.supported_languages)
