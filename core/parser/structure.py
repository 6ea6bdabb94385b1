"""Structure extraction with graceful degradation.

StructureExtractor combines the parser adapter and the language extractors.
It never raises to its caller: unsupported languages, syntax errors and
extractor failures all degrade to an empty CodeStructure plus a logged
diagnostic.
"""

import structlog

from core.config import get_settings

from .base import BaseParser, ParserError
from .languages import get_extractor
from .models import CodeStructure
from .tree_sitter import TreeSitterParser

logger = structlog.get_logger(__name__)


class StructureExtractor:
    """Produce the CodeStructure of a source unit in one traversal."""

    def __init__(self, parser: BaseParser | None = None) -> None:
        """Initialize the structure extractor.

        Args:
            parser: Parser adapter. Defaults to a TreeSitterParser honouring
                the ``strict_syntax`` setting.
        """
        self._parser = parser or TreeSitterParser(strict=get_settings().strict_syntax)
        self._logger = logger.bind(component="structure_extractor")

    def supports(self, language: str) -> bool:
        """Check whether a language tag has a parser adapter."""
        return self._parser.supports_language(language)

    def extract(self, source_code: str, language: str) -> CodeStructure:
        """Extract the structural inventory of a source unit.

        Args:
            source_code: The source code to analyze.
            language: Language tag.

        Returns:
            The extracted structure, or an empty structure if the language is
            unsupported or parsing fails.
        """
        grammar = self._parser.normalize_language(language)
        if grammar is None or not self._parser.supports_language(grammar):
            self._logger.debug("unsupported_language", language=language)
            return CodeStructure.empty()

        try:
            tree = self._parser.parse(source_code, grammar)
            return get_extractor(grammar).extract_structure(tree, source_code)
        except ParserError as e:
            self._logger.warning(
                "parse_failed",
                language=grammar,
                error=e.message,
                line=e.line,
                column=e.column,
            )
        except Exception as e:
            # Extractor bugs degrade the same way as parse failures
            self._logger.exception("structure_extraction_failed", language=grammar, error=str(e))

        return CodeStructure.empty()
