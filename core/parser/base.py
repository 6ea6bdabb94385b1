"""Abstract base parser interface.

This module defines the abstract base class that parser adapters must
implement. A parser turns source text into a traversable syntax tree; entity
extraction happens afterwards in the language extractors.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tree_sitter import Tree


# Caller-facing language tags mapped to the grammar that parses them
LANGUAGE_ALIASES: dict[str, str] = {
    "javascript": "javascript",
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "node": "javascript",
    "typescript": "typescript",
    "ts": "typescript",
    "mts": "typescript",
    "cts": "typescript",
    "tsx": "tsx",
    "react": "tsx",
}


class BaseParser(ABC):
    """Abstract base class for source code parsers.

    Attributes:
        supported_languages: Set of grammar identifiers this parser supports.
    """

    supported_languages: set[str] = set()

    @abstractmethod
    def parse(self, source_code: str, language: str) -> "Tree":
        """Parse source code into a syntax tree.

        Args:
            source_code: The source code to parse.
            language: Language tag (aliases such as 'ts' or 'react' accepted).

        Returns:
            The parsed syntax tree.

        Raises:
            ParserError: If the language is unsupported or parsing fails.
        """
        ...

    def supports_language(self, language: str) -> bool:
        """Check if this parser supports the given language tag.

        Args:
            language: Language tag to check (e.g., 'javascript', 'ts').

        Returns:
            True if the language is supported, False otherwise.
        """
        grammar = self.normalize_language(language)
        return grammar is not None and grammar in self.supported_languages

    @staticmethod
    def normalize_language(language: str) -> str | None:
        """Map a language tag to its grammar identifier.

        Args:
            language: Language tag, case-insensitive.

        Returns:
            Grammar identifier if the tag is known, None otherwise.
        """
        return LANGUAGE_ALIASES.get(language.strip().lower())


class ParserError(Exception):
    """Exception raised for parser errors.

    Attributes:
        message: Explanation of the error.
        language: Language tag being parsed when the error occurred.
        line: Line number where error occurred, if known.
        column: Column number where error occurred, if known.
    """

    def __init__(
        self,
        message: str,
        language: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize the ParserError.

        Args:
            message: Explanation of the error.
            language: Language tag being parsed.
            line: Line number where error occurred.
            column: Column number where error occurred.
        """
        self.message = message
        self.language = language
        self.line = line
        self.column = column

        details = []
        if language:
            details.append(f"language={language}")
        if line is not None:
            details.append(f"line={line}")
        if column is not None:
            details.append(f"column={column}")

        full_message = f"{message} ({', '.join(details)})" if details else message

        super().__init__(full_message)
