"""Language-specific structure extractors.

This module contains extractors for different grammars. Each extractor knows
how to traverse a tree-sitter tree for its language family and produce a
CodeStructure.

Supported grammars:
    - JavaScript, including JSX (javascript.py)
    - TypeScript and TSX (javascript.py, shared node names)
"""

from .base import BaseExtractor
from .javascript import JavaScriptExtractor

# Registry of grammar extractors
_extractors: dict[str, type[BaseExtractor]] = {
    "javascript": JavaScriptExtractor,
    "typescript": JavaScriptExtractor,
    "tsx": JavaScriptExtractor,
}


def register_extractor(language: str, extractor_class: type[BaseExtractor]) -> None:
    """Register a grammar extractor.

    Args:
        language: Grammar identifier (e.g., 'javascript', 'tsx').
        extractor_class: The extractor class to register.
    """
    _extractors[language.lower()] = extractor_class


def get_extractor(language: str) -> BaseExtractor:
    """Get an extractor instance for the given grammar.

    Args:
        language: Grammar identifier.

    Returns:
        An instance of the appropriate extractor.

    Raises:
        ValueError: If no extractor is registered for the grammar.
    """
    language = language.lower()
    if language not in _extractors:
        raise ValueError(f"No extractor registered for language: {language}")
    return _extractors[language]()


def supported_languages() -> list[str]:
    """Get list of grammars with registered extractors.

    Returns:
        List of supported grammar identifiers.
    """
    return list(_extractors.keys())


__all__ = [
    "BaseExtractor",
    "JavaScriptExtractor",
    "register_extractor",
    "get_extractor",
    "supported_languages",
]
