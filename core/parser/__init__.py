"""Parser module for source code parsing and structure extraction.

This module provides tree-sitter based parsing for the JavaScript family of
languages, extracting functions, classes, imports, exports, variables and
constants into structured Pydantic models.

Example:
    >>> from core.parser import StructureExtractor
    >>> extractor = StructureExtractor()
    >>> structure = extractor.extract("function add(a, b) { return a + b }", "javascript")
    >>> print(structure.functions[0].name)
"""

from .base import BaseParser, ParserError
from .models import (
    ClassInfo,
    CodeStructure,
    ConstantInfo,
    ExportInfo,
    ExportKind,
    FunctionInfo,
    ImportBinding,
    ImportInfo,
    LiteralValue,
    SourceSpan,
    UnknownValue,
    VariableInfo,
    VariableScope,
)
from .structure import StructureExtractor
from .tree_sitter import TreeSitterParser

__all__ = [
    # Base classes
    "BaseParser",
    "ParserError",
    # Parser implementations
    "TreeSitterParser",
    "StructureExtractor",
    # Structure models
    "CodeStructure",
    "FunctionInfo",
    "ClassInfo",
    "ImportInfo",
    "ImportBinding",
    "ExportInfo",
    "ExportKind",
    "VariableInfo",
    "VariableScope",
    "ConstantInfo",
    # Supporting models
    "SourceSpan",
    "LiteralValue",
    "UnknownValue",
]
