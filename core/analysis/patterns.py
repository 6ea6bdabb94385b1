"""Pattern detection for design patterns and framework idioms.

This module flags design-pattern usage from textual and structural
signatures. Each signature has a fixed confidence; a signature that does not
match simply produces no entry.
"""

import re
from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, Field

from core.parser.models import CodeStructure, SourceSpan

logger = structlog.get_logger(__name__)


class PatternCategory(str, Enum):
    """Categories of patterns."""

    DESIGN = "design"
    ARCHITECTURE = "architecture"
    IDIOM = "idiom"


class PatternDefinition(BaseModel):
    """Definition of a pattern signature to detect.

    Attributes:
        id: Unique pattern identifier.
        name: Human-readable pattern name.
        category: Pattern category.
        description: Description of the pattern.
        confidence: Confidence reported when the signature matches.
        any_of: Text markers of which at least one must be present.
        also_any_of: Second group of markers, one of which must also be present.
        all_of: Text markers that must all be present.
        name_keywords: Case-insensitive substrings matched against function
            and method names instead of the text.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Pattern ID")
    name: str = Field(..., description="Pattern name")
    category: PatternCategory = Field(..., description="Category")
    description: str = Field(default="", description="Description")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence")
    any_of: list[str] = Field(default_factory=list, description="At least one marker")
    also_any_of: list[str] = Field(default_factory=list, description="Second marker group")
    all_of: list[str] = Field(default_factory=list, description="Required markers")
    name_keywords: list[str] = Field(default_factory=list, description="Function name keywords")


class CodePattern(BaseModel):
    """A detected pattern in a source unit.

    Attributes:
        name: Pattern name.
        description: What the pattern indicates.
        category: Pattern category.
        confidence: Confidence score (0-1).
        span: Where the signature was found (first matching line or function).
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Pattern name")
    description: str = Field(default="", description="Description")
    category: PatternCategory = Field(..., description="Category")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence")
    span: SourceSpan = Field(default_factory=SourceSpan, description="Location")


class PatternDetector:
    """Detector for design-pattern and idiom signatures."""

    DEFAULT_PATTERNS: list[PatternDefinition] = [
        PatternDefinition(
            id="singleton",
            name="Singleton",
            category=PatternCategory.DESIGN,
            description="Ensures a class has only one instance",
            confidence=0.85,
            any_of=["static instance", "getInstance"],
        ),
        PatternDefinition(
            id="factory",
            name="Factory",
            category=PatternCategory.DESIGN,
            description="Creates objects through a dedicated factory function",
            confidence=0.80,
            name_keywords=["create", "factory"],
        ),
        PatternDefinition(
            id="observer",
            name="Observer",
            category=PatternCategory.DESIGN,
            description="Registers listeners and notifies them of events",
            confidence=0.75,
            any_of=["subscribe", "addEventListener"],
            also_any_of=["notify", "emit"],
        ),
        PatternDefinition(
            id="react_hooks",
            name="React Hooks",
            category=PatternCategory.IDIOM,
            description="Manages state and side effects with React hooks",
            confidence=0.95,
            all_of=["useState", "useEffect"],
        ),
    ]

    def __init__(self, patterns: list[PatternDefinition] | None = None) -> None:
        """Initialize the pattern detector.

        Args:
            patterns: Pattern signatures to detect. Uses defaults if not provided.
        """
        self.patterns = patterns or self.DEFAULT_PATTERNS
        self._logger = logger.bind(component="pattern_detector")

    def detect_patterns(self, source_code: str, structure: CodeStructure) -> list[CodePattern]:
        """Detect pattern signatures in a source unit.

        Args:
            source_code: Source code to analyze.
            structure: Structure extracted from the source.

        Returns:
            One CodePattern per matching signature, in definition order.
        """
        matches: list[CodePattern] = []

        for pattern in self.patterns:
            span = self._match(pattern, source_code, structure)
            if span is None:
                continue
            matches.append(
                CodePattern(
                    name=pattern.name,
                    description=pattern.description,
                    category=pattern.category,
                    confidence=pattern.confidence,
                    span=span,
                )
            )

        if matches:
            self._logger.debug("patterns_detected", patterns=[m.name for m in matches])

        return matches

    def _match(
        self,
        pattern: PatternDefinition,
        source_code: str,
        structure: CodeStructure,
    ) -> SourceSpan | None:
        """Match one signature.

        Args:
            pattern: Pattern to detect.
            source_code: Source code to search.
            structure: Extracted structure.

        Returns:
            Span of the match, or None when the signature does not match.
        """
        if pattern.name_keywords:
            for function in structure.all_functions():
                lowered = function.name.lower()
                if any(keyword in lowered for keyword in pattern.name_keywords):
                    return function.span
            return None

        markers: list[str] = []

        if pattern.any_of:
            found = [m for m in pattern.any_of if m in source_code]
            if not found:
                return None
            markers.extend(found)

        if pattern.also_any_of:
            found = [m for m in pattern.also_any_of if m in source_code]
            if not found:
                return None
            markers.extend(found)

        if pattern.all_of:
            if not all(m in source_code for m in pattern.all_of):
                return None
            markers.extend(pattern.all_of)

        if not markers:
            return None

        line = self._first_line(source_code, markers)
        return SourceSpan(start=line, end=line)

    def _first_line(self, source_code: str, markers: list[str]) -> int:
        """Find the first line containing any of the markers."""
        combined = re.compile("|".join(re.escape(m) for m in markers))
        for index, line in enumerate(source_code.split("\n"), start=1):
            if combined.search(line):
                return index
        return 0
