"""Code understanding engine.

This module provides CodeUnderstandingEngine, the single entry point that
turns source text and a language tag into a CodeUnderstanding report. One
parse produces the structure; the metric, dependency, pattern, practice and
semantic analyzers then run independently over the structure and the raw
text.
"""

import asyncio
import time

import structlog

from core.analysis.dependencies import DependencyGraphBuilder
from core.analysis.metrics import ComplexityAnalyzer
from core.analysis.models import AnalysisConfig
from core.analysis.patterns import PatternDetector
from core.analysis.practices import BestPracticeChecker
from core.analysis.semantic import SemanticAnalysis, SemanticAnalyzer
from core.config import Settings, get_settings
from core.parser.base import BaseParser
from core.parser.models import CodeStructure
from core.parser.structure import StructureExtractor
from core.parser.tree_sitter import TreeSitterParser

from .cache import AnalysisCache
from .models import CodeUnderstanding

logger = structlog.get_logger(__name__)


class AnalysisInputError(ValueError):
    """Raised when the engine is called with invalid arguments."""


class CodeUnderstandingEngine:
    """Engine producing CodeUnderstanding reports.

    The engine holds no per-call state, so one instance can serve any number
    of concurrent callers. Attach an AnalysisCache to compute each distinct
    input at most once.
    """

    def __init__(
        self,
        parser: BaseParser | None = None,
        config: AnalysisConfig | None = None,
        cache: AnalysisCache | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            parser: Parser adapter used for structure extraction.
            config: Best-practice thresholds.
            cache: Optional result cache.
        """
        self.config = config or AnalysisConfig()
        self.cache = cache
        self._structure = StructureExtractor(parser)
        self._complexity = ComplexityAnalyzer()
        self._dependencies = DependencyGraphBuilder()
        self._patterns = PatternDetector()
        self._practices = BestPracticeChecker(self.config)
        self._semantics = SemanticAnalyzer()
        self._logger = logger.bind(component="code_understanding_engine")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CodeUnderstandingEngine":
        """Build an engine configured from application settings.

        Args:
            settings: Settings to use. Defaults to the cached environment settings.

        Returns:
            Engine with a parser honouring ``strict_syntax`` and, when
            ``cache_enabled`` is set, a cache of ``cache_max_entries`` reports.
        """
        settings = settings or get_settings()
        cache = AnalysisCache(settings.cache_max_entries) if settings.cache_enabled else None
        return cls(parser=TreeSitterParser(strict=settings.strict_syntax), cache=cache)

    async def analyze(self, source_code: str, language: str) -> CodeUnderstanding:
        """Analyze a source unit.

        The computation runs in a worker thread so the event loop stays
        responsive; with a cache attached, concurrent calls for the same input
        share a single computation.

        Args:
            source_code: Source text to analyze.
            language: Language tag (e.g. 'javascript', 'ts', 'tsx').

        Returns:
            The analysis report.

        Raises:
            AnalysisInputError: If source_code or language is not a string.
        """
        self._validate(source_code, language)

        if self.cache is None:
            return await asyncio.to_thread(self.build_report, source_code, language)

        return await self.cache.get_or_compute(
            language,
            source_code,
            lambda: asyncio.to_thread(self.build_report, source_code, language),
        )

    def build_report(self, source_code: str, language: str) -> CodeUnderstanding:
        """Analyze a source unit synchronously.

        Args:
            source_code: Source text to analyze.
            language: Language tag.

        Returns:
            The analysis report. Unsupported languages get a minimal report:
            empty structure and identity metrics.

        Raises:
            AnalysisInputError: If source_code or language is not a string.
        """
        self._validate(source_code, language)
        start_time = time.perf_counter()

        if not self._structure.supports(language):
            self._logger.info("unsupported_language", language=language)
            return self._minimal_report(source_code, language)

        structure = self._structure.extract(source_code, language)

        report = CodeUnderstanding(
            language=language,
            structure=structure,
            dependencies=self._dependencies.build(structure.imports),
            patterns=self._patterns.detect_patterns(source_code, structure),
            complexity=self._complexity.analyze(source_code),
            best_practices=self._practices.check(source_code, structure),
            semantic_analysis=self._semantics.analyze(source_code, structure),
        )

        self._logger.info(
            "analysis_completed",
            language=language,
            functions=len(structure.functions),
            classes=len(structure.classes),
            imports=len(structure.imports),
            findings=len(report.best_practices),
            elapsed_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return report

    def _minimal_report(self, source_code: str, language: str) -> CodeUnderstanding:
        """Build the report for a language without a parser adapter."""
        structure = CodeStructure.empty()
        return CodeUnderstanding(
            language=language,
            structure=structure,
            dependencies=self._dependencies.build(structure.imports),
            complexity=self._complexity.identity(source_code),
            semantic_analysis=SemanticAnalysis(),
        )

    def _validate(self, source_code: object, language: object) -> None:
        """Reject caller misuse before any analysis runs."""
        if not isinstance(source_code, str):
            raise AnalysisInputError(
                f"source_code must be a string, got {type(source_code).__name__}"
            )
        if not isinstance(language, str):
            raise AnalysisInputError(f"language must be a string, got {type(language).__name__}")
