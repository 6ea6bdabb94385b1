"""Code understanding module for CodeSight.

This module provides the engine that combines structure extraction and every
analyzer into one CodeUnderstanding report, plus an optional result cache.

Example:
    >>> import asyncio
    >>> from core.understanding import CodeUnderstandingEngine
    >>> engine = CodeUnderstandingEngine()
    >>> report = asyncio.run(engine.analyze("const x = 1", "javascript"))
    >>> print(report.complexity.cyclomatic)
"""

from core.understanding.cache import AnalysisCache, fingerprint
from core.understanding.engine import AnalysisInputError, CodeUnderstandingEngine
from core.understanding.models import CodeUnderstanding

__all__ = [
    # Engine
    "CodeUnderstandingEngine",
    "AnalysisInputError",
    # Cache
    "AnalysisCache",
    "fingerprint",
    # Models
    "CodeUnderstanding",
]
