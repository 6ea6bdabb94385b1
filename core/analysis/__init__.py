"""Code analysis module for CodeSight.

This module provides static analysis capabilities including:
- Complexity metrics (cyclomatic, cognitive, Halstead, maintainability)
- Dependency graph construction
- Pattern detection
- Best-practice checks
- Data flow and semantic summaries
"""

from .dataflow import (
    ControlFlowNode,
    ControlFlowType,
    DataFlowAnalyzer,
    DataFlowNode,
    DataFlowOperation,
    DataFlowOperationType,
)
from .dependencies import (
    DependencyEdge,
    DependencyGraph,
    DependencyGraphBuilder,
    DependencyNode,
    DependencyType,
    EdgeType,
)
from .metrics import ComplexityAnalyzer, ComplexityMetrics, HalsteadMetrics, LinesOfCode
from .models import AnalysisConfig, AnalysisSeverity, BestPracticeCheck
from .patterns import CodePattern, PatternCategory, PatternDefinition, PatternDetector
from .practices import BestPracticeChecker
from .semantic import SemanticAnalysis, SemanticAnalyzer

__all__ = [
    # Models
    "AnalysisConfig",
    "AnalysisSeverity",
    "BestPracticeCheck",
    # Metrics
    "ComplexityAnalyzer",
    "ComplexityMetrics",
    "HalsteadMetrics",
    "LinesOfCode",
    # Dependencies
    "DependencyGraphBuilder",
    "DependencyGraph",
    "DependencyNode",
    "DependencyEdge",
    "DependencyType",
    "EdgeType",
    # Patterns
    "PatternDetector",
    "PatternDefinition",
    "PatternCategory",
    "CodePattern",
    # Best practices
    "BestPracticeChecker",
    # Data flow
    "DataFlowAnalyzer",
    "DataFlowNode",
    "DataFlowOperation",
    "DataFlowOperationType",
    "ControlFlowNode",
    "ControlFlowType",
    # Semantics
    "SemanticAnalyzer",
    "SemanticAnalysis",
]
