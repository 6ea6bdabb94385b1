"""Report model returned by the code understanding engine."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.analysis.dependencies import DependencyGraph
from core.analysis.metrics import ComplexityMetrics
from core.analysis.models import BestPracticeCheck
from core.analysis.patterns import CodePattern
from core.analysis.semantic import SemanticAnalysis
from core.parser.models import CodeStructure


class CodeUnderstanding(BaseModel):
    """Complete analysis report for one source unit.

    The report is a tree of plain values; dependency cycles are stored as
    ``(from_id, to_id)`` pairs rather than references, so the whole report
    serializes to JSON directly.

    Attributes:
        language: Language tag the unit was analyzed as.
        structure: Structural inventory.
        dependencies: Module dependency graph.
        patterns: Detected pattern signatures.
        complexity: Complexity metrics of the whole unit.
        best_practices: Failing best-practice rules.
        semantic_analysis: Intent, domain, concepts and flow listings.
    """

    model_config = ConfigDict(frozen=True)

    language: str = Field(..., description="Language tag")
    structure: CodeStructure = Field(default_factory=CodeStructure, description="Structure")
    dependencies: DependencyGraph = Field(
        default_factory=DependencyGraph,
        description="Dependency graph",
    )
    patterns: list[CodePattern] = Field(default_factory=list, description="Detected patterns")
    complexity: ComplexityMetrics = Field(
        default_factory=ComplexityMetrics,
        description="Complexity metrics",
    )
    best_practices: list[BestPracticeCheck] = Field(
        default_factory=list,
        description="Best-practice findings",
    )
    semantic_analysis: SemanticAnalysis = Field(
        default_factory=SemanticAnalysis,
        description="Semantic summary",
    )

    def to_dict(self) -> dict[str, Any]:
        """Dump the report as JSON-compatible data, edges keyed ``from``/``to``."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: int | None = None) -> str:
        """Serialize the report to a JSON string."""
        return self.model_dump_json(by_alias=True, indent=indent)
