"""Lightweight semantic summary of a source unit.

This module infers the intent and domain of a unit from keyword families,
derives concept words from identifier names, and attaches the data-flow and
control-flow listings produced by DataFlowAnalyzer.
"""

import re

import structlog
from pydantic import BaseModel, ConfigDict, Field

from core.analysis.dataflow import ControlFlowNode, DataFlowAnalyzer, DataFlowNode
from core.parser.models import CodeStructure

logger = structlog.get_logger(__name__)

DEFAULT_INTENT = "general-purpose"
DEFAULT_DOMAIN = "general"

# Checked in order; the first family with a matching marker wins
INTENT_FAMILIES: list[tuple[str, list[str]]] = [
    ("data-fetching", ["fetch", "axios"]),
    ("ui-component", ["useState", "useEffect"]),
    ("api-server", ["express", "app.listen"]),
]

TEST_NAME_MARKERS = ("test", "spec")

DOMAIN_FAMILIES: list[tuple[str, re.Pattern[str]]] = [
    ("frontend", re.compile(r"React|Component")),
    ("backend", re.compile(r"express|koa")),
    ("database", re.compile(r"mongodb|postgres")),
    ("machine-learning", re.compile(r"\bml\b|tensorflow")),
]

CAMEL_BOUNDARY = re.compile(r"(?=[A-Z])")


class SemanticAnalysis(BaseModel):
    """Coarse semantic summary.

    Attributes:
        intent: Inferred purpose of the unit.
        domain: Inferred application domain.
        concepts: Lower-cased words taken from function and class names.
        data_flow: Per-variable access listings.
        control_flow: Branch and loop constructs.
    """

    model_config = ConfigDict(frozen=True)

    intent: str = Field(default=DEFAULT_INTENT, description="Inferred intent")
    domain: str = Field(default=DEFAULT_DOMAIN, description="Inferred domain")
    concepts: list[str] = Field(default_factory=list, description="Concept words")
    data_flow: list[DataFlowNode] = Field(default_factory=list, description="Data flow")
    control_flow: list[ControlFlowNode] = Field(default_factory=list, description="Control flow")


class SemanticAnalyzer:
    """Analyzer producing the semantic summary of a source unit."""

    def __init__(self, dataflow: DataFlowAnalyzer | None = None) -> None:
        """Initialize the semantic analyzer.

        Args:
            dataflow: Analyzer for data-flow and control-flow listings.
        """
        self._dataflow = dataflow or DataFlowAnalyzer()
        self._logger = logger.bind(component="semantic_analyzer")

    def analyze(self, source_code: str, structure: CodeStructure) -> SemanticAnalysis:
        """Produce the semantic summary.

        Args:
            source_code: Source code of the unit.
            structure: Structure extracted from the source.

        Returns:
            SemanticAnalysis object.
        """
        analysis = SemanticAnalysis(
            intent=self.infer_intent(source_code, structure),
            domain=self.infer_domain(source_code),
            concepts=self.extract_concepts(structure),
            data_flow=self._dataflow.analyze_data_flow(source_code, structure),
            control_flow=self._dataflow.analyze_control_flow(source_code),
        )

        self._logger.debug("semantics_inferred", intent=analysis.intent, domain=analysis.domain)
        return analysis

    def infer_intent(self, source_code: str, structure: CodeStructure) -> str:
        """Infer what the unit is for.

        Args:
            source_code: Source code of the unit.
            structure: Extracted structure.

        Returns:
            Intent label, or "general-purpose".
        """
        for intent, markers in INTENT_FAMILIES:
            if any(marker in source_code for marker in markers):
                return intent

        if any(
            marker in function.name
            for function in structure.functions
            for marker in TEST_NAME_MARKERS
        ):
            return "testing"

        return DEFAULT_INTENT

    def infer_domain(self, source_code: str) -> str:
        """Infer the application domain.

        Args:
            source_code: Source code of the unit.

        Returns:
            Domain label, or "general".
        """
        for domain, pattern in DOMAIN_FAMILIES:
            if pattern.search(source_code):
                return domain
        return DEFAULT_DOMAIN

    def extract_concepts(self, structure: CodeStructure) -> list[str]:
        """Split function and class names into concept words.

        Names are split on capitalization boundaries; words longer than two
        characters are kept, lower-cased, in first-seen order. Anonymous
        functions contribute nothing.

        Args:
            structure: Extracted structure.

        Returns:
            Distinct concept words.
        """
        names = [f.name for f in structure.functions if f.name != "anonymous"]
        names.extend(c.name for c in structure.classes)

        concepts: dict[str, None] = {}
        for name in names:
            for word in CAMEL_BOUNDARY.split(name):
                if len(word) > 2:
                    concepts[word.lower()] = None

        return list(concepts)
