"""Code metrics calculation.

This module computes cyclomatic complexity, cognitive complexity, Halstead
metrics, the maintainability index and a lines-of-code breakdown.

The computations scan raw text with regular expressions rather than the
syntax tree. Tokens inside string literals and comments are therefore
counted too; the numbers are heuristics, not exact counts.
"""

import math
import re

import structlog
from pydantic import BaseModel, ConfigDict, Field

from core.parser.models import FunctionInfo

logger = structlog.get_logger(__name__)

# Each match adds one path to the cyclomatic complexity. "else if" matches
# both the first and second pattern.
CYCLOMATIC_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"if\s*\("),
    re.compile(r"else\s+if\s*\("),
    re.compile(r"\?\s*.*\s*:"),
    re.compile(r"for\s*\("),
    re.compile(r"while\s*\("),
    re.compile(r"case\s+"),
    re.compile(r"catch\s*\("),
    re.compile(r"&&|\|\|"),
]

CONTROL_KEYWORD = re.compile(r"\b(?:if|for|while)\b")

HALSTEAD_OPERATOR = re.compile(r"[+\-*/%=<>!&|^~?:]")
HALSTEAD_OPERAND = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")


class HalsteadMetrics(BaseModel):
    """Halstead size and difficulty metrics.

    Attributes:
        operators: Total operator occurrences.
        operands: Total operand occurrences.
        distinct_operators: Number of distinct operators.
        distinct_operands: Number of distinct operands.
        vocabulary: distinct_operators + distinct_operands.
        length: operators + operands.
        volume: length * log2(vocabulary).
        difficulty: (distinct_operators / 2) * (operands / distinct_operands).
        effort: difficulty * volume.
        time: Estimated seconds to write (effort / 18).
        bugs: Estimated delivered bugs (volume / 3000).
    """

    model_config = ConfigDict(frozen=True)

    operators: int = Field(default=0, ge=0, description="Operator count")
    operands: int = Field(default=0, ge=0, description="Operand count")
    distinct_operators: int = Field(default=0, ge=0, description="Distinct operators")
    distinct_operands: int = Field(default=0, ge=0, description="Distinct operands")
    vocabulary: int = Field(default=0, ge=0, description="Vocabulary")
    length: int = Field(default=0, ge=0, description="Program length")
    volume: float = Field(default=0.0, ge=0.0, description="Volume")
    difficulty: float = Field(default=0.0, ge=0.0, description="Difficulty")
    effort: float = Field(default=0.0, ge=0.0, description="Effort")
    time: float = Field(default=0.0, ge=0.0, description="Time in seconds")
    bugs: float = Field(default=0.0, ge=0.0, description="Estimated bugs")


class LinesOfCode(BaseModel):
    """Lines-of-code breakdown.

    Attributes:
        total: Total lines.
        source: Non-blank lines that are not comment-only.
        comments: Comment lines (``//``, ``/*`` and block-comment bodies).
        blank: Blank lines.
    """

    model_config = ConfigDict(frozen=True)

    total: int = Field(default=0, ge=0, description="Total lines")
    source: int = Field(default=0, ge=0, description="Source lines")
    comments: int = Field(default=0, ge=0, description="Comment lines")
    blank: int = Field(default=0, ge=0, description="Blank lines")


class ComplexityMetrics(BaseModel):
    """Complexity summary for a source unit.

    Attributes:
        cyclomatic: Cyclomatic complexity (decision points + 1).
        cognitive: Cognitive complexity (nesting-weighted control flow).
        halstead: Halstead metrics.
        maintainability_index: Maintainability score (0-100).
        lines_of_code: Lines-of-code breakdown.
    """

    model_config = ConfigDict(frozen=True)

    cyclomatic: int = Field(default=1, ge=1, description="Cyclomatic complexity")
    cognitive: int = Field(default=0, ge=0, description="Cognitive complexity")
    halstead: HalsteadMetrics = Field(
        default_factory=HalsteadMetrics,
        description="Halstead metrics",
    )
    maintainability_index: int = Field(
        default=100, ge=0, le=100, description="Maintainability index"
    )
    lines_of_code: LinesOfCode = Field(
        default_factory=LinesOfCode,
        description="Lines of code breakdown",
    )


class ComplexityAnalyzer:
    """Calculator for complexity metrics.

    All methods are pure functions of their inputs; the analyzer holds no
    state beyond its logger.
    """

    def __init__(self) -> None:
        """Initialize the complexity analyzer."""
        self._logger = logger.bind(component="complexity_analyzer")

    def calculate_cyclomatic_complexity(self, source_code: str) -> int:
        """Calculate cyclomatic complexity from source text.

        Starts at 1 and adds one for each ``if``, ``else if``, ternary,
        ``for``, ``while``, ``case``, ``catch`` and each ``&&``/``||``.

        Args:
            source_code: The source code to analyze.

        Returns:
            Cyclomatic complexity score (minimum 1).
        """
        complexity = 1

        for pattern in CYCLOMATIC_PATTERNS:
            complexity += len(pattern.findall(source_code))

        return complexity

    def calculate_cognitive_complexity(self, source_code: str) -> int:
        """Calculate cognitive complexity from source text.

        Each line with an ``if``/``for``/``while`` keyword adds one plus the
        current nesting level. A brace opened after the keyword nests
        deeper, a closing brace unnests; the level never drops below zero.

        Args:
            source_code: The source code to analyze.

        Returns:
            Cognitive complexity score.
        """
        complexity = 0
        nesting_level = 0

        for line in source_code.split("\n"):
            match = CONTROL_KEYWORD.search(line)
            if match:
                complexity += 1 + nesting_level
                if "{" in line[match.end() :]:
                    nesting_level += 1
            if "}" in line:
                nesting_level = max(0, nesting_level - 1)

        return complexity

    def calculate_halstead_metrics(self, source_code: str) -> HalsteadMetrics:
        """Calculate Halstead metrics from source text.

        Args:
            source_code: The source code to analyze.

        Returns:
            HalsteadMetrics object.
        """
        operator_tokens = HALSTEAD_OPERATOR.findall(source_code)
        operand_tokens = HALSTEAD_OPERAND.findall(source_code)

        operators = len(operator_tokens)
        operands = len(operand_tokens)
        distinct_operators = len(set(operator_tokens))
        distinct_operands = len(set(operand_tokens))

        vocabulary = distinct_operators + distinct_operands
        length = operators + operands
        volume = length * math.log2(vocabulary or 1)
        difficulty = (distinct_operators / 2) * (operands / (distinct_operands or 1))
        effort = difficulty * volume

        return HalsteadMetrics(
            operators=operators,
            operands=operands,
            distinct_operators=distinct_operators,
            distinct_operands=distinct_operands,
            vocabulary=vocabulary,
            length=length,
            volume=volume,
            difficulty=difficulty,
            effort=effort,
            time=effort / 18,
            bugs=volume / 3000,
        )

    def calculate_maintainability_index(
        self,
        volume: float,
        cyclomatic: int,
        source_lines: int,
    ) -> int:
        """Calculate the maintainability index.

        Based on the Microsoft Visual Studio formula:
        MI = MAX(0, (171 - 5.2 * ln(V) - 0.23 * G - 16.2 * ln(L)) * 100 / 171)

        Args:
            volume: Halstead volume (V).
            cyclomatic: Cyclomatic complexity (G).
            source_lines: Source lines of code (L).

        Returns:
            Maintainability index rounded to an integer in [0, 100].
        """
        mi = (
            171
            - 5.2 * math.log(volume or 1)
            - 0.23 * cyclomatic
            - 16.2 * math.log(source_lines or 1)
        ) * 100 / 171

        mi = max(0.0, min(100.0, mi))
        return math.floor(mi + 0.5)

    def calculate_lines_of_code(self, source_code: str) -> LinesOfCode:
        """Calculate the lines-of-code breakdown.

        Args:
            source_code: The source code to analyze.

        Returns:
            LinesOfCode where total == source + comments + blank.
        """
        source = 0
        comments = 0
        blank = 0
        in_block_comment = False

        lines = source_code.split("\n")

        for line in lines:
            stripped = line.strip()

            if not stripped:
                blank += 1
                continue

            if in_block_comment:
                comments += 1
                if "*/" in stripped:
                    in_block_comment = False
                continue

            if stripped.startswith("//"):
                comments += 1
                continue

            if stripped.startswith("/*"):
                comments += 1
                if "*/" not in stripped[2:]:
                    in_block_comment = True
                continue

            source += 1

        return LinesOfCode(total=len(lines), source=source, comments=comments, blank=blank)

    def analyze(self, source_code: str) -> ComplexityMetrics:
        """Calculate all complexity metrics for source text.

        Args:
            source_code: The source code to analyze.

        Returns:
            ComplexityMetrics object.
        """
        lines_of_code = self.calculate_lines_of_code(source_code)
        cyclomatic = self.calculate_cyclomatic_complexity(source_code)
        halstead = self.calculate_halstead_metrics(source_code)

        metrics = ComplexityMetrics(
            cyclomatic=cyclomatic,
            cognitive=self.calculate_cognitive_complexity(source_code),
            halstead=halstead,
            maintainability_index=self.calculate_maintainability_index(
                halstead.volume, cyclomatic, lines_of_code.source
            ),
            lines_of_code=lines_of_code,
        )

        self._logger.debug(
            "complexity_calculated",
            cyclomatic=metrics.cyclomatic,
            cognitive=metrics.cognitive,
            maintainability_index=metrics.maintainability_index,
        )
        return metrics

    def analyze_function(self, source_code: str, function: FunctionInfo) -> ComplexityMetrics:
        """Calculate complexity metrics over a single function's lines.

        Args:
            source_code: Full source text of the unit.
            function: The function whose span is measured.

        Returns:
            ComplexityMetrics for the function text.
        """
        lines = source_code.split("\n")
        start = max(function.span.start - 1, 0)
        return self.analyze("\n".join(lines[start : function.span.end]))

    def identity(self, source_code: str) -> ComplexityMetrics:
        """Metrics for a unit whose language has no parser adapter.

        Cyclomatic is 1, cognitive 0, Halstead all zero; only the line
        counts and the maintainability index derived from them are computed.

        Args:
            source_code: The source code.

        Returns:
            ComplexityMetrics at identity values.
        """
        lines_of_code = self.calculate_lines_of_code(source_code)

        return ComplexityMetrics(
            cyclomatic=1,
            cognitive=0,
            halstead=HalsteadMetrics(),
            maintainability_index=self.calculate_maintainability_index(
                0.0, 1, lines_of_code.source
            ),
            lines_of_code=lines_of_code,
        )
