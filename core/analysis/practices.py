"""Best-practice rule checks.

This module evaluates naming, function length, parameter count, error
handling and comment coverage rules against an extracted structure. Only
failing rules produce entries.
"""

import re

import structlog

from core.analysis.models import AnalysisConfig, AnalysisSeverity, BestPracticeCheck
from core.parser.models import CodeStructure, FunctionInfo

logger = structlog.get_logger(__name__)

TRY_TOKEN = re.compile(r"\btry\b")
CATCH_TOKEN = re.compile(r"\bcatch\b")
COMMENT_TOKEN = re.compile(r"//|/\*")


class BestPracticeChecker:
    """Rule engine producing graded best-practice findings."""

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        """Initialize the checker.

        Args:
            config: Rule thresholds.
        """
        self.config = config or AnalysisConfig()
        self._logger = logger.bind(component="best_practice_checker")

    def check(self, source_code: str, structure: CodeStructure) -> list[BestPracticeCheck]:
        """Run every rule against a source unit.

        Args:
            source_code: Source code of the unit.
            structure: Structure extracted from the source.

        Returns:
            Findings for failing rules, grouped by rule.
        """
        lines = source_code.split("\n")
        functions = structure.all_functions()

        checks: list[BestPracticeCheck] = []
        checks.extend(self.check_naming(functions))
        checks.extend(self.check_function_length(functions))
        checks.extend(self.check_parameter_count(functions))
        checks.extend(self.check_error_handling(lines, functions))
        checks.extend(self.check_comment_coverage(lines, functions))

        self._logger.debug("best_practices_checked", functions=len(functions), findings=len(checks))
        return checks

    def check_naming(self, functions: list[FunctionInfo]) -> list[BestPracticeCheck]:
        """Flag function names that are too short to be descriptive."""
        return [
            BestPracticeCheck(
                rule="naming-convention",
                message=f"Function name '{func.name}' is too short; use a descriptive name",
                severity=AnalysisSeverity.WARNING,
                line=func.span.start,
                suggestion="Name the function after what it does, e.g. 'getUserData' "
                "instead of 'get'",
            )
            for func in functions
            if len(func.name) < self.config.min_name_length
            and func.name not in self.config.short_name_allowlist
        ]

    def check_function_length(self, functions: list[FunctionInfo]) -> list[BestPracticeCheck]:
        """Flag functions whose span exceeds the length threshold."""
        return [
            BestPracticeCheck(
                rule="function-length",
                message=f"Function '{func.name}' is too long ({func.span.length} lines)",
                severity=AnalysisSeverity.WARNING,
                line=func.span.start,
                suggestion="Split the function into smaller functions that each do one thing",
            )
            for func in functions
            if func.span.length > self.config.max_function_lines
        ]

    def check_parameter_count(self, functions: list[FunctionInfo]) -> list[BestPracticeCheck]:
        """Flag functions with too many parameters."""
        return [
            BestPracticeCheck(
                rule="parameter-count",
                message=f"Function '{func.name}' has too many parameters ({len(func.params)})",
                severity=AnalysisSeverity.WARNING,
                line=func.span.start,
                suggestion="Pass an options object or split the function",
            )
            for func in functions
            if len(func.params) > self.config.max_parameters
        ]

    def check_error_handling(
        self,
        lines: list[str],
        functions: list[FunctionInfo],
    ) -> list[BestPracticeCheck]:
        """Flag async functions without any try or catch in their body."""
        checks: list[BestPracticeCheck] = []

        for func in functions:
            if not func.is_async:
                continue
            body = self._function_text(lines, func)
            if TRY_TOKEN.search(body) or CATCH_TOKEN.search(body):
                continue
            checks.append(
                BestPracticeCheck(
                    rule="error-handling",
                    message=f"Async function '{func.name}' has no error handling",
                    severity=AnalysisSeverity.ERROR,
                    line=func.span.start,
                    suggestion="Wrap awaited calls in a try/catch block",
                )
            )

        return checks

    def check_comment_coverage(
        self,
        lines: list[str],
        functions: list[FunctionInfo],
    ) -> list[BestPracticeCheck]:
        """Flag units where too few functions carry an adjacent comment."""
        if len(functions) <= self.config.min_functions_for_comment_check:
            return []

        commented = sum(1 for func in functions if self._has_adjacent_comment(lines, func))
        ratio = commented / len(functions)

        if ratio >= self.config.min_comment_ratio:
            return []

        return [
            BestPracticeCheck(
                rule="comment-coverage",
                message=f"Low comment coverage: {commented} of {len(functions)} functions "
                "are commented",
                severity=AnalysisSeverity.INFO,
                suggestion="Document the key functions",
            )
        ]

    def _function_text(self, lines: list[str], func: FunctionInfo) -> str:
        """Get the source lines covered by a function."""
        start = max(func.span.start - 1, 0)
        return "\n".join(lines[start : func.span.end])

    def _has_adjacent_comment(self, lines: list[str], func: FunctionInfo) -> bool:
        """Check for a comment inside the function or on the line above it."""
        if COMMENT_TOKEN.search(self._function_text(lines, func)):
            return True

        above = func.span.start - 2
        if 0 <= above < len(lines):
            stripped = lines[above].strip()
            return stripped.startswith(("//", "/*", "*"))

        return False
