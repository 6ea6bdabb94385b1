"""Data models for code analysis.

This module defines the Pydantic models shared by the analyzers: the rule
configuration, severity levels and best-practice findings.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AnalysisSeverity(str, Enum):
    """Severity levels for best-practice findings."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AnalysisConfig(BaseModel):
    """Thresholds for best-practice rules.

    Attributes:
        min_name_length: Function names shorter than this are flagged.
        short_name_allowlist: Short names that are never flagged.
        max_function_lines: Longest allowed span (end - start) of a function.
        max_parameters: Largest allowed parameter count.
        min_comment_ratio: Minimum share of functions with an adjacent comment.
        min_functions_for_comment_check: The coverage rule only applies to
            units with more functions than this.
    """

    model_config = ConfigDict(frozen=True)

    min_name_length: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Minimum function name length",
    )
    short_name_allowlist: frozenset[str] = Field(
        default=frozenset({"go", "run"}),
        description="Short names exempt from the naming rule",
    )
    max_function_lines: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Maximum function length in lines",
    )
    max_parameters: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Maximum parameter count",
    )
    min_comment_ratio: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Minimum ratio of commented functions",
    )
    min_functions_for_comment_check: int = Field(
        default=5,
        ge=0,
        description="Function count above which comment coverage is checked",
    )


class BestPracticeCheck(BaseModel):
    """One best-practice rule evaluation.

    Attributes:
        rule: Rule identifier (e.g. 'function-length').
        passed: Whether the rule passed.
        message: Human-readable description.
        severity: Severity level.
        line: Line the finding refers to, if any.
        suggestion: Suggested fix or improvement.
    """

    model_config = ConfigDict(frozen=True)

    rule: str = Field(..., description="Rule identifier")
    passed: bool = Field(default=False, description="Whether the rule passed")
    message: str = Field(..., description="Finding description")
    severity: AnalysisSeverity = Field(..., description="Severity level")
    line: int | None = Field(None, ge=0, description="Affected line")
    suggestion: str | None = Field(None, description="Suggested fix")
