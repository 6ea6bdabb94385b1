"""Data flow and control flow listings.

This module produces two coarse listings from source text: per-variable
read/write/modify events for tracked ``let``/``var`` bindings, and one entry
per branch or loop construct. Both are line scans; a line contributes at
most one data-flow event per variable.
"""

import re
from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, Field

from core.parser.models import CodeStructure, SourceSpan, VariableScope

logger = structlog.get_logger(__name__)

IF_KEYWORD = re.compile(r"\bif\b")
ELSE_KEYWORD = re.compile(r"\belse\b")
LOOP_KEYWORD = re.compile(r"\b(?:for|while)\b")
SWITCH_KEYWORD = re.compile(r"\bswitch\b")
CASE_KEYWORD = re.compile(r"\bcase\b")

COMPOUND_OPERATORS = r"(?:\*\*|<<|>>>|>>|&&|\|\||\?\?|[-+*/%&|^])"


class DataFlowOperationType(str, Enum):
    """Kinds of variable access."""

    READ = "read"
    WRITE = "write"
    MODIFY = "modify"


class DataFlowOperation(BaseModel):
    """One access to a tracked variable.

    Attributes:
        type: Kind of access.
        line: Line number of the access.
    """

    model_config = ConfigDict(frozen=True)

    type: DataFlowOperationType = Field(..., description="Access kind")
    line: int = Field(..., ge=1, description="Line number")


class DataFlowNode(BaseModel):
    """Access history of one variable.

    Attributes:
        variable: Variable name.
        operations: Accesses in line order.
        scope: Scope the variable was declared in.
    """

    model_config = ConfigDict(frozen=True)

    variable: str = Field(..., description="Variable name")
    operations: list[DataFlowOperation] = Field(default_factory=list, description="Accesses")
    scope: VariableScope = Field(..., description="Declaration scope")

    def get_writes(self) -> list[DataFlowOperation]:
        """Get all write accesses."""
        return [op for op in self.operations if op.type == DataFlowOperationType.WRITE]

    def get_reads(self) -> list[DataFlowOperation]:
        """Get all read accesses."""
        return [op for op in self.operations if op.type == DataFlowOperationType.READ]


class ControlFlowType(str, Enum):
    """Kinds of control-flow constructs."""

    IF = "if"
    LOOP = "loop"
    SWITCH = "switch"


class ControlFlowNode(BaseModel):
    """A branch or loop construct.

    Attributes:
        type: Construct kind.
        condition: Condition text for ``if`` constructs.
        branches: Number of branches.
        span: Line range of the construct.
    """

    model_config = ConfigDict(frozen=True)

    type: ControlFlowType = Field(..., description="Construct kind")
    condition: str | None = Field(None, description="Condition text")
    branches: int = Field(default=1, ge=0, description="Branch count")
    span: SourceSpan = Field(default_factory=SourceSpan, description="Location")


class DataFlowAnalyzer:
    """Analyzer for coarse data-flow and control-flow listings."""

    def __init__(self) -> None:
        """Initialize the data flow analyzer."""
        self._logger = logger.bind(component="dataflow_analyzer")

    def analyze_data_flow(self, source_code: str, structure: CodeStructure) -> list[DataFlowNode]:
        """Track reads and writes of every ``let``/``var`` variable.

        Args:
            source_code: Source code to scan.
            structure: Structure providing the tracked variables.

        Returns:
            One DataFlowNode per tracked variable.
        """
        lines = source_code.split("\n")
        nodes: list[DataFlowNode] = []

        for variable in structure.variables:
            name = re.escape(variable.name)
            modify = re.compile(
                rf"(?<![\w$.]){name}\s*(?:{COMPOUND_OPERATORS}=|\+\+|--)"
                rf"|(?:\+\+|--)\s*{name}(?![\w$])"
            )
            write = re.compile(rf"(?<![\w$.]){name}\s*=(?![=>])")
            read = re.compile(rf"(?<![\w$]){name}(?![\w$])")

            operations: list[DataFlowOperation] = []
            for index, line in enumerate(lines, start=1):
                if modify.search(line):
                    op_type = DataFlowOperationType.MODIFY
                elif write.search(line):
                    op_type = DataFlowOperationType.WRITE
                elif read.search(line):
                    op_type = DataFlowOperationType.READ
                else:
                    continue
                operations.append(DataFlowOperation(type=op_type, line=index))

            nodes.append(
                DataFlowNode(
                    variable=variable.name,
                    operations=operations,
                    scope=variable.scope,
                )
            )

        return nodes

    def analyze_control_flow(self, source_code: str) -> list[ControlFlowNode]:
        """List the branch and loop constructs of a source unit.

        ``if`` entries have two branches when ``else`` shares the line, loops
        have one, and a ``switch`` has one per ``case`` inside its braces.

        Args:
            source_code: Source code to scan.

        Returns:
            Control-flow entries in line order.
        """
        nodes: list[ControlFlowNode] = []
        offset = 0

        for index, line in enumerate(source_code.split("\n"), start=1):
            if_match = IF_KEYWORD.search(line)
            if if_match:
                nodes.append(
                    ControlFlowNode(
                        type=ControlFlowType.IF,
                        condition=self._condition(line, if_match.end()),
                        branches=2 if ELSE_KEYWORD.search(line) else 1,
                        span=SourceSpan(start=index, end=index),
                    )
                )

            if LOOP_KEYWORD.search(line):
                nodes.append(
                    ControlFlowNode(
                        type=ControlFlowType.LOOP,
                        branches=1,
                        span=SourceSpan(start=index, end=index),
                    )
                )

            switch_match = SWITCH_KEYWORD.search(line)
            if switch_match:
                window_start = offset + switch_match.end()
                window_end = self._block_end(source_code, window_start)
                window = source_code[window_start:window_end]
                end_line = index + window.count("\n")
                nodes.append(
                    ControlFlowNode(
                        type=ControlFlowType.SWITCH,
                        branches=len(CASE_KEYWORD.findall(window)),
                        span=SourceSpan(start=index, end=end_line),
                    )
                )

            offset += len(line) + 1

        return nodes

    def _condition(self, line: str, start: int) -> str | None:
        """Extract the parenthesized condition following a keyword.

        Args:
            line: The source line.
            start: Index just past the keyword.

        Returns:
            Condition text, or None when no balanced parentheses follow.
        """
        open_index = line.find("(", start)
        if open_index == -1 or line[start:open_index].strip():
            return None

        depth = 0
        for position in range(open_index, len(line)):
            char = line[position]
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return line[open_index + 1 : position].strip()

        return None

    def _block_end(self, source_code: str, start: int) -> int:
        """Find the end of the brace-delimited block after ``start``.

        Args:
            source_code: Full source text.
            start: Offset to search from.

        Returns:
            Offset just past the matching closing brace, or the end of the
            text when the block is unterminated.
        """
        open_index = source_code.find("{", start)
        if open_index == -1:
            return len(source_code)

        depth = 0
        for position in range(open_index, len(source_code)):
            char = source_code[position]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return position + 1

        return len(source_code)
