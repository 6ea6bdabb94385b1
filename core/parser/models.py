"""Pydantic models for the structural inventory of a source unit.

This module defines the data models produced by structure extraction:
functions, classes, imports, exports, variables and constants, each with
source-span metadata. All models are frozen so a returned structure can be
shared between analyzers without defensive copies.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SourceSpan(BaseModel):
    """Line range of a node (1-indexed, inclusive).

    Attributes:
        start: First line of the node.
        end: Last line of the node.
    """

    model_config = ConfigDict(frozen=True)

    start: int = Field(default=0, ge=0, description="Starting line number")
    end: int = Field(default=0, ge=0, description="Ending line number")

    @model_validator(mode="after")
    def _check_order(self) -> "SourceSpan":
        if self.start > self.end:
            raise ValueError(f"span start {self.start} is after end {self.end}")
        return self

    @property
    def length(self) -> int:
        """Number of lines between start and end."""
        return self.end - self.start

    def contains(self, other: "SourceSpan") -> bool:
        """Check whether another span nests within this one."""
        return self.start <= other.start and other.end <= self.end


class FunctionInfo(BaseModel):
    """A function, method, arrow function or function expression.

    Attributes:
        name: Bound name, or "anonymous" when the function is unbound.
        params: Parameter identifiers (pattern text for destructuring).
        return_type: Return type annotation text (TypeScript only).
        is_async: Whether the function is declared async.
        is_arrow: Whether the function is an arrow function.
        span: Line range of the function.
        complexity: Cyclomatic complexity of the function's subtree.
        calls: Distinct callee names, in first-seen order.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Function name")
    params: list[str] = Field(default_factory=list, description="Parameter names")
    return_type: str | None = Field(None, description="Return type annotation")
    is_async: bool = Field(False, description="Whether function is async")
    is_arrow: bool = Field(False, description="Whether function is an arrow function")
    span: SourceSpan = Field(default_factory=SourceSpan, description="Line range")
    complexity: int = Field(default=1, ge=1, description="Cyclomatic complexity")
    calls: list[str] = Field(default_factory=list, description="Called function names")


class ClassInfo(BaseModel):
    """A class declaration.

    Attributes:
        name: Class name.
        extends: Superclass name if the class extends one.
        implements: Implemented interface names (TypeScript).
        methods: Methods declared in the class body.
        properties: Field names declared in the class body.
        span: Line range of the class.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Class name")
    extends: str | None = Field(None, description="Superclass name")
    implements: list[str] = Field(default_factory=list, description="Implemented interfaces")
    methods: list[FunctionInfo] = Field(default_factory=list, description="Class methods")
    properties: list[str] = Field(default_factory=list, description="Class fields")
    span: SourceSpan = Field(default_factory=SourceSpan, description="Line range")


class ImportBinding(BaseModel):
    """A single name bound by an import.

    Attributes:
        name: Name exported by the source module ("default" or "*" for
            default and namespace imports).
        alias: Local binding name when it differs from ``name``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Imported name")
    alias: str | None = Field(None, description="Local alias if renamed")


class ImportInfo(BaseModel):
    """A module boundary fact: one import statement or call.

    Attributes:
        source: Module specifier string.
        bindings: Names bound by the import.
        is_default: Whether a default import binding is present.
        is_dynamic: Whether this is a dynamic ``import()`` call.
        is_require: Whether this is a CommonJS ``require()`` call.
        line: Line of the import.
    """

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., min_length=1, description="Module specifier")
    bindings: list[ImportBinding] = Field(default_factory=list, description="Imported bindings")
    is_default: bool = Field(False, description="Has a default import")
    is_dynamic: bool = Field(False, description="Dynamic import() call")
    is_require: bool = Field(False, description="CommonJS require() call")
    line: int = Field(default=0, ge=0, description="Line number")


class ExportKind(str, Enum):
    """Kinds of exported declarations."""

    FUNCTION = "function"
    CLASS = "class"
    VARIABLE = "variable"
    CONST = "const"


class ExportInfo(BaseModel):
    """An exported name.

    Attributes:
        name: Exported name ("default" for anonymous default exports).
        is_default: Whether this is the default export.
        kind: Kind of the exported declaration.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Exported name")
    is_default: bool = Field(False, description="Default export")
    kind: ExportKind = Field(..., description="Exported declaration kind")


class VariableScope(str, Enum):
    """Scope a mutable binding was declared in."""

    GLOBAL = "global"
    FUNCTION = "function"
    BLOCK = "block"


class VariableInfo(BaseModel):
    """A ``let`` or ``var`` binding.

    Attributes:
        name: Variable name.
        kind: Declaration keyword.
        scope: Inferred scope of the declaration.
        reassigned: Whether any assignment or update targets the name.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Variable name")
    kind: Literal["let", "var"] = Field(..., description="Declaration keyword")
    scope: VariableScope = Field(..., description="Declaration scope")
    reassigned: bool = Field(False, description="Reassigned after declaration")


class LiteralValue(BaseModel):
    """A constant initializer whose value is a plain literal."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["literal"] = "literal"
    value: str | bool | int | float


class UnknownValue(BaseModel):
    """A constant initializer too complex to evaluate."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unknown"] = "unknown"


ConstantValue = Annotated[LiteralValue | UnknownValue, Field(discriminator="kind")]


class ConstantInfo(BaseModel):
    """A top-level ``const`` binding.

    Attributes:
        name: Constant name.
        value: Literal value, or unknown for anything non-trivial.
        type: Inferred primitive or collection type.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Constant name")
    value: ConstantValue = Field(default_factory=UnknownValue, description="Initializer value")
    type: Literal["string", "number", "boolean", "array", "object", "function", "unknown"] = (
        Field("unknown", description="Inferred type")
    )


class CodeStructure(BaseModel):
    """Structural inventory of one source unit.

    Attributes:
        functions: Functions outside class bodies, in source order.
        classes: Class declarations.
        imports: Static imports, dynamic imports and require() calls.
        exports: Exported names.
        variables: ``let``/``var`` bindings.
        constants: Top-level ``const`` bindings.
    """

    model_config = ConfigDict(frozen=True)

    functions: list[FunctionInfo] = Field(default_factory=list, description="Functions")
    classes: list[ClassInfo] = Field(default_factory=list, description="Classes")
    imports: list[ImportInfo] = Field(default_factory=list, description="Imports")
    exports: list[ExportInfo] = Field(default_factory=list, description="Exports")
    variables: list[VariableInfo] = Field(default_factory=list, description="Variables")
    constants: list[ConstantInfo] = Field(default_factory=list, description="Constants")

    @classmethod
    def empty(cls) -> "CodeStructure":
        """Create a structure with every sequence empty."""
        return cls()

    def all_functions(self) -> list[FunctionInfo]:
        """Get top-level functions followed by every class method."""
        methods = [method for cls in self.classes for method in cls.methods]
        return [*self.functions, *methods]
