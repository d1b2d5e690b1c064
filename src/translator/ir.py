"""Intermediate Representation (IR) for install procedures.

This module defines the portable instruction set an install body is reduced
to. Uses Pydantic for serialization and discriminated unions for polymorphism.

The IR is:
- Fully typed (every variant tagged by a ``type`` literal)
- Serializable to/from JSON
- Immutable once built
- Independent of the recipe language: no blocks, loops or hashes
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

# Method name suffixes for Ruby predicate (`with?`) and bang (`gsub!`) methods
QUERY_SUFFIX = "__q"
BANG_SUFFIX = "__b"
# Appended to plain names that already end in one of the suffixes
ESCAPE_SUFFIX = "__e"


def encode_method_name(name: str) -> str:
    """Map a method name to an identifier-safe form.

    ``with?`` becomes ``with__q`` and ``gsub!`` becomes ``gsub__b``. A plain
    name that already ends in ``__q``, ``__b`` or ``__e`` gets ``__e``
    appended, so ``foo__q`` becomes ``foo__q__e``; other names pass through
    unchanged.
    """
    if name.endswith("?"):
        return name[:-1] + QUERY_SUFFIX
    if name.endswith("!"):
        return name[:-1] + BANG_SUFFIX
    if name.endswith((QUERY_SUFFIX, BANG_SUFFIX, ESCAPE_SUFFIX)):
        return name + ESCAPE_SUFFIX
    return name


def decode_method_name(name: str) -> str:
    """Reverse ``encode_method_name``."""
    if name.endswith(ESCAPE_SUFFIX):
        return name[: -len(ESCAPE_SUFFIX)]
    if name.endswith(QUERY_SUFFIX):
        return name[: -len(QUERY_SUFFIX)] + "?"
    if name.endswith(BANG_SUFFIX):
        return name[: -len(BANG_SUFFIX)] + "!"
    return name


class IRNode(BaseModel):
    """Base for all IR models: frozen, compared structurally."""

    model_config = ConfigDict(frozen=True)


# =============================================================================
# String parts
# =============================================================================


class LiteralText(IRNode):
    """Verbatim text inside a string literal."""

    type: Literal["text"] = "text"
    value: str


class EmbeddedExpr(IRNode):
    """A substitution point (`#{...}`) inside a string literal."""

    type: Literal["embed"] = "embed"
    expr: Expression


StringPart = Annotated[
    LiteralText | EmbeddedExpr,
    Field(discriminator="type"),
]


# =============================================================================
# Expressions
# =============================================================================


class StringLiteral(IRNode):
    type: Literal["string"] = "string"
    parts: list[StringPart] = []


class VarRef(IRNode):
    """Reference to a variable, constant or path helper (`prefix`, `ENV`)."""

    type: Literal["var"] = "var"
    name: str


class BareCall(IRNode):
    """Call without a receiver, e.g. `std_cmake_args`."""

    type: Literal["bare_call"] = "bare_call"
    name: str
    args: list[Expression] = []


class MethodCall(IRNode):
    """Call on a receiver, e.g. `build.head?` or `Formula["x"].opt_lib`."""

    type: Literal["method_call"] = "method_call"
    receiver: Expression
    method: str
    args: list[Expression] = []


class Binary(IRNode):
    """Binary operation; ``op`` is the source operator verbatim."""

    type: Literal["binary"] = "binary"
    op: str
    left: Expression
    right: Expression


class Unary(IRNode):
    type: Literal["unary"] = "unary"
    op: str
    operand: Expression


class ArrayLiteral(IRNode):
    """Array literal. Elements are not translated; only the count is kept."""

    type: Literal["array"] = "array"
    length: int


class Index(IRNode):
    type: Literal["index"] = "index"
    base: Expression
    subscript: Expression


class SymbolLiteral(IRNode):
    type: Literal["symbol"] = "symbol"
    name: str


class IntLiteral(IRNode):
    type: Literal["int"] = "int"
    value: int


class Assign(IRNode):
    type: Literal["assign"] = "assign"
    target: Expression
    value: Expression


class Splat(IRNode):
    """Splatted argument, e.g. `*std_configure_args`."""

    type: Literal["splat"] = "splat"
    value: Expression


# Discriminated union of all expression types
Expression = Annotated[
    StringLiteral
    | VarRef
    | BareCall
    | MethodCall
    | Binary
    | Unary
    | ArrayLiteral
    | Index
    | SymbolLiteral
    | IntLiteral
    | Assign
    | Splat,
    Field(discriminator="type"),
]


# =============================================================================
# Instructions
# =============================================================================


class Command(IRNode):
    """Invocation of a build step, e.g. `system "make"` or `bin.install "foo"`."""

    type: Literal["command"] = "command"
    name: str
    receiver: Expression | None = None
    args: list[Expression] = []


class ConditionalStmt(IRNode):
    """`if`/`unless` block or modifier.

    An `elsif` chain is a nested ConditionalStmt as the only else_branch entry.
    """

    type: Literal["conditional"] = "conditional"
    kind: Literal["if", "unless"]
    cond: Expression
    then_branch: list[Instruction]
    else_branch: list[Instruction] | None = None


class ExpressionStmt(IRNode):
    """An expression evaluated for its effect, e.g. an assignment."""

    type: Literal["expression"] = "expression"
    expr: Expression


# Discriminated union of all instruction types
Instruction = Annotated[
    Command | ConditionalStmt | ExpressionStmt,
    Field(discriminator="type"),
]

# Update forward refs for recursive types
EmbeddedExpr.model_rebuild()
StringLiteral.model_rebuild()
BareCall.model_rebuild()
MethodCall.model_rebuild()
Binary.model_rebuild()
Unary.model_rebuild()
Index.model_rebuild()
Assign.model_rebuild()
Splat.model_rebuild()
Command.model_rebuild()
ConditionalStmt.model_rebuild()
ExpressionStmt.model_rebuild()
