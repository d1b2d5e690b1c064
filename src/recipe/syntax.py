"""Syntax tree for recipe source files.

Node kinds are named after the node types of Ruby's own parser (``command``,
``command_call``, ``vcall``, ``aref``, ``if_mod``, ...) so that error messages
and the translator speak the vocabulary recipe authors can look up.

Nodes are frozen dataclasses. Source positions are excluded from equality so
that two trees parsed from sources differing only in layout compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Union


@dataclass(frozen=True)
class Node:
    """Base class for all syntax nodes."""

    kind: ClassVar[str] = "node"

    line: int = field(default=0, kw_only=True, compare=False)
    column: int = field(default=0, kw_only=True, compare=False)

    @property
    def node_kind(self) -> str:
        return self.kind


# =============================================================================
# Definitions
# =============================================================================


@dataclass(frozen=True)
class Program(Node):
    kind: ClassVar[str] = "program"

    body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class ClassDef(Node):
    kind: ClassVar[str] = "class"

    name: str = ""
    superclass: Node | None = None
    body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class ModuleDef(Node):
    kind: ClassVar[str] = "module"

    name: str = ""
    body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class MethodDef(Node):
    kind: ClassVar[str] = "def"

    name: str = ""
    params: tuple[str, ...] = ()
    body: tuple[Node, ...] = ()
    singleton: bool = False


# =============================================================================
# Calls and references
# =============================================================================


@dataclass(frozen=True)
class Block(Node):
    """A `do ... end` or `{ ... }` block attached to a call."""

    kind: ClassVar[str] = "block"

    params: tuple[str, ...] = ()
    body: tuple[Node, ...] = ()
    brace: bool = False

    @property
    def node_kind(self) -> str:
        return "brace_block" if self.brace else "do_block"


@dataclass(frozen=True)
class Call(Node):
    """A method invocation.

    Ruby's parser gives the same invocation different node types depending
    on how it is written; ``node_kind`` reproduces that classification.
    """

    kind: ClassVar[str] = "call"

    name: str = ""
    receiver: Node | None = None
    args: tuple[Node, ...] = ()
    block: Block | None = None
    parens: bool = False

    @property
    def node_kind(self) -> str:
        if self.block is not None:
            return "method_add_block"
        if self.receiver is None:
            if self.parens:
                return "fcall"
            return "command" if self.args else "vcall"
        if self.args and not self.parens:
            return "command_call"
        return "call"


@dataclass(frozen=True)
class KeywordCall(Node):
    """`yield` and `super` invocations."""

    kind: ClassVar[str] = "keyword_call"

    keyword: str = ""
    args: tuple[Node, ...] = ()

    @property
    def node_kind(self) -> str:
        return self.keyword


@dataclass(frozen=True)
class VarRef(Node):
    """Local variable, constant, instance/global variable or `self`/`nil`/`true`/`false`."""

    kind: ClassVar[str] = "var_ref"

    name: str = ""


@dataclass(frozen=True)
class ConstPath(Node):
    kind: ClassVar[str] = "const_path_ref"

    scope: Node | None = None
    name: str = ""

    @property
    def node_kind(self) -> str:
        return "top_const_ref" if self.scope is None else self.kind


# =============================================================================
# Literals
# =============================================================================


@dataclass(frozen=True)
class Interpolation(Node):
    """A `#{...}` segment of a string literal."""

    kind: ClassVar[str] = "string_embexpr"

    body: tuple[Node, ...] = ()


StringPart = Union[str, Interpolation]


@dataclass(frozen=True)
class StringLit(Node):
    kind: ClassVar[str] = "string_literal"

    parts: tuple[StringPart, ...] = ()

    @property
    def is_plain(self) -> bool:
        return all(isinstance(part, str) for part in self.parts)

    @property
    def text(self) -> str:
        return "".join(part for part in self.parts if isinstance(part, str))


@dataclass(frozen=True)
class XStringLit(Node):
    kind: ClassVar[str] = "xstring_literal"

    parts: tuple[StringPart, ...] = ()


@dataclass(frozen=True)
class SymbolLit(Node):
    kind: ClassVar[str] = "symbol_literal"

    name: str = ""


@dataclass(frozen=True)
class RegexpLit(Node):
    kind: ClassVar[str] = "regexp_literal"

    source: str = ""
    flags: str = ""


@dataclass(frozen=True)
class IntLit(Node):
    kind: ClassVar[str] = "int"

    value: int = 0


@dataclass(frozen=True)
class FloatLit(Node):
    kind: ClassVar[str] = "float"

    value: float = 0.0


@dataclass(frozen=True)
class ArrayLit(Node):
    kind: ClassVar[str] = "array"

    elements: tuple[Node, ...] = ()


@dataclass(frozen=True)
class HashLit(Node):
    """Hash literal; ``braces`` is False for trailing `key => value` arguments."""

    kind: ClassVar[str] = "hash"

    pairs: tuple[tuple[Node, Node], ...] = ()
    braces: bool = True

    @property
    def node_kind(self) -> str:
        return self.kind if self.braces else "bare_assoc_hash"


@dataclass(frozen=True)
class RangeLit(Node):
    kind: ClassVar[str] = "dot2"

    low: Node | None = None
    high: Node | None = None
    exclusive: bool = False

    @property
    def node_kind(self) -> str:
        return "dot3" if self.exclusive else "dot2"


# =============================================================================
# Operators
# =============================================================================


@dataclass(frozen=True)
class Splat(Node):
    kind: ClassVar[str] = "splat"

    value: Node | None = None
    double: bool = False

    @property
    def node_kind(self) -> str:
        return "double_splat" if self.double else self.kind


@dataclass(frozen=True)
class BlockPass(Node):
    kind: ClassVar[str] = "block_pass"

    value: Node | None = None


@dataclass(frozen=True)
class Binary(Node):
    kind: ClassVar[str] = "binary"

    op: str = ""
    left: Node | None = None
    right: Node | None = None


@dataclass(frozen=True)
class Unary(Node):
    kind: ClassVar[str] = "unary"

    op: str = ""
    operand: Node | None = None


@dataclass(frozen=True)
class Index(Node):
    kind: ClassVar[str] = "aref"

    base: Node | None = None
    args: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Assign(Node):
    kind: ClassVar[str] = "assign"

    target: Node | None = None
    value: Node | None = None


@dataclass(frozen=True)
class OpAssign(Node):
    kind: ClassVar[str] = "opassign"

    target: Node | None = None
    op: str = ""
    value: Node | None = None


@dataclass(frozen=True)
class Paren(Node):
    kind: ClassVar[str] = "paren"

    body: tuple[Node, ...] = ()


# =============================================================================
# Control flow
# =============================================================================


@dataclass(frozen=True)
class Else(Node):
    kind: ClassVar[str] = "else"

    body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class If(Node):
    """`if`, `unless` and `elsif` blocks; ``orelse`` is an elsif `If` or an `Else`."""

    kind: ClassVar[str] = "if"

    keyword: str = "if"
    cond: Node | None = None
    body: tuple[Node, ...] = ()
    orelse: Node | None = None

    @property
    def node_kind(self) -> str:
        return self.keyword


@dataclass(frozen=True)
class ModifierIf(Node):
    """`statement if cond` and `statement unless cond`."""

    kind: ClassVar[str] = "if_mod"

    keyword: str = "if"
    cond: Node | None = None
    statement: Node | None = None

    @property
    def node_kind(self) -> str:
        return f"{self.keyword}_mod"


@dataclass(frozen=True)
class Ternary(Node):
    kind: ClassVar[str] = "ifop"

    cond: Node | None = None
    then: Node | None = None
    orelse: Node | None = None


@dataclass(frozen=True)
class While(Node):
    kind: ClassVar[str] = "while"

    keyword: str = "while"
    cond: Node | None = None
    body: tuple[Node, ...] = ()
    modifier: bool = False

    @property
    def node_kind(self) -> str:
        return f"{self.keyword}_mod" if self.modifier else self.keyword


@dataclass(frozen=True)
class For(Node):
    kind: ClassVar[str] = "for"

    targets: tuple[str, ...] = ()
    iterable: Node | None = None
    body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class When(Node):
    kind: ClassVar[str] = "when"

    values: tuple[Node, ...] = ()
    body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Case(Node):
    kind: ClassVar[str] = "case"

    subject: Node | None = None
    whens: tuple[When, ...] = ()
    orelse: Else | None = None


@dataclass(frozen=True)
class Rescue(Node):
    kind: ClassVar[str] = "rescue"

    exceptions: tuple[Node, ...] = ()
    variable: str | None = None
    body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Begin(Node):
    kind: ClassVar[str] = "begin"

    body: tuple[Node, ...] = ()
    rescues: tuple[Rescue, ...] = ()
    else_body: tuple[Node, ...] = ()
    ensure_body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class ModifierRescue(Node):
    kind: ClassVar[str] = "rescue_mod"

    statement: Node | None = None
    rescue: Node | None = None


@dataclass(frozen=True)
class Jump(Node):
    """`return`, `next` and `break`."""

    kind: ClassVar[str] = "return"

    keyword: str = "return"
    value: Node | None = None

    @property
    def node_kind(self) -> str:
        return self.keyword
