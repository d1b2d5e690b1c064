"""Token definitions for the recipe lexer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class TokenType(Enum):
    # Literals
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    XSTRING = auto()
    REGEXP = auto()
    SYMBOL = auto()
    WORDS = auto()
    SYMBOLS = auto()
    LABEL = auto()

    # Names
    IDENTIFIER = auto()
    CONSTANT = auto()
    IVAR = auto()
    GVAR = auto()
    KEYWORD = auto()

    # Operators and punctuation
    OPERATOR = auto()
    ASSOC = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    DOT = auto()
    SAFE_NAV = auto()
    COLON2 = auto()
    QUESTION = auto()
    COLON = auto()
    SEMICOLON = auto()

    # Special
    NEWLINE = auto()
    EOF = auto()


KEYWORDS = frozenset(
    {
        "alias",
        "and",
        "begin",
        "break",
        "case",
        "class",
        "def",
        "do",
        "else",
        "elsif",
        "end",
        "ensure",
        "false",
        "for",
        "if",
        "in",
        "module",
        "next",
        "nil",
        "not",
        "or",
        "redo",
        "rescue",
        "retry",
        "return",
        "self",
        "super",
        "then",
        "true",
        "undef",
        "unless",
        "until",
        "when",
        "while",
        "yield",
        "__FILE__",
    }
)

# Tokens after which an operator-looking character starts an operand
# (regexp, heredoc, percent literal) only in command-argument position.
VALUE_TOKENS = frozenset(
    {
        TokenType.INTEGER,
        TokenType.FLOAT,
        TokenType.STRING,
        TokenType.XSTRING,
        TokenType.REGEXP,
        TokenType.SYMBOL,
        TokenType.WORDS,
        TokenType.SYMBOLS,
        TokenType.IDENTIFIER,
        TokenType.CONSTANT,
        TokenType.IVAR,
        TokenType.GVAR,
        TokenType.RPAREN,
        TokenType.RBRACKET,
        TokenType.RBRACE,
    }
)

VALUE_KEYWORDS = frozenset({"end", "self", "nil", "true", "false", "__FILE__"})


@dataclass
class Embedded:
    """Token stream of a `#{...}` segment inside a string literal."""

    tokens: list[Token]
    line: int
    column: int


@dataclass
class Token:
    """A single lexical token with position information.

    For STRING and XSTRING tokens, ``value`` is a list of parts: plain ``str``
    segments and ``Embedded`` interpolation segments. WORDS and SYMBOLS carry
    a list of ``str``.
    """

    type: TokenType
    value: Any
    line: int = 1
    column: int = 1
    space_before: bool = False
    filename: str | None = field(default=None, repr=False)

    def __str__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    def is_keyword(self, *names: str) -> bool:
        """Check if token is one of the given keywords."""
        return self.type == TokenType.KEYWORD and self.value in names

    def is_operator(self, *ops: str) -> bool:
        """Check if token is one of the given operators."""
        return self.type == TokenType.OPERATOR and self.value in ops

    def ends_value(self) -> bool:
        """Whether this token can end an operand."""
        if self.type in VALUE_TOKENS:
            return True
        return self.type == TokenType.KEYWORD and self.value in VALUE_KEYWORDS
