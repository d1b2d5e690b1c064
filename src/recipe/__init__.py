"""Recipe syntax layer.

Turns formula source text into an immutable syntax tree:

  1. Source text → Lexer → Token list
  2. Tokens → Parser → Program (tree of ``syntax`` nodes)
"""

from .errors import ParseError, RecipeError
from .lexer import Lexer, tokenize
from .parser import Parser, parse_recipe
from .syntax import Call, ClassDef, MethodDef, Node, Program
from .tokens import Token, TokenType

__all__ = [
    "Call",
    "ClassDef",
    "Lexer",
    "MethodDef",
    "Node",
    "ParseError",
    "Parser",
    "Program",
    "RecipeError",
    "Token",
    "TokenType",
    "parse_recipe",
    "tokenize",
]
