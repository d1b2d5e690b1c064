"""Static evaluation of directive arguments."""

from __future__ import annotations

from typing import Any

from src.recipe.syntax import (
    ArrayLit,
    HashLit,
    IntLit,
    Node,
    Paren,
    StringLit,
    SymbolLit,
    VarRef,
)
from src.translator.visitors import SyntaxVisitor

from .errors import InvalidDirective

_KEYWORD_VALUES = {"nil": None, "true": True, "false": False}


class Symbol(str):
    """A symbol argument (`:build`), distinguishable from a plain string."""

    def __repr__(self) -> str:
        return f":{str(self)}"


class LiteralEvaluator(SyntaxVisitor[Any]):
    """Evaluates literal directive arguments without running any code.

    Strings without interpolation, symbols, integers, arrays, hashes and
    `true`/`false`/`nil` evaluate to their Python counterparts. Anything
    else raises InvalidDirective for the directive being evaluated.
    """

    def __init__(self, directive: str, path: str | None = None) -> None:
        self.directive = directive
        self.path = path

    def visit_default(self, node: Node) -> Any:
        raise self._invalid(node, f"argument '{node.node_kind}' is not a static value")

    def _invalid(self, node: Node, reason: str) -> InvalidDirective:
        return InvalidDirective(self.directive, reason, self.path, node.line)

    def visit_StringLit(self, node: StringLit) -> str:
        if not node.is_plain:
            raise self._invalid(node, "interpolated strings are not static values")
        return node.text

    def visit_SymbolLit(self, node: SymbolLit) -> Symbol:
        return Symbol(node.name)

    def visit_IntLit(self, node: IntLit) -> int:
        return node.value

    def visit_ArrayLit(self, node: ArrayLit) -> list[Any]:
        return self.visit_all(node.elements)

    def visit_HashLit(self, node: HashLit) -> dict[Any, Any]:
        result: dict[Any, Any] = {}
        for key_node, value_node in node.pairs:
            key = self.visit(key_node)
            if isinstance(key, (list, dict)):
                raise self._invalid(key_node, "hash keys must be scalar values")
            result[key] = self.visit(value_node)
        return result

    def visit_VarRef(self, node: VarRef) -> Any:
        if node.name in _KEYWORD_VALUES:
            return _KEYWORD_VALUES[node.name]
        return self.visit_default(node)

    def visit_Paren(self, node: Paren) -> Any:
        if len(node.body) != 1:
            return self.visit_default(node)
        return self.visit(node.body[0])
