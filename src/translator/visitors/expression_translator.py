"""Visitor that reduces syntax expressions to IR expressions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.recipe.syntax import (
    ArrayLit,
    Assign,
    Binary,
    Call,
    Index,
    IntLit,
    Interpolation,
    Node,
    Paren,
    Splat,
    StringLit,
    SymbolLit,
    Unary,
    VarRef,
)
from src.translator import ir

from .base import SyntaxVisitor

if TYPE_CHECKING:
    from src.translator.context import TranslationContext


class ExpressionTranslator(SyntaxVisitor[ir.Expression]):
    """Translates expression nodes into IR Expressions.

    Only the supported subset has a visit method; every other node kind
    raises TranslationError through ``visit_default``.

    Usage:
        ctx = TranslationContext(path="Formula/foo.rb")
        expr = ExpressionTranslator(ctx).visit(node)
    """

    def __init__(self, ctx: TranslationContext) -> None:
        self.ctx = ctx

    def visit_default(self, node: Node) -> ir.Expression:
        raise self.ctx.error(node)

    def translate_args(self, args: tuple[Node, ...]) -> list[ir.Expression]:
        return self.visit_all(args)

    # Literals

    def visit_StringLit(self, node: StringLit) -> ir.Expression:
        parts: list[ir.LiteralText | ir.EmbeddedExpr] = []
        for part in node.parts:
            if isinstance(part, Interpolation):
                parts.append(ir.EmbeddedExpr(expr=self._embedded(part)))
            elif part:
                parts.append(ir.LiteralText(value=part))
        return ir.StringLiteral(parts=parts)

    def _embedded(self, part: Interpolation) -> ir.Expression:
        if len(part.body) != 1:
            raise self.ctx.error(part)
        inner = part.body[0]
        # `#{prefix}` names a path helper; keep it as a substitution point
        if isinstance(inner, Call) and inner.node_kind == "vcall":
            return ir.VarRef(name=inner.name)
        return self.visit(inner)

    def visit_SymbolLit(self, node: SymbolLit) -> ir.Expression:
        return ir.SymbolLiteral(name=node.name)

    def visit_IntLit(self, node: IntLit) -> ir.Expression:
        return ir.IntLiteral(value=node.value)

    def visit_ArrayLit(self, node: ArrayLit) -> ir.Expression:
        return ir.ArrayLiteral(length=len(node.elements))

    # References and calls

    def visit_VarRef(self, node: VarRef) -> ir.Expression:
        return ir.VarRef(name=node.name)

    def visit_Call(self, node: Call) -> ir.Expression:
        if node.block is not None:
            raise self.ctx.error(node)
        name = ir.encode_method_name(node.name)
        args = self.translate_args(node.args)
        if node.receiver is None:
            return ir.BareCall(name=name, args=args)
        return ir.MethodCall(receiver=self.visit(node.receiver), method=name, args=args)

    def visit_Index(self, node: Index) -> ir.Expression:
        if len(node.args) != 1:
            raise self.ctx.error(node)
        return ir.Index(base=self.visit(node.base), subscript=self.visit(node.args[0]))

    # Operators

    def visit_Binary(self, node: Binary) -> ir.Expression:
        return ir.Binary(op=node.op, left=self.visit(node.left), right=self.visit(node.right))

    def visit_Unary(self, node: Unary) -> ir.Expression:
        return ir.Unary(op=node.op, operand=self.visit(node.operand))

    def visit_Assign(self, node: Assign) -> ir.Expression:
        return ir.Assign(target=self.visit(node.target), value=self.visit(node.value))

    def visit_Splat(self, node: Splat) -> ir.Expression:
        if node.double:
            raise self.ctx.error(node)
        return ir.Splat(value=self.visit(node.value))

    def visit_Paren(self, node: Paren) -> ir.Expression:
        if len(node.body) != 1:
            raise self.ctx.error(node)
        return self.visit(node.body[0])
