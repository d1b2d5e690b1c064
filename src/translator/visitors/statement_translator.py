"""Visitor that reduces install-body statements to IR instructions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.recipe.syntax import Call, Else, If, ModifierIf, Node, Paren
from src.translator import ir

from .base import SyntaxVisitor
from .expression_translator import ExpressionTranslator

if TYPE_CHECKING:
    from src.translator.context import TranslationContext


class StatementTranslator(SyntaxVisitor[ir.Instruction]):
    """Translates statement nodes into IR Instructions.

    Calls with arguments become Commands, `if`/`unless` (block or modifier
    form) become ConditionalStmts and any other supported expression becomes
    an ExpressionStmt. Unsupported statement kinds (loops, `case`, blocks)
    raise TranslationError.

    Usage:
        ctx = TranslationContext(path="Formula/foo.rb")
        instructions = StatementTranslator(ctx).translate_body(body)
    """

    def __init__(self, ctx: TranslationContext) -> None:
        self.ctx = ctx
        self.expressions = ExpressionTranslator(ctx)

    def translate_body(self, body: tuple[Node, ...]) -> list[ir.Instruction]:
        """Translate statements in source order."""
        instructions = []
        for stmt in body:
            with self.ctx.statement(stmt):
                instructions.append(self.visit(stmt))
        return instructions

    def visit_default(self, node: Node) -> ir.Instruction:
        """Any other expression is evaluated for its effect."""
        return ir.ExpressionStmt(expr=self.expressions.visit(node))

    def visit_Call(self, node: Call) -> ir.Instruction:
        if node.block is not None:
            raise self.ctx.error(node)
        if not node.args:
            return ir.ExpressionStmt(expr=self.expressions.visit(node))
        receiver = None
        if node.receiver is not None:
            receiver = self.expressions.visit(node.receiver)
        return ir.Command(
            name=ir.encode_method_name(node.name),
            receiver=receiver,
            args=self.expressions.translate_args(node.args),
        )

    def visit_ModifierIf(self, node: ModifierIf) -> ir.Instruction:
        return ir.ConditionalStmt(
            kind=node.keyword,
            cond=self.expressions.visit(node.cond),
            then_branch=self.translate_body((node.statement,)),
        )

    def visit_If(self, node: If) -> ir.Instruction:
        else_branch = None
        if isinstance(node.orelse, If):
            else_branch = self.translate_body((node.orelse,))
        elif isinstance(node.orelse, Else):
            else_branch = self.translate_body(node.orelse.body)
        return ir.ConditionalStmt(
            kind="unless" if node.keyword == "unless" else "if",
            cond=self.expressions.visit(node.cond),
            then_branch=self.translate_body(node.body),
            else_branch=else_branch,
        )

    def visit_Paren(self, node: Paren) -> ir.Instruction:
        if len(node.body) != 1:
            raise self.ctx.error(node)
        return self.visit(node.body[0])
