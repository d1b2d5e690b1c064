"""Visitor implementations for syntax tree traversal."""

from .base import SyntaxVisitor
from .expression_translator import ExpressionTranslator
from .statement_translator import StatementTranslator

__all__ = ["ExpressionTranslator", "StatementTranslator", "SyntaxVisitor"]
