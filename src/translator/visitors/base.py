"""Base visitor class for syntax tree traversal."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from src.recipe.syntax import Node

T = TypeVar("T")


class SyntaxVisitor(ABC, Generic[T]):
    """Abstract visitor for recipe syntax trees.

    Subclasses implement visit methods for the node classes they support.
    Everything else reaches ``visit_default``, which is where a visitor
    decides between a fallback value and a hard error.

    Type parameter T is the return type of visit methods.

    Usage:
        class MyVisitor(SyntaxVisitor[str]):
            def visit_default(self, node):
                raise ValueError(node.node_kind)

            def visit_StringLit(self, node):
                return node.text
    """

    def visit(self, node: Node) -> T:
        """Dispatch to the appropriate visit method.

        Looks for visit_{ClassName} method, falls back to visit_default.
        """
        method_name = f"visit_{type(node).__name__}"
        visitor = getattr(self, method_name, self.visit_default)
        return visitor(node)

    def visit_all(self, nodes: Iterable[Node]) -> list[T]:
        """Visit nodes in order and collect the results."""
        return [self.visit(node) for node in nodes]

    @abstractmethod
    def visit_default(self, node: Node) -> T:
        """Default handler for node types without specific visit methods.

        Subclasses must implement this to define default behavior.
        """
        ...
