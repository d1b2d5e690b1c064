"""Translation context tracking where in the install body translation is."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import TranslationError

if TYPE_CHECKING:
    from src.recipe.syntax import Node


@dataclass
class TranslationContext:
    """State shared by the statement and expression translators.

    Holds the recipe path and the stack of statements currently being
    translated, so an error deep inside an expression can name the statement
    it belongs to.
    """

    path: str | None = None

    # Statements being translated, innermost last
    statements: list[Node] = field(default_factory=list)

    @contextmanager
    def statement(self, node: Node) -> Iterator[None]:
        """Mark ``node`` as the enclosing statement while translating it."""
        self.statements.append(node)
        try:
            yield
        finally:
            self.statements.pop()

    @property
    def enclosing(self) -> Node | None:
        return self.statements[-1] if self.statements else None

    def describe(self) -> str:
        """Human readable description of the enclosing statement."""
        stmt = self.enclosing
        if stmt is None:
            return "install body"
        return f"'{stmt.node_kind}' statement at line {stmt.line}"

    def error(self, node: Node) -> TranslationError:
        """Build a TranslationError for an unsupported node."""
        line = node.line
        if not line and self.enclosing is not None:
            line = self.enclosing.line
        return TranslationError(node.node_kind, self.describe(), self.path, line or None)
