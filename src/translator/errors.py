"""Errors raised while translating an install body."""

from __future__ import annotations

from src.recipe.errors import RecipeError


class TranslationError(RecipeError):
    """Raised when an install body uses a construct outside the supported subset.

    Attributes:
        node_kind: Syntax node kind that could not be translated
        context: Enclosing statement description (kind and line)
    """

    def __init__(
        self,
        node_kind: str,
        context: str = "",
        path: str | None = None,
        line: int | None = None,
    ):
        message = f"Unsupported construct '{node_kind}'"
        if context:
            message = f"{message} in {context}"
        super().__init__(message, path, line)
        self.node_kind = node_kind
        self.context = context
