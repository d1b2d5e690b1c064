"""Errors raised while interpreting and resolving formulas."""

from __future__ import annotations

from src.recipe.errors import RecipeError


class UnknownDirective(RecipeError):
    """A formula class body contains a directive with no handler."""

    def __init__(self, name: str, path: str | None = None, line: int | None = None):
        super().__init__(f"Unknown directive '{name}'", path, line)
        self.name = name


class InvalidDirective(RecipeError):
    """A known directive was given arguments it cannot accept."""

    def __init__(
        self,
        name: str,
        reason: str,
        path: str | None = None,
        line: int | None = None,
    ):
        super().__init__(f"Invalid '{name}' directive: {reason}", path, line)
        self.name = name
        self.reason = reason


class MissingFormulaClass(RecipeError):
    """The recipe defines no class inheriting from a Formula class."""

    def __init__(self, path: str | None = None):
        super().__init__("No formula class defined", path)


class MissingInstallBlock(RecipeError):
    """The formula class has no `install` method."""

    def __init__(self, class_name: str, path: str | None = None, line: int | None = None):
        super().__init__(f"Formula class {class_name} defines no install method", path, line)
        self.class_name = class_name


class MissingDependencyFile(RecipeError):
    """A runtime dependency has no recipe file next to the dependent formula."""

    def __init__(self, name: str, expected_path: str, path: str | None = None):
        super().__init__(f"Dependency '{name}' not found at {expected_path}", path)
        self.name = name
        self.expected_path = expected_path
