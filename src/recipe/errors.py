"""Error hierarchy shared by every stage of recipe processing.

All errors carry the recipe path so the offending file can be located
without re-parsing it.
"""

from __future__ import annotations


class RecipeError(Exception):
    """Base class for all recipe processing errors."""

    def __init__(self, message: str, path: str | None = None, line: int | None = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.line = line

    def __str__(self) -> str:
        location = ""
        if self.path:
            location = self.path
        if self.line is not None:
            location = f"{location}:{self.line}" if location else f"line {self.line}"
        if location:
            return f"{location}: {self.message}"
        return self.message


class ParseError(RecipeError):
    """Recipe text violates the supported grammar."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ):
        super().__init__(message, path, line)
        self.column = column

    @property
    def location(self) -> str:
        return f"{self.path or '<recipe>'}:{self.line}:{self.column}"
