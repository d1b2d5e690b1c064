"""Directive interpreter for formula class bodies."""

from __future__ import annotations

import logging
from typing import Any

from src.recipe.syntax import Call, ClassDef, MethodDef, Node

from .context import FormulaBuilder
from .directives import FORMULA_DIRECTIVES, DirectiveHandler
from .errors import InvalidDirective, UnknownDirective
from .literals import LiteralEvaluator, Symbol

logger = logging.getLogger(__name__)


def formula_name(class_name: str) -> str:
    """Formula name for a class name: `Libpng` → `libpng`."""
    return class_name.split("::")[-1].lower()


class DirectiveInterpreter:
    """Walks a formula class body and records directive effects.

    Dispatch is closed: every statement must be a receiver-less call whose
    name is in the registry of the current scope. Nothing is executed;
    arguments are evaluated statically by LiteralEvaluator.

    Usage:
        interp = DirectiveInterpreter(path="Formula/foo.rb")
        builder = interp.interpret(class_def)
        record = builder.build(install=None)
    """

    def __init__(self, path: str | None = None):
        self.path = path

    def interpret(self, class_def: ClassDef) -> FormulaBuilder:
        """Interpret the directives of a formula class.

        Args:
            class_def: The formula class definition

        Returns:
            Builder holding every field the directives set

        Raises:
            UnknownDirective: If a statement is not a known directive
            InvalidDirective: If a directive's arguments cannot be used
        """
        builder = FormulaBuilder(name=formula_name(class_def.name), path=self.path)
        self.run(class_def.body, builder, FORMULA_DIRECTIVES, methods_allowed=True)
        logger.debug(f"Interpreted directives of {class_def.name} ({self.path})")
        return builder

    def run(
        self,
        body: tuple[Node, ...],
        target: Any,
        registry: dict[str, DirectiveHandler],
        methods_allowed: bool = False,
    ) -> None:
        """Apply each statement of ``body`` to ``target`` through ``registry``."""
        for stmt in body:
            if methods_allowed and isinstance(stmt, MethodDef):
                # install is found by the locator; other methods carry no metadata
                continue
            if not isinstance(stmt, Call) or stmt.receiver is not None:
                raise UnknownDirective(stmt.node_kind, self.path, stmt.line)
            handler = registry.get(stmt.name)
            if handler is None:
                raise UnknownDirective(stmt.name, self.path, stmt.line)
            handler(self, target, stmt)

    # =========================================================================
    # Argument helpers used by directive handlers
    # =========================================================================

    def invalid(self, call: Call, reason: str) -> InvalidDirective:
        return InvalidDirective(call.name, reason, self.path, call.line)

    def arguments(self, call: Call) -> list[Any]:
        """Statically evaluate all arguments of a directive call."""
        return LiteralEvaluator(call.name, self.path).visit_all(call.args)

    def string_argument(
        self,
        call: Call,
        allow_options: bool = False,
        allow_symbol: bool = False,
    ) -> str:
        """Single string argument, optionally followed by an options hash.

        Args:
            call: The directive call
            allow_options: Accept (and ignore) trailing keyword options, as in
                `url "...", tag: "v1.0"`
            allow_symbol: Accept a symbol (`cellar :any`) as the string

        Returns:
            The string value
        """
        args = self.arguments(call)
        if allow_options and len(args) == 2 and isinstance(args[1], dict):
            args = args[:1]
        if len(args) != 1:
            raise self.invalid(call, f"expected 1 argument, got {len(args)}")
        value = args[0]
        if not isinstance(value, str) or (isinstance(value, Symbol) and not allow_symbol):
            raise self.invalid(call, f"expected a string, got {value!r}")
        return str(value)

    def int_argument(self, call: Call) -> int:
        args = self.arguments(call)
        if len(args) != 1 or isinstance(args[0], bool) or not isinstance(args[0], int):
            raise self.invalid(call, "expected a single integer")
        return args[0]
