"""Install body translation pipeline."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .context import TranslationContext
from .visitors import StatementTranslator

if TYPE_CHECKING:
    from src.recipe.syntax import Node

    from .ir import Instruction

logger = logging.getLogger(__name__)


class InstallTranslator:
    """Translates the body of an `install` method into IR instructions.

    Translation is all-or-nothing: the first unsupported construct raises
    TranslationError and no partial instruction list is returned.
    """

    def __init__(self, path: str | None = None):
        self.path = path

    def translate(self, body: tuple[Node, ...]) -> list[Instruction]:
        """Translate an install body.

        Args:
            body: Statements of the `install` method, in source order

        Returns:
            Ordered list of instructions

        Raises:
            TranslationError: If a statement uses an unsupported construct
        """
        ctx = TranslationContext(path=self.path)
        instructions = StatementTranslator(ctx).translate_body(body)
        logger.debug(f"Translated {len(instructions)} install statements from {self.path}")
        return instructions


def translate_install(body: tuple[Node, ...], path: str | None = None) -> list[Instruction]:
    """Translate an install body with a fresh translator."""
    return InstallTranslator(path).translate(body)
