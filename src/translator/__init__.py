"""Install procedure translator.

Reduces the body of a recipe's `install` method to the portable IR in
``ir.py``.

The translation pipeline:
  1. Install body (syntax nodes) → StatementTranslator → Instructions
  2. Expressions inside statements → ExpressionTranslator → Expressions
  3. Instructions → render_instructions → readable text (optional)
"""

from .errors import TranslationError
from .ir import Expression, Instruction, decode_method_name, encode_method_name
from .pipeline import InstallTranslator, translate_install
from .render import render_expression, render_instructions

__all__ = [
    "Expression",
    "InstallTranslator",
    "Instruction",
    "TranslationError",
    "decode_method_name",
    "encode_method_name",
    "render_expression",
    "render_instructions",
    "translate_install",
]
