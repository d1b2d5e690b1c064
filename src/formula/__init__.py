"""Formula loading.

Builds FormulaRecords from recipe files:

  1. Recipe text → parse_recipe → Program
  2. Program → find_formula_class → DirectiveInterpreter → FormulaBuilder
  3. Formula class → find_install_block → translate_install → Instructions
  4. FormulaResolver repeats 1-3 over the runtime dependency closure
"""

from .errors import (
    InvalidDirective,
    MissingDependencyFile,
    MissingFormulaClass,
    MissingInstallBlock,
    UnknownDirective,
)
from .interpreter import DirectiveInterpreter
from .loader import FormulaResolver, load_formula
from .locator import find_formula_class, find_install_block
from .version import parse_version

__all__ = [
    "DirectiveInterpreter",
    "FormulaResolver",
    "InvalidDirective",
    "MissingDependencyFile",
    "MissingFormulaClass",
    "MissingInstallBlock",
    "UnknownDirective",
    "find_formula_class",
    "find_install_block",
    "load_formula",
    "parse_version",
]
