"""Locates the formula class and its install method in a parsed recipe."""

from __future__ import annotations

from src.recipe.syntax import ClassDef, ConstPath, MethodDef, Node, Program, VarRef

from .errors import MissingFormulaClass, MissingInstallBlock

FORMULA_BASE_SUFFIX = "Formula"


def _superclass_name(superclass: Node | None) -> str:
    if isinstance(superclass, (VarRef, ConstPath)):
        return superclass.name
    return ""


def find_formula_class(program: Program, path: str | None = None) -> ClassDef:
    """Return the primary formula class of a recipe.

    The primary class is the last top-level class whose superclass name ends
    with ``Formula`` (`Formula`, `AmazonWebServicesFormula`, ...).

    Raises:
        MissingFormulaClass: If the recipe defines no such class
    """
    candidates = [
        node
        for node in program.body
        if isinstance(node, ClassDef)
        and _superclass_name(node.superclass).endswith(FORMULA_BASE_SUFFIX)
    ]
    if not candidates:
        raise MissingFormulaClass(path)
    return candidates[-1]


def find_install_block(class_def: ClassDef, path: str | None = None) -> tuple[Node, ...]:
    """Return the statements of the class's `install` method.

    Raises:
        MissingInstallBlock: If the class defines no instance method `install`
    """
    for node in class_def.body:
        if isinstance(node, MethodDef) and node.name == "install" and not node.singleton:
            return node.body
    raise MissingInstallBlock(class_def.name, path, class_def.line)
