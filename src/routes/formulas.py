"""Formula routes: metadata and install procedures as JSON."""

import logging
import os
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.formula import FormulaResolver, MissingDependencyFile, load_formula
from src.models.formula import FormulaRecord
from src.recipe.errors import RecipeError
from src.translator import Instruction, render_instructions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/formulas", tags=["formulas"])

DEFAULT_FORMULA_ROOT = "./Formula"


def get_formula_root() -> Path:
    """Directory holding recipe files, from FORMULA_ROOT."""
    return Path(os.getenv("FORMULA_ROOT", DEFAULT_FORMULA_ROOT))


class FormulaClosureResponse(BaseModel):
    """A formula and its runtime dependency closure."""

    root: str
    formulas: dict[str, FormulaRecord]


class InstallResponse(BaseModel):
    """Install procedure of one formula, as IR and as text."""

    name: str
    install: list[Instruction] | None
    text: str | None


def _recipe_path(root: Path, name: str) -> Path:
    if not name or Path(name).name != name or name.startswith("."):
        raise HTTPException(status_code=404, detail=f"Formula not found: {name}")
    path = root / f"{name}.rb"
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"Formula not found: {name}")
    return path


def _recipe_error(e: RecipeError) -> HTTPException:
    if isinstance(e, MissingDependencyFile):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=422, detail=str(e))


@router.get("/{name}", response_model=FormulaClosureResponse)
async def get_formula(name: str, root: Path = Depends(get_formula_root)) -> Any:
    """Resolve a formula and its runtime dependencies."""
    path = _recipe_path(root, name)
    try:
        formulas = FormulaResolver().resolve(path)
    except RecipeError as e:
        logger.warning(f"Failed to resolve {path}: {e}")
        raise _recipe_error(e) from e

    logger.info(f"Resolved {name}: {len(formulas)} formulas")
    return FormulaClosureResponse(root=name, formulas=formulas)


@router.get("/{name}/install", response_model=InstallResponse)
async def get_install(name: str, root: Path = Depends(get_formula_root)) -> Any:
    """Translated install procedure of a single formula."""
    path = _recipe_path(root, name)
    try:
        record = load_formula(path)
    except RecipeError as e:
        logger.warning(f"Failed to load {path}: {e}")
        raise _recipe_error(e) from e

    text = render_instructions(record.install) if record.install is not None else None
    return InstallResponse(name=record.name, install=record.install, text=text)
