"""Single-file formula pipeline and dependency closure resolver."""

from __future__ import annotations

import logging
from pathlib import Path

from src.models.formula import DependencyType, FormulaRecord
from src.recipe.errors import ParseError
from src.recipe.parser import parse_recipe
from src.translator.pipeline import translate_install

from .context import VersionParser
from .errors import MissingDependencyFile, MissingInstallBlock
from .interpreter import DirectiveInterpreter
from .locator import find_formula_class, find_install_block
from .version import parse_version

logger = logging.getLogger(__name__)

RECIPE_EXTENSION = ".rb"


def _read_source(path: Path) -> str:
    """Read recipe text as UTF-8; undecodable bytes are a ParseError at their position."""
    data = path.read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        before = data[: e.start]
        line = before.count(b"\n") + 1
        column = e.start - (before.rfind(b"\n") + 1) + 1
        raise ParseError(
            f"Invalid UTF-8 byte 0x{data[e.start]:02x}", str(path), line, column
        ) from e


def load_formula(
    path: str | Path,
    version_parser: VersionParser | None = parse_version,
) -> FormulaRecord:
    """Run the single-file pipeline on one recipe.

    Pipeline:
    1. Parse the recipe text into a syntax tree
    2. Locate the primary formula class
    3. Interpret its directives
    4. Translate its install method (None when there is none)

    Args:
        path: Recipe file
        version_parser: Derives the version from the URL when not declared

    Returns:
        The formula's record

    Raises:
        RecipeError: Any parse, directive or translation error for this file
    """
    path = Path(path)
    filename = str(path)
    logger.debug(f"Loading formula {filename}")

    program = parse_recipe(_read_source(path), filename)
    formula_class = find_formula_class(program, filename)
    builder = DirectiveInterpreter(filename).interpret(formula_class)

    try:
        body = find_install_block(formula_class, filename)
    except MissingInstallBlock:
        logger.warning(f"{filename}: {formula_class.name} has no install method, keeping metadata only")
        install = None
    else:
        install = translate_install(body, filename)

    return builder.build(install=install, version_parser=version_parser)


class FormulaResolver:
    """Loads a formula and the closure of its runtime dependencies.

    Dependencies are looked up as ``<name><extension>`` in the directory of
    the formula that declares them. Each file is loaded at most once per
    ``resolve`` call, so cycles and diamonds terminate.

    Usage:
        resolver = FormulaResolver()
        records = resolver.resolve("Formula/wget.rb")
        # records maps formula name → FormulaRecord
    """

    def __init__(
        self,
        version_parser: VersionParser | None = parse_version,
        extension: str = RECIPE_EXTENSION,
    ):
        self.version_parser = version_parser
        self.extension = extension

    def resolve(
        self,
        path: str | Path,
        out: dict[str, FormulaRecord] | None = None,
    ) -> dict[str, FormulaRecord]:
        """Resolve a formula and its runtime dependency closure.

        Args:
            path: Root recipe file
            out: Map to accumulate into; a new one is created when omitted

        Returns:
            The map, keyed by formula name

        Raises:
            MissingDependencyFile: If a runtime dependency has no recipe file
            RecipeError: Any error loading a file in the closure
        """
        if out is None:
            out = {}
        self._resolve(Path(path), out, visited=set())
        return out

    def _resolve(self, path: Path, out: dict[str, FormulaRecord], visited: set[Path]) -> None:
        key = path.resolve()
        if key in visited:
            logger.debug(f"Already resolved {path}, skipping")
            return
        visited.add(key)

        record = load_formula(path, self.version_parser)
        out[record.name] = record

        for name in record.dependencies_of(DependencyType.RUNTIME):
            dep_path = path.parent / f"{name}{self.extension}"
            if not dep_path.is_file():
                raise MissingDependencyFile(name, str(dep_path), str(path))
            self._resolve(dep_path, out, visited)
