"""Shared test fixtures and helpers."""

import textwrap
from pathlib import Path

import pytest

from src.recipe.parser import parse_recipe
from src.translator.pipeline import translate_install


def formula_source(class_name: str, body: str, superclass: str = "Formula") -> str:
    """Wrap a class body into a recipe file."""
    indented = textwrap.indent(textwrap.dedent(body).strip("\n"), "  ")
    return f"class {class_name} < {superclass}\n{indented}\nend\n"


def install_source(body: str) -> str:
    """Recipe whose install method holds the given statements."""
    statements = textwrap.indent(textwrap.dedent(body).strip("\n"), "  ")
    return formula_source("Example", f"def install\n{statements}\nend")


@pytest.fixture
def recipe():
    """Build recipe source from a class body.

    Usage:
        source = recipe('desc "A tool"')
    """
    return formula_source


@pytest.fixture
def translate():
    """Translate an install body given as Ruby source.

    Usage:
        instructions = translate('system "make", "install"')
    """

    def _translate(body: str, path: str = "Formula/example.rb"):
        program = parse_recipe(install_source(body), path)
        method = program.body[0].body[0]
        return translate_install(method.body, path)

    return _translate


@pytest.fixture
def formula_dir(tmp_path: Path) -> Path:
    """Empty directory to write recipe files into."""
    directory = tmp_path / "Formula"
    directory.mkdir()
    return directory


@pytest.fixture
def write_formula(formula_dir: Path):
    """Write ``<name>.rb`` into the formula directory.

    Usage:
        path = write_formula("wget", '''
            desc "Internet file retriever"
            url "https://ftp.gnu.org/gnu/wget/wget-1.21.4.tar.gz"
        ''')
    """

    def _write(name: str, body: str, class_name: str | None = None) -> Path:
        path = formula_dir / f"{name}.rb"
        path.write_text(formula_source(class_name or name.capitalize(), body))
        return path

    return _write
