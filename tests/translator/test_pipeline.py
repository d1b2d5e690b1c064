"""Tests for InstallTranslator."""

import logging

from src.recipe.parser import parse_recipe
from src.translator.ir import Command
from src.translator.pipeline import InstallTranslator, translate_install


def install_body(source: str):
    (stmt,) = parse_recipe(source).body
    return stmt.body


def test_translator_is_reusable():
    """One translator instance translates independent bodies."""
    translator = InstallTranslator("Formula/foo.rb")
    first = translator.translate(install_body('def install\n  system "a"\nend'))
    second = translator.translate(install_body('def install\n  system "b"\nend'))

    assert [i.args[0].parts[0].value for i in first + second] == ["a", "b"]


def test_empty_body():
    assert translate_install(()) == []


def test_translation_logged(caplog):
    """A debug record names the statement count and path."""
    body = install_body('def install\n  system "make"\n  bin.install "foo"\nend')

    with caplog.at_level(logging.DEBUG, logger="src.translator.pipeline"):
        instructions = translate_install(body, "Formula/foo.rb")

    assert all(isinstance(i, Command) for i in instructions)
    assert "Translated 2 install statements from Formula/foo.rb" in caplog.text
