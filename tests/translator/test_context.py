"""Tests for TranslationContext."""

from src.recipe.syntax import Call, FloatLit, While
from src.translator.context import TranslationContext


def test_context_starts_empty():
    """Fresh context has no enclosing statement."""
    ctx = TranslationContext(path="Formula/foo.rb")

    assert ctx.statements == []
    assert ctx.enclosing is None
    assert ctx.describe() == "install body"


def test_statement_scope_is_restored():
    """Nested statements stack and unwind, even on error."""
    ctx = TranslationContext()
    outer = Call(name="system", args=(FloatLit(value=1.0),), line=3)
    inner = While(line=4)

    with ctx.statement(outer):
        try:
            with ctx.statement(inner):
                assert ctx.enclosing is inner
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert ctx.enclosing is outer
    assert ctx.statements == []


def test_error_names_enclosing_statement():
    ctx = TranslationContext(path="Formula/foo.rb")
    float_arg = FloatLit(value=1.5, line=3)
    stmt = Call(name="system", args=(float_arg,), line=3)

    with ctx.statement(stmt):
        error = ctx.error(float_arg)

    assert error.node_kind == "float"
    assert error.context == "'command' statement at line 3"
    assert error.path == "Formula/foo.rb"
    assert error.line == 3
    assert str(error) == "Formula/foo.rb:3: Unsupported construct 'float' in 'command' statement at line 3"


def test_error_line_falls_back_to_statement():
    """Synthesized nodes without a position take the statement's line."""
    ctx = TranslationContext()
    stmt = Call(name="system", line=7)

    with ctx.statement(stmt):
        error = ctx.error(FloatLit(value=1.5))

    assert error.line == 7
