"""Tests for text rendering of instructions."""

from src.translator.ir import (
    BareCall,
    Binary,
    Command,
    EmbeddedExpr,
    LiteralText,
    MethodCall,
    StringLiteral,
    Unary,
    VarRef,
)
from src.translator.render import render_expression, render_instructions


def test_commands_one_per_line(translate):
    instructions = translate(
        'system "./configure", "--prefix=#{prefix}"\nsystem "make", "install"'
    )
    assert render_instructions(instructions) == (
        'system("./configure", "--prefix=$prefix")\n'
        'system("make", "install")'
    )


def test_receiver_and_modifier(translate):
    instructions = translate('bin.install "foo" if build.with? "feature"')
    assert render_instructions(instructions) == (
        'if build.with__q("feature"):\n'
        '    bin.install("foo")'
    )


def test_else_branch_indented(translate):
    instructions = translate('if build.head?\n  system "a"\nelse\n  system "b"\nend')
    assert render_instructions(instructions) == (
        "if build.head__q:\n"
        '    system("a")\n'
        "else:\n"
        '    system("b")'
    )


def test_expression_statements(translate):
    instructions = translate('ENV["CC"] = "clang"\nsystem "cmake", *std_cmake_args')
    assert render_instructions(instructions) == (
        'ENV["CC"] = "clang"\n'
        'system("cmake", *std_cmake_args)'
    )


def test_literals(translate):
    instructions = translate("chmod :write, 644, %w[a b]")
    assert render_instructions(instructions) == "chmod(:write, 644, array(2))"


def test_nested_depth():
    instructions = []
    assert render_instructions(instructions, depth=2) == ""


class TestRenderExpression:
    """Tests for single expression rendering."""

    def test_text_is_escaped(self):
        """Quotes, newlines and dollar signs are escaped in literal text."""
        expr = StringLiteral(parts=[LiteralText(value='say "hi"\n$HOME')])
        assert render_expression(expr) == '"say \\"hi\\"\\n\\$HOME"'

    def test_non_variable_embed_is_braced(self):
        expr = StringLiteral(
            parts=[
                EmbeddedExpr(expr=MethodCall(receiver=VarRef(name="lib"), method="to_s")),
                LiteralText(value="/x"),
            ]
        )
        assert render_expression(expr) == '"${lib.to_s}/x"'

    def test_nested_binary_is_parenthesized(self):
        expr = Binary(
            op="/",
            left=Binary(op="/", left=BareCall(name="prefix"), right=VarRef(name="a")),
            right=VarRef(name="b"),
        )
        assert render_expression(expr) == "(prefix / a) / b"

    def test_not_keyword_spacing(self):
        assert render_expression(Unary(op="not", operand=VarRef(name="x"))) == "not x"
        assert render_expression(Unary(op="!", operand=VarRef(name="x"))) == "!x"


class TestCommandReceiver:
    """Receivers that need parentheses to keep their grouping."""

    def test_binary_receiver_is_parenthesized(self, translate):
        instructions = translate('(bin/"foo").write "x"')
        assert render_instructions(instructions) == '(bin / "foo").write("x")'

    def test_built_binary_receiver(self):
        command = Command(
            name="write",
            receiver=Binary(op="/", left=BareCall(name="bin"), right=VarRef(name="name")),
            args=[StringLiteral(parts=[LiteralText(value="x")])],
        )
        assert render_instructions([command]) == '(bin / name).write("x")'

    def test_simple_receiver_unchanged(self):
        command = Command(name="install", receiver=BareCall(name="bin"))
        assert render_instructions([command]) == "bin.install()"
