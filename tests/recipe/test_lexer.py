"""Tests for the recipe lexer."""

import pytest

from src.recipe.errors import ParseError
from src.recipe.lexer import tokenize
from src.recipe.tokens import Embedded, TokenType


def types(source: str) -> list[TokenType]:
    return [token.type for token in tokenize(source)]


class TestBasicTokens:
    """Tests for commands, punctuation and literals."""

    def test_command_with_string_args(self):
        """A command with two string arguments."""
        assert types('system "make", "install"') == [
            TokenType.IDENTIFIER,
            TokenType.STRING,
            TokenType.COMMA,
            TokenType.STRING,
            TokenType.EOF,
        ]

    def test_string_value_is_part_list(self):
        """Plain strings carry a single text part."""
        tokens = tokenize('"make"')
        assert tokens[0].value == ["make"]

    def test_hash_rocket_and_symbol(self):
        """`=>` is an ASSOC token and `:build` a symbol."""
        tokens = tokenize('depends_on "x" => :build')
        assert [t.type for t in tokens[:4]] == [
            TokenType.IDENTIFIER,
            TokenType.STRING,
            TokenType.ASSOC,
            TokenType.SYMBOL,
        ]
        assert tokens[3].value == "build"

    def test_label(self):
        """`cellar:` followed by a space is a label."""
        tokens = tokenize("sha256 cellar: :any")
        assert tokens[1].type == TokenType.LABEL
        assert tokens[1].value == "cellar"
        assert tokens[2].type == TokenType.SYMBOL
        assert tokens[2].value == "any"

    def test_predicate_method_name(self):
        """A trailing `?` belongs to the method name."""
        tokens = tokenize('build.with? "x"')
        assert tokens[2].type == TokenType.IDENTIFIER
        assert tokens[2].value == "with?"

    def test_keyword_after_dot_is_identifier(self):
        """`x.class` calls a method named class."""
        tokens = tokenize("x.class")
        assert tokens[2].type == TokenType.IDENTIFIER

    def test_constant(self):
        tokens = tokenize('ENV["CC"]')
        assert tokens[0].type == TokenType.CONSTANT
        assert tokens[1].type == TokenType.LBRACKET
        assert not tokens[1].space_before

    def test_numbers(self):
        """Hex, underscored and float literals."""
        tokens = tokenize("0x1F 1_000 2.5")
        assert [(t.type, t.value) for t in tokens[:3]] == [
            (TokenType.INTEGER, "0x1F"),
            (TokenType.INTEGER, "1000"),
            (TokenType.FLOAT, "2.5"),
        ]

    def test_words_literal(self):
        tokens = tokenize("%w[a b c]")
        assert tokens[0].type == TokenType.WORDS
        assert tokens[0].value == ["a", "b", "c"]


class TestStrings:
    """Tests for escapes, interpolation and heredocs."""

    def test_double_quoted_escape(self):
        tokens = tokenize('"a\\tb"')
        assert tokens[0].value == ["a\tb"]

    def test_single_quoted_keeps_backslash(self):
        tokens = tokenize("'a\\tb'")
        assert tokens[0].value == ["a\\tb"]

    def test_interpolation_is_sub_lexed(self):
        """`#{prefix}` becomes an Embedded part with its own tokens."""
        tokens = tokenize('"#{prefix}/bin"')
        embedded, text = tokens[0].value
        assert isinstance(embedded, Embedded)
        assert embedded.tokens[0].type == TokenType.IDENTIFIER
        assert embedded.tokens[0].value == "prefix"
        assert text == "/bin"

    def test_squiggly_heredoc(self):
        """`<<~EOS` reads the following lines and strips common indentation."""
        source = '(testpath/"t.c").write <<~EOS\n    int main() {}\n  EOS\n'
        tokens = tokenize(source)
        heredoc = [t for t in tokens if t.type == TokenType.STRING][-1]
        assert heredoc.value == ["int main() {}\n"]

    def test_unterminated_string(self):
        with pytest.raises(ParseError, match="Unterminated string"):
            tokenize('"abc')


class TestLayout:
    """Tests for newlines, comments and ambiguous characters."""

    def test_blank_lines_and_comments_collapse(self):
        assert types("a\n\n# comment\nb") == [
            TokenType.IDENTIFIER,
            TokenType.NEWLINE,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]

    def test_leading_dot_continues_line(self):
        assert types("foo\n  .bar") == [
            TokenType.IDENTIFIER,
            TokenType.DOT,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]

    def test_end_marker_stops_lexing(self):
        assert types('foo\n__END__\ngarbage "') == [
            TokenType.IDENTIFIER,
            TokenType.NEWLINE,
            TokenType.EOF,
        ]

    def test_regexp_argument(self):
        """`/` after a spaced command name starts a regexp."""
        tokens = tokenize("assert_match /hello/, out")
        assert tokens[1].type == TokenType.REGEXP
        assert tokens[1].value == ("hello", "")

    def test_division(self):
        """`/` surrounded by spaces is division."""
        tokens = tokenize("a / b")
        assert tokens[1].type == TokenType.OPERATOR
        assert tokens[1].value == "/"

    def test_positions(self):
        tokens = tokenize("foo\n  bar")
        assert (tokens[2].line, tokens[2].column) == (2, 3)
