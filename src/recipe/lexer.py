"""Lexical analyzer for recipe (Ruby formula) source files.

Covers the part of Ruby's lexical grammar that appears in formula files:
comments and ``=begin``/``=end`` blocks, ``__END__``, quoted strings with
escapes and ``#{}`` interpolation, heredocs, percent literals, symbols,
labels, numbers, regexps and the operator set. Ambiguous characters
(``/``, ``%``, ``<<``) are resolved the way Ruby resolves them: they start an
operand after an operator, or after a method name separated by a space but
not followed by one (``assert_match /x/``).
"""

from __future__ import annotations

import re

from .errors import ParseError
from .tokens import KEYWORDS, Embedded, Token, TokenType

_OPERATORS = (
    "**=",
    "<=>",
    "===",
    "...",
    "<<=",
    ">>=",
    "&&=",
    "||=",
    "**",
    "==",
    "!=",
    ">=",
    "<=",
    "&&",
    "||",
    "<<",
    ">>",
    "=~",
    "!~",
    "..",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "|=",
    "&=",
    "^=",
    "->",
    "+",
    "-",
    "*",
    "/",
    "%",
    "=",
    "<",
    ">",
    "!",
    "&",
    "|",
    "^",
    "~",
)

_PUNCTUATION = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ";": TokenType.SEMICOLON,
    "?": TokenType.QUESTION,
}

_CLOSING = {"(": ")", "[": "]", "{": "}", "<": ">"}

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "s": " ",
    "e": "\x1b",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}

_HEREDOC = re.compile(r"<<([~-]?)(['\"]?)([A-Za-z_][A-Za-z0-9_]*)\2")


class Lexer:
    """Converts recipe source text into a flat token list.

    Lexing errors raise ``ParseError`` immediately; there is no recovery.
    """

    def __init__(
        self,
        source: str,
        filename: str | None = None,
        line: int = 1,
        column: int = 1,
    ):
        self.source = source
        self.filename = filename
        self.position = 0
        self.line = line
        self.column = column
        self.tokens: list[Token] = []
        self._pending_heredocs: list[tuple[Token, str, str, bool]] = []

    # =========================================================================
    # Character access
    # =========================================================================

    def current_char(self) -> str | None:
        if self.position >= len(self.source):
            return None
        return self.source[self.position]

    def peek_char(self, offset: int = 1) -> str | None:
        pos = self.position + offset
        if pos >= len(self.source):
            return None
        return self.source[pos]

    def advance(self) -> str | None:
        """Advance position and return the consumed character."""
        if self.position >= len(self.source):
            return None
        char = self.source[self.position]
        self.position += 1
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def error(self, message: str, line: int | None = None, column: int | None = None) -> ParseError:
        return ParseError(
            message,
            self.filename,
            line if line is not None else self.line,
            column if column is not None else self.column,
        )

    def _at_line_start(self) -> bool:
        return self.position == 0 or self.source[self.position - 1] == "\n"

    def _previous(self) -> Token | None:
        return self.tokens[-1] if self.tokens else None

    def _operand_expected(self, space_before: bool) -> bool:
        """Whether the next character starts an operand rather than an operator."""
        prev = self._previous()
        if prev is None or not prev.ends_value():
            return True
        # `name /re/`, `name %w[..]`, `name <<~EOS`: a command argument
        next_char = self.peek_char()
        return (
            prev.type == TokenType.IDENTIFIER
            and space_before
            and next_char is not None
            and next_char not in " \t\n="
        )

    # =========================================================================
    # Main loop
    # =========================================================================

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source, ending with an EOF token."""
        space_before = True

        while self.position < len(self.source):
            char = self.current_char()

            if self._at_line_start():
                if self.source.startswith("=begin", self.position):
                    self._skip_block_comment()
                    continue
                if self.source.startswith("__END__", self.position) and self.source[
                    self.position + 7 : self.position + 8
                ] in ("", "\n", "\r"):
                    break

            if char in " \t\r":
                self.advance()
                space_before = True
                continue

            if char == "\\" and self.peek_char() == "\n":
                self.advance()
                self.advance()
                space_before = True
                continue

            if char == "#":
                while self.current_char() is not None and self.current_char() != "\n":
                    self.advance()
                continue

            if char == "\n":
                self._newline()
                space_before = True
                continue

            token = self._next_token(char, space_before)
            self.tokens.append(token)
            space_before = False

        if self._pending_heredocs:
            token, ident, _, _ = self._pending_heredocs[0]
            raise self.error(f"Unterminated heredoc {ident}", token.line, token.column)

        self.tokens.append(Token(TokenType.EOF, "", self.line, self.column, True, self.filename))
        return self.tokens

    def _make(self, token_type: TokenType, value, line: int, column: int, space: bool) -> Token:
        return Token(token_type, value, line, column, space, self.filename)

    def _next_token(self, char: str, space_before: bool) -> Token:
        line, column = self.line, self.column

        if char.isdigit():
            token_type, value = self._read_number()
            return self._make(token_type, value, line, column, space_before)

        if char.isalpha() or char == "_":
            return self._read_word(line, column, space_before)

        if char == "@":
            self.advance()
            prefix = "@"
            if self.current_char() == "@":
                self.advance()
                prefix = "@@"
            name = self._read_name()
            if not name:
                raise self.error("Expected instance variable name", line, column)
            return self._make(TokenType.IVAR, prefix + name, line, column, space_before)

        if char == "$":
            self.advance()
            name = self._read_name()
            if not name:
                special = self.advance()
                if special is None:
                    raise self.error("Expected global variable name", line, column)
                name = special
            return self._make(TokenType.GVAR, "$" + name, line, column, space_before)

        if char in "\"'`":
            self.advance()
            raw = self._read_quoted(char, interpolate=char != "'")
            parts = self._string_parts(raw, char != "'", char, line, column + 1)
            token_type = TokenType.XSTRING if char == "`" else TokenType.STRING
            return self._make(token_type, parts, line, column, space_before)

        if char == ":":
            return self._read_colon(line, column, space_before)

        if char == "/" and self._operand_expected(space_before):
            self.advance()
            body = self._read_quoted("/", interpolate=True)
            flags = self._read_regexp_flags()
            return self._make(TokenType.REGEXP, (body, flags), line, column, space_before)

        if char == "%" and self._operand_expected(space_before):
            token = self._read_percent(line, column, space_before)
            if token is not None:
                return token

        if char == "<" and self._operand_expected(space_before):
            match = _HEREDOC.match(self.source, self.position)
            if match and (match.group(1) or match.group(2) or match.group(3)[0].isupper()):
                return self._start_heredoc(match, line, column, space_before)

        if self.source.startswith("=>", self.position):
            self.advance()
            self.advance()
            return self._make(TokenType.ASSOC, "=>", line, column, space_before)

        if self.source.startswith("&.", self.position) and not self.source.startswith(
            "&..", self.position
        ):
            self.advance()
            self.advance()
            return self._make(TokenType.SAFE_NAV, "&.", line, column, space_before)

        for op in _OPERATORS:
            if self.source.startswith(op, self.position):
                for _ in op:
                    self.advance()
                return self._make(TokenType.OPERATOR, op, line, column, space_before)

        if char in _PUNCTUATION:
            self.advance()
            return self._make(_PUNCTUATION[char], char, line, column, space_before)

        raise self.error(f"Unexpected character: {char!r}", line, column)

    # =========================================================================
    # Newlines, comments and heredoc bodies
    # =========================================================================

    def _skip_block_comment(self) -> None:
        while self.current_char() is not None:
            at_end = self.source.startswith("=end", self.position)
            while self.current_char() is not None and self.current_char() != "\n":
                self.advance()
            self.advance()
            if at_end:
                return
        raise self.error("Unterminated =begin comment")

    def _newline(self) -> None:
        line, column = self.line, self.column
        self.advance()

        if self._pending_heredocs:
            self._read_heredoc_bodies()

        if self._continues_with_dot():
            return

        prev = self._previous()
        if prev is not None and prev.type not in (TokenType.NEWLINE, TokenType.SEMICOLON):
            self.tokens.append(self._make(TokenType.NEWLINE, "\n", line, column, False))

    def _continues_with_dot(self) -> bool:
        """Whether the next code line starts with `.method` (a chained call)."""
        pos = self.position
        source = self.source
        while pos < len(source):
            if source[pos] in " \t\r\n":
                pos += 1
            elif source[pos] == "#":
                while pos < len(source) and source[pos] != "\n":
                    pos += 1
            else:
                break
        if source.startswith("&.", pos):
            return True
        return source.startswith(".", pos) and not source.startswith("..", pos)

    def _start_heredoc(self, match: re.Match, line: int, column: int, space: bool) -> Token:
        mode, quote, ident = match.group(1), match.group(2), match.group(3)
        for _ in match.group(0):
            self.advance()
        token = self._make(TokenType.STRING, [], line, column, space)
        self._pending_heredocs.append((token, ident, mode, quote != "'"))
        return token

    def _read_heredoc_bodies(self) -> None:
        pending, self._pending_heredocs = self._pending_heredocs, []
        for token, ident, mode, interpolate in pending:
            body_line = self.line
            lines: list[str] = []
            while True:
                if self.position >= len(self.source):
                    raise self.error(f"Unterminated heredoc {ident}", token.line, token.column)
                end = self.source.find("\n", self.position)
                if end == -1:
                    end = len(self.source)
                text = self.source[self.position : end]
                while self.position < end:
                    self.advance()
                self.advance()
                candidate = text.rstrip("\r")
                if mode:
                    candidate = candidate.strip()
                if candidate == ident:
                    break
                lines.append(text + "\n")

            if mode == "~":
                lines = _dedent(lines)
            token.value = self._string_parts("".join(lines), interpolate, None, body_line, 1)

    # =========================================================================
    # Literal readers
    # =========================================================================

    def _read_name(self) -> str:
        start = self.position
        while self.current_char() is not None and (
            self.current_char().isalnum() or self.current_char() == "_"
        ):
            self.advance()
        return self.source[start : self.position]

    def _read_word(self, line: int, column: int, space: bool) -> Token:
        name = self._read_name()
        char, following = self.current_char(), self.peek_char()
        if char in ("?", "!") and following != "=":
            self.advance()
            name += char
        elif char in ("?", "!") and following == "=" and self.peek_char(2) == "=":
            self.advance()
            name += char

        prev = self._previous()
        after_dot = prev is not None and prev.type in (TokenType.DOT, TokenType.SAFE_NAV)
        after_def = prev is not None and prev.is_keyword("def")

        if (
            self.current_char() == ":"
            and self.peek_char() != ":"
            and not (prev is not None and prev.type == TokenType.QUESTION)
        ):
            self.advance()
            return self._make(TokenType.LABEL, name, line, column, space)

        if name in KEYWORDS and not after_dot and not after_def:
            return self._make(TokenType.KEYWORD, name, line, column, space)
        if name[0].isupper():
            return self._make(TokenType.CONSTANT, name, line, column, space)
        return self._make(TokenType.IDENTIFIER, name, line, column, space)

    def _read_number(self) -> tuple[TokenType, str]:
        start = self.position
        if self.current_char() == "0" and self.peek_char() in ("x", "X", "b", "B", "o", "O"):
            self.advance()
            self.advance()
            while self.current_char() is not None and (
                self.current_char().isalnum() or self.current_char() == "_"
            ):
                self.advance()
            return TokenType.INTEGER, self.source[start : self.position].replace("_", "")

        is_float = False
        self._read_digits()
        if self.current_char() == "." and (self.peek_char() or "").isdigit():
            is_float = True
            self.advance()
            self._read_digits()
        if self.current_char() in ("e", "E") and (
            (self.peek_char() or "").isdigit()
            or (self.peek_char() in ("+", "-") and (self.peek_char(2) or "").isdigit())
        ):
            is_float = True
            self.advance()
            if self.current_char() in ("+", "-"):
                self.advance()
            self._read_digits()
        value = self.source[start : self.position].replace("_", "")
        return (TokenType.FLOAT if is_float else TokenType.INTEGER), value

    def _read_digits(self) -> None:
        while self.current_char() is not None and (
            self.current_char().isdigit() or self.current_char() == "_"
        ):
            self.advance()

    def _read_colon(self, line: int, column: int, space: bool) -> Token:
        following = self.peek_char()
        if following == ":":
            self.advance()
            self.advance()
            return self._make(TokenType.COLON2, "::", line, column, space)

        if following in ('"', "'"):
            self.advance()
            quote = self.advance()
            raw = self._read_quoted(quote, interpolate=quote == '"')
            parts = self._string_parts(raw, quote == '"', quote, line, column + 2)
            if any(not isinstance(part, str) for part in parts):
                raise self.error("Interpolated symbols are not supported", line, column)
            return self._make(TokenType.SYMBOL, "".join(parts), line, column, space)

        if following is not None and (following.isalpha() or following == "_"):
            self.advance()
            name = self._read_name()
            if self.current_char() in ("?", "!", "="):
                if not (self.current_char() == "=" and self.peek_char() in ("=", "~", ">")):
                    name += self.advance()
            return self._make(TokenType.SYMBOL, name, line, column, space)

        self.advance()
        return self._make(TokenType.COLON, ":", line, column, space)

    def _read_regexp_flags(self) -> str:
        start = self.position
        while self.current_char() is not None and self.current_char() in "imxounse":
            self.advance()
        return self.source[start : self.position]

    def _read_percent(self, line: int, column: int, space: bool) -> Token | None:
        kind = self.peek_char()
        if kind is not None and kind in "wWiIqQr":
            delimiter = self.peek_char(2)
            offset = 2
        else:
            delimiter, kind, offset = kind, "Q", 1
        if delimiter is None or delimiter.isalnum() or delimiter in " \t\n=":
            return None

        for _ in range(offset + 1):
            self.advance()
        closing = _CLOSING.get(delimiter, delimiter)
        opening = delimiter if delimiter in _CLOSING else None
        interpolate = kind in "QWIr"
        raw = self._read_quoted(closing, interpolate=interpolate, opening=opening)

        if kind in "wW":
            return self._make(TokenType.WORDS, raw.split(), line, column, space)
        if kind in "iI":
            return self._make(TokenType.SYMBOLS, raw.split(), line, column, space)
        if kind == "r":
            flags = self._read_regexp_flags()
            return self._make(TokenType.REGEXP, (raw, flags), line, column, space)
        parts = self._string_parts(raw, interpolate, closing, line, column + offset + 1)
        return self._make(TokenType.STRING, parts, line, column, space)

    def _read_quoted(self, closing: str, interpolate: bool, opening: str | None = None) -> str:
        """Read up to the unescaped closing delimiter and return the raw body.

        Nested ``opening``/``closing`` pairs are balanced, and ``#{...}``
        segments are skipped as a unit so their quotes do not end the string.
        """
        start_line, start_column = self.line, self.column
        start = self.position
        depth = 0
        while True:
            char = self.current_char()
            if char is None:
                raise self.error("Unterminated string literal", start_line, start_column)
            if char == "\\":
                self.advance()
                self.advance()
                continue
            if interpolate and char == "#" and self.peek_char() == "{":
                end = _matching_brace(self.source, self.position + 1)
                if end == -1:
                    raise self.error("Unterminated interpolation", self.line, self.column)
                while self.position <= end:
                    self.advance()
                continue
            if opening is not None and char == opening:
                depth += 1
            elif char == closing:
                if depth == 0:
                    body = self.source[start : self.position]
                    self.advance()
                    return body
                depth -= 1
            self.advance()

    def _string_parts(
        self,
        raw: str,
        interpolate: bool,
        delimiter: str | None,
        line: int,
        column: int,
    ) -> list:
        """Split a raw string body into text and interpolation parts."""
        parts: list = []
        buffer = ""
        index = 0
        while index < len(raw):
            char = raw[index]
            if char == "\n":
                line += 1
                column = 0
            if char == "\\" and index + 1 < len(raw):
                escaped = raw[index + 1]
                if interpolate:
                    if escaped == "\n":
                        line += 1
                    else:
                        buffer += _ESCAPES.get(escaped, escaped)
                elif escaped == "\\" or escaped == delimiter:
                    buffer += escaped
                else:
                    buffer += char + escaped
                index += 2
                column += 2
                continue
            if interpolate and char == "#" and raw[index + 1 : index + 2] == "{":
                end = _matching_brace(raw, index + 1)
                inner = raw[index + 2 : end]
                if buffer:
                    parts.append(buffer)
                    buffer = ""
                sub = Lexer(inner, self.filename, line, column + 2)
                tokens = sub.tokenize()
                parts.append(Embedded(tokens, line, column))
                line += inner.count("\n")
                index = end + 1
                continue
            buffer += char
            index += 1
            column += 1
        if buffer or not parts:
            parts.append(buffer)
        return parts


def _matching_brace(text: str, start: int) -> int:
    """Index of the `}` matching the `{` at ``start``, or -1."""
    depth = 0
    index = start
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char in "\"'":
            index += 1
            while index < len(text) and text[index] != char:
                index += 2 if text[index] == "\\" else 1
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return -1


def _dedent(lines: list[str]) -> list[str]:
    indents = [
        len(line) - len(line.lstrip(" \t")) for line in lines if line.strip()
    ]
    if not indents:
        return lines
    width = min(indents)
    return [line[width:] if line.strip() else line.lstrip(" \t") for line in lines]


def tokenize(source: str, filename: str | None = None) -> list[Token]:
    """Tokenize recipe source text."""
    return Lexer(source, filename).tokenize()
