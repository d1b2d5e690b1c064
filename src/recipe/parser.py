"""Recursive descent parser for recipe source files.

Builds the syntax tree defined in ``syntax.py`` from the token list produced
by the lexer. The grammar is the subset of Ruby that formula files are
written in. Constructs outside it raise ``ParseError``; there is no error
recovery, a recipe either parses completely or not at all.

Like Ruby, the parser tracks local variables per scope: an identifier is a
variable reference only after it has been assigned (or bound as a method or
block parameter). Otherwise it is a method call, which may take
parenthesis-less arguments (``system "make", "install"``).
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from .errors import ParseError
from .lexer import Lexer
from .syntax import (
    ArrayLit,
    Assign,
    Begin,
    Binary,
    Block,
    BlockPass,
    Call,
    Case,
    ClassDef,
    ConstPath,
    Else,
    FloatLit,
    For,
    HashLit,
    If,
    Index,
    IntLit,
    Interpolation,
    Jump,
    KeywordCall,
    MethodDef,
    ModifierIf,
    ModifierRescue,
    ModuleDef,
    Node,
    OpAssign,
    Paren,
    Program,
    RangeLit,
    RegexpLit,
    Rescue,
    Splat,
    StringLit,
    SymbolLit,
    Ternary,
    Unary,
    VarRef,
    When,
    While,
    XStringLit,
)
from .tokens import Embedded, Token, TokenType

# Binary operator precedence, higher binds tighter
_BINARY_PRECEDENCE = {
    "||": 1,
    "&&": 2,
    "<=>": 3,
    "==": 3,
    "===": 3,
    "!=": 3,
    "=~": 3,
    "!~": 3,
    "<": 4,
    "<=": 4,
    ">": 4,
    ">=": 4,
    "|": 5,
    "^": 5,
    "&": 6,
    "<<": 7,
    ">>": 7,
    "+": 8,
    "-": 8,
    "*": 9,
    "/": 9,
    "%": 9,
    "**": 11,
}

_RIGHT_ASSOCIATIVE = frozenset({"**"})

_OP_ASSIGN = frozenset(
    {"+=", "-=", "*=", "/=", "%=", "**=", "||=", "&&=", "|=", "&=", "^=", "<<=", ">>="}
)

_VALUE_KEYWORDS = frozenset({"nil", "true", "false", "self", "__FILE__"})

# Tokens that can begin a parenthesis-less command argument
_ARG_START_TYPES = frozenset(
    {
        TokenType.STRING,
        TokenType.XSTRING,
        TokenType.INTEGER,
        TokenType.FLOAT,
        TokenType.SYMBOL,
        TokenType.WORDS,
        TokenType.SYMBOLS,
        TokenType.REGEXP,
        TokenType.IDENTIFIER,
        TokenType.CONSTANT,
        TokenType.IVAR,
        TokenType.GVAR,
        TokenType.LABEL,
        TokenType.LBRACKET,
        TokenType.LPAREN,
    }
)

_BODY_END = frozenset({"rescue", "else", "ensure", "end"})


@dataclass
class _Scope:
    hard: bool
    names: set[str] = field(default_factory=set)


class Parser:
    """Recursive descent parser for the recipe grammar."""

    def __init__(
        self,
        tokens: list[Token],
        filename: str | None = None,
        scopes: list[_Scope] | None = None,
    ):
        self.tokens = tokens
        self.filename = filename
        self.current = 0
        self._scopes = scopes if scopes is not None else [_Scope(hard=True)]
        self._no_do = 0

    # =========================================================================
    # Token navigation
    # =========================================================================

    def peek(self, offset: int = 0) -> Token:
        index = min(self.current + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def is_at_end(self) -> bool:
        return self.peek().type == TokenType.EOF

    def advance(self) -> Token:
        token = self.peek()
        if not self.is_at_end():
            self.current += 1
        return token

    def check(self, token_type: TokenType) -> bool:
        return self.peek().type == token_type

    def check_keyword(self, *names: str) -> bool:
        return self.peek().is_keyword(*names)

    def consume(self, token_type: TokenType, message: str) -> Token:
        if self.check(token_type):
            return self.advance()
        raise self.error(message)

    def consume_keyword(self, name: str) -> Token:
        if self.check_keyword(name):
            return self.advance()
        raise self.error(f"Expected '{name}'")

    def skip_newlines(self) -> None:
        while self.check(TokenType.NEWLINE):
            self.advance()

    def _skip_separators(self) -> None:
        while self.peek().type in (TokenType.NEWLINE, TokenType.SEMICOLON):
            self.advance()

    def error(self, message: str, token: Token | None = None) -> ParseError:
        token = token or self.peek()
        return ParseError(f"{message} (found {_describe(token)})", self.filename, token.line, token.column)

    # =========================================================================
    # Scopes
    # =========================================================================

    def is_local(self, name: str) -> bool:
        for scope in reversed(self._scopes):
            if name in scope.names:
                return True
            if scope.hard:
                return False
        return False

    def declare(self, name: str) -> None:
        self._scopes[-1].names.add(name)

    @contextmanager
    def _scope(self, hard: bool) -> Iterator[None]:
        self._scopes.append(_Scope(hard=hard))
        try:
            yield
        finally:
            self._scopes.pop()

    @contextmanager
    def _allow_do(self) -> Iterator[None]:
        saved, self._no_do = self._no_do, 0
        try:
            yield
        finally:
            self._no_do = saved

    # =========================================================================
    # Statements
    # =========================================================================

    def parse(self) -> Program:
        """Parse the whole token stream into a Program."""
        body = self.parse_statements()
        if not self.is_at_end():
            raise self.error("Unexpected token")
        return Program(body=body, line=1, column=1)

    def parse_statements(
        self,
        terminators: frozenset[str] = frozenset(),
        closer: TokenType | None = None,
    ) -> tuple[Node, ...]:
        """Parse statements until EOF, a terminating keyword or a closing token."""
        statements: list[Node] = []
        while True:
            self._skip_separators()
            if self._at_terminator(terminators, closer):
                break
            statements.append(self.parse_statement())
            if not (
                self._at_terminator(terminators, closer)
                or self.peek().type in (TokenType.NEWLINE, TokenType.SEMICOLON)
            ):
                raise self.error("Unexpected token after statement")
        return tuple(statements)

    def _at_terminator(self, terminators: frozenset[str], closer: TokenType | None) -> bool:
        token = self.peek()
        if token.type == TokenType.EOF:
            return True
        if closer is not None and token.type == closer:
            return True
        return token.type == TokenType.KEYWORD and token.value in terminators

    def parse_statement(self) -> Node:
        """Parse one statement including trailing `if`/`unless`/`while`/`rescue` modifiers."""
        statement = self.parse_expression_statement()
        while True:
            token = self.peek()
            if token.is_keyword("if", "unless"):
                self.advance()
                cond = self.parse_expression_statement()
                statement = ModifierIf(
                    keyword=token.value,
                    cond=cond,
                    statement=statement,
                    line=statement.line,
                    column=statement.column,
                )
            elif token.is_keyword("while", "until"):
                self.advance()
                cond = self.parse_expression_statement()
                statement = While(
                    keyword=token.value,
                    cond=cond,
                    body=(statement,),
                    modifier=True,
                    line=statement.line,
                    column=statement.column,
                )
            elif token.is_keyword("rescue"):
                self.advance()
                rescue = self.parse_expression_statement()
                statement = ModifierRescue(
                    statement=statement,
                    rescue=rescue,
                    line=statement.line,
                    column=statement.column,
                )
            else:
                return statement

    def parse_expression_statement(self) -> Node:
        """Parse `and`/`or` chains."""
        left = self.parse_not()
        while self.peek().is_keyword("and", "or"):
            op = self.advance()
            self.skip_newlines()
            right = self.parse_not()
            left = Binary(op=op.value, left=left, right=right, line=left.line, column=left.column)
        return left

    def parse_not(self) -> Node:
        token = self.peek()
        if token.is_keyword("not"):
            self.advance()
            operand = self.parse_not()
            return Unary(op="not", operand=operand, line=token.line, column=token.column)
        return self.parse_expr()

    # =========================================================================
    # Expressions
    # =========================================================================

    def parse_expr(self) -> Node:
        """Parse an assignment or an operator expression."""
        target = self.parse_ternary()
        token = self.peek()
        if token.is_operator("="):
            target = self._assignable(target, token)
            self.advance()
            self.skip_newlines()
            value = self.parse_expr()
            return Assign(target=target, value=value, line=target.line, column=target.column)
        if token.type == TokenType.OPERATOR and token.value in _OP_ASSIGN:
            target = self._assignable(target, token)
            self.advance()
            self.skip_newlines()
            value = self.parse_expr()
            return OpAssign(
                target=target,
                op=token.value[:-1],
                value=value,
                line=target.line,
                column=target.column,
            )
        return target

    def _assignable(self, node: Node, token: Token) -> Node:
        if isinstance(node, VarRef):
            if node.name in _VALUE_KEYWORDS:
                raise self.error(f"Cannot assign to {node.name}", token)
            if node.name[0].islower() or node.name[0] == "_":
                self.declare(node.name)
            return node
        if isinstance(node, Call) and node.node_kind == "vcall":
            self.declare(node.name)
            return VarRef(name=node.name, line=node.line, column=node.column)
        if isinstance(node, Call) and node.receiver is not None and not node.args and node.block is None:
            return node
        if isinstance(node, (Index, ConstPath)):
            return node
        raise self.error("Invalid assignment target", token)

    def parse_ternary(self) -> Node:
        cond = self.parse_range()
        if not self.check(TokenType.QUESTION):
            return cond
        self.advance()
        self.skip_newlines()
        then = self.parse_ternary()
        self.skip_newlines()
        self.consume(TokenType.COLON, "Expected ':' in conditional expression")
        self.skip_newlines()
        orelse = self.parse_ternary()
        return Ternary(cond=cond, then=then, orelse=orelse, line=cond.line, column=cond.column)

    def parse_range(self) -> Node:
        low = self.parse_binary(0)
        token = self.peek()
        if token.is_operator("..", "..."):
            self.advance()
            high = None
            if self.peek().type not in (TokenType.NEWLINE, TokenType.RPAREN, TokenType.EOF):
                high = self.parse_binary(0)
            return RangeLit(
                low=low,
                high=high,
                exclusive=token.value == "...",
                line=low.line,
                column=low.column,
            )
        return low

    def parse_binary(self, min_precedence: int) -> Node:
        """Precedence climbing over the binary operator table."""
        left = self.parse_unary()
        while True:
            token = self.peek()
            if token.type != TokenType.OPERATOR or token.value not in _BINARY_PRECEDENCE:
                return left
            precedence = _BINARY_PRECEDENCE[token.value]
            if precedence < min_precedence:
                return left
            self.advance()
            self.skip_newlines()
            if token.value in _RIGHT_ASSOCIATIVE:
                right = self.parse_binary(precedence)
            else:
                right = self.parse_binary(precedence + 1)
            left = Binary(op=token.value, left=left, right=right, line=left.line, column=left.column)

    def parse_unary(self) -> Node:
        token = self.peek()
        if token.is_operator("!", "~"):
            self.advance()
            operand = self.parse_unary()
            return Unary(op=token.value, operand=operand, line=token.line, column=token.column)
        if token.is_operator("-", "+"):
            self.advance()
            following = self.peek()
            if following.type in (TokenType.INTEGER, TokenType.FLOAT) and not following.space_before:
                operand = self.parse_postfix()
                if token.value == "-" and isinstance(operand, IntLit):
                    return IntLit(value=-operand.value, line=token.line, column=token.column)
                if token.value == "-" and isinstance(operand, FloatLit):
                    return FloatLit(value=-operand.value, line=token.line, column=token.column)
                if token.value == "+" and isinstance(operand, (IntLit, FloatLit)):
                    return operand
            else:
                operand = self.parse_unary()
            return Unary(op=token.value, operand=operand, line=token.line, column=token.column)
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        """Parse method chains, constant paths and indexing on a primary."""
        node = self.parse_primary()
        while True:
            token = self.peek()
            if token.type in (TokenType.DOT, TokenType.SAFE_NAV):
                self.advance()
                self.skip_newlines()
                name = self.advance()
                if name.type not in (TokenType.IDENTIFIER, TokenType.CONSTANT, TokenType.KEYWORD):
                    raise self.error("Expected method name", name)
                node = self.parse_call_rest(name.value, node, node)
            elif token.type == TokenType.COLON2:
                self.advance()
                name = self.advance()
                following = self.peek()
                called = following.type == TokenType.LPAREN and not following.space_before
                if name.type == TokenType.CONSTANT and not called:
                    node = ConstPath(scope=node, name=name.value, line=node.line, column=node.column)
                elif name.type in (TokenType.IDENTIFIER, TokenType.CONSTANT):
                    node = self.parse_call_rest(name.value, node, node)
                else:
                    raise self.error("Expected constant or method name", name)
            elif token.type == TokenType.LBRACKET and not token.space_before:
                self.advance()
                args = self._parse_delimited_args(TokenType.RBRACKET, "Expected ']'")
                node = Index(base=node, args=args, line=node.line, column=node.column)
            else:
                return node

    def parse_call_rest(self, name: str, receiver: Node | None, start: Token | Node) -> Call:
        """Parse the arguments and block following a method name."""
        args: tuple[Node, ...] = ()
        parens = False
        token = self.peek()
        if token.type == TokenType.LPAREN and not token.space_before:
            self.advance()
            args = self._parse_delimited_args(TokenType.RPAREN, "Expected ')'")
            parens = True
        elif self._starts_command_arg(token):
            args = self.parse_command_args()
        block = self._parse_block()
        return Call(
            name=name,
            receiver=receiver,
            args=args,
            block=block,
            parens=parens,
            line=start.line,
            column=start.column,
        )

    def _starts_command_arg(self, token: Token) -> bool:
        if not token.space_before:
            return False
        if token.type in _ARG_START_TYPES:
            return True
        if token.type == TokenType.KEYWORD:
            return token.value in _VALUE_KEYWORDS or token.value == "not"
        if token.type == TokenType.COLON2 or (
            token.type == TokenType.OPERATOR and token.value in ("-", "*", "**", "&", "!", "~")
        ):
            following = self.peek(1)
            return not following.space_before and following.type not in (
                TokenType.NEWLINE,
                TokenType.EOF,
            )
        return False

    def parse_command_args(self) -> tuple[Node, ...]:
        """Parse parenthesis-less arguments; `do` belongs to the outer command."""
        self._no_do += 1
        try:
            return self.parse_arg_list(None)
        finally:
            self._no_do -= 1

    def _parse_delimited_args(self, closer: TokenType, message: str) -> tuple[Node, ...]:
        with self._allow_do():
            self.skip_newlines()
            if self.check(closer):
                self.advance()
                return ()
            args = self.parse_arg_list(closer)
            self.skip_newlines()
            self.consume(closer, message)
        return args

    def parse_arg_list(self, closer: TokenType | None) -> tuple[Node, ...]:
        """Parse comma separated arguments, folding `key => value` pairs into a trailing hash."""
        args: list[Node] = []
        pairs: list[tuple[Node, Node]] = []
        while True:
            token = self.peek()
            if token.type == TokenType.LABEL:
                self.advance()
                self.skip_newlines()
                key = SymbolLit(name=token.value, line=token.line, column=token.column)
                pairs.append((key, self.parse_expr()))
            elif token.is_operator("*", "**", "&"):
                self.advance()
                value = self.parse_expr()
                if token.value == "&":
                    args.append(BlockPass(value=value, line=token.line, column=token.column))
                else:
                    args.append(
                        Splat(
                            value=value,
                            double=token.value == "**",
                            line=token.line,
                            column=token.column,
                        )
                    )
            else:
                value = self.parse_expr()
                if self.check(TokenType.ASSOC):
                    self.advance()
                    self.skip_newlines()
                    pairs.append((value, self.parse_expr()))
                else:
                    if pairs:
                        raise self.error("Positional argument after hash arguments")
                    args.append(value)

            if not self.check(TokenType.COMMA):
                break
            self.advance()
            self.skip_newlines()
            if closer is not None and self.check(closer):
                break

        if pairs:
            first = pairs[0][0]
            args.append(
                HashLit(pairs=tuple(pairs), braces=False, line=first.line, column=first.column)
            )
        return tuple(args)

    # =========================================================================
    # Blocks
    # =========================================================================

    def _parse_block(self) -> Block | None:
        token = self.peek()
        if token.type == TokenType.LBRACE:
            return self._parse_brace_block()
        if token.is_keyword("do") and self._no_do == 0:
            return self._parse_do_block()
        return None

    def _parse_brace_block(self) -> Block:
        start = self.advance()
        with self._scope(hard=False), self._allow_do():
            params = self._parse_block_params()
            body = self.parse_statements(closer=TokenType.RBRACE)
            self.consume(TokenType.RBRACE, "Expected '}' to close block")
        return Block(params=params, body=body, brace=True, line=start.line, column=start.column)

    def _parse_do_block(self) -> Block:
        start = self.advance()
        with self._scope(hard=False), self._allow_do():
            params = self._parse_block_params()
            body = self._parse_body(start)
            self.consume_keyword("end")
        return Block(params=params, body=body, brace=False, line=start.line, column=start.column)

    def _parse_block_params(self) -> tuple[str, ...]:
        if self.peek().is_operator("||"):
            self.advance()
            return ()
        if not self.peek().is_operator("|"):
            return ()
        self.advance()
        names: list[str] = []
        while not self.peek().is_operator("|"):
            token = self.advance()
            if token.type in (TokenType.IDENTIFIER, TokenType.LABEL):
                names.append(token.value)
            elif token.is_operator("*", "**", "&") and self.check(TokenType.IDENTIFIER):
                names.append(self.advance().value)
            elif token.type in (TokenType.COMMA, TokenType.LPAREN, TokenType.RPAREN):
                continue
            else:
                raise self.error("Unexpected token in block parameters", token)
        self.advance()
        for name in names:
            self.declare(name)
        return tuple(names)

    def _parse_body(self, start: Token) -> tuple[Node, ...]:
        """Parse a body that may carry `rescue`/`else`/`ensure` clauses."""
        body = self.parse_statements(_BODY_END)
        rescues: list[Rescue] = []
        while self.check_keyword("rescue"):
            rescues.append(self._parse_rescue_clause())
        else_body: tuple[Node, ...] = ()
        ensure_body: tuple[Node, ...] = ()
        if rescues and self.check_keyword("else"):
            self.advance()
            else_body = self.parse_statements(frozenset({"ensure", "end"}))
        if self.check_keyword("ensure"):
            self.advance()
            ensure_body = self.parse_statements(frozenset({"end"}))
        if not rescues and not ensure_body:
            return body
        return (
            Begin(
                body=body,
                rescues=tuple(rescues),
                else_body=else_body,
                ensure_body=ensure_body,
                line=start.line,
                column=start.column,
            ),
        )

    def _parse_rescue_clause(self) -> Rescue:
        start = self.advance()
        exceptions: list[Node] = []
        variable = None
        while self.peek().type not in (
            TokenType.NEWLINE,
            TokenType.SEMICOLON,
            TokenType.ASSOC,
        ) and not self.check_keyword("then"):
            exceptions.append(self.parse_ternary())
            if not self.check(TokenType.COMMA):
                break
            self.advance()
        if self.check(TokenType.ASSOC):
            self.advance()
            variable = self.consume(TokenType.IDENTIFIER, "Expected rescue variable").value
            self.declare(variable)
        if self.check_keyword("then"):
            self.advance()
        body = self.parse_statements(_BODY_END)
        return Rescue(
            exceptions=tuple(exceptions),
            variable=variable,
            body=body,
            line=start.line,
            column=start.column,
        )

    # =========================================================================
    # Primaries
    # =========================================================================

    def parse_primary(self) -> Node:
        token = self.peek()
        kind = token.type
        pos = {"line": token.line, "column": token.column}

        if kind == TokenType.INTEGER:
            self.advance()
            return IntLit(value=_int_value(token.value), **pos)
        if kind == TokenType.FLOAT:
            self.advance()
            return FloatLit(value=float(token.value), **pos)
        if kind == TokenType.STRING:
            self.advance()
            parts = list(self._string_parts(token))
            while self.check(TokenType.STRING) and self.peek().space_before:
                parts.extend(self._string_parts(self.advance()))
            return StringLit(parts=_merge_text(parts), **pos)
        if kind == TokenType.XSTRING:
            self.advance()
            return XStringLit(parts=self._string_parts(token), **pos)
        if kind == TokenType.REGEXP:
            self.advance()
            source, flags = token.value
            return RegexpLit(source=source, flags=flags, **pos)
        if kind == TokenType.SYMBOL:
            self.advance()
            return SymbolLit(name=token.value, **pos)
        if kind == TokenType.WORDS:
            self.advance()
            return ArrayLit(elements=tuple(StringLit(parts=(word,), **pos) for word in token.value), **pos)
        if kind == TokenType.SYMBOLS:
            self.advance()
            return ArrayLit(elements=tuple(SymbolLit(name=name, **pos) for name in token.value), **pos)
        if kind in (TokenType.IVAR, TokenType.GVAR):
            self.advance()
            return VarRef(name=token.value, **pos)
        if kind == TokenType.CONSTANT:
            self.advance()
            following = self.peek()
            if following.type == TokenType.LPAREN and not following.space_before:
                return self.parse_call_rest(token.value, None, token)
            return VarRef(name=token.value, **pos)
        if kind == TokenType.IDENTIFIER:
            self.advance()
            following = self.peek()
            called = following.type == TokenType.LPAREN and not following.space_before
            if self.is_local(token.value) and not called:
                return VarRef(name=token.value, **pos)
            return self.parse_call_rest(token.value, None, token)
        if kind == TokenType.KEYWORD:
            return self._parse_keyword(token)
        if kind == TokenType.LPAREN:
            self.advance()
            with self._allow_do():
                body = self.parse_statements(closer=TokenType.RPAREN)
                self.consume(TokenType.RPAREN, "Expected ')'")
            return Paren(body=body, **pos)
        if kind == TokenType.LBRACKET:
            self.advance()
            elements = self._parse_delimited_args(TokenType.RBRACKET, "Expected ']'")
            return ArrayLit(elements=elements, **pos)
        if kind == TokenType.LBRACE:
            return self._parse_hash()
        if kind == TokenType.COLON2:
            self.advance()
            name = self.consume(TokenType.CONSTANT, "Expected constant after '::'")
            return ConstPath(scope=None, name=name.value, **pos)
        if token.is_operator("->"):
            raise self.error("Lambda literals are not supported")
        raise self.error("Unexpected token")

    def _string_parts(self, token: Token) -> tuple:
        parts = []
        for part in token.value:
            if isinstance(part, Embedded):
                parts.append(self._parse_embedded(part))
            else:
                parts.append(part)
        return tuple(parts)

    def _parse_embedded(self, embedded: Embedded) -> Interpolation:
        sub = Parser(embedded.tokens, self.filename, self._scopes)
        body = sub.parse_statements()
        if not sub.is_at_end():
            raise sub.error("Unexpected token in interpolation")
        return Interpolation(body=body, line=embedded.line, column=embedded.column)

    def _parse_hash(self) -> HashLit:
        start = self.advance()
        pairs: list[tuple[Node, Node]] = []
        with self._allow_do():
            self.skip_newlines()
            while not self.check(TokenType.RBRACE):
                token = self.peek()
                if token.type == TokenType.LABEL:
                    self.advance()
                    self.skip_newlines()
                    key: Node = SymbolLit(name=token.value, line=token.line, column=token.column)
                else:
                    key = self.parse_expr()
                    self.skip_newlines()
                    self.consume(TokenType.ASSOC, "Expected '=>' in hash literal")
                    self.skip_newlines()
                pairs.append((key, self.parse_expr()))
                self.skip_newlines()
                if not self.check(TokenType.COMMA):
                    break
                self.advance()
                self.skip_newlines()
            self.consume(TokenType.RBRACE, "Expected '}' to close hash")
        return HashLit(pairs=tuple(pairs), braces=True, line=start.line, column=start.column)

    # =========================================================================
    # Keyword constructs
    # =========================================================================

    def _parse_keyword(self, token: Token) -> Node:
        value = token.value
        pos = {"line": token.line, "column": token.column}

        if value in _VALUE_KEYWORDS:
            self.advance()
            return VarRef(name=value, **pos)
        if value in ("if", "unless"):
            return self._parse_if()
        if value in ("while", "until"):
            return self._parse_while()
        if value == "for":
            return self._parse_for()
        if value == "case":
            return self._parse_case()
        if value == "begin":
            self.advance()
            body = self._parse_body(token)
            self.consume_keyword("end")
            if len(body) == 1 and isinstance(body[0], Begin):
                return body[0]
            return Begin(body=body, **pos)
        if value == "def":
            return self._parse_def()
        if value == "class":
            return self._parse_class()
        if value == "module":
            return self._parse_module()
        if value in ("return", "next", "break"):
            self.advance()
            result = None
            if self._starts_command_arg(self.peek()):
                result = self.parse_expr()
            return Jump(keyword=value, value=result, **pos)
        if value in ("yield", "super"):
            self.advance()
            following = self.peek()
            args: tuple[Node, ...] = ()
            if following.type == TokenType.LPAREN and not following.space_before:
                self.advance()
                args = self._parse_delimited_args(TokenType.RPAREN, "Expected ')'")
            elif self._starts_command_arg(following):
                args = self.parse_command_args()
            return KeywordCall(keyword=value, args=args, **pos)
        if value == "not":
            self.advance()
            operand = self.parse_expr()
            return Unary(op="not", operand=operand, **pos)
        raise self.error(f"Unexpected keyword '{value}'")

    def _parse_if(self) -> If:
        token = self.advance()
        cond = self.parse_expression_statement()
        if self.check_keyword("then"):
            self.advance()
        body = self.parse_statements(frozenset({"elsif", "else", "end"}))
        pos = {"line": token.line, "column": token.column}

        if token.value != "unless" and self.check_keyword("elsif"):
            orelse = self._parse_if()
            return If(keyword=token.value, cond=cond, body=body, orelse=orelse, **pos)

        orelse = None
        if self.check_keyword("else"):
            else_token = self.advance()
            else_body = self.parse_statements(frozenset({"end"}))
            orelse = Else(body=else_body, line=else_token.line, column=else_token.column)
        self.consume_keyword("end")
        return If(keyword=token.value, cond=cond, body=body, orelse=orelse, **pos)

    def _parse_while(self) -> While:
        token = self.advance()
        self._no_do += 1
        try:
            cond = self.parse_expression_statement()
        finally:
            self._no_do -= 1
        if self.check_keyword("do"):
            self.advance()
        body = self.parse_statements(frozenset({"end"}))
        self.consume_keyword("end")
        return While(keyword=token.value, cond=cond, body=body, line=token.line, column=token.column)

    def _parse_for(self) -> For:
        token = self.advance()
        targets = [self.consume(TokenType.IDENTIFIER, "Expected loop variable").value]
        while self.check(TokenType.COMMA):
            self.advance()
            targets.append(self.consume(TokenType.IDENTIFIER, "Expected loop variable").value)
        for name in targets:
            self.declare(name)
        self.consume_keyword("in")
        self._no_do += 1
        try:
            iterable = self.parse_expression_statement()
        finally:
            self._no_do -= 1
        if self.check_keyword("do"):
            self.advance()
        body = self.parse_statements(frozenset({"end"}))
        self.consume_keyword("end")
        return For(
            targets=tuple(targets),
            iterable=iterable,
            body=body,
            line=token.line,
            column=token.column,
        )

    def _parse_case(self) -> Case:
        token = self.advance()
        subject = None
        if self.peek().type not in (TokenType.NEWLINE, TokenType.SEMICOLON):
            subject = self.parse_expression_statement()
        self._skip_separators()
        whens: list[When] = []
        while self.check_keyword("when"):
            when_token = self.advance()
            values = self.parse_arg_list(None)
            if self.check_keyword("then"):
                self.advance()
            body = self.parse_statements(frozenset({"when", "else", "end"}))
            whens.append(When(values=values, body=body, line=when_token.line, column=when_token.column))
        if not whens:
            raise self.error("Expected 'when' in case expression")
        orelse = None
        if self.check_keyword("else"):
            else_token = self.advance()
            orelse = Else(
                body=self.parse_statements(frozenset({"end"})),
                line=else_token.line,
                column=else_token.column,
            )
        self.consume_keyword("end")
        return Case(
            subject=subject,
            whens=tuple(whens),
            orelse=orelse,
            line=token.line,
            column=token.column,
        )

    def _parse_def(self) -> MethodDef:
        token = self.advance()
        singleton = False
        name = self.advance()
        if name.value == "self" and self.check(TokenType.DOT):
            self.advance()
            name = self.advance()
            singleton = True
        if name.type not in (
            TokenType.IDENTIFIER,
            TokenType.CONSTANT,
            TokenType.KEYWORD,
            TokenType.OPERATOR,
        ):
            raise self.error("Expected method name", name)
        method_name = name.value
        if self.peek().is_operator("=") and not self.peek().space_before:
            self.advance()
            method_name += "="

        with self._scope(hard=True), self._allow_do():
            params = self._parse_def_params()
            body = self._parse_body(token)
            self.consume_keyword("end")
        return MethodDef(
            name=method_name,
            params=params,
            body=body,
            singleton=singleton,
            line=token.line,
            column=token.column,
        )

    def _parse_def_params(self) -> tuple[str, ...]:
        parenthesized = self.check(TokenType.LPAREN)
        if parenthesized:
            self.advance()
        names: list[str] = []
        while True:
            token = self.peek()
            if parenthesized and token.type == TokenType.RPAREN:
                self.advance()
                break
            if not parenthesized and token.type in (TokenType.NEWLINE, TokenType.SEMICOLON):
                break
            self.advance()
            if token.type == TokenType.IDENTIFIER:
                names.append(token.value)
                self.declare(token.value)
                if self.peek().is_operator("="):
                    self.advance()
                    self.parse_ternary()
            elif token.type == TokenType.LABEL:
                names.append(token.value)
                self.declare(token.value)
                if self.peek().type not in (TokenType.COMMA, TokenType.RPAREN, TokenType.NEWLINE):
                    self.parse_ternary()
            elif token.is_operator("*", "**", "&"):
                if self.check(TokenType.IDENTIFIER):
                    rest = self.advance().value
                    names.append(rest)
                    self.declare(rest)
            elif token.type == TokenType.COMMA:
                continue
            else:
                raise self.error("Unexpected token in parameter list", token)
        return tuple(names)

    def _parse_const_name(self) -> str:
        parts = [self.consume(TokenType.CONSTANT, "Expected constant name").value]
        while self.check(TokenType.COLON2):
            self.advance()
            parts.append(self.consume(TokenType.CONSTANT, "Expected constant name").value)
        return "::".join(parts)

    def _parse_class(self) -> ClassDef:
        token = self.advance()
        if self.peek().is_operator("<<"):
            raise self.error("Singleton class definitions are not supported")
        name = self._parse_const_name()
        superclass = None
        if self.peek().is_operator("<"):
            self.advance()
            superclass = self.parse_expr()
        with self._scope(hard=True):
            body = self.parse_statements(frozenset({"end"}))
            self.consume_keyword("end")
        return ClassDef(
            name=name,
            superclass=superclass,
            body=body,
            line=token.line,
            column=token.column,
        )

    def _parse_module(self) -> ModuleDef:
        token = self.advance()
        name = self._parse_const_name()
        with self._scope(hard=True):
            body = self.parse_statements(frozenset({"end"}))
            self.consume_keyword("end")
        return ModuleDef(name=name, body=body, line=token.line, column=token.column)


def _describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of file"
    if token.type == TokenType.NEWLINE:
        return "end of line"
    if token.type in (TokenType.STRING, TokenType.XSTRING):
        return "string literal"
    return f"{token.type.name.lower()} {token.value!r}"


def _int_value(text: str) -> int:
    lowered = text.lower()
    if lowered.startswith(("0x", "0b", "0o")):
        return int(lowered, 0)
    if len(text) > 1 and text.startswith("0"):
        return int(text, 8)
    return int(text)


def _merge_text(parts: list) -> tuple:
    """Join adjacent text segments of concatenated string literals."""
    merged: list = []
    for part in parts:
        if isinstance(part, str) and merged and isinstance(merged[-1], str):
            merged[-1] += part
        elif part != "" or not merged:
            merged.append(part)
    if len(merged) > 1 and merged[0] == "":
        merged.pop(0)
    return tuple(merged)


def parse_recipe(source: str, filename: str | None = None) -> Program:
    """Tokenize and parse recipe source text into a Program."""
    tokens = Lexer(source, filename).tokenize()
    return Parser(tokens, filename).parse()
