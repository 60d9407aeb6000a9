"""
Nova Language Parser

Parses a Nova token stream into a typed abstract syntax tree (AST).

The parser pulls tokens lazily from a `Lexer` through a two-token window
(`current_token` and `peek_token`). Statements are parsed by recursive descent;
expressions use precedence climbing driven by the `PRECEDENCES` table, so chains of
left-associative operators are folded in a loop instead of nested calls.

Supported Constructs
--------------------
- Statements:
    * `let <name> = <expr>;`
    * `return <expr>;`
    * `if (<expr>) { ... } else { ... }`
    * `fn <name>(<params>) { ... }`
    * `<expr>;`

- Expressions:
    * Identifiers, integers, `true`/`false`
    * Prefix `-x`, `!x`
    * Infix `+ - * / = ! < >` (all left-associative)
    * Grouping `( ... )`
    * `if` expressions, function literals `fn(a, b) { ... }`, calls `f(a, b)`

Parser Behavior
---------------
- Never raises on malformed input. Each failure records one message in the error list
  and abandons the current statement. The statement loop then skips ahead to the end
  of that statement (its `;`, or for `if`/`fn` the `}` that closes it), so one run can
  report several independent errors without a broken construct leaking its body.
- Nesting (parentheses, blocks, call arguments, prefix operators) is capped at
  `MAX_NESTING` levels; deeper input is reported as an error instead of exhausting
  the interpreter stack.
- The only exception that escapes for user input is `LexError`, raised by the lexer
  when an integer literal does not fit in a signed 64-bit integer.

Entry Points
------------
- `parse_program()`: Parse the whole input into a `Block`.
- `parse()`: Parse the whole input and return `(Block, errors)`.
- `errors()`: The accumulated error messages.
"""

from __future__ import annotations

import logging
from typing import Callable

from nova.nova_ast import (
    Block,
    Boolean,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionDeclaration,
    FunctionLiteral,
    Identifier,
    IfExpression,
    IfStatement,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    ReturnStatement,
    Statement,
)
from nova.nova_constants import (
    ASTERISK,
    COMMA,
    ELSE,
    EOF,
    EQUAL,
    FALSE,
    FUNCTION,
    GREATER_THAN,
    IDENT,
    IF,
    INT,
    LBRACE,
    LESS_THAN,
    LET,
    LOWEST,
    LPAREN,
    MAX_NESTING,
    MINUS,
    NOT_EQUAL,
    PLUS,
    PRECEDENCES,
    PREFIX,
    RBRACE,
    RETURN,
    RPAREN,
    SEMICOLON,
    SLASH,
    TRUE,
)
from nova.nova_lexer import Lexer, Token

logger = logging.getLogger(__name__)

PrefixRule = Callable[[], "Expression | None"]
InfixRule = Callable[["Expression"], "Expression | None"]


class ParserInternalError(RuntimeError):
    """Raised when the token stream breaks an invariant the lexer guarantees."""


class Parser:
    """
    Nova Parser Class

    Transforms the token stream of a `Lexer` into a `Block` of statements.

    Attributes
    ----------
    lexer : Lexer
        Token source; owned exclusively by the parser.
    current_token : Token
        The token under examination.
    peek_token : Token
        The token after `current_token`.
    prefix_rules : dict[str, PrefixRule]
        Parse rules for tokens that can start an expression.
    infix_rules : dict[str, InfixRule]
        Parse rules for tokens that can continue an expression.
    brace_depth : int
        Number of `{` passed but not yet closed, counting `current_token`.
    nesting : int
        Current expression/block nesting, bounded by `MAX_NESTING`.
    """

    def __init__(self, lexer: Lexer) -> None:
        self.lexer = lexer
        self._errors: list[str] = []
        self.brace_depth = 0
        self.nesting = 0

        self.current_token: Token = lexer.next_token()
        self.peek_token: Token = lexer.next_token()
        self.track_braces()

        self.prefix_rules: dict[str, PrefixRule] = {
            IDENT: self.parse_identifier,
            INT: self.parse_integer_literal,
            TRUE: self.parse_boolean,
            FALSE: self.parse_boolean,
            MINUS: self.parse_prefix_expression,
            NOT_EQUAL: self.parse_prefix_expression,
            LPAREN: self.parse_grouped_expression,
            IF: self.parse_if_expression,
            FUNCTION: self.parse_function_literal,
        }

        self.infix_rules: dict[str, InfixRule] = {
            kind: self.parse_infix_expression
            for kind in (
                PLUS,
                MINUS,
                ASTERISK,
                SLASH,
                EQUAL,
                NOT_EQUAL,
                LESS_THAN,
                GREATER_THAN,
            )
        }
        self.infix_rules[LPAREN] = self.parse_call_expression

    @classmethod
    def from_source(cls, source: str) -> Parser:
        return cls(Lexer.from_source(source))

    # ------------------------------------------------------------------
    # Token window
    # ------------------------------------------------------------------

    def advance(self) -> Token:
        self.current_token = self.peek_token
        self.peek_token = self.lexer.next_token()
        self.track_braces()
        return self.current_token

    def track_braces(self) -> None:
        if self.current_is(LBRACE):
            self.brace_depth += 1
        elif self.current_is(RBRACE):
            # a stray `}` at top level does not go negative
            self.brace_depth = max(0, self.brace_depth - 1)

    def current_is(self, kind: str) -> bool:
        return self.current_token.type == kind

    def peek_is(self, kind: str) -> bool:
        return self.peek_token.type == kind

    def expect_peek(self, kind: str) -> bool:
        """Advance if the peek token is `kind`; otherwise record an error and stay put."""
        if self.peek_is(kind):
            self.advance()
            return True
        self.error(
            f"expected next token to be {kind}, got {self.peek_token.type} "
            f"({self.peek_token.literal!r}) instead",
            self.peek_token,
        )
        return False

    def peek_precedence(self) -> int:
        return PRECEDENCES.get(self.peek_token.type, LOWEST)

    def current_precedence(self) -> int:
        return PRECEDENCES.get(self.current_token.type, LOWEST)

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def error(self, message: str, tok: Token | None = None) -> None:
        tok = tok or self.current_token
        entry = f"line {tok.line}, col {tok.col}: {message}"
        logger.debug("parse error: %s", entry)
        self._errors.append(entry)

    def errors(self) -> list[str]:
        """Return the parse errors recorded so far, in the order they occurred."""
        return list(self._errors)

    def too_deep(self, what: str, extra: int = 1, tok: Token | None = None) -> bool:
        """Record an error if `extra` more levels would exceed `MAX_NESTING`."""
        if self.nesting + extra <= MAX_NESTING:
            return False
        self.error(f"{what} nested too deeply (more than {MAX_NESTING} levels)", tok)
        return True

    def synchronize(self, base: int, brace_terminated: bool) -> None:
        """Skip the remainder of a statement that failed to parse.

        `base` is the brace depth the statement started at. Stops on the statement's
        `;`, on the `}` that closes a brace-terminated statement (unless `else`
        follows), or just before a token that must belong to the next statement.
        Leaves the enclosing block's closing `}` as the current token if reached.
        """
        while not self.current_is(EOF):
            if self.brace_depth < base:
                return
            if self.brace_depth == base:
                if self.current_is(SEMICOLON):
                    return
                if brace_terminated and self.current_is(RBRACE) and not self.peek_is(ELSE):
                    return
                if self.peek_token.type in (RBRACE, LET, RETURN):
                    return
            self.advance()

    # ------------------------------------------------------------------
    # Program and statements
    # ------------------------------------------------------------------

    def parse(self) -> tuple[Block, list[str]]:
        """Parse the whole input and return the program together with its errors."""
        program = self.parse_program()
        return program, self.errors()

    def parse_program(self) -> Block:
        """Parse statements until EOF; failed statements are skipped, not fatal."""
        program = Block(line=self.current_token.line, col=self.current_token.col)
        while not self.current_is(EOF):
            self.collect_statement(program, 0)
            self.advance()
        return program

    def collect_statement(self, block: Block, base: int) -> None:
        """Append the next statement to `block`, or skip past it if it is broken."""
        brace_terminated = self.current_is(IF) or (
            self.current_is(FUNCTION) and self.peek_is(IDENT)
        )
        stmt = self.parse_statement()
        if stmt is not None:
            block.statements.append(stmt)
        else:
            self.synchronize(base, brace_terminated)

    def parse_statement(self) -> Statement | None:
        tok = self.current_token
        logger.debug("statement at line %d, col %d starts with %s", tok.line, tok.col, tok.type)

        if tok.type == LET:
            return self.parse_let_statement()
        if tok.type == RETURN:
            return self.parse_return_statement()
        if tok.type == IF:
            return self.parse_if_statement()
        if tok.type == FUNCTION and self.peek_is(IDENT):
            return self.parse_function_declaration()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> LetStatement | None:
        """Parse `let <name> = <expr>;`."""
        tok = self.current_token
        if not self.expect_peek(IDENT):
            return None
        name = self.current_token.literal

        if not self.expect_peek(EQUAL):
            return None
        self.advance()

        value = self.parse_expression(LOWEST)
        if value is None:
            return None
        if not self.expect_peek(SEMICOLON):
            return None

        return LetStatement(name, value, line=tok.line, col=tok.col)

    def parse_return_statement(self) -> ReturnStatement | None:
        """Parse `return <expr>;`."""
        tok = self.current_token
        self.advance()

        value = self.parse_expression(LOWEST)
        if value is None:
            return None
        if not self.expect_peek(SEMICOLON):
            return None

        return ReturnStatement(value, line=tok.line, col=tok.col)

    def parse_expression_statement(self) -> ExpressionStatement | None:
        tok = self.current_token
        expression = self.parse_expression(LOWEST)
        if expression is None:
            return None
        if not self.expect_peek(SEMICOLON):
            return None
        return ExpressionStatement(expression, line=tok.line, col=tok.col)

    def parse_if_statement(self) -> IfStatement | None:
        tok = self.current_token
        parts = self.parse_conditional()
        if parts is None:
            return None
        condition, consequence, alternative = parts
        return IfStatement(
            condition, consequence, alternative, line=tok.line, col=tok.col
        )

    def parse_function_declaration(self) -> FunctionDeclaration | None:
        """Parse `fn <name>(<params>) { <block> }`."""
        tok = self.current_token
        logger.debug("parsing function declaration at line %d, col %d", tok.line, tok.col)
        if not self.expect_peek(IDENT):
            return None
        name = self.current_token.literal

        if not self.expect_peek(LPAREN):
            return None
        parameters = self.parse_function_parameters()
        body = self.parse_function_body(parameters)
        if body is None or parameters is None:
            return None

        return FunctionDeclaration(name, parameters, body, line=tok.line, col=tok.col)

    def parse_function_body(self, parameters: list[str] | None) -> Block | None:
        """Parse the `{ ... }` after a parameter list.

        A list that broke off right before `{` (missing `)`) still has its body
        parsed. Any other broken list is left for `synchronize` without a second
        error about the missing `{`.
        """
        if parameters is None and not self.peek_is(LBRACE):
            return None
        if not self.expect_peek(LBRACE):
            return None
        return self.parse_block()

    def parse_conditional(self) -> tuple[Expression, Block, Block | None] | None:
        """Parse `if (<expr>) { ... } [else { ... }]` starting at the `if` token.

        Shared by the statement and expression forms of `if`.
        """
        if not self.expect_peek(LPAREN):
            return None
        self.advance()

        condition = self.parse_expression(LOWEST)
        if condition is None:
            return None
        if not self.expect_peek(RPAREN):
            return None
        if not self.expect_peek(LBRACE):
            return None

        consequence = self.parse_block()
        if consequence is None:
            return None

        alternative = None
        if self.peek_is(ELSE):
            self.advance()
            if not self.expect_peek(LBRACE):
                return None
            alternative = self.parse_block()
            if alternative is None:
                return None

        return condition, consequence, alternative

    def parse_block(self) -> Block | None:
        """Parse `{ <statements> }` starting at `{`; leaves `}` as the current token.

        Statements that fail inside the block are skipped. Reaching EOF before `}`
        records an error and yields no block.
        """
        open_tok = self.current_token
        if self.too_deep("block"):
            return None
        base = self.brace_depth
        block = Block(line=open_tok.line, col=open_tok.col)

        self.nesting += 1
        try:
            self.advance()
            while not self.closes_block(base):
                if self.current_is(EOF):
                    self.error(
                        f"expected '}}' to close block opened at line {open_tok.line}, "
                        f"col {open_tok.col}, got EOF"
                    )
                    return None
                self.collect_statement(block, base)
                if self.closes_block(base):
                    break
                self.advance()
        finally:
            self.nesting -= 1

        return block

    def closes_block(self, base: int) -> bool:
        return self.current_is(RBRACE) and self.brace_depth < base

    def parse_function_parameters(self) -> list[str] | None:
        """Parse `(a, b, c)` starting at `(`; returns None after recording an error."""
        parameters: list[str] = []

        if self.peek_is(RPAREN):
            self.advance()
            return parameters

        if not self.expect_peek(IDENT):
            return None
        parameters.append(self.current_token.literal)

        while self.peek_is(COMMA):
            self.advance()
            if not self.expect_peek(IDENT):
                return None
            parameters.append(self.current_token.literal)

        if not self.expect_peek(RPAREN):
            return None
        return parameters

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self, precedence: int) -> Expression | None:
        """Parse an expression whose operators all bind tighter than `precedence`."""
        prefix = self.prefix_rules.get(self.current_token.type)
        if prefix is None:
            self.error(
                f"no prefix parse rule for {self.current_token.type} "
                f"({self.current_token.literal!r}) found"
            )
            return None
        if self.too_deep("expression"):
            return None

        self.nesting += 1
        try:
            left = prefix()
            while left is not None and precedence < self.peek_precedence():
                infix = self.infix_rules.get(self.peek_token.type)
                if infix is None:
                    return left
                self.advance()
                left = infix(left)
        finally:
            self.nesting -= 1

        return left

    def parse_identifier(self) -> Identifier:
        tok = self.current_token
        return Identifier(tok.literal, line=tok.line, col=tok.col)

    def parse_integer_literal(self) -> IntegerLiteral:
        tok = self.current_token
        if not isinstance(tok.value, int):
            raise ParserInternalError(
                f"INT token {tok.literal!r} at line {tok.line}, col {tok.col} "
                "carries no integer value"
            )
        return IntegerLiteral(tok.value, line=tok.line, col=tok.col)

    def parse_boolean(self) -> Boolean:
        tok = self.current_token
        return Boolean(tok.type == TRUE, line=tok.line, col=tok.col)

    def parse_prefix_expression(self) -> PrefixExpression | None:
        """Parse a run of `-`/`!` operators and their operand.

        The run is collected in a loop and wrapped innermost-first, so `--x` costs
        no extra recursion. It still counts towards the nesting limit because each
        operator adds a level to the tree.
        """
        operators: list[Token] = []
        while self.current_is(MINUS) or self.current_is(NOT_EQUAL):
            operators.append(self.current_token)
            self.advance()
        if self.too_deep("expression", len(operators), operators[0]):
            return None

        self.nesting += len(operators)
        try:
            right = self.parse_expression(PREFIX)
        finally:
            self.nesting -= len(operators)
        if right is None:
            return None
        for tok in reversed(operators):
            right = PrefixExpression(tok.literal, right, line=tok.line, col=tok.col)
        return right

    def parse_infix_expression(self, left: Expression) -> InfixExpression | None:
        tok = self.current_token
        precedence = self.current_precedence()
        self.advance()
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(tok.literal, left, right, line=tok.line, col=tok.col)

    def parse_grouped_expression(self) -> Expression | None:
        self.advance()
        expression = self.parse_expression(LOWEST)
        if expression is None:
            return None
        if not self.expect_peek(RPAREN):
            return None
        return expression

    def parse_if_expression(self) -> IfExpression | None:
        tok = self.current_token
        parts = self.parse_conditional()
        if parts is None:
            return None
        condition, consequence, alternative = parts
        return IfExpression(
            condition, consequence, alternative, line=tok.line, col=tok.col
        )

    def parse_function_literal(self) -> FunctionLiteral | None:
        """Parse `fn(<params>) { <block> }`."""
        tok = self.current_token
        if not self.expect_peek(LPAREN):
            return None
        parameters = self.parse_function_parameters()
        body = self.parse_function_body(parameters)
        if body is None or parameters is None:
            return None

        return FunctionLiteral(parameters, body, line=tok.line, col=tok.col)

    def parse_call_expression(self, function: Expression) -> CallExpression | None:
        tok = self.current_token
        arguments = self.parse_call_arguments()
        if arguments is None:
            return None
        return CallExpression(function, arguments, line=tok.line, col=tok.col)

    def parse_call_arguments(self) -> list[Expression] | None:
        """Parse `(arg, arg, ...)` starting at `(`; leaves `)` as the current token."""
        arguments: list[Expression] = []

        if self.peek_is(RPAREN):
            self.advance()
            return arguments

        self.advance()
        arg = self.parse_expression(LOWEST)
        if arg is None:
            return None
        arguments.append(arg)

        while self.peek_is(COMMA):
            self.advance()
            self.advance()
            arg = self.parse_expression(LOWEST)
            if arg is None:
                return None
            arguments.append(arg)

        if not self.expect_peek(RPAREN):
            return None
        return arguments


__all__ = ["Parser", "ParserInternalError"]
