"""
Lexical analyzer for the Nova programming language.

This module converts raw source text into a lazy stream of tokens:

Classes:
    CharacterStream: Immutable source buffer with an explicit read cursor.
    Token: A single immutable token with kind, literal slice, value and location.
    LexError: Fatal lexing failure (integer literal outside the signed 64-bit range).
    Lexer: Produces tokens from a CharacterStream one `next_token()` call at a time.

Features:
    - Skips whitespace, `//` line comments and non-nesting `/* ... */` block comments
    - Single-character operators and punctuation only (`==` is two EQUAL tokens)
    - Recognizes:
        * Identifiers (letters and underscore) and keywords
        * Decimal integers
        * Double-quoted strings (no escape sequences)
        * Operators and punctuation
    - Unknown characters become ILLEGAL tokens; scanning never stops early

Non-fatal conditions (illegal characters, unterminated strings, unterminated block
comments) are recorded in `Lexer.diagnostics` and never interrupt the token stream.

Example:
    >>> lexer = Lexer.from_source("let x = 5;")
    >>> lexer.next_token()
    Token(LET, 'let')

Exports:
    - CharacterStream
    - Token
    - LexError
    - Lexer
    - tokenize
"""

import logging
from typing import Any

from nova.nova_constants import (
    EOF,
    FALSE,
    IDENT,
    ILLEGAL,
    INT,
    KEYWORDS,
    MAX_INT,
    SINGLE_CHAR_TOKENS,
    STRING,
    TRUE,
    WHITESPACE,
)

logger = logging.getLogger(__name__)


class CharacterStream:
    """
    Reads characters from an in-memory source string with line and column tracking.

    The source itself is never modified; only the cursor fields move.

    Attributes:
        source (str): The input source string.
        position (int): Index of the next unread character.
        line (int): Line of the next unread character (1-indexed).
        column (int): Column of the next unread character (1-indexed).
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The consumed character.

        Raises:
            EOFError: If the stream is already exhausted.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"attempted to read past end of source at position={self.position}, line={self.line}"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character `offset` places ahead, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def text_since(self, start: int) -> str:
        """Returns the source consumed since offset `start`.

        Args:
            start (int): Offset at or before the cursor.

        Returns:
            str: `source[start:position]`, the exact text read since `start`.
        """
        return self.source[start : self.position]

    def end_of_file(self) -> bool:
        """True once every character has been consumed."""
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token in the Nova language.

    Attributes:
        type (str): The token kind (e.g. 'IDENT', 'INT', 'EOF').
        literal (str): The exact source slice the token was scanned from.
        value (Any): Decoded payload: name for IDENT, int for INT, text for STRING,
            bool for TRUE/FALSE, otherwise None.
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
        position (int): Offset of the first character of `literal` in the source.
    """

    __slots__ = ("type", "literal", "value", "line", "col", "position")

    def __init__(
        self,
        type_: str,
        literal: str,
        value: Any = None,
        line: int = 0,
        col: int = 0,
        position: int = 0,
    ):
        object.__setattr__(self, "type", type_)
        object.__setattr__(self, "literal", literal)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)
        object.__setattr__(self, "position", position)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable; cannot set {name!r}")

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.literal!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.literal == other.literal
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
            and self.position == other.position
        )

    def __hash__(self) -> int:
        return hash(
            (self.type, self.literal, self.value, self.line, self.col, self.position)
        )


class LexError(Exception):
    """Raised when source text cannot be represented as a token at all.

    Ordinary malformed input never raises; this is reserved for integer literals
    that do not fit in a signed 64-bit integer.
    """

    def __init__(self, message: str, line: int = 0, col: int = 0):
        super().__init__(f"{message} at line {line}, col {col}")
        self.line = line
        self.col = col


class Lexer:
    """Lexical analyzer for the Nova language.

    Pulls characters from a CharacterStream and returns one Token per `next_token()`
    call. Once the input is exhausted every further call returns an EOF token.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        diagnostics (list[str]): Non-fatal lexical conditions in the order found.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream
        self.diagnostics: list[str] = []

    @classmethod
    def from_source(cls, source: str) -> "Lexer":
        """Builds a lexer over a fresh CharacterStream of `source`."""
        return cls(CharacterStream(source))

    def peek(self, offset: int = 0) -> str:
        """Looks ahead without consuming; "" past the end of input."""
        return self.stream.peek(offset)

    def advance(self) -> str:
        """Consumes one character. Callers check `end_of_file()` first."""
        return self.stream.next()

    def report(self, message: str, line: int, col: int) -> None:
        """Records a non-fatal lexical diagnostic."""
        diagnostic = f"line {line}, col {col}: {message}"
        logger.debug("lexer diagnostic: %s", diagnostic)
        self.diagnostics.append(diagnostic)

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch in WHITESPACE:
                self.advance()
            elif ch == "/" and self.peek(1) == "/":
                self.skip_line_comment()
            elif ch == "/" and self.peek(1) == "*":
                self.skip_block_comment()
            else:
                break

    def skip_line_comment(self) -> None:
        # the newline itself is left for skip_whitespace
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def skip_block_comment(self) -> None:
        """Skips a `/* ... */` comment; an unclosed one runs to end of input."""
        line, col = self.stream.line, self.stream.column
        self.advance()
        self.advance()
        while not self.stream.end_of_file():
            if self.peek() == "*" and self.peek(1) == "/":
                self.advance()
                self.advance()
                return
            self.advance()
        self.report("unterminated block comment", line, col)

    def make_token(
        self, type_: str, start: int, line: int, col: int, value: Any = None
    ) -> Token:
        """
        Builds a token whose literal is everything consumed since `start`.

        Args:
            type_ (str): Token kind.
            start (int): Source offset of the token's first character.
            line (int): Line of the first character.
            col (int): Column of the first character.
            value (Any): Decoded payload, if any.

        Returns:
            Token: The finished token.
        """
        return Token(type_, self.stream.text_since(start), value, line, col, start)

    def read_identifier(self, start: int, line: int, col: int) -> Token:
        """Scans letters and underscores, then reclassifies keywords.

        `true`/`false` carry a bool value, other keywords none, identifiers their name.
        """
        while self.peek().isalpha() or self.peek() == "_":
            self.advance()
        literal = self.stream.text_since(start)
        kind = KEYWORDS.get(literal, IDENT)
        if kind == IDENT:
            return Token(IDENT, literal, literal, line, col, start)
        return Token(kind, literal, {TRUE: True, FALSE: False}.get(kind), line, col, start)

    def read_number(self, start: int, line: int, col: int) -> Token:
        """
        Scans a run of decimal digits into an INT token.

        Returns:
            Token: INT token whose value is the decoded integer.

        Raises:
            LexError: If the value exceeds MAX_INT.
        """
        while "0" <= self.peek() <= "9":
            self.advance()
        literal = self.stream.text_since(start)
        digits = literal.lstrip("0") or "0"
        # MAX_INT has 19 digits; checking length first keeps int() off huge runs.
        if len(digits) > len(str(MAX_INT)) or int(digits) > MAX_INT:
            raise LexError(
                f"integer literal {literal} does not fit in a signed 64-bit integer",
                line,
                col,
            )
        return Token(INT, literal, int(digits), line, col, start)

    def read_string(self, start: int, line: int, col: int) -> Token:
        """Scans a double-quoted string; no escapes, and EOF ends an open string."""
        self.advance()  # opening quote
        while not self.stream.end_of_file() and self.peek() != '"':
            self.advance()
        text = self.stream.text_since(start + 1)
        if self.stream.end_of_file():
            self.report("unterminated string literal", line, col)
        else:
            self.advance()  # closing quote
        return self.make_token(STRING, start, line, col, text)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token; EOF once the input is exhausted.

        Raises:
            LexError: If an integer literal exceeds the signed 64-bit range.
        """
        self.skip_whitespace()

        start = self.stream.position
        line, col = self.stream.line, self.stream.column

        if self.stream.end_of_file():
            return Token(EOF, "", None, line, col, start)

        ch = self.peek()

        # 1. Identifier or keyword
        if ch.isalpha() or ch == "_":
            return self.read_identifier(start, line, col)

        # 2. Integer
        if "0" <= ch <= "9":
            return self.read_number(start, line, col)

        # 3. String
        if ch == '"':
            return self.read_string(start, line, col)

        # 4. Operator or punctuation
        kind = SINGLE_CHAR_TOKENS.get(ch)
        if kind is not None:
            self.advance()
            return self.make_token(kind, start, line, col)

        # 5. Unknown character
        self.advance()
        self.report(f"illegal character {ch!r}", line, col)
        return self.make_token(ILLEGAL, start, line, col)


def tokenize(source: str) -> list[Token]:
    """Scans `source` completely and returns every token up to and including EOF."""
    lexer = Lexer.from_source(source)
    tokens = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == EOF:
            break
    return tokens


__all__ = ["CharacterStream", "LexError", "Lexer", "Token", "tokenize"]
