"""
Token kinds, lookup tables and precedence levels for the Nova language.

Token kinds are plain string tags shared by the lexer, the parser and the tests.

Tables:
    SINGLE_CHAR_TOKENS: maps each one-character symbol to its token kind.
    KEYWORDS: maps reserved words to their token kind.
    PRECEDENCES: maps infix-capable token kinds to their binding strength.
"""

# Special
EOF = "EOF"
ILLEGAL = "ILLEGAL"

# Identifiers and literals
IDENT = "IDENT"
INT = "INT"
STRING = "STRING"

# Operators
PLUS = "PLUS"
MINUS = "MINUS"
ASTERISK = "ASTERISK"
SLASH = "SLASH"
EQUAL = "EQUAL"
NOT_EQUAL = "NOT_EQUAL"
LESS_THAN = "LESS_THAN"
GREATER_THAN = "GREATER_THAN"

# Delimiters
LPAREN = "LPAREN"
RPAREN = "RPAREN"
LBRACE = "LBRACE"
RBRACE = "RBRACE"
COMMA = "COMMA"
SEMICOLON = "SEMICOLON"

# Keywords
LET = "LET"
FUNCTION = "FUNCTION"
IF = "IF"
ELSE = "ELSE"
RETURN = "RETURN"
TRUE = "TRUE"
FALSE = "FALSE"

# `=` doubles as assignment and equality, `!` as negation and inequality.
SINGLE_CHAR_TOKENS: dict[str, str] = {
    "+": PLUS,
    "-": MINUS,
    "*": ASTERISK,
    "/": SLASH,
    "=": EQUAL,
    "!": NOT_EQUAL,
    "<": LESS_THAN,
    ">": GREATER_THAN,
    "(": LPAREN,
    ")": RPAREN,
    "{": LBRACE,
    "}": RBRACE,
    ",": COMMA,
    ";": SEMICOLON,
}

KEYWORDS: dict[str, str] = {
    "let": LET,
    "fn": FUNCTION,
    "if": IF,
    "else": ELSE,
    "return": RETURN,
    "true": TRUE,
    "false": FALSE,
}

WHITESPACE = " \t\n\r"

# Largest value an INT token may carry (signed 64-bit).
MAX_INT = 2**63 - 1

# Precedence levels, lowest to highest.
LOWEST = 1
EQUALS = 2
LESSGREATER = 3
SUM = 4
PRODUCT = 5
PREFIX = 6
CALL = 7

PRECEDENCES: dict[str, int] = {
    EQUAL: EQUALS,
    NOT_EQUAL: EQUALS,
    LESS_THAN: LESSGREATER,
    GREATER_THAN: LESSGREATER,
    PLUS: SUM,
    MINUS: SUM,
    ASTERISK: PRODUCT,
    SLASH: PRODUCT,
    LPAREN: CALL,
}

# Deepest expression/block nesting the parser accepts.
MAX_NESTING = 100

TOKEN_KINDS: frozenset[str] = frozenset(
    {EOF, ILLEGAL, IDENT, INT, STRING}
    | set(SINGLE_CHAR_TOKENS.values())
    | set(KEYWORDS.values())
)
