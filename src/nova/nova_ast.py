"""
Defines the abstract syntax tree (AST) node structure for the Nova programming language.

Classes:
    ASTNode:
        Common base of every node. Carries the source line/column of the token that
        started the node (used for error messages only, ignored by equality) and
        converts node trees into plain dictionaries for JSON output.

    Block:
        An ordered sequence of statements. Programs, both branches of `if` (statement
        and expression form) and function bodies all use this one type.

    Statements:
        LetStatement, ReturnStatement, ExpressionStatement, IfStatement,
        FunctionDeclaration

    Expressions:
        Identifier, IntegerLiteral, Boolean, PrefixExpression, InfixExpression,
        IfExpression, FunctionLiteral, CallExpression

`str(node)` renders a canonical, fully parenthesized form of the node, so
`a - b - c` prints as `((a - b) - c)`.

Example:
    node = LetStatement("x", IntegerLiteral(5))
    str(node)  # 'let x = 5;'
"""

from dataclasses import dataclass, field, fields
from typing import Any, Iterator, Union

# Serialized node: {"kind": <class name>, "line": ..., "col": ..., <node fields>...}
ASTDict = dict[str, Any]


@dataclass
class ASTNode:
    """
    Base class for all Nova AST nodes.

    Attributes:
        line (int): Source line of the node's first token (0 when built by hand).
        col (int): Source column of the node's first token (0 when built by hand).
    """

    line: int = field(default=0, compare=False, repr=False, kw_only=True)
    col: int = field(default=0, compare=False, repr=False, kw_only=True)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> ASTDict:
        result: ASTDict = {"kind": self.kind, "line": self.line, "col": self.col}
        for f in fields(self):
            if f.name in ("line", "col"):
                continue
            result[f.name] = _serialize(getattr(self, f.name))
        return result


def _serialize(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


@dataclass
class Block(ASTNode):
    """Ordered statement list: the program root, every `if` branch and every
    function body.

    Attributes:
        statements (list[Statement]): Statements in source order.
    """

    statements: list["Statement"] = field(default_factory=list)

    def __str__(self) -> str:
        if not self.statements:
            return "{ }"
        return "{ " + " ".join(str(s) for s in self.statements) + " }"

    def __iter__(self) -> Iterator["Statement"]:
        return iter(self.statements)


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass
class Identifier(ASTNode):
    """A name reference. `name` is the identifier text."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class IntegerLiteral(ASTNode):
    """Decimal integer literal; `value` fits in a signed 64-bit integer."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class Boolean(ASTNode):
    """`true` or `false`."""

    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass
class PrefixExpression(ASTNode):
    """Unary operator applied to one operand.

    Attributes:
        operator (str): `-` (negation) or `!` (logical not).
        right (Expression): The operand.
    """

    operator: str
    right: "Expression"

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass
class InfixExpression(ASTNode):
    """Binary operator application.

    Attributes:
        operator (str): One of `+ - * / = ! < >`; `=` is equality and `!` inequality.
        left (Expression): Left operand.
        right (Expression): Right operand.
    """

    operator: str
    left: "Expression"
    right: "Expression"

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass
class IfExpression(ASTNode):
    """`if` used as a value, e.g. `let m = if (a > b) { a; } else { b; };`.

    Attributes:
        condition (Expression): Tested expression.
        consequence (Block): Branch taken when the condition holds.
        alternative (Block | None): `else` branch, if any.
    """

    condition: "Expression"
    consequence: Block
    alternative: Block | None = None

    def __str__(self) -> str:
        text = f"if ({self.condition}) {self.consequence}"
        if self.alternative is not None:
            text += f" else {self.alternative}"
        return text


@dataclass
class FunctionLiteral(ASTNode):
    """Anonymous function `fn(<params>) { ... }`.

    Attributes:
        parameters (list[str]): Parameter names in order; may be empty.
        body (Block): Function body.
    """

    parameters: list[str]
    body: Block

    def __str__(self) -> str:
        return f"fn({', '.join(self.parameters)}) {self.body}"


@dataclass
class CallExpression(ASTNode):
    """Call of `function` (any expression) with `arguments` in order."""

    function: "Expression"
    arguments: list["Expression"] = field(default_factory=list)

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass
class LetStatement(ASTNode):
    """Binding `let <name> = <value>;`."""

    name: str
    value: "Expression"

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"


@dataclass
class ReturnStatement(ASTNode):
    """`return <value>;`"""

    value: "Expression"

    def __str__(self) -> str:
        return f"return {self.value};"


@dataclass
class ExpressionStatement(ASTNode):
    """An expression terminated by `;`."""

    expression: "Expression"

    def __str__(self) -> str:
        return f"{self.expression};"


@dataclass
class IfStatement(ASTNode):
    """`if` in statement position. Shares its `Block` shape with `IfExpression`.

    Attributes:
        condition (Expression): Tested expression.
        consequence (Block): Branch taken when the condition holds.
        alternative (Block | None): `else` branch, if any.
    """

    condition: "Expression"
    consequence: Block
    alternative: Block | None = None

    def __str__(self) -> str:
        text = f"if ({self.condition}) {self.consequence}"
        if self.alternative is not None:
            text += f" else {self.alternative}"
        return text


@dataclass
class FunctionDeclaration(ASTNode):
    """Named function `fn <name>(<params>) { ... }`.

    Attributes:
        name (str): Declared function name.
        parameters (list[str]): Parameter names in order; may be empty.
        body (Block): Function body.
    """

    name: str
    parameters: list[str]
    body: Block

    def __str__(self) -> str:
        return f"fn {self.name}({', '.join(self.parameters)}) {self.body}"


Expression = Union[
    Identifier,
    IntegerLiteral,
    Boolean,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    FunctionLiteral,
    CallExpression,
]

Statement = Union[
    LetStatement,
    ReturnStatement,
    ExpressionStatement,
    IfStatement,
    FunctionDeclaration,
]
