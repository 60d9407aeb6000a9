import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from nova.nova_ast import (
    Block,
    Boolean,
    CallExpression,
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
)
from nova.nova_lexer import LexError, Lexer, Token
from nova.nova_parser import Parser, ParserInternalError


def parse(source: str) -> tuple[Block, list[str]]:
    return Parser.from_source(source).parse()


def parse_ok(source: str) -> Block:
    program, errors = parse(source)
    assert errors == [], errors
    return program


def single_expression(source: str) -> str:
    program = parse_ok(source)
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ExpressionStatement)
    return str(stmt.expression)


def test_let_statement() -> None:
    program = parse_ok("let x = 5;")
    assert program.statements == [LetStatement("x", IntegerLiteral(5))]


def test_return_statement() -> None:
    program = parse_ok("return 123;")
    assert program.statements == [ReturnStatement(IntegerLiteral(123))]


def test_missing_assign_in_let_is_reported() -> None:
    program, errors = parse("let x 5;")
    assert not any(isinstance(s, LetStatement) for s in program.statements)
    assert errors
    assert "expected next token to be EQUAL, got INT" in errors[0]


def test_let_missing_identifier() -> None:
    program, errors = parse("let = 5;")
    assert not any(isinstance(s, LetStatement) for s in program.statements)
    assert "expected next token to be IDENT, got EQUAL" in errors[0]


def test_let_missing_semicolon() -> None:
    program, errors = parse("let x = 5")
    assert program.statements == []
    assert errors == ["line 1, col 10: expected next token to be SEMICOLON, got EOF ('') instead"]


def test_return_missing_semicolon() -> None:
    program, errors = parse("return 1 }")
    assert not any(isinstance(s, ReturnStatement) for s in program.statements)
    assert "expected next token to be SEMICOLON, got RBRACE" in errors[0]


def test_multiple_statements() -> None:
    program = parse_ok("let x = 5; let y = true; return x;")
    assert program.statements == [
        LetStatement("x", IntegerLiteral(5)),
        LetStatement("y", Boolean(True)),
        ReturnStatement(Identifier("x")),
    ]


def test_expression_statement() -> None:
    program = parse_ok("example;")
    assert program.statements == [ExpressionStatement(Identifier("example"))]


def test_statement_locations() -> None:
    program = parse_ok("let a = 1;\n  return a;")
    ret = program.statements[1]
    assert (ret.line, ret.col) == (2, 3)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("-a * b;", "((-a) * b)"),
        ("!-a;", "(!(-a))"),
        ("a + b + c;", "((a + b) + c)"),
        ("a - b - c;", "((a - b) - c)"),
        ("a * b * c;", "((a * b) * c)"),
        ("a * b / c;", "((a * b) / c)"),
        ("a + b / c;", "(a + (b / c))"),
        ("a + b * c + d / e - f;", "(((a + (b * c)) + (d / e)) - f)"),
        ("5 > 4 = 3 < 4;", "((5 > 4) = (3 < 4))"),
        ("5 < 4 ! 3 > 4;", "((5 < 4) ! (3 > 4))"),
        ("3 + 4 * 5 = 3 * 1 + 4 * 5;", "((3 + (4 * 5)) = ((3 * 1) + (4 * 5)))"),
        ("true = 3 > 5;", "(true = (3 > 5))"),
        ("1 + (2 + 3) + 4;", "((1 + (2 + 3)) + 4)"),
        ("(5 + 5) * 2;", "((5 + 5) * 2)"),
        ("-(5 + 5);", "(-(5 + 5))"),
        ("!(true = true);", "(!(true = true))"),
        ("a + add(b * c) + d;", "((a + add((b * c))) + d)"),
        (
            "add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8));",
            "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))",
        ),
        ("add(a + b + c * d / f + g);", "add((((a + b) + ((c * d) / f)) + g))"),
        ("-f(x);", "(-f(x))"),
        ("f(x)(y);", "f(x)(y)"),
    ],
)
def test_operator_precedence(source: str, expected: str) -> None:
    assert single_expression(source) == expected


def test_prefix_expression_node() -> None:
    program = parse_ok("!five;")
    assert program.statements[0] == ExpressionStatement(
        PrefixExpression("!", Identifier("five"))
    )


def test_infix_expression_node() -> None:
    program = parse_ok("5 < 10;")
    assert program.statements[0] == ExpressionStatement(
        InfixExpression("<", IntegerLiteral(5), IntegerLiteral(10))
    )


def test_boolean_expressions() -> None:
    program = parse_ok("true; false;")
    assert program.statements == [
        ExpressionStatement(Boolean(True)),
        ExpressionStatement(Boolean(False)),
    ]


def test_if_statement() -> None:
    program = parse_ok("if (x < y) { x; }")
    assert program.statements == [
        IfStatement(
            InfixExpression("<", Identifier("x"), Identifier("y")),
            Block([ExpressionStatement(Identifier("x"))]),
        )
    ]


def test_if_else_statement() -> None:
    program = parse_ok("if (x < y) { x; } else { let z = y; y; }")
    stmt = program.statements[0]
    assert isinstance(stmt, IfStatement)
    assert stmt.alternative == Block(
        [LetStatement("z", Identifier("y")), ExpressionStatement(Identifier("y"))]
    )


def test_if_with_empty_blocks() -> None:
    program = parse_ok("if (true) { } else { }")
    assert program.statements == [IfStatement(Boolean(True), Block(), Block())]


def test_if_expression() -> None:
    program = parse_ok("let m = if (a > b) { a; } else { b; };")
    assert program.statements == [
        LetStatement(
            "m",
            IfExpression(
                InfixExpression(">", Identifier("a"), Identifier("b")),
                Block([ExpressionStatement(Identifier("a"))]),
                Block([ExpressionStatement(Identifier("b"))]),
            ),
        )
    ]


def test_if_statement_and_expression_use_same_block_type() -> None:
    program = parse_ok("if (c) { 1; } let v = if (c) { 1; };")
    stmt, let = program.statements
    assert isinstance(stmt, IfStatement)
    assert isinstance(let, LetStatement)
    assert isinstance(let.value, IfExpression)
    assert stmt.consequence == let.value.consequence


def test_function_declaration() -> None:
    program = parse_ok("fn add(x, y) { return x + y; }")
    assert program.statements == [
        FunctionDeclaration(
            "add",
            ["x", "y"],
            Block([ReturnStatement(InfixExpression("+", Identifier("x"), Identifier("y")))]),
        )
    ]


@pytest.mark.parametrize(
    "source,params",
    [
        ("fn f() { }", []),
        ("fn f(x) { }", ["x"]),
        ("fn f(x, y, z) { }", ["x", "y", "z"]),
    ],
)
def test_function_parameters(source: str, params: list[str]) -> None:
    stmt = parse_ok(source).statements[0]
    assert isinstance(stmt, FunctionDeclaration)
    assert stmt.parameters == params
    assert stmt.body == Block()


def test_function_literal() -> None:
    program = parse_ok("let add = fn(a, b) { a + b; };")
    assert program.statements == [
        LetStatement(
            "add",
            FunctionLiteral(
                ["a", "b"],
                Block([ExpressionStatement(InfixExpression("+", Identifier("a"), Identifier("b")))]),
            ),
        )
    ]


def test_immediately_called_function_literal() -> None:
    assert single_expression("fn(x) { x; }(5);") == "fn(x) { x; }(5)"


def test_call_expression() -> None:
    program = parse_ok("add(1, 2 * 3, 4 + 5);")
    assert program.statements == [
        ExpressionStatement(
            CallExpression(
                Identifier("add"),
                [
                    IntegerLiteral(1),
                    InfixExpression("*", IntegerLiteral(2), IntegerLiteral(3)),
                    InfixExpression("+", IntegerLiteral(4), IntegerLiteral(5)),
                ],
            )
        )
    ]


def test_call_without_arguments() -> None:
    program = parse_ok("tick();")
    assert program.statements == [ExpressionStatement(CallExpression(Identifier("tick"), []))]


@pytest.mark.parametrize(
    "source",
    [
        "fn { return; }",
        "fn test(x, y { return x + y; }",
        "fn test(x, y) return x + y;",
        "let x = fn(y, z) return y + z;",
        "fn test(1) { }",
        "fn test(x,) { }",
    ],
)
def test_improper_function_syntax_is_reported(source: str) -> None:
    program, errors = parse(source)
    assert errors
    assert not any(isinstance(s, (FunctionDeclaration, LetStatement)) for s in program.statements)


def test_missing_rparen_still_consumes_function_body() -> None:
    program, errors = parse("fn test(x, y { return x + y; } let z = 1;")
    assert errors == [
        "line 1, col 14: expected next token to be RPAREN, got LBRACE ('{') instead"
    ]
    assert program.statements == [LetStatement("z", IntegerLiteral(1))]


def test_unclosed_block_records_error() -> None:
    program, errors = parse("if (x) { let y = 1;")
    assert program.statements == []
    assert errors == [
        "line 1, col 20: expected '}' to close block opened at line 1, col 8, got EOF"
    ]


def test_no_prefix_rule_error() -> None:
    program, errors = parse("+;")
    assert program.statements == []
    assert errors[0] == "line 1, col 1: no prefix parse rule for PLUS ('+') found"


def test_string_literal_has_no_expression_form() -> None:
    _, errors = parse('"hi";')
    assert "no prefix parse rule for STRING" in errors[0]


def test_illegal_token_is_reported_by_parser() -> None:
    _, errors = parse("let x = @;")
    assert "no prefix parse rule for ILLEGAL ('@') found" in errors[0]


def test_multiple_independent_errors() -> None:
    program, errors = parse("let = 1; let y = 2; let 3; return 4;")
    assert len(errors) >= 2
    assert LetStatement("y", IntegerLiteral(2)) in program.statements
    assert ReturnStatement(IntegerLiteral(4)) in program.statements


def test_errors_accessor_matches_parse_result() -> None:
    parser = Parser.from_source("let x 5;")
    program, errors = parser.parse()
    assert parser.errors() == errors
    parser.errors().clear()
    assert parser.errors() == errors


def test_empty_program() -> None:
    program, errors = parse("")
    assert program == Block()
    assert errors == []


def test_comments_are_ignored_by_parser() -> None:
    program = parse_ok("/* header */ let x = 1; // trailing\nx;")
    assert len(program.statements) == 2


def test_expect_peek_does_not_advance_on_failure() -> None:
    parser = Parser.from_source("let 5")
    assert parser.current_token.type == "LET"
    assert not parser.expect_peek("IDENT")
    assert parser.current_token.type == "LET"
    assert parser.peek_token.type == "INT"
    assert parser.expect_peek("INT")
    assert parser.current_token.type == "INT"


def test_parser_pulls_tokens_lazily() -> None:
    lexer = Lexer.from_source("a; b; c;")
    parser = Parser(lexer)
    assert lexer.stream.position == 2
    assert parser.peek_token.literal == ";"


def test_integer_overflow_is_fatal() -> None:
    with pytest.raises(LexError):
        parse("let x = 99999999999999999999;")


def test_long_operator_chain() -> None:
    source = " + ".join(["1"] * 3000) + ";"
    program = parse_ok(source)
    assert len(program.statements) == 1


def test_long_prefix_chain_is_parsed_without_recursion() -> None:
    expr = single_expression("-" * 50 + "x;")
    assert expr == "(-" * 50 + "x" + ")" * 50


def test_prefix_chain_beyond_nesting_limit_is_an_error() -> None:
    program, errors = parse("-" * 1000 + "1; ok;")
    assert errors == [
        "line 1, col 1: expression nested too deeply (more than 100 levels)"
    ]
    assert program.statements == [ExpressionStatement(Identifier("ok"))]


def test_deeply_nested_parentheses_are_an_error() -> None:
    depth = 600
    program, errors = parse("(" * depth + "1" + ")" * depth + "; ok;")
    assert len(errors) == 1
    assert "nested too deeply" in errors[0]
    assert program.statements == [ExpressionStatement(Identifier("ok"))]


def test_deeply_nested_calls_are_an_error() -> None:
    depth = 600
    _, errors = parse("f(" * depth + "1" + ")" * depth + ";")
    assert len(errors) == 1
    assert "nested too deeply" in errors[0]


def test_deeply_nested_blocks_are_an_error() -> None:
    depth = 400
    program, errors = parse("if (x) { " * depth + "}" * depth + " ok;")
    assert len(errors) == 1
    assert "nested too deeply" in errors[0]
    assert isinstance(program.statements[0], IfStatement)
    assert program.statements[1] == ExpressionStatement(Identifier("ok"))


def test_nesting_within_limit_is_accepted() -> None:
    depth = 90
    expr = single_expression("(" * depth + "1" + ")" * depth + ";")
    assert expr == "1"


def test_broken_parameter_list_does_not_leak_body() -> None:
    program, errors = parse("fn f(a b) { x; }")
    assert len(errors) == 1
    assert "expected next token to be RPAREN, got IDENT ('b')" in errors[0]
    assert program.statements == []


def test_broken_condition_does_not_leak_into_enclosing_block() -> None:
    program, errors = parse("fn g() { if (a b) { x; } y; } z;")
    assert len(errors) == 1
    assert program.statements == [
        FunctionDeclaration("g", [], Block([ExpressionStatement(Identifier("y"))])),
        ExpressionStatement(Identifier("z")),
    ]


def test_broken_condition_skips_else_branch() -> None:
    program, errors = parse("if (a b) { x; } else { y; } z;")
    assert len(errors) == 1
    assert program.statements == [ExpressionStatement(Identifier("z"))]


def test_broken_if_expression_skips_to_semicolon() -> None:
    program, errors = parse("let v = if (a b) { x; }; w;")
    assert len(errors) == 1
    assert program.statements == [ExpressionStatement(Identifier("w"))]


def test_broken_statement_stops_before_next_let() -> None:
    program, errors = parse("let x = 5 let y = 6;")
    assert len(errors) == 1
    assert program.statements == [LetStatement("y", IntegerLiteral(6))]


def test_broken_statement_leaves_block_closing_brace() -> None:
    program, errors = parse("fn f() { 1 + } g;")
    assert len(errors) == 1
    assert program.statements == [
        FunctionDeclaration("f", [], Block()),
        ExpressionStatement(Identifier("g")),
    ]


class TokenFeed:
    """Stands in for a Lexer, replaying a fixed token list then EOF."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = iter(tokens)

    def next_token(self) -> Token:
        return next(self.tokens, Token("EOF", ""))


def test_int_token_without_value_is_an_internal_error() -> None:
    parser = Parser(TokenFeed([Token("INT", "7"), Token("SEMICOLON", ";")]))  # type: ignore[arg-type]
    with pytest.raises(ParserInternalError, match="carries no integer value"):
        parser.parse()


def test_int_token_from_feed_parses() -> None:
    parser = Parser(TokenFeed([Token("INT", "7", 7), Token("SEMICOLON", ";")]))  # type: ignore[arg-type]
    program, errors = parser.parse()
    assert errors == []
    assert program.statements == [ExpressionStatement(IntegerLiteral(7))]


@settings(deadline=None)
@given(st.text(max_size=150))
def test_parser_never_raises_on_random_input(source: str) -> None:
    try:
        program, errors = parse(source)
    except LexError:
        return
    assert isinstance(program, Block)
    assert all(isinstance(e, str) for e in errors)


@settings(deadline=None)
@given(
    st.lists(
        st.sampled_from(
            ["let", "fn", "if", "else", "return", "x", "1", "(", ")", "{", "}", ",", ";", "=", "+", "!", "-"]
        ),
        max_size=40,
    )
)
def test_parser_terminates_on_token_soup(words: list[str]) -> None:
    program, errors = parse(" ".join(words))
    assert isinstance(program, Block)
