"""Tests for the parenthesized AST printer."""

from lox import parse, to_sexpr
from lox.ast import Binary, Grouping, Literal, Unary
from lox.tokens import Token


def test_hand_built_expression():
    expr = Binary(
        Unary(Token("-", "-", None, 1), Literal(123.0)),
        Token("*", "*", None, 1),
        Grouping(Literal(45.67)),
    )
    assert to_sexpr(expr) == "(* (- 123) (group 45.67))"


def test_statement_rendering():
    (stmt,) = parse("var greeting = \"hi\" + name;")
    assert to_sexpr(stmt) == '(var greeting (+ "hi" name))'


def test_nodes_have_distinct_ids():
    a = Literal(1.0)
    b = Literal(1.0)
    assert a.nid != b.nid
    assert a != b


def test_large_number_literal_has_no_exponent():
    (stmt,) = parse("print 10000000000000000;")
    assert to_sexpr(stmt) == "(print 10000000000000000)"
