"""Tests for the Lox runtime: values, environments, and interpreter state."""

import io
import sys

import pytest

from lox import parse
from lox.ast import Expression, Print, Variable
from lox.diagnostics import Reporter
from lox.resolve import resolve_program
from lox.runtime import (
    NIL,
    RECURSION_LIMIT,
    Environment,
    Interpreter,
    LoxRuntimeError,
    VBool,
    VNumber,
    VString,
    is_truthy,
    values_equal,
)
from lox.tokens import TK_IDENT, Token


def _name(lexeme: str) -> Token:
    return Token(TK_IDENT, lexeme, None, 1)


def _interpreter():
    out = io.StringIO()
    err = io.StringIO()
    reporter = Reporter(err)
    return Interpreter(reporter, stdout=out), out, err


def _run(interp: Interpreter, source: str) -> None:
    statements = parse(source, interp.reporter)
    assert not interp.reporter.had_error
    resolve_program(statements, interp, interp.reporter)
    assert not interp.reporter.had_error
    interp.interpret(statements)


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value,expected",
    [
        (NIL, False),
        (VBool(False), False),
        (VBool(True), True),
        (VNumber(0.0), True),
        (VString(""), True),
    ],
)
def test_truthiness(value, expected):
    assert is_truthy(value) is expected


def test_equality_never_coerces():
    assert values_equal(NIL, NIL)
    assert not values_equal(NIL, VBool(False))
    assert not values_equal(VNumber(1.0), VString("1"))
    assert values_equal(VString("a"), VString("a"))
    assert values_equal(VNumber(2.0), VNumber(2.0))


@pytest.mark.parametrize(
    "value,text",
    [
        (1e21, "1e+21"),
        (0.1, "0.1"),
        (-0.0, "-0"),
        (123456.0, "123456"),
        (1e16, "10000000000000000"),
        (1e20, "100000000000000000000"),
        (float("nan"), "NaN"),
        (float("-inf"), "-Infinity"),
    ],
)
def test_number_stringification(value, text):
    assert VNumber(value).to_string() == text


# ---------------------------------------------------------------------------
# Environments
# ---------------------------------------------------------------------------


def test_environment_lookup_walks_outward():
    outer = Environment()
    outer.define("a", VNumber(1.0))
    inner = Environment(outer)
    assert inner.get(_name("a")) == VNumber(1.0)


def test_define_writes_innermost_assign_writes_nearest():
    outer = Environment()
    outer.define("a", VNumber(1.0))
    inner = Environment(outer)
    inner.assign(_name("a"), VNumber(2.0))
    assert outer.values["a"] == VNumber(2.0)
    assert "a" not in inner.values
    inner.define("a", VNumber(3.0))
    assert inner.values["a"] == VNumber(3.0)
    assert outer.values["a"] == VNumber(2.0)


def test_undefined_variable_raises():
    env = Environment()
    with pytest.raises(LoxRuntimeError) as info:
        env.get(_name("missing"))
    assert info.value.message == "Undefined variable 'missing'."
    with pytest.raises(LoxRuntimeError):
        env.assign(_name("missing"), NIL)


def test_get_at_and_assign_at():
    root = Environment()
    mid = Environment(root)
    leaf = Environment(mid)
    root.define("x", VString("root"))
    mid.define("x", VString("mid"))
    assert leaf.get_at(1, "x") == VString("mid")
    assert leaf.get_at(2, "x") == VString("root")
    leaf.assign_at(2, _name("x"), VString("changed"))
    assert root.values["x"] == VString("changed")
    assert leaf.ancestor(0) is leaf


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------


def test_clock_is_a_global_native():
    interp, _, _ = _interpreter()
    clock = interp.globals.get(_name("clock"))
    assert clock.to_string() == "<native fn>"


def test_resolver_records_distances_by_node_id():
    interp, _, _ = _interpreter()
    statements = parse("{ var a = 1; { print a; } } print clock;", interp.reporter)
    resolve_program(statements, interp, interp.reporter)
    inner_print = statements[0].statements[1].statements[0]
    assert isinstance(inner_print, Print)
    assert isinstance(inner_print.expression, Variable)
    assert interp.locals[inner_print.expression.nid] == 1
    global_print = statements[1]
    # Globals are not recorded; they are looked up by name at runtime.
    assert global_print.expression.nid not in interp.locals


def test_environment_restored_after_runtime_error():
    interp, out, err = _interpreter()
    _run(interp, "fun f() { { var x = 1; return -nil; } } f();")
    assert interp.environment is interp.globals
    assert err.getvalue() == "Operand must be a number.\n[line 1]\n"
    assert interp.reporter.had_runtime_error


def test_globals_persist_across_interpret_calls():
    interp, out, _ = _interpreter()
    _run(interp, "var count = 1;")
    _run(interp, "count = count + 1; print count;")
    assert out.getvalue() == "2\n"


def test_evaluate_expression_directly():
    interp, _, _ = _interpreter()
    (stmt,) = parse("1 + 2;", interp.reporter)
    assert isinstance(stmt, Expression)
    assert interp.evaluate(stmt.expression) == VNumber(3.0)


def test_arity_error_does_not_run_body():
    interp, out, err = _interpreter()
    _run(interp, 'fun f(a) { print "ran"; } f();')
    assert out.getvalue() == ""
    assert "Expected 1 arguments but got 0." in err.getvalue()


def test_ancestor_past_the_chain_is_an_internal_error():
    env = Environment(Environment())
    with pytest.raises(TypeError):
        env.ancestor(2)


def test_interpreter_raises_recursion_limit():
    _interpreter()
    assert sys.getrecursionlimit() >= RECURSION_LIMIT


def test_stack_overflow_is_reported_and_recoverable():
    interp, out, err = _interpreter()
    _run(interp, "fun dive(n) { return dive(n + 1); }\ndive(0);")
    assert err.getvalue() == "Stack overflow.\n[line 1]\n"
    assert interp.environment is interp.globals
    _run(interp, "print 1;")
    assert out.getvalue() == "1\n"
