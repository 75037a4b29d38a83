"""Lox tree-walking interpreter — public API."""

from __future__ import annotations

import io

from .ast import Expr, Stmt
from .diagnostics import Diagnostic, Reporter
from .emit import to_sexpr, to_sexprs
from .parse import ParseError as ParseError, Parser, parse_tokens
from .resolve import ResolveError as ResolveError, Resolver, resolve_program
from .runtime import Interpreter, LoxRuntimeError as LoxRuntimeError
from .session import RunResult, Session, run_source
from .tokens import Token, tokenize

__all__ = [
    "Diagnostic",
    "Expr",
    "Interpreter",
    "LoxRuntimeError",
    "ParseError",
    "Parser",
    "Reporter",
    "ResolveError",
    "Resolver",
    "RunResult",
    "Session",
    "Stmt",
    "Token",
    "check",
    "parse",
    "run_source",
    "to_sexpr",
    "to_sexprs",
    "tokenize",
]


def parse(source: str, reporter: Reporter | None = None) -> list[Stmt]:
    """Scan and parse Lox source into top-level statements. Never raises."""
    if reporter is None:
        reporter = Reporter()
    return parse_tokens(tokenize(source, reporter), reporter)


def check(source: str) -> list[Diagnostic]:
    """Scan, parse and resolve without running. Returns diagnostics (empty = ok)."""
    reporter = Reporter(io.StringIO())
    statements = parse(source, reporter)
    if not reporter.had_error:
        resolve_program(statements, Interpreter(reporter), reporter)
    return reporter.diagnostics
