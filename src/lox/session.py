"""Pipeline driver — scan, parse, resolve and interpret one source text."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import TextIO

from .ast import Expression, Stmt
from .diagnostics import Reporter
from .parse import parse_tokens
from .resolve import resolve_program
from .runtime import Interpreter, LoxRuntimeError
from .tokens import tokenize

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DATAERR = 65


@dataclass
class RunResult:
    exit_code: int
    stdout: str
    stderr: str


class Session:
    """One interpreter whose globals persist across `run()` calls.

    Batch mode calls `run()` once; the REPL calls it per line and calls
    `reporter.reset()` in between.
    """

    def __init__(
        self, *, stdout: TextIO | None = None, stderr: TextIO | None = None
    ) -> None:
        self.reporter = Reporter(stderr)
        self.interpreter = Interpreter(self.reporter, stdout=stdout)

    @property
    def had_error(self) -> bool:
        return self.reporter.had_error

    @property
    def had_runtime_error(self) -> bool:
        return self.reporter.had_runtime_error

    def exit_code(self) -> int:
        if self.had_error or self.had_runtime_error:
            return EXIT_DATAERR
        return EXIT_OK

    def parse(self, source: str) -> list[Stmt]:
        tokens = tokenize(source, self.reporter)
        logger.debug("scanned %d tokens", len(tokens))
        statements = parse_tokens(tokens, self.reporter)
        logger.debug("parsed %d top-level statements", len(statements))
        return statements

    def run(self, source: str, *, echo: bool = False) -> None:
        """Run `source`. With `echo`, a lone expression statement prints its value."""
        statements = self.parse(source)
        if self.reporter.had_error:
            return
        before = len(self.interpreter.locals)
        resolve_program(statements, self.interpreter, self.reporter)
        logger.debug(
            "resolved %d local references", len(self.interpreter.locals) - before
        )
        if self.reporter.had_error:
            return
        if echo and len(statements) == 1 and isinstance(statements[0], Expression):
            self._echo(statements[0])
            return
        self.interpreter.interpret(statements)

    def _echo(self, st: Expression) -> None:
        try:
            value = self.interpreter.evaluate(st.expression)
        except LoxRuntimeError as e:
            self.reporter.runtime_error(e)
            return
        print(value.to_string(), file=self.interpreter.stdout)


def run_source(source: str) -> RunResult:
    """Run `source` in a fresh session, capturing its output."""
    out = io.StringIO()
    err = io.StringIO()
    session = Session(stdout=out, stderr=err)
    session.run(source)
    return RunResult(session.exit_code(), out.getvalue(), err.getvalue())
