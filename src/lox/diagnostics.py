"""Lox diagnostics — the single sink for user-visible error text."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

from .tokens import TK_EOF, Token

if TYPE_CHECKING:
    from .runtime import LoxRuntimeError


@dataclass(frozen=True)
class Diagnostic:
    """A static (scan, parse, or resolve) error."""

    line: int
    where: str
    message: str

    def __str__(self) -> str:
        return f"[line {self.line}] Error{self.where}: {self.message}"


class Reporter:
    """Collects and prints diagnostics, tracking whether any occurred.

    `had_error` covers static errors and gates execution; `had_runtime_error`
    is set once an uncaught runtime error has been reported.
    """

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream
        self.had_error: bool = False
        self.had_runtime_error: bool = False
        self.diagnostics: list[Diagnostic] = []

    @property
    def stream(self) -> TextIO:
        if self._stream is None:
            return sys.stderr
        return self._stream

    def error(self, line: int, message: str) -> None:
        self.report(line, "", message)

    def error_at(self, token: Token, message: str) -> None:
        if token.type == TK_EOF:
            self.report(token.line, " at end", message)
        else:
            self.report(token.line, " at '" + token.lexeme + "'", message)

    def report(self, line: int, where: str, message: str) -> None:
        diag = Diagnostic(line, where, message)
        self.diagnostics.append(diag)
        print(str(diag), file=self.stream)
        self.had_error = True

    def runtime_error(self, err: LoxRuntimeError) -> None:
        print(err.message + "\n[line " + str(err.token.line) + "]", file=self.stream)
        self.had_runtime_error = True

    def reset(self) -> None:
        """Forget a static error so the next REPL line can run."""
        self.had_error = False
