"""Lox resolver — static scope analysis run once before execution.

Walks the whole program recording, for every local variable reference, how
many scopes separate the use from the declaration. The interpreter uses that
distance to jump straight to the right environment. References not found in
any tracked scope are left unresolved and looked up as globals at runtime.

Also enforces the rules that are cheaper to check once than on every run:
redeclaration in one local scope, self-reference in an initializer, `return`
outside a function or with a value in `init`, and misplaced `this`/`super`.
Errors are reported and collected; the pass always completes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .ast import (
    Assign,
    Binary,
    Block,
    Call,
    Class,
    Expr,
    Expression,
    Function,
    Get,
    Grouping,
    If,
    Literal,
    Logical,
    Print,
    Return,
    Set,
    Stmt,
    Super,
    This,
    Unary,
    Var,
    Variable,
    While,
)
from .tokens import Token

if TYPE_CHECKING:
    from .diagnostics import Reporter
    from .runtime import Interpreter


# Kind of function body currently being resolved
FN_NONE = "none"
FN_FUNCTION = "function"
FN_INITIALIZER = "initializer"
FN_METHOD = "method"

# Kind of class body currently being resolved
CLASS_NONE = "none"
CLASS_CLASS = "class"
CLASS_SUBCLASS = "subclass"


class ResolveError(Exception):
    def __init__(self, msg: str, token: Token):
        self.msg: str = msg
        self.token: Token = token
        super().__init__(msg + " at line " + str(token.line))


class Resolver:
    def __init__(self, interpreter: Interpreter, reporter: Reporter) -> None:
        self.interpreter = interpreter
        self.reporter = reporter
        self.errors: list[ResolveError] = []
        # name -> True once defined; False while only declared
        self.scopes: list[dict[str, bool]] = []
        self.current_function: str = FN_NONE
        self.current_class: str = CLASS_NONE

    def _error(self, token: Token, msg: str) -> None:
        self.errors.append(ResolveError(msg, token))
        self.reporter.error_at(token, msg)

    # ── Scopes ───────────────────────────────────────────────

    def begin_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name: Token) -> None:
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self._error(name, "Already a variable with this name in scope.")
        scope[name.lexeme] = False

    def define(self, name: Token) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expr, name: Token) -> None:
        for i in range(len(self.scopes) - 1, -1, -1):
            if name.lexeme in self.scopes[i]:
                self.interpreter.resolve(expr, len(self.scopes) - 1 - i)
                return

    # ── Entry ────────────────────────────────────────────────

    def resolve(self, statements: list[Stmt]) -> None:
        for st in statements:
            self.resolve_stmt(st)

    # ── Statements ───────────────────────────────────────────

    def resolve_stmt(self, st: Stmt) -> None:
        if isinstance(st, Block):
            self.begin_scope()
            self.resolve(st.statements)
            self.end_scope()
            return

        if isinstance(st, Var):
            self.declare(st.name)
            if st.initializer is not None:
                self.resolve_expr(st.initializer)
            self.define(st.name)
            return

        if isinstance(st, Function):
            self.declare(st.name)
            self.define(st.name)
            self.resolve_function(st, FN_FUNCTION)
            return

        if isinstance(st, Class):
            self._resolve_class(st)
            return

        if isinstance(st, Expression):
            self.resolve_expr(st.expression)
            return

        if isinstance(st, Print):
            self.resolve_expr(st.expression)
            return

        if isinstance(st, If):
            self.resolve_expr(st.condition)
            self.resolve_stmt(st.then_branch)
            if st.else_branch is not None:
                self.resolve_stmt(st.else_branch)
            return

        if isinstance(st, While):
            self.resolve_expr(st.condition)
            self.resolve_stmt(st.body)
            return

        if isinstance(st, Return):
            if self.current_function == FN_NONE:
                self._error(st.keyword, "Can't return from top-level code.")
            if st.value is not None:
                if self.current_function == FN_INITIALIZER:
                    self._error(st.keyword, "Can't return a value from an initializer.")
                self.resolve_expr(st.value)
            return

        raise TypeError(f"unsupported statement: {type(st).__name__}")

    def _resolve_class(self, st: Class) -> None:
        enclosing_class = self.current_class
        self.current_class = CLASS_CLASS

        self.declare(st.name)
        self.define(st.name)

        if st.superclass is not None:
            if st.superclass.name.lexeme == st.name.lexeme:
                self._error(st.superclass.name, "A class can't inherit from itself.")
            self.current_class = CLASS_SUBCLASS
            self.resolve_expr(st.superclass)
            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True
        for method in st.methods:
            kind = FN_INITIALIZER if method.name.lexeme == "init" else FN_METHOD
            self.resolve_function(method, kind)
        self.end_scope()

        if st.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def resolve_function(self, fn: Function, kind: str) -> None:
        enclosing_function = self.current_function
        self.current_function = kind
        self.begin_scope()
        for param in fn.params:
            self.declare(param)
            self.define(param)
        # The body shares the parameter scope, matching LoxFunction.call.
        self.resolve(fn.body)
        self.end_scope()
        self.current_function = enclosing_function

    # ── Expressions ──────────────────────────────────────────

    def resolve_expr(self, expr: Expr) -> None:
        if isinstance(expr, Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self._error(
                    expr.name, "Can't read local variable in its own initializer."
                )
            self.resolve_local(expr, expr.name)
            return

        if isinstance(expr, Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name)
            return

        if isinstance(expr, Binary):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)
            return

        if isinstance(expr, Logical):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)
            return

        if isinstance(expr, Unary):
            self.resolve_expr(expr.right)
            return

        if isinstance(expr, Grouping):
            self.resolve_expr(expr.expression)
            return

        if isinstance(expr, Literal):
            return

        if isinstance(expr, Call):
            self.resolve_expr(expr.callee)
            for arg in expr.arguments:
                self.resolve_expr(arg)
            return

        if isinstance(expr, Get):
            self.resolve_expr(expr.object)
            return

        if isinstance(expr, Set):
            self.resolve_expr(expr.value)
            self.resolve_expr(expr.object)
            return

        if isinstance(expr, This):
            if self.current_class == CLASS_NONE:
                self._error(expr.keyword, "Can't use 'this' outside of a class.")
                return
            self.resolve_local(expr, expr.keyword)
            return

        if isinstance(expr, Super):
            if self.current_class == CLASS_NONE:
                self._error(expr.keyword, "Can't use 'super' outside of a class.")
            elif self.current_class != CLASS_SUBCLASS:
                self._error(
                    expr.keyword, "Can't use 'super' in a class with no superclass."
                )
            self.resolve_local(expr, expr.keyword)
            return

        raise TypeError(f"unsupported expression: {type(expr).__name__}")


def resolve_program(
    statements: list[Stmt], interpreter: Interpreter, reporter: Reporter
) -> list[ResolveError]:
    """Resolve `statements` into `interpreter`. Returns the errors found."""
    resolver = Resolver(interpreter, reporter)
    resolver.resolve(statements)
    return resolver.errors
