"""Lox AST printer — renders nodes as parenthesized prefix forms.

`-123 * (45.67)` becomes `(* (- 123) (group 45.67))`. Statements use the same
shape with a leading keyword, e.g. `(var x 1)` or `(while cond body)`. This is
developer tooling only; it is total over `lox.ast` and must grow with it.
"""

from __future__ import annotations

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
from .runtime import format_number


def to_sexpr(node: Expr | Stmt) -> str:
    """Render one expression or statement."""
    if isinstance(node, Stmt):
        return _Printer().render_stmt(node)
    return _Printer().render_expr(node)


def to_sexprs(statements: list[Stmt]) -> str:
    """Render a program, one top-level statement per line."""
    printer = _Printer()
    return "".join(printer.render_stmt(st) + "\n" for st in statements)


def _literal_text(value: float | str | bool | None) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return '"' + value + '"'


class _Printer:
    def _parenthesize(self, name: str, *parts: Expr | Stmt | str) -> str:
        out = "(" + name
        for part in parts:
            out += " "
            if isinstance(part, str):
                out += part
            elif isinstance(part, Stmt):
                out += self.render_stmt(part)
            else:
                out += self.render_expr(part)
        return out + ")"

    # ── Expressions ──────────────────────────────────────────

    def render_expr(self, expr: Expr) -> str:
        if isinstance(expr, Literal):
            return _literal_text(expr.value)
        if isinstance(expr, Grouping):
            return self._parenthesize("group", expr.expression)
        if isinstance(expr, Unary):
            return self._parenthesize(expr.operator.lexeme, expr.right)
        if isinstance(expr, (Binary, Logical)):
            return self._parenthesize(expr.operator.lexeme, expr.left, expr.right)
        if isinstance(expr, Variable):
            return expr.name.lexeme
        if isinstance(expr, Assign):
            return self._parenthesize("=", expr.name.lexeme, expr.value)
        if isinstance(expr, Call):
            return self._parenthesize("call", expr.callee, *expr.arguments)
        if isinstance(expr, Get):
            return self._parenthesize(".", expr.object, expr.name.lexeme)
        if isinstance(expr, Set):
            return self._parenthesize("=", expr.object, expr.name.lexeme, expr.value)
        if isinstance(expr, This):
            return "this"
        if isinstance(expr, Super):
            return self._parenthesize("super", expr.method.lexeme)
        raise TypeError("unhandled expression type")

    # ── Statements ───────────────────────────────────────────

    def render_stmt(self, st: Stmt) -> str:
        if isinstance(st, Expression):
            return self._parenthesize(";", st.expression)
        if isinstance(st, Print):
            return self._parenthesize("print", st.expression)
        if isinstance(st, Var):
            if st.initializer is None:
                return self._parenthesize("var", st.name.lexeme)
            return self._parenthesize("var", st.name.lexeme, st.initializer)
        if isinstance(st, Block):
            return self._parenthesize("block", *st.statements)
        if isinstance(st, If):
            if st.else_branch is None:
                return self._parenthesize("if", st.condition, st.then_branch)
            return self._parenthesize(
                "if-else", st.condition, st.then_branch, st.else_branch
            )
        if isinstance(st, While):
            return self._parenthesize("while", st.condition, st.body)
        if isinstance(st, Function):
            return self._render_function("fun", st)
        if isinstance(st, Return):
            if st.value is None:
                return "(return)"
            return self._parenthesize("return", st.value)
        if isinstance(st, Class):
            parts: list[Expr | Stmt | str] = [st.name.lexeme]
            if st.superclass is not None:
                parts.append("< " + st.superclass.name.lexeme)
            for method in st.methods:
                parts.append(self._render_function("method", method))
            return self._parenthesize("class", *parts)
        raise TypeError("unhandled statement type")

    def _render_function(self, keyword: str, fn: Function) -> str:
        params = "(" + " ".join(p.lexeme for p in fn.params) + ")"
        return self._parenthesize(keyword, fn.name.lexeme, params, *fn.body)
