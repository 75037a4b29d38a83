"""Lox AST — parse-time node definitions.

Nodes are never mutated after parsing. Passes that need to annotate a node
(the resolver's scope distances) key their side tables on `node.nid`, a
unique integer assigned at construction.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field

from .tokens import Token

_node_ids = itertools.count(1)


def _next_id() -> int:
    return next(_node_ids)


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(eq=False)
class Expr:
    """Base for all expressions."""

    nid: int = field(default_factory=_next_id, kw_only=True, repr=False)


@dataclass(eq=False)
class Assign(Expr):
    """name = value."""

    name: Token
    value: Expr


@dataclass(eq=False)
class Binary(Expr):
    """left op right, for arithmetic, comparison and equality."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Call(Expr):
    """callee(arguments). paren is the closing ')' for error lines."""

    callee: Expr
    paren: Token
    arguments: list[Expr]


@dataclass(eq=False)
class Get(Expr):
    """object.name."""

    object: Expr
    name: Token


@dataclass(eq=False)
class Grouping(Expr):
    """( expression )."""

    expression: Expr


@dataclass(eq=False)
class Literal(Expr):
    """nil, true, false, a number, or a string."""

    value: float | str | bool | None


@dataclass(eq=False)
class Logical(Expr):
    """left and right, left or right. Short-circuits."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Set(Expr):
    """object.name = value."""

    object: Expr
    name: Token
    value: Expr


@dataclass(eq=False)
class Super(Expr):
    """super.method."""

    keyword: Token
    method: Token


@dataclass(eq=False)
class This(Expr):
    keyword: Token


@dataclass(eq=False)
class Unary(Expr):
    """!right, -right."""

    operator: Token
    right: Expr


@dataclass(eq=False)
class Variable(Expr):
    name: Token


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(eq=False)
class Stmt:
    """Base for all statements."""

    nid: int = field(default_factory=_next_id, kw_only=True, repr=False)


@dataclass(eq=False)
class Block(Stmt):
    """{ statements }."""

    statements: list[Stmt]


@dataclass(eq=False)
class Function(Stmt):
    """fun name(params) { body }, also used for methods."""

    name: Token
    params: list[Token]
    body: list[Stmt]


@dataclass(eq=False)
class Class(Stmt):
    """class Name < Superclass { methods }."""

    name: Token
    superclass: Variable | None
    methods: list[Function]


@dataclass(eq=False)
class Expression(Stmt):
    """expression; evaluated for its side effect."""

    expression: Expr


@dataclass(eq=False)
class If(Stmt):
    """if (condition) then_branch else else_branch."""

    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None


@dataclass(eq=False)
class Print(Stmt):
    expression: Expr


@dataclass(eq=False)
class Return(Stmt):
    """return value; value is None for a bare return."""

    keyword: Token
    value: Expr | None


@dataclass(eq=False)
class Var(Stmt):
    """var name = initializer;"""

    name: Token
    initializer: Expr | None


@dataclass(eq=False)
class While(Stmt):
    """while (condition) body. for loops are desugared into this."""

    condition: Expr
    body: Stmt
