"""Lox runtime — value model, environments, and the tree-walking evaluator.

Statements execute for effect and hand back a completion: `None` when they
ran to the end, or a `_Returning` carrying the value of a `return` that must
unwind to the nearest function call. Runtime errors are exceptions and unwind
all the way to `Interpreter.interpret()`.
"""

from __future__ import annotations

import logging
import math
import sys
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, TextIO, cast

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

logger = logging.getLogger(__name__)


# ============================================================
# Diagnostics
# ============================================================


class LoxRuntimeError(Exception):
    """Runtime error: bad operand types, undefined names, bad calls."""

    def __init__(self, token: Token, message: str):
        super().__init__(f"{message} at line {token.line}")
        self.token = token
        self.message = message


# ============================================================
# Values
# ============================================================


def format_number(x: float) -> str:
    """Render a number the way `print` shows it: `3`, `2.5`, `NaN`, `-Infinity`."""
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    if x.is_integer() and abs(x) < 1e21:
        if x == 0 and math.copysign(1.0, x) < 0:
            return "-0"
        return str(int(x))
    return repr(x)


class Value:
    """A runtime value."""

    def to_string(self) -> str:
        raise NotImplementedError


@dataclass
class VNil(Value):
    def to_string(self) -> str:
        return "nil"


@dataclass
class VBool(Value):
    value: bool

    def to_string(self) -> str:
        return "true" if self.value else "false"


@dataclass
class VNumber(Value):
    value: float

    def to_string(self) -> str:
        return format_number(self.value)


@dataclass
class VString(Value):
    value: str

    def to_string(self) -> str:
        return self.value


NIL = VNil()
TRUE = VBool(True)
FALSE = VBool(False)


def _bool(b: bool) -> VBool:
    return TRUE if b else FALSE


def from_literal(value: float | str | bool | None) -> Value:
    """Wrap a decoded literal from the parser as a runtime value."""
    if value is None:
        return NIL
    if isinstance(value, bool):
        return _bool(value)
    if isinstance(value, float):
        return VNumber(value)
    return VString(value)


def is_truthy(v: Value) -> bool:
    """nil and false are falsy; everything else, 0 and "" included, is truthy."""
    if isinstance(v, VNil):
        return False
    if isinstance(v, VBool):
        return v.value
    return True


def values_equal(a: Value, b: Value) -> bool:
    if isinstance(a, VNil) or isinstance(b, VNil):
        return isinstance(a, VNil) and isinstance(b, VNil)
    if isinstance(a, VBool) and isinstance(b, VBool):
        return a.value == b.value
    if isinstance(a, VNumber) and isinstance(b, VNumber):
        return a.value == b.value
    if isinstance(a, VString) and isinstance(b, VString):
        return a.value == b.value
    # Functions, classes and instances compare by identity.
    return a is b


# ============================================================
# Environments
# ============================================================


class Environment:
    """One scope: a name -> value map plus a link to the enclosing scope.

    Environments are shared, never copied. A closure or bound method keeps
    its defining environment alive after the block that made it has exited.
    """

    def __init__(self, enclosing: Environment | None = None) -> None:
        self.values: dict[str, Value] = {}
        self.enclosing: Environment | None = enclosing

    def define(self, name: str, value: Value) -> None:
        self.values[name] = value

    def get(self, name: Token) -> Value:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Value) -> None:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> Environment:
        env = self
        for _ in range(distance):
            if env.enclosing is None:
                raise TypeError(f"resolved distance {distance} exceeds scope chain")
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> Value:
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: Value) -> None:
        self.ancestor(distance).values[name.lexeme] = value


# ============================================================
# Callables
# ============================================================


class LoxCallable(Value):
    """Anything that can appear before `(`: natives, functions, classes."""

    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        raise NotImplementedError


class NativeFunction(LoxCallable):
    def __init__(
        self,
        name: str,
        arity: int,
        fn: Callable[[Interpreter, list[Value]], Value],
    ):
        self.name = name
        self._arity = arity
        self._fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        return self._fn(interpreter, args)

    def to_string(self) -> str:
        return "<native fn>"


class LoxFunction(LoxCallable):
    """A user function or method paired with its defining environment."""

    def __init__(
        self, declaration: Function, closure: Environment, is_initializer: bool
    ):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def bind(self, instance: LoxInstance) -> LoxFunction:
        env = Environment(self.closure)
        env.define("this", instance)
        return LoxFunction(self.declaration, env, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        env = Environment(self.closure)
        for param, arg in zip(self.declaration.params, args):
            env.define(param.lexeme, arg)
        completion = interpreter.execute_block(self.declaration.body, env)
        # An initializer always yields its instance, even on a bare `return;`.
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if completion is not None:
            return completion.value
        return NIL

    def to_string(self) -> str:
        return f"<fn {self.declaration.name.lexeme}>"


class LoxClass(LoxCallable):
    def __init__(
        self,
        name: str,
        superclass: LoxClass | None,
        methods: dict[str, LoxFunction],
    ):
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> LoxFunction | None:
        klass: LoxClass | None = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        instance = LoxInstance(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, args)
        return instance

    def to_string(self) -> str:
        return f"<class {self.name}>"


@dataclass(eq=False)
class LoxInstance(Value):
    klass: LoxClass
    fields: dict[str, Value] = field(default_factory=dict)

    def get(self, name: Token) -> Value:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Value) -> None:
        self.fields[name.lexeme] = value

    def to_string(self) -> str:
        return f"{self.klass.name} instance"


# ============================================================
# Natives
# ============================================================


def _native_clock(interpreter: Interpreter, args: list[Value]) -> Value:
    return VNumber(time.time())


NATIVES: dict[str, tuple[int, Callable[[Interpreter, list[Value]], Value]]] = {
    "clock": (0, _native_clock),
}


# ============================================================
# Completions
# ============================================================


@dataclass
class _Returning:
    """Completion of a statement that executed `return`."""

    value: Value


# ============================================================
# Interpreter
# ============================================================


# Python frame budget for nested Lox calls. Each call uses several frames;
# running out is reported as the runtime error "Stack overflow."
RECURSION_LIMIT = 10000


def _divide(a: float, b: float) -> float:
    """IEEE division: x/0 is a signed infinity and 0/0 is NaN."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return float("nan")
        return math.copysign(float("inf"), a) * math.copysign(1.0, b)
    return a / b


class Interpreter:
    def __init__(self, reporter: Reporter, *, stdout: TextIO | None = None):
        self.reporter = reporter
        self._stdout = stdout
        self.globals = Environment()
        self.environment = self.globals
        # Expression node id -> number of scopes between use and declaration
        self.locals: dict[int, int] = {}
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)
        for name, (arity, fn) in NATIVES.items():
            self.globals.define(name, NativeFunction(name, arity, fn))

    @property
    def stdout(self) -> TextIO:
        if self._stdout is None:
            return sys.stdout
        return self._stdout

    # ---- Entry points ------------------------------------------------------

    def interpret(self, statements: list[Stmt]) -> None:
        """Run top-level statements; the first runtime error aborts the rest."""
        try:
            for st in statements:
                self.execute(st)
        except LoxRuntimeError as e:
            logger.debug("runtime error at line %d: %s", e.token.line, e.message)
            self.reporter.runtime_error(e)

    def resolve(self, expr: Expr, depth: int) -> None:
        self.locals[expr.nid] = depth

    # ---- Statements --------------------------------------------------------

    def execute(self, st: Stmt) -> _Returning | None:
        if isinstance(st, Expression):
            self.evaluate(st.expression)
            return None

        if isinstance(st, Print):
            value = self.evaluate(st.expression)
            print(value.to_string(), file=self.stdout)
            return None

        if isinstance(st, Var):
            value: Value = NIL
            if st.initializer is not None:
                value = self.evaluate(st.initializer)
            self.environment.define(st.name.lexeme, value)
            return None

        if isinstance(st, Block):
            return self.execute_block(st.statements, Environment(self.environment))

        if isinstance(st, If):
            if is_truthy(self.evaluate(st.condition)):
                return self.execute(st.then_branch)
            if st.else_branch is not None:
                return self.execute(st.else_branch)
            return None

        if isinstance(st, While):
            while is_truthy(self.evaluate(st.condition)):
                completion = self.execute(st.body)
                if completion is not None:
                    return completion
            return None

        if isinstance(st, Function):
            fn = LoxFunction(st, self.environment, False)
            self.environment.define(st.name.lexeme, fn)
            return None

        if isinstance(st, Return):
            value = NIL
            if st.value is not None:
                value = self.evaluate(st.value)
            return _Returning(value)

        if isinstance(st, Class):
            self._exec_class(st)
            return None

        raise TypeError(f"unsupported statement: {type(st).__name__}")

    def execute_block(
        self, statements: list[Stmt], env: Environment
    ) -> _Returning | None:
        previous = self.environment
        try:
            self.environment = env
            for st in statements:
                completion = self.execute(st)
                if completion is not None:
                    return completion
            return None
        finally:
            self.environment = previous

    def _exec_class(self, st: Class) -> None:
        superclass: LoxClass | None = None
        if st.superclass is not None:
            value = self.evaluate(st.superclass)
            if not isinstance(value, LoxClass):
                raise LoxRuntimeError(st.superclass.name, "Superclass must be a class.")
            superclass = value

        self.environment.define(st.name.lexeme, NIL)

        enclosing = self.environment
        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods: dict[str, LoxFunction] = {}
        for method in st.methods:
            methods[method.name.lexeme] = LoxFunction(
                method, self.environment, method.name.lexeme == "init"
            )
        klass = LoxClass(st.name.lexeme, superclass, methods)

        self.environment = enclosing
        self.environment.assign(st.name, klass)

    # ---- Expressions -------------------------------------------------------

    def evaluate(self, expr: Expr) -> Value:
        if isinstance(expr, Literal):
            return from_literal(expr.value)

        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression)

        if isinstance(expr, Unary):
            right = self.evaluate(expr.right)
            if expr.operator.type == "!":
                return _bool(not is_truthy(right))
            if not isinstance(right, VNumber):
                raise LoxRuntimeError(expr.operator, "Operand must be a number.")
            return VNumber(-right.value)

        if isinstance(expr, Binary):
            left = self.evaluate(expr.left)
            right = self.evaluate(expr.right)
            return self._eval_binary(expr.operator, left, right)

        if isinstance(expr, Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type == "or":
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)

        if isinstance(expr, Variable):
            return self._look_up_variable(expr.name, expr)

        if isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            distance = self.locals.get(expr.nid)
            if distance is not None:
                self.environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value

        if isinstance(expr, Call):
            return self._eval_call(expr)

        if isinstance(expr, Get):
            obj = self.evaluate(expr.object)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(expr.name, "Only instances have properties.")
            return obj.get(expr.name)

        if isinstance(expr, Set):
            obj = self.evaluate(expr.object)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(expr.name, "Only instances have fields.")
            value = self.evaluate(expr.value)
            obj.set(expr.name, value)
            return value

        if isinstance(expr, This):
            return self._look_up_variable(expr.keyword, expr)

        if isinstance(expr, Super):
            return self._eval_super(expr)

        raise TypeError(f"unsupported expression: {type(expr).__name__}")

    def _look_up_variable(self, name: Token, expr: Expr) -> Value:
        distance = self.locals.get(expr.nid)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def _eval_call(self, expr: Call) -> Value:
        callee = self.evaluate(expr.callee)
        args = [self.evaluate(arg) for arg in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call function and classes.")
        if len(args) != callee.arity():
            raise LoxRuntimeError(
                expr.paren,
                f"Expected {callee.arity()} arguments but got {len(args)}.",
            )
        try:
            return callee.call(self, args)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None

    def _eval_super(self, expr: Super) -> Value:
        distance = self.locals[expr.nid]
        superclass = cast(LoxClass, self.environment.get_at(distance, "super"))
        # `this` lives in the scope just inside the one binding `super`.
        instance = cast(LoxInstance, self.environment.get_at(distance - 1, "this"))
        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(
                expr.method, f"Undefined property '{expr.method.lexeme}'."
            )
        return method.bind(instance)

    def _eval_binary(self, op: Token, left: Value, right: Value) -> Value:
        kind = op.type
        if kind == "==":
            return _bool(values_equal(left, right))
        if kind == "!=":
            return _bool(not values_equal(left, right))

        if kind == "+":
            if isinstance(left, VNumber) and isinstance(right, VNumber):
                return VNumber(left.value + right.value)
            if isinstance(left, VString) and isinstance(right, VString):
                return VString(left.value + right.value)
            raise LoxRuntimeError(op, "Operands must be two numbers or two strings.")

        if not isinstance(left, VNumber) or not isinstance(right, VNumber):
            raise LoxRuntimeError(op, "Operands must be numbers.")
        a = left.value
        b = right.value
        if kind == "-":
            return VNumber(a - b)
        if kind == "*":
            return VNumber(a * b)
        if kind == "/":
            return VNumber(_divide(a, b))
        if kind == ">":
            return _bool(a > b)
        if kind == ">=":
            return _bool(a >= b)
        if kind == "<":
            return _bool(a < b)
        if kind == "<=":
            return _bool(a <= b)
        raise TypeError(f"unsupported binary operator: {kind}")
