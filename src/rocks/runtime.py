"""Rocks runtime — evaluate a resolved program by walking its AST."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import sys
import time
from typing import Callable, TextIO

from .ast import (
    Assign,
    Binary,
    Block,
    Break,
    Call,
    Class,
    Continue,
    Expr,
    Expression,
    Function,
    FunctionExpr,
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
    opens_scope,
)
from .environment import Environment
from .errors import InternalError, RocksRuntimeFault, at_token
from .limits import recursion_limit
from .tokens import Token
from .values import (
    NIL,
    VBool,
    VCallable,
    VClass,
    VFunction,
    VInstance,
    VNative,
    VNumber,
    VString,
    Value,
    from_literal,
    values_equal,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_CALL_DEPTH = 256

# Host stack frames allowed per user-level call when raising the recursion limit
_HOST_FRAMES_PER_CALL = 40


# ============================================================
# Control flow signals (internal)
# ============================================================


class _Signal:
    """Returned by statement execution to unwind to a loop or call boundary."""


@dataclass
class _Return(_Signal):
    value: Value


class _Break(_Signal):
    pass


class _Continue(_Signal):
    pass


_BREAK = _Break()
_CONTINUE = _Continue()


# ============================================================
# Natives
# ============================================================


def _native_clock(rt: Interpreter, args: list[Value]) -> Value:
    return VNumber(time.time())


def _native_input(rt: Interpreter, args: list[Value]) -> Value:
    line = rt.stdin.readline()
    if line == "":
        return NIL
    return VString(line.rstrip("\n"))


_NATIVES: dict[str, tuple[int, Callable[[Interpreter, list[Value]], Value]]] = {
    "clock": (0, _native_clock),
    "input": (0, _native_input),
}


def _fault(msg: str, tok: Token) -> RocksRuntimeFault:
    return RocksRuntimeFault(msg, tok.line, tok.col, at_token(tok.lexeme, False))


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


# ============================================================
# Interpreter
# ============================================================


class Interpreter:
    """Tree-walking evaluator.

    One interpreter holds the global environment, so running several
    programs through it (as a prompt does) shares globals between them.
    """

    def __init__(
        self,
        *,
        out: TextIO | None = None,
        stdin: TextIO | None = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
    ):
        self.out: TextIO = out if out is not None else sys.stdout
        self.stdin: TextIO = stdin if stdin is not None else sys.stdin
        self.max_call_depth: int = max_call_depth
        self.call_depth: int = 0
        self.globals: Environment = Environment()
        self.environment: Environment = self.globals
        for name, (n_params, fn) in _NATIVES.items():
            self.globals.define(name, VNative(name, n_params, fn))

    # ---- Running -----------------------------------------------------------

    def interpret(self, stmts: list[Stmt]) -> RocksRuntimeFault | None:
        """Execute stmts in order, stopping at the first runtime fault."""
        try:
            with recursion_limit(self.max_call_depth * _HOST_FRAMES_PER_CALL):
                for stmt in stmts:
                    try:
                        signal = self.execute(stmt)
                    except RecursionError:
                        raise RocksRuntimeFault("Stack overflow", 0, 0) from None
                    if signal is not None:
                        raise InternalError("control flow escaped to top level")
        except RocksRuntimeFault as e:
            logger.debug("runtime fault: %s", e)
            self.call_depth = 0
            return e
        return None

    # ---- Statements --------------------------------------------------------

    def execute_block(self, stmts: list[Stmt], env: Environment) -> _Signal | None:
        previous = self.environment
        self.environment = env
        try:
            for stmt in stmts:
                signal = self.execute(stmt)
                if signal is not None:
                    return signal
        finally:
            self.environment = previous
        return None

    def execute_body(self, body: list[Stmt], env: Environment) -> Value | None:
        """Run a function body in env. Returns the returned value, if any."""
        signal = self.execute_block(body, env)
        if isinstance(signal, _Return):
            return signal.value
        if signal is not None:
            raise InternalError("loop signal escaped a function body")
        return None

    def execute(self, stmt: Stmt) -> _Signal | None:
        if isinstance(stmt, Expression):
            self.evaluate(stmt.expr)
            return None

        if isinstance(stmt, Print):
            value = self.evaluate(stmt.expr)
            self.out.write(value.to_string() + "\n")
            return None

        if isinstance(stmt, Var):
            value: Value = NIL
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)
            return None

        if isinstance(stmt, Block):
            env = self.environment
            if opens_scope(stmt):
                env = Environment(self.environment)
            return self.execute_block(stmt.statements, env)

        if isinstance(stmt, If):
            if self.evaluate(stmt.cond).is_truthy():
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)
            return None

        if isinstance(stmt, While):
            while self.evaluate(stmt.cond).is_truthy():
                signal = self.execute(stmt.body)
                if isinstance(signal, _Break):
                    break
                if isinstance(signal, _Return):
                    return signal
                if stmt.increment is not None:
                    self.evaluate(stmt.increment)
            return None

        if isinstance(stmt, Function):
            fn = VFunction(stmt.name.lexeme, stmt.params, stmt.body, self.environment)
            self.environment.define(stmt.name.lexeme, fn)
            return None

        if isinstance(stmt, Class):
            self._declare_class(stmt)
            return None

        if isinstance(stmt, Return):
            value = NIL
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return _Return(value)

        if isinstance(stmt, Break):
            return _BREAK

        if isinstance(stmt, Continue):
            return _CONTINUE

        raise InternalError("unsupported statement " + type(stmt).__name__)

    def _declare_class(self, stmt: Class) -> None:
        superclass: VClass | None = None
        if stmt.superclass is not None:
            value = self.evaluate(stmt.superclass)
            if not isinstance(value, VClass):
                raise _fault("Superclass must be a class", stmt.superclass.name)
            superclass = value

        self.environment.define(stmt.name.lexeme, NIL)
        env = self.environment
        if superclass is not None:
            env = Environment(env)
            env.define("super", superclass)

        methods: dict[str, VFunction] = {}
        for method in stmt.methods:
            name = method.name.lexeme
            methods[name] = VFunction(
                name, method.params, method.body, env, is_initializer=name == "init"
            )
        cls = VClass(stmt.name.lexeme, superclass, methods)
        self.environment.define(stmt.name.lexeme, cls)

    # ---- Expressions -------------------------------------------------------

    def evaluate(self, expr: Expr) -> Value:
        if isinstance(expr, Literal):
            return from_literal(expr.value)

        if isinstance(expr, Grouping):
            return self.evaluate(expr.expr)

        if isinstance(expr, Variable):
            return self._lookup(expr.name, expr.depth)

        if isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            if expr.depth is None:
                self.globals.assign(expr.name, value)
            else:
                self.environment.assign_at(expr.depth, expr.name.lexeme, value)
            return value

        if isinstance(expr, Unary):
            operand = self.evaluate(expr.operand)
            if expr.op.lexeme == "!":
                return VBool(not operand.is_truthy())
            if isinstance(operand, VNumber):
                return VNumber(-operand.value)
            raise _fault(
                "Unary operation '-' is not supported for "
                + operand.type_name()
                + " type",
                expr.op,
            )

        if isinstance(expr, Binary):
            left = self.evaluate(expr.left)
            right = self.evaluate(expr.right)
            return self._eval_binary(expr.op, left, right)

        if isinstance(expr, Logical):
            left = self.evaluate(expr.left)
            if expr.op.lexeme == "or":
                if left.is_truthy():
                    return left
            elif not left.is_truthy():
                return left
            return self.evaluate(expr.right)

        if isinstance(expr, Call):
            return self._eval_call(expr)

        if isinstance(expr, Get):
            obj = self.evaluate(expr.obj)
            if not isinstance(obj, VInstance):
                raise _fault("Only instances have properties", expr.name)
            return obj.get(expr.name)

        if isinstance(expr, Set):
            obj = self.evaluate(expr.obj)
            if not isinstance(obj, VInstance):
                raise _fault("Only instances can have fields", expr.name)
            value = self.evaluate(expr.value)
            obj.set(expr.name, value)
            return value

        if isinstance(expr, This):
            return self._lookup(expr.keyword, expr.depth)

        if isinstance(expr, Super):
            return self._eval_super(expr)

        if isinstance(expr, FunctionExpr):
            return VFunction(None, expr.params, expr.body, self.environment)

        raise InternalError("unsupported expression " + type(expr).__name__)

    def _lookup(self, name: Token, depth: int | None) -> Value:
        if depth is None:
            return self.globals.get(name)
        return self.environment.get_at(depth, name.lexeme)

    def _eval_super(self, expr: Super) -> Value:
        if expr.depth is None:
            raise InternalError("unresolved 'super'")
        superclass = self.environment.get_at(expr.depth, "super")
        instance = self.environment.get_at(expr.depth - 1, "this")
        if not isinstance(superclass, VClass) or not isinstance(instance, VInstance):
            raise InternalError("'super' scope holds the wrong values")
        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise _fault(
                "Undefined property '" + expr.method.lexeme + "'", expr.method
            )
        return method.bind(instance)

    def _eval_call(self, expr: Call) -> Value:
        callee = self.evaluate(expr.callee)
        args = [self.evaluate(a) for a in expr.args]
        if not isinstance(callee, VCallable):
            raise _fault("Can only call functions and classes", expr.paren)
        if len(args) != callee.arity():
            raise _fault(
                "Expected "
                + str(callee.arity())
                + " arguments but got "
                + str(len(args)),
                expr.paren,
            )
        if self.call_depth >= self.max_call_depth:
            raise _fault("Stack overflow", expr.paren)
        self.call_depth += 1
        try:
            return callee.call(self, args)
        except RecursionError:
            raise _fault("Stack overflow", expr.paren) from None
        finally:
            self.call_depth -= 1

    def _eval_binary(self, op: Token, left: Value, right: Value) -> Value:
        lexeme = op.lexeme
        if lexeme == "==":
            return VBool(values_equal(left, right))
        if lexeme == "!=":
            return VBool(not values_equal(left, right))

        if isinstance(left, VNumber) and isinstance(right, VNumber):
            a = left.value
            b = right.value
            if lexeme == "+":
                return VNumber(a + b)
            if lexeme == "-":
                return VNumber(a - b)
            if lexeme == "*":
                return VNumber(a * b)
            if lexeme == "/":
                return VNumber(_divide(a, b))
            if lexeme == "<":
                return VBool(a < b)
            if lexeme == "<=":
                return VBool(a <= b)
            if lexeme == ">":
                return VBool(a > b)
            if lexeme == ">=":
                return VBool(a >= b)

        # Either side being a string makes + a concatenation.
        if lexeme == "+" and (isinstance(left, VString) or isinstance(right, VString)):
            return VString(left.to_string() + right.to_string())

        raise _fault(
            "Binary operation '"
            + lexeme
            + "' is not supported between "
            + left.type_name()
            + " type and "
            + right.type_name()
            + " type",
            op,
        )
