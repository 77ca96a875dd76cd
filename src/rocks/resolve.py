"""Rocks resolver — static pass annotating each local reference with its scope distance.

The resolver mirrors the scopes the interpreter creates (blocks, function
bodies, the `super` and `this` scopes around methods) and writes the number
of hops from use to declaration onto Variable, Assign, This, and Super
nodes. Globals are not tracked and stay unannotated.
"""

from __future__ import annotations

import logging

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
from .errors import InternalError, ResolveError, at_token
from .limits import NESTING_TOO_DEEP, STATIC_EXTRA_FRAMES, recursion_limit
from .tokens import Token

logger = logging.getLogger(__name__)


# Function kinds
FN_NONE = "none"
FN_FUNCTION = "function"
FN_METHOD = "method"
FN_INITIALIZER = "initializer"

# Class kinds
CLASS_NONE = "none"
CLASS_CLASS = "class"
CLASS_SUBCLASS = "subclass"


class Resolver:
    def __init__(self) -> None:
        self.errors: list[ResolveError] = []
        # name -> True once defined, False while its initializer is resolved
        self.scopes: list[dict[str, bool]] = []
        self.current_fn: str = FN_NONE
        self.current_class: str = CLASS_NONE
        self.loop_depth: int = 0

    def error(self, tok: Token, msg: str) -> None:
        self.errors.append(
            ResolveError(msg, tok.line, tok.col, at_token(tok.lexeme, False))
        )

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
            self.error(
                name,
                "A variable is already defined with name '"
                + name.lexeme
                + "' in this scope",
            )
        scope[name.lexeme] = False

    def define(self, name: Token) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expr, name: str) -> None:
        for i in range(len(self.scopes) - 1, -1, -1):
            if name in self.scopes[i]:
                depth = len(self.scopes) - 1 - i
                if isinstance(expr, (Variable, Assign, This, Super)):
                    expr.depth = depth
                    return
                raise InternalError("cannot annotate " + type(expr).__name__)

    # ── Statements ───────────────────────────────────────────

    def resolve(self, stmts: list[Stmt]) -> None:
        for stmt in stmts:
            self.resolve_stmt(stmt)

    def resolve_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Block):
            scoped = opens_scope(stmt)
            if scoped:
                self.begin_scope()
            self.resolve(stmt.statements)
            if scoped:
                self.end_scope()
            return

        if isinstance(stmt, Var):
            self.declare(stmt.name)
            if stmt.initializer is not None:
                self.resolve_expr(stmt.initializer)
            self.define(stmt.name)
            return

        if isinstance(stmt, Function):
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt.params, stmt.body, FN_FUNCTION)
            return

        if isinstance(stmt, Class):
            self.resolve_class(stmt)
            return

        if isinstance(stmt, Expression):
            self.resolve_expr(stmt.expr)
            return

        if isinstance(stmt, Print):
            self.resolve_expr(stmt.expr)
            return

        if isinstance(stmt, If):
            self.resolve_expr(stmt.cond)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)
            return

        if isinstance(stmt, While):
            self.resolve_expr(stmt.cond)
            self.loop_depth += 1
            self.resolve_stmt(stmt.body)
            self.loop_depth -= 1
            if stmt.increment is not None:
                self.resolve_expr(stmt.increment)
            return

        if isinstance(stmt, Return):
            if self.current_fn == FN_NONE:
                self.error(stmt.keyword, "Cannot return from top-level code")
            if stmt.value is not None:
                if self.current_fn == FN_INITIALIZER:
                    self.error(
                        stmt.keyword, "Cannot return a value from an initializer"
                    )
                self.resolve_expr(stmt.value)
            return

        if isinstance(stmt, Break):
            if self.loop_depth == 0:
                self.error(stmt.keyword, "Cannot break outside of a loop")
            return

        if isinstance(stmt, Continue):
            if self.loop_depth == 0:
                self.error(stmt.keyword, "Cannot continue outside of a loop")
            return

        raise InternalError("unsupported statement " + type(stmt).__name__)

    def resolve_function(
        self, params: list[Token], body: list[Stmt], kind: str
    ) -> None:
        enclosing_fn = self.current_fn
        enclosing_loops = self.loop_depth
        self.current_fn = kind
        self.loop_depth = 0
        self.begin_scope()
        for param in params:
            self.declare(param)
            self.define(param)
        self.resolve(body)
        self.end_scope()
        self.current_fn = enclosing_fn
        self.loop_depth = enclosing_loops

    def resolve_class(self, stmt: Class) -> None:
        enclosing_class = self.current_class
        self.current_class = CLASS_CLASS
        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self.error(stmt.superclass.name, "A class cannot inherit from itself")
            self.current_class = CLASS_SUBCLASS
            self.resolve_expr(stmt.superclass)
            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True
        for method in stmt.methods:
            kind = FN_INITIALIZER if method.name.lexeme == "init" else FN_METHOD
            self.resolve_function(method.params, method.body, kind)
        self.end_scope()

        if stmt.superclass is not None:
            self.end_scope()
        self.current_class = enclosing_class

    # ── Expressions ──────────────────────────────────────────

    def resolve_expr(self, expr: Expr) -> None:
        if isinstance(expr, Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self.error(
                    expr.name, "Cannot read local variable in its own initializer"
                )
            self.resolve_local(expr, expr.name.lexeme)
            return

        if isinstance(expr, Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name.lexeme)
            return

        if isinstance(expr, Literal):
            return

        if isinstance(expr, Grouping):
            self.resolve_expr(expr.expr)
            return

        if isinstance(expr, Unary):
            self.resolve_expr(expr.operand)
            return

        if isinstance(expr, (Binary, Logical)):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)
            return

        if isinstance(expr, Call):
            self.resolve_expr(expr.callee)
            for arg in expr.args:
                self.resolve_expr(arg)
            return

        if isinstance(expr, Get):
            self.resolve_expr(expr.obj)
            return

        if isinstance(expr, Set):
            self.resolve_expr(expr.value)
            self.resolve_expr(expr.obj)
            return

        if isinstance(expr, This):
            if self.current_class == CLASS_NONE:
                self.error(expr.keyword, "Cannot use 'this' outside of a class")
                return
            self.resolve_local(expr, "this")
            return

        if isinstance(expr, Super):
            if self.current_class == CLASS_NONE:
                self.error(expr.keyword, "Cannot use 'super' outside of a class")
            elif self.current_class != CLASS_SUBCLASS:
                self.error(
                    expr.keyword, "Cannot use 'super' in a class with no superclass"
                )
            self.resolve_local(expr, "super")
            return

        if isinstance(expr, FunctionExpr):
            self.resolve_function(expr.params, expr.body, FN_FUNCTION)
            return

        raise InternalError("unsupported expression " + type(expr).__name__)


def resolve(stmts: list[Stmt]) -> list[ResolveError]:
    """Annotate stmts in place. Returns resolution errors (empty = ok)."""
    resolver = Resolver()
    try:
        with recursion_limit(STATIC_EXTRA_FRAMES):
            resolver.resolve(stmts)
    except RecursionError:
        resolver.errors.append(ResolveError(NESTING_TOO_DEEP, 0, 0))
    logger.debug("resolved %d statements, %d errors", len(stmts), len(resolver.errors))
    return resolver.errors
