"""Rocks AST — expression and statement node definitions."""

from __future__ import annotations

from dataclasses import dataclass, field

from .tokens import Token


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(eq=False)
class Expr:
    """Base for all expressions."""


@dataclass(eq=False)
class Literal(Expr):
    """Number, string, boolean, or nil."""

    value: object


@dataclass(eq=False)
class Grouping(Expr):
    """( expr )."""

    expr: Expr


@dataclass(eq=False)
class Unary(Expr):
    """op operand, op in - !."""

    op: Token
    operand: Expr


@dataclass(eq=False)
class Binary(Expr):
    """left op right, arithmetic, comparison, and equality."""

    left: Expr
    op: Token
    right: Expr


@dataclass(eq=False)
class Logical(Expr):
    """left and/or right, short-circuiting."""

    left: Expr
    op: Token
    right: Expr


@dataclass(eq=False)
class Variable(Expr):
    """name. depth is set by the resolver; None means global."""

    name: Token
    depth: int | None = None


@dataclass(eq=False)
class Assign(Expr):
    """name = value."""

    name: Token
    value: Expr
    depth: int | None = None


@dataclass(eq=False)
class Call(Expr):
    """callee(args). paren is the closing parenthesis, used for positions."""

    callee: Expr
    paren: Token
    args: list[Expr]


@dataclass(eq=False)
class Get(Expr):
    """obj.name."""

    obj: Expr
    name: Token


@dataclass(eq=False)
class Set(Expr):
    """obj.name = value."""

    obj: Expr
    name: Token
    value: Expr


@dataclass(eq=False)
class This(Expr):
    keyword: Token
    depth: int | None = None


@dataclass(eq=False)
class Super(Expr):
    """super.method."""

    keyword: Token
    method: Token
    depth: int | None = None


@dataclass(eq=False)
class FunctionExpr(Expr):
    """Anonymous fun (params) { body }."""

    keyword: Token
    params: list[Token]
    body: list[Stmt]


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(eq=False)
class Stmt:
    """Base for all statements."""


@dataclass(eq=False)
class Expression(Stmt):
    expr: Expr


@dataclass(eq=False)
class Print(Stmt):
    keyword: Token
    expr: Expr


@dataclass(eq=False)
class Var(Stmt):
    """var name = initializer;"""

    name: Token
    initializer: Expr | None


@dataclass(eq=False)
class Block(Stmt):
    statements: list[Stmt]


@dataclass(eq=False)
class If(Stmt):
    cond: Expr
    then_branch: Stmt
    else_branch: Stmt | None


@dataclass(eq=False)
class While(Stmt):
    """while (cond) body. increment is run after every iteration of a desugared for."""

    cond: Expr
    body: Stmt
    increment: Expr | None = None


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
    methods: list[Function] = field(default_factory=list)


@dataclass(eq=False)
class Return(Stmt):
    keyword: Token
    value: Expr | None


@dataclass(eq=False)
class Break(Stmt):
    keyword: Token


@dataclass(eq=False)
class Continue(Stmt):
    keyword: Token


# ============================================================
# SCOPE RULE
# ============================================================


def opens_scope(stmt: Stmt) -> bool:
    """Whether entering stmt pushes a fresh lexical scope.

    Resolver and interpreter both consult this so their scope chains stay
    the same shape. Function and class scopes are opened by their callers.
    """
    return isinstance(stmt, Block)
