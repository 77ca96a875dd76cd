"""Rocks AST printer — parenthesized prefix form for debugging."""

from __future__ import annotations

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
)
from .errors import InternalError
from .limits import NESTING_TOO_DEEP, STATIC_EXTRA_FRAMES, recursion_limit
from .tokens import Token
from .values import format_number


def _paren(name: str, *parts: str) -> str:
    if not parts:
        return "(" + name + ")"
    return "(" + name + " " + " ".join(parts) + ")"


def _params(params: list[Token]) -> str:
    return "(" + " ".join(p.lexeme for p in params) + ")"


def _literal(value: object) -> str:
    if value is None:
        return "nil"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return '"' + value + '"'
    raise InternalError("not a literal: " + repr(value))


def print_expr(expr: Expr) -> str:
    if isinstance(expr, Literal):
        return _literal(expr.value)
    if isinstance(expr, Grouping):
        return _paren("group", print_expr(expr.expr))
    if isinstance(expr, Unary):
        return _paren(expr.op.lexeme, print_expr(expr.operand))
    if isinstance(expr, (Binary, Logical)):
        return _paren(expr.op.lexeme, print_expr(expr.left), print_expr(expr.right))
    if isinstance(expr, Variable):
        return expr.name.lexeme
    if isinstance(expr, Assign):
        return _paren("=", expr.name.lexeme, print_expr(expr.value))
    if isinstance(expr, Call):
        return _paren("call", print_expr(expr.callee), *[print_expr(a) for a in expr.args])
    if isinstance(expr, Get):
        return _paren(".", print_expr(expr.obj), expr.name.lexeme)
    if isinstance(expr, Set):
        return _paren(
            "=", _paren(".", print_expr(expr.obj), expr.name.lexeme), print_expr(expr.value)
        )
    if isinstance(expr, This):
        return "this"
    if isinstance(expr, Super):
        return _paren("super", expr.method.lexeme)
    if isinstance(expr, FunctionExpr):
        return _paren("fun", _params(expr.params), *[print_stmt(s) for s in expr.body])
    raise InternalError("unsupported expression " + type(expr).__name__)


def print_stmt(stmt: Stmt) -> str:
    if isinstance(stmt, Expression):
        return _paren(";", print_expr(stmt.expr))
    if isinstance(stmt, Print):
        return _paren("print", print_expr(stmt.expr))
    if isinstance(stmt, Var):
        if stmt.initializer is None:
            return _paren("var", stmt.name.lexeme)
        return _paren("var", stmt.name.lexeme, print_expr(stmt.initializer))
    if isinstance(stmt, Block):
        return _paren("block", *[print_stmt(s) for s in stmt.statements])
    if isinstance(stmt, If):
        if stmt.else_branch is None:
            return _paren("if", print_expr(stmt.cond), print_stmt(stmt.then_branch))
        return _paren(
            "if-else",
            print_expr(stmt.cond),
            print_stmt(stmt.then_branch),
            print_stmt(stmt.else_branch),
        )
    if isinstance(stmt, While):
        parts = [print_expr(stmt.cond), print_stmt(stmt.body)]
        if stmt.increment is not None:
            parts.append(print_expr(stmt.increment))
        return _paren("while", *parts)
    if isinstance(stmt, Function):
        return _paren(
            "fun", stmt.name.lexeme, _params(stmt.params), *[print_stmt(s) for s in stmt.body]
        )
    if isinstance(stmt, Class):
        parts = [stmt.name.lexeme]
        if stmt.superclass is not None:
            parts.append("< " + stmt.superclass.name.lexeme)
        parts.extend(print_stmt(m) for m in stmt.methods)
        return _paren("class", *parts)
    if isinstance(stmt, Return):
        if stmt.value is None:
            return _paren("return")
        return _paren("return", print_expr(stmt.value))
    if isinstance(stmt, Break):
        return "(break)"
    if isinstance(stmt, Continue):
        return "(continue)"
    raise InternalError("unsupported statement " + type(stmt).__name__)


def to_source(stmts: list[Stmt]) -> str:
    """One parenthesized line per top-level statement."""
    lines: list[str] = []
    with recursion_limit(STATIC_EXTRA_FRAMES):
        for stmt in stmts:
            try:
                lines.append(print_stmt(stmt))
            except RecursionError:
                lines.append(_paren("error", '"' + NESTING_TOO_DEEP + '"'))
    return "".join(line + "\n" for line in lines)
