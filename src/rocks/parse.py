"""Rocks parser — recursive descent, one method per grammar production."""

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
)
from .errors import ParseError, at_token
from .limits import NESTING_TOO_DEEP, STATIC_EXTRA_FRAMES, recursion_limit
from .tokens import TK_EOF, TK_IDENT, TK_NUMBER, TK_STRING, Token

logger = logging.getLogger(__name__)

MAX_ARGS = 255

EQUALITY_OPS: set[str] = {"==", "!="}
COMPARE_OPS: set[str] = {">", ">=", "<", "<="}
TERM_OPS: set[str] = {"-", "+"}
FACTOR_OPS: set[str] = {"/", "*"}

# Keywords that begin a statement; synchronization stops in front of them.
STATEMENT_KEYWORDS: set[str] = {
    "class",
    "fun",
    "var",
    "for",
    "if",
    "while",
    "print",
    "return",
    "break",
    "continue",
}


class Parser:
    """Recursive descent parser for Rocks.

    Syntax errors do not stop the parse: each one is recorded in `errors`
    and the parser skips ahead to the next statement boundary.
    """

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0
        self.errors: list[ParseError] = []

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, lexeme: str) -> bool:
        return self.current().lexeme == lexeme

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def at_end(self) -> bool:
        return self.current().type == TK_EOF

    def match(self, *lexemes: str) -> bool:
        for lexeme in lexemes:
            if self.at(lexeme):
                self.advance()
                return True
        return False

    def expect(self, lexeme: str, msg: str) -> Token:
        if self.at(lexeme):
            return self.advance()
        raise self.error(self.current(), msg)

    def expect_ident(self, msg: str) -> Token:
        if self.at_type(TK_IDENT):
            return self.advance()
        raise self.error(self.current(), msg)

    def error(self, tok: Token, msg: str) -> ParseError:
        where = at_token(tok.lexeme, tok.type == TK_EOF)
        return ParseError(msg, tok.line, tok.col, where)

    def report(self, tok: Token, msg: str) -> None:
        """Record an error that needs no recovery."""
        self.errors.append(self.error(tok, msg))

    def synchronize(self) -> None:
        self.advance()
        while not self.at_end():
            if self.previous().lexeme == ";":
                return
            tok = self.current()
            if tok.type in STATEMENT_KEYWORDS:
                return
            self.advance()

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> list[Stmt]:
        stmts: list[Stmt] = []
        while not self.at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                stmts.append(stmt)
        logger.debug("parsed %d statements, %d errors", len(stmts), len(self.errors))
        return stmts

    def parse_declaration(self) -> Stmt | None:
        try:
            if self.at("class"):
                return self.parse_class_decl()
            if self.at("fun") and self.peek(1).type == TK_IDENT:
                self.advance()
                return self.parse_function("function")
            if self.at("var"):
                return self.parse_var_decl()
            return self.parse_statement()
        except ParseError as e:
            self.errors.append(e)
            self.synchronize()
            return None
        except RecursionError:
            self.report(self.current(), NESTING_TOO_DEEP)
            self.synchronize()
            return None

    def parse_class_decl(self) -> Class:
        self.expect("class", "Expected 'class'")
        name = self.expect_ident("Expected class name")
        superclass: Variable | None = None
        if self.match("<"):
            superclass = Variable(self.expect_ident("Expected superclass name"))
        self.expect("{", "Expected '{' before class body")
        methods: list[Function] = []
        while not self.at("}") and not self.at_end():
            methods.append(self.parse_function("method"))
        self.expect("}", "Expected '}' after class body")
        return Class(name, superclass, methods)

    def parse_function(self, kind: str) -> Function:
        name = self.expect_ident("Expected " + kind + " name")
        self.expect("(", "Expected '(' after " + kind + " name")
        params = self.parse_params()
        self.expect("{", "Expected '{' before " + kind + " body")
        body = self.parse_block()
        return Function(name, params, body)

    def parse_params(self) -> list[Token]:
        """Parameter list after '(' through the closing ')'."""
        params: list[Token] = []
        if not self.at(")"):
            params.append(self.expect_ident("Expected parameter name"))
            while self.match(","):
                if len(params) >= MAX_ARGS:
                    self.report(self.current(), "Cannot have more than 255 parameters")
                params.append(self.expect_ident("Expected parameter name"))
        self.expect(")", "Expected ')' after parameters")
        return params

    def parse_var_decl(self) -> Var:
        self.expect("var", "Expected 'var'")
        name = self.expect_ident("Expected variable name")
        initializer: Expr | None = None
        if self.match("="):
            initializer = self.parse_expression()
        self.expect(";", "Expected ';' after variable declaration")
        return Var(name, initializer)

    # ── Statements ───────────────────────────────────────────

    def parse_statement(self) -> Stmt:
        if self.at("for"):
            return self.parse_for()
        if self.at("if"):
            return self.parse_if()
        if self.at("print"):
            keyword = self.advance()
            value = self.parse_expression()
            self.expect(";", "Expected ';' after value")
            return Print(keyword, value)
        if self.at("return"):
            return self.parse_return()
        if self.at("while"):
            self.advance()
            self.expect("(", "Expected '(' after 'while'")
            cond = self.parse_expression()
            self.expect(")", "Expected ')' after condition")
            return While(cond, self.parse_statement())
        if self.at("break"):
            keyword = self.advance()
            self.expect(";", "Expected ';' after 'break'")
            return Break(keyword)
        if self.at("continue"):
            keyword = self.advance()
            self.expect(";", "Expected ';' after 'continue'")
            return Continue(keyword)
        if self.at("{"):
            self.advance()
            return Block(self.parse_block())
        expr = self.parse_expression()
        self.expect(";", "Expected ';' after expression")
        return Expression(expr)

    def parse_block(self) -> list[Stmt]:
        """Declarations after '{' through the closing '}'."""
        stmts: list[Stmt] = []
        while not self.at("}") and not self.at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                stmts.append(stmt)
        self.expect("}", "Expected '}' after block")
        return stmts

    def parse_if(self) -> If:
        self.expect("if", "Expected 'if'")
        self.expect("(", "Expected '(' after 'if'")
        cond = self.parse_expression()
        self.expect(")", "Expected ')' after if condition")
        then_branch = self.parse_statement()
        else_branch: Stmt | None = None
        if self.match("else"):
            else_branch = self.parse_statement()
        return If(cond, then_branch, else_branch)

    def parse_for(self) -> Stmt:
        """Desugar for (init; cond; incr) body into a block holding a while."""
        keyword = self.expect("for", "Expected 'for'")
        self.expect("(", "Expected '(' after 'for'")
        init: Stmt | None
        if self.match(";"):
            init = None
        elif self.at("var"):
            init = self.parse_var_decl()
        else:
            expr = self.parse_expression()
            self.expect(";", "Expected ';' after loop initializer")
            init = Expression(expr)

        cond: Expr = Literal(True)
        if not self.at(";"):
            cond = self.parse_expression()
        self.expect(";", "Expected ';' after loop condition")

        increment: Expr | None = None
        if not self.at(")"):
            increment = self.parse_expression()
        self.expect(")", "Expected ')' after for clauses")

        body = self.parse_statement()
        loop = While(cond, body, increment)
        logger.debug("desugared for loop at line %d", keyword.line)
        if init is None:
            return Block([loop])
        return Block([init, loop])

    def parse_return(self) -> Return:
        keyword = self.expect("return", "Expected 'return'")
        value: Expr | None = None
        if not self.at(";"):
            value = self.parse_expression()
        self.expect(";", "Expected ';' after return value")
        return Return(keyword, value)

    # ── Expressions ──────────────────────────────────────────

    def parse_expression(self) -> Expr:
        return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        expr = self.parse_or()
        if self.at("="):
            equals = self.advance()
            value = self.parse_assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.obj, expr.name, value)
            self.report(equals, "Invalid assignment target")
        return expr

    def parse_or(self) -> Expr:
        expr = self.parse_and()
        while self.at("or"):
            op = self.advance()
            expr = Logical(expr, op, self.parse_and())
        return expr

    def parse_and(self) -> Expr:
        expr = self.parse_equality()
        while self.at("and"):
            op = self.advance()
            expr = Logical(expr, op, self.parse_equality())
        return expr

    def _parse_binary_level(self, ops: set[str], operand) -> Expr:
        """Left-associative loop shared by the binary precedence levels."""
        expr = operand()
        while self.current().lexeme in ops:
            op = self.advance()
            expr = Binary(expr, op, operand())
        return expr

    def parse_equality(self) -> Expr:
        return self._parse_binary_level(EQUALITY_OPS, self.parse_comparison)

    def parse_comparison(self) -> Expr:
        return self._parse_binary_level(COMPARE_OPS, self.parse_term)

    def parse_term(self) -> Expr:
        return self._parse_binary_level(TERM_OPS, self.parse_factor)

    def parse_factor(self) -> Expr:
        return self._parse_binary_level(FACTOR_OPS, self.parse_unary)

    def parse_unary(self) -> Expr:
        if self.at("!") or self.at("-"):
            op = self.advance()
            return Unary(op, self.parse_unary())
        return self.parse_call()

    def parse_call(self) -> Expr:
        expr = self.parse_primary()
        while True:
            if self.match("("):
                expr = self.finish_call(expr)
            elif self.match("."):
                name = self.expect_ident("Expected property name after '.'")
                expr = Get(expr, name)
            else:
                return expr

    def finish_call(self, callee: Expr) -> Call:
        args: list[Expr] = []
        if not self.at(")"):
            args.append(self.parse_expression())
            while self.match(","):
                if len(args) >= MAX_ARGS:
                    self.report(self.current(), "Cannot have more than 255 arguments")
                args.append(self.parse_expression())
        paren = self.expect(")", "Expected ')' after arguments")
        return Call(callee, paren, args)

    def parse_primary(self) -> Expr:
        tok = self.current()
        if tok.type == TK_NUMBER or tok.type == TK_STRING:
            self.advance()
            return Literal(tok.literal)
        if tok.type == "true":
            self.advance()
            return Literal(True)
        if tok.type == "false":
            self.advance()
            return Literal(False)
        if tok.type == "nil":
            self.advance()
            return Literal(None)
        if tok.type == "this":
            self.advance()
            return This(tok)
        if tok.type == "super":
            self.advance()
            self.expect(".", "Expected '.' after 'super'")
            method = self.expect_ident("Expected superclass method name")
            return Super(tok, method)
        if tok.type == "fun":
            self.advance()
            self.expect("(", "Expected '(' after 'fun'")
            params = self.parse_params()
            self.expect("{", "Expected '{' before function body")
            return FunctionExpr(tok, params, self.parse_block())
        if tok.type == TK_IDENT:
            self.advance()
            return Variable(tok)
        if self.at("("):
            self.advance()
            expr = self.parse_expression()
            self.expect(")", "Expected ')' after expression")
            return Grouping(expr)
        raise self.error(tok, "Expected expression")


def parse_tokens(tokens: list[Token]) -> tuple[list[Stmt], list[ParseError]]:
    """Parse a token list. Returns the statements that parsed and all errors."""
    parser = Parser(tokens)
    with recursion_limit(STATIC_EXTRA_FRAMES):
        stmts = parser.parse_program()
    return stmts, parser.errors
