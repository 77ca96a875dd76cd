"""Rocks interpreter — public API."""

from __future__ import annotations

import logging
from typing import TextIO

from .ast import Stmt
from .errors import (
    Diagnostic as Diagnostic,
    InternalError as InternalError,
    ParseError as ParseError,
    ResolveError as ResolveError,
    RocksError as RocksError,
    RocksRuntimeFault as RocksRuntimeFault,
    ScanError as ScanError,
)
from .parse import parse_tokens
from .printer import to_source
from .resolve import resolve as resolve_stmts
from .runtime import DEFAULT_MAX_CALL_DEPTH, Interpreter
from .tokens import Token, tokenize

logger = logging.getLogger(__name__)


def scan(source: str) -> tuple[list[Token], list[Diagnostic]]:
    """Scan source. Returns tokens (ending with EOF) and lexical diagnostics."""
    tokens, errors = tokenize(source)
    return tokens, [e.to_diagnostic() for e in errors]


def parse(source: str) -> tuple[list[Stmt], list[Diagnostic]]:
    """Scan and parse source. Returns statements and all lexical and syntactic diagnostics."""
    tokens, diagnostics = scan(source)
    stmts, errors = parse_tokens(tokens)
    return stmts, diagnostics + [e.to_diagnostic() for e in errors]


def resolve(stmts: list[Stmt]) -> list[Diagnostic]:
    """Annotate stmts with scope distances. Returns resolution diagnostics."""
    return [e.to_diagnostic() for e in resolve_stmts(stmts)]


def emit(source: str) -> str:
    """Parse source and render it in parenthesized form."""
    stmts, _ = parse(source)
    return to_source(stmts)


class Rocks:
    """An interpreter session. Globals persist across calls to run()."""

    def __init__(
        self,
        *,
        out: TextIO | None = None,
        stdin: TextIO | None = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
    ):
        self.interpreter = Interpreter(
            out=out, stdin=stdin, max_call_depth=max_call_depth
        )

    def run(self, source: str) -> list[Diagnostic]:
        """Run source through every stage. Returns diagnostics (empty = ok).

        Resolution is skipped when scanning or parsing failed, and
        interpretation is skipped when resolution failed.
        """
        stmts, diagnostics = parse(source)
        if diagnostics:
            logger.debug("stopping after parse: %d diagnostics", len(diagnostics))
            return diagnostics
        diagnostics = resolve(stmts)
        if diagnostics:
            logger.debug("stopping after resolve: %d diagnostics", len(diagnostics))
            return diagnostics
        fault = self.interpreter.interpret(stmts)
        if fault is not None:
            return [fault.to_diagnostic()]
        return []


def run(
    source: str,
    *,
    out: TextIO | None = None,
    stdin: TextIO | None = None,
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
) -> list[Diagnostic]:
    """Run source in a fresh session. Returns diagnostics (empty = ok)."""
    return Rocks(out=out, stdin=stdin, max_call_depth=max_call_depth).run(source)
