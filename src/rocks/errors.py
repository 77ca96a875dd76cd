"""Rocks diagnostics — one error class per pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass


STAGE_LEXICAL = "lexical"
STAGE_SYNTACTIC = "syntactic"
STAGE_RESOLUTION = "resolution"
STAGE_RUNTIME = "runtime"


@dataclass(frozen=True)
class Diagnostic:
    """A located, classified problem reported to the driver."""

    stage: str
    message: str
    line: int
    column: int
    where: str = ""

    def __str__(self) -> str:
        return (
            "[line "
            + str(self.line)
            + ":"
            + str(self.column)
            + "] Error"
            + self.where
            + ": "
            + self.message
        )


class RocksError(Exception):
    """Base error for all user-facing Rocks diagnostics."""

    stage: str = ""

    def __init__(self, msg: str, line: int, col: int, where: str = ""):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        self.where: str = where
        super().__init__(msg + " at line " + str(line) + " col " + str(col))

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(self.stage, self.msg, self.line, self.col, self.where)


class ScanError(RocksError):
    """Unterminated literal or unexpected character."""

    stage = STAGE_LEXICAL


class ParseError(RocksError):
    """Grammar violation."""

    stage = STAGE_SYNTACTIC


class ResolveError(RocksError):
    """Statically detectable scoping mistake."""

    stage = STAGE_RESOLUTION


class RocksRuntimeFault(RocksError):
    """Type mismatch, undefined name, bad call, or stack exhaustion."""

    stage = STAGE_RUNTIME


class InternalError(Exception):
    """Resolver and interpreter disagree about scopes. Always a bug."""


def at_token(lexeme: str, is_eof: bool) -> str:
    """Render the ' at ...' fragment of a diagnostic for a token."""
    if is_eof:
        return " at end"
    return " at '" + lexeme + "'"
