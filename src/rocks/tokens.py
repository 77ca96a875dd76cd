"""Rocks scanner — lazily lexes source into tokens, collecting lexical errors."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterator

from .errors import ScanError

logger = logging.getLogger(__name__)


# Token type constants
TK_NUMBER = "NUMBER"
TK_STRING = "STRING"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_EOF = "EOF"

KEYWORDS: set[str] = {
    "and",
    "break",
    "class",
    "continue",
    "else",
    "false",
    "for",
    "fun",
    "if",
    "nil",
    "or",
    "print",
    "return",
    "super",
    "this",
    "true",
    "var",
    "while",
}

# Two-character operators; each starts with a character that is also an operator
MULTI_OPS: list[str] = ["!=", "==", "<=", ">="]

SINGLE_OPS: set[str] = {
    "(",
    ")",
    "{",
    "}",
    ",",
    ".",
    "-",
    "+",
    ";",
    "/",
    "*",
    "!",
    "=",
    "<",
    ">",
}


@dataclass(frozen=True)
class Token:
    """A token with type, lexeme, position, and literal value."""

    type: str
    lexeme: str
    line: int
    col: int
    literal: object = field(default=None, compare=False)

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.lexeme)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return c.isalpha() or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


class Scanner:
    """Single-pass scanner over a source string.

    Iterating a scanner (re)starts from the first character, so the same
    instance can be walked more than once. Errors from the most recent walk
    are kept in `errors`; a bad character never stops the walk.
    """

    def __init__(self, source: str):
        self.source: str = source
        self.errors: list[ScanError] = []
        self._pos: int = 0
        self._line: int = 1
        self._col: int = 1

    def reset(self) -> None:
        self.errors = []
        self._pos = 0
        self._line = 1
        self._col = 1

    def __iter__(self) -> Iterator[Token]:
        self.reset()
        return self._scan()

    # ── Character helpers ────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx >= len(self.source):
            return ""
        return self.source[idx]

    def _advance(self) -> str:
        c = self.source[self._pos]
        self._pos += 1
        if c == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return c

    def _error(self, msg: str, line: int, col: int) -> None:
        self.errors.append(ScanError(msg, line, col))

    # ── Main loop ────────────────────────────────────────────

    def _scan(self) -> Iterator[Token]:
        source = self.source
        length = len(source)
        count = 0

        while self._pos < length:
            c = source[self._pos]

            # Whitespace
            if c == " " or c == "\t" or c == "\r" or c == "\n":
                self._advance()
                continue

            # Line comment: //
            if c == "/" and self._peek(1) == "/":
                while self._pos < length and source[self._pos] != "\n":
                    self._advance()
                continue

            start_pos = self._pos
            start_line = self._line
            start_col = self._col

            # Block comment: /* ... */
            if c == "/" and self._peek(1) == "*":
                self._advance()
                self._advance()
                closed = False
                while self._pos < length:
                    if source[self._pos] == "*" and self._peek(1) == "/":
                        self._advance()
                        self._advance()
                        closed = True
                        break
                    self._advance()
                if not closed:
                    self._error("Unterminated block comment", start_line, start_col)
                continue

            # Number: digits ( "." digits )?
            if _is_digit(c):
                while self._pos < length and _is_digit(source[self._pos]):
                    self._advance()
                if self._peek() == ".":
                    if _is_digit(self._peek(1)):
                        self._advance()
                        while self._pos < length and _is_digit(source[self._pos]):
                            self._advance()
                    else:
                        self._error("Unterminated number", start_line, start_col)
                raw = source[start_pos : self._pos]
                count += 1
                yield Token(TK_NUMBER, raw, start_line, start_col, float(raw))
                continue

            # String literal: "...", may span lines
            if c == '"':
                self._advance()
                while self._pos < length and source[self._pos] != '"':
                    self._advance()
                if self._pos >= length:
                    self._error("Unterminated string", start_line, start_col)
                    continue
                self._advance()  # skip closing "
                raw = source[start_pos : self._pos]
                count += 1
                yield Token(TK_STRING, raw, start_line, start_col, raw[1:-1])
                continue

            # Identifier or keyword
            if _is_alpha(c):
                while self._pos < length and _is_alnum(source[self._pos]):
                    self._advance()
                word = source[start_pos : self._pos]
                count += 1
                if word in KEYWORDS:
                    literal: object = None
                    if word == "true":
                        literal = True
                    elif word == "false":
                        literal = False
                    yield Token(word, word, start_line, start_col, literal)
                else:
                    yield Token(TK_IDENT, word, start_line, start_col)
                continue

            # Two-character operators
            pair = source[self._pos : self._pos + 2]
            if pair in MULTI_OPS:
                self._advance()
                self._advance()
                count += 1
                yield Token(TK_OP, pair, start_line, start_col)
                continue

            # Single-character operators
            if c in SINGLE_OPS:
                self._advance()
                count += 1
                yield Token(TK_OP, c, start_line, start_col)
                continue

            self._advance()
            self._error("Unexpected character '" + c + "'", start_line, start_col)

        logger.debug("scanned %d tokens, %d errors", count, len(self.errors))
        yield Token(TK_EOF, "", self._line, self._col)


def tokenize(source: str) -> tuple[list[Token], list[ScanError]]:
    """Scan all of source. Returns the tokens (ending with TK_EOF) and errors."""
    scanner = Scanner(source)
    tokens = list(scanner)
    return tokens, scanner.errors
