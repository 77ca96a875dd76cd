"""Rocks environments — one frame per lexical scope, chained outward."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .errors import InternalError, RocksRuntimeFault, at_token
from .tokens import Token

if TYPE_CHECKING:
    from .values import Value


def _undefined(name: Token) -> RocksRuntimeFault:
    return RocksRuntimeFault(
        "Undefined variable '" + name.lexeme + "'",
        name.line,
        name.col,
        at_token(name.lexeme, False),
    )


class Environment:
    """A frame mapping names to values, plus the frame that encloses it.

    Closures keep their defining frame alive by holding a reference to it;
    a frame nothing refers to is reclaimed with its enclosing links.
    """

    def __init__(self, enclosing: Environment | None = None):
        self.enclosing: Environment | None = enclosing
        self.values: dict[str, Value] = {}

    def define(self, name: str, value: Value) -> None:
        self.values[name] = value

    def ancestor(self, distance: int) -> Environment:
        env = self
        for hop in range(distance):
            if env.enclosing is None:
                raise InternalError(
                    "scope chain has depth "
                    + str(hop)
                    + ", resolver expected "
                    + str(distance)
                )
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> Value:
        frame = self.ancestor(distance).values
        if name not in frame:
            raise InternalError(
                "'" + name + "' not bound " + str(distance) + " scopes out"
            )
        return frame[name]

    def assign_at(self, distance: int, name: str, value: Value) -> None:
        frame = self.ancestor(distance).values
        if name not in frame:
            raise InternalError(
                "'" + name + "' not bound " + str(distance) + " scopes out"
            )
        frame[name] = value

    def get(self, name: Token) -> Value:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise _undefined(name)

    def assign(self, name: Token, value: Value) -> None:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise _undefined(name)

