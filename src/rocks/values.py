"""Rocks runtime values — the Object variants and callables."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import TYPE_CHECKING, Callable

from .environment import Environment
from .errors import RocksRuntimeFault, at_token
from .tokens import Token

if TYPE_CHECKING:
    from .ast import Stmt
    from .runtime import Interpreter


# ============================================================
# Values
# ============================================================


class Value:
    """A runtime value."""

    def type_name(self) -> str:
        raise NotImplementedError

    def to_string(self) -> str:
        raise NotImplementedError

    def is_truthy(self) -> bool:
        return True


@dataclass(eq=False)
class VNil(Value):
    def type_name(self) -> str:
        return "nil"

    def to_string(self) -> str:
        return "nil"

    def is_truthy(self) -> bool:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, VNil)

    def __hash__(self) -> int:
        return hash("nil")


NIL = VNil()


@dataclass(eq=False)
class VBool(Value):
    value: bool

    def type_name(self) -> str:
        return "boolean"

    def to_string(self) -> str:
        return "true" if self.value else "false"

    def is_truthy(self) -> bool:
        return self.value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, VBool) and self.value == other.value

    def __hash__(self) -> int:
        return hash(("bool", self.value))


@dataclass(eq=False)
class VNumber(Value):
    value: float

    def type_name(self) -> str:
        return "number"

    def to_string(self) -> str:
        return format_number(self.value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, VNumber) and self.value == other.value

    def __hash__(self) -> int:
        return hash(("number", self.value))


@dataclass(eq=False)
class VString(Value):
    value: str

    def type_name(self) -> str:
        return "string"

    def to_string(self) -> str:
        return self.value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, VString) and self.value == other.value

    def __hash__(self) -> int:
        return hash(("string", self.value))


def format_number(value: float) -> str:
    """Integral numbers print without a fractional part."""
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        if value == 0 and math.copysign(1.0, value) < 0:
            return "-0"
        return str(int(value))
    return repr(value)


def from_literal(value: object) -> Value:
    """Wrap a scanner literal (float, str, bool, or None)."""
    if value is None:
        return NIL
    if isinstance(value, bool):
        return VBool(value)
    if isinstance(value, float):
        return VNumber(value)
    if isinstance(value, str):
        return VString(value)
    raise TypeError("not a literal: " + repr(value))


def values_equal(a: Value, b: Value) -> bool:
    """Equality across all variants; different variants are never equal."""
    if isinstance(a, (VNil, VBool, VNumber, VString)):
        return a == b
    return a is b


# ============================================================
# Callables
# ============================================================


class VCallable(Value):
    """Anything that can appear before an argument list."""

    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        raise NotImplementedError


@dataclass(eq=False)
class VNative(VCallable):
    name: str
    n_params: int
    fn: Callable[[Interpreter, list[Value]], Value]

    def type_name(self) -> str:
        return "native function"

    def to_string(self) -> str:
        return "<native fn " + self.name + ">"

    def arity(self) -> int:
        return self.n_params

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        return self.fn(interpreter, args)


@dataclass(eq=False)
class VFunction(VCallable):
    """A user function closed over the environment it was defined in."""

    name: str | None
    params: list[Token]
    body: list[Stmt]
    closure: Environment
    is_initializer: bool = False

    def type_name(self) -> str:
        return "function"

    def to_string(self) -> str:
        if self.name is None:
            return "<fn>"
        return "<fn " + self.name + ">"

    def arity(self) -> int:
        return len(self.params)

    def bind(self, instance: VInstance) -> VFunction:
        env = Environment(self.closure)
        env.define("this", instance)
        return VFunction(self.name, self.params, self.body, env, self.is_initializer)

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        env = Environment(self.closure)
        for i, param in enumerate(self.params):
            env.define(param.lexeme, args[i])
        result = interpreter.execute_body(self.body, env)
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if result is None:
            return NIL
        return result


@dataclass(eq=False)
class VClass(VCallable):
    name: str
    superclass: VClass | None
    methods: dict[str, VFunction] = field(default_factory=dict)

    def type_name(self) -> str:
        return "class"

    def to_string(self) -> str:
        return "<class " + self.name + ">"

    def find_method(self, name: str) -> VFunction | None:
        cls: VClass | None = self
        while cls is not None:
            if name in cls.methods:
                return cls.methods[name]
            cls = cls.superclass
        return None

    def arity(self) -> int:
        init = self.find_method("init")
        if init is None:
            return 0
        return init.arity()

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        instance = VInstance(self)
        init = self.find_method("init")
        if init is not None:
            init.bind(instance).call(interpreter, args)
        return instance


@dataclass(eq=False)
class VInstance(Value):
    cls: VClass
    fields: dict[str, Value] = field(default_factory=dict)

    def type_name(self) -> str:
        return "instance"

    def to_string(self) -> str:
        return "<instance " + self.cls.name + ">"

    def get(self, name: Token) -> Value:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.cls.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise RocksRuntimeFault(
            "Undefined property '" + name.lexeme + "'",
            name.line,
            name.col,
            at_token(name.lexeme, False),
        )

    def set(self, name: Token, value: Value) -> None:
        self.fields[name.lexeme] = value
