"""Environment chain tests."""

import pytest

from rocks.environment import Environment
from rocks.errors import InternalError, RocksRuntimeFault
from rocks.tokens import TK_IDENT, Token
from rocks.values import VNumber, VString


def ident(name: str) -> Token:
    return Token(TK_IDENT, name, 3, 7)


def test_define_and_get():
    env = Environment()
    env.define("a", VNumber(1.0))
    assert env.get(ident("a")) == VNumber(1.0)


def test_redefine_overwrites():
    env = Environment()
    env.define("a", VNumber(1.0))
    env.define("a", VString("x"))
    assert env.get(ident("a")) == VString("x")


def test_get_walks_enclosing_frames():
    outer = Environment()
    outer.define("a", VNumber(1.0))
    inner = Environment(Environment(outer))
    assert inner.get(ident("a")) == VNumber(1.0)
    assert inner.ancestor(2) is outer


def test_assign_updates_defining_frame():
    outer = Environment()
    outer.define("a", VNumber(1.0))
    inner = Environment(outer)
    inner.assign(ident("a"), VNumber(2.0))
    assert outer.values["a"] == VNumber(2.0)
    assert "a" not in inner.values


def test_undefined_variable():
    env = Environment(Environment())
    with pytest.raises(RocksRuntimeFault) as exc:
        env.get(ident("nope"))
    assert exc.value.msg == "Undefined variable 'nope'"
    assert (exc.value.line, exc.value.col) == (3, 7)
    with pytest.raises(RocksRuntimeFault):
        env.assign(ident("nope"), VNumber(1.0))


def test_get_at_and_assign_at():
    outer = Environment()
    outer.define("a", VNumber(1.0))
    middle = Environment(outer)
    middle.define("a", VNumber(2.0))
    inner = Environment(middle)
    assert inner.get_at(1, "a") == VNumber(2.0)
    assert inner.get_at(2, "a") == VNumber(1.0)
    inner.assign_at(2, "a", VNumber(3.0))
    assert outer.values["a"] == VNumber(3.0)
    assert inner.ancestor(0) is inner
    assert inner.ancestor(2) is outer


def test_distance_past_the_chain_is_internal_error():
    env = Environment(Environment())
    with pytest.raises(InternalError):
        env.get_at(5, "a")


def test_missing_name_at_distance_is_internal_error():
    env = Environment(Environment())
    with pytest.raises(InternalError):
        env.get_at(1, "a")
    with pytest.raises(InternalError):
        env.assign_at(0, "a", VNumber(1.0))
