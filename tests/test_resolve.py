"""Resolver tests: scope distances and static errors."""

from rocks import parse, resolve
from rocks.errors import STAGE_RESOLUTION
from rocks.resolve import Resolver


def resolved(source: str):
    stmts, diagnostics = parse(source)
    assert diagnostics == []
    return stmts, resolve(stmts)


def messages(source: str) -> list[str]:
    _, diagnostics = resolved(source)
    return [d.message for d in diagnostics]


def test_globals_stay_unannotated():
    stmts, diagnostics = resolved("var a = 1; print a;")
    assert diagnostics == []
    assert stmts[1].expr.depth is None


def test_local_in_same_block():
    stmts, _ = resolved("{ var a = 1; print a; }")
    assert stmts[0].statements[1].expr.depth == 0


def test_local_in_enclosing_block():
    stmts, _ = resolved("{ var a = 1; { print a; } }")
    inner = stmts[0].statements[1]
    assert inner.statements[0].expr.depth == 1


def test_assignment_depth():
    stmts, _ = resolved("{ var a; { a = 2; } }")
    assign = stmts[0].statements[1].statements[0].expr
    assert assign.depth == 1


def test_closure_depth_counts_function_scopes():
    stmts, _ = resolved("fun f() { var x = 1; fun g() { return x; } }")
    g = stmts[0].body[1]
    assert g.body[0].value.depth == 1


def test_parameters_live_in_function_scope():
    stmts, _ = resolved("fun f(a) { return a; }")
    assert stmts[0].body[0].value.depth == 0


def test_this_is_one_scope_outside_method():
    stmts, _ = resolved("class A { m() { return this; } }")
    ret = stmts[0].methods[0].body[0]
    assert ret.value.depth == 1


def test_super_is_two_scopes_outside_method():
    stmts, _ = resolved("class A {} class B < A { m() { return super.m; } }")
    ret = stmts[1].methods[0].body[0]
    assert ret.value.depth == 2


def test_for_loop_variable_is_local():
    stmts, _ = resolved("for (var i = 0; i < 2; i = i + 1) print i;")
    loop = stmts[0].statements[1]
    assert loop.cond.left.depth == 0
    assert loop.increment.depth == 0
    assert loop.body.expr.depth == 0


def test_duplicate_local():
    assert messages("{ var a; var a; }") == [
        "A variable is already defined with name 'a' in this scope"
    ]


def test_duplicate_global_allowed():
    assert messages("var a; var a;") == []


def test_own_initializer():
    assert messages("{ var a = a; }") == [
        "Cannot read local variable in its own initializer"
    ]


def test_top_level_return():
    assert messages("return;") == ["Cannot return from top-level code"]


def test_return_value_from_initializer():
    assert messages("class A { init() { return 1; } }") == [
        "Cannot return a value from an initializer"
    ]


def test_bare_return_in_initializer_allowed():
    assert messages("class A { init() { return; } }") == []


def test_this_outside_class():
    assert messages("fun f() { return this; }") == [
        "Cannot use 'this' outside of a class"
    ]


def test_super_errors():
    assert messages("super.x;") == ["Cannot use 'super' outside of a class"]
    assert messages("class A { m() { super.m(); } }") == [
        "Cannot use 'super' in a class with no superclass"
    ]


def test_self_inheritance():
    assert messages("class A < A {}") == ["A class cannot inherit from itself"]


def test_loop_control_outside_loop():
    assert messages("break;") == ["Cannot break outside of a loop"]
    assert messages("continue;") == ["Cannot continue outside of a loop"]
    assert messages("while (true) { fun f() { continue; } }") == [
        "Cannot continue outside of a loop"
    ]
    assert messages("while (true) { if (true) break; }") == []


def test_errors_accumulate_with_positions():
    _, diagnostics = resolved("return;\n{ var a; var a; }")
    assert [d.stage for d in diagnostics] == [STAGE_RESOLUTION, STAGE_RESOLUTION]
    assert [(d.line, d.column) for d in diagnostics] == [(1, 1), (2, 14)]
    assert diagnostics[1].where == " at 'a'"


def test_resolver_instance_collects_errors():
    stmts, _ = parse("break;")
    resolver = Resolver()
    resolver.resolve(stmts)
    assert len(resolver.errors) == 1
    assert str(resolver.errors[0]) == "Cannot break outside of a loop at line 1 col 1"


def test_long_chain_resolves():
    stmts, diagnostics = resolved("{ var a = 1; print " + " + ".join(["a"] * 1500) + "; }")
    assert diagnostics == []
    expr = stmts[0].statements[1].expr
    while hasattr(expr, "left"):
        assert expr.right.depth == 0
        expr = expr.left
    assert expr.depth == 0


def test_chain_too_deep_to_resolve():
    stmts, diagnostics = resolved("print " + " + ".join(["1"] * 30000) + ";")
    assert [(d.stage, d.message) for d in diagnostics] == [
        (STAGE_RESOLUTION, "Expression nesting too deep")
    ]
