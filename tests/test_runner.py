"""Program tests for Rocks.

Test cases live in programs/*.tests files. Format:

    === test name
    source lines
    ---
    expected stdout lines
    error: substring of an expected diagnostic
    ---

Every `error:` line must match some diagnostic (case-insensitive). The
remaining lines are the exact expected stdout. With no `error:` lines the
program must run cleanly.
"""

import io
from dataclasses import dataclass, field
from pathlib import Path

import pytest

import rocks

PROGRAMS_DIR = Path(__file__).parent / "programs"


@dataclass
class Program:
    name: str
    source: str
    output: str = ""
    errors: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Test file parsing
# ---------------------------------------------------------------------------


def _program(name: str, source_lines: list[str], expected_lines: list[str]) -> Program:
    output: list[str] = []
    errors: list[str] = []
    for line in expected_lines:
        if line.startswith("error:"):
            errors.append(line[6:].strip())
        else:
            output.append(line)
    return Program(name, "\n".join(source_lines), "\n".join(output).strip(), errors)


def parse_test_file(path: Path) -> list[Program]:
    """Split a .tests file into programs; each case is a name and two sections."""
    programs: list[Program] = []
    name: str | None = None
    sections: list[list[str]] = []
    for line in path.read_text(encoding="utf-8").split("\n"):
        if line.startswith("=== "):
            name = line[4:].strip()
            sections = [[]]
        elif name is None:
            continue
        elif line == "---":
            if len(sections) == 2:
                programs.append(_program(name, sections[0], sections[1]))
                name = None
            else:
                sections.append([])
        else:
            sections[-1].append(line)
    return programs


def discover_programs(test_dir: Path) -> list[tuple[str, Program]]:
    """Glob *.tests in test_dir, return (test_id, program) pairs."""
    results = []
    for test_file in sorted(test_dir.glob("*.tests")):
        for program in parse_test_file(test_file):
            results.append((f"{test_file.stem}/{program.name}", program))
    return results


# ---------------------------------------------------------------------------
# Assertion checker
# ---------------------------------------------------------------------------


def check_expected(program: Program, output: str, diagnostics: list) -> None:
    errors = [str(d) for d in diagnostics]
    if not program.errors and errors:
        pytest.fail(f"Expected ok, got error: {errors[0]}")
    for expected_msg in program.errors:
        if not errors:
            pytest.fail(f"Expected error containing '{expected_msg}', got ok")
        found = any(expected_msg.lower() in e.lower() for e in errors)
        if not found:
            pytest.fail(f"Expected error containing '{expected_msg}', got: {errors}")

    got = output.strip()
    if got != program.output:
        pytest.fail(
            f"Output mismatch\n  expected: {program.output!r}\n  actual:   {got!r}"
        )


def run_program(source: str) -> tuple[str, list]:
    out = io.StringIO()
    diagnostics = rocks.run(source, out=out, stdin=io.StringIO(""))
    return out.getvalue(), diagnostics


# ---------------------------------------------------------------------------
# Parametrization
# ---------------------------------------------------------------------------


def pytest_generate_tests(metafunc):
    if "program" in metafunc.fixturenames:
        params = [pytest.param(p, id=tid) for tid, p in discover_programs(PROGRAMS_DIR)]
        metafunc.parametrize("program", params)


def test_program(program: Program):
    output, diagnostics = run_program(program.source)
    check_expected(program, output, diagnostics)


def test_programs_are_deterministic():
    for _, program in discover_programs(PROGRAMS_DIR):
        if "clock()" in program.source:
            continue
        assert run_program(program.source) == run_program(program.source)


def test_parse_test_file(tmp_path):
    path = tmp_path / "sample.tests"
    path.write_text(
        "preamble ignored\n"
        "=== prints\n"
        "print 1;\n"
        "---\n"
        "1\n"
        "---\n"
        "\n"
        "=== fails\n"
        "print 1\n"
        "---\n"
        "error: Expected ';'\n"
        "---\n"
    )
    programs = parse_test_file(path)
    assert [p.name for p in programs] == ["prints", "fails"]
    assert programs[0].source == "print 1;"
    assert programs[0].output == "1"
    assert programs[0].errors == []
    assert programs[1].output == ""
    assert programs[1].errors == ["Expected ';'"]


# ---------------------------------------------------------------------------
# Generated programs
# ---------------------------------------------------------------------------


def test_long_operator_chain():
    output, diagnostics = run_program("print " + " + ".join(["1"] * 1500) + ";")
    assert diagnostics == []
    assert output == "1500\n"


def test_deeply_nested_parentheses():
    output, diagnostics = run_program("print " + "(" * 80 + "1" + ")" * 80 + ";")
    assert diagnostics == []
    assert output == "1\n"


def test_nested_blocks():
    output, diagnostics = run_program("{" * 200 + "print 1;" + "}" * 200)
    assert diagnostics == []
    assert output == "1\n"
