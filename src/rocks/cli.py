"""Rocks CLI — run .rocks files or an interactive prompt."""

from __future__ import annotations

import logging
import sys

from . import Rocks, emit, parse
from .errors import STAGE_RUNTIME, Diagnostic
from .runtime import DEFAULT_MAX_CALL_DEPTH


USAGE: str = """\
rocks [OPTIONS] [FILE]

Run a Rocks program, or start a prompt when no FILE is given.

Options:
  --ast              Print the parsed program instead of running it
  --max-depth N      Maximum call depth (default 256)
  --verbose          Log pipeline stages to stderr
  --help             Show this help message
"""

EXIT_OK = 0
EXIT_IO = 1
EXIT_USAGE = 2
EXIT_STATIC = 65
EXIT_RUNTIME = 70


def _report(diagnostics: list[Diagnostic]) -> int:
    for d in diagnostics:
        print(str(d), file=sys.stderr)
    if not diagnostics:
        return EXIT_OK
    if diagnostics[0].stage == STAGE_RUNTIME:
        return EXIT_RUNTIME
    return EXIT_STATIC


def _prompt(session: Rocks) -> int:
    while True:
        sys.stdout.write("> ")
        sys.stdout.flush()
        line = sys.stdin.readline()
        if line == "":
            sys.stdout.write("\n")
            return EXIT_OK
        _report(session.run(line))


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    show_ast = False
    verbose = False
    max_depth = DEFAULT_MAX_CALL_DEPTH
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return EXIT_OK
        elif arg == "--ast":
            show_ast = True
            i += 1
        elif arg == "--verbose":
            verbose = True
            i += 1
        elif arg == "--max-depth":
            if i + 1 >= len(args):
                print("rocks: --max-depth requires a value", file=sys.stderr)
                return EXIT_USAGE
            value = args[i + 1]
            if not value.isdigit() or int(value) < 1:
                print("rocks: invalid --max-depth '" + value + "'", file=sys.stderr)
                return EXIT_USAGE
            max_depth = int(value)
            i += 2
        elif arg.startswith("-"):
            print("rocks: unknown flag '" + arg + "'", file=sys.stderr)
            return EXIT_USAGE
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("rocks: unexpected argument '" + arg + "'", file=sys.stderr)
            return EXIT_USAGE

    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    session = Rocks(max_call_depth=max_depth)
    if filepath == "":
        if show_ast:
            print("rocks: --ast needs a file argument", file=sys.stderr)
            return EXIT_USAGE
        return _prompt(session)

    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("rocks: " + filepath + ": No such file or directory", file=sys.stderr)
        return EXIT_IO
    except OSError as e:
        print("rocks: " + filepath + ": " + str(e), file=sys.stderr)
        return EXIT_IO
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("rocks: " + filepath + ": invalid utf-8", file=sys.stderr)
        return EXIT_IO

    if show_ast:
        _, diagnostics = parse(source)
        if diagnostics:
            return _report(diagnostics)
        sys.stdout.write(emit(source))
        return EXIT_OK

    return _report(session.run(source))


if __name__ == "__main__":
    sys.exit(main())
