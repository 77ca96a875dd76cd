"""CLI tests for the rocks entry point, run in-process."""

import io

from rocks.cli import EXIT_IO, EXIT_OK, EXIT_RUNTIME, EXIT_STATIC, EXIT_USAGE, main


def write(tmp_path, source: str):
    path = tmp_path / "prog.rocks"
    path.write_text(source)
    return str(path)


def test_run_file(tmp_path, capsys):
    code = main([write(tmp_path, 'print "hello";')])
    out = capsys.readouterr()
    assert code == EXIT_OK
    assert out.out == "hello\n"
    assert out.err == ""


def test_static_error_exit_code(tmp_path, capsys):
    code = main([write(tmp_path, "print ;")])
    out = capsys.readouterr()
    assert code == EXIT_STATIC
    assert "[line 1:7] Error at ';': Expected expression" in out.err


def test_runtime_error_exit_code(tmp_path, capsys):
    code = main([write(tmp_path, 'print "a";\nprint nope;')])
    out = capsys.readouterr()
    assert code == EXIT_RUNTIME
    assert out.out == "a\n"
    assert "Undefined variable 'nope'" in out.err


def test_missing_file(tmp_path, capsys):
    code = main([str(tmp_path / "missing.rocks")])
    assert code == EXIT_IO
    assert "No such file or directory" in capsys.readouterr().err


def test_help(capsys):
    assert main(["--help"]) == EXIT_OK
    assert capsys.readouterr().out.startswith("rocks [OPTIONS] [FILE]")


def test_unknown_flag(capsys):
    assert main(["--bogus"]) == EXIT_USAGE
    assert "unknown flag '--bogus'" in capsys.readouterr().err


def test_extra_argument(tmp_path, capsys):
    path = write(tmp_path, "")
    assert main([path, path]) == EXIT_USAGE


def test_max_depth_flag(tmp_path, capsys):
    path = write(tmp_path, "fun f(n) { if (n > 0) f(n - 1); } f(10);")
    assert main(["--max-depth", "5", path]) == EXIT_RUNTIME
    assert "Stack overflow" in capsys.readouterr().err
    assert main(["--max-depth", "50", path]) == EXIT_OK


def test_max_depth_requires_number(capsys):
    assert main(["--max-depth", "many"]) == EXIT_USAGE
    assert main(["--max-depth"]) == EXIT_USAGE


def test_ast_flag(tmp_path, capsys):
    code = main(["--ast", write(tmp_path, "print 1 + 2;\nvar x;")])
    assert code == EXIT_OK
    assert capsys.readouterr().out == "(print (+ 1 2))\n(var x)\n"


def test_ast_flag_reports_syntax_errors(tmp_path, capsys):
    assert main(["--ast", write(tmp_path, "print")]) == EXIT_STATIC


def test_prompt_keeps_state(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("var a = 2;\nprint a * 3;\nprint nope;\n"))
    assert main([]) == EXIT_OK
    out = capsys.readouterr()
    assert out.out == "> > 6\n> > \n"
    assert "Undefined variable 'nope'" in out.err


def test_verbose_enables_debug_logging(tmp_path, capsys, caplog):
    caplog.set_level("DEBUG", logger="rocks")
    assert main(["--verbose", write(tmp_path, "print 1;")]) == EXIT_OK
    assert any("scanned" in r.getMessage() for r in caplog.records)
