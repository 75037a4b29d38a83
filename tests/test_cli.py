"""Tests for the lox command-line entry point."""

import pytest

from lox.cli import main


def _script(tmp_path, source: str):
    path = tmp_path / "script.lox"
    path.write_text(source)
    return str(path)


def _feed(monkeypatch, lines):
    pending = list(lines)

    def fake_input(prompt=""):
        if not pending:
            raise EOFError
        return pending.pop(0)

    monkeypatch.setattr("builtins.input", fake_input)


def test_runs_script(tmp_path, capsys):
    path = _script(tmp_path, 'var a = "hi";\nprint a + "!";\n')
    assert main([path]) == 0
    captured = capsys.readouterr()
    assert captured.out == "hi!\n"
    assert captured.err == ""


def test_static_error_exit_code(tmp_path, capsys):
    path = _script(tmp_path, "print 1 +;\n")
    assert main([path]) == 65
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == "[line 1] Error at ';': Expect expression.\n"


def test_runtime_error_exit_code(tmp_path, capsys):
    path = _script(tmp_path, 'print "before";\nundefined();\n')
    assert main([path]) == 65
    captured = capsys.readouterr()
    assert captured.out == "before\n"
    assert captured.err == "Undefined variable 'undefined'.\n[line 2]\n"


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.lox")]) == 66
    assert "No such file or directory" in capsys.readouterr().err


def test_invalid_utf8(tmp_path, capsys):
    path = tmp_path / "bad.lox"
    path.write_bytes(b'print "\xff";')
    assert main([str(path)]) == 65
    assert "invalid utf-8" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [["a.lox", "b.lox"], ["--bogus"]])
def test_usage_errors(argv, capsys):
    assert main(argv) == 64
    assert "Usage: lox" in capsys.readouterr().err


def test_help(capsys):
    assert main(["--help"]) == 0
    assert capsys.readouterr().out.startswith("lox [OPTIONS] [SCRIPT]")


def test_tokens_mode(tmp_path, capsys):
    path = _script(tmp_path, "print 1;")
    assert main(["--tokens", path]) == 0
    assert capsys.readouterr().out == "print print null\nNUMBER 1 1.0\n; ; null\nEOF  null\n"


def test_ast_mode(tmp_path, capsys):
    path = _script(tmp_path, "print -1 * (2 + x);")
    assert main(["--ast", path]) == 0
    assert capsys.readouterr().out == "(print (* (- 1) (group (+ 2 x))))\n"


def test_ast_mode_does_not_run(tmp_path, capsys):
    path = _script(tmp_path, 'print "side effect";')
    assert main(["--ast", path]) == 0
    assert "side effect\n" not in capsys.readouterr().out


def test_repl_keeps_state_and_echoes(monkeypatch, capsys):
    _feed(monkeypatch, ["var a = 20;", "a + 1;", "print a;"])
    assert main([]) == 0
    assert capsys.readouterr().out == "21\n20\n\n"


def test_repl_continues_after_errors(monkeypatch, capsys):
    _feed(monkeypatch, ["print ;", "-nil;", "print 3;"])
    assert main([]) == 0
    captured = capsys.readouterr()
    assert captured.out == "3\n\n"
    assert "Expect expression." in captured.err
    assert "Operand must be a number." in captured.err
