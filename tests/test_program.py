import io

import pytest

import manirun
from mani.lexer import Token, TokenKind as K
from mani.program import Session
from mani.reporter import Reporter
from mani.runtime import ManiRuntimeError
from mani.tools import Tools


# --------------------------------------------------------------------
# reporter

def test_report_format(reporter):
    reporter.error(3, "at 'x' main.mni", "Something broke.")
    assert reporter.latest == "[line 3] Error at 'x' main.mni : Something broke."
    assert reporter.had_error
    assert reporter.stream.getvalue() == reporter.latest + "\n"


def test_token_error_at_end(reporter):
    reporter.token_error(Token(K.EOF, "", None, 7, "main.mni"), "Expect expression.")
    assert reporter.latest == "[line 7] Error at end of main.mni : Expect expression."


def test_runtime_channel(reporter):
    token = Token(K.SLASH, "/", None, 4, "main.mni")
    reporter.runtime_error(ManiRuntimeError(token, "Division by zero."))
    assert reporter.latest == "Division by zero.\n[line 4] at main.mni"
    assert reporter.had_runtime_error
    assert not reporter.had_error


def test_checkpoint_tracks_new_errors_only(reporter):
    reporter.error(1, "", "old")
    with reporter.checkpoint() as checkpoint:
        assert checkpoint
        reporter.error(2, "", "new")
    assert not checkpoint


def test_reset_clears_flags_but_keeps_history(reporter):
    reporter.error(1, "", "boom")
    reporter.reset()
    assert not reporter.had_error
    assert len(reporter.errors) == 1


# --------------------------------------------------------------------
# session

def test_lexical_error_stops_before_parsing(mani):
    run = mani("print 1; @")
    assert run.had_error
    assert run.lines == []


def test_syntax_errors_stop_before_resolution(mani):
    run = mani("print 1;\nprint (;\nlet = 2;")
    assert run.had_error
    assert run.lines == []
    assert run.errors.count("Error") == 2


def test_resolution_error_never_reaches_evaluation(mani):
    run = mani('print "side effect"; let a = a;')
    assert run.had_error
    assert run.lines == []
    assert run.latest == ("[line 1] Error at 'a' test.mni : "
                          "Can't read local variable in its own initializer.")


def test_session_keeps_globals_between_runs():
    out = io.StringIO()
    session = Session(Reporter(stream=io.StringIO()), stdout=out)
    session.run("let count = 1; fn bump() { count += 1; return count; }")
    session.run("bump();")
    assert session.run("bump();") == 3.0


def test_session_survives_errors_between_runs():
    out = io.StringIO()
    session = Session(Reporter(stream=io.StringIO()), stdout=out)
    session.run("let a = 1;")
    session.run("print a / 0;")
    assert session.had_runtime_error
    session.reset()
    session.run("print a;")
    assert not session.had_runtime_error
    assert out.getvalue() == "1\n"


def test_halt_on_error_policy():
    out = io.StringIO()
    session = Session(Reporter(stream=io.StringIO()), stdout=out,
                      halt_on_error=False)
    session.run("print 1; print nil + 1; print 2;")
    assert out.getvalue() == "1\n2\n"


# --------------------------------------------------------------------
# script loading and driver

def test_tools_load(tmp_path, reporter):
    script = tmp_path / "hello.mni"
    script.write_text('print "hi";', encoding="utf-8")
    assert Tools(reporter).load(str(script)) == ('print "hi";', "hello.mni")


def test_tools_rejects_wrong_extension(tmp_path, reporter):
    assert Tools(reporter).load(str(tmp_path / "hello.txt")) is None
    assert reporter.latest == "Mani scripts must end with '.mni'."


def test_tools_missing_file(tmp_path, reporter):
    path = str(tmp_path / "missing.mni")
    assert Tools(reporter).load(path) is None
    assert reporter.latest == f"{path}: File not Found"


def test_driver_runs_script(tmp_path, capsys):
    script = tmp_path / "main.mni"
    script.write_text("let x = 2;\nprint x * 21;\n", encoding="utf-8")
    assert manirun.main([str(script)]) == 0
    assert capsys.readouterr().out == "42\n"


def test_driver_exit_codes(tmp_path, capsys):
    bad = tmp_path / "bad.mni"
    bad.write_text("print ;", encoding="utf-8")
    assert manirun.main([str(bad)]) == manirun.EXIT_COMPILE
    assert "Error at ';' bad.mni" in capsys.readouterr().err

    failing = tmp_path / "failing.mni"
    failing.write_text("print 1;\nprint 1 / 0;", encoding="utf-8")
    assert manirun.main([str(failing)]) == manirun.EXIT_RUNTIME
    captured = capsys.readouterr()
    assert captured.out == "1\n"
    assert "Division by zero.\n[line 2] at failing.mni" in captured.err

    assert manirun.main([str(tmp_path / "nope.mni")]) == manirun.EXIT_NOINPUT


def test_driver_dumps_ast(tmp_path, capsys):
    script = tmp_path / "main.mni"
    script.write_text("let   x=1+2 ;", encoding="utf-8")
    assert manirun.main(["--ast", str(script)]) == 0
    assert capsys.readouterr().out == "let x = 1 + 2;\n"


def test_repl_keeps_state_and_recovers(capsys):
    session = Session(Reporter())
    stdin = io.StringIO("let a = 1;\nprint a +;\nprint a / 0;\nprint a + 1;\nexit\n")
    assert manirun.run_prompt(session, stdin) == 0
    captured = capsys.readouterr()
    assert "2\n" in captured.out
    assert "Expect expression." in captured.err
    assert "Division by zero." in captured.err


def test_deeply_nested_source_is_a_syntax_error(mani):
    moderate = mani("print " + "(" * 400 + "1" + ")" * 400 + ";")
    assert moderate.lines == ["1"]

    deep = mani("print " + "(" * 3000 + "1" + ")" * 3000 + ";")
    assert deep.had_error
    assert deep.lines == []
    assert "Expression nesting too deep." in deep.errors
