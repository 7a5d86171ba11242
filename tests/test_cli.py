"""
Tests for the bfrun command-line front end.

Covers:
  - integer argument parsing (decimal / 0x / $ / negative)
  - option mapping onto MemoryOptions
  - exit codes for each failure class
  - program output on stdout, diagnostics on stderr
"""

import io
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import bfrun
from bfvm.vm import MemoryOptions


def _run(*argv, stdin: str = ""):
    out = io.StringIO()
    code = bfrun.run(list(argv), stdin=io.StringIO(stdin), stdout=out)
    return code, out.getvalue()


# ─── Argument parsing ─────────────────────

class TestParseIntArg:
    @pytest.mark.parametrize("text,expected", [
        ("255", 255),
        ("0xFF", 255),
        ("0XfF", 255),
        ("$FF", 255),
        ("-128", -128),
        ("-0x80", -128),
        (" 30000 ", 30000),
    ])
    def test_forms(self, text, expected):
        assert bfrun.parse_int_arg(text) == expected

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            bfrun.parse_int_arg("lots")


class TestOptionsFromArgs:
    def test_defaults(self):
        args = bfrun.build_parser().parse_args(["-r", "+"])
        assert bfrun.options_from_args(args) == MemoryOptions()

    def test_all_flags(self):
        args = bfrun.build_parser().parse_args(
            ["prog.bf", "-c", "$10", "-C", "0xFFFF", "-m", "300", "-l"])
        opts = bfrun.options_from_args(args)
        assert opts == MemoryOptions(lower_bound=16, upper_bound=0xFFFF,
                                     initial_length=300, variable_length=True)

    def test_needs_a_program(self, capsys):
        with pytest.raises(SystemExit):
            bfrun.build_parser().parse_args([])

    def test_file_and_raw_are_exclusive(self, capsys):
        with pytest.raises(SystemExit):
            bfrun.build_parser().parse_args(["prog.bf", "-r", "+"])

    @pytest.mark.parametrize("capacity", ["0", "-5"])
    def test_log_capacity_must_be_positive(self, capacity, capsys):
        with pytest.raises(SystemExit):
            bfrun.build_parser().parse_args(["-r", "+", "--log-capacity", capacity])
        assert "--log-capacity" in capsys.readouterr().err

    def test_log_capacity(self):
        args = bfrun.build_parser().parse_args(["-r", "+", "--log-capacity", "0x10"])
        assert args.log_capacity == 16


# ─── Exit codes ─────────────────────

class TestRun:
    def test_raw_program(self):
        code, out = _run("--raw=++++++++[>++++++++<-]>+.")
        assert code == bfrun.EXIT_OK
        assert out == "A"

    def test_program_file(self, tmp_path):
        prog = tmp_path / "echo.bf"
        prog.write_text(",.,.", encoding="utf-8")
        code, out = _run(str(prog), stdin="hi")
        assert code == bfrun.EXIT_OK
        assert out == "hi"

    def test_missing_file(self, tmp_path, capsys):
        code, _ = _run(str(tmp_path / "nope.bf"))
        assert code == bfrun.EXIT_INPUT
        assert "Could not open file" in capsys.readouterr().err

    def test_unbalanced_brackets(self, capsys):
        code, out = _run("--raw=+[.")
        assert code == bfrun.EXIT_BRACKETS
        assert out == ""
        assert "Unmatched [ at 1" in capsys.readouterr().err

    def test_invalid_memory_options(self):
        code, _ = _run("--raw=+", "-c", "10", "-C", "5")
        assert code == bfrun.EXIT_OPTIONS

    def test_zero_length_tape(self):
        code, _ = _run("--raw=+", "-m", "0")
        assert code == bfrun.EXIT_OPTIONS

    def test_runtime_failure(self):
        code, _ = _run("--raw=,", stdin="")
        assert code == bfrun.EXIT_RUNTIME

    def test_max_steps(self):
        code, _ = _run("--raw=+[]", "--max-steps", "50")
        assert code == bfrun.EXIT_TIMEOUT

    def test_comment_parser(self):
        code, out = _run("--raw=+++ # .\n++.", "-N")
        assert code == bfrun.EXIT_OK
        assert out == chr(5)

    def test_strict_parser_runs_commented_commands(self):
        code, out = _run("--raw=+ # .")
        assert code == bfrun.EXIT_OK
        assert out == chr(1)

    def test_custom_bounds(self):
        code, out = _run("--raw=-.", "-C", "0x10FFFF", "-m", "1")
        assert code == bfrun.EXIT_OK
        assert out == chr(0x10FFFF)

    def test_variable_length_tape(self):
        code, _ = _run("--raw=>>>>+", "-m", "2", "-l")
        assert code == bfrun.EXIT_OK

    def test_log_file(self, tmp_path):
        log_path = tmp_path / "logs" / "run.log"
        code, _ = _run("--raw=+.", "--log-file", str(log_path))
        assert code == bfrun.EXIT_OK
        assert log_path.exists()

    def test_quiet_suppresses_warnings(self, capsys):
        code, _ = _run("--raw=+[]", "--max-steps", "5", "-q")
        assert code == bfrun.EXIT_TIMEOUT
        assert capsys.readouterr().err == ""

    def test_undecodable_input_is_a_runtime_failure(self):
        stdin = io.TextIOWrapper(io.BytesIO(b"\xff\xfe"), encoding="utf-8")
        code = bfrun.run(["--raw=,."], stdin=stdin, stdout=io.StringIO())
        assert code == bfrun.EXIT_RUNTIME
