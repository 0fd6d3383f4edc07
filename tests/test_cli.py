#!/usr/bin/env python3
"""
Tests for the command line wrapper and the file/string API.
"""

import io
import logging
import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfvm import CompileOptions, Kind, compile_file, compile_string
from bfvm.cli import main

HELLO_WORLD = (
    "++++++++++[>+++++++"
    ">++++++++++>+++>+<<<<-]>++.>+.+++"
    "++++..+++.>++.<<+++++++++++++++.>"
    ".+++.------.--------.>+.>."
)


def write_program(tmp_path, code, name="prog.bf"):
    path = tmp_path / name
    path.write_text(code)
    return path


def test_compile_string_counts_commands():
    result = compile_string("hello +-[-] world.")
    assert result.command_count == 6
    assert [ins.kind for ins in result.instructions] == [Kind.CLEAR, Kind.PRINT]


def test_compile_file(tmp_path):
    path = write_program(tmp_path, "+++[-]")
    result = compile_file(path)
    assert len(result.instructions) == 2
    result = compile_file(str(path), options=CompileOptions(optimize_level=0))
    assert len(result.instructions) == 4


def test_cli_runs_file(tmp_path, capsys):
    path = write_program(tmp_path, HELLO_WORLD)
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == "Hello World!\n"


def test_cli_reads_program_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"+" * 66 + b"..")))
    assert main([]) == 0
    assert capsys.readouterr().out == "BB"


def test_cli_dump(tmp_path, capsys):
    path = write_program(tmp_path, "+[->>+<<]")
    assert main(["--dump", str(path)]) == 0
    assert capsys.readouterr().out == "0  Modify(+1)\n1  Add(+2)\n"


def test_cli_dump_unfused(tmp_path, capsys):
    path = write_program(tmp_path, "[-]")
    assert main(["-O", "0", "--dump", str(path)]) == 0
    assert "BeginLoop(2)" in capsys.readouterr().out


def test_cli_compile_error(tmp_path, caplog):
    path = write_program(tmp_path, "++]")
    with caplog.at_level(logging.ERROR, logger="bfvm"):
        assert main([str(path)]) == 1
    assert "unmatched ']'" in caplog.text


def test_cli_run_error(tmp_path, caplog):
    path = write_program(tmp_path, "<")
    with caplog.at_level(logging.ERROR, logger="bfvm"):
        assert main([str(path)]) == 1
    assert "underflow" in caplog.text


def test_cli_strict(tmp_path, caplog):
    path = write_program(tmp_path, "-")
    assert main([str(path)]) == 0
    with caplog.at_level(logging.ERROR, logger="bfvm"):
        assert main(["--strict", str(path)]) == 1
    assert "Cell #0 underflow" in caplog.text


def test_cli_max_steps(tmp_path, caplog):
    path = write_program(tmp_path, "+[>+<]")
    with caplog.at_level(logging.ERROR, logger="bfvm"):
        assert main(["--max-steps", "100", str(path)]) == 1
    assert "Step limit" in caplog.text


def test_cli_missing_file(tmp_path, caplog):
    with caplog.at_level(logging.ERROR, logger="bfvm"):
        assert main([str(tmp_path / "missing.bf")]) == 1
    assert "Failed to read program code" in caplog.text


def test_cli_jit_without_numba(tmp_path, monkeypatch, caplog):
    import bfvm
    monkeypatch.setitem(sys.modules, "numba", None)
    monkeypatch.setitem(sys.modules, "bfvm.jit", None)
    monkeypatch.delattr(bfvm, "jit", raising=False)
    path = write_program(tmp_path, "+.")
    with caplog.at_level(logging.ERROR, logger="bfvm"):
        assert main(["--engine", "jit", str(path)]) == 2
    assert "install bfvm[jit]" in caplog.text


def test_cli_negative_max_steps(tmp_path, caplog):
    path = write_program(tmp_path, "+[>+<]")
    with caplog.at_level(logging.ERROR, logger="bfvm"):
        assert main(["--max-steps", "-1", "--engine", "jit", str(path)]) == 2
    assert "must not be negative" in caplog.text


def test_cli_verbose_logs_tape(tmp_path, capsys, caplog):
    path = write_program(tmp_path, "+++>++")
    with caplog.at_level(logging.DEBUG, logger="bfvm"):
        assert main(["-v", str(path)]) == 0
    assert "first cells: 03 02 00" in caplog.text
