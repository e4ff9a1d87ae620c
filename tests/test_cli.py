#!/usr/bin/env python3
"""
Command line entry point and REPL.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import io

from derstand.cli import main, repl
from derstand import EngineConfig


def write_source(tmp_path, text):
    path = tmp_path / "prog.dst"
    path.write_text(text, encoding="utf-8")
    return str(path)


def run_main(argv, input_data=b""):
    stdout = io.BytesIO()
    code = main(argv, stdin=io.BytesIO(input_data), stdout=stdout)
    return code, stdout.getvalue()


def test_runs_file(tmp_path):
    path = write_source(tmp_path, "++++++++[>++++++++<-]>+.")
    assert run_main([path]) == (0, b"A")


def test_reads_stdin(tmp_path):
    path = write_source(tmp_path, ",[.,]")
    assert run_main([path, "--no-jit"], b"echo") == (0, b"echo")


def test_missing_file(tmp_path, capsys):
    code, _ = run_main([str(tmp_path / "nope.dst")])
    assert code == 1
    assert "File not found" in capsys.readouterr().err


def test_structural_error_runs_nothing(tmp_path, capsys):
    path = write_source(tmp_path, "+.[")
    code, out = run_main([path])
    assert code == 1
    assert out == b""
    err = capsys.readouterr().err
    assert "Compilation error" in err
    assert "position 2" in err


def test_runtime_error(tmp_path, capsys):
    path = write_source(tmp_path, "+.<")
    code, out = run_main([path, "--pointer-policy", "error"])
    assert code == 1
    assert out == b"\x01"
    assert "Execution error: Pointer moved left of cell 0" in capsys.readouterr().err


def test_end_of_input_error(tmp_path, capsys):
    path = write_source(tmp_path, ",")
    code, _ = run_main([path, "--eof-policy", "error"])
    assert code == 1
    assert "End of input" in capsys.readouterr().err


def test_step_limit_flag(tmp_path, capsys):
    path = write_source(tmp_path, "+[]")
    code, _ = run_main([path, "--max-steps", "50"])
    assert code == 1
    assert "Step limit of 50 exceeded" in capsys.readouterr().err


class ClosedPipe(io.BytesIO):
    def write(self, data):
        raise BrokenPipeError("pipe closed")


def test_closed_stdout(tmp_path, capsys):
    path = write_source(tmp_path, "+.")
    assert main([path], stdin=io.BytesIO(), stdout=ClosedPipe()) == 1
    assert "Execution error: Output error: pipe closed" in capsys.readouterr().err


def test_crlf_positions_are_not_translated(tmp_path, capsys):
    path = tmp_path / "crlf.dst"
    path.write_bytes(b"\r\n]")
    code, _ = run_main([str(path)])
    assert code == 1
    assert "position 2" in capsys.readouterr().err


def test_time_flag(tmp_path, capsys):
    path = write_source(tmp_path, "+")
    assert run_main([path, "--time"]) == (0, b"")
    assert "Execution time:" in capsys.readouterr().err


def test_memory_size_flag(tmp_path):
    path = write_source(tmp_path, "<.%$")
    assert run_main([path, "--memory-size", "4", "--pointer-policy", "wrap"]) == (0, b"\x00")


def test_bad_environment(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("DERSTAND_EOF_POLICY", "bogus")
    path = write_source(tmp_path, "+")
    code, _ = run_main([path])
    assert code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_repl():
    lines = io.StringIO("++++++++[>++++++++<-]>+.\n\n+\n[\n<\nquit\n+.\n")
    out = io.StringIO()
    config = EngineConfig(pointer_policy="error")
    assert repl(config, lines=lines, out=out) == 0

    text = out.getvalue()
    assert text.startswith("Derstand Interpreter v0.1.0\nInstructions: > < + - . , [ ] # $ % &\n")
    assert "Output: A" in text
    assert "(no output)" in text
    assert "Compilation error: Unmatched opening bracket at position 0" in text
    assert "Execution error: Pointer moved left of cell 0" in text
    # nothing after quit is executed
    assert "\x01" not in text


def test_repl_stops_at_end_of_input():
    out = io.StringIO()
    assert repl(EngineConfig(), lines=io.StringIO("+.\n"), out=out) == 0
    assert "Output: \x01" in out.getvalue()
