"""Tests for dfa_runner.py — the command-line caller end to end."""

import os

import pytest

from dfa_runner import main

EXAMPLES = os.path.join(os.path.dirname(__file__), "..", "examples", "parity")
CONFIG = os.path.join(EXAMPLES, "parity.dfa")
STRINGS = os.path.join(EXAMPLES, "strings.txt")


class TestMain:
    def test_describe(self, capsys):
        assert main([CONFIG, "--describe"]) == 0
        out = capsys.readouterr().out
        assert "Start state: Even" in out
        assert "Accepting states: Even" in out

    def test_batch(self, tmp_path, capsys):
        out_path = tmp_path / "accepted.txt"
        assert main([CONFIG, "-i", STRINGS, "-o", str(out_path)]) == 0
        assert out_path.read_text(encoding="utf-8").splitlines() == \
            ["0", "11", "", "0110", "1111"]
        out = capsys.readouterr().out
        assert "Processed 8 lines: 5 accepted, 3 rejected" in out
        assert "Input:" not in out

    def test_verbose(self, tmp_path, capsys):
        assert main([CONFIG, "-i", STRINGS, "-o", str(tmp_path / "a.txt"), "-v"]) == 0
        out = capsys.readouterr().out
        assert "Odd --2--> (undefined transition)" in out
        assert out.count("Result:") == 8

    def test_check_words(self, capsys):
        assert main([CONFIG, "--check", "11", "12"]) == 0
        out = capsys.readouterr().out
        assert "Input: '11'" in out
        assert "Result: REJECTED" in out

    def test_trace_log(self, tmp_path, capsys):
        log_dir = tmp_path / "logs"
        assert main([CONFIG, "--check", "0", "--trace-log", str(log_dir)]) == 0
        assert (log_dir / "trace_log.jsonl").exists()
        assert "Trace log saved to" in capsys.readouterr().out

    def test_bad_config(self, tmp_path, capsys):
        bad = tmp_path / "bad.dfa"
        bad.write_text("states: a\nalphabet: x\nstart: b\naccept:\n", encoding="utf-8")
        assert main([str(bad)]) == 1
        assert "start state 'b' is not declared" in capsys.readouterr().err

    def test_missing_input(self, tmp_path, capsys):
        code = main([CONFIG, "-i", str(tmp_path / "none.txt"),
                     "-o", str(tmp_path / "out.txt")])
        assert code == 1
        assert "SourceUnavailable" in capsys.readouterr().err

    def test_input_without_output(self):
        with pytest.raises(SystemExit) as e:
            main([CONFIG, "-i", STRINGS])
        assert e.value.code == 2
