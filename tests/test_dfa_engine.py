"""Tests for dfa_engine.py — Automaton invariants, describe(), step(),
classification with and without traces, and step-by-step runs."""

import numpy as np
import pytest

from dfa_config import load
from dfa_engine import (
    Automaton,
    ClassificationResult,
    DFAEngine,
    TransitionRecord,
    build,
    tokenize,
)

PARITY = """\
states: Even, Odd
alphabet: 0, 1
start: Even
accept: Even
transitions:
Even 0 Even
Even 1 Odd
Odd 0 Odd
Odd 1 Even
"""


def _parity() -> DFAEngine:
    return DFAEngine(load(PARITY))


def _ab_star() -> DFAEngine:
    """Partial DFA for ab*: no error state, so 'b' first is undefined."""
    return DFAEngine(load(
        "states: q0, q1\nalphabet: a, b\nstart: q0\naccept: q1\n"
        "transitions:\nq0 a q1\nq1 b q1\n"
    ))


# ── Automaton ───────────────────────────────────────────────────────────────

class TestAutomaton:
    def test_table_is_read_only(self):
        a = _parity().automaton
        with pytest.raises(ValueError):
            a.table[0, 0] = 1
        with pytest.raises(ValueError):
            a.accepting[0] = False

    def test_is_frozen(self):
        a = _parity().automaton
        with pytest.raises(AttributeError):
            a.start = 1

    def test_from_transitions(self):
        a = Automaton.from_transitions(
            states=("q0", "q1"), alphabet=("x",),
            transitions={("q0", "x"): "q1"}, start="q0", accept=["q1"],
        )
        assert a.table.tolist() == [[1], [-1]]
        assert a.accepting.tolist() == [False, True]
        assert a.start_state == "q0"

    def test_from_transitions_rejects_unknown(self):
        with pytest.raises(ValueError):
            Automaton.from_transitions(("q0",), ("x",), {("q0", "y"): "q0"},
                                       "q0", [])
        with pytest.raises(ValueError):
            Automaton.from_transitions(("q0",), ("x",), {}, "q9", [])

    def test_bad_shape(self):
        with pytest.raises(ValueError):
            Automaton(states=("a",), alphabet=("x", "y"),
                      table=np.zeros((1, 1)), start=0,
                      accepting=np.zeros(1, dtype=bool))

    def test_out_of_range_target(self):
        with pytest.raises(ValueError):
            Automaton(states=("a",), alphabet=("x",),
                      table=np.array([[3]]), start=0,
                      accepting=np.zeros(1, dtype=bool))

    def test_caller_array_not_shared(self):
        table = np.array([[0]])
        a = Automaton(states=("a",), alphabet=("x",), table=table, start=0,
                      accepting=np.array([True]))
        table[0, 0] = -1
        assert a.table[0, 0] == 0

    def test_to_dict(self):
        d = _parity().automaton.to_dict()
        assert d["states"] == ["Even", "Odd"]
        assert d["start"] == "Even"
        assert d["accept"] == ["Even"]
        assert ["Odd", "1", "Even"] in d["transitions"]
        assert len(d["transitions"]) == 4


# ── describe ────────────────────────────────────────────────────────────────

class TestDescribe:
    def test_lists_declared_parts(self):
        text = _parity().describe()
        assert "States: Even, Odd" in text
        assert "Alphabet: 0, 1" in text
        assert "Start state: Even" in text
        assert "Accepting states: Even" in text
        assert "  Even --1--> Odd" in text
        assert "  Odd --1--> Even" in text
        assert "Undefined" not in text

    def test_no_extras(self):
        lines = _parity().describe().splitlines()
        edges = [l for l in lines if "-->" in l]
        assert len(edges) == 4

    def test_partial_and_no_accepting(self):
        engine = DFAEngine(load(
            "states: p q\nalphabet: a\nstart: p\naccept:\ntransitions:\np a q\n"))
        text = engine.describe()
        assert "Accepting states: (none)" in text
        assert "Undefined transitions: 1" in text

    def test_is_pure(self):
        engine = _parity()
        assert engine.describe() == engine.describe()


# ── step ────────────────────────────────────────────────────────────────────

class TestStep:
    def test_defined(self):
        assert _parity().step("Even", "1") == "Odd"

    def test_undefined_pair(self):
        assert _ab_star().step("q0", "b") is None

    def test_unknown_symbol_or_state(self):
        engine = _parity()
        assert engine.step("Even", "2") is None
        assert engine.step("Nowhere", "0") is None


# ── classify: parity scenarios ──────────────────────────────────────────────

class TestParityScenarios:
    def test_zero(self):
        r = _parity().classify("0", trace=True)
        assert r.accepted is True
        assert r.trace == (TransitionRecord("Even", "0", "Even"),)

    def test_one(self):
        r = _parity().classify("1", trace=True)
        assert r.accepted is False
        assert r.trace == (TransitionRecord("Even", "1", "Odd"),)
        assert r.final_state == "Odd"

    def test_one_one(self):
        r = _parity().classify("11", trace=True)
        assert r.accepted is True
        assert r.trace == (
            TransitionRecord("Even", "1", "Odd"),
            TransitionRecord("Odd", "1", "Even"),
        )
        assert r.consumed == 2

    def test_undeclared_symbol(self):
        r = _parity().classify("12", trace=True)
        assert r.accepted is False
        assert r.trace == (
            TransitionRecord("Even", "1", "Odd"),
            TransitionRecord("Odd", "2", None),
        )
        assert r.trace[-1].undefined
        assert r.final_state is None
        assert r.consumed == 1

    def test_stops_at_first_undefined(self):
        r = _parity().classify("2111", trace=True)
        assert len(r.trace) == 1
        assert r.trace[0].undefined
        assert r.consumed == 0


class TestClassify:
    def test_empty_input_accepting_start(self):
        r = _parity().classify("", trace=True)
        assert r.accepted is True
        assert r.trace == ()
        assert r.consumed == 0

    def test_empty_input_non_accepting_start(self):
        r = _ab_star().classify("")
        assert r.accepted is False

    def test_no_trace_by_default(self):
        r = _parity().classify("0110")
        assert r.trace is None
        assert r.accepted is True

    def test_partial_table_rejects(self):
        engine = _ab_star()
        assert engine.classify("abbb").accepted is True
        r = engine.classify("ba", trace=True)
        assert r.accepted is False
        assert r.trace == (TransitionRecord("q0", "b", None),)

    def test_deterministic(self):
        engine = _parity()
        for word in ["", "0", "1", "10101", "12", "x"]:
            assert engine.classify(word, trace=True) == engine.classify(word, trace=True)

    def test_does_not_mutate_automaton(self):
        engine = _parity()
        before = engine.automaton.table.copy()
        engine.classify("1111000112", trace=True)
        assert np.array_equal(engine.automaton.table, before)

    def test_token_sequence(self):
        engine = DFAEngine(load(
            "states: s t\nalphabet: go, stop\nstart: s\naccept: t\n"
            "transitions:\ns go t\nt stop s\nt go t\n"))
        r = engine.classify(["go", "stop", "go"])
        assert r.accepted is True
        assert r.input == ("go", "stop", "go")

    def test_iterator_input_kept_whole(self):
        r = _parity().classify(iter("11"), trace=True)
        assert r.accepted is True
        assert r.input == ("1", "1")
        assert r.consumed == 2

    def test_generator_input_stops_early(self):
        r = _parity().classify((c for c in "1x0"), trace=True)
        assert r.accepted is False
        assert r.input == ("1", "x", "0")
        assert r.consumed == 1

    def test_result_type(self):
        assert isinstance(_parity().classify("0"), ClassificationResult)


class TestClassifyLine:
    def test_keeps_line(self):
        r = _parity().classify_line("0110", trace=True)
        assert r.input == "0110"
        assert r.accepted is True

    def test_separator(self):
        r = _parity().classify_line("1 1", separator=" ")
        assert r.accepted is True
        assert r.input == "1 1"

    def test_tokenize(self):
        assert tokenize("abc") == ["a", "b", "c"]
        assert tokenize("go,,stop", ",") == ["go", "stop"]
        assert tokenize("") == []


# ── Step-by-step runs ───────────────────────────────────────────────────────

class TestRun:
    def test_feed(self):
        run = _parity().start_run(trace=True)
        assert run.current_state == "Even"
        assert run.accepted is True
        assert run.feed("1") is True
        assert run.current_state == "Odd"
        assert run.accepted is False
        assert run.feed("1") is True
        assert run.accepted is True
        assert run.consumed == 2

    def test_dead_run(self):
        run = _parity().start_run(trace=True)
        assert run.feed("x") is False
        assert run.halted
        assert run.current_state is None
        assert run.feed("0") is False
        assert len(run.trace) == 1

    def test_untraced_run_has_no_log(self):
        run = _parity().start_run()
        run.feed("1")
        assert run.trace is None

    def test_runs_are_independent(self):
        engine = _parity()
        r1 = engine.start_run()
        r2 = engine.start_run()
        r1.feed("1")
        assert r2.current_state == "Even"


class TestBuild:
    def test_build_from_file(self, tmp_path):
        path = tmp_path / "parity.dfa"
        path.write_text(PARITY, encoding="utf-8")
        engine = build(path)
        assert engine.classify("11").accepted is True
