"""Tests for viz/app.py — DFA trace replay app."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from viz.app import (
    create_app, _render_graph, _render_timeline, _render_summary,
    _render_breakpoints, _run_bounds,
)
from viz.breakpoint_engine import BreakpointEngine, ConditionType
from viz.trace_loader import TraceData

AUTOMATON = {
    "states": ["Even", "Odd"], "alphabet": ["0", "1"], "start": "Even",
    "accept": ["Even"],
    "transitions": [["Even", "0", "Even"], ["Even", "1", "Odd"],
                    ["Odd", "0", "Odd"], ["Odd", "1", "Even"]],
}

ROWS = [
    {"phase": "automaton", "automaton": AUTOMATON},
    {"step": 0, "run": 0, "phase": "init", "input": "1", "dfa_state": "Even"},
    {"step": 1, "run": 0, "phase": "transition", "input": "1", "dfa_state": "Odd",
     "dfa_symbol": "1", "dfa_transition": "(Even, 1) → Odd"},
    {"step": 2, "run": 0, "phase": "verdict", "input": "1", "dfa_state": "Odd",
     "accepted": False},
    {"step": 3, "run": 1, "phase": "init", "input": "x", "dfa_state": "Even"},
    {"step": 4, "run": 1, "phase": "undefined", "input": "x", "dfa_state": "Even",
     "dfa_symbol": "x", "dfa_transition": "UNDEFINED"},
    {"step": 5, "run": 1, "phase": "verdict", "input": "x", "dfa_state": None,
     "accepted": False},
]


# ── App Creation ────────────────────────────────────────────────────────────

class TestAppCreation:
    def test_create_app(self):
        app = create_app(TraceData(ROWS))
        assert app is not None
        assert app.layout is not None

    def test_empty_trace(self):
        app = create_app(TraceData([]))
        assert app.layout is not None

    def test_custom_breakpoints(self):
        engine = BreakpointEngine()
        engine.add_breakpoint(ConditionType.SYMBOL_READ, target="1")
        create_app(TraceData(ROWS), breakpoints=engine)
        hits = _render_breakpoints()
        assert len(hits) == 1
        assert "Read symbol '1'" in hits[0].children


# ── Render Helpers ──────────────────────────────────────────────────────────

class TestRenderHelpers:
    def test_run_bounds(self):
        create_app(TraceData(ROWS))
        assert _run_bounds(0) == (0, 2)
        assert _run_bounds(1) == (3, 5)
        assert _run_bounds(9) == (0, 0)

    def test_summary(self):
        create_app(TraceData(ROWS))
        assert _render_summary() == "2 runs  |  0 accepted  |  2 rejected"

    def test_graph(self):
        create_app(TraceData(ROWS))
        panel = _render_graph(1)
        assert panel is not None
        assert "Step 1" in panel.children[0].children

    def test_graph_out_of_range(self):
        create_app(TraceData(ROWS))
        assert _render_graph(99) is not None

    def test_timeline(self):
        create_app(TraceData(ROWS))
        fig = _render_timeline(0)
        assert list(fig.data[0].y) == ["Even", "Odd"]

    def test_timeline_undefined(self):
        create_app(TraceData(ROWS))
        fig = _render_timeline(1)
        assert list(fig.data[0].y) == ["Even", "(undefined)"]

    def test_timeline_no_run(self):
        create_app(TraceData(ROWS))
        assert len(_render_timeline(None).data) == 0
