"""
DFA Trace Replay — step through a saved trace log in the browser.

Panels:
  Top: run selector, step slider, batch summary
  Left: Cytoscape automaton graph with the current state and taken edge
  Right: step narrative, state timeline chart, breakpoint hits

Run: python viz/app.py logs/trace_log.jsonl
"""

import argparse
import os
import sys

from dash import Dash, html, dcc, Input, Output
import plotly.graph_objects as go

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from viz.breakpoint_engine import BreakpointEngine, ConditionType
from viz.graph_builder import create_graph_panel
from viz.trace_loader import TraceData, load_trace

# ── Globals ──────────────────────────────────────────────────────────────────

_app = None
_trace = TraceData([])
_breakpoints = BreakpointEngine()

_CHART_LAYOUT = {
    "paper_bgcolor": "#1a1a2e",
    "plot_bgcolor": "#1a1a2e",
    "font": {"color": "#e0e0ee", "size": 10},
    "margin": {"l": 50, "r": 10, "t": 30, "b": 30},
}


def _default_breakpoints(engine: BreakpointEngine):
    engine.add_breakpoint(ConditionType.UNDEFINED_TRANSITION)
    engine.add_breakpoint(ConditionType.REJECTED)


def create_app(trace=None, breakpoints=None):
    """Create and return a configured Dash app."""
    global _trace, _app, _breakpoints
    if trace is not None:
        _trace = trace
    if breakpoints is not None:
        _breakpoints = breakpoints
    elif not _breakpoints.breakpoints:
        _default_breakpoints(_breakpoints)

    app = Dash(__name__)
    _app = app

    # ── Styles ───────────────────────────────────────────────────────────
    dark_bg = "#0f0f1a"
    panel_bg = "#1a1a2e"
    accent = "#6366f1"
    text_color = "#e0e0ee"
    muted = "#888"

    def _panel(title, children):
        return html.Div([
            html.H3(title, style={
                "color": text_color, "margin": "0 0 12px 0",
                "fontSize": "15px", "fontWeight": "600",
            }),
            html.Div(children),
        ], style={
            "backgroundColor": panel_bg,
            "borderRadius": "12px",
            "padding": "16px",
            "border": "1px solid #2a2a4a",
            "marginBottom": "12px",
        })

    runs = _trace.get_run_ids()
    run_options = [
        {"label": f"#{r}: {_trace.get_run_input(r)!r}", "value": r} for r in runs
    ]

    # ── Layout ───────────────────────────────────────────────────────────

    app.layout = html.Div(
        style={
            "backgroundColor": dark_bg, "minHeight": "100vh",
            "padding": "20px", "fontFamily": "'Inter', 'Segoe UI', sans-serif",
            "color": text_color,
        },
        children=[
            html.Div(
                style={"display": "flex", "alignItems": "center",
                       "justifyContent": "space-between", "marginBottom": "20px"},
                children=[
                    html.H1("DFA Trace Replay", style={
                        "margin": "0", "fontSize": "24px", "color": accent,
                    }),
                    html.Div(_render_summary(), id="status-bar",
                             style={"fontSize": "13px", "color": muted}),
                ],
            ),
            _panel("Run", [
                dcc.Dropdown(
                    id="run-select",
                    options=run_options,
                    value=runs[0] if runs else None,
                    placeholder="Run",
                    style={"width": "320px", "color": "#000", "fontSize": "12px"},
                ),
                html.Div(style={"marginTop": "12px"}, children=[
                    dcc.Slider(id="step-slider", min=0, max=0, step=1, value=0),
                ]),
            ]),
            html.Div(
                style={"display": "grid", "gridTemplateColumns": "1fr 1fr",
                       "gap": "12px"},
                children=[
                    _panel("Automaton", [html.Div(id="graph-container",
                                                  style={"minHeight": "360px"})]),
                    html.Div([
                        _panel("Step", [html.Pre(id="narrative", style={
                            "fontSize": "12px", "whiteSpace": "pre-wrap",
                            "margin": 0,
                        })]),
                        _panel("State timeline", [
                            dcc.Graph(id="timeline-chart",
                                      config={"displayModeBar": False},
                                      style={"height": "220px"}),
                        ]),
                        _panel("Breakpoints", [html.Div(
                            _render_breakpoints(), id="breakpoint-hits",
                            style={"maxHeight": "160px", "overflowY": "auto",
                                   "fontSize": "11px", "fontFamily": "monospace"},
                        )]),
                    ]),
                ],
            ),
        ],
    )

    # ── Callbacks ────────────────────────────────────────────────────────

    @app.callback(
        Output("step-slider", "min"),
        Output("step-slider", "max"),
        Output("step-slider", "value"),
        Output("timeline-chart", "figure"),
        Input("run-select", "value"),
    )
    def select_run(run):
        lo, hi = _run_bounds(run)
        return lo, hi, lo, _render_timeline(run)

    @app.callback(
        Output("graph-container", "children"),
        Output("narrative", "children"),
        Input("step-slider", "value"),
    )
    def select_step(step_idx):
        step_idx = int(step_idx or 0)
        return _render_graph(step_idx), _trace.generate_thought(step_idx)

    return app


# ── Render helpers ───────────────────────────────────────────────────────────

def _run_bounds(run) -> tuple[int, int]:
    """First and last global step index belonging to a run."""
    indices = [i for i, s in enumerate(_trace.steps) if s.get("run", 0) == run]
    if not indices:
        return 0, 0
    return indices[0], indices[-1]


def _render_summary() -> str:
    s = _trace.summary()
    return (f"{s['total']} runs  |  {s['accepted']} accepted  |  "
            f"{s['rejected']} rejected")


def _render_graph(step_idx: int):
    """Automaton graph with the state of the given step highlighted."""
    step = _trace.get_step(step_idx)
    return create_graph_panel(_trace.automaton, step or None)


def _render_timeline(run) -> go.Figure:
    """State index after each consumed symbol for one run."""
    fig = go.Figure()
    states = (_trace.automaton or {}).get("states", [])
    series = _trace.get_state_series(run) if run is not None else []

    if series:
        xs = list(range(len(series)))
        ys = [s if s is not None else "(undefined)" for s in series]
        fig.add_trace(go.Scatter(
            x=xs, y=ys, mode="lines+markers",
            line={"shape": "hv", "color": "#6366f1"},
            marker={"size": 8},
        ))

    categories = list(states)
    if any(s is None for s in series):
        categories.append("(undefined)")
    fig.update_layout(
        **_CHART_LAYOUT,
        xaxis={"gridcolor": "#2a2a4a", "title": "Symbols consumed",
               "title_font_size": 10, "dtick": 1},
        yaxis={"gridcolor": "#2a2a4a", "type": "category",
               "categoryorder": "array", "categoryarray": categories},
        height=220,
        showlegend=False,
    )
    return fig


def _render_breakpoints():
    hits = _breakpoints.find_all_breakpoints(_trace.steps)
    if not hits:
        return html.Div("No breakpoints hit.", style={"color": "#666"})
    return [
        html.Div(f"[step {h.step}] run {h.run}: {h.message}")
        for h in hits
    ]


# ── Main ─────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Replay a DFA trace log.")
    parser.add_argument("log", nargs="?", default=os.path.join("logs", "trace_log.jsonl"))
    parser.add_argument("--port", type=int, default=8050)
    args = parser.parse_args()

    app = create_app(load_trace(args.log))
    print("DFA Trace Replay starting...")
    print(f"   Open http://127.0.0.1:{args.port} in your browser")
    app.run(debug=True, port=args.port)
